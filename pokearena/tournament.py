"""Tournament entry point: sharing the player table, joining and the game flow."""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
import time
from pathlib import Path
from typing import Callable

from .battle import main as battle_main
from .events import DEFAULT_TEXT
from .growth import run_growth
from .monsterdex import MonsterDex
from .playertable import PLAYER_COUNT, PlayerTable, format_monster_card
from .records import Monster, Player

DEFAULT_TABLE = "pokearena"
DEFAULT_DEX = "monsterDex"


def _sleep() -> None:
    time.sleep(1)


def init_table(table) -> None:
    """Clear the server, data and turn flags of every slot and mark the table ready."""
    for index in range(len(table)):
        table.update(index, server_running=0, flag=0, my_turn=0)
    table.update(0, initialized=1)


def register_player(table, player_id: int, process_id: int) -> int:
    """Claim the first slot with no pending data; return its index."""
    for index, player in enumerate(table):
        if player.flag != 1:
            table.update(
                index,
                server_running=1,
                flag=1,
                player_id=player_id,
                process_id=process_id,
                my_turn=0,
            )
            return index
    raise LookupError("every player slot already holds pending data")


def collect_players(
    table,
    out: Callable[[str], None] = print,
    poll: Callable[[], None] = _sleep,
) -> list[Player]:
    """Take in flagged slots until four arrivals have been seen; return them in order."""
    out("플레이어 데이터를 수집중입니다...")
    collected: list[Player] = []
    while True:
        for index, player in enumerate(table):
            if player.flag != 1:
                continue
            s = player.monster.stats
            out(f"플레이어 {player.player_id} (PID: {player.process_id})")
            out(f"선택한 포켓몬: {player.monster.name}")
            out(f"속성: {player.monster.element}")
            out(f"HP: {s.hp}, 공격력: {s.attack}, 방어력: {s.defense}, 속도: {s.speed}")
            out("")
            table.update(index, flag=0)
            collected.append(player)
        if len(collected) >= PLAYER_COUNT:
            break
        poll()
    out("모든 플레이어 데이터가 수집되었습니다.")
    return collected


def save_selected_monster(table, index: int, monster: Monster) -> Player:
    """Store the chosen monster in the player's slot and flag the slot."""
    return table.update(index, monster=monster, flag=1)


def select_monster(dex: MonsterDex, choice: int) -> Monster:
    """The monster numbered choice (from 1) in the catalogue."""
    total = len(dex.names())
    if not 1 <= choice <= total:
        raise ValueError(f"monster number {choice} is not between 1 and {total}")
    return dex.find_by_number(choice)


def _grow(table, index: int, text_path) -> None:
    if Path(text_path).is_file():
        run_growth(table, index, text_path)
    else:
        print("파일 열기 오류", file=sys.stderr)
    print("성장씬이 종료되었습니다.")


def _battle(table, player_id: int) -> None:
    battle_main([str(player_id), "--table", table.name])
    print("배틀씬이 종료되었습니다. 수고하셨습니다.")


def _play_game(table, index: int, player_id: int, dex_path, text_path) -> int:
    print(f"Player ID : {player_id}")
    print("포켓몬 선택 후 성장 씬으로 이동합니다.")
    dex = MonsterDex(dex_path)
    try:
        names = dex.names()
    except OSError:
        print("파일 열기 오류", file=sys.stderr)
        return 1
    print("포켓몬 이름 목록: ")
    for number, name in enumerate(names, start=1):
        print(f"{number}. {name}")
    if not names:
        print("포켓몬 목록을 불러올 수 없습니다.")
        return 1

    answer = input(f"선택할 포켓몬의 번호를 입력하세요 (1-{len(names)}): ")
    try:
        monster = select_monster(dex, int(answer.strip()))
    except ValueError:
        print("잘못된 번호입니다.")
        return 1
    except KeyError:
        print("포켓몬을 찾을 수 없습니다.")
        return 1

    s = monster.stats
    print(f"선택된 포켓몬: {monster.name}")
    print(f"속성: {monster.element}")
    print(f"HP: {s.hp}, 공격력: {s.attack}, 방어력: {s.defense}, 속도: {s.speed}")
    save_selected_monster(table, index, monster)
    print(f"플레이어 {index}의 몬스터 데이터가 공유 메모리에 저장되었습니다.")
    print("포켓몬 선택이 완료되었습니다.")

    print(format_monster_card(table[index].monster))
    print("몬스터 확인 완료.")

    _grow(table, index, text_path)
    print("배틀 씬으로 이동합니다.")
    _battle(table, player_id)

    _grow(table, index, text_path)
    print("마지막 배틀!")
    _battle(table, player_id)

    print("게임 종료")
    return 0


def _join(args) -> int:
    answer = input("당신이 서버입니까? (Y/N): ").strip()
    if answer[:1] in ("Y", "y"):
        try:
            table = PlayerTable.create(args.table)
        except FileExistsError:
            print("공유 메모리 생성 실패.", file=sys.stderr)
            return 1
        print("공유 메모리를 초기화합니다.")
        init_table(table)
        print("서버를 실행합니다.")
        command = [sys.executable, "-m", "pokearena.tournament", "serve", "--table", args.table]
        try:
            subprocess.Popen(command)
        except OSError as exc:
            print(f"서버 실행 실패: {exc}", file=sys.stderr)
        else:
            print("서버가 성공적으로 실행되었습니다.")
    else:
        try:
            table = PlayerTable.attach(args.table)
        except (FileNotFoundError, ValueError):
            print("공유 메모리 가져오기 실패. 서버가 실행 중인지 확인하세요.", file=sys.stderr)
            return 1
        print("공유 메모리에 연결되었습니다.")

    with table:
        try:
            player_id = int(input("플레이어의 아이디를 입력하세요 : ").strip())
        except ValueError:
            print("잘못된 플레이어 아이디입니다.")
            return 1
        try:
            index = register_player(table, player_id, os.getpid())
        except LookupError as exc:
            print(exc, file=sys.stderr)
            return 1
        print("서버와 공유 메모리 설정 완료.")
        return _play_game(table, index, player_id, args.dex, args.text)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="tournament", description="Join the monster tournament.")
    parser.add_argument("command", nargs="?", default="join", choices=("join", "serve"))
    parser.add_argument("--table", default=DEFAULT_TABLE, help="shared player table name")
    parser.add_argument("--dex", default=DEFAULT_DEX, help="monster catalogue file")
    parser.add_argument("--text", default=DEFAULT_TEXT, help="text event file")
    args = parser.parse_args(argv)

    if args.command == "serve":
        try:
            table = PlayerTable.attach(args.table)
        except (FileNotFoundError, ValueError) as exc:
            print(f"shmget: {exc}", file=sys.stderr)
            return 1
        with table:
            collect_players(table)
        return 0

    try:
        return _join(args)
    except EOFError:
        print()
        return 1


if __name__ == "__main__":
    sys.exit(main())
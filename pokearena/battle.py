"""Turn-based battles between two players of the shared table."""

from __future__ import annotations

import argparse
import sys
import time
from enum import Enum
from typing import Callable

from .playertable import PlayerTable

DEFAULT_TABLE = "pokearena"
PREFIX = "[Battle Manager]: "

# Opening-round pairs: slot 1 meets slot 2, slot 3 meets slot 4.
_FIRST_ROUND = {0: 1, 1: 0, 2: 3, 3: 2}


class Outcome(Enum):
    """Where a player stands once the battles of a round are over."""

    LOST = "lost"
    ADVANCED = "advanced"
    CHAMPION = "champion"
    UNDECIDED = "undecided"


class PlayerNotFound(LookupError):
    """No slot of the table carries the requested player id."""

    def __init__(self, player_id: int):
        super().__init__(f"no player with id {player_id}")
        self.player_id = player_id


def _sleep() -> None:
    time.sleep(1)


def find_player_index(table, player_id: int) -> int:
    """The slot holding the given player id."""
    for index, player in enumerate(table):
        if player.player_id == player_id:
            return index
    raise PlayerNotFound(player_id)


def choose_opponent(table, index: int) -> int:
    """The slot this player fights next.

    A player who has already won meets the last other winner; otherwise the
    fixed opening-round pairing applies.
    """
    if table[index].won == 1:
        opponent = 0
        for other, player in enumerate(table):
            if player.won == 1 and other != index:
                opponent = other
        return opponent
    return _FIRST_ROUND[index]


def prepare_battle(table, index: int) -> int:
    """Clear this player's battle flags and return the opponent's slot."""
    opponent = choose_opponent(table, index)
    player = table[index]
    battle_end = 0 if player.won == 1 else player.battle_end
    table.update(index, battle_end=battle_end, my_turn=0)
    return opponent


def decide_first_turn(table, index: int, opponent: int) -> bool:
    """Give the first move to the faster monster; ties favour this player."""
    mine = table[index].monster.stats.speed
    theirs = table[opponent].monster.stats.speed
    first = mine >= theirs
    table.update(index, my_turn=int(first))
    table.update(opponent, my_turn=int(not first))
    return first


def attack(table, attacker: int, defender: int) -> int:
    """Take the attacker's attack power off the defender's HP; return the new HP."""
    power = table[attacker].monster.stats.attack
    target = table[defender]
    stats = target.monster.stats
    hp = stats.hp - power
    monster = target.monster
    table.update(
        defender,
        monster=type(monster)(
            mid=monster.mid,
            name=monster.name,
            element=monster.element,
            stats=type(stats)(
                stats.level, stats.exp, hp, stats.attack, stats.defense, stats.speed
            ),
            skills=monster.skills,
        ),
    )
    return hp


def finish_if_defeated(table, winner: int, loser: int) -> bool:
    """End the battle when the loser's HP is gone; report whether it ended."""
    if table[loser].monster.stats.hp > 0:
        return False
    table.update(loser, dead=1, battle_end=1)
    table.update(winner, battle_end=1, won=1)
    return True


def _banner(table, index: int, opponent: int) -> str:
    lines = ["", f"{PREFIX}|| 포켓몬 배틀 시작! ||"]
    for label, slot in (("P1", index), ("P2", opponent)):
        p = table[slot]
        s = p.monster.stats
        lines.append(
            f"{label} shm 정보: [0]| hp: {s.hp}, [1]| speed: {s.speed}, "
            f"[2]| attack: {s.attack}, [3]| is_dead: {p.dead}, "
            f"[4]| is_my_turn: {p.my_turn}, [5]| is_battle_End: {p.battle_end}, "
            f"[6]| ID: {slot + 1}, [7]| win: {p.won}"
        )
    return "\n".join(lines)


def _ask_attack(ask: Callable[[str], str]) -> bool:
    answer = ask(f"{PREFIX}입력: ").strip()
    try:
        value = int(answer.split()[0]) if answer else None
    except ValueError:
        value = None
    if value not in (0, 1):
        raise ValueError(f"attack answer must be 0 or 1, got {answer!r}")
    return value == 1


def run_battle_client(
    table,
    index: int,
    ask: Callable[[str], str] = input,
    out: Callable[[str], None] = print,
    poll: Callable[[], None] = _sleep,
) -> bool:
    """Fight one battle for the player in this slot; return whether they won.

    Raises ValueError when the attack answer is neither 0 nor 1 and lets
    EOFError from ask pass through.
    """
    opponent = prepare_battle(table, index)
    out(_banner(table, index, opponent))
    my_turn = decide_first_turn(table, index, opponent)
    won = False
    while True:
        if my_turn:
            out(f"{PREFIX}|| 당신의 턴! ||")
            out(f"{PREFIX}상대를 공격하시겠습니까?")
            out(f"{PREFIX}예: 1, 아니요: 0")
            if _ask_attack(ask):
                hp = attack(table, index, opponent)
                out(f"\n{PREFIX}|| 공격결과 ||")
                out(f"{PREFIX}당신은 상대 포켓몬에게 {table[index].monster.stats.attack}의 피해를 입혔다.")
                out(f"{PREFIX}상대 포켓몬의 체력은 {hp}로 줄어들었다.")
            table.update(index, my_turn=0)
            table.update(opponent, my_turn=1)
            if finish_if_defeated(table, index, opponent):
                out(f"{PREFIX}당신은 승리하였습니다. 메인 화면으로 돌아갑니까?")
                out(f"{PREFIX}예: 1, 아니요: 0")
                try:
                    ask("")
                except EOFError:
                    pass
                out(f"{PREFIX}메인 화면으로 돌아갑니다..")
                won = True
                break
            out(f"\n{PREFIX}|| 상대 턴! ||")
            my_turn = False
        else:
            out(f"{PREFIX}상대의 결정을 기다리는중..")
            while table[opponent].my_turn == 1:
                poll()
            out(f"{PREFIX}상대는 당신의 포켓몬에게 {table[opponent].monster.stats.attack}의 피해를 입혔다.")
            out(f"{PREFIX}당신의 포켓몬의 체력은 {table[index].monster.stats.hp}로 줄어들었다.\n")
            if finish_if_defeated(table, opponent, index):
                break
            table.update(index, my_turn=1)
            table.update(opponent, my_turn=0)
            my_turn = True
    out(f"\n결과: player is win: {table[index].won}, opponent is win: {table[opponent].won}")
    return won


def wait_all_battles_end(table, poll: Callable[[], None] = _sleep) -> None:
    """Block until every slot has reported the end of its battle."""
    finished: set[int] = set()
    while len(finished) < len(table):
        finished.update(i for i, player in enumerate(table) if player.battle_end == 1)
        poll()


def battle_outcome(table, index: int) -> Outcome:
    """Judge this player once all battles of a round are over."""
    if table[index].dead == 1:
        return Outcome.LOST
    survivors = sum(1 for p in table if p.dead != 1 and p.won == 1)
    if survivors == 2:
        return Outcome.ADVANCED
    if survivors == 1:
        return Outcome.CHAMPION
    return Outcome.UNDECIDED


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="battle", description="Run a battle for one player.")
    parser.add_argument("player", type=int, help="player id, or slot index with --client")
    parser.add_argument("--table", default=DEFAULT_TABLE, help="shared player table name")
    parser.add_argument("--client", action="store_true", help="run only the battle client for a slot")
    args = parser.parse_args(argv)

    try:
        table = PlayerTable.attach(args.table)
    except (FileNotFoundError, ValueError) as exc:
        print(f"공유 메모리 접근 실패.: {exc}", file=sys.stderr)
        return 1

    with table:
        if args.client:
            try:
                run_battle_client(table, args.player)
            except (EOFError, ValueError):
                print("\n[Battle Manager]: 입력 오류.")
            return 0

        try:
            index = find_player_index(table, args.player)
        except PlayerNotFound:
            print("noFoundPID", file=sys.stderr)
            return 1

        print(f"{PREFIX}|서버 구동 시작...|")
        if battle_outcome(table, index) is Outcome.LOST:
            print("\n당신은 패배하였다. (프로그램 종료)")
            return 0

        print(f"\n{PREFIX}플레이어 {index + 1} 배틀 프로세스 시작..")
        try:
            run_battle_client(table, index)
        except (EOFError, ValueError):
            print("\n[Battle Manager]: 입력 오류.")

        if battle_outcome(table, index) is Outcome.LOST:
            print("\n당신은 패배하였다. (프로그램 종료)")
            return 0

        print("\n[BattleManager]: 다른 모든 플레이어가 전투가 끝날 때 까지 대기중..")
        wait_all_battles_end(table)
        outcome = battle_outcome(table, index)
        if outcome is Outcome.ADVANCED:
            print("\n당신은 첫 경기에서 승리하였다. (메인 프로그램으로)")
        elif outcome is Outcome.CHAMPION:
            print("\n당신은 최종 경기에서 승리하였다. (승리 이벤트씬으로)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
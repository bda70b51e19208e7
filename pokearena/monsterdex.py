"""The monster catalogue: a file of fixed-size records indexed by monster id."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Iterator

from .records import NO_SKILL, Monster, MonsterSkills, MonsterStats

DEFAULT_DEX = "monsterDex"


class SkillSlotsFull(Exception):
    """The monster already knows four skills."""

    def __init__(self, mid: int, sid: int):
        super().__init__(f"monster {mid} has no free skill slot for skill {sid}")
        self.mid = mid
        self.sid = sid


def new_monster(mid, name, prop, hp, attack, defense, speed, first_skill) -> Monster:
    """A level-1 monster knowing one skill."""
    return Monster(
        mid=mid,
        name=name,
        element=prop,
        stats=MonsterStats(level=1, exp=0, hp=hp, attack=attack, defense=defense, speed=speed),
        skills=MonsterSkills(first_skill, NO_SKILL, NO_SKILL, NO_SKILL),
    )


class MonsterDex:
    """Monster records stored at offset mid * Monster.SIZE."""

    def __init__(self, path):
        self.path = Path(path)

    def _store(self, position: int, monster: Monster) -> None:
        if position < 0:
            raise ValueError(f"monster id must not be negative: {position}")
        data = monster.pack()
        mode = "r+b" if self.path.exists() else "w+b"
        with self.path.open(mode) as fh:
            fh.seek(position * Monster.SIZE)
            fh.write(data)

    def write(self, monster: Monster) -> None:
        self._store(monster.mid, monster)

    def read(self, mid: int) -> Monster:
        if mid < 0:
            raise KeyError(mid)
        with self.path.open("rb") as fh:
            fh.seek(mid * Monster.SIZE)
            data = fh.read(Monster.SIZE)
        if len(data) < Monster.SIZE:
            raise KeyError(mid)
        return Monster.unpack(data)

    def __iter__(self) -> Iterator[Monster]:
        with self.path.open("rb") as fh:
            while len(chunk := fh.read(Monster.SIZE)) == Monster.SIZE:
                yield Monster.unpack(chunk)

    def names(self) -> list[str]:
        return [monster.name for monster in self]

    def find_by_number(self, number: int) -> Monster:
        """The number-th record, counting from 1."""
        for index, monster in enumerate(self, start=1):
            if index == number:
                return monster
        raise KeyError(number)

    def _change(self, mid: int, monster: Monster) -> Monster:
        self._store(mid, monster)
        return monster

    def update_hp(self, mid: int, hp: int) -> Monster:
        monster = self.read(mid)
        return self._change(mid, replace(monster, stats=replace(monster.stats, hp=hp)))

    def update_stats(self, mid: int, attack: int, defense: int, speed: int) -> Monster:
        """Set the non-zero values among attack, defense and speed."""
        monster = self.read(mid)
        stats = monster.stats
        stats = replace(
            stats,
            attack=attack or stats.attack,
            defense=defense or stats.defense,
            speed=speed or stats.speed,
        )
        return self._change(mid, replace(monster, stats=stats))

    def add_exp(self, mid: int, exp: int) -> Monster:
        monster = self.read(mid)
        stats = replace(monster.stats, exp=monster.stats.exp + exp)
        return self._change(mid, replace(monster, stats=stats))

    def add_skill(self, mid: int, sid: int) -> Monster:
        """Put a skill in the first free slot after the first one."""
        monster = self.read(mid)
        skills = monster.skills
        for slot in ("skill_2", "skill_3", "skill_4"):
            if getattr(skills, slot) == NO_SKILL:
                skills = replace(skills, **{slot: sid})
                return self._change(mid, replace(monster, skills=skills))
        raise SkillSlotsFull(mid, sid)


def format_monster(monster: Monster) -> str:
    s = monster.stats
    return (
        f"몬스터ID : {monster.mid}  이름 : {monster.name}  속성 : {monster.element}  레벨 : {s.level}\n"
        f"HP : {s.hp}  공격력 : {s.attack}  방어력 : {s.defense}  속도 : {s.speed}"
    )


def _tokens(stream: Iterable[str]) -> Iterator[str]:
    for line in stream:
        yield from line.split()


def _next_int(tokens: Iterator[str]) -> int | None:
    token = next(tokens, None)
    if token is None:
        return None
    try:
        return int(token)
    except ValueError:
        return None


def _next_ints(tokens: Iterator[str], count: int) -> list[int] | None:
    values = []
    for _ in range(count):
        value = _next_int(tokens)
        if value is None:
            return None
        values.append(value)
    return values


def _create_step(dex: MonsterDex, tokens: Iterator[str]) -> bool:
    print(f"{'몬스터ID':>3} {'이름':>3} {'속성':>3}")
    mid = _next_int(tokens)
    name = next(tokens, None)
    element = next(tokens, None)
    if mid is None or name is None or element is None:
        return False
    print(f"{'HP':>3} {'공격력':>3} {'방어력':>3} {'속도':>3}")
    stats = _next_ints(tokens, 4)
    if stats is None:
        return False
    print("첫 스킬 ID")
    first_skill = _next_int(tokens)
    if first_skill is None:
        return False
    try:
        dex.write(new_monster(mid, name, element, *stats, first_skill))
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return False
    return True


def _check_step(dex: MonsterDex, tokens: Iterator[str]) -> bool:
    print("검색할 몬스터의 MID 입력: ", end="")
    mid = _next_int(tokens)
    if mid is None:
        print("입력 오류")
        return True
    try:
        print(format_monster(dex.read(mid)))
    except KeyError:
        print(f"레코드 {mid} 없음")
    return True


def _update_step(dex: MonsterDex, tokens: Iterator[str]) -> bool:
    print("수정할 몬스터의 ID : ", end="")
    mid = _next_int(tokens)
    if mid is None:
        print("입력오류")
        return True
    try:
        monster = dex.read(mid)
    except KeyError:
        print(f"레코드 {mid} 없음")
        return True
    print(f"몬스터 ID : {monster.mid:3d}   이름 : {monster.name:>4}   속성 : {monster.element:>4}")
    print("새로운 이름 입력 : ", end="")
    name = next(tokens, None)
    print("새로운 속성 입력 : ", end="")
    element = next(tokens, None)
    if name is None or element is None:
        return True
    s = monster.stats
    print("\n현재 스탯")
    print(f"HP : {s.hp:3d}   공격력 : {s.attack:3d}   방어력 : {s.defense:3d}   속도 : {s.speed:3d}")
    print(f"새로운 스탯 입력\n{'HP':>3} {'공격력':>10} {'방어력':>10} {'속도':>7}")
    values = _next_ints(tokens, 4)
    if values is None:
        return True
    hp, attack, defense, speed = values
    updated = replace(
        monster,
        name=name,
        element=element,
        stats=replace(s, hp=hp, attack=attack, defense=defense, speed=speed),
    )
    try:
        dex.write(updated)
    except ValueError as exc:
        print(exc, file=sys.stderr)
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="monsterdex", description="Create, look up and edit monsters.")
    parser.add_argument("--dex", default=DEFAULT_DEX, help="monster catalogue file")
    parser.add_argument("command", choices=("create", "check", "update"))
    args = parser.parse_args(argv)

    path = Path(args.dex)
    if args.command == "create":
        try:
            path.write_bytes(b"")
        except OSError:
            print("파일 열기 오류", file=sys.stderr)
            return 2
    elif not path.is_file():
        print("파일 열기 오류", file=sys.stderr)
        return 2

    step = {"create": _create_step, "check": _check_step, "update": _update_step}[args.command]
    dex = MonsterDex(path)
    tokens = _tokens(sys.stdin)
    while step(dex, tokens):
        print("계속하겠습니까? (Y/N)", end="")
        answer = next(tokens, "")
        print()
        if answer[:1] != "Y":
            break
    return 0


if __name__ == "__main__":
    sys.exit(main())
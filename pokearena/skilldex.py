"""The skill catalogue: four regions of fixed-size records, one per skill family."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Iterator, Union

from .records import (
    AttackSkill,
    BuffSkill,
    DebuffSkill,
    HealSkill,
    SkillKind,
    StatKind,
)

DEFAULT_DEX = "skillDex"
SKILLS_PER_KIND = 100

Skill = Union[AttackSkill, BuffSkill, DebuffSkill, HealSkill]

_RECORD_TYPES = {
    SkillKind.ATTACK: AttackSkill,
    SkillKind.BUFF: BuffSkill,
    SkillKind.DEBUFF: DebuffSkill,
    SkillKind.HEAL: HealSkill,
}

# The creation menu lists speed third and attack+defense fourth; the stored
# value is the sum of the stat flags.
_MENU_TYPES = {
    1: StatKind.ATTACK,
    2: StatKind.DEFENSE,
    3: StatKind.SPEED,
    4: StatKind.ATTACK | StatKind.DEFENSE,
    5: StatKind.ATTACK | StatKind.SPEED,
    6: StatKind.DEFENSE | StatKind.SPEED,
    7: StatKind.ATTACK | StatKind.DEFENSE | StatKind.SPEED,
}

_STAT_FIELDS = (
    (StatKind.ATTACK, "attack", "공격력"),
    (StatKind.DEFENSE, "defense", "방어력"),
    (StatKind.SPEED, "speed", "속도"),
)


def skill_kind_of(sid: int) -> SkillKind:
    """The family a skill id belongs to: 0-99 attack, 100-199 buff, and so on."""
    if not 0 <= sid < SKILLS_PER_KIND * len(SkillKind):
        raise ValueError(f"skill id out of range: {sid}")
    return SkillKind(sid // SKILLS_PER_KIND)


def normalize_menu_type(choice: int) -> StatKind:
    """Turn a creation-menu buff/debuff choice (1-7) into stat flags."""
    try:
        return _MENU_TYPES[choice]
    except KeyError:
        raise ValueError(f"unknown buff type choice: {choice}") from None


def _region_start(kind: SkillKind) -> int:
    return sum(
        SKILLS_PER_KIND * _RECORD_TYPES[earlier].SIZE
        for earlier in SkillKind
        if earlier < kind
    )


def _offset(sid: int) -> tuple[int, type]:
    kind = skill_kind_of(sid)
    record_type = _RECORD_TYPES[kind]
    return _region_start(kind) + (sid - kind.first_id) * record_type.SIZE, record_type


class SkillDex:
    """Skill records stored in one file, each family in its own region."""

    def __init__(self, path):
        self.path = Path(path)

    def write(self, skill: Skill) -> None:
        position, record_type = _offset(skill.sid)
        if not isinstance(skill, record_type):
            raise ValueError(
                f"skill id {skill.sid} belongs to {record_type.__name__}, "
                f"not {type(skill).__name__}"
            )
        data = skill.pack()
        mode = "r+b" if self.path.exists() else "w+b"
        with self.path.open(mode) as fh:
            fh.seek(position)
            fh.write(data)

    def read(self, sid: int) -> Skill:
        """The skill with this id; a gap never written counts as missing."""
        try:
            position, record_type = _offset(sid)
        except ValueError:
            raise KeyError(sid) from None
        with self.path.open("rb") as fh:
            fh.seek(position)
            data = fh.read(record_type.SIZE)
        if len(data) < record_type.SIZE or not any(data):
            raise KeyError(sid)
        return record_type.unpack(data)


def _kind_label(kind: int) -> str | None:
    if not 1 <= kind <= 7:
        return None
    flags = StatKind(kind)
    return " + ".join(label for flag, _, label in _STAT_FIELDS if flag in flags)


def _describe_stat_skill(skill, family: str, change: str) -> str:
    lines = [f"스킬 ID : {skill.sid} 이름 : {skill.name} 종류 : {family}"]
    label = _kind_label(skill.kind)
    if label is not None:
        flags = StatKind(skill.kind)
        lines.append(f"{family} 종류 : {label}")
        lines.append(
            "  ".join(
                f"{name} {change} : {getattr(skill, attr)}"
                for flag, attr, name in _STAT_FIELDS
                if flag in flags
            )
        )
    return "\n".join(lines)


def describe_skill(skill: Skill) -> str:
    """Human-readable summary of one skill."""
    if isinstance(skill, AttackSkill):
        return (
            f"스킬 ID : {skill.sid}  스킬이름 : {skill.name}  타입 : 공격\n"
            f"데미지 : {skill.damage}  속성 : {skill.element}"
        )
    if isinstance(skill, BuffSkill):
        return _describe_stat_skill(skill, "버프", "증가량")
    if isinstance(skill, DebuffSkill):
        return _describe_stat_skill(skill, "디버프", "감소량")
    if isinstance(skill, HealSkill):
        return f"스킬 ID : {skill.sid}  스킬이름 : {skill.name}  타입 : 힐  힐량 : {skill.amount}"
    raise TypeError(f"not a skill: {skill!r}")


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


def _read_stat_values(tokens: Iterator[str], kind: int, change: str, current: dict) -> dict | None:
    """Read the amounts for the stats in kind; others keep their current values."""
    values = dict(current)
    if not 1 <= kind <= 7:
        return values
    flags = StatKind(kind)
    wanted = [(attr, name) for flag, attr, name in _STAT_FIELDS if flag in flags]
    if len(wanted) == 1:
        print(f"{wanted[0][1]} {change} 입력 : ", end="")
    else:
        print(f"{change} 입력\n" + " ".join(name for _, name in wanted))
    for attr, _ in wanted:
        value = _next_int(tokens)
        if value is None:
            return None
        values[attr] = value
    return values


def _save(dex: SkillDex, skill: Skill) -> bool:
    try:
        dex.write(skill)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return False
    return True


def _create_step(dex: SkillDex, tokens: Iterator[str]) -> bool:
    print("스킬 종류 (0 : 공격, 1 : 버프, 2 : 디버프, 3 : 힐) : ", end="")
    family = _next_int(tokens)
    if family is None:
        return False
    if family == SkillKind.ATTACK:
        print(f"{'스킬ID':>3} {'스킬 이름':>15}")
        sid, name = _next_int(tokens), next(tokens, None)
        if sid is None or name is None:
            return False
        print("데미지  속성")
        damage, element = _next_int(tokens), next(tokens, None)
        if damage is None or element is None:
            return False
        return _save(dex, AttackSkill(sid, name, damage, element))
    if family in (SkillKind.BUFF, SkillKind.DEBUFF):
        buff = family == SkillKind.BUFF
        word, change = ("버프", "증가량") if buff else ("디버프", "감소량")
        print("스킬ID  스킬 이름")
        sid, name = _next_int(tokens), next(tokens, None)
        if sid is None or name is None:
            return False
        print(
            f"{word} 타입 (1: 공격력, 2: 방어력, 3: 속도, 4: 공격력 + 방어력, "
            "5: 공격력 + 속도, 6: 방어력 + 속도, 7: 전부)"
        )
        choice = _next_int(tokens)
        if choice is None:
            return False
        try:
            kind = normalize_menu_type(choice)
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return False
        values = _read_stat_values(tokens, kind, change, {"attack": 0, "defense": 0, "speed": 0})
        if values is None:
            return False
        record_type = BuffSkill if buff else DebuffSkill
        return _save(dex, record_type(sid, name, int(kind), **values))
    if family == SkillKind.HEAL:
        print("스킬ID  스킬 이름")
        sid, name = _next_int(tokens), next(tokens, None)
        if sid is None or name is None:
            return False
        print("힐량 입력 : ", end="")
        amount = _next_int(tokens)
        if amount is None:
            return False
        return _save(dex, HealSkill(sid, name, amount))
    return True


def _check_step(dex: SkillDex, tokens: Iterator[str]) -> bool:
    print("검색할 스킬의 SID 입력: ", end="")
    sid = _next_int(tokens)
    if sid is None:
        print("입력 오류")
        return True
    try:
        print(describe_skill(dex.read(sid)))
    except KeyError:
        print(f"레코드 {sid} 없음")
    return True


def _update_step(dex: SkillDex, tokens: Iterator[str]) -> bool:
    print("수정할 스킬의 ID : ", end="")
    sid = _next_int(tokens)
    if sid is None:
        print("입력오류")
        return True
    try:
        skill_kind_of(sid)
    except ValueError:
        print("부적절한 ID입니다.")
        return True
    try:
        skill = dex.read(sid)
    except KeyError:
        print(f"레코드 {sid} 없음")
        return True
    print(describe_skill(skill))
    print("새로운 이름 입력 : ", end="")
    name = next(tokens, None)
    if name is None:
        return False
    if isinstance(skill, AttackSkill):
        print("새로운 공격 스킬 입력\n데미지  스킬속성")
        damage, element = _next_int(tokens), next(tokens, None)
        if damage is None or element is None:
            return False
        updated = replace(skill, name=name, damage=damage, element=element)
    elif isinstance(skill, (BuffSkill, DebuffSkill)):
        buff = isinstance(skill, BuffSkill)
        word, change = ("버프", "증가량") if buff else ("디버프", "감소량")
        print(f"새로운 {word} 종류 입력 : ", end="")
        kind = _next_int(tokens)
        if kind is None:
            return False
        current = {"attack": skill.attack, "defense": skill.defense, "speed": skill.speed}
        values = _read_stat_values(tokens, kind, change, current)
        if values is None:
            return False
        updated = replace(skill, name=name, kind=kind, **values)
    else:
        print("새로운 힐량 입력 : ", end="")
        amount = _next_int(tokens)
        if amount is None:
            return False
        updated = replace(skill, name=name, amount=amount)
    return _save(dex, updated)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="skilldex", description="Create, look up and edit skills.")
    parser.add_argument("--dex", default=DEFAULT_DEX, help="skill catalogue file")
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
    dex = SkillDex(path)
    tokens = _tokens(sys.stdin)
    while step(dex, tokens):
        print("계속하겠습니까?(Y/N)", end="")
        answer = next(tokens, "")
        print()
        if answer[:1] != "Y":
            break
    return 0


if __name__ == "__main__":
    sys.exit(main())
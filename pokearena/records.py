"""Fixed-size binary records shared by the game programs.

Every record packs to the same bytes as the game's on-disk and shared-memory
layout: little-endian 32-bit integers, NUL-padded text fields and the
alignment padding a C compiler inserts after odd-sized text fields.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag

NAME_SIZE = 50
TEXT_SIZE = 100
STORY_SIZE = 100
MAX_CHOICES = 5
NO_SKILL = -1


def _encode(text: str, size: int, what: str) -> bytes:
    raw = text.encode("utf-8")
    if len(raw) >= size:
        raise ValueError(f"{what} takes {len(raw)} bytes; at most {size - 1} fit")
    return raw


def _decode(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _check_length(name: str, data: bytes, size: int) -> None:
    if len(data) != size:
        raise ValueError(f"{name} record needs {size} bytes, got {len(data)}")


class StatKind(IntFlag):
    """Stats touched by a buff or debuff; combinations add up."""

    ATTACK = 1
    DEFENSE = 2
    SPEED = 4


class SkillKind(IntEnum):
    """Skill families; each owns a block of one hundred skill ids."""

    ATTACK = 0
    BUFF = 1
    DEBUFF = 2
    HEAL = 3

    @property
    def first_id(self) -> int:
        return self.value * 100


@dataclass
class MonsterStats:
    level: int = 0
    exp: int = 0
    hp: int = 0
    attack: int = 0
    defense: int = 0
    speed: int = 0


@dataclass
class MonsterSkills:
    skill_1: int = NO_SKILL
    skill_2: int = NO_SKILL
    skill_3: int = NO_SKILL
    skill_4: int = NO_SKILL


_MONSTER = struct.Struct(f"<i{NAME_SIZE}s{NAME_SIZE}s6i4i")


@dataclass
class Monster:
    mid: int = 0
    name: str = ""
    element: str = ""
    stats: MonsterStats = field(default_factory=MonsterStats)
    skills: MonsterSkills = field(default_factory=MonsterSkills)

    SIZE = _MONSTER.size

    def pack(self) -> bytes:
        s, k = self.stats, self.skills
        return _MONSTER.pack(
            self.mid,
            _encode(self.name, NAME_SIZE, "monster name"),
            _encode(self.element, NAME_SIZE, "monster element"),
            s.level, s.exp, s.hp, s.attack, s.defense, s.speed,
            k.skill_1, k.skill_2, k.skill_3, k.skill_4,
        )

    @classmethod
    def unpack(cls, data: bytes) -> Monster:
        _check_length("monster", data, cls.SIZE)
        mid, name, element, *rest = _MONSTER.unpack(data)
        return cls(
            mid=mid,
            name=_decode(name),
            element=_decode(element),
            stats=MonsterStats(*rest[:6]),
            skills=MonsterSkills(*rest[6:]),
        )


_PLAYER_HEAD = struct.Struct("<9i")


@dataclass
class Player:
    """One slot of the shared player table."""

    flag: int = 0
    player_id: int = 0
    process_id: int = 0
    server_running: int = 0
    my_turn: int = 0
    initialized: int = 0
    dead: int = 0
    battle_end: int = 0
    won: int = 0
    monster: Monster = field(default_factory=Monster)

    SIZE = _PLAYER_HEAD.size + Monster.SIZE

    def pack(self) -> bytes:
        head = _PLAYER_HEAD.pack(
            self.flag, self.player_id, self.process_id, self.server_running,
            self.my_turn, self.initialized, self.dead, self.battle_end, self.won,
        )
        return head + self.monster.pack()

    @classmethod
    def unpack(cls, data: bytes) -> Player:
        _check_length("player", data, cls.SIZE)
        head = _PLAYER_HEAD.unpack(data[:_PLAYER_HEAD.size])
        return cls(*head, monster=Monster.unpack(data[_PLAYER_HEAD.size:]))


_ATTACK_SKILL = struct.Struct(f"<i{NAME_SIZE}s2xi{NAME_SIZE}s2x")
_STAT_SKILL = struct.Struct(f"<i{NAME_SIZE}s2x4i")
_HEAL_SKILL = struct.Struct(f"<i{NAME_SIZE}s2xi")


@dataclass
class AttackSkill:
    sid: int = 0
    name: str = ""
    damage: int = 0
    element: str = ""

    SIZE = _ATTACK_SKILL.size

    def pack(self) -> bytes:
        return _ATTACK_SKILL.pack(
            self.sid,
            _encode(self.name, NAME_SIZE, "skill name"),
            self.damage,
            _encode(self.element, NAME_SIZE, "skill element"),
        )

    @classmethod
    def unpack(cls, data: bytes) -> AttackSkill:
        _check_length("attack skill", data, cls.SIZE)
        sid, name, damage, element = _ATTACK_SKILL.unpack(data)
        return cls(sid, _decode(name), damage, _decode(element))


@dataclass
class BuffSkill:
    sid: int = 0
    name: str = ""
    kind: int = 0
    attack: int = 0
    defense: int = 0
    speed: int = 0

    SIZE = _STAT_SKILL.size

    def pack(self) -> bytes:
        return _STAT_SKILL.pack(
            self.sid, _encode(self.name, NAME_SIZE, "skill name"),
            int(self.kind), self.attack, self.defense, self.speed,
        )

    @classmethod
    def unpack(cls, data: bytes) -> BuffSkill:
        _check_length("buff skill", data, cls.SIZE)
        sid, name, *values = _STAT_SKILL.unpack(data)
        return cls(sid, _decode(name), *values)


@dataclass
class DebuffSkill:
    sid: int = 0
    name: str = ""
    kind: int = 0
    attack: int = 0
    defense: int = 0
    speed: int = 0

    SIZE = _STAT_SKILL.size

    def pack(self) -> bytes:
        return _STAT_SKILL.pack(
            self.sid, _encode(self.name, NAME_SIZE, "skill name"),
            int(self.kind), self.attack, self.defense, self.speed,
        )

    @classmethod
    def unpack(cls, data: bytes) -> DebuffSkill:
        _check_length("debuff skill", data, cls.SIZE)
        sid, name, *values = _STAT_SKILL.unpack(data)
        return cls(sid, _decode(name), *values)


@dataclass
class HealSkill:
    sid: int = 0
    name: str = ""
    amount: int = 0

    SIZE = _HEAL_SKILL.size

    def pack(self) -> bytes:
        return _HEAL_SKILL.pack(
            self.sid, _encode(self.name, NAME_SIZE, "skill name"), self.amount
        )

    @classmethod
    def unpack(cls, data: bytes) -> HealSkill:
        _check_length("heal skill", data, cls.SIZE)
        sid, name, amount = _HEAL_SKILL.unpack(data)
        return cls(sid, _decode(name), amount)


@dataclass
class Price:
    """Reward granted by an event choice."""

    hp: int = 0
    attack: int = 0
    defense: int = 0
    speed: int = 0
    skill: int = NO_SKILL


@dataclass
class Choice:
    text: str = ""
    result: str = ""
    price: Price = field(default_factory=Price)


_EVENT_HEAD = struct.Struct(f"<ii{STORY_SIZE}s")
_CHOICE = struct.Struct(f"<{TEXT_SIZE}s{TEXT_SIZE}s5i")


@dataclass
class Event:
    event_id: int = 0
    story: str = ""
    choices: list[Choice] = field(default_factory=list)

    SIZE = _EVENT_HEAD.size + MAX_CHOICES * _CHOICE.size

    @property
    def choice_num(self) -> int:
        return len(self.choices)

    def pack(self) -> bytes:
        if len(self.choices) > MAX_CHOICES:
            raise ValueError(f"an event holds at most {MAX_CHOICES} choices")
        parts = [
            _EVENT_HEAD.pack(
                self.event_id, self.choice_num,
                _encode(self.story, STORY_SIZE, "event story"),
            )
        ]
        for choice in self.choices:
            p = choice.price
            parts.append(
                _CHOICE.pack(
                    _encode(choice.text, TEXT_SIZE, "choice text"),
                    _encode(choice.result, TEXT_SIZE, "choice result"),
                    p.hp, p.attack, p.defense, p.speed, p.skill,
                )
            )
        parts.append(bytes(_CHOICE.size * (MAX_CHOICES - len(self.choices))))
        return b"".join(parts)

    @classmethod
    def unpack(cls, data: bytes) -> Event:
        _check_length("event", data, cls.SIZE)
        event_id, choice_num, story = _EVENT_HEAD.unpack(data[:_EVENT_HEAD.size])
        count = max(0, min(choice_num, MAX_CHOICES))
        choices = []
        for offset in range(_EVENT_HEAD.size, _EVENT_HEAD.size + count * _CHOICE.size, _CHOICE.size):
            text, result, *price = _CHOICE.unpack(data[offset:offset + _CHOICE.size])
            choices.append(Choice(_decode(text), _decode(result), Price(*price)))
        return cls(event_id, _decode(story), choices)
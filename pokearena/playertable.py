"""The four-slot player table kept in named shared memory."""

from __future__ import annotations

import operator
from dataclasses import replace
from multiprocessing import shared_memory
from typing import Iterator

from .records import Monster, Player

PLAYER_COUNT = 4
TABLE_SIZE = PLAYER_COUNT * Player.SIZE

RESET_ATTACK = 2
RESET_HP = 8
RESET_DEFENSE = 3
RESET_TOP_SPEED = 7


class PlayerTable:
    """Array of four Player records living in a shared memory block."""

    def __init__(self, shm: shared_memory.SharedMemory):
        self._shm = shm
        self._closed = False

    @classmethod
    def create(cls, name: str | None) -> PlayerTable:
        shm = shared_memory.SharedMemory(name=name, create=True, size=TABLE_SIZE)
        shm.buf[:TABLE_SIZE] = bytes(TABLE_SIZE)
        return cls(shm)

    @classmethod
    def attach(cls, name: str) -> PlayerTable:
        shm = shared_memory.SharedMemory(name=name)
        if shm.size < TABLE_SIZE:
            shm.close()
            raise ValueError(f"shared memory {name!r} is too small for a player table")
        return cls(shm)

    @property
    def name(self) -> str:
        return self._shm.name

    def close(self) -> None:
        if not self._closed:
            self._shm.close()
            self._closed = True

    def unlink(self) -> None:
        self._shm.unlink()

    def _span(self, index: int) -> slice:
        if self._closed:
            raise ValueError("player table is closed")
        position = operator.index(index)
        if position < 0:
            position += PLAYER_COUNT
        if not 0 <= position < PLAYER_COUNT:
            raise IndexError(f"player index {index} out of range")
        start = position * Player.SIZE
        return slice(start, start + Player.SIZE)

    def __getitem__(self, index: int) -> Player:
        return Player.unpack(bytes(self._shm.buf[self._span(index)]))

    def __setitem__(self, index: int, player: Player) -> None:
        self._shm.buf[self._span(index)] = player.pack()

    def __len__(self) -> int:
        return PLAYER_COUNT

    def __iter__(self) -> Iterator[Player]:
        for index in range(PLAYER_COUNT):
            yield self[index]

    def __enter__(self) -> PlayerTable:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def update(self, index: int, **kwargs) -> Player:
        """Replace the given fields of one slot and return the new record."""
        player = replace(self[index], **kwargs)
        self[index] = player
        return player


def reset_battle_state(table: PlayerTable) -> None:
    """Clear battle flags and give every monster the fixed test stats."""
    for index in range(len(table)):
        player = table[index]
        stats = replace(
            player.monster.stats,
            attack=RESET_ATTACK,
            hp=RESET_HP,
            speed=RESET_TOP_SPEED - index,
            defense=RESET_DEFENSE,
        )
        table[index] = replace(
            player,
            player_id=index + 1,
            dead=0,
            my_turn=0,
            battle_end=0,
            won=0,
            monster=replace(player.monster, stats=stats),
        )


def format_battle_state(table: PlayerTable) -> str:
    """Report the battle flags of every slot."""
    lines = []
    for index, player in enumerate(table, start=1):
        lines += [
            "",
            f"processID: {index}",
            f"is_dead: {player.dead}",
            f"is_myturn: {player.my_turn}",
            f"is_battleEnd: {player.battle_end}",
            f"is_Win: {player.won}",
        ]
    return "\n".join(lines)


def format_monster_card(monster: Monster) -> str:
    """The player's view of their own monster."""
    rule = "-" * 53
    s = monster.stats
    values = (s.level, s.exp, s.hp, s.attack, s.defense, s.speed)
    return "\n".join(
        [
            "",
            "이름  속성",
            rule,
            f"{monster.name:<5} {monster.element:<5}",
            "레벨    경험치    체력    공격력    방어력    스피드",
            rule,
            " ".join(f"{value:<8d}" for value in values),
            "스킬",
        ]
    )
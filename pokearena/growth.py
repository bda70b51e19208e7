"""The growth scene: random events that change the player's monster."""

from __future__ import annotations

import argparse
import random
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable

from .events import DEFAULT_TEXT, read_text_event
from .playertable import PlayerTable
from .records import NO_SKILL, Choice, Event, Monster, Price

TOTAL_GROWING_DAYS = 4
NORMAL_EVENT_COUNT = 5
DEFAULT_TABLE = "pokearena"


def add_skill(monster: Monster, sid: int) -> Monster:
    """Put a skill in the first free slot after the first; a full monster is unchanged."""
    skills = monster.skills
    for slot in ("skill_2", "skill_3", "skill_4"):
        if getattr(skills, slot) == NO_SKILL:
            return replace(monster, skills=replace(skills, **{slot: sid}))
    return monster


def apply_reward(monster: Monster, price: Price) -> Monster:
    """A skill reward teaches the skill; otherwise the stat changes are added."""
    if price.skill != NO_SKILL:
        return add_skill(monster, price.skill)
    s = monster.stats
    stats = replace(
        s,
        attack=s.attack + price.attack,
        defense=s.defense + price.defense,
        hp=s.hp + price.hp,
        speed=s.speed + price.speed,
    )
    return replace(monster, stats=stats)


def resolve_choice(event: Event, selected: int) -> Choice:
    """The choice numbered from 1."""
    if not 1 <= selected <= event.choice_num:
        raise ValueError(f"choice {selected} is not between 1 and {event.choice_num}")
    return event.choices[selected - 1]


def run_growth(
    table,
    index: int,
    text_path,
    days: int = TOTAL_GROWING_DAYS,
    rng=None,
    ask: Callable[[str], str] = input,
    out: Callable[[str], None] = print,
) -> Monster:
    """Play the growth days for one player and return the resulting monster."""
    rng = rng if rng is not None else random.Random()
    for _ in range(days):
        event = read_text_event(text_path, rng.randrange(NORMAL_EVENT_COUNT))
        out(event.story)
        for choice in event.choices:
            out(choice.text)
        answer = ask(f"원하는 선택지를 고르세요(1 ~ {event.choice_num}) : ")
        try:
            choice = resolve_choice(event, int(answer.strip()))
        except ValueError:
            continue
        out(choice.result)
        table.update(index, monster=apply_reward(table[index].monster, choice.price))
    return table[index].monster


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="growth", description="Run the growth scene for one player.")
    parser.add_argument("player_index", type=int)
    parser.add_argument("--text", default=DEFAULT_TEXT, help="text event file")
    parser.add_argument("--table", default=DEFAULT_TABLE, help="shared player table name")
    parser.add_argument("--days", type=int, default=TOTAL_GROWING_DAYS)
    args = parser.parse_args(argv)

    if not Path(args.text).is_file():
        print("파일 열기 오류", file=sys.stderr)
        return 1
    try:
        table = PlayerTable.attach(args.table)
    except (FileNotFoundError, ValueError) as exc:
        print(f"shmget: {exc}", file=sys.stderr)
        return 1
    with table:
        run_growth(table, args.player_index, args.text, args.days)
    return 0


if __name__ == "__main__":
    sys.exit(main())
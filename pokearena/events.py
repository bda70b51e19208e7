"""Growth events: the text source file, its parser and the binary event catalogue."""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from typing import Iterable, Iterator

from .records import MAX_CHOICES, Choice, Event, Price

DEFAULT_TEXT = "eventDex.txt"
DEFAULT_DEX = "eventDex"
PRICE_FIELDS = 5

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def _leading_int(token: str) -> int:
    """The integer a token starts with, or 0 when it starts with none."""
    match = _INT_PREFIX.match(token)
    return int(match.group(1)) if match else 0


def parse_price(line: str) -> Price:
    """Read 'HP AP DP SP skill' from a reward line."""
    tokens = line.split()
    if len(tokens) < PRICE_FIELDS:
        raise ValueError(f"reward line needs {PRICE_FIELDS} numbers: {line!r}")
    return Price(*(_leading_int(token) for token in tokens[:PRICE_FIELDS]))


def parse_event_block(eid: int, lines: list[str]) -> Event:
    """Build an event from its story line followed by choice/result/reward triples."""
    if not lines:
        return Event(event_id=eid)
    count = min((len(lines) - 1) // 3, MAX_CHOICES)
    choices = []
    for number in range(count):
        text, result, price = lines[1 + 3 * number: 4 + 3 * number]
        choices.append(Choice(text, result, parse_price(price)))
    return Event(event_id=eid, story=lines[0], choices=choices)


def iter_text_events(lines: Iterable[str]) -> Iterator[Event]:
    """Events of a text file; text before the first blank line is a header.

    Each event is closed by a blank line; an unclosed final block is dropped.
    """
    eid = -1
    block: list[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if line == "":
            if eid != -1:
                yield parse_event_block(eid, block)
                block = []
            eid += 1
        elif eid != -1:
            block.append(line)


def read_text_event(path, eid: int) -> Event:
    """The event with the given id from a text event file."""
    with Path(path).open(encoding="utf-8") as fh:
        for event in iter_text_events(fh):
            if event.event_id == eid:
                return event
    raise KeyError(eid)


class EventDex:
    """Event records stored at offset event_id * Event.SIZE."""

    def __init__(self, path):
        self.path = Path(path)

    def write(self, event: Event) -> None:
        if event.event_id < 0:
            raise ValueError(f"event id must not be negative: {event.event_id}")
        data = event.pack()
        mode = "r+b" if self.path.exists() else "w+b"
        with self.path.open(mode) as fh:
            fh.seek(event.event_id * Event.SIZE)
            fh.write(data)

    def read(self, eid: int) -> Event:
        if eid < 0:
            raise KeyError(eid)
        with self.path.open("rb") as fh:
            fh.seek(eid * Event.SIZE)
            data = fh.read(Event.SIZE)
        if len(data) < Event.SIZE:
            raise KeyError(eid)
        return Event.unpack(data)

    def __iter__(self) -> Iterator[Event]:
        with self.path.open("rb") as fh:
            while len(chunk := fh.read(Event.SIZE)) == Event.SIZE:
                yield Event.unpack(chunk)


def convert_text_to_binary(text_path, dex_path) -> int:
    """Rewrite the binary catalogue from the text file; return the event count."""
    Path(dex_path).write_bytes(b"")
    dex = EventDex(dex_path)
    count = 0
    with Path(text_path).open(encoding="utf-8") as fh:
        for event in iter_text_events(fh):
            dex.write(event)
            count += 1
    return count


def describe_event(event: Event) -> str:
    lines = [
        f"Event ID: {event.event_id}",
        f"Choice Num: {event.choice_num}",
        f"Story: {event.story}",
    ]
    for number, choice in enumerate(event.choices, start=1):
        p = choice.price
        lines.append(f"Choice {number}: {choice.text} -> Result: {choice.result}")
        lines.append(f"Prices: {p.hp} {p.attack} {p.defense} {p.speed} {p.skill}")
    return "\n".join(lines)


def _int_line(line: str | None) -> int | None:
    if line is None:
        return None
    try:
        return int(line.strip())
    except ValueError:
        return None


def _create_step(dex: EventDex, lines: Iterator[str]) -> bool:
    print("이벤트 ID : ", end="")
    eid = _int_line(next(lines, None))
    if eid is None:
        return False
    print("이벤트 스토리 입력")
    story = next(lines, None)
    if story is None:
        return False
    print("선택지 개수 입력 : ", end="")
    count = _int_line(next(lines, None))
    if count is None:
        return False
    choices = []
    for number in range(1, min(count, MAX_CHOICES) + 1):
        print(f"선택지 {number} 스토리 입력")
        text = next(lines, None)
        print(f"선택지 {number} 결과 입력")
        result = next(lines, None)
        print(f"선택지 {number} 보상 입력")
        print("HP  공격력  방어력  속도  스킬id(얻는 스킬이 없는 경우 -1)")
        price_line = next(lines, None)
        if text is None or result is None or price_line is None:
            return False
        try:
            price = parse_price(price_line)
        except ValueError:
            return False
        choices.append(Choice(text, result, price))
    try:
        dex.write(Event(event_id=eid, story=story, choices=choices))
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return False
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="events", description="Build and inspect the event catalogue.")
    parser.add_argument("--text", default=DEFAULT_TEXT, help="text event file")
    parser.add_argument("--dex", default=DEFAULT_DEX, help="binary event catalogue")
    parser.add_argument("command", choices=("convert", "create", "show"))
    args = parser.parse_args(argv)

    if args.command == "convert":
        if not Path(args.text).is_file():
            print(f"fopen: {args.text}: no such file", file=sys.stderr)
            return 1
        try:
            convert_text_to_binary(args.text, args.dex)
        except OSError as exc:
            print(f"fopen: {exc}", file=sys.stderr)
            return 2
        return 0

    if args.command == "show":
        if not Path(args.dex).is_file():
            print(f"fopen: {args.dex}: no such file", file=sys.stderr)
            return 1
        for event in EventDex(args.dex):
            print(describe_event(event))
        return 0

    dex = EventDex(args.dex)
    lines = (line.rstrip("\r\n") for line in sys.stdin)
    while _create_step(dex, lines):
        print("계속하겠습니까? (Y/N)", end="")
        answer = next(lines, "")
        print()
        if answer.strip()[:1] != "Y":
            break
    return 0


if __name__ == "__main__":
    sys.exit(main())
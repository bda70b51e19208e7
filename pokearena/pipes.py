"""NUL-terminated messages over pipes and named FIFOs, with a two-way chat."""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Callable

MAXLINE = 256
SHORT_LINE = 100
CHAT_FIFOS = ("chatfifo1", "chatfifo2")
NAMED_PIPE = "myPipe"
BATTLE_FIFO_COUNT = 4
NAMED_WRITES = 4
NAMED_WRITE_PAUSE = 3


def _sleep() -> None:
    time.sleep(1)


def read_message(fd: int, limit: int = MAXLINE) -> str:
    """Read bytes up to a NUL or until limit bytes are taken.

    Raises EOFError when the pipe closes before the message ends.
    """
    data = bytearray()
    while len(data) < limit:
        byte = os.read(fd, 1)
        if not byte:
            raise EOFError("pipe closed before the end of the message")
        if byte == b"\0":
            break
        data += byte
    return data.decode("utf-8", errors="replace")


def write_message(fd: int, text: str) -> int:
    """Write text followed by a NUL; return the number of bytes written."""
    data = text.encode("utf-8") + b"\0"
    view = memoryview(data)
    while view:
        view = view[os.write(fd, view):]
    return len(data)


def make_fifo_pair(first, second) -> tuple[Path, Path]:
    """Create two named FIFOs; an existing name raises FileExistsError."""
    first, second = Path(first), Path(second)
    os.mkfifo(first, 0o666)
    os.mkfifo(second, 0o666)
    return first, second


def make_battle_fifos(directory) -> list[Path]:
    """Recreate the four battle FIFOs: two per battle group."""
    paths = [Path(directory) / f"battlefifo{n}" for n in range(1, BATTLE_FIFO_COUNT + 1)]
    for path in paths:
        path.unlink(missing_ok=True)
    for path in paths:
        os.mkfifo(path, 0o666)
    return paths


def open_when_ready(path, poll: Callable[[], None] = _sleep) -> int:
    """Open path for writing, waiting for it to appear."""
    while True:
        try:
            return os.open(path, os.O_WRONLY)
        except FileNotFoundError:
            poll()


def child_greeting() -> str:
    """Fork a child that sends its greeting through a pipe; return what the parent prints."""
    read_fd, write_fd = os.pipe()
    pid = os.fork()
    if pid == 0:
        try:
            os.close(read_fd)
            write_message(write_fd, f"안녕. 내 프로세스 아이디는 {os.getpid()} (이)야.\n")
        finally:
            os._exit(0)
    os.close(write_fd)
    try:
        line = read_message(read_fd, SHORT_LINE)
    finally:
        os.close(read_fd)
        os.waitpid(pid, 0)
    return f"[{os.getpid()}] {line}"


def chat_server(directory=".", ask: Callable[[str], str] = input, out: Callable[[str], None] = print) -> None:
    """Create the chat FIFOs and alternate: send a line, then wait for the reply.

    Ends when ask raises EOFError or the client goes away.
    """
    directory = Path(directory)
    to_client, from_client = make_fifo_pair(*(directory / name for name in CHAT_FIFOS))
    write_fd = os.open(to_client, os.O_WRONLY)
    try:
        read_fd = os.open(from_client, os.O_RDONLY)
        try:
            out("|서버 시작|")
            while True:
                text = ask("[서버]: ")
                write_message(write_fd, text)
                reply = read_message(read_fd)
                out(f"[클라이언트] -> {reply}")
        except (EOFError, BrokenPipeError):
            return
        finally:
            os.close(read_fd)
    finally:
        os.close(write_fd)


def chat_client(directory=".", ask: Callable[[str], str] = input, out: Callable[[str], None] = print) -> None:
    """Join the chat: wait for a line from the server, then answer it.

    Ends when the server goes away or ask raises EOFError.
    """
    directory = Path(directory)
    from_server, to_server = (directory / name for name in CHAT_FIFOS)
    read_fd = os.open(from_server, os.O_RDONLY)
    try:
        write_fd = os.open(to_server, os.O_WRONLY)
        try:
            out("|클라이언트 시작|")
            while True:
                message = read_message(read_fd)
                out(f"[서버] -> {message}")
                write_message(write_fd, ask("[클라이언트]: "))
        except (EOFError, BrokenPipeError):
            return
        finally:
            os.close(write_fd)
    finally:
        os.close(read_fd)


def _read_named(directory: Path) -> None:
    path = directory / NAMED_PIPE
    path.unlink(missing_ok=True)
    os.mkfifo(path, 0o660)
    fd = os.open(path, os.O_RDONLY)
    try:
        print(f"{read_message(fd, SHORT_LINE)} ")
    except EOFError:
        pass
    finally:
        os.close(fd)


def _write_named(directory: Path) -> None:
    message = f"Hello from PID {os.getpid()}"
    fd = open_when_ready(directory / NAMED_PIPE)
    try:
        for _ in range(NAMED_WRITES):
            write_message(fd, message)
            time.sleep(NAMED_WRITE_PAUSE)
    except BrokenPipeError:
        pass
    finally:
        os.close(fd)


def _serve_battle_fifos(directory: Path) -> None:
    paths = make_battle_fifos(directory)
    modes = (os.O_RDONLY, os.O_WRONLY, os.O_RDONLY, os.O_WRONLY)
    fds = []
    try:
        for path, mode in zip(paths, modes):
            fds.append(os.open(path, mode))
    finally:
        for fd in fds:
            os.close(fd)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="pipes", description="Pipe and FIFO messaging tools.")
    parser.add_argument(
        "command",
        choices=("server", "client", "read", "write", "greet", "battle-fifos"),
    )
    parser.add_argument("--dir", default=".", help="directory holding the FIFOs")
    args = parser.parse_args(argv)
    directory = Path(args.dir)

    try:
        if args.command == "server":
            chat_server(directory)
        elif args.command == "client":
            chat_client(directory)
        elif args.command == "read":
            _read_named(directory)
        elif args.command == "write":
            _write_named(directory)
        elif args.command == "greet":
            print(child_greeting(), end="")
        else:
            _serve_battle_fifos(directory)
    except FileExistsError as exc:
        print(f"mkfifo: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"open: {exc}", file=sys.stderr)
        return 3
    return 0


if __name__ == "__main__":
    sys.exit(main())
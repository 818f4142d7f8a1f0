"""Text console for playing a game without graphics."""

from __future__ import annotations

import logging
import sys
import time
from typing import Callable

from hexclash.client import Client, ClientDisconnected
from hexclash.game import Phase, Vec

USAGE = "Call format: python -m hexclash.console [nickname=_console_player] [IpAddres=127.0.0.1]"
DEFAULT_NICKNAME = "_console_player"
DEFAULT_ADDRESS = "127.0.0.1"
HOSTED_HEIGHT = 4
HOSTED_WIDTH = 4

_COMMON_TAIL = (
    " 3 = show field",
    " 4 = show players",
    " 5 = send message",
)
_ATTACK_MENU = (
    "Enter command:",
    " 0 = disconnect",
    " 1 = attack...",
    " 2 = stop attacking",
) + _COMMON_TAIL
_FEED_MENU = (
    "Enter command:",
    " 0 = disconnect",
    " 1 = feed...",
    " 2 = end turn",
) + _COMMON_TAIL

ReadLine = Callable[[], str]
Write = Callable[[str], None]


def parse_position(text: str) -> Vec:
    """Parse a position typed as ``y x``; raises ValueError on bad input."""
    parts = text.split()
    if len(parts) != 2:
        raise ValueError(f"expected two numbers 'y x', got {text.strip()!r}")
    try:
        y, x = (int(part) for part in parts)
    except ValueError as exc:
        raise ValueError(f"not a position: {text.strip()!r}") from exc
    if x < 0 or y < 0:
        raise ValueError(f"position must not be negative: {text.strip()!r}")
    return Vec(x, y)


def _ensure_connected(client) -> None:
    if not client.is_connected():
        raise ClientDisconnected("connection to the server was lost")


def _read_position(client, read_line: ReadLine, write: Write, prompt: str) -> Vec | None:
    write(prompt)
    text = read_line()
    _ensure_connected(client)
    try:
        return parse_position(text)
    except ValueError as exc:
        write(f"Bad position: {exc}")
        return None


def _attack(client, read_line: ReadLine, write: Write) -> None:
    write("Enter arguments:")
    who = _read_position(client, read_line, write, " Who: y x")
    if who is None:
        return
    whom = _read_position(client, read_line, write, " Whom: y x")
    if whom is None:
        return
    client.attack(who, whom)


def _feed(client, read_line: ReadLine, write: Write) -> None:
    write("Enter arguments:")
    whom = _read_position(client, read_line, write, " Whom: y x")
    if whom is None:
        return
    client.feed(whom)


def run_turn(client, read_line: ReadLine, write: Write) -> bool:
    """Play one turn: the attack phase, then the feed phase.

    Returns False when the player chose to disconnect, True when the turn
    was ended normally. Raises ClientDisconnected when the connection is
    lost and EOFError when input runs out.
    """
    for menu, action in ((_ATTACK_MENU, _attack), (_FEED_MENU, _feed)):
        while True:
            for line in menu:
                write(line)
            command = read_line().strip()
            _ensure_connected(client)

            if command == "0":
                write("Client shutdown")
                client.disconnect()
                return False
            if command == "1":
                action(client, read_line, write)
            elif command == "2":
                client.next_phase()
                break
            elif command == "3":
                write(str(client.field()))
            elif command == "4":
                for player in client.players():
                    write(f" >{player}")
            elif command == "5":
                write("Enter message:")
                client.send_message(read_line().strip())
            else:
                write(f"Unknown command ({command})")
    return True


def _stdin_line() -> str:
    line = sys.stdin.readline()
    if not line:
        raise EOFError
    return line


def main(argv: list[str] | None = None) -> int:
    """Play a game from the terminal; return the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) > 2:
        print(USAGE, file=sys.stderr)
        return 1

    nickname = argv[0] if argv else DEFAULT_NICKNAME
    address = argv[1] if len(argv) > 1 else DEFAULT_ADDRESS
    logging.basicConfig(level=logging.WARNING, format="%(message)s")

    client = Client(nickname)
    joined = client.connect(address) if len(argv) == 2 else client.host(HOSTED_HEIGHT, HOSTED_WIDTH)
    if not joined:
        return 1

    def write(text: str) -> None:
        print(text, flush=True)

    with client:
        try:
            while True:
                write("Wait for your turn...")
                while client.phase() is Phase.WAIT:
                    time.sleep(1)
                if not run_turn(client, _stdin_line, write):
                    return 0
        except (ClientDisconnected, EOFError, KeyboardInterrupt):
            pass

    print("Game shutdown", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
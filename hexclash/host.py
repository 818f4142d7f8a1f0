"""Command that hosts a game server until every player has left."""

from __future__ import annotations

import logging
import re
import sys
import time

from hexclash.server import ListenerError, Server

USAGE = "Call format: python -m hexclash.host [height] [width]"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_args(argv: list[str]) -> tuple[int, int]:
    """Return ``(height, width)`` from the command line.

    A third argument, given when a client starts the server, is accepted.
    Raises ValueError with a message for the user on bad input.
    """
    if len(argv) not in (2, 3):
        raise ValueError(USAGE)
    height = _atoi(argv[0])
    width = _atoi(argv[1])
    if height <= 0 or width <= 0:
        raise ValueError("Wrong field size specified")
    return height, width


def main(argv: list[str] | None = None) -> int:
    """Host one game; return the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        height, width = parse_args(argv)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        server = Server(height, width)
    except ListenerError as exc:
        print(exc, file=sys.stderr)
        return 1

    with server:
        try:
            server.accept_first()
            server.start()
            while server.busy():
                time.sleep(2)
        except KeyboardInterrupt:
            pass
        except ListenerError as exc:
            print(exc, file=sys.stderr)
            return 1

    print("Server shutdown", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
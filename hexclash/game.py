"""Game objects: phases, positions, players, cells and the hexagonal field."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import IntEnum

from hexclash.packet import Packet, PacketError

DEFAULT_CAPACITY = 8


class Phase(IntEnum):
    """Phase of a player's turn: ATTACK, then FEED, then WAIT."""

    ATTACK = 0
    FEED = 1
    WAIT = 2

    def __str__(self) -> str:
        return _PHASE_NAMES[self]


_PHASE_NAMES = {
    Phase.WAIT: "<wait>",
    Phase.ATTACK: "<attack>",
    Phase.FEED: "<feed>",
}


@dataclass(frozen=True)
class Vec:
    """A position on the field: column ``x`` and row ``y``."""

    x: int = 0
    y: int = 0

    def write(self, packet: Packet) -> Packet:
        """Append the position, row first, as unsigned 32-bit integers."""
        packet.write_uint32(self.y)
        packet.write_uint32(self.x)
        return packet

    @classmethod
    def read(cls, packet: Packet) -> "Vec":
        """Read a position written by :meth:`write`."""
        y = packet.read_uint32()
        x = packet.read_uint32()
        return cls(x, y)

    def __str__(self) -> str:
        return f"{{{self.x},{self.y}}}"


@dataclass
class PlayerData:
    """A player's server-given id (zero means unassigned) and nickname."""

    nickname: str = "Player"
    id: int = 0

    def write(self, packet: Packet) -> Packet:
        """Append the id and the nickname."""
        packet.write_uint16(self.id)
        packet.write_string(self.nickname)
        return packet

    @classmethod
    def read(cls, packet: Packet) -> "PlayerData":
        """Read player data written by :meth:`write`."""
        player_id = packet.read_uint16()
        nickname = packet.read_string()
        return cls(nickname=nickname, id=player_id)

    def __str__(self) -> str:
        return f"Player{self.id}({self.nickname})"


class Cell:
    """One cell: how big it is, who owns it and how big it may grow."""

    __slots__ = ("size", "owner", "capacity")

    def __init__(self, size: int = 0, owner: int = 0, capacity: int = DEFAULT_CAPACITY) -> None:
        self.owner = owner
        self.capacity = capacity
        self.size = min(size, capacity)

    def empty(self) -> bool:
        """True when the cell has no mass."""
        return self.size == 0

    def belongs_to(self, owner: int) -> bool:
        """True when the cell is owned by the player with this id."""
        return self.owner == owner

    def discard(self) -> None:
        """Clear the cell: nobody owns an empty cell."""
        self.size = 0
        self.owner = 0

    def init(self, owner: int) -> None:
        """Make the cell a fresh nest of the given player."""
        self.size = 2
        self.owner = owner

    def write(self, packet: Packet) -> Packet:
        """Append size, owner and capacity as unsigned 16-bit integers."""
        packet.write_uint16(self.size)
        packet.write_uint16(self.owner)
        packet.write_uint16(self.capacity)
        return packet

    @classmethod
    def read(cls, packet: Packet) -> "Cell":
        """Read a cell written by :meth:`write`, exactly as it was sent."""
        size = packet.read_uint16()
        owner = packet.read_uint16()
        capacity = packet.read_uint16()
        cell = cls(owner=owner, capacity=capacity)
        cell.size = size
        return cell

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return (self.size, self.owner, self.capacity) == (other.size, other.owner, other.capacity)

    def __repr__(self) -> str:
        return f"Cell(size={self.size}, owner={self.owner}, capacity={self.capacity})"

    def __str__(self) -> str:
        return f"[{self.size}/{self.capacity}:{self.owner}]"


class Field:
    """A grid of cells laid out as hexagons: odd rows are shifted right."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"field size must not be negative: {width}x{height}")
        self._rows: list[list[Cell]] = [[Cell() for _ in range(width)] for _ in range(height)]

    def __getitem__(self, pos: Vec) -> Cell:
        if not self.belongs(pos):
            raise IndexError(f"position {pos} is outside the field")
        return self._rows[pos.y][pos.x]

    def __setitem__(self, pos: Vec, cell: Cell) -> None:
        if not self.belongs(pos):
            raise IndexError(f"position {pos} is outside the field")
        self._rows[pos.y][pos.x] = copy.copy(cell)

    def _positions(self):
        for y, row in enumerate(self._rows):
            for x, cell in enumerate(row):
                yield Vec(x, y), cell

    def height(self) -> int:
        """Number of rows."""
        return len(self._rows)

    def width(self) -> int:
        """Number of cells in a row."""
        return len(self._rows[0]) if self._rows else 0

    def count(self, owner: int) -> int:
        """Total size of the cells owned by the given player."""
        return sum(cell.size for _, cell in self._positions() if cell.belongs_to(owner))

    def attack(self, who: Vec, whom: Vec) -> None:
        """Move all but one unit of ``who`` against ``whom``.

        [6/8:1]->[3/8:2] gives [1/8:1]--[2/8:1];
        [6/8:1]->[8/8:2] gives [1/8:1]--[3/8:2];
        [6/8:1]->[5/8:2] gives [1/8:1]--[0/8:0].
        """
        attacker = self[who]
        defender = self[whom]
        mass = attacker.size - 1
        attacker.size = 1

        if defender.owner == 0:
            defender.size = mass
            defender.owner = attacker.owner
            return

        remaining = defender.size - mass
        if remaining == 0:
            defender.discard()
        elif remaining > 0:
            defender.size = remaining
        else:
            defender.size = -remaining
            defender.owner = attacker.owner

    def may_attack(self, owner: int, who: Vec, whom: Vec) -> bool:
        """True when the given player may attack ``whom`` from ``who``."""
        if not self.belongs(who) or not self.belongs(whom):
            return False
        attacker = self[who]
        defender = self[whom]
        return (
            self.reachable(who, whom)
            and attacker.belongs_to(owner)
            and not defender.belongs_to(owner)
            and attacker.size > 1
        )

    def feed(self, whom: Vec) -> None:
        """Grow the cell at ``whom`` by one."""
        self[whom].size += 1

    def may_feed(self, owner: int, whom: Vec) -> bool:
        """True when the given player may feed the cell at ``whom``."""
        if not self.belongs(whom):
            return False
        cell = self[whom]
        return cell.belongs_to(owner) and cell.size < cell.capacity

    def belongs(self, pos: Vec) -> bool:
        """True when the position lies within the field."""
        return 0 <= pos.y < self.height() and 0 <= pos.x < self.width()

    def reachable(self, a: Vec, b: Vec) -> bool:
        """True when ``b`` can be reached from ``a`` in one step."""
        if not self.belongs(a) or not self.belongs(b) or a == b:
            return False
        if abs(b.x - a.x) > 1:
            return False
        if a.y == b.y or a.x == b.x:
            return True
        shift = 1 if a.y % 2 == 0 else -1
        return a.x == b.x + shift

    def resize(self, height: int, width: int) -> None:
        """Give the field a new size; every cell is cleared."""
        if width < 0 or height < 0:
            raise ValueError(f"field size must not be negative: {width}x{height}")
        self._rows = [[Cell() for _ in range(width)] for _ in range(height)]

    def discard(self, owner: int) -> list[Vec]:
        """Clear every cell of the given player; return their positions."""
        cleared = []
        for pos, cell in self._positions():
            if cell.belongs_to(owner):
                cell.discard()
                cleared.append(pos)
        return cleared

    def nest(self, owner: int) -> Vec:
        """Give the first empty cell to the given player; return its position.

        Raises ValueError when no cell is empty.
        """
        for pos, cell in self._positions():
            if cell.empty():
                cell.init(owner)
                return pos
        raise ValueError("no empty cell left for a nest")

    def write(self, packet: Packet) -> Packet:
        """Append height and width as signed 32-bit integers, then every cell."""
        packet.write_int32(self.height())
        packet.write_int32(self.width())
        for _, cell in self._positions():
            cell.write(packet)
        return packet

    @classmethod
    def read(cls, packet: Packet) -> "Field":
        """Read a field written by :meth:`write`."""
        height = packet.read_int32()
        width = packet.read_int32()
        if height < 0 or width < 0:
            raise PacketError(f"invalid field size {height}x{width}")
        field = cls(width, height)
        field._rows = [[Cell.read(packet) for _ in range(width)] for _ in range(height)]
        return field

    def __str__(self) -> str:
        lines = []
        for y, row in enumerate(self._rows):
            indent = "    " if y % 2 else ""
            lines.append(indent + "".join(f"{cell} " for cell in row) + "\n")
        return "".join(lines)
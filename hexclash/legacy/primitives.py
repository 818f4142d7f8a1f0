"""Game objects of the early protocol: message kinds, cells and a grid field."""

from __future__ import annotations

import copy
from enum import IntEnum

from hexclash.game import Vec
from hexclash.packet import Packet, PacketError

DEFAULT_CAPACITY = 8


class MsgType(IntEnum):
    """Kind of a message in the early protocol."""

    ACK = 0
    NOPE = 1
    FIGHT = 2
    FEED = 3
    MAIL = 4
    UPD = 5

    def __str__(self) -> str:
        return _MSG_NAMES[self]


_MSG_NAMES = {
    MsgType.ACK: "<ack>",
    MsgType.NOPE: "<nope>",
    MsgType.FIGHT: "<fight>",
    MsgType.FEED: "<feed>",
    MsgType.MAIL: "<mail>",
    MsgType.UPD: "<update>",
}


def write_msg_type(packet: Packet, mtype: MsgType) -> Packet:
    """Append a message kind as a signed 32-bit integer."""
    return packet.write_int32(int(mtype))


def read_msg_type(packet: Packet) -> MsgType:
    """Read a message kind; raises PacketError for an unknown value."""
    value = packet.read_int32()
    try:
        return MsgType(value)
    except ValueError as exc:
        raise PacketError(f"unknown message type {value}") from exc


def write_vec(packet: Packet, pos: Vec) -> Packet:
    """Append a position as two unsigned 16-bit integers, column first."""
    packet.write_uint16(pos.x)
    packet.write_uint16(pos.y)
    return packet


def read_vec(packet: Packet) -> Vec:
    """Read a position written by :func:`write_vec`."""
    x = packet.read_uint16()
    y = packet.read_uint16()
    return Vec(x, y)


def _size_of(value: "Cell | int") -> int:
    return value.size if isinstance(value, Cell) else value


class Cell:
    """A cell that grows up to its capacity; cells compare by size."""

    __slots__ = ("owner", "capacity", "size")

    def __init__(self, size: int = 0, owner: int = 0, capacity: int = DEFAULT_CAPACITY) -> None:
        self.owner = owner
        self.capacity = capacity
        self.size = max(0, min(size, capacity))

    def is_cell(self) -> bool:
        """True unless the cell has zero capacity."""
        return self.capacity != 0

    def grow(self) -> bool:
        """Add one unit; False when the cell is already full."""
        if self.size == self.capacity:
            return False
        self.size += 1
        return True

    def shrink(self) -> bool:
        """Remove one unit; an emptied cell loses its owner. False when empty."""
        if self.size == 0:
            return False
        self.size -= 1
        if self.size == 0:
            self.owner = 0
        return True

    def write(self, packet: Packet) -> Packet:
        """Append owner, capacity and size as unsigned 16-bit integers."""
        packet.write_uint16(self.owner)
        packet.write_uint16(self.capacity)
        packet.write_uint16(self.size)
        return packet

    @classmethod
    def read(cls, packet: Packet) -> "Cell":
        """Read a cell written by :meth:`write`, exactly as it was sent."""
        owner = packet.read_uint16()
        capacity = packet.read_uint16()
        size = packet.read_uint16()
        cell = cls(owner=owner, capacity=capacity)
        cell.size = size
        return cell

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (Cell, int)):
            return NotImplemented
        return self.size == _size_of(other)

    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: "Cell | int") -> bool:
        return self.size < _size_of(other)

    def __le__(self, other: "Cell | int") -> bool:
        return self.size <= _size_of(other)

    def __gt__(self, other: "Cell | int") -> bool:
        return self.size > _size_of(other)

    def __ge__(self, other: "Cell | int") -> bool:
        return self.size >= _size_of(other)

    def __repr__(self) -> str:
        return f"Cell(size={self.size}, owner={self.owner}, capacity={self.capacity})"

    def __str__(self) -> str:
        return f"{{#{self.owner},{self.size}/{self.capacity}}}"


class Field:
    """A rectangular grid of cells."""

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"field size must not be negative: {width}x{height}")
        self._width = width
        self._height = height
        self._rows: list[list[Cell]] = [[Cell() for _ in range(width)] for _ in range(height)]

    def width(self) -> int:
        """Number of cells in a row."""
        return self._width

    def height(self) -> int:
        """Number of rows."""
        return self._height

    def is_valid(self, pos: Vec) -> bool:
        """True when the position lies within the field."""
        return 0 <= pos.x < self._width and 0 <= pos.y < self._height

    def row(self, index: int) -> list[Cell]:
        """The cells of one row; changes to the list change the field."""
        if not 0 <= index < self._height:
            raise IndexError(f"row {index} is outside the field")
        return self._rows[index]

    def __getitem__(self, pos: Vec) -> Cell:
        if not self.is_valid(pos):
            raise IndexError(f"position {pos} is outside the field")
        return self._rows[pos.y][pos.x]

    def __setitem__(self, pos: Vec, cell: Cell) -> None:
        if not self.is_valid(pos):
            raise IndexError(f"position {pos} is outside the field")
        self._rows[pos.y][pos.x] = copy.copy(cell)

    def write(self, packet: Packet) -> Packet:
        """Append height and width as unsigned 16-bit integers, then every cell."""
        packet.write_uint16(self._height)
        packet.write_uint16(self._width)
        for row in self._rows:
            for cell in row:
                cell.write(packet)
        return packet

    @classmethod
    def read(cls, packet: Packet) -> "Field":
        """Read a field written by :meth:`write`."""
        height = packet.read_uint16()
        width = packet.read_uint16()
        field = cls(width, height)
        field._rows = [[Cell.read(packet) for _ in range(width)] for _ in range(height)]
        return field

    def __str__(self) -> str:
        lines = [f"[{self._height}x{self._width}]\n"]
        for index, row in enumerate(self._rows):
            indent = "    " if index % 2 else ""
            lines.append(indent + "".join(f"{cell} " for cell in row) + "\n")
        return "".join(lines)
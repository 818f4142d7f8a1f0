import pytest

from hexclash.game import Vec
from hexclash.legacy.primitives import (
    DEFAULT_CAPACITY,
    Cell,
    Field,
    MsgType,
    read_msg_type,
    read_vec,
    write_msg_type,
    write_vec,
)
from hexclash.packet import Packet, PacketError


@pytest.mark.parametrize(
    "mtype, name",
    [
        (MsgType.FEED, "<feed>"),
        (MsgType.ACK, "<ack>"),
        (MsgType.UPD, "<update>"),
    ],
)
def test_msg_type_names(mtype, name):
    decoded = read_msg_type(write_msg_type(Packet(), mtype))
    assert str(decoded) == name


def test_msg_type_round_trip():
    packet = write_msg_type(Packet(), MsgType.FEED)
    assert read_msg_type(packet) is MsgType.FEED
    assert packet.at_end()


def test_unknown_msg_type_is_rejected():
    packet = Packet().write_int32(42)
    with pytest.raises(PacketError):
        read_msg_type(packet)


def test_vec_round_trip():
    packet = write_vec(Packet(), Vec(3, 0))
    assert packet.to_bytes() == b"\x00\x03\x00\x00"
    assert read_vec(packet) == Vec(3, 0)


def test_vec_too_large_for_wire():
    with pytest.raises(PacketError):
        write_vec(Packet(), Vec(70000, 0))


def test_cell_size_is_clamped_to_capacity():
    cell = Cell(20, 1)
    assert cell.capacity == DEFAULT_CAPACITY
    assert cell.size == cell.capacity


def test_cell_grow_stops_at_capacity():
    cell = Cell(1, 1, 2)
    assert cell.grow() is True
    assert cell.size == 2
    assert cell.grow() is False
    assert cell.size == 2


def test_cell_shrink_to_zero_loses_owner():
    cell = Cell(1, 7)
    assert cell.shrink() is True
    assert cell.size == 0
    assert cell.owner == 0
    assert cell.shrink() is False


def test_cell_compares_by_size():
    a, b = Cell(4), Cell(5)
    assert a < 5
    assert a < b
    assert b >= a
    assert Cell(3, owner=1) == Cell(3, owner=2)
    assert Cell(0) == 0


def test_is_cell():
    assert Cell().is_cell() is True
    assert Cell(capacity=0).is_cell() is False


def test_cell_wire_format():
    packet = Cell(3, 2, 8).write(Packet())
    assert packet.to_bytes() == b"\x00\x02\x00\x08\x00\x03"
    cell = Cell.read(packet)
    assert (cell.size, cell.owner, cell.capacity) == (3, 2, 8)


def test_cell_str():
    assert str(Cell(3, 2, 8)) == "{#2,3/8}"


def test_field_dimensions_and_access():
    field = Field(3, 4)
    assert field.width() == 3
    assert field.height() == 4
    field.row(3)[0] = Cell(4)
    assert field[Vec(0, 3)].size == 4


def test_field_setitem_copies():
    field = Field(2, 2)
    cell = Cell(2, 1)
    field[Vec(1, 1)] = cell
    cell.size = 5
    assert field[Vec(1, 1)].size == 2


def test_field_is_valid():
    field = Field(3, 4)
    assert field.is_valid(Vec(2, 3))
    assert not field.is_valid(Vec(3, 0))
    assert not field.is_valid(Vec(0, 4))


def test_field_out_of_range():
    field = Field(2, 2)
    with pytest.raises(IndexError):
        field[Vec(2, 0)]
    with pytest.raises(IndexError):
        field.row(2)


def test_field_round_trip_non_square():
    field = Field(3, 2)
    field[Vec(2, 1)] = Cell(5, 3)
    packet = field.write(Packet())
    copy = Field.read(packet)
    assert packet.at_end()
    assert (copy.width(), copy.height()) == (3, 2)
    restored = copy[Vec(2, 1)]
    assert (restored.size, restored.owner, restored.capacity) == (5, 3, DEFAULT_CAPACITY)


def test_field_str_header_and_indent():
    text = str(Field(3, 4))
    lines = text.splitlines()
    assert lines[0] == "[4x3]"
    assert len(lines) == 5
    assert not lines[1].startswith(" ")
    assert lines[2].startswith("    ")
import pytest

from hexclash.game import Cell, Field, Phase, PlayerData, Vec
from hexclash.packet import Packet, PacketError


@pytest.mark.parametrize(
    "phase, text",
    [(Phase.WAIT, "<wait>"), (Phase.ATTACK, "<attack>"), (Phase.FEED, "<feed>")],
)
def test_phase_str(phase, text):
    assert str(phase) == text


def test_vec_round_trip():
    packet = Vec(3, 7).write(Packet())
    assert Vec.read(Packet(packet.to_bytes())) == Vec(3, 7)


def test_vec_writes_row_first():
    packet = Vec(1, 2).write(Packet())
    assert packet.to_bytes() == b"\x00\x00\x00\x02\x00\x00\x00\x01"


def test_vec_str():
    assert str(Vec(4, 5)) == "{4,5}"


def test_player_data_round_trip():
    player = PlayerData("alice", 3)
    packet = player.write(Packet())
    assert PlayerData.read(Packet(packet.to_bytes())) == player


def test_player_data_defaults_and_str():
    player = PlayerData()
    assert player.nickname == "Player"
    assert player.id == 0
    assert str(PlayerData("bob", 3)) == "Player3(bob)"


def test_cell_size_is_clamped_to_capacity():
    cell = Cell(12, 1, 8)
    assert cell.size == cell.capacity


def test_cell_default_capacity():
    assert Cell().capacity == 8


def test_cell_discard_clears_owner_and_size():
    cell = Cell(5, 3)
    assert not cell.empty()
    cell.discard()
    assert cell.empty()
    assert cell.owner == 0


def test_cell_init_makes_nest():
    cell = Cell()
    cell.init(4)
    assert cell.belongs_to(4)
    assert cell.size == 2


def test_cell_round_trip_keeps_raw_values():
    cell = Cell(3, 2, 8)
    cell.size = 11
    packet = cell.write(Packet())
    assert Cell.read(Packet(packet.to_bytes())) == cell


def test_cell_wire_order():
    packet = Cell(3, 2, 8).write(Packet())
    assert packet.to_bytes() == b"\x00\x03\x00\x02\x00\x08"


def test_cell_str():
    assert str(Cell(3, 2)) == "[3/8:2]"


def test_field_dimensions():
    field = Field(3, 2)
    assert field.width() == 3
    assert field.height() == 2


def test_field_negative_size_rejected():
    with pytest.raises(ValueError):
        Field(-1, 2)


def test_field_index_out_of_range():
    field = Field(2, 2)
    with pytest.raises(IndexError):
        field[Vec(2, 0)]
    with pytest.raises(IndexError):
        field[Vec(0, -1)]


def test_field_setitem_copies_cell():
    field = Field(2, 2)
    cell = Cell(4, 1)
    field[Vec(1, 1)] = cell
    cell.size = 7
    assert field[Vec(1, 1)] == Cell(4, 1)


@pytest.mark.parametrize(
    "target, expected",
    [
        (Cell(3, 2), Cell(2, 1)),
        (Cell(8, 2), Cell(3, 2)),
        (Cell(5, 2), Cell(0, 0)),
    ],
)
def test_attack_worked_examples(target, expected):
    field = Field(2, 1)
    field[Vec(0, 0)] = Cell(6, 1)
    field[Vec(1, 0)] = target
    field.attack(Vec(0, 0), Vec(1, 0))
    assert field[Vec(0, 0)] == Cell(1, 1)
    assert field[Vec(1, 0)] == expected


def test_attack_on_unowned_cell_takes_it():
    field = Field(2, 1)
    field[Vec(0, 0)] = Cell(6, 1)
    field.attack(Vec(0, 0), Vec(1, 0))
    assert field[Vec(1, 0)].owner == 1
    assert field.count(1) == 6


def _battle_field():
    field = Field(3, 3)
    field[Vec(0, 0)] = Cell(3, 1)
    field[Vec(1, 0)] = Cell(2, 2)
    return field


def test_may_attack_enemy_neighbour():
    assert _battle_field().may_attack(1, Vec(0, 0), Vec(1, 0))


def test_may_not_attack_with_wrong_owner():
    assert not _battle_field().may_attack(2, Vec(0, 0), Vec(1, 0))


def test_may_not_attack_own_cell():
    field = _battle_field()
    field[Vec(1, 0)] = Cell(2, 1)
    assert not field.may_attack(1, Vec(0, 0), Vec(1, 0))


def test_may_not_attack_with_single_unit():
    field = _battle_field()
    field[Vec(0, 0)] = Cell(1, 1)
    assert not field.may_attack(1, Vec(0, 0), Vec(1, 0))


def test_may_not_attack_outside():
    assert not _battle_field().may_attack(1, Vec(0, 0), Vec(5, 0))


def test_reachable_neighbours():
    field = Field(3, 3)
    assert field.reachable(Vec(0, 0), Vec(1, 0))
    assert field.reachable(Vec(1, 0), Vec(0, 1))
    assert field.reachable(Vec(0, 1), Vec(1, 0))
    assert not field.reachable(Vec(0, 0), Vec(1, 1))


def test_reachable_rejects_same_and_outside():
    field = Field(3, 3)
    assert not field.reachable(Vec(1, 1), Vec(1, 1))
    assert not field.reachable(Vec(0, 0), Vec(0, 3))
    assert not field.reachable(Vec(0, 0), Vec(2, 0))


def test_feed_grows_cell():
    field = Field(1, 1)
    field[Vec(0, 0)] = Cell(6, 1)
    field.feed(Vec(0, 0))
    assert field[Vec(0, 0)] == Cell(7, 1)


def test_may_feed_rules():
    field = Field(2, 1)
    field[Vec(0, 0)] = Cell(6, 1)
    field[Vec(1, 0)] = Cell(8, 1)
    assert field.may_feed(1, Vec(0, 0))
    assert not field.may_feed(2, Vec(0, 0))
    assert not field.may_feed(1, Vec(1, 0))
    assert not field.may_feed(1, Vec(2, 0))


def test_count_sums_owned_sizes():
    field = Field(3, 1)
    field[Vec(0, 0)] = Cell(3, 1)
    field[Vec(1, 0)] = Cell(4, 1)
    field[Vec(2, 0)] = Cell(5, 2)
    assert field.count(1) == 3 + 4
    assert field.count(2) == 5


def test_resize_clears_every_cell():
    field = Field(2, 2)
    field[Vec(1, 1)] = Cell(4, 1)
    field.resize(3, 4)
    assert field.height() == 3
    assert field.width() == 4
    assert field.count(1) == 0


def test_discard_returns_positions_in_row_order():
    field = Field(2, 2)
    field[Vec(1, 0)] = Cell(3, 5)
    field[Vec(0, 1)] = Cell(2, 5)
    field[Vec(1, 1)] = Cell(2, 6)
    assert field.discard(5) == [Vec(1, 0), Vec(0, 1)]
    assert field[Vec(1, 0)].empty()
    assert field[Vec(1, 1)] == Cell(2, 6)


def test_nest_takes_first_empty_cells():
    field = Field(2, 2)
    first = field.nest(1)
    second = field.nest(2)
    assert first == Vec(0, 0)
    assert second == Vec(1, 0)
    assert field[second].belongs_to(2)


def test_nest_on_full_field_raises():
    field = Field(1, 1)
    field.nest(1)
    with pytest.raises(ValueError):
        field.nest(2)


def test_field_round_trip():
    field = Field(3, 2)
    field[Vec(2, 1)] = Cell(5, 3)
    field.nest(4)
    restored = Field.read(Packet(field.write(Packet()).to_bytes()))
    assert restored.width() == 3
    assert restored.height() == 2
    assert restored[Vec(2, 1)] == Cell(5, 3)
    assert restored[Vec(0, 0)] == field[Vec(0, 0)]


def test_field_header_is_height_then_width():
    data = Field(2, 1).write(Packet()).to_bytes()
    assert data[:8] == b"\x00\x00\x00\x01\x00\x00\x00\x02"


def test_field_read_rejects_negative_size():
    packet = Packet().write_int32(-1).write_int32(2)
    with pytest.raises(PacketError):
        Field.read(Packet(packet.to_bytes()))


def test_field_str_shifts_odd_rows():
    assert str(Field(1, 2)) == "[0/8:0] \n    [0/8:0] \n"
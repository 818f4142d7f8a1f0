import pytest

from hexclash.client import ClientDisconnected
from hexclash.console import main, parse_position, run_turn
from hexclash.game import Field, PlayerData, Vec


class FakeClient:
    def __init__(self):
        self.connected = True
        self.calls = []
        self._field = Field(2, 2)

    def is_connected(self):
        return self.connected

    def attack(self, who, whom):
        self.calls.append(("attack", who, whom))
        return True

    def feed(self, whom):
        self.calls.append(("feed", whom))
        return True

    def next_phase(self):
        self.calls.append(("next_phase",))

    def field(self):
        return self._field

    def players(self):
        return [PlayerData(nickname="bob", id=2)]

    def send_message(self, text):
        self.calls.append(("message", text))

    def disconnect(self):
        self.calls.append(("disconnect",))
        self.connected = False


def script(*lines):
    items = iter(lines)

    def read_line():
        try:
            return next(items) + "\n"
        except StopIteration:
            raise EOFError from None

    return read_line


def play(client, *lines):
    out = []
    result = run_turn(client, script(*lines), out.append)
    return result, out


def test_parse_position_reads_row_then_column():
    assert parse_position("2 3") == Vec(3, 2)
    assert parse_position("  0   1 \n") == Vec(1, 0)


@pytest.mark.parametrize("text", ["1", "", "a b", "1 2 3", "-1 2", "2 -1"])
def test_parse_position_rejects_bad_input(text):
    with pytest.raises(ValueError):
        parse_position(text)


def test_ending_both_phases_finishes_turn():
    client = FakeClient()
    result, _ = play(client, "2", "2")
    assert result is True
    assert client.calls == [("next_phase",), ("next_phase",)]


def test_disconnect_command():
    client = FakeClient()
    result, out = play(client, "0")
    assert result is False
    assert client.calls == [("disconnect",)]
    assert "Client shutdown" in out


def test_attack_command_passes_positions():
    client = FakeClient()
    result, _ = play(client, "1", "0 1", "1 1", "2", "2")
    assert result is True
    assert client.calls[0] == ("attack", Vec(1, 0), Vec(1, 1))


def test_feed_command_in_feed_phase():
    client = FakeClient()
    play(client, "2", "1", "1 0", "2")
    assert client.calls == [("next_phase",), ("feed", Vec(0, 1)), ("next_phase",)]


def test_bad_position_does_not_attack():
    client = FakeClient()
    _, out = play(client, "1", "oops", "2", "2")
    assert all(call[0] != "attack" for call in client.calls)
    assert any(line.startswith("Bad position") for line in out)


def test_unknown_command_is_reported():
    client = FakeClient()
    _, out = play(client, "9", "2", "2")
    assert "Unknown command (9)" in out


def test_show_field_and_players():
    client = FakeClient()
    _, out = play(client, "3", "4", "2", "2")
    assert str(client.field()) in out
    assert " >Player2(bob)" in out


def test_send_message():
    client = FakeClient()
    play(client, "5", "hello", "2", "2")
    assert ("message", "hello") in client.calls


def test_lost_connection_raises():
    client = FakeClient()
    client.connected = False
    with pytest.raises(ClientDisconnected):
        play(client, "2")


def test_running_out_of_input_raises_eof():
    client = FakeClient()
    with pytest.raises(EOFError):
        play(client, "3")


def test_main_rejects_too_many_arguments(capsys):
    assert main(["nick", "127.0.0.1", "extra"]) == 1
    assert "Call format" in capsys.readouterr().err
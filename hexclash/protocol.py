"""Message kinds of the game protocol and their packet encoding."""

from __future__ import annotations

from enum import IntEnum

from hexclash.packet import Packet, PacketError

GAMEPORT = 5990


class MsgType(IntEnum):
    """Top-level message kind.

    TURN: from a client, its feeding is over; from the server, whose turn it is.
    ATTACK: attack from one position to another.
    FEED: feed one position.
    UPD: an update, followed by an UpdType.
    MSG: a common chat message.
    """

    TURN = 0
    ATTACK = 1
    FEED = 2
    UPD = 3
    MSG = 4

    def __str__(self) -> str:
        return _MSG_NAMES[self]


_MSG_NAMES = {
    MsgType.TURN: "<turn>",
    MsgType.ATTACK: "<attack>",
    MsgType.FEED: "<feed>",
    MsgType.UPD: "<update>",
    MsgType.MSG: "<message>",
}


class UpdType(IntEnum):
    """Kinds of update the server pushes to every client."""

    DISC_PLAYER = 0
    CONN_PLAYER = 1
    CELL_UPDATE = 2

    def __str__(self) -> str:
        return _UPD_NAMES[self]


_UPD_NAMES = {
    UpdType.DISC_PLAYER: "<disc>",
    UpdType.CONN_PLAYER: "<conn>",
    UpdType.CELL_UPDATE: "<cell>",
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


def write_upd_type(packet: Packet, utype: UpdType) -> Packet:
    """Append an update kind as a signed 32-bit integer."""
    return packet.write_int32(int(utype))


def read_upd_type(packet: Packet) -> UpdType:
    """Read an update kind; raises PacketError for an unknown value."""
    value = packet.read_int32()
    try:
        return UpdType(value)
    except ValueError as exc:
        raise PacketError(f"unknown update type {value}") from exc
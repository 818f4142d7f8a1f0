"""Player side of the early protocol: joining, fighting, feeding and updates."""

from __future__ import annotations

import logging
import socket
from enum import Enum

from hexclash.game import PlayerData, Vec
from hexclash.legacy.chatterbox import ChatterBox
from hexclash.legacy.primitives import (
    Cell,
    Field,
    MsgType,
    read_msg_type,
    read_vec,
    write_msg_type,
    write_vec,
)
from hexclash.packet import Packet

log = logging.getLogger(__name__)


class UpdResult(Enum):
    """What :meth:`Client.update_and_get_ack` found in the incoming queue."""

    NOTHING_NEW = 0
    UPDATED = 1
    ACK_RECEIVED = 2


class Client(ChatterBox):
    """A player talking to a server of the early protocol."""

    reply_timeout: float | None = None

    def __init__(self, sock: socket.socket) -> None:
        super().__init__(sock)
        self.player_id = 0
        self.players: list[PlayerData] = []

    def _wait(self) -> Packet:
        return self.receive_waiting(self.reply_timeout)

    def init(self, nickname: str) -> Field:
        """Receive this player's id, the field and the other players; send the nickname."""
        packet = self._wait()
        self.player_id = packet.read_uint16()
        field = Field.read(packet)
        count = packet.read_uint16()
        self.players = []
        for _ in range(count):
            player_id = packet.read_uint16()
            name = packet.read_string()
            player = PlayerData(nickname=name, id=player_id)
            self.players.append(player)
            log.info("%s(Player #%d", name, player_id)

        self.send(Packet().write_string(nickname))
        return field

    def _may_fight(self, field: Field, attacker: Vec, defender: Vec) -> bool:
        if not field.is_valid(attacker) or not field.is_valid(defender):
            return False
        if abs(attacker.x - defender.x) > 1 or abs(attacker.y - defender.y) > 1:
            return False
        if attacker.y != defender.y:
            if attacker.y % 2 == 0 and defender.x > attacker.x:
                return False
            if attacker.y % 2 == 1 and defender.x < attacker.x:
                return False
        elif attacker.x == defender.x:
            return False
        own = field[attacker]
        if own.owner != self.player_id:
            return False
        if own.owner == field[defender].owner:
            return False
        return own.size != 0

    def _apply_update(self, field: Field) -> None:
        packet = self._wait()
        read_msg_type(packet)
        pos = read_vec(packet)
        field[pos] = Cell.read(packet)

    def fight(self, field: Field, attacker: Vec, defender: Vec) -> bool:
        """Attack ``defender`` from ``attacker``; apply the two cell updates on success."""
        if not self._may_fight(field, attacker, defender):
            return False

        packet = Packet()
        write_msg_type(packet, MsgType.FIGHT)
        write_vec(packet, attacker)
        write_vec(packet, defender)
        self.send(packet)

        if read_msg_type(self._wait()) is not MsgType.ACK:
            return False
        for _ in range(2):
            self._apply_update(field)
        return True

    def feed(self, field: Field, eater: Vec) -> bool:
        """Feed the cell at ``eater``; apply the cell update on success."""
        if not field.is_valid(eater):
            return False
        cell = field[eater]
        if cell.owner != self.player_id:
            return False
        if cell.size == 0 or cell.size == cell.capacity:
            return False

        packet = Packet()
        write_msg_type(packet, MsgType.FEED)
        write_vec(packet, eater)
        self.send(packet)

        if read_msg_type(self._wait()) is not MsgType.ACK:
            return False
        self._apply_update(field)
        return True

    def ack(self) -> None:
        """Send an acknowledgement, ending the current phase."""
        self.send(write_msg_type(Packet(), MsgType.ACK))

    def update_and_get_ack(self, field: Field) -> UpdResult:
        """Apply waiting cell updates; stop at an acknowledgement."""
        if not self.is_unread():
            return UpdResult.NOTHING_NEW
        while self.is_unread():
            packet = self.receive()
            if packet is None:
                break
            mtype = read_msg_type(packet)
            log.debug("mtype=%s", mtype)
            if mtype is MsgType.ACK:
                return UpdResult.ACK_RECEIVED
            if mtype is MsgType.UPD:
                pos = read_vec(packet)
                field[pos] = Cell.read(packet)
        return UpdResult.UPDATED
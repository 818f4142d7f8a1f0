"""Game client: joins a server, tracks the game state and sends commands."""

from __future__ import annotations

import copy
import logging
import socket
import subprocess
import sys
import threading
import time

from hexclash.game import Field, Phase, PlayerData, Vec
from hexclash.packet import Packet, PacketError, recv_packet, send_packet
from hexclash.protocol import (
    GAMEPORT,
    MsgType,
    UpdType,
    read_msg_type,
    read_upd_type,
    write_msg_type,
)

log = logging.getLogger(__name__)

HOST_TIMEOUT = 10.0
_CONNECT_TIMEOUT = 5.0


class ClientDisconnected(ConnectionError):
    """Raised when a game command is issued without a live connection."""


class Client:
    """A player connected to a game server.

    A background thread applies everything the server pushes: cell updates,
    players joining and leaving, turn changes and chat messages.
    """

    def __init__(self, nickname: str = "Player", port: int = GAMEPORT) -> None:
        self._port = port
        self._me = PlayerData(nickname=nickname)
        self._current_player = PlayerData()
        self._field = Field()
        self._players: list[PlayerData] = []
        self._messages: list[str] = []
        self._phase = Phase.WAIT
        self._food = 0
        self._sock: socket.socket | None = None
        self._connected = False
        self._receiver: threading.Thread | None = None
        self._server_process: subprocess.Popen | None = None
        self._state_lock = threading.RLock()
        self._send_lock = threading.Lock()
        self.echo_messages = True

    # -- connection ----------------------------------------------------

    def connect(self, host: str) -> bool:
        """Join the game served at ``host``; False if that fails."""
        self.disconnect()
        try:
            sock = socket.create_connection((host, self._port), timeout=_CONNECT_TIMEOUT)
        except OSError as exc:
            log.error("Connection failed: %s (%s)", host, exc)
            return False
        log.info("Connection success: %s", host)

        try:
            hello = Packet().write_string(self._me.nickname)
            send_packet(sock, hello)
            reply = recv_packet(sock)
            player_id = reply.read_uint16()
            field = Field.read(reply)
            count = reply.read_int32()
            players = [PlayerData.read(reply) for _ in range(max(count, 0))]
        except (OSError, PacketError) as exc:
            log.error("Initialization failed: %s", exc)
            sock.close()
            return False
        sock.settimeout(None)

        with self._state_lock:
            self._me.id = player_id
            self._field = field
            self._players = players
            self._phase = Phase.WAIT
            self._food = 0
            self._sock = sock
            self._connected = True
        log.info("Initialization success")

        self._receiver = threading.Thread(target=self._receive_loop, args=(sock,), daemon=True)
        self._receiver.start()
        return True

    def host(self, height: int, width: int) -> bool:
        """Start a server of the given size in a new process and join it."""
        command = [sys.executable, "-m", "hexclash.host", str(height), str(width), "0"]
        try:
            process = subprocess.Popen(command)
        except OSError as exc:
            log.error("Could not start the server: %s", exc)
            return False
        self._server_process = process

        deadline = time.monotonic() + HOST_TIMEOUT
        while True:
            if self.connect("127.0.0.1"):
                log.info("Host success")
                return True
            if process.poll() is not None or time.monotonic() > deadline:
                return False
            time.sleep(0.2)

    def disconnect(self) -> None:
        """Leave the server; the server itself may keep running."""
        with self._state_lock:
            sock = self._sock
            self._sock = None
            self._connected = False
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        receiver = self._receiver
        if receiver is not None and receiver is not threading.current_thread():
            receiver.join()
        sock.close()
        self._receiver = None
        with self._state_lock:
            self._phase = Phase.WAIT
            self._food = 0
        log.info("Disconnection success")

    def is_connected(self) -> bool:
        """True while the connection to the server is alive."""
        with self._state_lock:
            return self._connected

    def _check_connection(self) -> None:
        if not self.is_connected():
            raise ClientDisconnected("not connected to a server")

    def _send(self, packet: Packet) -> None:
        with self._state_lock:
            sock = self._sock
        if sock is None:
            raise ClientDisconnected("not connected to a server")
        with self._send_lock:
            try:
                send_packet(sock, packet)
            except OSError as exc:
                with self._state_lock:
                    self._connected = False
                raise ClientDisconnected("connection lost while sending") from exc

    # -- receiving -----------------------------------------------------

    def _receive_loop(self, sock: socket.socket) -> None:
        while True:
            log.debug("Client waiting for messages from server")
            try:
                packet = recv_packet(sock)
            except (OSError, ConnectionError):
                break
            try:
                self._handle(packet)
            except PacketError as exc:
                log.error("Malformed packet from server: %s", exc)
        with self._state_lock:
            if self._sock is sock:
                self._connected = False

    def _handle(self, packet: Packet) -> None:
        mtype = read_msg_type(packet)
        if mtype is MsgType.UPD:
            self._handle_update(packet)
        elif mtype is MsgType.TURN:
            player = PlayerData.read(packet)
            log.info("It's %s's turn", player)
            with self._state_lock:
                self._current_player = player
                if player.id == self._me.id:
                    log.info(" - It's your turn")
                    self._phase = Phase.ATTACK
        elif mtype is MsgType.MSG:
            text = packet.read_string()
            with self._state_lock:
                self._messages.append(text)
            if self.echo_messages:
                print(text, flush=True)
        else:
            log.error("Unexpected message type %s", mtype)

    def _handle_update(self, packet: Packet) -> None:
        utype = read_upd_type(packet)
        if utype is UpdType.DISC_PLAYER:
            player = PlayerData.read(packet)
            with self._state_lock:
                for index, known in enumerate(self._players):
                    if known.id == player.id:
                        del self._players[index]
                        break
            log.info("%s disconnected", player)
        elif utype is UpdType.CONN_PLAYER:
            player = PlayerData.read(packet)
            with self._state_lock:
                self._players.append(player)
            log.info("%s connected", player)
        elif utype is UpdType.CELL_UPDATE:
            pos = Vec.read(packet)
            from hexclash.game import Cell

            cell = Cell.read(packet)
            with self._state_lock:
                if self._field.belongs(pos):
                    self._field[pos] = cell
                    log.debug("Cell updated: field%s=%s", pos, cell)
                else:
                    log.error("Cell update outside the field: %s", pos)

    # -- game commands -------------------------------------------------

    def attack(self, who: Vec, whom: Vec) -> bool:
        """Ask the server to attack ``whom`` from ``who``; False if not allowed now."""
        self._check_connection()
        with self._state_lock:
            if self._phase is not Phase.ATTACK or not self._field.may_attack(self._me.id, who, whom):
                return False
        packet = Packet()
        write_msg_type(packet, MsgType.ATTACK)
        who.write(packet)
        whom.write(packet)
        self._send(packet)
        return True

    def feed(self, whom: Vec) -> bool:
        """Ask the server to feed ``whom``; False if not allowed now."""
        self._check_connection()
        with self._state_lock:
            if (
                self._phase is not Phase.FEED
                or not self._field.may_feed(self._me.id, whom)
                or self._food == 0
            ):
                return False
            packet = Packet()
            write_msg_type(packet, MsgType.FEED)
            whom.write(packet)
            self._send(packet)
            self._food -= 1
        return True

    def send_message(self, text: str) -> None:
        """Send a line to the common chat."""
        packet = Packet()
        write_msg_type(packet, MsgType.MSG)
        packet.write_string(text)
        self._send(packet)

    def food_left(self) -> int:
        """Units of food left this turn; zero outside the FEED phase."""
        self._check_connection()
        with self._state_lock:
            return self._food

    def next_phase(self) -> Phase:
        """Move on from ATTACK to FEED, or from FEED to WAIT ending the turn."""
        self._check_connection()
        with self._state_lock:
            if self._phase is Phase.ATTACK:
                self._phase = Phase.FEED
                self._food = self._field.count(self._me.id)
            elif self._phase is Phase.FEED:
                self._phase = Phase.WAIT
                self._food = 0
                self._send(write_msg_type(Packet(), MsgType.TURN))
            return self._phase

    # -- state ---------------------------------------------------------

    def phase(self) -> Phase:
        """The current phase; ATTACK means it is this player's turn."""
        self._check_connection()
        with self._state_lock:
            return self._phase

    def who_am_i(self) -> PlayerData:
        """This player's id and nickname."""
        self._check_connection()
        with self._state_lock:
            return copy.copy(self._me)

    def who_is_playing(self) -> PlayerData:
        """The player whose turn it is."""
        self._check_connection()
        with self._state_lock:
            return copy.copy(self._current_player)

    def field(self) -> Field:
        """The field as this client currently knows it."""
        self._check_connection()
        with self._state_lock:
            return self._field

    def players(self) -> list[PlayerData]:
        """The other players known to this client."""
        self._check_connection()
        with self._state_lock:
            return [copy.copy(player) for player in self._players]

    def messages(self) -> list[str]:
        """Chat history received so far."""
        self._check_connection()
        with self._state_lock:
            return list(self._messages)

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args) -> None:
        self.disconnect()
"""Game server: seats players, relays their moves and passes the turn around."""

from __future__ import annotations

import heapq
import logging
import selectors
import socket
import threading
from dataclasses import dataclass

from hexclash.game import Field, PlayerData, Vec
from hexclash.packet import Packet, PacketError, recv_packet, send_packet
from hexclash.protocol import (
    GAMEPORT,
    MsgType,
    UpdType,
    read_msg_type,
    write_msg_type,
    write_upd_type,
)

log = logging.getLogger(__name__)

INIT_TIMEOUT = 10.0
_POLL_INTERVAL = 0.2


class ListenerError(OSError):
    """Raised when the server cannot listen for players."""


@dataclass(eq=False)
class _Seat:
    sock: socket.socket
    player: PlayerData


class Server:
    """Hosts one game on a field of ``height`` rows and ``width`` columns.

    Call :meth:`accept_first` to wait for the first player, then
    :meth:`start` to serve the game in a background thread. The game ends
    when the last player leaves.
    """

    def __init__(self, height: int, width: int, port: int = GAMEPORT) -> None:
        self._field = Field(width, height)
        try:
            self._listener = socket.create_server(("", port))
        except OSError as exc:
            raise ListenerError(f"cannot listen on port {port}: {exc}") from exc
        self._selector = selectors.DefaultSelector()
        self._selector.register(self._listener, selectors.EVENT_READ, None)
        self._seats: list[_Seat] = []
        self._free_ids: list[int] = []
        self._count = 0
        self._current_pos = 0
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._closed = False

    # -- public --------------------------------------------------------

    def port(self) -> int:
        """The port the server listens on."""
        return self._listener.getsockname()[1]

    def accept_first(self) -> None:
        """Block until the first player has joined."""
        log.info("Server waiting for the first player")
        while self._new_player() is None:
            if self._closed:
                raise ListenerError("server closed while waiting for a player")

    def start(self) -> None:
        """Serve the game in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def busy(self) -> bool:
        """True while at least one player is seated."""
        with self._lock:
            return bool(self._seats)

    def close(self) -> None:
        """Stop serving and drop every connection."""
        if self._closed:
            return
        self._closed = True
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        with self._lock:
            seats = list(self._seats)
            self._seats.clear()
        for seat in seats:
            self._forget(seat)
        try:
            self._selector.unregister(self._listener)
        except (KeyError, ValueError):
            pass
        self._listener.close()
        self._selector.close()

    def __enter__(self) -> "Server":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # -- ids -----------------------------------------------------------

    def _take_id(self) -> int:
        player_id = heapq.heappop(self._free_ids) if self._free_ids else self._count + 1
        self._count += 1
        return player_id

    def _release_id(self, player_id: int) -> None:
        self._count -= 1
        heapq.heappush(self._free_ids, player_id)

    def _forget(self, seat: _Seat) -> None:
        try:
            self._selector.unregister(seat.sock)
        except (KeyError, ValueError):
            pass
        seat.sock.close()
        self._release_id(seat.player.id)

    # -- sending -------------------------------------------------------

    @staticmethod
    def _send(seat: _Seat, packet: Packet) -> None:
        try:
            send_packet(seat.sock, packet)
        except OSError as exc:
            log.debug("Sending to %s failed: %s", seat.player, exc)

    def _broadcast(self, packet: Packet, skip: _Seat | None = None) -> None:
        with self._lock:
            seats = [seat for seat in self._seats if seat is not skip]
        for seat in seats:
            self._send(seat, packet)
        log.debug("Server sent broadcast message")

    def _update_cell(self, pos: Vec, skip: _Seat | None = None) -> None:
        packet = Packet()
        write_msg_type(packet, MsgType.UPD)
        write_upd_type(packet, UpdType.CELL_UPDATE)
        pos.write(packet)
        self._field[pos].write(packet)
        self._broadcast(packet, skip)

    def _player_update(self, utype: UpdType, player: PlayerData, skip: _Seat | None = None) -> None:
        packet = Packet()
        write_msg_type(packet, MsgType.UPD)
        write_upd_type(packet, utype)
        player.write(packet)
        self._broadcast(packet, skip)

    def _chat(self, text: str) -> None:
        packet = Packet()
        write_msg_type(packet, MsgType.MSG)
        packet.write_string(text)
        self._broadcast(packet)

    @staticmethod
    def _turn_packet(player: PlayerData) -> Packet:
        packet = Packet()
        write_msg_type(packet, MsgType.TURN)
        player.write(packet)
        return packet

    def _turn_holder(self) -> PlayerData:
        with self._lock:
            if self._current_pos >= len(self._seats):
                self._current_pos = 0
            return self._seats[self._current_pos].player

    def _next_turn(self) -> None:
        with self._lock:
            if not self._seats:
                return
            self._current_pos += 1
            if self._current_pos >= len(self._seats):
                self._current_pos = 0
            player = self._seats[self._current_pos].player
        self._broadcast(self._turn_packet(player))

    # -- players -------------------------------------------------------

    def _greet(self, seat: _Seat) -> None:
        seat.sock.settimeout(INIT_TIMEOUT)
        hello = recv_packet(seat.sock)
        seat.player.nickname = hello.read_string()

        with self._lock:
            others = [other.player for other in self._seats]
        reply = Packet()
        reply.write_uint16(seat.player.id)
        self._field.write(reply)
        reply.write_int32(len(others))
        for player in others:
            player.write(reply)
        send_packet(seat.sock, reply)
        seat.sock.settimeout(None)
        log.info("%s initialized", seat.player)

    def _new_player(self) -> _Seat | None:
        try:
            sock, _ = self._listener.accept()
        except OSError as exc:
            log.error("Connection failed: %s", exc)
            return None

        player_id = self._take_id()
        try:
            nest = self._field.nest(player_id)
        except ValueError:
            log.error("No room left on the field for a new player")
            self._release_id(player_id)
            sock.close()
            return None

        seat = _Seat(sock, PlayerData(id=player_id))
        try:
            self._greet(seat)
        except (OSError, PacketError) as exc:
            log.error("Player initialization failed: %s", exc)
            self._field.discard(player_id)
            self._release_id(player_id)
            sock.close()
            return None

        self._update_cell(nest)
        with self._lock:
            self._seats.append(seat)
        self._selector.register(sock, selectors.EVENT_READ, seat)

        self._player_update(UpdType.CONN_PLAYER, seat.player)
        self._send(seat, self._turn_packet(self._turn_holder()))
        self._chat(f"{seat.player.nickname} (Player{seat.player.id}) connected")
        log.info("%s connected", seat.player)
        return seat

    def _remove_player(self, seat: _Seat) -> None:
        player = seat.player
        self._chat(f"{player.nickname} (Player{player.id}) disconnected")
        self._player_update(UpdType.DISC_PLAYER, player, skip=seat)
        for pos in self._field.discard(player.id):
            self._update_cell(pos, skip=seat)
        with self._lock:
            self._seats.remove(seat)
        self._forget(seat)

    # -- serving -------------------------------------------------------

    def _process(self, seat: _Seat, packet: Packet) -> None:
        mtype = read_msg_type(packet)
        if mtype is MsgType.TURN:
            self._next_turn()
        elif mtype is MsgType.ATTACK:
            who = Vec.read(packet)
            whom = Vec.read(packet)
            self._field.attack(who, whom)
            self._update_cell(who)
            self._update_cell(whom)
        elif mtype is MsgType.FEED:
            whom = Vec.read(packet)
            self._field.feed(whom)
            self._update_cell(whom)
        elif mtype is MsgType.MSG:
            text = packet.read_string()
            player = seat.player
            self._chat(f"{player.nickname} (Player{player.id}): {text}")
        else:
            log.error("Unknown message structure with type %s", mtype)

    def _serve(self, seat: _Seat) -> None:
        try:
            packet = recv_packet(seat.sock)
        except OSError:
            log.info("%s disconnected", seat.player)
            with self._lock:
                pos = self._seats.index(seat)
            self._remove_player(seat)
            if self._current_pos == pos:
                self._next_turn()
            return
        log.info("Incoming message from %s", seat.player)
        try:
            self._process(seat, packet)
        except (PacketError, IndexError) as exc:
            log.error("Bad message from %s: %s", seat.player, exc)

    def _run(self) -> None:
        while not self._stop.is_set() and self.busy():
            log.debug("Server waiting for incoming messages")
            events = self._selector.select(timeout=_POLL_INTERVAL)
            ready = {key.data for key, _ in events}
            if not ready:
                continue
            if None in ready:
                self._new_player()
                continue
            with self._lock:
                seats = list(self._seats)
            for seat in seats:
                if seat in ready:
                    self._serve(seat)
"""A socket wrapper that sends and receives packets in background threads."""

from __future__ import annotations

import queue
import socket
import threading
from collections import deque

from hexclash.packet import Packet, recv_packet, send_packet


class ChatterBox:
    """Owns a connected socket.

    Incoming packets are collected in order by a receiver thread; outgoing
    packets are queued and written by a sender thread.
    """

    def __init__(self, sock: socket.socket) -> None:
        sock.settimeout(None)
        self._sock = sock
        self._connected = True
        self._closed = False
        self._inbox: deque[Packet] = deque()
        self._cond = threading.Condition()
        self._outbox: "queue.Queue[Packet | None]" = queue.Queue()
        self._rx = threading.Thread(target=self._receive_loop, daemon=True)
        self._tx = threading.Thread(target=self._send_loop, daemon=True)
        self._rx.start()
        self._tx.start()

    def _lose_connection(self) -> None:
        with self._cond:
            self._connected = False
            self._cond.notify_all()

    def _receive_loop(self) -> None:
        while True:
            try:
                packet = recv_packet(self._sock)
            except OSError:
                self._lose_connection()
                return
            with self._cond:
                self._inbox.append(packet)
                self._cond.notify_all()

    def _send_loop(self) -> None:
        while True:
            packet = self._outbox.get()
            if packet is None:
                return
            try:
                send_packet(self._sock, packet)
            except OSError:
                self._lose_connection()
                return

    def send(self, packet: Packet) -> None:
        """Queue a packet for sending; raises ConnectionError when disconnected."""
        if self._closed or not self.is_connected():
            raise ConnectionError("not connected")
        self._outbox.put(Packet(packet.to_bytes()))

    def receive(self) -> Packet | None:
        """The oldest unread packet, or None when there is none."""
        with self._cond:
            return self._inbox.popleft() if self._inbox else None

    def receive_waiting(self, timeout: float | None = None) -> Packet:
        """Wait for the next packet.

        Raises ConnectionError when the connection is gone and nothing is
        left to read, TimeoutError when ``timeout`` seconds pass first.
        """
        with self._cond:
            self._cond.wait_for(lambda: self._inbox or not self._connected, timeout)
            if self._inbox:
                return self._inbox.popleft()
            if not self._connected:
                raise ConnectionError("connection closed")
            raise TimeoutError("no packet arrived in time")

    def is_unread(self) -> bool:
        """True when a received packet is waiting."""
        with self._cond:
            return bool(self._inbox)

    def is_connected(self) -> bool:
        """True while the connection is alive."""
        with self._cond:
            return self._connected

    def close(self) -> None:
        """Flush queued packets, then drop the connection."""
        if self._closed:
            return
        self._closed = True
        self._outbox.put(None)
        self._tx.join()
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._rx.join()
        self._sock.close()
        self._lose_connection()

    def __enter__(self) -> "ChatterBox":
        return self

    def __exit__(self, *args) -> None:
        self.close()
"""Binary packets exchanged between game clients and the server.

Every value is stored in network byte order. A string is a 32-bit length
followed by its UTF-8 bytes. On the wire each packet is preceded by its
size as a 32-bit unsigned integer.
"""

from __future__ import annotations

import socket
import struct

_UINT16 = struct.Struct(">H")
_UINT32 = struct.Struct(">I")
_INT32 = struct.Struct(">i")


class PacketError(ValueError):
    """Raised when a packet cannot be built or decoded."""


class Packet:
    """A growable buffer with typed writers and a read cursor."""

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytearray(data)
        self._pos = 0

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Packet({bytes(self._data)!r})"

    # -- writing -------------------------------------------------------

    def _pack(self, fmt: struct.Struct, value: int, kind: str) -> "Packet":
        try:
            self._data += fmt.pack(value)
        except struct.error as exc:
            raise PacketError(f"value {value!r} does not fit a {kind}") from exc
        return self

    def write_uint16(self, value: int) -> "Packet":
        """Append an unsigned 16-bit integer."""
        return self._pack(_UINT16, value, "uint16")

    def write_uint32(self, value: int) -> "Packet":
        """Append an unsigned 32-bit integer."""
        return self._pack(_UINT32, value, "uint32")

    def write_int32(self, value: int) -> "Packet":
        """Append a signed 32-bit integer."""
        return self._pack(_INT32, value, "int32")

    def write_string(self, text: str) -> "Packet":
        """Append a length-prefixed UTF-8 string."""
        encoded = text.encode("utf-8")
        self.write_uint32(len(encoded))
        self._data += encoded
        return self

    # -- reading -------------------------------------------------------

    def _take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise PacketError(
                f"need {size} bytes at offset {self._pos}, "
                f"only {len(self._data) - self._pos} left"
            )
        chunk = bytes(self._data[self._pos:end])
        self._pos = end
        return chunk

    def read_uint16(self) -> int:
        """Read an unsigned 16-bit integer."""
        return _UINT16.unpack(self._take(_UINT16.size))[0]

    def read_uint32(self) -> int:
        """Read an unsigned 32-bit integer."""
        return _UINT32.unpack(self._take(_UINT32.size))[0]

    def read_int32(self) -> int:
        """Read a signed 32-bit integer."""
        return _INT32.unpack(self._take(_INT32.size))[0]

    def read_string(self) -> str:
        """Read a length-prefixed UTF-8 string."""
        length = self.read_uint32()
        raw = self._take(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PacketError("string is not valid UTF-8") from exc

    # -- inspection ----------------------------------------------------

    def to_bytes(self) -> bytes:
        """Return the whole payload, independent of the read cursor."""
        return bytes(self._data)

    def at_end(self) -> bool:
        """True when every byte of the payload has been read."""
        return self._pos >= len(self._data)


def _recv_exactly(sock: socket.socket, size: int) -> bytes | None:
    """Read exactly ``size`` bytes; None if the peer closed before any arrived."""
    chunks = bytearray()
    while len(chunks) < size:
        chunk = sock.recv(size - len(chunks))
        if not chunk:
            if not chunks:
                return None
            raise ConnectionError("connection closed in the middle of a packet")
        chunks += chunk
    return bytes(chunks)


def send_packet(sock: socket.socket, packet: Packet) -> None:
    """Send one packet, framed with its size."""
    payload = packet.to_bytes()
    sock.sendall(_UINT32.pack(len(payload)) + payload)


def recv_packet(sock: socket.socket) -> Packet:
    """Receive one framed packet.

    Raises ConnectionError when the peer has closed the connection.
    """
    header = _recv_exactly(sock, _UINT32.size)
    if header is None:
        raise ConnectionError("connection closed")
    (size,) = _UINT32.unpack(header)
    if size == 0:
        return Packet()
    payload = _recv_exactly(sock, size)
    if payload is None:
        raise ConnectionError("connection closed in the middle of a packet")
    return Packet(payload)
"""Wire format shared by the client and the server.

Every frame starts with two little-endian 32-bit integers: the operation
code and the payload size. A packet payload is a sequence of values, each
preceded by its own 32-bit length. Text values are sent NUL-terminated.
"""

from __future__ import annotations

import socket
import struct
from dataclasses import dataclass, field
from enum import IntEnum

_INT = struct.Struct("<i")


class OpCode(IntEnum):
    """Operation carried by a frame."""

    MESSAGE = 0
    PACKET = 1


class ProtocolError(Exception):
    """Raised when a frame is malformed or the peer goes away mid-frame."""


def _as_wire_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8") + b"\0"
    return bytes(value)


def _as_text(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


@dataclass
class Packet:
    """A frame under construction."""

    op_code: OpCode = OpCode.PACKET
    payload: bytearray = field(default_factory=bytearray)

    def add(self, value: str | bytes) -> None:
        """Append a length-prefixed value; text is sent NUL-terminated."""
        data = _as_wire_bytes(value)
        self.payload += _INT.pack(len(data))
        self.payload += data

    def serialize(self) -> bytes:
        """Return the complete frame: op code, payload size, payload."""
        return _INT.pack(int(self.op_code)) + _INT.pack(len(self.payload)) + bytes(self.payload)


def encode_message(message: str) -> bytes:
    """Return the frame for a single text message."""
    packet = Packet(OpCode.MESSAGE, bytearray(_as_wire_bytes(message)))
    return packet.serialize()


def decode_values(payload: bytes) -> list[str]:
    """Split a packet payload into its text values."""
    values: list[str] = []
    offset = 0
    while offset < len(payload):
        if offset + _INT.size > len(payload):
            raise ProtocolError("truncated value length")
        (length,) = _INT.unpack_from(payload, offset)
        offset += _INT.size
        if length < 0 or offset + length > len(payload):
            raise ProtocolError(f"invalid value length {length}")
        values.append(_as_text(payload[offset:offset + length]))
        offset += length
    return values


def recv_exact(sock: socket.socket, size: int) -> bytes:
    """Read exactly ``size`` bytes from ``sock``."""
    if size < 0:
        raise ProtocolError(f"invalid size {size}")
    data = bytearray()
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            raise ProtocolError(f"connection closed after {len(data)} of {size} bytes")
        data += chunk
    return bytes(data)


def receive_operation(sock: socket.socket) -> int | None:
    """Read the next op code; close the socket and return None once the peer is gone."""
    try:
        (code,) = _INT.unpack(recv_exact(sock, _INT.size))
    except (ProtocolError, ConnectionError):
        sock.close()
        return None
    return code


def receive_buffer(sock: socket.socket) -> bytes:
    """Read a size-prefixed payload."""
    (size,) = _INT.unpack(recv_exact(sock, _INT.size))
    return recv_exact(sock, size)
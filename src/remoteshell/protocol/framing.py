"""Byte-stream framing shared by the server and the client.

The wire format is plain newline-terminated text. This module reassembles
lines from arbitrary network reads, writes whole buffers despite short
writes, and defines the error types raised when the stream breaks.
"""

from __future__ import annotations

import logging
import socket

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b"\n"


class ProtocolError(Exception):
    """Base class for remoteshell failures."""

    def __init__(self, message: str, role: str = "") -> None:
        super().__init__(message)
        self.role = role


class ConnectionClosedError(ProtocolError):
    """Raised when the peer is gone or the stream can no longer be written."""


def send_all(sock: socket.socket, data: bytes, role: str = "") -> None:
    """Write all of ``data`` to ``sock``.

    Short writes and transient ``InterruptedError``/``BlockingIOError``
    conditions are retried in place. Anything else means the connection
    is unusable.

    Raises:
        ConnectionClosedError: If the peer closed or the send failed.
    """
    view = memoryview(data)
    while view:
        try:
            sent = sock.send(view)
        except (InterruptedError, BlockingIOError):
            continue
        except OSError as e:
            raise ConnectionClosedError(f"send failed: {e}", role=role) from e
        if sent == 0:
            raise ConnectionClosedError("connection closed during send", role=role)
        view = view[sent:]


def trim_command(raw: bytes) -> bytes:
    """Strip leading/trailing whitespace and line terminators."""
    return raw.strip()


class LineAssembler:
    """Fixed-capacity accumulator that splits a byte stream into lines.

    Bytes after the last terminator are kept and joined with the next
    read, so a line split across any number of reads comes out whole.
    The pending buffer never grows past ``capacity``; callers read at
    most :attr:`room` bytes and check :attr:`full` before each read.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._pending = bytearray()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def room(self) -> int:
        return self._capacity - len(self._pending)

    @property
    def full(self) -> bool:
        return len(self._pending) >= self._capacity

    def clear(self) -> None:
        self._pending.clear()

    def feed(self, data: bytes) -> list[bytes]:
        """Add received bytes and return every completed line, in order.

        Returned lines exclude the terminator and are not trimmed.

        Raises:
            ValueError: If ``data`` does not fit in the remaining room.
        """
        if len(data) > self.room:
            raise ValueError(
                f"{len(data)} bytes do not fit in {self.room} bytes of pending space"
            )
        self._pending += data
        lines: list[bytes] = []
        start = 0
        while True:
            end = self._pending.find(LINE_TERMINATOR, start)
            if end == -1:
                break
            lines.append(bytes(self._pending[start:end]))
            start = end + 1
        if start:
            del self._pending[:start]
        return lines

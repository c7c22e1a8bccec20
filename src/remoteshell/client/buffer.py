"""Capacity-capped transcript of everything the server has sent."""

from __future__ import annotations

MAX_LOG_SIZE = 131072
INITIAL_CAPACITY = 4096


def tail_offset(data: bytes | bytearray, lines: int) -> int:
    """Offset where the last ``lines`` lines of ``data`` begin.

    Scans backward from the end and stops right after the ``lines``-th
    newline it crosses; a trailing newline counts. Returns 0 when the
    data holds fewer newlines, and ``len(data)`` when ``lines`` is 0.
    """
    if not data:
        return 0
    if lines <= 0:
        return len(data)
    pos = len(data)
    for _ in range(lines):
        pos = data.rfind(b"\n", 0, pos)
        if pos == -1:
            return 0
    return pos + 1


class OutputLog:
    """Preallocated byte log that keeps only the most recent ``cap`` bytes.

    The backing buffer is allocated at ``initial_capacity`` on the first
    append and doubles whenever an append needs more room. Once the
    content would exceed ``cap`` the oldest bytes are shifted out, so
    after any sequence of appends the log holds exactly the last
    ``min(total_appended, cap)`` bytes in order.
    """

    def __init__(self, cap: int = MAX_LOG_SIZE, initial_capacity: int = INITIAL_CAPACITY) -> None:
        if cap <= 0 or initial_capacity <= 0:
            raise ValueError("cap and initial_capacity must be positive")
        self._cap = cap
        self._initial_capacity = initial_capacity
        self._buf = bytearray()
        self._length = 0
        self._evicted = 0

    @property
    def cap(self) -> int:
        return self._cap

    @property
    def capacity(self) -> int:
        """Size of the allocated backing buffer."""
        return len(self._buf)

    @property
    def evicted(self) -> int:
        """Total bytes dropped from the front so far."""
        return self._evicted

    @property
    def data(self) -> bytes:
        return bytes(self._buf[:self._length])

    def __len__(self) -> int:
        return self._length

    def append(self, chunk: bytes) -> None:
        if not chunk:
            return
        if len(chunk) >= self._cap:
            # The chunk alone fills the log
            self._evicted += self._length + len(chunk) - self._cap
            chunk = chunk[len(chunk) - self._cap:]
            self._length = 0
        else:
            excess = self._length + len(chunk) - self._cap
            if excess > 0:
                keep = self._length - excess
                self._buf[:keep] = self._buf[excess:self._length]
                self._length = keep
                self._evicted += excess

        required = self._length + len(chunk)
        if required > len(self._buf):
            capacity = len(self._buf) or self._initial_capacity
            while capacity < required:
                capacity *= 2
            grown = bytearray(capacity)
            grown[:self._length] = self._buf[:self._length]
            self._buf = grown
        self._buf[self._length:required] = chunk
        self._length = required

    def tail(self, lines: int) -> bytes:
        """The last ``lines`` lines, as :func:`tail_offset` defines them."""
        data = self.data
        return data[tail_offset(data, lines):]

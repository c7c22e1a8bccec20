"""Raw keyboard byte interpretation for the client's command row."""

from __future__ import annotations

from remoteshell.domain.models import KeyAction, KeyEvent

# Control bytes as delivered by a terminal in raw mode
CARRIAGE_RETURN = 0x0D
LINE_FEED = 0x0A
BACKSPACE = 0x08
DELETE = 0x7F
INTERRUPT = 0x03  # Ctrl+C
END_OF_TRANSMISSION = 0x04  # Ctrl+D
TAB = 0x09

_IGNORED = KeyEvent(action=KeyAction.IGNORED)
_EDITED = KeyEvent(action=KeyAction.EDITED)
_EXIT = KeyEvent(action=KeyAction.EXIT)


def is_printable(byte: int) -> bool:
    return 0x20 <= byte <= 0x7E


class CommandLineEditor:
    """The not-yet-submitted command, edited one byte at a time.

    Holds at most ``max_length - 1`` characters; further printable input
    is dropped.
    """

    def __init__(self, max_length: int = 4096) -> None:
        self._max_length = max_length
        self._chars = bytearray()

    @property
    def text(self) -> bytes:
        return bytes(self._chars)

    def __len__(self) -> int:
        return len(self._chars)

    def feed(self, byte: int) -> KeyEvent:
        """Interpret one input byte.

        Enter submits a non-empty command and clears the row. Ctrl+C
        always requests exit; Ctrl+D only does so on an empty row.
        """
        if byte in (CARRIAGE_RETURN, LINE_FEED):
            if not self._chars:
                return _IGNORED
            line = bytes(self._chars)
            self._chars.clear()
            return KeyEvent(action=KeyAction.SUBMITTED, line=line)

        if byte in (DELETE, BACKSPACE):
            if not self._chars:
                return _IGNORED
            del self._chars[-1]
            return _EDITED

        if byte == INTERRUPT:
            return _EXIT

        if byte == END_OF_TRANSMISSION:
            return _EXIT if not self._chars else _IGNORED

        if is_printable(byte) or byte == TAB:
            if len(self._chars) + 1 < self._max_length:
                self._chars.append(byte)
                return _EDITED
        return _IGNORED

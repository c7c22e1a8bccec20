"""Raw input mode and alternate screen for the interactive client.

Entering the scope saves the terminal attributes, disables line
buffering, echo and signal keys, and switches to the alternate screen
with the cursor hidden. Leaving it restores everything exactly once,
whether the session ended normally or with an exception.
"""

from __future__ import annotations

import logging
import termios
from typing import BinaryIO

from remoteshell.protocol.framing import ProtocolError

logger = logging.getLogger(__name__)

ENTER_SCREEN = b"\x1b[?1049h\x1b[2J\x1b[H\x1b[?25l"
LEAVE_SCREEN = b"\x1b[?25h\x1b[?1049l"

# Indexes into the tcgetattr() attribute list
IFLAG, OFLAG, CFLAG, LFLAG, ISPEED, OSPEED, CC = range(7)


class TerminalError(ProtocolError):
    """Raised when the terminal cannot be switched to raw mode."""


def make_raw(attrs: list) -> list:
    """Return a raw-mode copy of ``attrs`` (as returned by ``tcgetattr``)."""
    raw = list(attrs)
    raw[CC] = list(attrs[CC])
    raw[LFLAG] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
    raw[IFLAG] &= ~(termios.IXON | termios.ICRNL)
    raw[OFLAG] &= ~termios.OPOST
    raw[CC][termios.VMIN] = 1
    raw[CC][termios.VTIME] = 0
    return raw


class RawTerminal:
    """Scoped raw mode on ``fd`` plus alternate screen on ``out``.

    Usage::

        with RawTerminal(sys.stdin.fileno(), sys.stdout.buffer):
            run_event_loop()
    """

    def __init__(self, fd: int, out: BinaryIO) -> None:
        self._fd = fd
        self._out = out
        self._saved: list | None = None
        self._screen_active = False

    def enter(self) -> None:
        """Switch to raw mode and the alternate screen.

        Raises:
            TerminalError: If the terminal attributes cannot be changed.
        """
        try:
            saved = termios.tcgetattr(self._fd)
        except termios.error as e:
            raise TerminalError(f"tcgetattr: {e}", role="client") from e
        logger.debug("Switching terminal fd=%d to raw mode", self._fd)
        try:
            termios.tcsetattr(self._fd, termios.TCSAFLUSH, make_raw(saved))
        except termios.error as e:
            raise TerminalError(f"tcsetattr: {e}", role="client") from e
        self._saved = saved

        self._out.write(ENTER_SCREEN)
        self._out.flush()
        self._screen_active = True

    def restore(self) -> None:
        """Undo :meth:`enter`. Safe to call more than once."""
        saved, self._saved = self._saved, None
        error: termios.error | None = None
        if saved is not None:
            try:
                termios.tcsetattr(self._fd, termios.TCSAFLUSH, saved)
            except termios.error as e:
                error = e
        if self._screen_active:
            self._screen_active = False
            self._out.write(LEAVE_SCREEN)
            self._out.flush()

        # Logged only once the normal screen is back
        if error is not None:
            logger.warning("Could not restore terminal attributes: %s", error)
        elif saved is not None:
            logger.debug("Terminal fd=%d restored", self._fd)

    def __enter__(self) -> RawTerminal:
        try:
            self.enter()
        except BaseException:
            self.restore()
            raise
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.restore()

"""Full-screen redraw of the scrollback view and the command row.

Every render re-queries the terminal size, so resizes between renders are
picked up without any signal handling. No scroll position is stored: the
visible window is always the tail of the output log.
"""

from __future__ import annotations

import os
from typing import BinaryIO, Callable

from remoteshell.client.buffer import OutputLog, tail_offset

CURSOR_HOME = b"\x1b[H"
CLEAR_TO_EOL = b"\x1b[K"
# OPOST is off in raw mode, so a bare LF would not return the carriage.
ROW_BREAK = b"\r\n"

DEFAULT_LABEL = b"Command: "
DEFAULT_ROWS = 24
DEFAULT_COLS = 80


def terminal_size(
    fd: int,
    fallback: tuple[int, int] = (DEFAULT_ROWS, DEFAULT_COLS),
) -> tuple[int, int]:
    """Current ``(rows, cols)`` of the terminal on ``fd``, or ``fallback``."""
    try:
        size = os.get_terminal_size(fd)
    except OSError:
        return fallback
    if size.lines == 0 or size.columns == 0:
        return fallback
    return size.lines, size.columns


def visible_command(command: bytes, cols: int, label: bytes = DEFAULT_LABEL) -> bytes:
    """The part of ``command`` that fits after ``label``.

    When the command is wider than the space left, its most recent
    characters are shown, so the row scrolls as the user types.
    """
    max_visible = cols - len(label) if cols > len(label) else 0
    if len(command) > max_visible and max_visible > 0:
        return command[len(command) - max_visible:]
    return command


def compose_frame(
    data: bytes,
    command: bytes,
    rows: int,
    cols: int,
    label: bytes = DEFAULT_LABEL,
) -> bytes:
    """Build the escape-sequence stream for one full redraw.

    One row is reserved for the command; the rest show the tail of
    ``data``. Unused rows are blanked.
    """
    rows = max(rows, 1)
    content_rows = rows - 1

    parts = [CURSOR_HOME]
    cursor = tail_offset(data, content_rows)
    end = len(data)
    for _ in range(content_rows):
        if cursor < end:
            newline = data.find(b"\n", cursor)
            if newline == -1:
                parts.append(data[cursor:])
                cursor = end
            else:
                parts.append(data[cursor:newline])
                cursor = newline + 1
        parts.append(CLEAR_TO_EOL)
        parts.append(ROW_BREAK)

    parts.append(CLEAR_TO_EOL)
    parts.append(label)
    parts.append(visible_command(command, cols, label))
    parts.append(CLEAR_TO_EOL)
    return b"".join(parts)


class Renderer:
    """Writes frames for an :class:`OutputLog` to a terminal stream."""

    def __init__(
        self,
        out: BinaryIO,
        label: bytes = DEFAULT_LABEL,
        size_provider: Callable[[], tuple[int, int]] | None = None,
        fallback: tuple[int, int] = (DEFAULT_ROWS, DEFAULT_COLS),
    ) -> None:
        self._out = out
        self._label = label
        if size_provider is None:
            try:
                fd = out.fileno()
            except OSError:
                # In-memory stream, no terminal behind it
                fd = -1

            def size_provider() -> tuple[int, int]:
                if fd < 0:
                    return fallback
                return terminal_size(fd, fallback)

        self._size_provider = size_provider

    def render(self, log: OutputLog, command: bytes) -> None:
        rows, cols = self._size_provider()
        frame = compose_frame(log.data, command, rows, cols, self._label)
        self._out.write(frame)
        self._out.flush()

"""Fixed text lines exchanged over the wire and shown to the user."""

from __future__ import annotations

EXIT_SENTINELS = frozenset({b"exit", b"quit"})

SESSION_TERMINATED = b"[session terminated]\n"
EXIT_REQUEST = b"exit\n"
BUFFER_CLEARED = b"remote server: command too long, clearing buffer\n"
CONNECTION_CLOSED_NOTICE = b"Connection closed by remote host.\n"


def is_exit_sentinel(command: bytes) -> bool:
    """Exact match only: ``exit`` ends the session, ``exit 1`` is a command."""
    return command in EXIT_SENTINELS


def prompt_line(command: bytes) -> bytes:
    return b"$ " + command + b"\n"


def command_too_long(command_max: int) -> bytes:
    return (
        f"remote server: command exceeded {command_max - 1} characters "
        "and was ignored\n"
    ).encode()


def spawn_failed(command: bytes, reason: str) -> bytes:
    return (
        b"remote server: failed to run '"
        + command
        + b"': "
        + reason.encode(errors="replace")
        + b"\n"
    )

"""Core domain models for remoteshell.

These models describe the values that cross component boundaries: how a
shell command ended on the server, and what a single keystroke meant to
the client's command row.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TerminationKind(str, enum.Enum):
    """How a subprocess ended."""

    EXITED = "exited"  # Normal exit with a status code
    SIGNALED = "signaled"  # Killed by a signal
    FINISHED = "finished"  # Ended, but no status could be retrieved


class KeyAction(str, enum.Enum):
    """The effect of one keystroke on the client."""

    IGNORED = "ignored"  # Nothing changed, no redraw needed
    EDITED = "edited"  # The in-progress command changed
    SUBMITTED = "submitted"  # A command line is ready to send
    EXIT = "exit"  # The user asked to leave the session


# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


class CommandOutcome(BaseModel):
    """Termination outcome of one executed command.

    Built from a ``Popen.returncode``: non-negative values are exit codes,
    negative values are the numbers of terminating signals.
    """

    model_config = ConfigDict(frozen=True)

    kind: TerminationKind
    code: int | None = Field(default=None, description="Exit status or signal number")

    @classmethod
    def from_returncode(cls, returncode: int | None) -> CommandOutcome:
        if returncode is None:
            return cls(kind=TerminationKind.FINISHED)
        if returncode < 0:
            return cls(kind=TerminationKind.SIGNALED, code=-returncode)
        return cls(kind=TerminationKind.EXITED, code=returncode)

    def trailer(self) -> bytes:
        """The status trailer sent after the command's output."""
        if self.kind is TerminationKind.EXITED:
            return f"\n[command exited with status {self.code}]\n".encode()
        if self.kind is TerminationKind.SIGNALED:
            return f"\n[command terminated by signal {self.code}]\n".encode()
        return b"\n[command finished]\n"


# ---------------------------------------------------------------------------
# Keyboard
# ---------------------------------------------------------------------------


class KeyEvent(BaseModel):
    """Result of feeding one input byte to the command line editor."""

    model_config = ConfigDict(frozen=True)

    action: KeyAction
    line: bytes | None = Field(default=None, description="Submitted command, without terminator")

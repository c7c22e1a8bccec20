"""Domain models for remoteshell.

This package contains the small value objects and enumerations shared by
the server and the client. All models use Pydantic v2 for validation.
"""

from remoteshell.domain.models import (
    CommandOutcome,
    KeyAction,
    KeyEvent,
    TerminationKind,
)

__all__ = [
    "CommandOutcome",
    "KeyAction",
    "KeyEvent",
    "TerminationKind",
]

"""Command server for remoteshell.

Accepts one TCP connection at a time, runs each received command line
through the shell and streams its standard output back, followed by a
status trailer.
"""

from remoteshell.server.executor import CommandExecution, CommandSpawnError
from remoteshell.server.listener import RemoteServer, ServerSetupError, run_server
from remoteshell.server.session import CommandSession, SessionEnd

__all__ = [
    "CommandExecution",
    "CommandSession",
    "CommandSpawnError",
    "RemoteServer",
    "ServerSetupError",
    "SessionEnd",
    "run_server",
]

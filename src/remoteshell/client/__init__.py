"""Interactive client for remoteshell.

Connects to a command server, switches the local terminal to raw mode on
the alternate screen and shows a scrollback view of the server's output
above a single command row.

Public API:
    run_client -- Connect and run an interactive session
    SessionController -- The event loop over socket and keyboard
    OutputLog -- Capacity-capped output transcript
"""

from remoteshell.client.buffer import OutputLog, tail_offset
from remoteshell.client.keys import CommandLineEditor
from remoteshell.client.render import Renderer, compose_frame
from remoteshell.client.session import SessionController, run_client
from remoteshell.client.terminal import RawTerminal, TerminalError

__all__ = [
    "CommandLineEditor",
    "OutputLog",
    "RawTerminal",
    "Renderer",
    "SessionController",
    "TerminalError",
    "compose_frame",
    "run_client",
    "tail_offset",
]

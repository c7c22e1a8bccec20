"""Per-connection command session.

Reads newline-terminated command lines from one connected peer, runs
each through the shell and streams back the prompt echo, the output and
a status trailer. A command's trailer is always sent before the next line
is dispatched.
"""

from __future__ import annotations

import enum
import logging
import socket

from remoteshell.config.settings import ServerConfig
from remoteshell.protocol import messages
from remoteshell.protocol.framing import (
    ConnectionClosedError,
    LineAssembler,
    send_all,
    trim_command,
)
from remoteshell.server.executor import CommandExecution, CommandSpawnError

logger = logging.getLogger(__name__)


class SessionEnd(str, enum.Enum):
    """Why a session ended without error."""

    PEER_CLOSED = "peer_closed"
    CLIENT_EXIT = "client_exit"


class CommandSession:
    """Services a single accepted connection until it ends.

    The session owns no socket lifetime: the caller closes ``conn``
    afterwards.
    """

    def __init__(self, conn: socket.socket, config: ServerConfig | None = None) -> None:
        self._conn = conn
        self._config = config or ServerConfig()
        self._assembler = LineAssembler(capacity=self._config.command_max * 2)

    def run(self) -> SessionEnd:
        """Run the session loop.

        Returns:
            Why the session ended.

        Raises:
            ConnectionClosedError: If sending or receiving fails.
        """
        self._send(self._config.banner.encode())

        while True:
            if self._assembler.full:
                logger.warning("Pending input exceeded %d bytes, clearing", self._assembler.capacity)
                self._assembler.clear()
                self._send(messages.BUFFER_CLEARED)

            try:
                data = self._conn.recv(self._assembler.room)
            except (InterruptedError, BlockingIOError):
                continue
            except OSError as e:
                raise ConnectionClosedError(f"receive failed: {e}", role="server") from e
            if not data:
                logger.info("Peer closed the connection")
                return SessionEnd.PEER_CLOSED

            for line in self._assembler.feed(data):
                if not self.dispatch(line):
                    return SessionEnd.CLIENT_EXIT

    def dispatch(self, line: bytes) -> bool:
        """Handle one raw line; return False when the session should end."""
        command_max = self._config.command_max
        if len(line) >= command_max:
            logger.warning("Ignoring %d-byte command line", len(line))
            self._send(messages.command_too_long(command_max))
            return True

        command = trim_command(line)
        if not command:
            return True

        if messages.is_exit_sentinel(command):
            try:
                self._send(messages.SESSION_TERMINATED)
            except ConnectionClosedError:
                logger.debug("Peer left before the farewell was sent")
            return False

        self._execute(command)
        return True

    def _execute(self, command: bytes) -> None:
        logger.debug("Running command: %r", command)
        self._send(messages.prompt_line(command))

        try:
            execution = CommandExecution.spawn(
                command,
                shell=self._config.shell,
                chunk_size=self._config.io_buffer,
            )
        except CommandSpawnError as e:
            logger.warning("Failed to run %r: %s", command, e)
            self._send(messages.spawn_failed(command, str(e)))
            return

        with execution:
            for chunk in execution:
                self._send(chunk)
            outcome = execution.wait()
        self._send(outcome.trailer())

    def _send(self, data: bytes) -> None:
        send_all(self._conn, data, role="server")

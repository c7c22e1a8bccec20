"""Interactive client session: event loop over the socket and keyboard.

A single thread blocks in ``select`` on exactly two inputs, the server
connection and the keyboard, with no timeout. Server bytes are appended
to the output log; keystrokes edit the command row. Both redraw the
screen from scratch.
"""

from __future__ import annotations

import enum
import logging
import os
import select
import socket
import sys
from typing import BinaryIO

from remoteshell.client.buffer import OutputLog
from remoteshell.client.keys import CommandLineEditor
from remoteshell.client.render import Renderer
from remoteshell.client.terminal import RawTerminal, TerminalError
from remoteshell.config.settings import ClientConfig
from remoteshell.domain.models import KeyAction
from remoteshell.protocol import messages
from remoteshell.protocol.framing import ConnectionClosedError, send_all

logger = logging.getLogger(__name__)


class LoopExit(str, enum.Enum):
    """Why the event loop stopped."""

    PEER_CLOSED = "peer_closed"
    USER_EXIT = "user_exit"
    ERROR = "error"


class SessionController:
    """State of one interactive session, threaded through the event loop.

    Args:
        sock: Connected server socket.
        keyboard_fd: File descriptor delivering raw key bytes.
        renderer: Draws the view after every change.
        config: Client tuning values.
    """

    def __init__(
        self,
        sock: socket.socket,
        keyboard_fd: int,
        renderer: Renderer,
        config: ClientConfig | None = None,
    ) -> None:
        self._sock = sock
        self._keyboard_fd = keyboard_fd
        self._renderer = renderer
        self._config = config or ClientConfig()
        self._log = OutputLog(
            cap=self._config.log_cap,
            initial_capacity=self._config.initial_capacity,
        )
        self._editor = CommandLineEditor(max_length=self._config.command_max)
        self._error: str | None = None
        self._exit_request_error: str | None = None

    @property
    def log(self) -> OutputLog:
        return self._log

    @property
    def editor(self) -> CommandLineEditor:
        return self._editor

    @property
    def error(self) -> str | None:
        """Description of the failure that ended the loop, if any."""
        return self._error

    @property
    def exit_request_error(self) -> str | None:
        """Why the best-effort exit request could not be sent, if it failed."""
        return self._exit_request_error

    def run(self) -> int:
        """Run until the peer closes, the user exits or I/O fails.

        Returns:
            0 for a clean end, 1 when the loop stopped on an error.
        """
        self._render()
        reason = self._loop()
        if reason is LoopExit.USER_EXIT:
            try:
                send_all(self._sock, messages.EXIT_REQUEST, role="client")
            except ConnectionClosedError as e:
                self._exit_request_error = str(e)
        return 1 if reason is LoopExit.ERROR else 0

    def _loop(self) -> LoopExit:
        watched = [self._sock, self._keyboard_fd]
        while True:
            try:
                readable, _, _ = select.select(watched, [], [])
            except OSError as e:
                return self._fail(f"select: {e}")

            if self._sock in readable:
                reason = self._on_socket_readable()
                if reason is not None:
                    return reason

            if self._keyboard_fd in readable:
                reason = self._on_keyboard_readable()
                if reason is not None:
                    return reason

    def _on_socket_readable(self) -> LoopExit | None:
        try:
            data = self._sock.recv(self._config.io_buffer)
        except (InterruptedError, BlockingIOError):
            return None
        except OSError as e:
            return self._fail(f"recv: {e}")
        if not data:
            self._log.append(messages.CONNECTION_CLOSED_NOTICE)
            self._render()
            return LoopExit.PEER_CLOSED
        self._log.append(data)
        self._render()
        return None

    def _on_keyboard_readable(self) -> LoopExit | None:
        try:
            data = os.read(self._keyboard_fd, 1)
        except (InterruptedError, BlockingIOError):
            return None
        except OSError as e:
            return self._fail(f"read: {e}")
        if not data:
            return LoopExit.USER_EXIT

        event = self._editor.feed(data[0])
        if event.action is KeyAction.EXIT:
            return LoopExit.USER_EXIT
        if event.action is KeyAction.SUBMITTED:
            try:
                send_all(self._sock, event.line + b"\n", role="client")
            except ConnectionClosedError as e:
                return self._fail(str(e))
        if event.action is not KeyAction.IGNORED:
            self._render()
        return None

    def _render(self) -> None:
        self._renderer.render(self._log, self._editor.text)

    def _fail(self, message: str) -> LoopExit:
        self._error = message
        return LoopExit.ERROR


def connect(host: str, port: int) -> socket.socket:
    """Connect to the first reachable address of ``host``.

    Raises:
        ConnectionClosedError: If resolution or every connection attempt fails.
    """
    try:
        return socket.create_connection((host, port))
    except socket.gaierror as e:
        raise ConnectionClosedError(f"getaddrinfo: {e}", role="client") from e
    except OSError as e:
        raise ConnectionClosedError(
            f"failed to connect to {host}:{port}: {e}", role="client"
        ) from e


def run_client(
    host: str,
    port: int,
    config: ClientConfig | None = None,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> int:
    """Run an interactive session against ``host:port``; returns an exit code."""
    config = config or ClientConfig()
    stdin = stdin or sys.stdin.buffer
    stdout = stdout or sys.stdout.buffer

    try:
        sock = connect(host, port)
    except ConnectionClosedError as e:
        logger.error("remote client: %s", e)
        return 1

    with sock:
        renderer = Renderer(
            stdout,
            label=config.prompt_label.encode(),
            fallback=(config.fallback_rows, config.fallback_cols),
        )
        controller = SessionController(sock, stdin.fileno(), renderer, config)
        try:
            with RawTerminal(stdin.fileno(), stdout):
                status = controller.run()
        except TerminalError as e:
            logger.error("remote client: %s", e)
            return 1

    # Only now is the normal screen back, so errors stay visible.
    if controller.error:
        logger.error("remote client: %s", controller.error)
    if controller.exit_request_error:
        logger.debug("Could not send exit request: %s", controller.exit_request_error)
    logger.info(
        "Disconnected from %s:%s (%d bytes of scrollback discarded)",
        host, port, controller.log.evicted,
    )
    return status

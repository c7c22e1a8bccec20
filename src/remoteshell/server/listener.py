"""TCP accept loop for the command server.

Connections are serviced strictly one after another: a second client
waits in the listen backlog until the current session has ended. Only
one remote shell is ever active.
"""

from __future__ import annotations

import logging
import socket

from remoteshell.config.settings import ServerConfig
from remoteshell.protocol.framing import ProtocolError
from remoteshell.server.session import CommandSession

logger = logging.getLogger(__name__)


class ServerSetupError(ProtocolError):
    """Raised when the server cannot resolve, bind or accept."""


class RemoteServer:
    """Listens on a bind address and runs one :class:`CommandSession` at a time.

    Usage::

        with RemoteServer("0.0.0.0", 23456) as server:
            server.serve_forever()
    """

    def __init__(
        self,
        bind_address: str,
        port: int,
        config: ServerConfig | None = None,
    ) -> None:
        self._bind_address = bind_address
        self._port = port
        self._config = config or ServerConfig()
        self._sock: socket.socket | None = None

    @property
    def is_listening(self) -> bool:
        return self._sock is not None

    @property
    def address(self) -> tuple:
        """The actual bound socket address (useful with port 0)."""
        if self._sock is None:
            raise ServerSetupError("server is not listening", role="server")
        return self._sock.getsockname()

    def bind(self) -> None:
        """Resolve the bind address and listen on the first usable candidate.

        Raises:
            ServerSetupError: If resolution fails or no candidate can listen.
        """
        try:
            candidates = socket.getaddrinfo(
                self._bind_address,
                self._port,
                socket.AF_UNSPEC,
                socket.SOCK_STREAM,
                0,
                socket.AI_PASSIVE,
            )
        except socket.gaierror as e:
            raise ServerSetupError(f"getaddrinfo: {e}", role="server") from e

        for family, socktype, proto, _, sockaddr in candidates:
            try:
                sock = socket.socket(family, socktype, proto)
            except OSError:
                continue
            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                sock.bind(sockaddr)
                sock.listen(self._config.backlog)
            except OSError as e:
                logger.debug("Cannot listen on %s: %s", sockaddr, e)
                sock.close()
                continue
            self._sock = sock
            break
        else:
            raise ServerSetupError("failed to set up listening socket", role="server")

        logger.info("remote server listening on %s:%s", self._bind_address, self._port)

    def handle_one(self) -> None:
        """Accept one connection and service it to completion.

        Session failures are logged and do not propagate.

        Raises:
            ServerSetupError: If accept fails.
        """
        if self._sock is None:
            raise ServerSetupError("server is not listening", role="server")
        try:
            conn, peer = self._sock.accept()
        except OSError as e:
            raise ServerSetupError(f"accept: {e}", role="server") from e

        with conn:
            try:
                host, port = socket.getnameinfo(
                    peer, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
                )
            except socket.gaierror:
                host, port = "unknown", "?"
            logger.info("remote server: connection from %s:%s", host, port)
            try:
                end = CommandSession(conn, self._config).run()
            except ProtocolError as e:
                logger.warning("remote server: client handling failed: %s", e)
            else:
                logger.info("Session with %s:%s ended (%s)", host, port, end.value)

    def serve_forever(self) -> None:
        """Accept and service connections until accept fails.

        Raises:
            ServerSetupError: When the loop cannot continue.
        """
        if self._sock is None:
            self.bind()
        while True:
            self.handle_one()

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> RemoteServer:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()


def run_server(bind_address: str, port: int, config: ServerConfig | None = None) -> int:
    """Run the command server; returns a process exit code."""
    with RemoteServer(bind_address, port, config) as server:
        try:
            server.bind()
            server.serve_forever()
        except ServerSetupError as e:
            logger.error("remote server: %s", e)
    return 1

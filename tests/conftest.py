"""Shared test fixtures for the remoteshell test suite.

Provides connected socket pairs, keyboard pipes, small configurations
and a helper that drains a socket until the peer closes it.
"""

from __future__ import annotations

import os
import signal
import socket
from typing import Iterator

import pytest

from remoteshell.config.settings import ClientConfig, ServerConfig


# ---------------------------------------------------------------------------
# Configuration Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def server_config() -> ServerConfig:
    """Server config with a short banner and a small command limit."""
    return ServerConfig(banner="hello\n", command_max=64)


@pytest.fixture
def client_config() -> ClientConfig:
    """Client config with a tiny output log cap."""
    return ClientConfig(log_cap=256, initial_capacity=16, command_max=32)


# ---------------------------------------------------------------------------
# I/O Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def socket_pair() -> Iterator[tuple[socket.socket, socket.socket]]:
    """A connected (local, peer) stream socket pair, closed afterwards."""
    local, peer = socket.socketpair()
    local.settimeout(10)
    peer.settimeout(10)
    yield local, peer
    local.close()
    peer.close()


@pytest.fixture
def keyboard_pipe() -> Iterator[tuple[int, int]]:
    """A (read_fd, write_fd) pipe standing in for the keyboard."""
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        try:
            os.close(fd)
        except OSError:
            pass


def _read_until_closed(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        data = sock.recv(4096)
        if not data:
            return b"".join(chunks)
        chunks.append(data)


@pytest.fixture
def read_until_closed():
    """Helper that reads from a socket until the other side shuts down."""
    return _read_until_closed


@pytest.fixture
def sigchld_ignored() -> Iterator[None]:
    """Ignore SIGCHLD so exited children are reaped by the kernel."""
    previous = signal.signal(signal.SIGCHLD, signal.SIG_IGN)
    yield
    signal.signal(signal.SIGCHLD, previous)

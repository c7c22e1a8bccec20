"""One-shot shell command execution for the command server.

Each command runs as ``<shell> -c <command>`` with its standard output
piped back to the server. Standard error is not captured: the child
inherits the server's stderr, so error text shows up on the operator's
console and never reaches the remote peer.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Iterator

from remoteshell.domain.models import CommandOutcome
from remoteshell.protocol.framing import ProtocolError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096


class CommandSpawnError(ProtocolError):
    """Raised when a command's subprocess cannot be started."""


class CommandExecution:
    """A running command and the stream of its standard output.

    Iterating yields the output as byte chunks of at most ``chunk_size``
    bytes, as they become available, until the child closes its stdout.
    The sequence is finite and can only be consumed once. :meth:`wait`
    then reaps the child and reports how it ended.

    Usage::

        with CommandExecution.spawn(b"ls -l") as execution:
            for chunk in execution:
                forward(chunk)
            outcome = execution.wait()
    """

    def __init__(self, process: subprocess.Popen, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._process = process
        self._chunk_size = chunk_size
        self._consumed = False
        self._outcome: CommandOutcome | None = None

    @classmethod
    def spawn(
        cls,
        command: bytes,
        shell: str = "/bin/sh",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> CommandExecution:
        """Start ``command`` through ``shell``.

        Raises:
            CommandSpawnError: If the shell cannot be executed.
        """
        try:
            process = subprocess.Popen(
                command,
                shell=True,
                executable=shell,
                stdout=subprocess.PIPE,
                bufsize=0,
            )
        except OSError as e:
            raise CommandSpawnError(e.strerror or str(e), role="server") from e
        except ValueError as e:
            # Embedded NUL bytes cannot be passed to exec.
            raise CommandSpawnError(str(e), role="server") from e
        logger.debug("Spawned pid=%d: %r", process.pid, command)
        return cls(process, chunk_size=chunk_size)

    def __iter__(self) -> Iterator[bytes]:
        if self._consumed:
            raise RuntimeError("command output has already been consumed")
        self._consumed = True
        return self._read_chunks()

    def _read_chunks(self) -> Iterator[bytes]:
        stdout = self._process.stdout
        while True:
            chunk = stdout.read(self._chunk_size)
            if not chunk:
                return
            yield chunk

    def wait(self) -> CommandOutcome:
        """Reap the child and return its termination outcome.

        Reaps with ``waitpid`` directly; ``Popen.wait`` maps ECHILD to exit
        status 0.
        """
        if self._outcome is None:
            self._outcome = CommandOutcome.from_returncode(self._reap())
            logger.debug(
                "pid=%d ended: %s %s",
                self._process.pid, self._outcome.kind.value, self._outcome.code,
            )
        return self._outcome

    def _reap(self) -> int | None:
        if self._process.returncode is not None:
            return self._process.returncode
        try:
            _, status = os.waitpid(self._process.pid, 0)
        except ChildProcessError:
            logger.warning("Could not retrieve status of pid=%d", self._process.pid)
            # Settles Popen's own bookkeeping; its status is not used
            self._process.poll()
            return None
        self._process.returncode = os.waitstatus_to_exitcode(status)
        return self._process.returncode

    def close(self) -> None:
        """Close the output pipe and reap the child."""
        if self._process.stdout is not None:
            self._process.stdout.close()
        if self._outcome is None:
            self.wait()

    def __enter__(self) -> CommandExecution:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()

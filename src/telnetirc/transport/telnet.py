"""
Subprocess transport.

Spawns an external telnet client and uses it as the network endpoint. The
relay writes to the child's stdin and reads whatever the child prints on its
stdout, so the child's own banner ("Trying ...", "Connected to ...") is
relayed like any other peer output.
"""

import os
import subprocess

from telnetirc.exceptions import HostConnectionError, TransportError
from telnetirc.models.enums import TransportKind
from telnetirc.transport.base import Transport
from telnetirc.utils.logger import get_logger

logger = get_logger(__name__)

# Seconds to wait for the child after SIGTERM before killing it
TERMINATE_TIMEOUT = 2.0


class TelnetTransport(Transport):
    """Transport backed by a telnet child process and its standard streams."""

    kind = TransportKind.TELNET

    def __init__(self, process: subprocess.Popen):
        self._process = process
        self._closed = False

    @classmethod
    def spawn(cls, address: str, port: int, telnet_path: str) -> "TelnetTransport":
        """
        Start ``telnet_path address port`` with piped stdin/stdout.

        Raises:
            HostConnectionError: The binary could not be started.
        """
        argv = [telnet_path, address, str(port)]
        logger.debug(f"Spawning {' '.join(argv)}")
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                bufsize=0,
            )
        except OSError as e:
            raise HostConnectionError(
                address, port, f"could not start {telnet_path}: {e.strerror or e}"
            ) from e

        logger.debug(f"telnet running as pid {process.pid}")
        return cls(process)

    @property
    def pid(self) -> int:
        return self._process.pid

    def fileno(self) -> int:
        return self._process.stdout.fileno()

    def read(self, size: int) -> bytes:
        try:
            return os.read(self.fileno(), size)
        except OSError as e:
            raise TransportError(f"Pipe read failed: {e}") from e

    def write(self, data: bytes) -> None:
        try:
            self._process.stdin.write(data)
            self._process.stdin.flush()
        except OSError as e:
            raise TransportError(f"Pipe write failed: {e}") from e

    def exited(self) -> bool:
        return self._process.poll() is not None

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        for pipe in (self._process.stdin, self._process.stdout):
            try:
                pipe.close()
            except OSError:
                pass

        if self._process.poll() is None:
            self._process.terminate()
            try:
                self._process.wait(timeout=TERMINATE_TIMEOUT)
            except subprocess.TimeoutExpired:
                logger.warning(f"telnet (pid {self.pid}) ignored SIGTERM, killing.")
                self._process.kill()
                self._process.wait()

        logger.debug(
            f"Telnet transport closed (exit code {self._process.returncode})."
        )

    @property
    def closed(self) -> bool:
        return self._closed

"""
Direct TCP transport.

Resolves the IRC host to its first IPv4 address and connects a plain
AF_INET stream socket to it.
"""

import socket

from telnetirc.exceptions import HostConnectionError, ResolutionError, TransportError
from telnetirc.models.enums import TransportKind
from telnetirc.transport.base import Transport
from telnetirc.utils.logger import get_logger

logger = get_logger(__name__)


def resolve_host(hostname: str) -> str:
    """
    Get the first IPv4 address (A record) for a hostname.

    Args:
        hostname: Host name or dotted-quad address.

    Returns:
        The address as a dotted-quad string.

    Raises:
        ResolutionError: No IPv4 address exists for the name.
    """
    try:
        address = socket.gethostbyname(hostname)
    except (socket.gaierror, socket.herror, UnicodeError) as e:
        logger.debug(f"Resolution of {hostname!r} failed: {e}")
        raise ResolutionError(hostname) from e

    logger.debug(f"Resolved {hostname} to {address}")
    return address


class SocketTransport(Transport):
    """Transport backed by a connected TCP socket."""

    kind = TransportKind.SOCKET

    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._closed = False

    @classmethod
    def connect(cls, address: str, port: int) -> "SocketTransport":
        """
        Open a TCP connection to ``address:port``.

        Raises:
            HostConnectionError: Socket creation or connect failed.
        """
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as e:
            raise HostConnectionError(address, port, "could not create socket") from e

        try:
            sock.connect((address, port))
        except OSError as e:
            sock.close()
            raise HostConnectionError(address, port, e.strerror or str(e)) from e

        logger.debug(f"Connected to {address}:{port}")
        return cls(sock)

    def fileno(self) -> int:
        return self._sock.fileno()

    def read(self, size: int) -> bytes:
        try:
            return self._sock.recv(size)
        except OSError as e:
            raise TransportError(f"Socket read failed: {e}") from e

    def write(self, data: bytes) -> None:
        try:
            self._sock.sendall(data)
        except OSError as e:
            raise TransportError(f"Socket write failed: {e}") from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer may already be gone
            pass
        self._sock.close()
        logger.debug("Socket transport closed.")

    @property
    def closed(self) -> bool:
        return self._closed

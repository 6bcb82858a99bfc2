"""
Transport capability shared by every connection flavour.

A transport is one duplex byte channel to the IRC peer. The relay only sees
this interface, never the socket or pipes behind it.
"""

import array
import fcntl
import termios
from abc import ABC, abstractmethod

from telnetirc.exceptions import TransportError
from telnetirc.models.enums import TransportKind


def bytes_available(fd: int) -> int:
    """
    Number of bytes that can be read from ``fd`` without blocking.

    Uses the FIONREAD ioctl, which works for sockets, pipes and terminals.
    """
    buf = array.array("i", [0])
    fcntl.ioctl(fd, termios.FIONREAD, buf, True)
    return buf[0]


class Transport(ABC):
    """Duplex byte channel to the remote peer."""

    kind: TransportKind

    @abstractmethod
    def fileno(self) -> int:
        """File descriptor that becomes readable when peer data arrives."""

    def available(self) -> int:
        """Bytes of peer data immediately readable."""
        try:
            return bytes_available(self.fileno())
        except OSError as e:
            raise TransportError(f"Could not query pending bytes: {e}") from e

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read at most ``size`` bytes; empty bytes means end-of-stream."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write all of ``data`` to the peer."""

    @abstractmethod
    def close(self) -> None:
        """Release the channel. Calling it again is a no-op."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether close() has already run."""

    def exited(self) -> bool:
        """Whether a companion process backing this transport has exited."""
        return False

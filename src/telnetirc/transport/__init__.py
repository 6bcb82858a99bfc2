"""
Transports connecting the relay to an IRC server.

Two interchangeable implementations exist: a direct TCP socket and a telnet
child process driven through its standard streams.
"""

from telnetirc.config import MAX_PORT, MIN_PORT, config
from telnetirc.exceptions import UsageError
from telnetirc.models.enums import TransportKind
from telnetirc.transport.base import Transport, bytes_available
from telnetirc.transport.socket_transport import SocketTransport, resolve_host
from telnetirc.transport.telnet import TelnetTransport
from telnetirc.utils.logger import get_logger

logger = get_logger(__name__)


def validate_port(port: int) -> int:
    """Reject ports outside 1..65535."""
    if not MIN_PORT <= port <= MAX_PORT:
        raise UsageError(f"The provided port was invalid: {port}")
    return port


def open_transport(
    hostname: str,
    port: int | None = None,
    kind: TransportKind | None = None,
    announce=print,
) -> Transport:
    """
    Resolve ``hostname`` and open a transport to it.

    Args:
        hostname: IRC server name or address.
        port: Remote port (config.DEFAULT_PORT when None).
        kind: Transport implementation (config.TRANSPORT when None).
        announce: Callable receiving the human-readable status line.

    Raises:
        UsageError: Port outside 1..65535 (checked before resolution).
        ResolutionError: Hostname has no IPv4 address.
        HostConnectionError: Connecting or spawning failed.
    """
    port = validate_port(config.DEFAULT_PORT if port is None else port)
    kind = kind or config.TRANSPORT

    address = resolve_host(hostname)
    announce(f"Trying {address}...")

    if kind == TransportKind.TELNET:
        return TelnetTransport.spawn(address, port, config.get_telnet_path())
    return SocketTransport.connect(address, port)


__all__ = [
    "SocketTransport",
    "TelnetTransport",
    "Transport",
    "bytes_available",
    "open_transport",
    "resolve_host",
    "validate_port",
]

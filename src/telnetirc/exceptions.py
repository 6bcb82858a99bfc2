"""telnet-irc exception classes."""


class TelnetIrcError(Exception):
    """Base exception for telnet-irc."""

    pass


class UsageError(TelnetIrcError):
    """Missing host or invalid port on the command line."""

    pass


class ResolutionError(TelnetIrcError):
    """Hostname has no resolvable IPv4 address."""

    def __init__(self, host: str):
        self.host = host
        super().__init__(f"Could not resolve provided host: {host}")


class HostConnectionError(TelnetIrcError, ConnectionError):
    """Socket creation, connect or telnet spawn failed."""

    def __init__(self, address: str, port: int, reason: str):
        self.address = address
        self.port = port
        self.reason = reason
        super().__init__(f"Could not connect to {address}:{port}: {reason}")


class TransportError(TelnetIrcError):
    """Read or write on an established transport failed."""

    pass

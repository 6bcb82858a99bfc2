"""
Relay configuration.

A global Config instance that can be modified at runtime.
"""

import shutil
from dataclasses import dataclass

from telnetirc.models.enums import LogLevel, TransportKind

# Fallback when no telnet binary is found on PATH
DEFAULT_TELNET_PATH = "/usr/bin/telnet"

# IRC servers listen on 6667 unless told otherwise
DEFAULT_IRC_PORT = 6667

MIN_PORT = 1
MAX_PORT = 65535


@dataclass
class RelayConfig:
    """telnet-irc configuration."""

    # Network Configuration
    DEFAULT_PORT: int = DEFAULT_IRC_PORT

    # Relay Configuration
    READ_CHUNK_SIZE: int = 1024
    POLL_INTERVAL_SECONDS: float = 0.05
    REASSEMBLE_PROBES: bool = False

    # Transport Configuration
    TRANSPORT: TransportKind = TransportKind.SOCKET
    TELNET_PATH: str = ""  # Path to telnet binary (auto-detected if empty)

    # Logging Configuration
    LOG_LEVEL: LogLevel = LogLevel.WARNING

    def get_telnet_path(self) -> str:
        """Get the telnet executable path."""
        if self.TELNET_PATH:
            return self.TELNET_PATH
        return shutil.which("telnet") or DEFAULT_TELNET_PATH


config = RelayConfig()

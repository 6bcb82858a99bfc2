"""
Enumeration types for telnet-irc.

This module defines the enumeration types used for relay state tracking,
transport selection and logging configuration.
"""

from enum import Enum


# =============================================================================
# Relay-Related Enums
# =============================================================================


class RelayState(str, Enum):
    """
    Event loop lifecycle state.

    State transitions:
        RUNNING -> STOPPED (interrupt, peer close, process exit, I/O error)
    """

    RUNNING = "running"
    STOPPED = "stopped"


class StopReason(str, Enum):
    """Why the relay left the RUNNING state."""

    INTERRUPTED = "interrupted"  # Operator pressed Ctrl+C
    PEER_CLOSED = "peer_closed"  # Remote side reached end-of-stream
    PROCESS_EXITED = "process_exited"  # Companion telnet process terminated
    TRANSPORT_ERROR = "transport_error"  # Read/write on the transport failed


# =============================================================================
# Transport-Related Enums
# =============================================================================


class TransportKind(str, Enum):
    """
    How the connection to the IRC server is made.

    - SOCKET: Direct TCP connection owned by this process
    - TELNET: External telnet binary spawned as a child, talked to via pipes
    """

    SOCKET = "socket"
    TELNET = "telnet"


# =============================================================================
# Configuration Enums
# =============================================================================


class LogLevel(str, Enum):
    """
    Logging verbosity levels for telnet-irc.

    Levels (from most to least verbose):
        - FULL: Complete trace with detailed stack information
        - DEBUG: Debug messages and above
        - INFO: Informational messages and above
        - WARNING: Only warnings and errors
    """

    FULL = "full"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"

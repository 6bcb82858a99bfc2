"""
Readiness handlers for the two watched sources.

Each handler drains its source: it reads only what is immediately available
(at most one chunk per read) until nothing is left, so it never blocks.
"""

import os
from typing import Callable

from telnetirc.exceptions import TransportError
from telnetirc.models.enums import StopReason
from telnetirc.relay.context import RelayContext
from telnetirc.transport.base import bytes_available
from telnetirc.utils.logger import get_logger

logger = get_logger(__name__)


def drain(
    available: Callable[[], int],
    read: Callable[[int], bytes],
    on_chunk: Callable[[bytes], None],
    chunk_size: int,
) -> bool:
    """
    Read a ready source until it has nothing more to give.

    A source reported readable with zero bytes pending is at end-of-stream;
    the single read confirms it.

    Returns:
        False once end-of-stream was reached, True otherwise.
    """
    count = available()
    if count <= 0:
        data = read(chunk_size)
        if not data:
            return False
        on_chunk(data)
        count = available()

    while count > 0:
        data = read(min(count, chunk_size))
        if not data:
            return False
        on_chunk(data)
        count = available()
    return True


# =============================================================================
# Per-chunk operations
# =============================================================================


def relay_peer_chunk(context: RelayContext, chunk: bytes) -> None:
    """Answer any PING in ``chunk`` and pass the rest to local output."""
    result = context.responder.scan(chunk)
    for reply in result.replies:
        context.transport.write(reply)
    if result.passthrough:
        context.write_output(result.passthrough)


def forward_input(context: RelayContext, chunk: bytes) -> None:
    """Send local input to the peer untouched."""
    context.transport.write(chunk)


# =============================================================================
# Readiness handlers
# =============================================================================


def handle_peer_readable(context: RelayContext) -> None:
    """Drain the transport, replying to probes and echoing everything else."""
    transport = context.transport
    try:
        alive = drain(
            transport.available,
            transport.read,
            lambda chunk: relay_peer_chunk(context, chunk),
            context.chunk_size,
        )
    except TransportError as e:
        logger.warning(f"{e}; stopping relay.")
        context.request_stop(StopReason.TRANSPORT_ERROR)
        return

    if not alive:
        if transport.exited():
            logger.info("telnet process exited.")
            context.request_stop(StopReason.PROCESS_EXITED)
        else:
            logger.info("Connection closed by peer.")
            context.request_stop(StopReason.PEER_CLOSED)


def handle_input_readable(context: RelayContext) -> None:
    """Drain local input into the transport."""
    fd = context.input_fd
    try:
        alive = drain(
            lambda: bytes_available(fd),
            lambda size: os.read(fd, size),
            lambda chunk: forward_input(context, chunk),
            context.chunk_size,
        )
    except TransportError as e:
        logger.warning(f"{e}; stopping relay.")
        context.request_stop(StopReason.TRANSPORT_ERROR)
        return
    except OSError as e:
        logger.warning(f"Local input failed ({e}); no longer reading it.")
        context.unwatch(fd)
        return

    if not alive:
        # Keep showing peer output after Ctrl+D / end of piped input
        logger.debug("Local input reached end-of-file.")
        context.unwatch(fd)


def flush_peer(context: RelayContext) -> None:
    """Relay whatever the peer left buffered, without waiting for more."""
    transport = context.transport
    try:
        count = transport.available()
        while count > 0:
            relay_peer_chunk(context, transport.read(min(count, context.chunk_size)))
            count = transport.available()
    except TransportError as e:
        logger.debug(f"Final peer flush skipped: {e}")

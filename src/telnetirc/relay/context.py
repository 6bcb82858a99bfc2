"""
Relay context.

Owns everything the event loop touches: the transport, the watched file
descriptors and their handlers, the output stream and the stop flag. One
context is built per session and handed to the loop and every handler.
"""

import sys
from typing import BinaryIO, Callable

from telnetirc.config import config
from telnetirc.models.enums import RelayState, StopReason
from telnetirc.relay.responder import ProbeResponder
from telnetirc.transport.base import Transport
from telnetirc.utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[["RelayContext"], None]


class RelayContext:
    """State shared by the relay loop and its two readiness handlers."""

    def __init__(
        self,
        transport: Transport,
        input_fd: int | None = None,
        output: BinaryIO | None = None,
        poll_interval: float | None = None,
        responder: ProbeResponder | None = None,
        chunk_size: int | None = None,
    ):
        """
        Initialize the relay context.

        Args:
            transport: Connected transport; closed by close().
            input_fd: Local input descriptor (stdin when None).
            output: Binary stream for relayed peer data (stdout when None).
            poll_interval: Seconds each select() may wait.
            responder: PING responder (built from config when None).
            chunk_size: Maximum bytes consumed per read.
        """
        self.transport = transport
        self.input_fd = sys.stdin.fileno() if input_fd is None else input_fd
        self.output = sys.stdout.buffer if output is None else output
        self.poll_interval = (
            config.POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
        )
        self.responder = responder or ProbeResponder(config.REASSEMBLE_PROBES)
        self.chunk_size = chunk_size or config.READ_CHUNK_SIZE

        self.state = RelayState.RUNNING
        self.stop_reason: StopReason | None = None
        self._stop_requested = False
        self._watches: dict[int, Handler] = {}

    # -------------------------------------------------------------------------
    # Watches
    # -------------------------------------------------------------------------

    def watch(self, fd: int, handler: Handler) -> None:
        """Register ``handler`` to run whenever ``fd`` becomes readable."""
        self._watches[fd] = handler

    def unwatch(self, fd: int) -> None:
        """Stop watching ``fd``. Unknown descriptors are ignored."""
        if self._watches.pop(fd, None) is not None:
            logger.debug(f"Stopped watching fd {fd}.")

    def watched_fds(self) -> list[int]:
        return list(self._watches)

    def handler_for(self, fd: int) -> Handler | None:
        return self._watches.get(fd)

    # -------------------------------------------------------------------------
    # Stop condition
    # -------------------------------------------------------------------------

    def request_stop(self, reason: StopReason) -> None:
        """
        Ask the loop to stop at its next check.

        Only sets flags, so it is safe to call from a signal handler. The
        first reason wins.
        """
        if not self._stop_requested:
            self.stop_reason = reason
            self._stop_requested = True

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    # -------------------------------------------------------------------------
    # Output / teardown
    # -------------------------------------------------------------------------

    def write_output(self, data: bytes) -> None:
        """Write relayed bytes to local output; failures drop the chunk."""
        try:
            self.output.write(data)
            self.output.flush()
        except (OSError, ValueError) as e:
            logger.warning(f"Dropped {len(data)} bytes of output: {e}")

    def close(self) -> None:
        """
        Tear the session down: unwatch everything, flush held-back bytes and
        close the transport. Safe to call more than once.
        """
        if self.state == RelayState.STOPPED:
            return

        for fd in self.watched_fds():
            self.unwatch(fd)

        leftover = self.responder.flush()
        if leftover:
            self.write_output(leftover)

        self.transport.close()
        self.state = RelayState.STOPPED
        reason = self.stop_reason.value if self.stop_reason else "teardown"
        logger.info(f"Relay stopped ({reason}).")

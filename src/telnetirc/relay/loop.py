"""
The relay event loop.

A single-threaded select() loop over the peer and local-input descriptors.
The wait uses a short fixed timeout so a stop request set by a signal
handler is noticed within one poll interval.
"""

import select

from telnetirc.models.enums import RelayState, StopReason
from telnetirc.relay.context import RelayContext
from telnetirc.relay.handlers import (
    flush_peer,
    handle_input_readable,
    handle_peer_readable,
)
from telnetirc.utils.logger import get_logger

logger = get_logger(__name__)


class Relay:
    """Moves bytes between the terminal and the transport until stopped."""

    def __init__(self, context: RelayContext):
        self.context = context

    def run(self) -> StopReason | None:
        """
        Watch both sources and service them until a stop condition occurs.

        Always tears the context down (watches, held-back output, transport)
        before returning.

        Returns:
            The reason the loop stopped.
        """
        context = self.context
        context.watch(context.transport.fileno(), handle_peer_readable)
        context.watch(context.input_fd, handle_input_readable)
        logger.debug(
            f"Relay running (poll interval {context.poll_interval * 1000:.0f} ms)."
        )

        try:
            while context.state == RelayState.RUNNING and not context.stop_requested:
                self.tick()
            if context.stop_reason == StopReason.PROCESS_EXITED:
                # telnet may have printed a last line before exiting
                flush_peer(context)
        finally:
            context.close()

        return context.stop_reason

    def tick(self) -> None:
        """Run one poll iteration."""
        context = self.context

        if context.transport.exited():
            context.request_stop(StopReason.PROCESS_EXITED)
            return

        try:
            readable, _, _ = select.select(
                context.watched_fds(), [], [], context.poll_interval
            )
        except (OSError, ValueError) as e:
            logger.error(f"Polling failed: {e}")
            context.request_stop(StopReason.TRANSPORT_ERROR)
            return

        for fd in readable:
            if context.stop_requested:
                break
            handler = context.handler_for(fd)
            if handler is not None:
                handler(context)

"""
The relay: an explicit poll loop moving bytes between the terminal and the
IRC server, answering keep-alive probes along the way.
"""

from typing import BinaryIO

from telnetirc.models.enums import StopReason
from telnetirc.relay.context import RelayContext
from telnetirc.relay.lifecycle import LifecycleSignals, TerminalEcho
from telnetirc.relay.loop import Relay
from telnetirc.relay.responder import ProbeResponder, build_reply, parse_origin
from telnetirc.transport.base import Transport


def run_relay(
    transport: Transport,
    input_fd: int | None = None,
    output: BinaryIO | None = None,
) -> StopReason | None:
    """
    Run a full relay session over an open transport.

    Installs the signal handlers for the duration of the session and returns
    once the loop has stopped and the transport is closed.
    """
    context = RelayContext(transport, input_fd=input_fd, output=output)
    with LifecycleSignals(context):
        return Relay(context).run()


__all__ = [
    "LifecycleSignals",
    "ProbeResponder",
    "Relay",
    "RelayContext",
    "TerminalEcho",
    "build_reply",
    "parse_origin",
    "run_relay",
]

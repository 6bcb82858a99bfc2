from __future__ import annotations

import io
import os
import pty
import select
import signal
import socket
import stat
import struct
import termios
import threading
import time

import pytest

from telnetirc.models.enums import RelayState, StopReason
from telnetirc.relay import run_relay
from telnetirc.relay.context import RelayContext
from telnetirc.relay.handlers import (
    drain,
    forward_input,
    handle_input_readable,
    handle_peer_readable,
    relay_peer_chunk,
)
from telnetirc.relay.lifecycle import TerminalEcho
from telnetirc.relay.loop import Relay
from telnetirc.relay.responder import ProbeResponder
from telnetirc.transport.socket_transport import SocketTransport
from telnetirc.transport.telnet import TelnetTransport


# =============================================================================
# Per-chunk behaviour
# =============================================================================


def test_probe_chunk_gets_exactly_one_pong(recording_context) -> None:
    context, transport, output = recording_context

    relay_peer_chunk(context, b"PING :origin\n")

    assert transport.writes == [b"PONG :origin\n"]
    assert output.getvalue() == b""


@pytest.mark.parametrize(
    "chunk",
    [
        b":irc.example.org NOTICE * :*** Looking up your hostname\r\n",
        b"PRIVMSG #python :pong pin ping\r\n",
        bytes(range(256)),
    ],
)
def test_non_probe_chunk_goes_to_output_verbatim(recording_context, chunk) -> None:
    context, transport, output = recording_context

    relay_peer_chunk(context, chunk)

    assert output.getvalue() == chunk
    assert transport.writes == []


@pytest.mark.parametrize(
    "chunk", [b"", b"NICK tester\r\n", b"PING :not-ours\n", b"\x03\x1b[A\xff"]
)
def test_local_input_is_forwarded_verbatim(recording_context, chunk) -> None:
    context, transport, output = recording_context

    forward_input(context, chunk)

    assert transport.writes == [chunk]
    assert output.getvalue() == b""


def test_drain_reads_at_most_one_chunk_per_call() -> None:
    pending = bytearray(b"x" * 2500)
    sizes = []

    def _read(size: int) -> bytes:
        sizes.append(size)
        data = bytes(pending[:size])
        del pending[:size]
        return data

    received = []
    alive = drain(lambda: len(pending), _read, received.append, 1024)

    assert alive
    assert sizes == [1024, 1024, 452]
    assert b"".join(received) == b"x" * 2500


def test_drain_reports_end_of_stream() -> None:
    assert not drain(lambda: 0, lambda size: b"", lambda chunk: None, 1024)


# =============================================================================
# Handlers against real descriptors
# =============================================================================


def test_peer_handler_answers_and_relays(peer_pair, stdin_pipe) -> None:
    transport, peer = peer_pair
    output = io.BytesIO()
    context = RelayContext(transport, input_fd=stdin_pipe[0], output=output)

    peer.sendall(b":srv 001 me :Welcome\r\nPING :srv\r\n")
    handle_peer_readable(context)

    assert peer.recv(64) == b"PONG :srv\n"
    assert output.getvalue() == b":srv 001 me :Welcome\r\n"
    assert not context.stop_requested


def test_peer_handler_drains_large_bursts(peer_pair, stdin_pipe) -> None:
    transport, peer = peer_pair
    output = io.BytesIO()
    context = RelayContext(transport, input_fd=stdin_pipe[0], output=output)
    payload = b"".join(b":srv 372 me :line %04d\r\n" % i for i in range(200))

    peer.sendall(payload)
    handle_peer_readable(context)

    assert output.getvalue() == payload


def test_input_handler_forwards_to_peer(peer_pair, stdin_pipe) -> None:
    transport, peer = peer_pair
    read_fd, write_fd = stdin_pipe
    context = RelayContext(transport, input_fd=read_fd, output=io.BytesIO())

    os.write(write_fd, b"JOIN #python\r\n")
    handle_input_readable(context)

    assert peer.recv(64) == b"JOIN #python\r\n"


def test_input_eof_only_unwatches_input(peer_pair, stdin_pipe) -> None:
    transport, _ = peer_pair
    read_fd, write_fd = stdin_pipe
    context = RelayContext(transport, input_fd=read_fd, output=io.BytesIO())
    context.watch(read_fd, handle_input_readable)

    os.close(write_fd)
    handle_input_readable(context)

    assert read_fd not in context.watched_fds()
    assert not context.stop_requested


# =============================================================================
# Teardown
# =============================================================================


def test_teardown_is_idempotent(recording_context) -> None:
    context, transport, _ = recording_context
    context.watch(context.input_fd, handle_input_readable)

    context.close()
    context.close()
    context.unwatch(context.input_fd)

    assert transport.close_calls == 1
    assert context.state == RelayState.STOPPED
    assert context.watched_fds() == []


def test_teardown_flushes_held_back_bytes(recording_context) -> None:
    context, _, output = recording_context
    context.responder = ProbeResponder(reassemble=True)

    relay_peer_chunk(context, b"bye PIN")
    assert output.getvalue() == b"bye "

    context.close()
    assert output.getvalue() == b"bye PIN"


def test_first_stop_reason_wins(recording_context) -> None:
    context, _, _ = recording_context

    context.request_stop(StopReason.PEER_CLOSED)
    context.request_stop(StopReason.INTERRUPTED)

    assert context.stop_reason == StopReason.PEER_CLOSED


# =============================================================================
# End-to-end scenarios
# =============================================================================


def test_probe_reply_is_next_transport_write(peer_pair, stdin_pipe) -> None:
    transport, peer = peer_pair
    output = io.BytesIO()
    context = RelayContext(
        transport, input_fd=stdin_pipe[0], output=output, poll_interval=0.01
    )

    peer.sendall(b"PING :irc.example.org\n")
    peer.shutdown(socket.SHUT_WR)
    reason = Relay(context).run()

    assert peer.recv(64) == b"PONG :irc.example.org\n"
    assert output.getvalue() == b""
    assert reason == StopReason.PEER_CLOSED


def test_peer_close_stops_and_releases_transport(peer_pair, stdin_pipe) -> None:
    transport, peer = peer_pair
    output = io.BytesIO()
    context = RelayContext(
        transport, input_fd=stdin_pipe[0], output=output, poll_interval=0.01
    )
    assert context.state == RelayState.RUNNING

    peer.sendall(b"ERROR :Closing Link\r\n")
    peer.close()
    reason = Relay(context).run()

    assert reason == StopReason.PEER_CLOSED
    assert context.state == RelayState.STOPPED
    assert transport.closed
    assert output.getvalue() == b"ERROR :Closing Link\r\n"
    context.close()


def test_interrupt_stops_within_one_poll_interval(peer_pair, stdin_pipe) -> None:
    transport, _ = peer_pair
    fired = []

    def _interrupt() -> None:
        fired.append(time.monotonic())
        os.kill(os.getpid(), signal.SIGINT)

    previous = signal.getsignal(signal.SIGINT)
    timer = threading.Timer(0.2, _interrupt)
    timer.start()
    try:
        reason = run_relay(transport, input_fd=stdin_pipe[0], output=io.BytesIO())
        stopped = time.monotonic()
    finally:
        timer.cancel()

    assert reason == StopReason.INTERRUPTED
    assert transport.closed
    assert stopped - fired[0] < 0.5
    assert signal.getsignal(signal.SIGINT) is previous


def test_telnet_child_exit_stops_relay(tmp_path, stdin_pipe) -> None:
    script = tmp_path / "fake-telnet"
    script.write_text(
        "#!/bin/sh\n"
        "printf 'PING :irc.example.org\\n'\n"
        "read line\n"
        "printf 'got %s\\n' \"$line\"\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR)

    transport = TelnetTransport.spawn("127.0.0.1", 6667, str(script))
    output = io.BytesIO()
    context = RelayContext(
        transport, input_fd=stdin_pipe[0], output=output, poll_interval=0.01
    )

    reason = Relay(context).run()

    assert reason in (StopReason.PROCESS_EXITED, StopReason.PEER_CLOSED)
    assert output.getvalue() == b"got PONG :irc.example.org\n"
    assert transport.closed


# =============================================================================
# Lifecycle
# =============================================================================


def test_sigchld_stops_relay_while_grandchild_holds_stdout(
    tmp_path, stdin_pipe
) -> None:
    script = tmp_path / "fake-telnet"
    script.write_text("#!/bin/sh\n(sleep 3) &\nexit 0\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR)

    previous = signal.getsignal(signal.SIGCHLD)
    transport = TelnetTransport.spawn("127.0.0.1", 6667, str(script))
    started = time.monotonic()
    reason = run_relay(transport, input_fd=stdin_pipe[0], output=io.BytesIO())

    assert reason == StopReason.PROCESS_EXITED
    assert time.monotonic() - started < 2.0
    assert transport.closed
    assert signal.getsignal(signal.SIGCHLD) is previous


def test_terminal_echo_clears_and_restores_echoctl() -> None:
    master, slave = pty.openpty()
    try:
        attrs = termios.tcgetattr(slave)
        attrs[3] |= termios.ECHOCTL
        termios.tcsetattr(slave, termios.TCSANOW, attrs)
        echo = TerminalEcho(slave)

        echo.suppress_control_echo()
        assert not termios.tcgetattr(slave)[3] & termios.ECHOCTL

        echo.restore()
        assert termios.tcgetattr(slave)[3] & termios.ECHOCTL
    finally:
        os.close(slave)
        os.close(master)


def test_terminal_echo_ignores_pipes(stdin_pipe) -> None:
    echo = TerminalEcho(stdin_pipe[0])

    echo.suppress_control_echo()
    echo.restore()


# =============================================================================
# Transport failures
# =============================================================================


@pytest.fixture
def tcp_pair():
    """(SocketTransport, peer socket) over loopback TCP."""
    with socket.create_server(("127.0.0.1", 0)) as server:
        ours = socket.create_connection(server.getsockname())
        theirs, _ = server.accept()
    transport = SocketTransport(ours)
    yield transport, theirs
    transport.close()
    theirs.close()


def _reset(peer: socket.socket, transport) -> None:
    peer.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
    peer.close()
    select.select([transport.fileno()], [], [], 1.0)


def test_peer_reset_stops_with_transport_error(tcp_pair, stdin_pipe) -> None:
    transport, peer = tcp_pair
    context = RelayContext(transport, input_fd=stdin_pipe[0], output=io.BytesIO())

    _reset(peer, transport)
    handle_peer_readable(context)

    assert context.stop_reason == StopReason.TRANSPORT_ERROR


def test_relay_returns_transport_error_and_closes(tcp_pair, stdin_pipe) -> None:
    transport, peer = tcp_pair
    context = RelayContext(
        transport, input_fd=stdin_pipe[0], output=io.BytesIO(), poll_interval=0.01
    )

    _reset(peer, transport)
    reason = Relay(context).run()

    assert reason == StopReason.TRANSPORT_ERROR
    assert transport.closed
    assert context.state == RelayState.STOPPED


def test_failed_poll_stops_with_transport_error(recording_context) -> None:
    context, _, _ = recording_context
    context.watch(-1, handle_input_readable)

    Relay(context).tick()

    assert context.stop_reason == StopReason.TRANSPORT_ERROR

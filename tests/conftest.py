from __future__ import annotations

import io
import os
import socket
from dataclasses import fields

import pytest
from loguru import logger

from telnetirc.config import RelayConfig, config
from telnetirc.models.enums import TransportKind
from telnetirc.relay.context import RelayContext
from telnetirc.transport.base import Transport
from telnetirc.transport.socket_transport import SocketTransport


class RecordingTransport(Transport):
    """In-memory transport that keeps every write."""

    kind = TransportKind.SOCKET

    def __init__(self) -> None:
        self.writes: list[bytes] = []
        self.close_calls = 0
        self._closed = False

    def fileno(self) -> int:
        return -1

    def available(self) -> int:
        return 0

    def read(self, size: int) -> bytes:
        return b""

    def write(self, data: bytes) -> None:
        self.writes.append(data)

    def close(self) -> None:
        self.close_calls += 1
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


@pytest.fixture(autouse=True)
def _reset_config():
    defaults = RelayConfig()
    yield
    for f in fields(RelayConfig):
        setattr(config, f.name, getattr(defaults, f.name))
    logger.remove()


@pytest.fixture
def stdin_pipe():
    """(read_fd, write_fd) standing in for the terminal's stdin."""
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        try:
            os.close(fd)
        except OSError:
            pass


@pytest.fixture
def peer_pair():
    """(SocketTransport, peer socket) connected to each other."""
    ours, theirs = socket.socketpair()
    transport = SocketTransport(ours)
    yield transport, theirs
    transport.close()
    theirs.close()


@pytest.fixture
def recording_context(stdin_pipe):
    transport = RecordingTransport()
    output = io.BytesIO()
    context = RelayContext(transport, input_fd=stdin_pipe[0], output=output)
    return context, transport, output

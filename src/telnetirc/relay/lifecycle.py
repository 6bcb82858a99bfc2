"""
Signal wiring and terminal echo control.

Signal handlers here only flip the context's stop flag; the actual teardown
happens in the relay loop once it notices the flag.
"""

import os
import signal
import termios

from telnetirc.models.enums import StopReason, TransportKind
from telnetirc.relay.context import RelayContext
from telnetirc.utils.logger import get_logger

logger = get_logger(__name__)


class TerminalEcho:
    """
    Hides the ``^C`` the terminal would print when Ctrl+C is pressed.

    Clears ECHOCTL on a TTY input and restores the saved attributes later.
    Does nothing when the input is not a terminal.
    """

    def __init__(self, fd: int):
        self.fd = fd
        self._old_settings = None
        self._is_tty = os.isatty(fd)

    def suppress_control_echo(self) -> None:
        if not self._is_tty or self._old_settings is not None:
            return
        try:
            self._old_settings = termios.tcgetattr(self.fd)
            new_settings = termios.tcgetattr(self.fd)
            new_settings[3] &= ~termios.ECHOCTL
            termios.tcsetattr(self.fd, termios.TCSANOW, new_settings)
        except termios.error as e:
            logger.debug(f"Could not change terminal attributes: {e}")
            self._old_settings = None

    def restore(self) -> None:
        if self._old_settings is None:
            return
        try:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._old_settings)
        except termios.error as e:
            logger.debug(f"Could not restore terminal attributes: {e}")
        self._old_settings = None


class LifecycleSignals:
    """
    Context manager installing the relay's signal handlers.

    SIGINT stops the relay. With the telnet transport, SIGCHLD (the telnet
    child exiting) stops it as well. Previous handlers and terminal settings
    are restored on exit.
    """

    def __init__(self, context: RelayContext):
        self.context = context
        self.echo = TerminalEcho(context.input_fd)
        self._previous: dict[int, object] = {}

    def __enter__(self) -> "LifecycleSignals":
        self._install(signal.SIGINT, self._on_interrupt)
        if self.context.transport.kind == TransportKind.TELNET and hasattr(
            signal, "SIGCHLD"
        ):
            self._install(signal.SIGCHLD, self._on_child_exit)
        self.echo.suppress_control_echo()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()
        self.echo.restore()

    def _install(self, signum: int, handler) -> None:
        self._previous[signum] = signal.signal(signum, handler)

    def _on_interrupt(self, signum, frame) -> None:
        self.context.request_stop(StopReason.INTERRUPTED)

    def _on_child_exit(self, signum, frame) -> None:
        self.context.request_stop(StopReason.PROCESS_EXITED)

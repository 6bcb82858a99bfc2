"""
telnet-irc CLI entry point.

Usage:
    telnet-irc [OPTIONS] HOST [PORT]

Connects to an IRC server and relays the terminal to it, replying to the
server's PING probes so the session never idles out.
"""

from typing import Annotated, NoReturn

import typer

from telnetirc.cli.output import console, print_error, print_status, print_usage
from telnetirc.config import MAX_PORT, MIN_PORT, config
from telnetirc.exceptions import HostConnectionError, ResolutionError, UsageError
from telnetirc.models.enums import LogLevel, StopReason, TransportKind
from telnetirc.relay import run_relay
from telnetirc.transport import open_transport, validate_port
from telnetirc.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

# Exit statuses
EXIT_OK = 0
EXIT_USAGE = 1
EXIT_RESOLUTION = 2
EXIT_CONNECTION = 3
EXIT_TRANSPORT = 4

app = typer.Typer(
    name="telnet-irc",
    help="IRC telnet client that answers PINGs to prevent ping timeouts",
    add_completion=False,
    rich_markup_mode="rich",
)


def parse_port(value: str | None) -> int:
    """
    Parse the optional port argument.

    Raises:
        UsageError: Not an integer, or outside 1..65535.
    """
    if value is None:
        return config.DEFAULT_PORT
    try:
        port = int(value)
    except ValueError:
        raise UsageError(f"The provided port was invalid: {value}") from None
    logger.debug(f"Parsed non-default port as {port}")
    return validate_port(port)


def _usage_exit(message: str) -> NoReturn:
    print_error(message)
    console.print()
    print_usage()
    raise typer.Exit(EXIT_USAGE)


# ignore_unknown_options lets "-1" reach the port argument as a value
@app.command(context_settings={"ignore_unknown_options": True})
def main(
    host: Annotated[
        str | None, typer.Argument(help="IRC server host name or address")
    ] = None,
    port: Annotated[
        str | None,
        typer.Argument(
            help=f"IRC server port ({MIN_PORT}-{MAX_PORT}, default 6667)",
            envvar="TELNET_IRC_PORT",
            show_default=False,
        ),
    ] = None,
    transport: Annotated[
        TransportKind,
        typer.Option(
            "--transport",
            "-t",
            help="Connect directly (socket) or through a telnet child process",
            envvar="TELNET_IRC_TRANSPORT",
        ),
    ] = TransportKind.SOCKET,
    telnet_path: Annotated[
        str | None,
        typer.Option(
            "--telnet-path",
            help="telnet binary for --transport telnet",
            envvar="TELNET_IRC_TELNET",
        ),
    ] = None,
    reassemble: Annotated[
        bool,
        typer.Option(
            "--reassemble",
            help="Hold back PING lines split across reads until complete",
            envvar="TELNET_IRC_REASSEMBLE",
        ),
    ] = False,
    poll_interval: Annotated[
        float,
        typer.Option(
            "--poll-interval",
            help="Seconds between loop checks",
            envvar="TELNET_IRC_POLL_INTERVAL",
            min=0.001,
        ),
    ] = config.POLL_INTERVAL_SECONDS,
    log_level: Annotated[
        LogLevel,
        typer.Option(
            "--log-level",
            help="Log verbosity on stderr",
            envvar="TELNET_IRC_LOG_LEVEL",
        ),
    ] = LogLevel.WARNING,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug", "-d", help="Print debug diagnostics", envvar="TELNET_IRC_DEBUG"
        ),
    ] = False,
):
    """
    Connect to an IRC server and relay this terminal to it.

    Server PINGs are answered automatically and hidden from the output.
    Press Ctrl+C to disconnect.
    """
    config.TRANSPORT = transport
    config.REASSEMBLE_PROBES = reassemble
    config.POLL_INTERVAL_SECONDS = poll_interval
    if telnet_path:
        config.TELNET_PATH = telnet_path
    config.LOG_LEVEL = LogLevel.DEBUG if debug else log_level
    configure_logging(config.LOG_LEVEL)

    if not host:
        _usage_exit("No host provided")

    try:
        target_port = parse_port(port)
    except UsageError as e:
        _usage_exit(str(e))

    logger.debug(f"{host} {target_port}")

    try:
        connection = open_transport(
            host, target_port, transport, announce=print_status
        )
    except ResolutionError:
        print_error("Could not resolve provided host")
        raise typer.Exit(EXIT_RESOLUTION)
    except HostConnectionError as e:
        print_error(f"Could not connect to host ({e.reason})")
        raise typer.Exit(EXIT_CONNECTION)

    reason = run_relay(connection)
    logger.debug(f"Relay finished: {reason}")

    if reason == StopReason.TRANSPORT_ERROR:
        raise typer.Exit(EXIT_TRANSPORT)
    raise typer.Exit(EXIT_OK)


def run():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()

"""Console output helpers for the CLI."""

from rich.console import Console
from rich.markup import escape

# stdout: status lines share the terminal with the relayed IRC stream
console = Console(highlight=False)

PROGRAM_NAME = "telnet-irc"


def print_error(message: str) -> None:
    """Print a one-line error."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_status(message: str) -> None:
    """Print a diagnostic status line."""
    console.print(message, markup=False)


def print_usage(binary: str = PROGRAM_NAME) -> None:
    """Print the usage guide."""
    console.print(f"Usage: {binary} <host> [port]", markup=False)
    console.print("Examples:")
    console.print(f"  {binary} irc.freenode.net", markup=False)
    console.print(f"  {binary} irc.example.org 6669", markup=False)

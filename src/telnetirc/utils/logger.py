"""
Logging setup built on loguru.

Every module grabs its logger with ``get_logger(__name__)``. Output goes to
stderr so that stdout stays reserved for the relayed IRC stream.
"""

import sys

from loguru import logger as _logger

from telnetirc.models.enums import LogLevel

LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)


def get_logger(name: str):
    """Return a logger bound to the given module name."""
    return _logger.bind(name=name)


def configure_logging(level: LogLevel = LogLevel.WARNING) -> None:
    """
    Replace loguru's handlers with one stderr sink at the requested verbosity.

    Only the CLI calls this; importing the package leaves loguru untouched.

    Args:
        level: Verbosity; FULL also enables loguru's backtrace/diagnose output.
    """
    match level:
        case LogLevel.FULL:
            loguru_level = "TRACE"
        case LogLevel.DEBUG:
            loguru_level = "DEBUG"
        case LogLevel.INFO:
            loguru_level = "INFO"
        case _:
            loguru_level = "WARNING"

    _logger.remove()
    _logger.add(
        sys.stderr,
        level=loguru_level,
        format=LOG_FORMAT,
        backtrace=level == LogLevel.FULL,
        diagnose=level == LogLevel.FULL,
    )

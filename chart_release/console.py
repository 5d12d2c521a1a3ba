"""Shared rich console and logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"

# Rich console for formatted output
console = Console()


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Route the logging module through rich.

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level, with timestamps and paths)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=console,
                show_time=debug,
                show_path=debug,
                markup=False,
                rich_tracebacks=debug,
            )
        ],
        force=True,
    )

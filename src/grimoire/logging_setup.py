"""CLI logging bootstrap."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """Send grimoire log records to stderr through rich."""
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger("grimoire")
    root.setLevel(level)
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.addHandler(
        RichHandler(
            console=Console(stderr=True),
            show_path=verbose,
            rich_tracebacks=verbose,
        )
    )

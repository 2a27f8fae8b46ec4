"""Console and logging helpers."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()
err_console = Console(stderr=True)


def setup_rich_logging(log_level: str = "warning", *, rich_console: Console | None = None) -> None:
    """Configure the root logger to use Rich.

    Log records go to stderr so they never mix with the command output.

    Args:
        log_level: Logging level (debug, info, warning, error).
        rich_console: Optional Rich console to log to (defaults to ``err_console``).

    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    handler = RichHandler(
        console=rich_console or err_console,
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

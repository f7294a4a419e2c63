"""Logging setup shared by the CLI and the web application."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

IS_CI = os.getenv("CI") or os.getenv("CONTINUOUS_INTEGRATION")

console = Console(
    log_time=False,
    log_path=False,
    width=140 if IS_CI else None,
    highlight=not IS_CI,
)
err_console = Console(stderr=True, highlight=False)

LOG = logging.getLogger("core")


def setup_logging(level: str | int = "INFO") -> None:
    """Route the package loggers through a RichHandler on stderr."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if not any(isinstance(handler, RichHandler) for handler in LOG.handlers):
        handler = RichHandler(
            console=err_console,
            markup=False,
            show_path=False,
            enable_link_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        LOG.addHandler(handler)

    LOG.setLevel(level)

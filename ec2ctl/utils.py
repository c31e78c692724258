"""Shared utility functions."""

import logging
import subprocess
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

logger = logging.getLogger("ec2ctl")


def setup_logging(level: int | str = logging.INFO) -> None:
    """Set up logging with Rich handler to stderr."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    rich_handler = RichHandler(
        console=Console(stderr=True),
        log_time_format="[%X]",
        show_path=False,
        markup=True,
    )
    rich_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.addHandler(rich_handler)


def log(msg: str) -> None:
    """Log info message."""
    logger.info(msg)


def warn(msg: str) -> None:
    """Log warning message."""
    logger.warning(msg)


def error(msg: str) -> None:
    """Log error message and exit."""
    logger.error(f"[red]{escape(msg)}[/red]")
    sys.exit(1)


def run_cmd(*args, check: bool = True) -> str:
    """Execute local command and return stdout."""
    logger.debug("Running: %s", " ".join(args))
    result = subprocess.run(args, capture_output=True, text=True)
    if check and result.returncode != 0:
        error(f"Command failed: {result.stderr.strip()}")
    return result.stdout.strip()

"""Logging configuration for the canvas-grid CLI.

Log records go through a rich ``RichHandler`` bound to the same stderr
console the CLI prints errors on, so log lines and error messages share
one stream and one colour scheme.

Levels: WARNING by default, INFO with --verbose, DEBUG with --debug.
"""

import logging
import time
from contextlib import contextmanager
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "canvas_grid"


def setup_logging(
    verbose: bool = False,
    debug: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Attach a rich handler to the package logger.

    Args:
        verbose: INFO level with timestamps
        debug: DEBUG level with timestamps and source locations
        console: Console to log to (default: a new stderr console)

    Returns:
        The ``canvas_grid`` logger

    Examples:
        >>> logger = setup_logging(verbose=True)
        >>> logger.info("Loaded grid state")
        [10:30:45] INFO     Loaded grid state
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(level)

    handler = RichHandler(
        console=console or Console(stderr=True),
        level=level,
        show_time=verbose or debug,
        show_path=debug,
        markup=False,
        rich_tracebacks=debug,
    )
    handler.setFormatter(logging.Formatter("%(message)s" if not debug else "%(name)s: %(message)s"))
    logger.addHandler(handler)

    return logger


@contextmanager
def log_timing(operation: str, logger: logging.Logger):
    """Log how long the wrapped block took, at INFO.

    Examples:
        >>> with log_timing("Query outputs", logger):
        ...     monitors = await service.get_all_monitors()
        INFO     Query outputs completed in 3.12ms
    """
    start = time.perf_counter()
    logger.debug(f"Starting: {operation}")

    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{operation} completed in {elapsed_ms:.2f}ms")

"""
Logging utilities for sacount.

Logs go to stderr through rich so VCF records written to stdout stay clean;
an optional plain-text log file can be added. Worker processes started by
the pipeline have no handlers of their own, so the parent's settings are
captured with ``logging_settings`` and replayed with ``ensure_logging``.
"""

import logging
import time
from contextlib import contextmanager

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "ensure_logging",
    "logging_settings",
    "setup_logging",
    "timed",
]

_console = Console(stderr=True)


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """
    Configure logging for sacount.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
        log_file: Optional path to write logs to file.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers: list[logging.Handler] = [
        RichHandler(
            console=_console,
            rich_tracebacks=True,
            markup=False,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(process)d - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


def logging_settings() -> tuple[bool, str | None] | None:
    """``(verbose, log_file)`` as configured on the root logger, or None if unconfigured."""
    root = logging.getLogger()
    if not root.handlers:
        return None
    log_file = next(
        (h.baseFilename for h in root.handlers if isinstance(h, logging.FileHandler)), None
    )
    return root.level == logging.DEBUG, log_file


def ensure_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """Configure logging unless this process already has root handlers."""
    if logging.getLogger().handlers:
        return
    setup_logging(verbose=verbose, log_file=log_file)


@contextmanager
def timed(operation: str, logger: logging.Logger | None = None):
    """
    Context manager for timing operations.

    Example:
        with timed("Loading variants", logger):
            variants = load_variants()
    """
    log = logger or logging.getLogger(__name__)
    start = time.perf_counter()
    log.debug("Starting: %s", operation)
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        log.debug("Completed: %s (%.3fs)", operation, elapsed)

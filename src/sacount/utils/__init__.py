"""
Utility modules for sacount.

Provides logging and timing helpers.
"""

from .logging import ensure_logging, logging_settings, setup_logging, timed

__all__ = [
    "ensure_logging",
    "logging_settings",
    "setup_logging",
    "timed",
]

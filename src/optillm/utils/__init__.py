"""Utility modules for the cache engine."""

from .monitoring import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]

"""
Logging module - structlog configuration for entry points.
"""

from .setup import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]

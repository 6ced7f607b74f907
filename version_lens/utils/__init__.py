"""Utility functions and helpers for version-lens."""

from .logging import setup_logging, get_logger
from .config import Settings, load_settings

__all__ = [
    "setup_logging",
    "get_logger",
    "Settings",
    "load_settings",
]

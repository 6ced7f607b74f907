"""Logging utilities for version-lens."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


PACKAGE_LOGGER = "version_lens"

LOG_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "debug": "dim",
})

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _package_logger() -> logging.Logger:
    """The ``version_lens`` logger every module logger propagates to.

    It owns the single rich console handler; attached once.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True, theme=LOG_THEME),
            show_time=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter(fmt="%(name)s: %(message)s", datefmt="[%X]"))
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.WARNING)
        package_logger.propagate = False
    return package_logger


class VersionLensLogger:
    """Module logger writing through the shared package handlers."""

    def __init__(self, name: str) -> None:
        _package_logger()
        self.logger = logging.getLogger(name)

    def debug(self, msg: str) -> None:
        self.logger.debug(msg)

    def info(self, msg: str) -> None:
        self.logger.info(msg)

    def warning(self, msg: str) -> None:
        self.logger.warning(msg)

    def error(self, msg: str) -> None:
        self.logger.error(msg)


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    level: int = logging.WARNING
) -> None:
    """Configure version-lens logging.

    Calling it again replaces the previous level and log file.

    Args:
        verbose: Enable debug logging
        log_file: Optional file that receives a plain-text copy of every record
        level: Logging level when not verbose
    """
    if verbose:
        level = logging.DEBUG

    package_logger = _package_logger()
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        if isinstance(handler, logging.FileHandler):
            package_logger.removeHandler(handler)
            handler.close()

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        package_logger.addHandler(file_handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> VersionLensLogger:
    """Get a version-lens logger.

    Args:
        name: Dotted logger name under ``version_lens``

    Returns:
        Logger instance
    """
    return VersionLensLogger(name)

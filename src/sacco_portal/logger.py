"""
Logging setup for the SACCO portal client.

Thin wrapper over loguru so modules can do:

    logger = get_logger(__name__)
"""

import os
import sys

from loguru import logger as _logger

_configured = False


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """
    Configure the global loguru sink.

    Args:
        level: Minimum level for stderr output. Falls back to LOGURU_LEVEL, then INFO.
        log_file: Optional file sink (rotated at 10 MB).
    """
    global _configured

    level = (level or os.getenv("LOGURU_LEVEL") or "INFO").upper()

    _logger.remove()
    _logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
        ),
    )
    if log_file:
        _logger.add(log_file, rotation="10 MB", retention=2, level="DEBUG")

    _configured = True


def get_logger(name: str):
    """Return a loguru logger bound to a module name."""
    if not _configured:
        setup_logging()
    return _logger.bind(name=name)

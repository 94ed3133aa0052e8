"""Logging configuration for the funding arbitrage scanner."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "funding_arb"

_console = Console()
_logger: Optional[logging.Logger] = None


def setup_logger(
    name: str = LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Set up and configure the application logger.

    Module loggers created with ``logging.getLogger(__name__)`` inside the
    package are children of this logger and share its handlers.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional path to log file

    Returns:
        Configured logger instance
    """
    global _logger

    if _logger is not None:
        _logger.setLevel(level)
        return _logger

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    # Rich console handler for pretty output
    console_handler = RichHandler(
        console=_console,
        show_time=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        logger.addHandler(file_handler)

    # Keep client library chatter out of the scan output
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Get the application logger instance."""
    if _logger is None:
        return setup_logger()
    return _logger

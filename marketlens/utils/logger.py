"""Logging configuration for MarketLens."""

import logging
import sys
from pathlib import Path
from typing import Optional

from marketlens.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# HTTP clients under the gateway and price feed log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3")


def setup_logger(
    name: str = "marketlens",
    log_file: Optional[str] = None,
    log_level: Optional[str] = None,
) -> logging.Logger:
    """Configure the package logger.

    Module loggers are created with ``logging.getLogger(__name__)`` and
    propagate to this one. Console output goes to stderr so that
    ``marketlens analyze --json`` keeps stdout machine-readable. Client
    library loggers stay at WARNING unless DEBUG is requested.

    Args:
        name: Logger name
        log_file: Log file path. If None, uses config value.
        log_level: Log level. If None, uses config value.

    Returns:
        Configured logger instance
    """
    settings = get_settings()

    log_file = log_file or settings.log_file
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Reconfiguring replaces handlers instead of stacking them
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for library in NOISY_LOGGERS:
        logging.getLogger(library).setLevel(library_level)

    return logger

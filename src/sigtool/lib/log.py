"""
Structured logging for sigtool components.

All loggers live under the ``sigtool`` hierarchy and share one stderr handler
that is installed lazily on first use. Context is appended to the message as
``key=value`` pairs. Never pass private key material as context.
"""

import logging
import os
from typing import Optional

from sigtool import config

_ROOT_LOGGER_NAME = "sigtool"


def _setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Setup logging configuration for the sigtool logger hierarchy."""
    root = logging.getLogger(_ROOT_LOGGER_NAME)

    if not root.handlers:
        handler = logging.StreamHandler()

        # Structured formatting
        formatter = logging.Formatter(
            "[%(asctime)s.%(msecs)03d] %(levelname)s [%(name)s]: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)

        if level is None:
            level = os.getenv(config.LOG_LEVEL_ENV_VAR, config.DEFAULT_LOG_LEVEL)

    if level is not None:
        root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    return root


def set_level(level: str) -> None:
    """Override the level of the whole sigtool logger hierarchy."""
    _setup_logging(level)


class ContextLogger:
    """Thin wrapper adding ``| key=value`` context to log messages."""

    def __init__(self, name: str):
        self._logger = logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")

    def log(self, level: str, message: str, **kwargs) -> None:
        _setup_logging()
        log_method = getattr(self._logger, level.lower(), self._logger.info)

        if kwargs:
            # Add context to message
            context = " ".join([f"{k}={v}" for k, v in kwargs.items()])
            message = f"{message} | {context}"

        log_method(message)

    def debug(self, message: str, **kwargs) -> None:
        self.log("debug", message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self.log("info", message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.log("warning", message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.log("error", message, **kwargs)


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(name)

"""Structured logging for the registrar."""

from __future__ import annotations

import json
import logging
import os
import sys
from logging import Logger
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

from .orchestrator import RECOVERY_LOGGER


def configure_logging(
    log_file: Optional[str] = None,
    *,
    level: int = logging.INFO,
    recovery_file: Optional[str] = None,
) -> Logger:
    """Configure console logging and the optional audit trails.

    Args:
        log_file: Optional path to a JSON lines file for the general stream.
        level: Logging level applied to the ``registrar`` logger.
        recovery_file: Optional path receiving commitment recovery records.
            These include commitment secrets, so keep the file private.
            Without it the records are printed to stderr as JSON lines
            prefixed with ``[ens-recovery]``, apart from the console log.

    Returns:
        The configured ``registrar`` logger.
    """

    console = Console(stderr=True)
    handler = RichHandler(console=console, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("registrar")
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)

    if log_file:
        logger.addHandler(_json_file_handler(log_file))

    recovery = logging.getLogger(RECOVERY_LOGGER)
    recovery.propagate = False
    recovery.handlers.clear()
    recovery.addHandler(_json_file_handler(recovery_file) if recovery_file else _recovery_console_handler())

    logger.debug("Structured logging initialised", extra={"event": "logging_configured"})
    return logger


def _json_file_handler(path: str) -> logging.Handler:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    file_handler = logging.FileHandler(path)
    file_handler.setFormatter(StructuredJsonFormatter())
    return file_handler


def _recovery_console_handler() -> logging.Handler:
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(StructuredJsonFormatter(prefix="[ens-recovery] "))
    return stream_handler


class StructuredJsonFormatter(logging.Formatter):
    """Formatter that emits JSON lines for long-term audit trails."""

    def __init__(self, prefix: str = "") -> None:
        super().__init__()
        self._prefix = prefix

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        if hasattr(record, "event"):
            base["event"] = getattr(record, "event")
        if hasattr(record, "data"):
            base["data"] = getattr(record, "data")
        return self._prefix + json.dumps(base, default=str)


__all__ = ["StructuredJsonFormatter", "configure_logging"]

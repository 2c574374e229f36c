"""Logging setup driven by the ``log_level`` / ``log_format`` config keys."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class JSONLineFormatter(logging.Formatter):
    """One JSON object per record, suitable for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "info", fmt: str = "text") -> None:
    """Install a single stderr handler on the ``pumlsync`` logger."""
    if fmt == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(JSONLineFormatter())
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("pumlsync")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(_LEVELS.get(level, logging.INFO))

"""LazyTables logging utilities.

Every module logs through ``get_logger(__name__)``. Records end up as one JSON
object per line in a rotating file so a session can be inspected after the
terminal UI has exited. Rich console output is only attached for plain CLI
commands: while the full-screen interface owns the terminal anything printed
to it would tear the rendered frame.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_LOG_DIR = Path.home() / ".lazytables" / "logs"
LOG_FILE_NAME = "lazytables.log"
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 3

# ``extra=`` keys copied into the JSON document when a record carries them
CONTEXT_FIELDS = ("panel", "message_type", "event", "duration", "path")


class JsonFormatter(logging.Formatter):
    """Render a record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        document: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        document.update(
            (name, getattr(record, name)) for name in CONTEXT_FIELDS if hasattr(record, name)
        )
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        return json.dumps(document, ensure_ascii=False, default=str)


def resolve_log_dir(log_dir: Optional[Path] = None) -> Path:
    if log_dir is not None:
        return log_dir
    override = os.environ.get("LAZYTABLES_LOG_DIR")
    return Path(override) if override else DEFAULT_LOG_DIR


def logging_config(level: str, log_file: Path, *, console: bool) -> Dict[str, Any]:
    """Return the ``dictConfig`` mapping for the given destination."""

    handlers: Dict[str, Dict[str, Any]] = {
        "session_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": str(log_file),
            "maxBytes": MAX_LOG_BYTES,
            "backupCount": LOG_BACKUPS,
            "encoding": "utf-8",
        }
    }
    if console:
        handlers["terminal"] = {
            "class": "rich.logging.RichHandler",
            "formatter": "plain",
            "markup": False,
            "rich_tracebacks": True,
            "show_path": False,
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JsonFormatter},
            "plain": {"format": "%(message)s", "datefmt": "[%X]"},
        },
        "handlers": handlers,
        "root": {"level": level.upper(), "handlers": sorted(handlers)},
    }


def configure_logging(
    *, level: str = "INFO", log_dir: Optional[Path] = None, console: bool = False
) -> Path:
    """Install the LazyTables handlers on the root logger.

    ``log_dir`` defaults to ``$LAZYTABLES_LOG_DIR`` or ``~/.lazytables/logs``.
    Pass ``console=True`` to also log through Rich, which only plain CLI
    commands should do. Calling again replaces the previous handlers. Returns
    the log file path so start-up errors can point at it.
    """

    directory = resolve_log_dir(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / LOG_FILE_NAME
    logging.config.dictConfig(logging_config(level, log_file, console=console))
    return log_file


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = [
    "DEFAULT_LOG_DIR",
    "JsonFormatter",
    "configure_logging",
    "get_logger",
    "logging_config",
    "resolve_log_dir",
]

"""
Structured logging setup for SqliteRoom.

This module configures:
- RotatingFileHandler <log_dir>/sqliteroom.log (1 MB max, 5 backups)
- StreamHandler to stderr
- JSON log formatter (stdlib json)
- Redaction filter masking SQLITEROOM_* environment secrets

Usage:
    from utils.structured_logging import setup_logging
    setup_logging(app_name="SqliteRoom", log_dir="logs", level="INFO")
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path

REDACTED = "***REDACTED***"
_SECRET_SUFFIXES = ("_KEY", "_TOKEN", "_SECRET", "_PASSWORD")


def _env_secret_values() -> set[str]:
    return {
        v
        for k, v in os.environ.items()
        if k.upper().startswith("SQLITEROOM_") and k.upper().endswith(_SECRET_SUFFIXES) and v
    }


class RedactionFilter(logging.Filter):
    """Filter that masks configured secret values inside log messages."""

    def __init__(self, secrets: set[str] | None = None) -> None:
        super().__init__()
        self.secrets = secrets if secrets is not None else _env_secret_values()

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        masked = message
        for secret in self.secrets:
            masked = masked.replace(secret, REDACTED)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter with core fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "thread": record.threadName,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def is_structured_logging_configured(logger: logging.Logger) -> bool:
    return getattr(logger, "_sqliteroom_structured_logging_configured", False)


def set_structured_logging_configured(logger: logging.Logger) -> None:
    setattr(logger, "_sqliteroom_structured_logging_configured", True)


def setup_logging(
    app_name: str = "SqliteRoom", log_dir: str | Path = "logs", level: str = "INFO"
) -> None:
    """Configure structured logging with rotation and redaction.

    Args:
        app_name: Name used for top-level logger.
        log_dir: Directory where logs will be stored; relative paths resolve
            against the project root.
        level: Logging level string ("DEBUG", "INFO", "WARNING", "ERROR").
    """
    root = logging.getLogger()
    if is_structured_logging_configured(root):
        return

    logs_path = Path(log_dir)
    if not logs_path.is_absolute():
        logs_path = Path(__file__).resolve().parents[1] / logs_path
    logs_path.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=str(logs_path / "sqliteroom.log"),
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    stream_handler = logging.StreamHandler(stream=sys.stderr)

    formatter = JsonFormatter()
    file_handler.setFormatter(formatter)
    stream_handler.setFormatter(formatter)

    redactor = RedactionFilter()
    file_handler.addFilter(redactor)
    stream_handler.addFilter(redactor)

    lvl = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(lvl)
    root.handlers = [file_handler, stream_handler]

    set_structured_logging_configured(root)

    app_logger = logging.getLogger(app_name)
    app_logger.propagate = True
    app_logger.debug("Structured logging configured")

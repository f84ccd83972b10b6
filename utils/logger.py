"""
Application logger for SqliteRoom.

``Logger()`` is a process-wide handle on the ``SqliteRoom`` logger. When
``structured_logging.setup_logging`` has already run it reuses those handlers;
otherwise the first instance installs a console + daily file fallback.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .structured_logging import is_structured_logging_configured

APP_LOGGER_NAME = "SqliteRoom"
FALLBACK_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _fallback_handlers() -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if env_dir := os.environ.get("SQLITEROOM_LOG_DIR"):
        log_dir = Path(env_dir).expanduser()
    else:
        log_dir = Path(__file__).resolve().parent.parent / "logs"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        day = datetime.now().strftime("%Y%m%d")
        handlers.append(logging.FileHandler(log_dir / f"sqliteroom_{day}.log", encoding="utf-8"))
    except OSError:
        # Read-only install location; console only
        pass
    return handlers


class Logger:
    """Singleton wrapper around the ``SqliteRoom`` logger"""

    _instance: Optional["Logger"] = None
    _initialized: bool = False

    def __new__(cls) -> "Logger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self.setup_logging()
            Logger._initialized = True

    def setup_logging(self) -> None:
        if not is_structured_logging_configured(logging.getLogger()):
            # basicConfig is a no-op when the root logger already has handlers
            logging.basicConfig(
                level=logging.INFO, format=FALLBACK_FORMAT, handlers=_fallback_handlers()
            )
        self.logger = logging.getLogger(APP_LOGGER_NAME)

    def info(self, message: str, *args: Any) -> None:
        self.logger.info(message, *args)

    def error(self, message: str, *args: Any) -> None:
        self.logger.error(message, *args)

    def debug(self, message: str, *args: Any) -> None:
        self.logger.debug(message, *args)

"""
Process-wide database accessor.

The application shares one DatabaseManager per process. It is created on first
use; concurrent first callers block on the cell lock and receive the same
instance.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Generic, TypeVar

from utils.logger import Logger

from .initialize_db import DatabaseManager

T = TypeVar("T")


class LazyCell(Generic[T]):
    """Holds a value built at most once, on first access.

    A failing factory leaves the cell empty and re-raises to the caller.
    """

    def __init__(self) -> None:
        self._value: T | None = None
        self._lock = threading.Lock()

    @property
    def is_set(self) -> bool:
        return self._value is not None

    def get_or_init(self, factory: Callable[[], T]) -> T:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = factory()
            return self._value

    def take(self) -> T | None:
        """Empty the cell and return the previous value."""
        with self._lock:
            value, self._value = self._value, None
            return value


_database_cell: LazyCell[DatabaseManager] = LazyCell()


def _build_database(base_dir: Path | None, user_name: str | None) -> DatabaseManager:
    logger = Logger()
    logger.info("Opening application database")
    manager = DatabaseManager(user_name=user_name, base_dir=base_dir)
    manager.initialize_all_databases()
    logger.info(f"Database ready at {manager.users_db_path}")
    return manager


def get_database(base_dir: Path | None = None, user_name: str | None = None) -> DatabaseManager:
    """
    Get the shared DatabaseManager, creating it on first use.

    Arguments only matter for the call that constructs the manager; later
    calls return the cached instance unchanged. Construction errors
    (permissions, corrupt or newer schema) propagate and nothing is cached.

    Returns:
        The process-wide DatabaseManager
    """
    return _database_cell.get_or_init(lambda: _build_database(base_dir, user_name))


def reset_database() -> None:
    """Drop the shared manager, closing its tracked connections."""
    manager = _database_cell.take()
    if manager is not None:
        manager.close()

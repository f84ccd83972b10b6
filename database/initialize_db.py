"""
Database Initialization
Manages the SQLite database files of the SqliteRoom application: location,
schema setup and connection handling.
"""

from __future__ import annotations

import logging
import os
import shutil
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .resilient_db import ResilientDB

if TYPE_CHECKING:
    from collections.abc import Callable

LOGGER = logging.getLogger(__name__)

# Bumped only together with a schema change; there is no migration path.
SCHEMA_VERSION: Final[int] = 1

DB_FILES: Final[dict[str, str]] = {
    "users": "users.db",
}

SCHEMA_DDLS: Final[dict[str, list[str]]] = {
    "users": [
        """
            CREATE TABLE IF NOT EXISTS users (
                uid INTEGER PRIMARY KEY AUTOINCREMENT,
                first_name TEXT,
                last_name TEXT
            )
        """,
    ],
}


class SchemaMismatchError(Exception):
    """Raised when a database file was written with another schema version."""

    def __init__(self, db_key: str, found: int, expected: int = SCHEMA_VERSION):
        super().__init__(
            f"Database '{db_key}' has schema version {found}, expected {expected}"
        )
        self.db_key = db_key
        self.found = found
        self.expected = expected


def _ensure_dir(path: Path) -> None:
    """Ensure a directory exists."""
    path.mkdir(parents=True, exist_ok=True)


def _get_default_user_data_directory() -> Path:
    """Get the default user data directory outside the repository."""
    if user_data_path := os.environ.get("SQLITEROOM_USER_DATA"):
        return Path(user_data_path).expanduser().resolve()

    if os.name == "nt":
        app_data = os.environ.get("LOCALAPPDATA", os.path.expanduser("~/AppData/Local"))
        return Path(app_data) / "SqliteRoom"
    # Follow XDG Base Directory Specification
    xdg_data_home = os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
    return Path(xdg_data_home) / "sqliteroom"


def _validate_user_data_permissions(path: Path) -> None:
    """Validate that the user data directory has proper read/write permissions.

    Raises:
        PermissionError: If the directory cannot be written or read
        OSError: If there are other filesystem issues
    """
    try:
        path.mkdir(parents=True, exist_ok=True)

        test_file = path / ".sqliteroom_permission_test"
        try:
            test_file.write_text("test", encoding="utf-8")
            test_file.unlink()
        except OSError as e:
            raise PermissionError(f"No write permission for user data directory {path}: {e}") from e

        if not os.access(path, os.R_OK):
            raise PermissionError(f"No read permission for user data directory {path}")

    except PermissionError:
        raise
    except OSError as e:
        raise OSError(f"Cannot access user data directory {path}: {e}") from e


def _exec_ddl_batch(conn: sqlite3.Connection, ddls: list[str]) -> None:
    """Execute a batch of DDL statements and commit once at the end."""
    cur = conn.cursor()
    for sql in ddls:
        cur.execute(sql)
    conn.commit()


def _check_schema_version(db_key: str, conn: sqlite3.Connection) -> None:
    found = conn.execute("PRAGMA user_version").fetchone()[0]
    if found == 0:
        # PRAGMA does not accept bound parameters
        conn.execute(f"PRAGMA user_version = {int(SCHEMA_VERSION)}")
        conn.commit()
    elif found != SCHEMA_VERSION:
        raise SchemaMismatchError(db_key, found)


class DatabaseManager:
    """Manages the SQLite databases of one user profile"""

    def __init__(
        self,
        user_name: str | None = None,
        user_feedback: Callable[[str], None] | None = None,
        base_dir: Path | None = None,
    ):
        self.user_name = str(user_name or "default_user")
        self.user_feedback = user_feedback or LOGGER.info

        if base_dir is not None:
            self.base_dir = Path(base_dir).resolve()
        else:
            self.base_dir = _get_default_user_data_directory()

        _validate_user_data_permissions(self.base_dir)

        self.user_db_dir = self.base_dir / "user_data" / self.user_name / "databases"

        # Connections currently lent out by _connection(); close() closes leftovers
        self._active_connections: list[sqlite3.Connection] = []
        self._connection_lock = threading.Lock()

        self.users_db_path = self.user_db_dir / DB_FILES["users"]

        self._create_directory_structure()

    def _create_directory_structure(self) -> None:
        """Create the user-specific directory structure"""
        try:
            _ensure_dir(self.user_db_dir)
            _ensure_dir(self.user_db_dir.parent / "backups")
        except PermissionError:
            self.user_feedback("Cannot create user folders. Please check permissions.")
            raise
        except OSError as e:
            self.user_feedback(
                f"OS error creating folders: {str(e)}. Check disk space and permissions."
            )
            raise

    def _setup_schema(self, db_key: str, conn: sqlite3.Connection) -> None:
        """Apply schema DDLs and verify the schema version for a given database key."""
        if ddls := SCHEMA_DDLS.get(db_key, []):
            _exec_ddl_batch(conn, ddls)
        _check_schema_version(db_key, conn)

    def _open(self, db_key: str) -> sqlite3.Connection:
        db_path = self.user_db_dir / DB_FILES[db_key]
        _ensure_dir(db_path.parent)
        db = ResilientDB(db_path, lambda c: self._setup_schema(db_key, c), self.user_feedback)
        return db.connect_with_retry()

    @contextmanager
    def _connection(self, db_key: str) -> Iterator[sqlite3.Connection]:
        conn = self._open(db_key)
        self._track_connection(conn)
        try:
            with conn:
                yield conn
        finally:
            self._untrack_connection(conn)
            conn.close()

    def users_connection(self):
        """Context manager yielding a users connection; commits or rolls back, then closes."""
        return self._connection("users")

    def initialize_all_databases(self) -> None:
        """Create every database file and apply its schema"""
        LOGGER.debug("Setting up databases for %s", self.user_name)
        try:
            for db_key in DB_FILES:
                self._open(db_key).close()
            LOGGER.info("All databases ready for %s in %s", self.user_name, self.user_db_dir)
        except sqlite3.Error as e:
            self.user_feedback(
                f"[ERROR] Database error: {str(e)}. Please check database file permissions."
            )
            raise
        except PermissionError:
            self.user_feedback("[ERROR] Permission denied. Please check file permissions.")
            raise

    def _track_connection(self, conn: sqlite3.Connection) -> None:
        with self._connection_lock:
            self._active_connections.append(conn)

    def _untrack_connection(self, conn: sqlite3.Connection) -> None:
        with self._connection_lock:
            if conn in self._active_connections:
                self._active_connections.remove(conn)

    def close(self) -> None:
        """Close connections still lent out, e.g. a worker mid-query at shutdown"""
        with self._connection_lock:
            for conn in self._active_connections:
                try:
                    conn.close()
                except sqlite3.Error as e:
                    LOGGER.warning("Error closing connection: %s", e)
            self._active_connections.clear()

    def backup_databases(self) -> list[Path]:
        """Copy every existing database file into the backups folder"""
        backup_dir = self.user_db_dir.parent / "backups"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        written: list[Path] = []

        try:
            _ensure_dir(backup_dir)
            for filename in DB_FILES.values():
                db_path = self.user_db_dir / filename
                if db_path.exists():
                    backup_path = backup_dir / f"{Path(filename).stem}_{timestamp}.db"
                    shutil.copy2(db_path, backup_path)
                    written.append(backup_path)
            self.user_feedback(f"[OK] Backups saved to: {backup_dir}")
        except OSError as e:
            self.user_feedback(f"[ERROR] Backup failed - file system error: {str(e)}")
            raise
        return written

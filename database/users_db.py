"""
UsersDatabase - persistence of User rows through DatabaseManager/ResilientDB.
"""

from __future__ import annotations

import sqlite3
from typing import Protocol

from models.user import User
from utils.logger import Logger


class UserStoreError(Exception):
    """A users table operation failed."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"Could not {operation}: {cause}")
        self.operation = operation
        self.cause = cause


class DBManagerProtocol(Protocol):
    """Protocol for database manager expected by UsersDatabase."""

    def users_connection(self): ...


class UsersDatabase:
    """Store over the ``users`` table.

    Every call blocks on disk I/O; callers on the GUI thread must dispatch
    through a worker (see ``controllers.user_controller``).
    """

    def __init__(self, db_manager: DBManagerProtocol) -> None:
        self.db_manager = db_manager
        self.logger = Logger()

    def insert_all(self, *users: User) -> None:
        """Insert users in one transaction, replacing rows whose uid already exists."""
        if not users:
            return
        try:
            with self.db_manager.users_connection() as conn:
                for user in users:
                    data = user.to_db_dict()
                    verb = "INSERT" if user.uid is None else "INSERT OR REPLACE"
                    columns = ", ".join(data)
                    placeholders = ", ".join("?" for _ in data)
                    conn.execute(
                        f"{verb} INTO users ({columns}) VALUES ({placeholders})",
                        tuple(data.values()),
                    )
        except sqlite3.Error as e:
            self.logger.error(f"Users DB error on insert: {e}")
            raise UserStoreError("insert users", e) from e

    def get_all(self) -> list[User]:
        try:
            with self.db_manager.users_connection() as conn:
                rows = conn.execute(
                    "SELECT uid, first_name, last_name FROM users ORDER BY uid"
                ).fetchall()
        except sqlite3.Error as e:
            self.logger.error(f"Users DB error on select: {e}")
            raise UserStoreError("load users", e) from e
        return [User.from_row(row) for row in rows]

    def delete(self, user: User) -> None:
        """Delete the row with ``user.uid``; missing rows are ignored."""
        if user.uid is None:
            return
        try:
            with self.db_manager.users_connection() as conn:
                conn.execute("DELETE FROM users WHERE uid = ?", (user.uid,))
        except sqlite3.Error as e:
            self.logger.error(f"Users DB error on delete: {e}")
            raise UserStoreError("delete user", e) from e

    def count(self) -> int:
        try:
            with self.db_manager.users_connection() as conn:
                row = conn.execute("SELECT COUNT(*) FROM users").fetchone()
        except sqlite3.Error as e:
            self.logger.error(f"Users DB error on count: {e}")
            raise UserStoreError("count users", e) from e
        return int(row[0]) if row else 0

"""
UserController - view-model between the users table and the GUI.

The controller keeps an observable snapshot of the users table. Mutations
never touch the snapshot directly: each one writes through the store and then
reloads everything from it. Operations run one at a time on the controller's
task scope, so a reload can never overwrite the result of a later mutation.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from database.factory import get_database
from database.users_db import UserStoreError, UsersDatabase
from models.user import User
from utils.logger import Logger
from utils.observable import ObservableValue
from utils.task_scope import TaskScope

if TYPE_CHECKING:
    from database.initialize_db import DatabaseManager

T = TypeVar("T")


class UserController:
    """Exposes ``users`` and ``error`` observables plus load/add/delete commands."""

    def __init__(
        self,
        store: UsersDatabase | None = None,
        scope: TaskScope | None = None,
        db_manager: DatabaseManager | None = None,
        autoload: bool = True,
    ) -> None:
        self.logger = Logger()
        if store is None:
            store = UsersDatabase(db_manager or get_database())
        self._store = store
        self._scope = scope or TaskScope(name="user-controller")
        self._lock = asyncio.Lock()

        self.users: ObservableValue[list[User]] = ObservableValue([])
        self.error: ObservableValue[str | None] = ObservableValue(None)

        if autoload:
            self.load_users()

    @property
    def is_closed(self) -> bool:
        return self._scope.is_closed

    # ------------- Commands -------------

    def load_users(self) -> concurrent.futures.Future[list[User]]:
        """Reload the snapshot from the store."""
        return self._launch("load users", self._reload)

    def add_user(
        self, first_name: str | None, last_name: str | None
    ) -> concurrent.futures.Future[list[User]]:
        """Insert a new user (the store assigns its uid), then reload."""
        new_user = User(first_name=first_name, last_name=last_name)

        async def add() -> list[User]:
            await self._scope.run_blocking(self._store.insert_all, new_user)
            self.logger.info(f"User inserted: {new_user.display_name}")
            return await self._reload()

        return self._launch("add user", add)

    def delete_user(self, user: User) -> concurrent.futures.Future[list[User]]:
        """Delete ``user`` by uid, then reload."""

        async def delete() -> list[User]:
            await self._scope.run_blocking(self._store.delete, user)
            self.logger.info(f"User deleted: {user.uid} {user.display_name}")
            return await self._reload()

        return self._launch("delete user", delete)

    def clear_error(self) -> None:
        self.error.set(None)

    def close(self) -> None:
        """Teardown hook: cancel outstanding work and stop the task scope."""
        if self._scope.is_closed:
            return
        self.logger.debug("Closing user controller")
        self._scope.close()

    # ------------- Internals -------------

    async def _reload(self) -> list[User]:
        users = await self._scope.run_blocking(self._store.get_all)
        self.users.set(users)
        self.logger.debug(f"Users in list: {[u.to_dict() for u in users]}")
        return users

    def _launch(
        self, operation: str, action: Callable[[], Awaitable[T]]
    ) -> concurrent.futures.Future[T]:
        if self._scope.is_closed:
            raise RuntimeError("UserController is closed")
        return self._scope.launch(self._serialized(operation, action))

    async def _serialized(self, operation: str, action: Callable[[], Awaitable[T]]) -> T:
        async with self._lock:
            try:
                result = await action()
            except asyncio.CancelledError:
                self.logger.debug(f"Cancelled: {operation}")
                raise
            except Exception as e:
                self.logger.error(f"Failed to {operation}: {e}")
                if isinstance(e, UserStoreError):
                    self.error.set(str(e))
                else:
                    self.error.set(f"Could not {operation}: {e}")
                raise
            self.error.set(None)
            return result

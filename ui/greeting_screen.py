"""
Greeting screen: seeds the users table on entry and logs its contents.
"""

from __future__ import annotations

import concurrent.futures
import logging

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

from database.users_db import UsersDatabase
from models.user import User
from utils.task_scope import TaskScope

logger = logging.getLogger(__name__)

SEED_USER = User(1, "Pepe", "Botella")


class GreetingScreen(QWidget):
    """Static greeting; the seeding runs on a background scope owned by the screen."""

    # Emitted from the scope thread, delivered queued on the GUI thread
    seed_failed = Signal(str)

    def __init__(
        self,
        store: UsersDatabase,
        name: str = "Android",
        scope: TaskScope | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.store = store
        self.scope = scope or TaskScope(name="greeting-screen")

        layout = QVBoxLayout(self)
        self.greeting_label = QLabel(f"Hello {name}!")
        self.greeting_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.greeting_label)

        self.seed_failed.connect(self.show_seed_error)
        self.seed_future = self.scope.launch(self._seed_and_log())
        self.seed_future.add_done_callback(self._on_seed_done)

    async def _seed_and_log(self) -> list[User]:
        await self.scope.run_blocking(self.store.insert_all, SEED_USER)
        users = await self.scope.run_blocking(self.store.get_all)
        count = await self.scope.run_blocking(self.store.count)
        logger.info("Users: %s", [str(u) for u in users])
        logger.info("%d user(s) stored", count)
        return users

    def _on_seed_done(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        if (error := future.exception()) is not None:
            logger.error("Seeding users failed: %s", error)
            self.seed_failed.emit(str(error))

    @Slot(str)
    def show_seed_error(self, message: str) -> None:
        self.greeting_label.setText(f"{self.greeting_label.text()}\n{message}")

    def shutdown(self) -> None:
        self.scope.close()

"""
User list screen: renders the controller's users and issues add/delete commands.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from controllers.user_controller import UserController
from models.user import User

from .bridge import ControllerBridge

logger = logging.getLogger(__name__)

DEFAULT_FIRST_NAME = "el diablo"
DEFAULT_LAST_NAME = "mami"


def format_user(user: User) -> str:
    """Row text shown for a user."""
    return f"{user.first_name or ''} {user.last_name or ''}"


class UserListScreen(QWidget):
    """List of users with add and delete buttons.

    The widget never edits its list directly: it only re-renders what the
    controller publishes.
    """

    def __init__(
        self,
        controller: UserController,
        default_first_name: str = DEFAULT_FIRST_NAME,
        default_last_name: str = DEFAULT_LAST_NAME,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.controller = controller
        self.default_first_name = default_first_name
        self.default_last_name = default_last_name

        self._setup_ui()

        self.bridge = ControllerBridge(controller, self)
        self.bridge.users_changed.connect(self.render_users)
        self.bridge.error_changed.connect(self.show_error)
        self.bridge.attach()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        form = QHBoxLayout()
        self.first_name_input = QLineEdit()
        self.first_name_input.setPlaceholderText("First name")
        self.first_name_input.textEdited.connect(self.on_input_edited)
        self.last_name_input = QLineEdit()
        self.last_name_input.setPlaceholderText("Last name")
        self.last_name_input.textEdited.connect(self.on_input_edited)
        form.addWidget(self.first_name_input)
        form.addWidget(self.last_name_input)
        layout.addLayout(form)

        buttons = QHBoxLayout()
        self.add_button = QPushButton("Add user")
        self.add_button.clicked.connect(self.on_add_clicked)
        self.delete_button = QPushButton("Delete selected")
        self.delete_button.clicked.connect(self.on_delete_clicked)
        self.reload_button = QPushButton("Reload")
        self.reload_button.clicked.connect(self.on_reload_clicked)
        buttons.addWidget(self.add_button)
        buttons.addWidget(self.delete_button)
        buttons.addWidget(self.reload_button)
        layout.addLayout(buttons)

        self.user_list = QListWidget()
        layout.addWidget(self.user_list)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #b00020;")
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        layout.addWidget(self.error_label)

    # ------------- Rendering -------------

    @Slot(object)
    def render_users(self, users: list[User]) -> None:
        selected = self.selected_user()
        self.user_list.clear()
        for user in users:
            item = QListWidgetItem(format_user(user))
            item.setData(Qt.ItemDataRole.UserRole, user)
            self.user_list.addItem(item)
            if selected is not None and user.uid == selected.uid:
                self.user_list.setCurrentItem(item)

    @Slot(str)
    def show_error(self, message: str) -> None:
        self.error_label.setText(message)
        self.error_label.setVisible(bool(message))

    def selected_user(self) -> User | None:
        item = self.user_list.currentItem()
        if item is None:
            return None
        return item.data(Qt.ItemDataRole.UserRole)

    # ------------- Commands -------------

    @Slot()
    def on_add_clicked(self) -> None:
        first_name = self.first_name_input.text().strip() or self.default_first_name
        last_name = self.last_name_input.text().strip() or self.default_last_name
        self.controller.add_user(first_name, last_name)
        self.first_name_input.clear()
        self.last_name_input.clear()

    @Slot()
    def on_delete_clicked(self) -> None:
        user = self.selected_user()
        if user is None:
            logger.debug("Delete clicked without a selection")
            return
        self.controller.delete_user(user)

    @Slot(str)
    def on_input_edited(self, _text: str) -> None:
        # Typing dismisses a stale error
        if not self.error_label.isHidden():
            self.controller.clear_error()

    @Slot()
    def on_reload_clicked(self) -> None:
        self.controller.load_users()

    def shutdown(self) -> None:
        self.bridge.detach()

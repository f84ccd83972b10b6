"""
Qt signal bridge for controller observables.

Observable subscribers run on the controller's task scope thread. Emitting a
signal from there and connecting it to a widget slot makes Qt queue the call
onto the GUI thread.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, Signal

if TYPE_CHECKING:
    from controllers.user_controller import UserController


class ControllerBridge(QObject):
    """Re-emits a UserController's observables as Qt signals"""

    # Signals
    users_changed = Signal(object)  # list[User]
    error_changed = Signal(str)  # empty string when cleared

    def __init__(self, controller: UserController, parent: QObject | None = None):
        super().__init__(parent)
        self.controller = controller
        self._unsubscribers = []

    def attach(self) -> None:
        """Start forwarding; the current values are emitted immediately."""
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self.controller.users.subscribe(self._forward_users),
            self.controller.error.subscribe(self._forward_error),
        ]

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _forward_users(self, users) -> None:
        self.users_changed.emit(list(users))

    def _forward_error(self, message: str | None) -> None:
        self.error_changed.emit(message or "")

"""
Main application window hosting one of the screens.
"""

from __future__ import annotations

from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QMainWindow, QWidget

from utils.logger import Logger


class MainWindow(QMainWindow):
    """Top-level window; tears down its screen and controller on close"""

    def __init__(
        self,
        screen: QWidget,
        controller=None,
        title: str = "SqliteRoom",
        size: tuple[int, int] = (480, 640),
    ):
        super().__init__()
        self.logger = Logger()
        self.screen = screen
        self.controller = controller

        self.setWindowTitle(title)
        self.resize(*size)
        self.setCentralWidget(screen)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.logger.info("Main window closing")
        shutdown = getattr(self.screen, "shutdown", None)
        if callable(shutdown):
            shutdown()
        if self.controller is not None:
            self.controller.close()
        super().closeEvent(event)

#!/usr/bin/env python3
"""
SqliteRoom desktop entry point.

Loads configuration, configures logging, opens the shared database and shows
either the users screen or the greeting screen.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

SCREENS = ("users", "greeting")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SQLite users table demo")
    parser.add_argument("--screen", choices=SCREENS, help="screen to open")
    parser.add_argument("--data-dir", type=Path, help="directory holding user databases")
    parser.add_argument("--user", help="profile name (one database per profile)")
    parser.add_argument("--config", type=Path, help="path to app_config.json")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from utils.config_loader import ConfigLoader
    from utils.structured_logging import setup_logging

    config = ConfigLoader(args.config)
    asyncio.run(config.load())
    setup_logging(
        app_name="SqliteRoom",
        log_dir=config.get("logging.dir", "logs"),
        level=args.log_level or config.get("logging.level", "INFO"),
    )

    from PySide6.QtWidgets import QApplication

    from controllers.user_controller import UserController
    from database.factory import get_database, reset_database
    from database.users_db import UsersDatabase
    from ui.greeting_screen import GreetingScreen
    from ui.main_window import MainWindow
    from ui.user_list_screen import UserListScreen
    from utils.logger import Logger

    logger = Logger()
    app = QApplication.instance() or QApplication(sys.argv[:1])

    try:
        db_manager = get_database(
            base_dir=args.data_dir or config.get_data_dir(),
            user_name=args.user or config.get("database.user_name"),
        )
    except Exception as e:
        logger.error(f"Cannot open the database: {e}")
        return 1

    if config.get("database.backup_on_startup", False):
        db_manager.backup_databases()

    screen_name = args.screen or config.get("app.default_screen", "users")
    controller = None
    if screen_name == "greeting":
        screen = GreetingScreen(
            UsersDatabase(db_manager), name=config.get("ui.greeting_name", "Android")
        )
    else:
        controller = UserController(db_manager=db_manager)
        screen = UserListScreen(
            controller,
            default_first_name=config.get("ui.default_first_name", "el diablo"),
            default_last_name=config.get("ui.default_last_name", "mami"),
        )

    window = MainWindow(
        screen,
        controller=controller,
        title=config.get("app.name", "SqliteRoom"),
        size=(config.get("ui.window_width", 480), config.get("ui.window_height", 640)),
    )
    window.show()
    logger.info(f"Showing {screen_name} screen")

    try:
        return app.exec()
    finally:
        reset_database()


if __name__ == "__main__":
    sys.exit(main())

"""
UI Package - PySide6 screens for the users table
"""

from .greeting_screen import GreetingScreen
from .main_window import MainWindow
from .user_list_screen import UserListScreen

__all__ = ["GreetingScreen", "MainWindow", "UserListScreen"]

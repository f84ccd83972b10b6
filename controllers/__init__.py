"""
Controllers Package - view-models sitting between the database layer and the GUI
"""

from .user_controller import UserController

__all__ = ["UserController"]

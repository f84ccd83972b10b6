"""
Lightweight data models shared by the database layer and the controllers.
"""

from .user import User

__all__ = ["User"]

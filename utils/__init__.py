"""
Utils Package - Core utilities for SqliteRoom
Contains configuration, logging, observable state and background task helpers
"""

from .config_loader import ConfigLoader
from .logger import Logger
from .observable import ObservableValue
from .task_scope import TaskScope

__all__ = [
    "ConfigLoader",
    "Logger",
    "ObservableValue",
    "TaskScope",
]

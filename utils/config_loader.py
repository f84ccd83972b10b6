"""
Configuration Loader for SqliteRoom
Handles loading and managing application configuration
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, cast

import aiofiles

from .logger import Logger

DEFAULT_CONFIG: dict[str, Any] = {
    "app": {
        "name": "SqliteRoom",
        "version": "1.0.0",
        "debug": False,
        "default_screen": "users",
    },
    "database": {
        "data_dir": None,
        "user_name": "default_user",
        "backup_on_startup": False,
    },
    "logging": {
        "level": "INFO",
        "dir": "logs",
    },
    "ui": {
        "window_width": 480,
        "window_height": 640,
        "greeting_name": "Android",
        "default_first_name": "el diablo",
        "default_last_name": "mami",
    },
}

# Environment variable -> dotted config key
ENV_MAPPINGS: dict[str, str] = {
    "SQLITEROOM_DEBUG": "app.debug",
    "SQLITEROOM_SCREEN": "app.default_screen",
    "SQLITEROOM_USER_DATA": "database.data_dir",
    "SQLITEROOM_USER": "database.user_name",
    "SQLITEROOM_BACKUP_ON_STARTUP": "database.backup_on_startup",
    "SQLITEROOM_LOG_LEVEL": "logging.level",
    "SQLITEROOM_LOG_DIR": "logging.dir",
}


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    # Remove quotes if present
    return key.strip(), value.strip().strip('"').strip("'")


async def load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from a .env file"""
    env_vars: dict[str, str] = {}
    if env_path.exists():
        try:
            async with aiofiles.open(env_path, encoding="utf-8") as f:
                async for line in f:
                    if parsed := _parse_env_line(line):
                        env_vars[parsed[0]] = parsed[1]
        except (OSError, UnicodeDecodeError) as e:
            Logger().error(f"Error loading .env file: {e}")
    return env_vars


def _lookup(data: dict[str, Any], key: str, default: Any = None) -> Any:
    current: Any = data
    for k in key.split("."):
        if not isinstance(current, dict):
            return default
        mapping = cast("dict[str, Any]", current)
        if k not in mapping:
            return default
        current = mapping[k]
    return current


def _coerce(config_key: str, raw_value: str) -> Any:
    """Convert an env string for a boolean setting; text settings stay text."""
    if isinstance(_lookup(DEFAULT_CONFIG, config_key), bool):
        return raw_value.strip().lower() in ("1", "true", "yes", "on")
    return raw_value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


class ConfigLoader:
    """Loads and manages application configuration

    Precedence, lowest first: built-in defaults, the JSON config file, the
    ``.env`` file next to it, then the process environment. Until ``load``
    is awaited the loader serves the defaults.
    """

    def __init__(self, config_path: Path | None = None):
        self.config_path = (
            config_path or Path(__file__).resolve().parent.parent / "config" / "app_config.json"
        )
        self.env_path = self.config_path.parent / ".env"
        Logger().debug(f"ConfigLoader init - config_path: {self.config_path}")
        self.config_data: dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

    async def load(self) -> None:
        """Load configuration from file and environment"""
        env_vars = await load_env_file(self.env_path)
        self.config_data = copy.deepcopy(DEFAULT_CONFIG)
        try:
            if self.config_path.exists():
                async with aiofiles.open(self.config_path, encoding="utf-8") as f:
                    _deep_merge(self.config_data, json.loads(await f.read()))
        except (OSError, json.JSONDecodeError) as e:
            Logger().error(f"Error loading config: {e}")
            self.config_data = copy.deepcopy(DEFAULT_CONFIG)
        self._apply_env_overrides(env_vars)

    def _apply_env_overrides(self, env_vars: dict[str, str]) -> None:
        for env_key, config_key in ENV_MAPPINGS.items():
            raw_value = os.environ.get(env_key, env_vars.get(env_key))
            if raw_value is not None:
                self._set(config_key, _coerce(config_key, raw_value))

    def _set(self, key: str, value: Any) -> None:
        keys = key.split(".")
        config = self.config_data
        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'app.name')"""
        return _lookup(self.config_data, key, default)

    def get_data_dir(self) -> Path | None:
        data_dir = self.get("database.data_dir")
        return Path(data_dir).expanduser() if data_dir else None

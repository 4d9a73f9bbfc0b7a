"""Configuration management for WT Notes."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from daynotes.data.errors import DirectoryResolutionError

_CONFIG_VERSION = 1

APP_DIR_NAME = "wt-notes"
DB_FILENAME = "wt-database.sqlite"


def _default_config_path() -> Path:
    """Get default config file path following XDG spec."""
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / APP_DIR_NAME / "config.json"


def _default_data_dir() -> Path:
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / APP_DIR_NAME
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise DirectoryResolutionError(
            "Failed to get app data directory: no home directory"
        ) from exc
    return home / ".local" / "share" / APP_DIR_NAME


class Config:
    """Application configuration with persistence."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._path = config_path or _default_config_path()
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        """Load config from disk or return defaults."""
        if not self._path.exists():
            return self._defaults()
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            return self._defaults()
        if not isinstance(data, dict) or data.get("version") != _CONFIG_VERSION:
            return self._defaults()
        return data

    def _defaults(self) -> dict[str, Any]:
        """Return default configuration."""
        return {
            "version": _CONFIG_VERSION,
            "data_dir": "",
            "api_host": os.getenv("WT_NOTES_HOST", "127.0.0.1"),
            "api_port": int(os.getenv("WT_NOTES_PORT", "8765")),
            "log_level": os.getenv("WT_NOTES_LOG_LEVEL", "INFO"),
            "recent_days": 7,
        }

    def save(self) -> None:
        """Persist config to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
        except OSError:
            pass  # silently fail – not critical

    def resolve_app_data_dir(self) -> Path:
        """Return the directory holding the database file.

        ``WT_NOTES_DATA_DIR`` wins over the configured ``data_dir``, which
        wins over the XDG data home.
        """
        override = os.environ.get("WT_NOTES_DATA_DIR") or self.data_dir
        if override:
            return Path(override).expanduser()
        return _default_data_dir()

    # -- Getters --

    @property
    def data_dir(self) -> str:
        return str(self._data.get("data_dir", ""))

    @property
    def api_host(self) -> str:
        return str(self._data.get("api_host", "127.0.0.1"))

    @property
    def api_port(self) -> int:
        return int(self._data.get("api_port", 8765))

    @property
    def log_level(self) -> str:
        return str(self._data.get("log_level", "INFO")).upper()

    @property
    def recent_days(self) -> int:
        return max(1, int(self._data.get("recent_days", 7)))

    # -- Setters --

    def set_data_dir(self, value: str) -> None:
        self._data["data_dir"] = value.strip()

    def set_api_host(self, value: str) -> None:
        self._data["api_host"] = value.strip()

    def set_api_port(self, value: int) -> None:
        self._data["api_port"] = int(value)

    def set_log_level(self, value: str) -> None:
        self._data["log_level"] = value.strip().upper()

    def set_recent_days(self, value: int) -> None:
        self._data["recent_days"] = max(1, int(value))

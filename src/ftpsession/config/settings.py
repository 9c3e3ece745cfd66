"""Application settings management for the FTP session client.

Provides AppSettings dataclass and SettingsManager for persistence.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from ftpsession.config.paths import get_settings_path

logger = logging.getLogger("ftpsession.settings")


@dataclass
class AppSettings:
    """Settings that persist between runs."""

    # FTP connection defaults
    last_host: str = ""
    last_port: int = 21
    last_username: str = "anonymous"
    passive_mode: bool = True
    timeout: int = 90

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = True

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


class SettingsManager:
    """Manages application settings persistence."""

    _FIELDS = frozenset(f.name for f in fields(AppSettings))

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Optional custom path, defaults to platform standard
        """
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[AppSettings] = None

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    def load(self) -> AppSettings:
        """
        Load settings from disk.

        Returns:
            AppSettings instance (defaults if file not found)
        """
        if self._config_path.exists():
            try:
                with open(self._config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                self._settings = AppSettings.from_dict(data)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Ignoring unreadable settings file {self._config_path}: {e}")
                self._settings = AppSettings()
        else:
            self._settings = AppSettings()

        return self._settings

    def save(self, settings: AppSettings) -> None:
        """
        Persist settings to disk.

        Args:
            settings: Settings to save
        """
        self._settings = settings
        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        # Readers never see a partially written file
        temp_path = self._config_path.with_suffix(".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)
        os.replace(temp_path, self._config_path)

    def reset(self) -> AppSettings:
        """
        Reset to default settings.

        Returns:
            Default AppSettings instance
        """
        self._settings = AppSettings()

        if self._config_path.exists():
            self._config_path.unlink()

        return self._settings

    def update(self, **kwargs) -> AppSettings:
        """
        Update specific settings fields.

        Args:
            **kwargs: Field names and new values

        Returns:
            Updated AppSettings instance
        """
        if self._settings is None:
            self.load()

        for key, value in kwargs.items():
            if key in self._FIELDS:
                setattr(self._settings, key, value)
            else:
                logger.debug(f"Ignoring unknown setting {key}")

        self.save(self._settings)
        return self._settings

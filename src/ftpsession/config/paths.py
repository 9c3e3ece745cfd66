"""Settings and log locations for the FTP session client.

FTPSESSION_HOME, when set, holds everything. Otherwise settings go to the
platform config directory and logs to the platform state directory:

    - Windows: %APPDATA%/FTPSession, logs in %LOCALAPPDATA%/FTPSession/logs
    - macOS: ~/Library/Application Support/FTPSession, logs in ~/Library/Logs/FTPSession
    - Linux: $XDG_CONFIG_HOME/FTPSession, logs in $XDG_STATE_HOME/FTPSession/logs
"""

import os
import sys
from pathlib import Path


APP_NAME = "FTPSession"
HOME_ENV_VAR = "FTPSESSION_HOME"
SETTINGS_FILE_NAME = "settings.json"
LOG_FILE_NAME = "ftpsession.log"


def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _env_dir(name: str, fallback: Path) -> Path:
    value = os.environ.get(name)
    return Path(value) if value else fallback


def get_app_data_dir() -> Path:
    """
    Get the directory holding the settings file.

    Returns:
        Path to the config directory (created if missing)
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return _ensure_dir(Path(override))

    home = Path.home()
    if sys.platform == "win32":
        base = _env_dir("APPDATA", home / "AppData" / "Roaming")
    elif sys.platform == "darwin":
        base = home / "Library" / "Application Support"
    else:
        base = _env_dir("XDG_CONFIG_HOME", home / ".config")

    return _ensure_dir(base / APP_NAME)


def get_settings_path() -> Path:
    return get_app_data_dir() / SETTINGS_FILE_NAME


def get_log_dir() -> Path:
    """
    Get the directory for log files.

    Returns:
        Path to the logs directory (created if missing)
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return _ensure_dir(Path(override) / "logs")

    home = Path.home()
    if sys.platform == "win32":
        base = _env_dir("LOCALAPPDATA", home / "AppData" / "Local") / APP_NAME / "logs"
    elif sys.platform == "darwin":
        base = home / "Library" / "Logs" / APP_NAME
    else:
        base = _env_dir("XDG_STATE_HOME", home / ".local" / "state") / APP_NAME / "logs"

    return _ensure_dir(base)


def get_log_file_path() -> Path:
    return get_log_dir() / LOG_FILE_NAME

"""
Per-user locations for TrackShelf data.

    macOS:   ~/Library/Application Support/TrackShelf/
    Windows: %APPDATA%/TrackShelf/
    Linux:   ~/.local/share/TrackShelf/ (preferences in ~/.config/trackshelf/)

Directories are created on first access.
"""
import os
import sys
from pathlib import Path
from typing import Optional

APP_NAME = "TrackShelf"


def _ensure(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_user_data_dir() -> Path:
    """Root for logs and the optional user .env file."""
    if sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    elif sys.platform == "win32":
        base = Path(os.getenv("APPDATA", str(Path.home() / "AppData" / "Roaming")))
    else:
        base = Path(os.getenv("XDG_DATA_HOME", str(Path.home() / ".local" / "share")))
    return _ensure(base / APP_NAME)


def get_user_config_dir() -> Path:
    if sys.platform in ("darwin", "win32"):
        return get_user_data_dir()
    base = Path(os.getenv("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return _ensure(base / APP_NAME.lower())


def get_logs_dir() -> Path:
    return _ensure(get_user_data_dir() / "logs")


def get_preferences_path() -> Path:
    return get_user_config_dir() / "preferences.json"


def get_app_install_dir() -> Optional[Path]:
    """Bundle directory when frozen, otherwise the source checkout root."""
    if getattr(sys, "frozen", False):
        bundle = getattr(sys, "_MEIPASS", None)
        return Path(bundle) if bundle else Path(sys.executable).parent
    return Path(__file__).resolve().parents[2]

"""
JSON file implementation of PreferencesRepository

Handles persistence of user preferences that persist across sessions.
The whole store is a single JSON object keyed by namespaced preference keys
(for example "playback.settings").
"""
import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from src.utils.message import Log


class PreferencesRepository:
    """
    Repository for user preferences persistence.

    Values must be JSON serializable. Writes go to a temporary file that is
    then renamed over the store, so a crash mid-write never truncates it.
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Args:
            path: Location of the JSON store. Defaults to the user config dir.
        """
        if path is None:
            from src.utils.paths import get_preferences_path
            path = get_preferences_path()
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            Log.warning(f"PreferencesRepository: Could not read {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            Log.warning(f"PreferencesRepository: Ignoring non-object store at {self.path}")
            return {}
        return data

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    def set(self, key: str, value: Any) -> None:
        """
        Set a preference value.

        Args:
            key: Preference key
            value: Value to store (must be JSON serializable)
        """
        with self._lock:
            existed = key in self._data
            self._data[key] = value
            self._write()
        Log.debug(f"{'Updated' if existed else 'Created'} preference: {key}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a preference value.

        Args:
            key: Preference key
            default: Default value if preference not found
        """
        with self._lock:
            return self._data.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._data)

    def delete(self, key: str) -> bool:
        """
        Delete a preference.

        Returns:
            True if the key existed
        """
        with self._lock:
            if key not in self._data:
                return False
            del self._data[key]
            self._write()
        Log.debug(f"Deleted preference: {key}")
        return True

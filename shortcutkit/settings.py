import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class SettingsManager:
    """
    Manages persistent application settings using a JSON file.
    """
    SETTINGS_FILE = Path("settings.json")

    DEFAULT_SETTINGS = {
        "steam_path": "",
        "user_id": "",
        "controller_template": "",
        "shortcut_flags": {
            "is_hidden": False,
            "allow_overlay": True,
            "allow_desktop_config": True,
            "openvr": False
        }
    }

    def __init__(self, settings_file: Optional[Path] = None):
        if settings_file is not None:
            self.SETTINGS_FILE = Path(settings_file)
        self._settings = self.load_settings()

    def load_settings(self) -> Dict[str, Any]:
        """
        Loads settings from disk, or returns defaults if file doesn't exist.
        """
        if not self.SETTINGS_FILE.exists():
            return copy.deepcopy(self.DEFAULT_SETTINGS)

        try:
            with open(self.SETTINGS_FILE, "r") as f:
                data = json.load(f)
            # Merge with defaults to ensure all keys exist
            settings = copy.deepcopy(self.DEFAULT_SETTINGS)
            settings.update(data)
            return settings
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Error loading settings: {e}")
            return copy.deepcopy(self.DEFAULT_SETTINGS)

    def save_settings(self):
        """
        Saves current settings to disk.
        """
        try:
            with open(self.SETTINGS_FILE, "w") as f:
                json.dump(self._settings, f, indent=4)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def set(self, key: str, value: Any):
        self._settings[key] = value
        self.save_settings()

    @property
    def steam_path(self) -> str:
        return self._settings.get("steam_path", "")

    @steam_path.setter
    def steam_path(self, path: str):
        self._settings["steam_path"] = path
        self.save_settings()

    @property
    def user_id(self) -> str:
        return self._settings.get("user_id", "")

    @user_id.setter
    def user_id(self, user_id: str):
        self._settings["user_id"] = user_id
        self.save_settings()

    @property
    def shortcut_flags(self) -> Dict[str, bool]:
        """Default flag values for new shortcuts, merged over the built-in ones."""
        flags = dict(self.DEFAULT_SETTINGS["shortcut_flags"])
        flags.update(self._settings.get("shortcut_flags") or {})
        return flags

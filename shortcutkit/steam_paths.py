import platform
from pathlib import Path
from typing import List, Optional

# SteamID64 of account id 0; userdata folders sometimes use the 64-bit form
STEAMID64_BASE = 76561197960265728


class SteamPathDetector:
    """
    Locates the Steam installation and the per-user files shortcuts are
    written to.
    """

    @staticmethod
    def get_steam_install_path(settings_path: str = "") -> Optional[Path]:
        """
        Returns the Steam installation path.
        Priority:
        1. settings_path (if valid)
        2. Default locations for the current OS
        """
        if settings_path:
            path = Path(settings_path)
            if path.exists() and path.is_dir():
                return path

        system = platform.system()
        user_home = Path.home()
        candidates = []

        if system == "Windows":
            candidates = [
                Path("C:/Program Files (x86)/Steam"),
                Path("C:/Program Files/Steam"),
            ]
        elif system == "Linux":
            candidates = [
                user_home / ".local/share/Steam",
                user_home / ".steam/steam",
                user_home / ".var/app/com.valvesoftware.Steam/data/Steam",
            ]
        elif system == "Darwin":  # macOS
            candidates = [
                user_home / "Library/Application Support/Steam",
            ]

        for path in candidates:
            if path.exists() and path.is_dir():
                return path

        return None

    @staticmethod
    def get_userdata_path(steam_root: Optional[Path]) -> Optional[Path]:
        if steam_root and (steam_root / "userdata").exists():
            return steam_root / "userdata"
        return None

    @staticmethod
    def get_user_ids(userdata_path: Path) -> List[str]:
        """
        Account ids found in userdata. Each user has a directory named after
        their 32-bit steam account id.
        """
        if not userdata_path.exists():
            return []
        return sorted(d.name for d in userdata_path.iterdir() if d.is_dir() and d.name.isdigit())

    @staticmethod
    def account_id(user_id: str) -> str:
        """Converts a SteamID64 to the 32-bit account id, leaving others as-is."""
        if user_id.isdigit() and int(user_id) >= STEAMID64_BASE:
            return str(int(user_id) - STEAMID64_BASE)
        return user_id

    @staticmethod
    def get_shortcuts_path(userdata_path: Path, user_id: str) -> Path:
        return userdata_path / user_id / "config" / "shortcuts.vdf"

    @staticmethod
    def get_configset_path(steam_root: Path, user_id: str) -> Path:
        return (steam_root / "steamapps" / "common" / "Steam Controller Configs"
                / SteamPathDetector.account_id(user_id) / "config" / "configset_controller_neptune.vdf")

    @staticmethod
    def ensure_parent_dir(file_path: Path) -> bool:
        """
        Ensures the directory holding file_path exists. Returns True if successful.
        """
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            return True
        except OSError:
            return False

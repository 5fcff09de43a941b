import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, MutableMapping, Optional, Set

from shortcutkit.errors import ShortcutSetError
from shortcutkit.vdf_types import UInt32, VdfMap, last_key

logger = logging.getLogger(__name__)

SHORTCUTS_KEY = "shortcuts"

# appids for non-Steam shortcuts are drawn from [APPID_MIN, APPID_MAX)
APPID_MIN = 1_000_000_000
APPID_MAX = 4_294_967_294
MAX_APPID_DRAWS = 10_000

# (app_name, existing_key) -> overwrite?
ConfirmOverwrite = Callable[[str, str], bool]
# random.randrange semantics: (start, stop) -> start <= n < stop
RandomSource = Callable[[int, int], int]


@dataclass
class ShortcutInfo:
    key: str
    app_name: str
    exe: str
    start_dir: str
    appid: Optional[int] = None
    launch_options: str = ""

    @property
    def grid_id(self) -> Optional[int]:
        """
        Long id used by Big Picture and the grid artwork folder:
        (appid << 32) | 0x02000000
        """
        if self.appid is None:
            return None
        return ((self.appid & 0xFFFFFFFF) << 32) | 0x02000000


def _flag(value: bool) -> UInt32:
    return UInt32(1 if value else 0)


def _field(entry: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    # shortcuts.vdf written by older clients uses different casing (Exe / exe)
    for name in names:
        if name in entry:
            return entry[name]
    return default


def _appid_of(entry: Any) -> Optional[int]:
    # Files from other tools sometimes store the appid as a string; those are skipped.
    if not isinstance(entry, Mapping):
        return None
    appid = _field(entry, "appid", "AppID")
    if isinstance(appid, int) and not isinstance(appid, bool):
        return int(appid)
    return None


class ShortcutEditor:
    """
    Adds or replaces non-Steam game entries in a decoded shortcuts.vdf map.

    The map is edited in place. Which key an entry lands on depends on the
    insertion order of the existing "shortcuts" children, so maps should come
    straight from VdfParser.parse_binary (or empty_shortcut_set()).
    """

    def __init__(self,
                 confirm_overwrite: Optional[ConfirmOverwrite] = None,
                 random_source: RandomSource = random.randrange):
        self.confirm_overwrite = confirm_overwrite
        self.random_source = random_source

    @staticmethod
    def empty_shortcut_set() -> VdfMap:
        """The map stored in a brand new shortcuts.vdf."""
        return VdfMap({SHORTCUTS_KEY: VdfMap()})

    @staticmethod
    def get_shortcuts(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
        if not isinstance(data, Mapping) or SHORTCUTS_KEY not in data:
            raise ShortcutSetError(f"Shortcut set has no '{SHORTCUTS_KEY}' map")
        shortcuts = data[SHORTCUTS_KEY]
        if not isinstance(shortcuts, MutableMapping):
            raise ShortcutSetError(
                f"'{SHORTCUTS_KEY}' must be a map, got {type(shortcuts).__name__}"
            )
        return shortcuts

    @staticmethod
    def next_key(shortcuts: Mapping[str, Any]) -> str:
        """
        "0" for an empty set, otherwise the most recently inserted key plus one.
        Hand-edited files with out-of-order keys can make this collide with an
        existing key; the entry at that key is then replaced.
        """
        if not shortcuts:
            return "0"
        last = last_key(shortcuts)
        try:
            return str(int(last) + 1)
        except ValueError:
            raise ShortcutSetError(f"Shortcut key {last!r} is not a number")

    @staticmethod
    def existing_appids(shortcuts: Mapping[str, Any]) -> Set[int]:
        appids = set()
        for entry in shortcuts.values():
            appid = _appid_of(entry)
            if appid is not None:
                appids.add(appid)
        return appids

    def draw_appid(self, taken: Set[int]) -> UInt32:
        for _ in range(MAX_APPID_DRAWS):
            appid = self.random_source(APPID_MIN, APPID_MAX)
            if appid not in taken:
                return UInt32(appid)
            logger.debug(f"appid {appid} already in use, drawing again")
        raise ShortcutSetError(f"Could not draw a free appid in {MAX_APPID_DRAWS} attempts")

    @staticmethod
    def find_by_name(shortcuts: Mapping[str, Any], app_name: str) -> Optional[str]:
        for key, entry in shortcuts.items():
            if isinstance(entry, Mapping) and _field(entry, "AppName", "appname") == app_name:
                return key
        return None

    def add_shortcut(self,
                     data: MutableMapping[str, Any],
                     app_name: str,
                     exe: str,
                     start_dir: str,
                     icon: str = "",
                     launch_options: str = "",
                     is_hidden: bool = False,
                     allow_overlay: bool = True,
                     allow_desktop_config: bool = True,
                     openvr: bool = False) -> UInt32:
        """
        Adds a shortcut entry and returns its appid.

        If an entry with the same AppName exists and confirm_overwrite agrees,
        the new entry takes that entry's key (and position). Otherwise it is
        appended under next_key().
        """
        shortcuts = self.get_shortcuts(data)
        key = self.next_key(shortcuts)
        appid = self.draw_appid(self.existing_appids(shortcuts))

        existing_key = self.find_by_name(shortcuts, app_name)
        if existing_key is not None:
            if self.confirm_overwrite is not None and self.confirm_overwrite(app_name, existing_key):
                logger.info(f"Replacing shortcut '{app_name}' at key {existing_key}")
                key = existing_key
            else:
                logger.warning(f"Keeping existing shortcut '{app_name}' at key {existing_key}, adding another")

        entry = VdfMap()
        entry["AppName"] = app_name
        entry["appid"] = appid
        entry["exe"] = exe
        entry["StartDir"] = start_dir
        entry["icon"] = icon
        entry["LaunchOptions"] = launch_options
        entry["IsHidden"] = _flag(is_hidden)
        entry["AllowOverlay"] = _flag(allow_overlay)
        entry["AllowDesktopConfig"] = _flag(allow_desktop_config)
        entry["openvr"] = _flag(openvr)

        shortcuts[key] = entry
        logger.info(f"Stored shortcut '{app_name}' at key {key} with appid {appid}")
        return appid

    @staticmethod
    def list_shortcuts(data: Mapping[str, Any]) -> List[ShortcutInfo]:
        results = []
        for key, entry in ShortcutEditor.get_shortcuts(data).items():
            if not isinstance(entry, Mapping):
                continue
            results.append(ShortcutInfo(
                key=key,
                app_name=_field(entry, "AppName", "appname", default=""),
                exe=_field(entry, "exe", "Exe", default=""),
                start_dir=_field(entry, "StartDir", "startdir", default=""),
                appid=_appid_of(entry),
                launch_options=_field(entry, "LaunchOptions", default=""),
            ))
        return results

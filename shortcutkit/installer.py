import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from shortcutkit.controller_config import ControllerConfigEditor
from shortcutkit.shortcut_editor import ShortcutEditor
from shortcutkit.steam_paths import SteamPathDetector
from shortcutkit.steam_vdf import VdfParser

logger = logging.getLogger(__name__)


@dataclass
class ShortcutRequest:
    app_name: str
    exe: str
    start_dir: str = ""
    icon: str = ""
    launch_options: str = ""
    is_hidden: bool = False
    allow_overlay: bool = True
    allow_desktop_config: bool = True
    openvr: bool = False
    # Valve template file name; None leaves the controller config set alone
    controller_template: Optional[str] = field(default=None)


def install_shortcut(shortcuts_path: Path,
                     request: ShortcutRequest,
                     editor: ShortcutEditor,
                     configset_path: Optional[Path] = None) -> int:
    """
    Adds the requested shortcut to shortcuts_path (creating the file when it
    is missing) and returns the shortcut's appid.
    """
    data = VdfParser.load_binary(str(shortcuts_path), default=ShortcutEditor.empty_shortcut_set())

    appid = editor.add_shortcut(
        data,
        request.app_name,
        request.exe,
        request.start_dir or str(Path(request.exe).parent),
        icon=request.icon,
        launch_options=request.launch_options,
        is_hidden=request.is_hidden,
        allow_overlay=request.allow_overlay,
        allow_desktop_config=request.allow_desktop_config,
        openvr=request.openvr,
    )

    SteamPathDetector.ensure_parent_dir(shortcuts_path)
    VdfParser.save_binary(str(shortcuts_path), data)
    logger.info(f"Saved {shortcuts_path}")

    if request.controller_template and configset_path is not None:
        assign_controller_template(configset_path, request.app_name, request.controller_template)

    return appid


def assign_controller_template(configset_path: Path, app_name: str, template: str) -> str:
    if configset_path.exists():
        config = VdfParser.load_text(str(configset_path))
    else:
        config = ControllerConfigEditor.empty_config_set()

    key = ControllerConfigEditor.set_template(config, app_name, template)

    SteamPathDetector.ensure_parent_dir(configset_path)
    VdfParser.save_text(str(configset_path), config)
    logger.info(f"Saved {configset_path}")
    return key

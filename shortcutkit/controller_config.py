import logging
from typing import Any, MutableMapping, Optional

from shortcutkit.errors import VdfInvalidValueError
from shortcutkit.vdf_types import VdfMap

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "controller_neptune_gamepad+mouse.vdf"

# Characters Steam drops when turning an app name into a config-set key
_STRIPPED_CHARS = set('/\\?%*:|"<>.')


def quoted(text: str) -> str:
    """Wraps text in the literal quotes text VDF keys and values carry."""
    return f'"{text}"'


class ControllerConfigEditor:
    """
    Edits a Steam Input config set (configset_controller_neptune.vdf),
    decoded with VdfParser.parse_text. Keys and values are kept with their
    quotes, so lookups go through quoted().

    "controller_config"
    {
        "<app key>"
        {
            "template"      "controller_neptune_gamepad+mouse.vdf"
        }
    }
    """

    ROOT_KEY = quoted("controller_config")

    @staticmethod
    def configset_key(app_name: str) -> str:
        """Steam keys non-Steam shortcuts by their lowercased, sanitized title."""
        return "".join(ch for ch in app_name.lower() if ch not in _STRIPPED_CHARS)

    @staticmethod
    def empty_config_set() -> VdfMap:
        return VdfMap({ControllerConfigEditor.ROOT_KEY: VdfMap()})

    @staticmethod
    def get_template(config: MutableMapping[str, Any], app_name: str) -> Optional[str]:
        root = config.get(ControllerConfigEditor.ROOT_KEY)
        if not isinstance(root, MutableMapping):
            return None
        entry = root.get(quoted(ControllerConfigEditor.configset_key(app_name)))
        if not isinstance(entry, MutableMapping):
            return None
        value = entry.get(quoted("template"))
        return value[1:-1] if value else None

    @staticmethod
    def set_template(config: MutableMapping[str, Any], app_name: str,
                     template: str = DEFAULT_TEMPLATE) -> str:
        """
        Points the app's config-set entry at a Valve template, replacing
        whatever entry was there. Returns the key used.
        """
        if '"' in template:
            raise VdfInvalidValueError(f"Template name {template!r} contains a quote")

        key = ControllerConfigEditor.configset_key(app_name)
        if not key:
            raise VdfInvalidValueError(f"App name {app_name!r} leaves an empty config-set key")

        root = config.get(ControllerConfigEditor.ROOT_KEY)
        if not isinstance(root, MutableMapping):
            root = VdfMap()
            config[ControllerConfigEditor.ROOT_KEY] = root

        entry = VdfMap()
        entry[quoted("template")] = quoted(template)
        root[quoted(key)] = entry
        logger.info(f"Controller template for '{key}' set to {template}")
        return key

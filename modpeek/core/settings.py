# modpeek/core/settings.py
from __future__ import annotations
import json5, os
from pydantic import JsonValue
from pathlib import Path
from typing import Any, cast
from functools import lru_cache

from modpeek.core.dictpath import getByPath

import logging
logger = logging.getLogger(__name__)

__all__ = [
    "SETTINGS_ENV_VAR", "DEFAULT_SETTINGS", "userSettingsPath",
    "loadUserSettings", "loadSettings", "deepMerge",
    "settings", "settingsBool",
]


SETTINGS_ENV_VAR = "MODPEEK_SETTINGS"

DEFAULT_SETTINGS: JsonValue = json5.loads("""
{
    logging: {
        level: "WARNING",   // any stdlib level name
        format: "dev",      // "dev" or "json"
    },
    output: {
        alwaysPrint: false, // same as -p
    },
}
""")



def userSettingsPath() -> Path:
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(os.path.expanduser("~/.modpeek/modpeek.json5"))



def loadUserSettings(filePath: Path | None = None) -> JsonValue:
    filePath = filePath or userSettingsPath()
    if filePath.exists():
        try:
            loaded = json5.loads(filePath.read_text(encoding="utf-8"))
        except Exception as err:
            logger.error("Failed to parse '%s': %s", filePath, err)
            return {}
        if not isinstance(loaded, dict):
            logger.error("Ignoring '%s': top level must be an object", filePath)
            return {}
        return loaded
    return {}



@lru_cache(maxsize=1)
def loadSettings() -> JsonValue:
    return deepMerge(DEFAULT_SETTINGS, loadUserSettings())



def deepMerge(first: JsonValue, second: JsonValue) -> JsonValue:
    """
    Returns a new JsonValue where keys from `second` override/extend `first`.
    Only merges recursively when BOTH sides are JSON objects (dicts).
    For all other JSON types the right-hand value `second` replaces `first`.
    """
    if isinstance(first, dict) and isinstance(second, dict):
        out: dict[str, JsonValue] = dict(first)
        for key, value in second.items():
            if key in out:
                out[key] = deepMerge(out[key], cast(JsonValue, value))
            else:
                out[key] = cast(JsonValue, value)
        return cast(JsonValue, out)

    return cast(JsonValue, second)

# ---------- Accessors over merged settings ----------

def settings(path: str, default: Any = None) -> Any:
    """Returns value at `path` from merged settings, or `default` if missing."""
    val = getByPath(loadSettings(), path)
    return default if val is None else val



def settingsBool(path: str, default: bool = False) -> bool:
    val = getByPath(loadSettings(), path)
    if isinstance(val, bool):
        return val
    if val is None:
        return default
    return bool(val)

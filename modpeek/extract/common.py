# modpeek/extract/common.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import json5

from modpeek.errors import ErrorSink, MalformedJson
from modpeek.mapping import mapWorldConfiguration
from modpeek.models import ModInfo, WorldConfiguration

logger = logging.getLogger(__name__)

__all__ = [
    "Extraction",
    "WORLD_CONFIG_ATTRIBUTE_LOCATION",
    "loadJsonDocument",
    "isMissing",
    "extractWorldConfigText",
]



# Location used when a world configuration is embedded as a string in the manifest annotation.
WORLD_CONFIG_ATTRIBUTE_LOCATION = "ModInfoAttribute.WorldConfig"

_MISSING: Any = object()



@dataclass(frozen=True, slots=True)
class Extraction:
    """
    Unvalidated result of reading one mod file.

    `ok` is False when anything was reported. Either model may still be present for
    best-effort use.
    """
    modInfo: ModInfo | None
    worldConfig: WorldConfiguration | None
    ok: bool



def loadJsonDocument(location: str, raw: bytes | str, onError: ErrorSink) -> Any:
    """
    Parse JSON text (trailing commas and comments tolerated).

    Returns the parsed document, or a private sentinel after reporting MalformedJson.
    Use `isMissing` on the result.
    """
    try:
        text = raw.decode("utf-8-sig") if isinstance(raw, (bytes, bytearray)) else raw
        return json5.loads(text)
    except Exception as err:
        logger.debug("Failed to parse '%s': %s", location, err)
        onError(MalformedJson(location, err))
        return _MISSING



def isMissing(document: Any) -> bool:
    return document is _MISSING



def extractWorldConfigText(
    location: str,
    raw: bytes | str,
    onError: ErrorSink,
) -> tuple[WorldConfiguration | None, bool]:
    document = loadJsonDocument(location, raw, onError)
    if isMissing(document):
        return None, False
    return mapWorldConfiguration(location, document, onError)

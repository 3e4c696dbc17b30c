# modpeek/__init__.py
from __future__ import annotations

from .api import PeekReport, peekMod
from .errors import ErrorCollector, ErrorSink, ModPeekError, Severity
from .extract import Extraction, extractFromArchive, extractFromModule, extractFromSource, extractModInfo
from .mapping import mapModInfo, mapWorldConfiguration
from .models import (
    EnumAppSide,
    EnumDataType,
    EnumModType,
    ModDependency,
    ModInfo,
    PlayStyle,
    WorldConfiguration,
    WorldConfigurationAttribute,
)
from .sniff import FileKind, sniffFormat
from .validate import validateModInfo, validateWorldConfiguration

__version__ = "1.0.0"

__all__ = [
    "EnumAppSide",
    "EnumDataType",
    "EnumModType",
    "ErrorCollector",
    "ErrorSink",
    "Extraction",
    "FileKind",
    "ModDependency",
    "ModInfo",
    "ModPeekError",
    "PeekReport",
    "PlayStyle",
    "Severity",
    "WorldConfiguration",
    "WorldConfigurationAttribute",
    "extractFromArchive",
    "extractFromModule",
    "extractFromSource",
    "extractModInfo",
    "mapModInfo",
    "mapWorldConfiguration",
    "peekMod",
    "sniffFormat",
    "validateModInfo",
    "validateWorldConfiguration",
]

# modpeek/extract/module.py
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from modpeek.dotnet import CustomAttributeRecord, readAssemblyAttributes
from modpeek.errors import (
    ErrorSink,
    MalformedModule,
    MissingAssemblyAttribute,
    ModPeekError,
    PrimitiveParsingFailure,
    StringParsingFailure,
    UnexpectedProperty,
)
from modpeek.mapping import parseEnumName, rawJson
from modpeek.models import EnumAppSide, EnumModType, ModDependency, ModInfo, newDependency

from .common import WORLD_CONFIG_ATTRIBUTE_LOCATION, Extraction, extractWorldConfigText

logger = logging.getLogger(__name__)

__all__ = [
    "MODINFO_ATTRIBUTE",
    "DEPENDENCY_ATTRIBUTE",
    "AttributeReader",
    "extractFromModule",
]



MODINFO_ATTRIBUTE = "ModInfoAttribute"
DEPENDENCY_ATTRIBUTE = "ModDependencyAttribute"

AttributeReader = Callable[[bytes], Sequence[CustomAttributeRecord]]



class _ModuleRun:
    def __init__(self, onError: ErrorSink) -> None:
        self.onError = onError
        self.ok = True

    def report(self, error: ModPeekError) -> None:
        self.ok = False
        self.onError(error)

    def typed(self, target: str, value: Any, expected: type, expectedName: str) -> bool:
        if isinstance(value, expected):
            return True
        self.report(PrimitiveParsingFailure(target, expectedName, rawJson(value)))
        return False



def _optionalString(attr: str, nullAs: str | None = None) -> Callable[[_ModuleRun, ModInfo, str, Any], None]:
    def assign(run: _ModuleRun, modInfo: ModInfo, target: str, value: Any) -> None:
        if value is None:
            setattr(modInfo, attr, nullAs)
        elif run.typed(target, value, str, "string"):
            setattr(modInfo, attr, value)
    return assign



def _boolean(attr: str) -> Callable[[_ModuleRun, ModInfo, str, Any], None]:
    def assign(run: _ModuleRun, modInfo: ModInfo, target: str, value: Any) -> None:
        if run.typed(target, value, bool, "boolean"):
            setattr(modInfo, attr, value)
    return assign



def _stringArray(attr: str) -> Callable[[_ModuleRun, ModInfo, str, Any], None]:
    def assign(run: _ModuleRun, modInfo: ModInfo, target: str, value: Any) -> None:
        if value is None:
            # A null array is the same as none at all.
            return
        if not run.typed(target, value, list, "string array"):
            return
        out: list[str] = []
        for idx, element in enumerate(value):
            if run.typed(f"{target}[{idx}]", element, str, "string"):
                out.append(element)
        setattr(modInfo, attr, out)
    return assign



def _side(run: _ModuleRun, modInfo: ModInfo, target: str, value: Any) -> None:
    if value is None:
        return
    if not run.typed(target, value, str, "string"):
        return
    side = parseEnumName(EnumAppSide, value)
    if side is None:
        run.report(StringParsingFailure(target, EnumAppSide.__name__, value))
        side = EnumAppSide.UNIVERSAL
    modInfo.side = side



_PROPERTIES: dict[str, Callable[[_ModuleRun, ModInfo, str, Any], None]] = {
    "Version": _optionalString("version"),
    "NetworkVersion": _optionalString("networkVersion"),
    "Description": _optionalString("description"),
    "Website": _optionalString("website", nullAs=""),
    "IconPath": _optionalString("iconPath"),
    "Side": _side,
    "RequiredOnClient": _boolean("requiredOnClient"),
    "RequiredOnServer": _boolean("requiredOnServer"),
    "Authors": _stringArray("authors"),
    "Contributors": _stringArray("contributors"),
    "CoreMod": _boolean("coreMod"),
}



def _constructorString(run: _ModuleRun, record: CustomAttributeRecord, idx: int, target: str) -> str | None:
    if idx >= len(record.constructorArguments):
        return None
    value = record.constructorArguments[idx]
    if value is None or run.typed(target, value, str, "string"):
        return value
    return None



def _mapModInfo(run: _ModuleRun, record: CustomAttributeRecord) -> tuple[ModInfo, Any]:
    modInfo = ModInfo(type=EnumModType.CODE)
    modInfo.name = _constructorString(run, record, 0, "Name")
    modInfo.modId = _constructorString(run, record, 1, "ModID")

    worldConfigText = None
    for name, value in record.namedArguments.items():
        if name == "WorldConfig":
            if value is None or run.typed(name, value, str, "string"):
                worldConfigText = value
            continue
        assign = _PROPERTIES.get(name)
        if assign is None:
            run.report(UnexpectedProperty(name, rawJson(value)))
            continue
        assign(run, modInfo, name, value)
    return modInfo, worldConfigText



def _mapDependency(run: _ModuleRun, record: CustomAttributeRecord) -> ModDependency:
    modId = _constructorString(run, record, 0, f"{DEPENDENCY_ATTRIBUTE}.ModID")
    version = _constructorString(run, record, 1, f"{DEPENDENCY_ATTRIBUTE}.Version")
    return newDependency(modId, version)



def extractFromModule(
    data: bytes,
    onError: ErrorSink,
    *,
    readAttributes: AttributeReader = readAssemblyAttributes,
) -> Extraction:
    """
    Read the ModInfo and ModDependency assembly attributes of a compiled .NET module.

    Absent properties keep their defaults and are not reported. The model is not validated.
    """
    try:
        records = list(readAttributes(data))
    except Exception as err:
        # PE and metadata readers raise their own error types.
        logger.debug("Module metadata is unreadable: %s", err)
        onError(MalformedModule(err))
        return Extraction(None, None, False)

    manifest = next((record for record in records if record.typeName == MODINFO_ATTRIBUTE), None)
    if manifest is None:
        onError(MissingAssemblyAttribute(MODINFO_ATTRIBUTE))
        return Extraction(None, None, False)

    run = _ModuleRun(onError)
    modInfo, worldConfigText = _mapModInfo(run, manifest)
    modInfo.dependencies = [
        _mapDependency(run, record) for record in records if record.typeName == DEPENDENCY_ATTRIBUTE
    ]

    worldConfig = None
    if worldConfigText is not None:
        worldConfig, worldConfigOk = extractWorldConfigText(WORLD_CONFIG_ATTRIBUTE_LOCATION, worldConfigText, onError)
        run.ok = run.ok and worldConfigOk

    logger.debug(
        "Module extraction: %d attributes, %d dependencies (clean=%s)",
        len(records),
        len(modInfo.dependencies),
        run.ok,
    )
    return Extraction(modInfo, worldConfig, run.ok)

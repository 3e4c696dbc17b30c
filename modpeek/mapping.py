# modpeek/mapping.py
from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from modpeek.errors import (
    ErrorSink,
    ModPeekError,
    PrimitiveParsingFailure,
    StringParsingFailure,
    UnexpectedJsonPropertyType,
    UnexpectedJsonRootType,
    UnexpectedProperty,
)
from modpeek.models import (
    BROKEN_VERSION,
    EnumAppSide,
    EnumDataType,
    EnumModType,
    ModInfo,
    PlayStyle,
    WorldConfiguration,
    WorldConfigurationAttribute,
    newDependency,
)

logger = logging.getLogger(__name__)

__all__ = [
    "JsonKind",
    "jsonKindOf",
    "rawJson",
    "parseEnumName",
    "PropertySpec",
    "PropertyTable",
    "MODINFO_PROPERTIES",
    "PLAYSTYLE_PROPERTIES",
    "WORLD_CONFIG_ATTRIBUTE_PROPERTIES",
    "WORLD_CONFIGURATION_PROPERTIES",
    "mapModInfo",
    "mapWorldConfiguration",
]



class JsonKind(Enum):
    OBJECT = "Object"
    ARRAY = "Array"
    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    NULL = "Null"



def jsonKindOf(value: Any) -> JsonKind:
    # bool before numbers, bool is an int subclass
    if value is None:
        return JsonKind.NULL
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, Mapping):
        return JsonKind.OBJECT
    if isinstance(value, (list, tuple)):
        return JsonKind.ARRAY
    raise TypeError(f"Not a JSON value: {type(value).__name__}")



def rawJson(value: Any) -> str:
    """Compact JSON text of a parsed node, for diagnostics."""
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return repr(value)



def parseEnumName(enumType: type[Enum], raw: str) -> Enum | None:
    """Case-insensitive lookup of an enum member by its declared name."""
    wanted = raw.strip().lower()
    for member in enumType:
        if member.name == "BROKEN":
            continue
        if member.value.lower() == wanted:
            return member
    return None



_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1

# Marks "nothing to assign" for a reader.
_UNSET: Any = object()



class _MappingRun:
    """State of one mapping call: the sink and whether anything was reported."""

    def __init__(self, onError: ErrorSink) -> None:
        self._onError = onError
        self.ok = True

    def report(self, error: ModPeekError) -> None:
        self.ok = False
        self._onError(error)

    def expectKind(self, target: str, value: Any, *kinds: JsonKind) -> bool:
        if jsonKindOf(value) in kinds:
            return True
        self.report(UnexpectedJsonPropertyType(target, kinds[0].value, value))
        return False



Reader = Callable[[_MappingRun, str, Any], Any]



@dataclass(frozen=True, slots=True)
class PropertySpec:
    name: str
    attr: str
    read: Reader



class PropertyTable:
    """Case-insensitive property dispatch for one object shape."""

    def __init__(self, structure: str, specs: Iterable[PropertySpec]):
        self.structure = structure
        self._byKey: dict[str, PropertySpec] = {spec.name.lower(): spec for spec in specs}

    def lookup(self, key: str) -> PropertySpec | None:
        return self._byKey.get(key.lower())



# ------------------------------------------------------------------ #
# Readers
# ------------------------------------------------------------------ #

def _string(*, nullable: bool = True, onMismatch: Any = _UNSET, nullAs: str | None = None) -> Reader:
    kinds = (JsonKind.STRING, JsonKind.NULL) if nullable else (JsonKind.STRING,)

    def read(run: _MappingRun, target: str, value: Any) -> Any:
        if not run.expectKind(target, value, *kinds):
            return onMismatch
        if value is None:
            return nullAs
        return value
    return read



def _boolean() -> Reader:
    def read(run: _MappingRun, target: str, value: Any) -> Any:
        if not run.expectKind(target, value, JsonKind.BOOLEAN):
            return _UNSET
        return value
    return read



def _int32() -> Reader:
    def read(run: _MappingRun, target: str, value: Any) -> Any:
        if not run.expectKind(target, value, JsonKind.NUMBER):
            return _UNSET
        if isinstance(value, float):
            if not value.is_integer():
                run.report(PrimitiveParsingFailure(target, "int32", rawJson(value)))
                return _UNSET
            value = int(value)
        if not _INT32_MIN <= value <= _INT32_MAX:
            run.report(PrimitiveParsingFailure(target, "int32", rawJson(value)))
            return _UNSET
        return value
    return read



def _float64() -> Reader:
    def read(run: _MappingRun, target: str, value: Any) -> Any:
        if not run.expectKind(target, value, JsonKind.NUMBER):
            return _UNSET
        return float(value)
    return read



def _enum(enumType: type[Enum], *, onFailure: Any = _UNSET, onMismatch: Any = _UNSET) -> Reader:
    def read(run: _MappingRun, target: str, value: Any) -> Any:
        if not run.expectKind(target, value, JsonKind.STRING):
            return onMismatch
        member = parseEnumName(enumType, value)
        if member is None:
            run.report(StringParsingFailure(target, enumType.__name__, value))
            return onFailure
        return member
    return read



def _stringArray(*, nullable: bool = False) -> Reader:
    kinds = (JsonKind.ARRAY, JsonKind.NULL) if nullable else (JsonKind.ARRAY,)

    def read(run: _MappingRun, target: str, value: Any) -> Any:
        if not run.expectKind(target, value, *kinds):
            return _UNSET
        if value is None:
            return None
        out: list[str] = []
        for idx, element in enumerate(value):
            if run.expectKind(f"{target}[{idx}]", element, JsonKind.STRING):
                out.append(element)
        return out
    return read



def _passthroughObject() -> Reader:
    def read(run: _MappingRun, target: str, value: Any) -> Any:
        if not run.expectKind(target, value, JsonKind.OBJECT, JsonKind.NULL):
            return _UNSET
        return dict(value) if value is not None else None
    return read



def _dependencies() -> Reader:
    def read(run: _MappingRun, target: str, value: Any) -> Any:
        if not run.expectKind(target, value, JsonKind.OBJECT):
            return _UNSET
        out = []
        for depId, depVersion in value.items():
            if not run.expectKind(f"{target}[{depId}]", depVersion, JsonKind.STRING, JsonKind.NULL):
                continue
            out.append(newDependency(depId, depVersion))
        return out
    return read



def _objectArray(table: PropertyTable, factory: Callable[[], BaseModel]) -> Reader:
    def read(run: _MappingRun, target: str, value: Any) -> Any:
        if not run.expectKind(target, value, JsonKind.ARRAY):
            return _UNSET
        out = []
        for idx, element in enumerate(value):
            location = f"{target}[{idx}]"
            if not run.expectKind(location, element, JsonKind.OBJECT):
                continue
            model = factory()
            _mapObject(run, table, element, model, prefix=location)
            out.append(model)
        return out
    return read



# ------------------------------------------------------------------ #
# Property tables
# ------------------------------------------------------------------ #

MODINFO_PROPERTIES = PropertyTable("ModInfo", [
    PropertySpec("Name", "name", _string()),
    PropertySpec("ModID", "modId", _string()),
    PropertySpec("Version", "version", _string(onMismatch=BROKEN_VERSION)),
    PropertySpec("NetworkVersion", "networkVersion", _string(onMismatch=BROKEN_VERSION)),
    PropertySpec("TextureSize", "textureSize", _int32()),
    # Code is the most restricted category; there is no neutral default.
    PropertySpec("Type", "type", _enum(EnumModType, onFailure=EnumModType.CODE)),
    PropertySpec("Side", "side", _enum(EnumAppSide)),
    PropertySpec("RequiredOnClient", "requiredOnClient", _boolean()),
    PropertySpec("RequiredOnServer", "requiredOnServer", _boolean()),
    PropertySpec("IconPath", "iconPath", _string(nullable=False)),
    PropertySpec("Description", "description", _string()),
    PropertySpec("Website", "website", _string(nullAs="")),
    PropertySpec("Authors", "authors", _stringArray()),
    PropertySpec("Contributors", "contributors", _stringArray()),
    PropertySpec("Dependencies", "dependencies", _dependencies()),
    PropertySpec("CoreMod", "coreMod", _boolean()),
])

PLAYSTYLE_PROPERTIES = PropertyTable("PlayStyle", [
    PropertySpec("Code", "code", _string()),
    PropertySpec("PlayListCode", "playListCode", _string()),
    PropertySpec("LangCode", "langCode", _string()),
    PropertySpec("WorldType", "worldType", _string()),
    PropertySpec("ListOrder", "listOrder", _float64()),
    PropertySpec("Mods", "mods", _stringArray()),
    PropertySpec("WorldConfig", "worldConfig", _passthroughObject()),
])

WORLD_CONFIG_ATTRIBUTE_PROPERTIES = PropertyTable("WorldConfigurationAttribute", [
    PropertySpec(
        "DataType", "dataType",
        _enum(EnumDataType, onFailure=EnumDataType.BROKEN, onMismatch=EnumDataType.BROKEN),
    ),
    PropertySpec("Category", "category", _string()),
    PropertySpec("Code", "code", _string()),
    PropertySpec("Min", "min", _float64()),
    PropertySpec("Max", "max", _float64()),
    PropertySpec("Step", "step", _float64()),
    PropertySpec("OnCustomizeScreen", "onCustomizeScreen", _boolean()),
    PropertySpec("OnlyDuringWorldCreate", "onlyDuringWorldCreate", _boolean()),
    PropertySpec("Default", "default", _string()),
    PropertySpec("Values", "values", _stringArray(nullable=True)),
    PropertySpec("Names", "names", _stringArray(nullable=True)),
])

WORLD_CONFIGURATION_PROPERTIES = PropertyTable("ModWorldConfiguration", [
    PropertySpec("PlayStyles", "playStyles", _objectArray(PLAYSTYLE_PROPERTIES, PlayStyle)),
    PropertySpec(
        "WorldConfigAttributes", "worldConfigAttributes",
        _objectArray(WORLD_CONFIG_ATTRIBUTE_PROPERTIES, WorldConfigurationAttribute),
    ),
])



# ------------------------------------------------------------------ #
# Object mapping
# ------------------------------------------------------------------ #

def _mapObject(
    run: _MappingRun,
    table: PropertyTable,
    obj: Mapping[str, Any],
    model: BaseModel,
    *,
    prefix: str = "",
    isRoot: bool = False,
) -> None:
    for key, value in obj.items():
        lowered = key.lower()
        target = f"{prefix}.{key}" if prefix else key

        if lowered == "custom":
            # Reserved for caller-defined metadata.
            continue

        if isRoot and lowered == "$schema":
            run.expectKind(target, value, JsonKind.STRING)
            continue

        spec = table.lookup(lowered)
        if spec is None:
            run.report(UnexpectedProperty(target, rawJson(value)))
            continue

        result = spec.read(run, f"{prefix}.{spec.name}" if prefix else spec.name, value)
        if result is not _UNSET:
            setattr(model, spec.attr, result)



def mapModInfo(
    root: Any,
    onError: ErrorSink,
    *,
    location: str = "modinfo.json",
) -> tuple[ModInfo | None, bool]:
    """
    Map a parsed JSON document onto an unvalidated ModInfo.

    Keys are matched case-insensitively. Every property is handled on its own, so a
    broken value only leaves that field unset. Returns (None, False) when the root is
    not an object.
    """
    run = _MappingRun(onError)
    if jsonKindOf(root) is not JsonKind.OBJECT:
        run.report(UnexpectedJsonRootType(location, JsonKind.OBJECT.value, root))
        return None, False

    modInfo = ModInfo()
    _mapObject(run, MODINFO_PROPERTIES, root, modInfo, isRoot=True)
    logger.debug("Mapped ModInfo from '%s' (clean=%s)", location, run.ok)
    return modInfo, run.ok



def mapWorldConfiguration(
    location: str,
    root: Any,
    onError: ErrorSink,
) -> tuple[WorldConfiguration | None, bool]:
    """Map a parsed JSON document onto an unvalidated WorldConfiguration."""
    run = _MappingRun(onError)
    if jsonKindOf(root) is not JsonKind.OBJECT:
        run.report(UnexpectedJsonRootType(location, JsonKind.OBJECT.value, root))
        return None, False

    worldConfig = WorldConfiguration()
    _mapObject(run, WORLD_CONFIGURATION_PROPERTIES, root, worldConfig, isRoot=True)
    logger.debug("Mapped world configuration from '%s' (clean=%s)", location, run.ok)
    return worldConfig, run.ok

# modpeek/extract/source.py
from __future__ import annotations

import logging
from collections.abc import Callable

from modpeek.csharp import (
    AttributeArgument,
    AttributeSyntax,
    Expression,
    NotALiteral,
    SourceSyntaxError,
    decodeSource,
    literalArray,
    literalBoolean,
    literalString,
    parseGlobalAttributes,
)
from modpeek.errors import (
    ErrorSink,
    MalformedSource,
    MissingAssemblyAttribute,
    MissingRequiredProperty,
    ModPeekError,
    PrimitiveParsingFailure,
    StringParsingFailure,
    UnexpectedProperty,
)
from modpeek.mapping import parseEnumName
from modpeek.models import EnumAppSide, EnumModType, ModDependency, ModInfo, WorldConfiguration, newDependency

from .common import WORLD_CONFIG_ATTRIBUTE_LOCATION, Extraction, extractWorldConfigText

logger = logging.getLogger(__name__)

__all__ = [
    "MODINFO_ATTRIBUTE_NAMES",
    "DEPENDENCY_ATTRIBUTE_NAMES",
    "extractFromSource",
]



MODINFO_ATTRIBUTE_NAMES = frozenset({"ModInfo", "ModInfoAttribute"})
DEPENDENCY_ATTRIBUTE_NAMES = frozenset({"ModDependency", "ModDependencyAttribute"})

_MODINFO_PARAMS = ("name", "modID")
_DEPENDENCY_PARAMS = ("modID", "version")



class _SourceRun:
    def __init__(self, onError: ErrorSink) -> None:
        self.onError = onError
        self.ok = True
        self.worldConfig: WorldConfiguration | None = None

    def report(self, error: ModPeekError) -> None:
        self.ok = False
        self.onError(error)

    def string(self, target: str, expression: Expression) -> tuple[bool, str | None]:
        try:
            return True, literalString(expression)
        except NotALiteral:
            self.report(PrimitiveParsingFailure(target, "string", expression.text))
            return False, None

    def boolean(self, target: str, expression: Expression) -> tuple[bool, bool]:
        try:
            return True, literalBoolean(expression)
        except NotALiteral:
            self.report(PrimitiveParsingFailure(target, "boolean", expression.text))
            return False, False

    def stringArray(self, target: str, expression: Expression) -> tuple[bool, list[str]]:
        try:
            elements = literalArray(expression)
        except NotALiteral:
            self.report(PrimitiveParsingFailure(target, "string array", expression.text))
            return False, []

        out: list[str] = []
        for idx, element in enumerate(elements):
            try:
                value = literalString(element)
            except NotALiteral:
                value = None
            if value is None:
                self.report(PrimitiveParsingFailure(f"{target}[{idx}]", "string", element.text))
                continue
            out.append(value)
        return True, out



def _constructorArguments(
    run: _SourceRun,
    attribute: AttributeSyntax,
    paramNames: tuple[str, ...],
) -> tuple[dict[int, Expression], list[AttributeArgument]]:
    """Split arguments into constructor arguments (by parameter index) and property assignments."""
    positional: dict[int, Expression] = {}
    assignments: list[AttributeArgument] = []
    nextIdx = 0
    for argument in attribute.arguments or ():
        if argument.isAssignment:
            assignments.append(argument)
            continue
        if argument.name is None:
            idx = nextIdx
            nextIdx += 1
        elif argument.name in paramNames:
            idx = paramNames.index(argument.name)
        else:
            run.report(UnexpectedProperty(argument.name, argument.expression.text))
            continue
        if idx >= len(paramNames):
            run.report(UnexpectedProperty(f"{attribute.simpleName}[{idx}]", argument.expression.text))
            continue
        positional[idx] = argument.expression
    return positional, assignments



# ------------------------------------------------------------------ #
# ModInfo attribute
# ------------------------------------------------------------------ #

def _setString(attr: str, nullAs: str | None = None) -> Callable[[_SourceRun, ModInfo, str, Expression], None]:
    def assign(run: _SourceRun, modInfo: ModInfo, target: str, expression: Expression) -> None:
        ok, value = run.string(target, expression)
        if ok:
            setattr(modInfo, attr, nullAs if value is None else value)
    return assign



def _setBoolean(attr: str) -> Callable[[_SourceRun, ModInfo, str, Expression], None]:
    def assign(run: _SourceRun, modInfo: ModInfo, target: str, expression: Expression) -> None:
        ok, value = run.boolean(target, expression)
        if ok:
            setattr(modInfo, attr, value)
    return assign



def _setStringArray(attr: str) -> Callable[[_SourceRun, ModInfo, str, Expression], None]:
    def assign(run: _SourceRun, modInfo: ModInfo, target: str, expression: Expression) -> None:
        ok, value = run.stringArray(target, expression)
        if ok:
            setattr(modInfo, attr, value)
    return assign



def _setSide(run: _SourceRun, modInfo: ModInfo, target: str, expression: Expression) -> None:
    ok, raw = run.string(target, expression)
    if not ok or raw is None:
        return
    side = parseEnumName(EnumAppSide, raw)
    if side is None:
        run.report(StringParsingFailure(target, EnumAppSide.__name__, raw))
        return
    modInfo.side = side



def _setWorldConfig(run: _SourceRun, modInfo: ModInfo, target: str, expression: Expression) -> None:
    ok, raw = run.string(target, expression)
    if not ok or raw is None:
        return
    worldConfig, worldConfigOk = extractWorldConfigText(WORLD_CONFIG_ATTRIBUTE_LOCATION, raw, run.onError)
    run.worldConfig = worldConfig
    run.ok = run.ok and worldConfigOk



def _ignore(run: _SourceRun, modInfo: ModInfo, target: str, expression: Expression) -> None:
    pass



_MODINFO_PROPERTIES: dict[str, Callable[[_SourceRun, ModInfo, str, Expression], None]] = {
    "Version": _setString("version"),
    "NetworkVersion": _setString("networkVersion"),
    "Description": _setString("description"),
    "Website": _setString("website", nullAs=""),
    "Side": _setSide,
    "RequiredOnClient": _setBoolean("requiredOnClient"),
    "RequiredOnServer": _setBoolean("requiredOnServer"),
    "Authors": _setStringArray("authors"),
    "Contributors": _setStringArray("contributors"),
    "CoreMod": _setBoolean("coreMod"),
    "WorldConfig": _setWorldConfig,
    # A single source file has nowhere to keep an icon.
    "IconPath": _ignore,
}



def _mapModInfoAttribute(run: _SourceRun, attribute: AttributeSyntax, modInfo: ModInfo) -> None:
    if not attribute.arguments:
        run.report(MissingRequiredProperty("ModInfoAttribute", "Name"))
        return

    positional, assignments = _constructorArguments(run, attribute, _MODINFO_PARAMS)

    if 0 in positional:
        ok, name = run.string("Name", positional[0])
        if ok:
            modInfo.name = name
    else:
        run.report(MissingRequiredProperty("ModInfoAttribute", "Name"))

    if 1 in positional:
        ok, modId = run.string("ModID", positional[1])
        if ok:
            modInfo.modId = modId

    for argument in assignments:
        assign = _MODINFO_PROPERTIES.get(argument.name or "")
        if assign is None:
            run.report(UnexpectedProperty(argument.name or "", argument.expression.text))
            continue
        assign(run, modInfo, argument.name or "", argument.expression)



# ------------------------------------------------------------------ #
# ModDependency attribute
# ------------------------------------------------------------------ #

def _mapDependencyAttribute(run: _SourceRun, attribute: AttributeSyntax) -> ModDependency | None:
    location = f"ModDependencyAttribute[@line {attribute.line}]"
    if not attribute.arguments:
        run.report(MissingRequiredProperty(location, "ModID"))
        return None

    positional, assignments = _constructorArguments(run, attribute, _DEPENDENCY_PARAMS)
    for argument in assignments:
        run.report(UnexpectedProperty(argument.name or "", argument.expression.text))

    if 0 not in positional:
        run.report(MissingRequiredProperty(location, "ModID"))
        return None
    ok, modId = run.string(f"{location}.ModID", positional[0])
    if not ok:
        return None

    version = None
    if 1 in positional:
        ok, version = run.string(f"{location}.Version", positional[1])
        if not ok:
            version = None

    # A null mod ID is kept for the validator to report.
    return newDependency(modId, version)



def extractFromSource(data: bytes, onError: ErrorSink) -> Extraction:
    """
    Read the ModInfo and ModDependency assembly attributes of a single C# source file.

    Only literal arguments are understood. The model is not validated.
    """
    try:
        attributes = parseGlobalAttributes(decodeSource(data))
    except SourceSyntaxError as err:
        logger.debug("Source is not readable as C#: %s", err)
        onError(MalformedSource(err))
        return Extraction(None, None, False)

    run = _SourceRun(onError)
    modInfo: ModInfo | None = None
    dependencies: list[ModDependency] = []

    for attribute in attributes:
        name = attribute.simpleName
        if name in MODINFO_ATTRIBUTE_NAMES:
            if modInfo is None:
                modInfo = ModInfo(type=EnumModType.CODE)
            _mapModInfoAttribute(run, attribute, modInfo)
        elif name in DEPENDENCY_ATTRIBUTE_NAMES:
            dependency = _mapDependencyAttribute(run, attribute)
            if dependency is not None:
                dependencies.append(dependency)

    if modInfo is None:
        onError(MissingAssemblyAttribute("ModInfoAttribute"))
        return Extraction(None, None, False)

    modInfo.dependencies = dependencies
    logger.debug("Source extraction: %d dependencies (clean=%s)", len(dependencies), run.ok)
    return Extraction(modInfo, run.worldConfig, run.ok)

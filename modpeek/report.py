# modpeek/report.py
from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from modpeek.errors import (
    ArrayLengthMismatch,
    CouldNotDetermineFileType,
    FileTooSmall,
    MalformedArchive,
    MalformedAuthorName,
    MalformedContributorName,
    MalformedDependencyModID,
    MalformedDependencyVersion,
    MalformedJson,
    MalformedModule,
    MalformedNetworkVersion,
    MalformedPrimaryModID,
    MalformedPrimaryVersion,
    MalformedSource,
    MissingAssemblyAttribute,
    MissingDependencyModID,
    MissingFileInArchiveRoot,
    MissingRequiredProperty,
    ModIDGenerationFailure,
    ModPeekError,
    NotACoreMod,
    PrimitiveParsingFailure,
    StringParsingFailure,
    UnexpectedJsonPropertyType,
    UnexpectedJsonRootType,
    UnexpectedProperty,
    UnexpectedValue,
)
from modpeek.identifiers import CORE_MOD_IDS
from modpeek.mapping import jsonKindOf, rawJson
from modpeek.models import ModInfo

__all__ = [
    "ERROR_MESSAGES",
    "formatError",
    "formatValue",
    "formatModInfoLines",
    "formatIdAndVersion",
]



_VERSION_HINT = "expected major.minor.patch with an optional -rc.N, -pre.N or -dev.N suffix"
_MODID_HINT = "mod ids consist of lowercase letters and digits and start with a letter"



def _kindOf(value: Any) -> str:
    try:
        return jsonKindOf(value).value
    except TypeError:
        return type(value).__name__



def _missingFile(err: MissingFileInArchiveRoot) -> str:
    msg = f"'{err.fileName}' is missing from the root of the archive."
    if err.likelyCompressedDirectory:
        msg += " It looks like the mod folder was zipped instead of its contents."
    return msg



# One entry per error variant. A test keeps this in sync with errors.ERROR_TYPES.
ERROR_MESSAGES: dict[type[ModPeekError], Callable[[Any], str]] = {
    FileTooSmall: lambda err: f"File is too small to be a mod ({err.size} bytes).",
    CouldNotDetermineFileType: lambda err: (
        "Could not determine the file type. Expected a zip archive, a C# source file or a .NET module."
    ),
    MalformedArchive: lambda err: f"The archive could not be read: {err.cause}",
    MalformedJson: lambda err: f"'{err.location}' is not valid JSON: {err.cause}",
    MalformedModule: lambda err: f"The module metadata could not be read: {err.cause}",
    MalformedSource: lambda err: f"The source file could not be read: {err.cause}",
    MissingAssemblyAttribute: lambda err: f"The [assembly: {err.attributeName}] attribute is missing.",
    MissingFileInArchiveRoot: _missingFile,
    PrimitiveParsingFailure: lambda err: (
        f"{err.targetProperty}: could not read {err.malformedInput} as {err.expectedType}."
    ),
    StringParsingFailure: lambda err: (
        f"{err.targetProperty}: '{err.malformedInput}' is not a valid {err.expectedType}."
    ),
    MissingRequiredProperty: lambda err: f"{err.targetStructure}.{err.propertyName} is required but missing.",
    MissingDependencyModID: lambda err: "A dependency without a mod id was dropped.",
    UnexpectedProperty: lambda err: f"Ignored unknown property '{err.propertyName}' = {err.propertyValue}.",
    UnexpectedValue: lambda err: (
        f"{err.targetStructure}.{err.targetProperty}: expected {err.expected}, "
        f"got {'nothing' if err.given is None else repr(err.given)}."
    ),
    UnexpectedJsonPropertyType: lambda err: (
        f"{err.targetProperty}: expected a JSON {err.expectedKind}, "
        f"got {_kindOf(err.given)} {rawJson(err.given)}. The property was ignored."
    ),
    UnexpectedJsonRootType: lambda err: (
        f"'{err.location}' must contain a JSON {err.expectedKind} at the top level, got {_kindOf(err.given)}."
    ),
    MalformedPrimaryModID: lambda err: f"Mod id '{err.malformedInput}' is invalid, {_MODID_HINT}.",
    NotACoreMod: lambda err: (
        f"Only the core mods ({', '.join(sorted(CORE_MOD_IDS))}) may set CoreMod, "
        f"'{err.modId}' is not one of them."
    ),
    MalformedDependencyModID: lambda err: (
        f"{err.location}: '{err.malformedInput}' is not a valid mod id and was dropped."
    ),
    MalformedPrimaryVersion: lambda err: f"Version '{err.malformedInput}' is invalid, {_VERSION_HINT}.",
    MalformedNetworkVersion: lambda err: f"NetworkVersion '{err.malformedInput}' is invalid, {_VERSION_HINT}.",
    MalformedDependencyVersion: lambda err: (
        f"Dependency '{err.dependency}' has an invalid version '{err.malformedInput}' and was dropped."
    ),
    ModIDGenerationFailure: lambda err: f"Could not generate a mod id from '{err.malformedInput}': {err.cause}",
    MalformedAuthorName: lambda err: f"Author {err.malformedInput!r} contains a line break and was dropped.",
    MalformedContributorName: lambda err: (
        f"Contributor {err.malformedInput!r} contains a line break and was dropped."
    ),
    ArrayLengthMismatch: lambda err: (
        f"{err.targetStructure}: {err.propertyA} and {err.propertyB} must have the same length."
    ),
}



def formatError(error: ModPeekError) -> str:
    """Single line description of an error, prefixed with its severity."""
    render = ERROR_MESSAGES.get(type(error))
    if render is None:
        raise TypeError(f"No message for error type {type(error).__name__}")
    return f"{error.severity.value}: {render(error)}"



# ------------------------------------------------------------------ #
# Result output
# ------------------------------------------------------------------ #

def _escapeLineBreaks(text: str) -> str:
    return text.replace("\r", "\\r").replace("\n", "\\n")



def formatValue(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return _escapeLineBreaks(str(value))



def _formatList(items: list[Any]) -> str:
    # ", " separates entries, so it's escaped inside of them.
    return ", ".join(formatValue(item).replace(", ", "\\, ") for item in items)



def formatModInfoLines(modInfo: ModInfo) -> list[str]:
    """`Key: value` lines for every ModInfo field."""
    return [
        f"Name: {formatValue(modInfo.name)}",
        f"ModID: {formatValue(modInfo.modId)}",
        f"Version: {formatValue(modInfo.version)}",
        f"NetworkVersion: {formatValue(modInfo.networkVersion)}",
        f"Type: {formatValue(modInfo.type)}",
        f"Side: {formatValue(modInfo.side)}",
        f"RequiredOnClient: {formatValue(modInfo.requiredOnClient)}",
        f"RequiredOnServer: {formatValue(modInfo.requiredOnServer)}",
        f"IconPath: {formatValue(modInfo.iconPath)}",
        f"Description: {formatValue(modInfo.description)}",
        f"Website: {formatValue(modInfo.website)}",
        f"TextureSize: {formatValue(modInfo.textureSize)}",
        f"Authors: {_formatList(modInfo.authors)}",
        f"Contributors: {_formatList(modInfo.contributors)}",
        f"Dependencies: {_formatList(modInfo.dependencies)}",
        f"CoreMod: {formatValue(modInfo.coreMod)}",
    ]



def formatIdAndVersion(modInfo: ModInfo) -> str:
    return f"{formatValue(modInfo.modId)}:{formatValue(modInfo.version)}"

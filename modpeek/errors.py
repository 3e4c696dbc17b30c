# modpeek/errors.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias

__all__ = [
    "Severity",
    "ModPeekError",
    "ErrorSink",
    "ErrorCollector",
    "FileTooSmall",
    "CouldNotDetermineFileType",
    "MalformedArchive",
    "MalformedJson",
    "MalformedModule",
    "MalformedSource",
    "MissingAssemblyAttribute",
    "MissingFileInArchiveRoot",
    "PrimitiveParsingFailure",
    "StringParsingFailure",
    "MissingRequiredProperty",
    "MissingDependencyModID",
    "UnexpectedProperty",
    "UnexpectedValue",
    "UnexpectedJsonPropertyType",
    "UnexpectedJsonRootType",
    "MalformedPrimaryModID",
    "NotACoreMod",
    "MalformedDependencyModID",
    "MalformedPrimaryVersion",
    "MalformedNetworkVersion",
    "MalformedDependencyVersion",
    "ModIDGenerationFailure",
    "MalformedAuthorName",
    "MalformedContributorName",
    "ArrayLengthMismatch",
    "ERROR_TYPES",
]



# Parsing and validation never fast-fail. Every producer reports each defect it can
# detect so a mod author sees all problems of a manifest in a single run.

class Severity(Enum):
    FATAL = "fatal"
    WARNING = "warning"



@dataclass(frozen=True, slots=True)
class ModPeekError:
    """Base of all reportable conditions. Not an exception, these are values."""
    severity: Severity = field(default=Severity.FATAL, kw_only=True)

    @property
    def isFatal(self) -> bool:
        return self.severity is Severity.FATAL



ErrorSink: TypeAlias = Callable[[ModPeekError], None]



class ErrorCollector:
    """Append-only sink keeping every reported error in order."""

    def __init__(self) -> None:
        self._errors: list[ModPeekError] = []

    def __call__(self, error: ModPeekError) -> None:
        self._errors.append(error)

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self):
        return iter(self._errors)

    @property
    def errors(self) -> tuple[ModPeekError, ...]:
        return tuple(self._errors)

    @property
    def hasFatal(self) -> bool:
        return any(err.isFatal for err in self._errors)

    @property
    def hasWarnings(self) -> bool:
        return any(not err.isFatal for err in self._errors)

    def forwardTo(self, sink: ErrorSink) -> None:
        for err in self._errors:
            sink(err)



# ------------------------------------------------------------------ #
# Container / format level
# ------------------------------------------------------------------ #

@dataclass(frozen=True, slots=True)
class FileTooSmall(ModPeekError):
    size: int



@dataclass(frozen=True, slots=True)
class CouldNotDetermineFileType(ModPeekError):
    pass



@dataclass(frozen=True, slots=True)
class MalformedArchive(ModPeekError):
    cause: BaseException



@dataclass(frozen=True, slots=True)
class MalformedJson(ModPeekError):
    location: str
    cause: BaseException



@dataclass(frozen=True, slots=True)
class MalformedModule(ModPeekError):
    cause: BaseException



@dataclass(frozen=True, slots=True)
class MalformedSource(ModPeekError):
    cause: BaseException



@dataclass(frozen=True, slots=True)
class MissingAssemblyAttribute(ModPeekError):
    attributeName: str



@dataclass(frozen=True, slots=True)
class MissingFileInArchiveRoot(ModPeekError):
    fileName: str
    likelyCompressedDirectory: bool



# ------------------------------------------------------------------ #
# Field mapping
# ------------------------------------------------------------------ #

@dataclass(frozen=True, slots=True)
class PrimitiveParsingFailure(ModPeekError):
    """A document value could not be read as the primitive the property needs."""
    targetProperty: str
    expectedType: str
    malformedInput: str
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class StringParsingFailure(ModPeekError):
    """A string value could not be converted into the type the property needs."""
    targetProperty: str
    expectedType: str
    malformedInput: str
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class MissingRequiredProperty(ModPeekError):
    targetStructure: str
    propertyName: str



@dataclass(frozen=True, slots=True)
class MissingDependencyModID(ModPeekError):
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class UnexpectedProperty(ModPeekError):
    propertyName: str
    propertyValue: str
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class UnexpectedValue(ModPeekError):
    targetStructure: str
    targetProperty: str
    expected: str
    given: str | None
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class UnexpectedJsonPropertyType(ModPeekError):
    targetProperty: str
    expectedKind: str
    given: Any
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class UnexpectedJsonRootType(ModPeekError):
    location: str
    expectedKind: str
    given: Any



# ------------------------------------------------------------------ #
# Validation
# ------------------------------------------------------------------ #

@dataclass(frozen=True, slots=True)
class MalformedPrimaryModID(ModPeekError):
    malformedInput: str



@dataclass(frozen=True, slots=True)
class NotACoreMod(ModPeekError):
    modId: str | None



@dataclass(frozen=True, slots=True)
class MalformedDependencyModID(ModPeekError):
    location: str
    malformedInput: str
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class MalformedPrimaryVersion(ModPeekError):
    malformedInput: str



@dataclass(frozen=True, slots=True)
class MalformedNetworkVersion(ModPeekError):
    malformedInput: str



@dataclass(frozen=True, slots=True)
class MalformedDependencyVersion(ModPeekError):
    dependency: str
    malformedInput: str
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class ModIDGenerationFailure(ModPeekError):
    cause: BaseException
    malformedInput: str



@dataclass(frozen=True, slots=True)
class MalformedAuthorName(ModPeekError):
    malformedInput: str
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class MalformedContributorName(ModPeekError):
    malformedInput: str
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



@dataclass(frozen=True, slots=True)
class ArrayLengthMismatch(ModPeekError):
    targetStructure: str
    propertyA: str
    propertyB: str
    severity: Severity = field(default=Severity.WARNING, kw_only=True)



ERROR_TYPES: tuple[type[ModPeekError], ...] = (
    FileTooSmall,
    CouldNotDetermineFileType,
    MalformedArchive,
    MalformedJson,
    MalformedModule,
    MalformedSource,
    MissingAssemblyAttribute,
    MissingFileInArchiveRoot,
    PrimitiveParsingFailure,
    StringParsingFailure,
    MissingRequiredProperty,
    MissingDependencyModID,
    UnexpectedProperty,
    UnexpectedValue,
    UnexpectedJsonPropertyType,
    UnexpectedJsonRootType,
    MalformedPrimaryModID,
    NotACoreMod,
    MalformedDependencyModID,
    MalformedPrimaryVersion,
    MalformedNetworkVersion,
    MalformedDependencyVersion,
    ModIDGenerationFailure,
    MalformedAuthorName,
    MalformedContributorName,
    ArrayLengthMismatch,
)

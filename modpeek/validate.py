# modpeek/validate.py
from __future__ import annotations

import logging
import posixpath
import re
from pathlib import PurePosixPath
from urllib.parse import urlsplit

from modpeek.errors import (
    ArrayLengthMismatch,
    ErrorSink,
    MalformedAuthorName,
    MalformedContributorName,
    MalformedDependencyModID,
    MalformedDependencyVersion,
    MalformedNetworkVersion,
    MalformedPrimaryModID,
    MalformedPrimaryVersion,
    MissingDependencyModID,
    MissingRequiredProperty,
    ModIDGenerationFailure,
    ModPeekError,
    NotACoreMod,
    Severity,
    StringParsingFailure,
    UnexpectedValue,
)
from modpeek.identifiers import CORE_MOD_IDS, isValidModID, isValidVersion, toModID
from modpeek.models import (
    EnumAppSide,
    EnumDataType,
    EnumModType,
    ModDependency,
    ModInfo,
    PlayStyle,
    WorldConfiguration,
    WorldConfigurationAttribute,
    isBrokenVersion,
)

logger = logging.getLogger(__name__)

__all__ = [
    "validateModInfo",
    "validateWorldConfiguration",
    "isContainedRelativePath",
    "isAbsoluteUri",
]



_SANDBOX = PurePosixPath("/modpeek-sandbox")
_DRIVE_RE = re.compile(r"^[A-Za-z]:")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
# Schemes that are meaningless without a host part.
_AUTHORITY_SCHEMES = frozenset({"http", "https", "ftp", "ftps", "ws", "wss"})



def _isBlank(value: str | None) -> bool:
    return value is None or not value.strip()



def _hasLineBreak(value: str) -> bool:
    return "\n" in value or "\r" in value



def isContainedRelativePath(path: str) -> bool:
    """True when `path`, joined onto a directory, still points inside that directory."""
    if "\0" in path:
        return False
    normalized = path.replace("\\", "/")
    if normalized.startswith("/") or _DRIVE_RE.match(normalized):
        return False
    joined = PurePosixPath(posixpath.normpath(posixpath.join(str(_SANDBOX), normalized)))
    return joined != _SANDBOX and joined.is_relative_to(_SANDBOX)



def isAbsoluteUri(value: str) -> bool:
    candidate = value.strip()
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return False
    if any(ch.isspace() for ch in parts.netloc):
        return False
    if parts.scheme.lower() in _AUTHORITY_SCHEMES:
        return bool(parts.hostname)
    return bool(parts.netloc or parts.path)



class _ValidationRun:
    def __init__(self, onError: ErrorSink) -> None:
        self._onError = onError
        self.ok = True

    def report(self, error: ModPeekError) -> None:
        self.ok = False
        self._onError(error)



# ------------------------------------------------------------------ #
# ModInfo
# ------------------------------------------------------------------ #

def _validateIdentity(run: _ValidationRun, modInfo: ModInfo) -> None:
    if _isBlank(modInfo.name):
        run.report(MissingRequiredProperty("ModInfo", "Name"))
        modInfo.name = None

    if _isBlank(modInfo.modId):
        if not _isBlank(modInfo.name):
            try:
                modInfo.modId = toModID(modInfo.name)
            except ValueError as err:
                run.report(ModIDGenerationFailure(err, modInfo.name))
                modInfo.modId = None
        else:
            run.report(MissingRequiredProperty("ModInfo", "ModID"))
            modInfo.modId = None
    elif not isValidModID(modInfo.modId):
        run.report(MalformedPrimaryModID(modInfo.modId))
        modInfo.modId = None

    if modInfo.coreMod and modInfo.modId not in CORE_MOD_IDS:
        run.report(NotACoreMod(modInfo.modId))
        modInfo.coreMod = False



def _validateVersions(run: _ValidationRun, modInfo: ModInfo) -> None:
    if isBrokenVersion(modInfo.version):
        # Reported while mapping.
        modInfo.version = None
    elif _isBlank(modInfo.version):
        run.report(MissingRequiredProperty("ModInfo", "Version"))
        modInfo.version = None
    elif not isValidVersion(modInfo.version):
        run.report(MalformedPrimaryVersion(modInfo.version))
        modInfo.version = None

    if isBrokenVersion(modInfo.networkVersion):
        modInfo.networkVersion = None
    elif _isBlank(modInfo.networkVersion):
        # Defaults to the mod version.
        modInfo.networkVersion = modInfo.version
    elif not isValidVersion(modInfo.networkVersion):
        run.report(MalformedNetworkVersion(modInfo.networkVersion))
        modInfo.networkVersion = None



def _validateEnums(run: _ValidationRun, modInfo: ModInfo) -> None:
    if not isinstance(modInfo.type, EnumModType):
        run.report(UnexpectedValue("ModInfo", "Type", "EnumModType", str(modInfo.type)))
        modInfo.type = EnumModType.CODE

    if not isinstance(modInfo.side, EnumAppSide):
        run.report(UnexpectedValue("ModInfo", "Side", "EnumAppSide", str(modInfo.side)))
        modInfo.side = EnumAppSide.UNIVERSAL



def _validateLocations(run: _ValidationRun, modInfo: ModInfo) -> None:
    if _isBlank(modInfo.iconPath):
        modInfo.iconPath = None
    elif not isContainedRelativePath(modInfo.iconPath):
        run.report(StringParsingFailure("IconPath", "a relative path within the mod", modInfo.iconPath))
        modInfo.iconPath = None

    if modInfo.website is None:
        return
    if _isBlank(modInfo.website):
        modInfo.website = ""
    elif not isAbsoluteUri(modInfo.website):
        run.report(StringParsingFailure("Website", "URL", modInfo.website))
        modInfo.website = None



def _filterNames(run: _ValidationRun, names: list[str], errorType) -> list[str]:
    kept: list[str] = []
    for name in names:
        if not isinstance(name, str) or _hasLineBreak(name):
            run.report(errorType(str(name)))
            continue
        kept.append(name)
    return kept



def _validateDependencies(run: _ValidationRun, dependencies: list[ModDependency]) -> list[ModDependency]:
    kept: list[ModDependency] = []
    for dependency in dependencies:
        if _isBlank(dependency.modId):
            run.report(MissingDependencyModID())
            continue

        if not isValidModID(dependency.modId):
            run.report(MalformedDependencyModID(f"ModInfo.Dependencies[{dependency.modId}]", dependency.modId))
            continue

        if _isBlank(dependency.version) or dependency.version == "*":
            dependency.version = None
        elif not isValidVersion(dependency.version):
            run.report(MalformedDependencyVersion(dependency.modId, dependency.version))
            continue

        kept.append(dependency)
    return kept



def validateModInfo(modInfo: ModInfo, onError: ErrorSink) -> bool:
    """
    Validate a ModInfo in place, replacing invalid fields with blank or default values.

    Every rule runs regardless of earlier findings. Returns False if anything was reported.

    A second pass over the result changes nothing and reports only the fatal repairs
    again: a Name, ModID or Version left empty is still missing.
    """
    run = _ValidationRun(onError)

    _validateIdentity(run, modInfo)
    _validateVersions(run, modInfo)
    _validateEnums(run, modInfo)
    _validateLocations(run, modInfo)

    modInfo.authors = _filterNames(run, modInfo.authors, MalformedAuthorName)
    modInfo.contributors = _filterNames(run, modInfo.contributors, MalformedContributorName)
    modInfo.dependencies = _validateDependencies(run, modInfo.dependencies)

    logger.debug("Validated ModInfo '%s' (clean=%s)", modInfo.modId, run.ok)
    return run.ok



# ------------------------------------------------------------------ #
# World configuration
# ------------------------------------------------------------------ #

_WORLD = "ModWorldConfiguration"



def _requireText(run: _ValidationRun, obj: object, attr: str, location: str) -> bool:
    value = getattr(obj, attr)
    if _isBlank(value):
        run.report(UnexpectedValue(_WORLD, location, "non-empty string", value))
        setattr(obj, attr, "")
        return False
    return True



def _validatePlayStyle(run: _ValidationRun, idx: int, playStyle: PlayStyle) -> None:
    base = f"PlayStyles[{idx}]"
    _requireText(run, playStyle, "code", f"{base}.Code")
    _requireText(run, playStyle, "playListCode", f"{base}.PlayListCode")
    _requireText(run, playStyle, "langCode", f"{base}.LangCode")

    mods: list[str] = []
    for modIdx, modId in enumerate(playStyle.mods):
        if not isValidModID(modId):
            run.report(MalformedDependencyModID(f"{_WORLD}.{base}.Mods[{modIdx}]", str(modId)))
            continue
        mods.append(modId)
    playStyle.mods = mods

    _requireText(run, playStyle, "worldType", f"{base}.WorldType")



def _keepAttribute(run: _ValidationRun, idx: int, attribute: WorldConfigurationAttribute) -> bool:
    base = f"WorldConfigAttributes[{idx}]"
    keep = True

    if attribute.dataType is EnumDataType.BROKEN:
        # Reported while mapping.
        keep = False
    elif not isinstance(attribute.dataType, EnumDataType):
        given = None if attribute.dataType is None else str(attribute.dataType)
        run.report(UnexpectedValue(_WORLD, f"{base}.DataType", "EnumDataType", given))
        keep = False

    _requireText(run, attribute, "category", f"{base}.Category")

    if _isBlank(attribute.code):
        run.report(UnexpectedValue(_WORLD, f"{base}.Code", "non-empty string", attribute.code))
        keep = False

    if attribute.names is not None:
        if attribute.values is None:
            run.report(MissingRequiredProperty(_WORLD, f"{base}.Values", severity=Severity.WARNING))
            keep = False
        elif len(attribute.values) != len(attribute.names):
            run.report(ArrayLengthMismatch(_WORLD, f"{base}.Values", f"{base}.Names"))
            keep = False

    return keep



def validateWorldConfiguration(worldConfig: WorldConfiguration, onError: ErrorSink) -> bool:
    """
    Validate a WorldConfiguration in place. Broken play styles are repaired, broken
    attributes are dropped. Returns False if anything was reported.
    """
    run = _ValidationRun(onError)

    if worldConfig.playStyles is None:
        run.report(MissingRequiredProperty(_WORLD, "PlayStyles"))
        worldConfig.playStyles = []
    else:
        for idx, playStyle in enumerate(worldConfig.playStyles):
            _validatePlayStyle(run, idx, playStyle)

    if worldConfig.worldConfigAttributes is None:
        run.report(MissingRequiredProperty(_WORLD, "WorldConfigAttributes"))
        worldConfig.worldConfigAttributes = []
    else:
        worldConfig.worldConfigAttributes = [
            attribute
            for idx, attribute in enumerate(worldConfig.worldConfigAttributes)
            if _keepAttribute(run, idx, attribute)
        ]

    logger.debug(
        "Validated world configuration: %d play styles, %d attributes (clean=%s)",
        len(worldConfig.playStyles),
        len(worldConfig.worldConfigAttributes),
        run.ok,
    )
    return run.ok

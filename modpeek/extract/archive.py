# modpeek/extract/archive.py
from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass

from modpeek.errors import ErrorSink, MalformedArchive, MissingFileInArchiveRoot
from modpeek.mapping import mapModInfo
from modpeek.models import ModInfo, WorldConfiguration

from .common import Extraction, extractWorldConfigText, isMissing, loadJsonDocument

logger = logging.getLogger(__name__)

__all__ = [
    "MODINFO_ENTRY",
    "WORLDCONFIG_ENTRY",
    "detectFolderMistake",
    "extractFromArchive",
]



MODINFO_ENTRY = "modinfo.json"
WORLDCONFIG_ENTRY = "worldconfig.json"



@dataclass(frozen=True, slots=True)
class _ArchiveContents:
    entryNames: tuple[str, ...]
    modInfo: bytes | None
    worldConfig: bytes | None



def detectFolderMistake(entryNames: Iterable[str]) -> bool:
    """
    True when every entry lives below one shared top-level directory, i.e. somebody
    zipped the mod folder instead of its contents.
    """
    commonPrefix: str | None = None
    for name in entryNames:
        separator = name.find("/")
        if separator < 0:
            # A file in the archive root.
            return False
        if commonPrefix is None:
            commonPrefix = name[:separator + 1]
        elif not name.startswith(commonPrefix):
            return False
    return commonPrefix is not None



def _readEntry(archive: zipfile.ZipFile, name: str) -> bytes | None:
    # Exact, case-sensitive lookup in the archive root.
    try:
        info = archive.getinfo(name)
    except KeyError:
        return None
    return archive.read(info)



def _readArchive(data: bytes) -> _ArchiveContents:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return _ArchiveContents(
            entryNames=tuple(archive.namelist()),
            modInfo=_readEntry(archive, MODINFO_ENTRY),
            worldConfig=_readEntry(archive, WORLDCONFIG_ENTRY),
        )



def _extractModInfoHalf(contents: _ArchiveContents, onError: ErrorSink) -> tuple[ModInfo | None, bool]:
    if contents.modInfo is None:
        likelyFolderMistake = detectFolderMistake(contents.entryNames)
        onError(MissingFileInArchiveRoot(MODINFO_ENTRY, likelyFolderMistake))
        return None, False

    document = loadJsonDocument(MODINFO_ENTRY, contents.modInfo, onError)
    if isMissing(document):
        return None, False
    return mapModInfo(document, onError, location=MODINFO_ENTRY)



def _extractWorldConfigHalf(contents: _ArchiveContents, onError: ErrorSink) -> tuple[WorldConfiguration | None, bool]:
    if contents.worldConfig is None:
        return None, True
    return extractWorldConfigText(WORLDCONFIG_ENTRY, contents.worldConfig, onError)



def extractFromArchive(data: bytes, onError: ErrorSink) -> Extraction:
    """
    Read `modinfo.json` and the optional `worldconfig.json` from the root of a zip archive.

    The two files are independent: a broken world configuration does not cost the
    manifest and vice versa. The models are not validated.
    """
    try:
        contents = _readArchive(data)
    except Exception as err:
        # The container reader has no common base for corruption errors.
        logger.debug("Failed to read archive: %s", err)
        onError(MalformedArchive(err))
        return Extraction(None, None, False)

    logger.debug("Archive has %d entries", len(contents.entryNames))
    modInfo, modInfoOk = _extractModInfoHalf(contents, onError)
    worldConfig, worldConfigOk = _extractWorldConfigHalf(contents, onError)
    return Extraction(modInfo, worldConfig, modInfoOk and worldConfigOk)

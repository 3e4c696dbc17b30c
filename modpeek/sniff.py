# modpeek/sniff.py
from __future__ import annotations

import logging
from enum import Enum
from pathlib import PurePath

logger = logging.getLogger(__name__)

__all__ = [
    "FileKind",
    "ZIP_MAGIC",
    "MZ_MAGIC",
    "MIN_FILE_SIZE",
    "kindFromFileName",
    "readMagic",
    "sniffFormat",
]



class FileKind(Enum):
    ARCHIVE = "Archive"
    SOURCE = "Source"
    MODULE = "Module"
    UNKNOWN = "Unknown"



ZIP_MAGIC = 0x504B0304
# 'MZ' DOS stub. Optional per the PE format, present in every real module.
MZ_MAGIC = 0x4D5A0000
MIN_FILE_SIZE = 4

_EXTENSIONS: dict[str, FileKind] = {
    ".zip": FileKind.ARCHIVE,
    ".cs": FileKind.SOURCE,
    ".dll": FileKind.MODULE,
}



def kindFromFileName(fileName: str | None) -> FileKind | None:
    if not fileName:
        return None
    # Extensions compare case-sensitively, like the game's own loader.
    return _EXTENSIONS.get(PurePath(fileName).suffix)



def readMagic(data: bytes) -> int:
    """First four bytes as a big-endian word."""
    if len(data) < MIN_FILE_SIZE:
        raise ValueError(f"Need at least {MIN_FILE_SIZE} bytes, got {len(data)}")
    return int.from_bytes(data[:4], "big")



def sniffFormat(data: bytes, fileName: str | None = None) -> FileKind:
    """
    Classify a mod file by extension hint first, then by magic bytes.

    UNKNOWN means neither matched. Callers may still try reading the bytes as source
    text before giving up. Raises ValueError for buffers shorter than four bytes.
    """
    magic = readMagic(data)

    hinted = kindFromFileName(fileName)
    if hinted is not None:
        logger.debug("Format of '%s' taken from extension: %s", fileName, hinted.value)
        return hinted

    if magic == ZIP_MAGIC:
        return FileKind.ARCHIVE
    if (magic & 0xFFFF0000) == MZ_MAGIC:
        return FileKind.MODULE
    return FileKind.UNKNOWN

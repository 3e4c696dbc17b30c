# modpeek/extract/__init__.py
from __future__ import annotations

import logging

from modpeek.errors import CouldNotDetermineFileType, ErrorCollector, ErrorSink, FileTooSmall
from modpeek.sniff import MIN_FILE_SIZE, FileKind, sniffFormat

from .archive import MODINFO_ENTRY, WORLDCONFIG_ENTRY, detectFolderMistake, extractFromArchive
from .common import WORLD_CONFIG_ATTRIBUTE_LOCATION, Extraction
from .module import extractFromModule
from .source import extractFromSource

logger = logging.getLogger(__name__)

__all__ = [
    "Extraction",
    "MODINFO_ENTRY",
    "WORLDCONFIG_ENTRY",
    "WORLD_CONFIG_ATTRIBUTE_LOCATION",
    "detectFolderMistake",
    "extractFromArchive",
    "extractFromModule",
    "extractFromSource",
    "extractModInfo",
]



_EXTRACTORS = {
    FileKind.ARCHIVE: extractFromArchive,
    FileKind.SOURCE: extractFromSource,
    FileKind.MODULE: extractFromModule,
}



def extractModInfo(data: bytes, onError: ErrorSink, *, fileName: str | None = None) -> Extraction:
    """
    Extract the unvalidated models from a mod file of any supported kind.

    The kind comes from the `fileName` extension when it has a known one, else from the
    leading bytes. Bytes that look like neither an archive nor a module are tried as
    source text. That attempt's errors are only passed on when it produced a manifest.
    """
    if len(data) < MIN_FILE_SIZE:
        onError(FileTooSmall(len(data)))
        return Extraction(None, None, False)

    kind = sniffFormat(data, fileName)
    extractor = _EXTRACTORS.get(kind)
    if extractor is not None:
        logger.debug("Extracting '%s' as %s", fileName or "<bytes>", kind.value)
        return extractor(data, onError)

    buffered = ErrorCollector()
    result = extractFromSource(data, buffered)
    if result.modInfo is not None:
        logger.debug("Extracted '%s' as source after sniffing failed", fileName or "<bytes>")
        buffered.forwardTo(onError)
        return result

    logger.debug("Could not determine the type of '%s'", fileName or "<bytes>")
    onError(CouldNotDetermineFileType())
    return Extraction(None, None, False)

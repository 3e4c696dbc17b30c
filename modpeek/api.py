# modpeek/api.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from modpeek.errors import ErrorCollector, ModPeekError
from modpeek.extract import extractModInfo
from modpeek.models import ModInfo, WorldConfiguration
from modpeek.validate import validateModInfo, validateWorldConfiguration

logger = logging.getLogger(__name__)

__all__ = ["PeekReport", "peekMod"]



@dataclass(frozen=True, slots=True)
class PeekReport:
    """Everything learned from one mod file, in reporting order."""
    modInfo: ModInfo | None
    worldConfig: WorldConfiguration | None
    errors: tuple[ModPeekError, ...]
    ok: bool

    @property
    def hasFatal(self) -> bool:
        return any(err.isFatal for err in self.errors)

    @property
    def hasWarnings(self) -> bool:
        return any(not err.isFatal for err in self.errors)



def peekMod(data: bytes, fileName: str | None = None, *, validate: bool = True) -> PeekReport:
    """
    Extract and (by default) validate the manifest and world configuration of a mod file.

    `ok` is True only when nothing at all was reported.
    """
    collector = ErrorCollector()
    extraction = extractModInfo(data, collector, fileName=fileName)
    ok = extraction.ok

    if validate:
        if extraction.modInfo is not None:
            ok = validateModInfo(extraction.modInfo, collector) and ok
        if extraction.worldConfig is not None:
            ok = validateWorldConfiguration(extraction.worldConfig, collector) and ok

    ok = ok and len(collector) == 0
    logger.debug("Peeked '%s': %d errors (ok=%s)", fileName or "<bytes>", len(collector), ok)
    return PeekReport(extraction.modInfo, extraction.worldConfig, collector.errors, ok)

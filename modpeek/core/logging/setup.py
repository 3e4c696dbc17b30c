# modpeek/core/logging/setup.py
from __future__ import annotations
import logging
import sys
from typing import TextIO

from .formatters import DevFormatter, JsonFormatter

__all__ = [
    "LOG_FORMATS",
    "configureLogging",
]



LOG_FORMATS: dict[str, type[logging.Formatter]] = {
    "dev": DevFormatter,
    "json": JsonFormatter,
}



def _resolveLevel(level: str | int) -> int:
    if isinstance(level, int):
        return level
    # Resolve level string like "INFO" → logging.INFO, fallback safe
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.WARNING



def configureLogging(level: str | int = "WARNING", fmt: str = "dev", stream: TextIO | None = None) -> logging.Handler:
    """
    Install a single stderr handler on the root logger.

    Called by the command line entry point only; library code just logs.
    Unknown formats fall back to the dev formatter.
    """
    rootLevel = _resolveLevel(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(rootLevel)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(rootLevel)
    handler.setFormatter(LOG_FORMATS.get(str(fmt).lower(), DevFormatter)())
    root.addHandler(handler)
    return handler

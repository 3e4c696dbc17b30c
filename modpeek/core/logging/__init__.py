# modpeek/core/logging/__init__.py
from __future__ import annotations

from .formatters import DevFormatter, JsonFormatter
from .setup import LOG_FORMATS, configureLogging

__all__ = [
    "LOG_FORMATS",
    "DevFormatter",
    "JsonFormatter",
    "configureLogging",
]

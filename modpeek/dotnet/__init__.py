# modpeek/dotnet/__init__.py
from __future__ import annotations

from .blob import MetadataFormatError, decodeCompressedUInt, decodeCustomAttribute, parseConstructorParams
from .metadata import CustomAttributeRecord, attributesFromImage, readAssemblyAttributes

__all__ = [
    "CustomAttributeRecord",
    "MetadataFormatError",
    "attributesFromImage",
    "decodeCompressedUInt",
    "decodeCustomAttribute",
    "parseConstructorParams",
    "readAssemblyAttributes",
]

# modpeek/dotnet/metadata.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import dnfile
from dnfile.mdtable import MemberRefRow

from .blob import MetadataFormatError, decodeCustomAttribute

logger = logging.getLogger(__name__)

__all__ = [
    "CustomAttributeRecord",
    "readAssemblyAttributes",
    "attributesFromImage",
]



@dataclass(frozen=True, slots=True)
class CustomAttributeRecord:
    """One decoded assembly-level custom attribute."""
    typeName: str
    constructorArguments: tuple[Any, ...] = ()
    namedArguments: dict[str, Any] = field(default_factory=dict)



def _heapValue(item: Any) -> Any:
    # Heap items carry the decoded value in `.value`, older dnfile releases hand out raw values.
    return getattr(item, "value", item)



def _text(item: Any) -> str | None:
    value = _heapValue(item)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return value



def _blob(item: Any) -> bytes:
    value = _heapValue(item)
    return bytes(value) if value is not None else b""



def _isAssemblyParent(row: Any) -> bool:
    parent = getattr(row, "Parent", None)
    table = getattr(parent, "table", None)
    return getattr(table, "name", None) == "Assembly"



def attributesFromImage(image: Any) -> list[CustomAttributeRecord]:
    """Decode the assembly-level custom attributes of an opened dnfile image."""
    net = getattr(image, "net", None)
    if net is None or getattr(net, "mdtables", None) is None:
        raise MetadataFormatError("Not a .NET module: no CLI metadata")

    table = getattr(net.mdtables, "CustomAttribute", None)
    if table is None:
        return []

    records: list[CustomAttributeRecord] = []
    for row in table.rows:
        if not _isAssemblyParent(row):
            continue

        ctor = row.Type.row
        if not isinstance(ctor, MemberRefRow):
            # Attribute type defined in the module itself, never a loader attribute.
            continue

        typeName = _text(getattr(ctor.Class.row, "TypeName", None))
        if not typeName:
            continue

        fixed, named = decodeCustomAttribute(_blob(ctor.Signature), _blob(row.Value))
        records.append(CustomAttributeRecord(typeName, fixed, named))

    logger.debug("Decoded %d assembly attributes", len(records))
    return records



def readAssemblyAttributes(data: bytes) -> list[CustomAttributeRecord]:
    """
    Read the assembly-level custom attributes of a .NET module.

    Raises MetadataFormatError (or the PE reader's own error) when the bytes aren't a
    readable .NET module.
    """
    image = dnfile.dnPE(data=data)
    try:
        return attributesFromImage(image)
    finally:
        image.close()

# modpeek/dotnet/blob.py
from __future__ import annotations

import struct
from typing import Any

__all__ = [
    "MetadataFormatError",
    "decodeCompressedUInt",
    "parseConstructorParams",
    "decodeCustomAttribute",
]



class MetadataFormatError(ValueError):
    """Module metadata could not be decoded."""



# ECMA-335 II.23.1.16
ELEMENT_TYPE_BOOLEAN = 0x02
ELEMENT_TYPE_CHAR = 0x03
ELEMENT_TYPE_I1 = 0x04
ELEMENT_TYPE_U1 = 0x05
ELEMENT_TYPE_I2 = 0x06
ELEMENT_TYPE_U2 = 0x07
ELEMENT_TYPE_I4 = 0x08
ELEMENT_TYPE_U4 = 0x09
ELEMENT_TYPE_I8 = 0x0A
ELEMENT_TYPE_U8 = 0x0B
ELEMENT_TYPE_R4 = 0x0C
ELEMENT_TYPE_R8 = 0x0D
ELEMENT_TYPE_STRING = 0x0E
ELEMENT_TYPE_VOID = 0x01
ELEMENT_TYPE_VALUETYPE = 0x11
ELEMENT_TYPE_CLASS = 0x12
ELEMENT_TYPE_OBJECT = 0x1C
ELEMENT_TYPE_SZARRAY = 0x1D

# ECMA-335 II.23.3
SERIALIZATION_TYPE_TYPE = 0x50
SERIALIZATION_TYPE_TAGGED_OBJECT = 0x51
SERIALIZATION_TYPE_FIELD = 0x53
SERIALIZATION_TYPE_PROPERTY = 0x54
SERIALIZATION_TYPE_ENUM = 0x55

_SIG_HASTHIS = 0x20
_SIG_GENERIC = 0x10

_PRIMITIVES: dict[int, str] = {
    ELEMENT_TYPE_BOOLEAN: "<?",
    ELEMENT_TYPE_CHAR: "<H",
    ELEMENT_TYPE_I1: "<b",
    ELEMENT_TYPE_U1: "<B",
    ELEMENT_TYPE_I2: "<h",
    ELEMENT_TYPE_U2: "<H",
    ELEMENT_TYPE_I4: "<i",
    ELEMENT_TYPE_U4: "<I",
    ELEMENT_TYPE_I8: "<q",
    ELEMENT_TYPE_U8: "<Q",
    ELEMENT_TYPE_R4: "<f",
    ELEMENT_TYPE_R8: "<d",
}

# Parameter/element types are modelled as tuples: (ELEMENT_TYPE_SZARRAY, inner) for arrays,
# a bare int otherwise. Enums are read with their underlying type assumed to be int32.
ParamType = Any



class _Reader:
    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def take(self, count: int) -> bytes:
        if count < 0 or self.pos + count > len(self.data):
            raise MetadataFormatError(
                f"Blob truncated: need {count} bytes at offset {self.pos}, have {self.remaining()}"
            )
        chunk = self.data[self.pos:self.pos + count]
        self.pos += count
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def unpack(self, fmt: str) -> Any:
        return struct.unpack(fmt, self.take(struct.calcsize(fmt)))[0]

    def compressed(self) -> int:
        value, used = decodeCompressedUInt(self.data, self.pos)
        self.pos += used
        return value

    def serString(self) -> str | None:
        if self.remaining() and self.data[self.pos] == 0xFF:
            self.pos += 1
            return None
        length = self.compressed()
        raw = self.take(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise MetadataFormatError(f"SerString is not valid UTF-8: {err}") from err



def decodeCompressedUInt(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode an ECMA-335 compressed unsigned integer. Returns (value, bytesConsumed)."""
    if offset >= len(data):
        raise MetadataFormatError("Compressed integer past end of blob")
    first = data[offset]
    if first & 0x80 == 0:
        return first, 1
    if first & 0xC0 == 0x80:
        if offset + 2 > len(data):
            raise MetadataFormatError("Compressed integer past end of blob")
        return ((first & 0x3F) << 8) | data[offset + 1], 2
    if first & 0xE0 == 0xC0:
        if offset + 4 > len(data):
            raise MetadataFormatError("Compressed integer past end of blob")
        return (
            ((first & 0x1F) << 24) | (data[offset + 1] << 16) | (data[offset + 2] << 8) | data[offset + 3]
        ), 4
    raise MetadataFormatError(f"Invalid compressed integer lead byte 0x{first:02X}")



# ------------------------------------------------------------------ #
# Constructor signatures
# ------------------------------------------------------------------ #

def _readSigType(reader: _Reader) -> ParamType:
    tag = reader.u8()
    if tag in _PRIMITIVES or tag in (ELEMENT_TYPE_STRING, ELEMENT_TYPE_OBJECT):
        return tag
    if tag == ELEMENT_TYPE_SZARRAY:
        return (ELEMENT_TYPE_SZARRAY, _readSigType(reader))
    if tag == ELEMENT_TYPE_VALUETYPE:
        reader.compressed()     # TypeDefOrRef, only enums are legal here
        return ELEMENT_TYPE_VALUETYPE
    if tag == ELEMENT_TYPE_CLASS:
        reader.compressed()     # only System.Type is legal here
        return ELEMENT_TYPE_CLASS
    raise MetadataFormatError(f"Unsupported attribute parameter type 0x{tag:02X}")



def parseConstructorParams(signature: bytes) -> list[ParamType]:
    """Parameter types of a constructor MethodRefSig (II.23.2.1)."""
    reader = _Reader(signature)
    callingConvention = reader.u8()
    if callingConvention & _SIG_GENERIC:
        reader.compressed()
    paramCount = reader.compressed()
    returnType = reader.u8()
    if returnType != ELEMENT_TYPE_VOID:
        raise MetadataFormatError(f"Constructor returns 0x{returnType:02X}, expected void")
    return [_readSigType(reader) for _ in range(paramCount)]



# ------------------------------------------------------------------ #
# Values
# ------------------------------------------------------------------ #

def _readFieldOrPropType(reader: _Reader) -> ParamType:
    tag = reader.u8()
    if tag in _PRIMITIVES or tag == ELEMENT_TYPE_STRING:
        return tag
    if tag == ELEMENT_TYPE_SZARRAY:
        return (ELEMENT_TYPE_SZARRAY, _readFieldOrPropType(reader))
    if tag == SERIALIZATION_TYPE_TYPE:
        return ELEMENT_TYPE_CLASS
    if tag == SERIALIZATION_TYPE_TAGGED_OBJECT:
        return ELEMENT_TYPE_OBJECT
    if tag == SERIALIZATION_TYPE_ENUM:
        reader.serString()      # enum type name
        return ELEMENT_TYPE_VALUETYPE
    raise MetadataFormatError(f"Unsupported named argument type 0x{tag:02X}")



def _readValue(reader: _Reader, paramType: ParamType) -> Any:
    if isinstance(paramType, tuple):
        _, elementType = paramType
        count = reader.unpack("<I")
        if count == 0xFFFFFFFF:
            return None
        return [_readValue(reader, elementType) for _ in range(count)]
    if paramType in _PRIMITIVES:
        value = reader.unpack(_PRIMITIVES[paramType])
        if paramType == ELEMENT_TYPE_CHAR:
            return chr(value)
        return value
    if paramType in (ELEMENT_TYPE_STRING, ELEMENT_TYPE_CLASS):
        return reader.serString()
    if paramType == ELEMENT_TYPE_VALUETYPE:
        return reader.unpack("<i")
    if paramType == ELEMENT_TYPE_OBJECT:
        return _readValue(reader, _readFieldOrPropType(reader))
    raise MetadataFormatError(f"Can't read a value of type {paramType!r}")



def decodeCustomAttribute(
    signature: bytes,
    value: bytes,
) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """
    Decode a CustomAttribute value blob (II.23.3).

    `signature` is the constructor's signature blob; it types the fixed arguments.
    Returns (constructorArguments, namedArguments). Fields and properties share the
    named namespace.
    """
    params = parseConstructorParams(signature)
    reader = _Reader(value)
    if not value:
        if params:
            raise MetadataFormatError("Empty attribute blob for a constructor with parameters")
        return (), {}

    prolog = reader.unpack("<H")
    if prolog != 0x0001:
        raise MetadataFormatError(f"Bad custom attribute prolog 0x{prolog:04X}")

    fixed = tuple(_readValue(reader, param) for param in params)

    named: dict[str, Any] = {}
    # A blob may legally stop right after the fixed arguments.
    numNamed = reader.unpack("<H") if reader.remaining() else 0
    for _ in range(numNamed):
        kind = reader.u8()
        if kind not in (SERIALIZATION_TYPE_FIELD, SERIALIZATION_TYPE_PROPERTY):
            raise MetadataFormatError(f"Bad named argument kind 0x{kind:02X}")
        argType = _readFieldOrPropType(reader)
        name = reader.serString()
        if name is None:
            raise MetadataFormatError("Named argument without a name")
        named[name] = _readValue(reader, argType)
    return fixed, named

import pytest

from modpeek.sniff import FileKind, kindFromFileName, readMagic, sniffFormat


@pytest.mark.parametrize(
    "fileName, expected",
    [
        ("StepUp.zip",          FileKind.ARCHIVE),
        ("StepUp.cs",           FileKind.SOURCE),
        ("StepUp.dll",          FileKind.MODULE),
        ("mods/StepUp.v1.2.zip", FileKind.ARCHIVE),
        ("StepUp.ZIP",          None),
        ("StepUp.txt",          None),
        ("StepUp",              None),
        ("",                    None),
        (None,                  None),
    ],
)
def test_kindFromFileName(fileName, expected):
    assert kindFromFileName(fileName) is expected


def test_readMagic_isBigEndian():
    assert readMagic(b"PK\x03\x04rest") == 0x504B0304


def test_readMagic_tooShort():
    with pytest.raises(ValueError):
        readMagic(b"PK\x03")


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"PK\x03\x04\x14\x00",     FileKind.ARCHIVE),
        (b"MZ\x90\x00\x03\x00",     FileKind.MODULE),
        (b"MZ\xff\xff",             FileKind.MODULE),
        (b"using System;",          FileKind.UNKNOWN),
        (b"PK\x05\x06",             FileKind.UNKNOWN),
        (b"\x00\x00\x00\x00",       FileKind.UNKNOWN),
    ],
)
def test_sniffFormat_byMagic(data, expected):
    assert sniffFormat(data) is expected


def test_sniffFormat_extensionWins():
    assert sniffFormat(b"PK\x03\x04", "StepUp.cs") is FileKind.SOURCE
    assert sniffFormat(b"using System;", "StepUp.dll") is FileKind.MODULE


def test_sniffFormat_unknownExtensionFallsBackToMagic():
    assert sniffFormat(b"PK\x03\x04", "StepUp.ZIP") is FileKind.ARCHIVE
    assert sniffFormat(b"MZ\x90\x00", "StepUp.exe") is FileKind.MODULE


def test_sniffFormat_tooShort():
    with pytest.raises(ValueError):
        sniffFormat(b"PK", "StepUp.zip")

import dataclasses

import pytest

from modpeek.errors import (
    ERROR_TYPES,
    MissingFileInArchiveRoot,
    ModPeekError,
    Severity,
    UnexpectedJsonPropertyType,
    UnexpectedValue,
)
from modpeek.models import EnumAppSide, EnumModType, ModDependency, ModInfo
from modpeek.report import ERROR_MESSAGES, formatError, formatIdAndVersion, formatModInfoLines, formatValue


_SAMPLE_VALUES = {
    "int": 3,
    "bool": True,
    "BaseException": ValueError("boom"),
}


def sampleError(errorType: type[ModPeekError]) -> ModPeekError:
    kwargs = {
        field.name: _SAMPLE_VALUES.get(field.type, "x")
        for field in dataclasses.fields(errorType)
        if field.name != "severity"
    }
    return errorType(**kwargs)


def test_everyErrorTypeHasAMessage():
    assert set(ERROR_MESSAGES) == set(ERROR_TYPES)


@pytest.mark.parametrize("errorType", ERROR_TYPES, ids=lambda errorType: errorType.__name__)
def test_formatError_singleLineWithSeverity(errorType):
    error = sampleError(errorType)
    line = formatError(error)
    assert line.startswith(f"{error.severity.value}: ")
    assert "\n" not in line


def test_formatError_severityPrefix():
    assert formatError(MissingFileInArchiveRoot("modinfo.json", False)).startswith("fatal: ")
    assert formatError(UnexpectedValue("ModInfo", "Type", "EnumModType", "x")).startswith("warning: ")
    overridden = UnexpectedValue("ModInfo", "Type", "EnumModType", "x", severity=Severity.FATAL)
    assert formatError(overridden).startswith("fatal: ")


def test_formatError_folderMistakeHint():
    assert "zipped" in formatError(MissingFileInArchiveRoot("modinfo.json", True))
    assert "zipped" not in formatError(MissingFileInArchiveRoot("modinfo.json", False))


def test_formatError_jsonKinds():
    line = formatError(UnexpectedJsonPropertyType("TextureSize", "Number", "32"))
    assert line == 'warning: TextureSize: expected a JSON Number, got String "32". The property was ignored.'


def test_formatError_unknownType():
    class Custom(ModPeekError):
        pass

    with pytest.raises(TypeError):
        formatError(Custom())


@pytest.mark.parametrize(
    "value, expected",
    [
        (None,                  ""),
        (True,                  "true"),
        (False,                 "false"),
        (32,                    "32"),
        (EnumAppSide.CLIENT,    "Client"),
        ("two\nlines\r",        "two\\nlines\\r"),
    ],
)
def test_formatValue(value, expected):
    assert formatValue(value) == expected


def test_formatModInfoLines():
    modInfo = ModInfo(
        name="StepUp",
        modId="stepup",
        version="1.2.0",
        networkVersion="1.2.0",
        side=EnumAppSide.CLIENT,
        description="Doubles players' step height\nto allow stepping up full blocks",
        website=None,
        authors=["copygirl", "Smith, John"],
        dependencies=[ModDependency(modId="game"), ModDependency(modId="somemod", version="1.2.3-pre.4")],
    )
    assert formatModInfoLines(modInfo) == [
        "Name: StepUp",
        "ModID: stepup",
        "Version: 1.2.0",
        "NetworkVersion: 1.2.0",
        "Type: Code",
        "Side: Client",
        "RequiredOnClient: true",
        "RequiredOnServer: true",
        "IconPath: ",
        "Description: Doubles players' step height\\nto allow stepping up full blocks",
        "Website: ",
        "TextureSize: 32",
        "Authors: copygirl, Smith\\, John",
        "Contributors: ",
        "Dependencies: game, somemod@1.2.3-pre.4",
        "CoreMod: false",
    ]


def test_formatIdAndVersion():
    modInfo = ModInfo(name="Waxpress", modId="waxpress", version="1.0.0", type=EnumModType.CONTENT)
    assert formatIdAndVersion(modInfo) == "waxpress:1.0.0"
    assert formatIdAndVersion(ModInfo()) == ":"

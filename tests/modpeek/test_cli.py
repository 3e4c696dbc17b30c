import json

import pytest

from modpeek.cli import EXIT_FAILURE, EXIT_OK, buildParser, main
from modpeek.core.settings import SETTINGS_ENV_VAR, loadSettings


WAXPRESS = {
    "type": "content",
    "name": "Waxpress",
    "authors": ["Korhaka"],
    "version": "1.0.0",
    "dependencies": {"game": "1.19.8"},
}


@pytest.fixture
def writeMod(tmp_path, makeZip):
    def write(modinfo: dict, fileName: str = "Waxpress_1.0.0.zip"):
        path = tmp_path / fileName
        path.write_bytes(makeZip({"modinfo.json": json.dumps(modinfo)}))
        return path
    return write


def test_buildParser_options():
    args = buildParser().parse_args(["-i", "-p", "-f", "mod.zip"])
    assert args.idandversion and args.alwaysPrint
    assert args.file == "mod.zip"
    assert args.path is None


def test_main_printsManifest(writeMod, capsys):
    path = writeMod(WAXPRESS)
    assert main([str(path)]) == EXIT_OK

    out, err = capsys.readouterr()
    assert err == ""
    lines = out.splitlines()
    assert len(lines) == 16
    assert "Name: Waxpress" in lines
    assert "ModID: waxpress" in lines
    assert "Type: Content" in lines
    assert "Dependencies: game@1.19.8" in lines


def test_main_idAndVersion(writeMod, capsys):
    path = writeMod(WAXPRESS)
    assert main(["--idandversion", "--file", str(path)]) == EXIT_OK
    assert capsys.readouterr().out == "waxpress:1.0.0\n"


def test_main_warningsFailWithoutAlwaysPrint(writeMod, capsys):
    path = writeMod({**WAXPRESS, "dependency": {"game": "1.19.8"}})
    assert main(["-i", str(path)]) == EXIT_FAILURE

    out, err = capsys.readouterr()
    assert out == ""
    assert err.startswith("warning: Ignored unknown property 'dependency'")


def test_main_alwaysPrintToleratesWarnings(writeMod, capsys):
    path = writeMod({**WAXPRESS, "dependency": {"game": "1.19.8"}})
    assert main(["-i", "-p", str(path)]) == EXIT_OK

    out, err = capsys.readouterr()
    assert out == "waxpress:1.0.0\n"
    assert "warning:" in err


def test_main_alwaysPrintFromSettings(writeMod, capsys, monkeypatch, tmp_path):
    settingsPath = tmp_path / "modpeek.json5"
    settingsPath.write_text("{ output: { alwaysPrint: true } }", encoding="utf-8")
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(settingsPath))
    loadSettings.cache_clear()

    path = writeMod({**WAXPRESS, "dependency": {}})
    assert main(["-i", str(path)]) == EXIT_OK
    assert capsys.readouterr().out == "waxpress:1.0.0\n"


def test_main_fatalAlwaysFails(writeMod, capsys):
    path = writeMod({**WAXPRESS, "version": "0.2.6 "})
    assert main([str(path)]) == EXIT_FAILURE
    out, err = capsys.readouterr()
    assert out == ""
    assert err.startswith("fatal: Version '0.2.6 ' is invalid")

    assert main(["-p", str(path)]) == EXIT_FAILURE
    out, _ = capsys.readouterr()
    assert "Version: " in out.splitlines()


def test_main_nothingToPrint(tmp_path, capsys):
    path = tmp_path / "empty.zip"
    path.write_bytes(b"PK")
    assert main(["-p", str(path)]) == EXIT_FAILURE
    out, err = capsys.readouterr()
    assert out == ""
    assert err == "fatal: File is too small to be a mod (2 bytes).\n"


def test_main_sourceFile(tmp_path, capsys):
    path = tmp_path / "StepUp.cs"
    path.write_text('[assembly: ModInfo("StepUp", Version = "1.2.0", Side = "Client")]', encoding="utf-8")
    assert main([str(path)]) == EXIT_OK
    out = capsys.readouterr().out
    assert "ModID: stepup" in out
    assert "Side: Client" in out


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["-f", "a.zip", "b.zip"],
        ["--bogus", "a.zip"],
    ],
)
def test_main_usageErrors(argv, capsys):
    with pytest.raises(SystemExit) as info:
        main(argv)
    assert info.value.code == EXIT_FAILURE
    assert "usage:" in capsys.readouterr().err


def test_main_unreadableFile(tmp_path, capsys):
    with pytest.raises(SystemExit) as info:
        main([str(tmp_path / "missing.zip")])
    assert info.value.code == EXIT_FAILURE
    assert "can't read" in capsys.readouterr().err


def test_main_help(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--help"])
    assert info.value.code == 0
    assert "--idandversion" in capsys.readouterr().out

import io
import logging
import sys
import zipfile

import pytest

from modpeek.core.settings import SETTINGS_ENV_VAR, loadSettings
from modpeek.errors import ErrorCollector



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



@pytest.fixture(autouse=True)
def isolatedSettings(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Never pick up the developer's own ~/.modpeek settings."""
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(tmp_path / "no-such-settings.json5"))
    loadSettings.cache_clear()
    yield
    loadSettings.cache_clear()



@pytest.fixture(autouse=True)
def restoreRootLogger():
    # The CLI installs its own handler on the root logger.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)



@pytest.fixture
def errors() -> ErrorCollector:
    return ErrorCollector()



@pytest.fixture
def makeZip():
    """Builds an in-memory zip archive from {entryName: text or bytes}."""
    def build(entries: dict[str, str | bytes]) -> bytes:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, content in entries.items():
                archive.writestr(name, content)
        return buf.getvalue()
    return build

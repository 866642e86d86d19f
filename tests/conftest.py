"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from zotero_runner.options import PluginInfo, RunOptions


@pytest.fixture
def profile_dir(tmp_path: Path) -> Path:
    """Provide an empty profile directory."""
    path = tmp_path / "profile"
    path.mkdir()
    return path


@pytest.fixture
def make_options(tmp_path: Path, profile_dir: Path):
    """Build RunOptions rooted in the test's temporary directory."""

    def _make(**overrides) -> RunOptions:
        values = {
            "binary_path": "/opt/zotero/zotero",
            "profile_path": str(profile_dir),
            "data_dir": str(tmp_path / "data"),
            "plugins": [PluginInfo(id="p1@test", source_dir=str(tmp_path / "p1"))],
            "reload_settle_seconds": 0.0,
        }
        values.update(overrides)
        return RunOptions(**values)

    return _make


@pytest.fixture
def mock_client() -> AsyncMock:
    """Remote-control client that installs everything successfully."""
    client = AsyncMock()
    client.connect.return_value = None
    client.install_temporary_addon.side_effect = lambda path: f"addon-{Path(path).name}"
    client.reload_addon.return_value = None
    client.disconnect.return_value = None
    return client


def make_fake_process(returncode: int | None = None, lines: list[bytes] | None = None):
    """Fake asyncio.subprocess.Process with a finite stdout."""
    process = MagicMock()
    process.returncode = returncode
    process.pid = 4242
    process.stdout = MagicMock()
    process.stdout.readline = AsyncMock(side_effect=[*(lines or []), b""])
    process.wait = AsyncMock(return_value=0)
    process.terminate = MagicMock()
    return process


@pytest.fixture
def process_factory():
    """Factory for fake host processes."""
    return make_fake_process

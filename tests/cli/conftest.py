"""Shared fixtures for CLI tests."""

from pathlib import Path

import pytest
import yaml


@pytest.fixture
def tmp_config_path(tmp_path: Path) -> Path:
    """Provide a temporary config file path."""
    return tmp_path / "zotero-runner.yaml"


@pytest.fixture
def write_config(tmp_config_path: Path, tmp_path: Path):
    """Write a config whose profile lives under the test's temp dir."""

    def _write(**overrides) -> Path:
        data = {
            "binary_path": "/opt/zotero/zotero",
            "profile_path": str(tmp_path / "profile"),
            "plugins": [{"id": "p1@test", "source_dir": str(tmp_path / "p1")}],
        }
        data.update(overrides)
        tmp_config_path.write_text(yaml.safe_dump(data))
        return tmp_config_path

    return _write

"""Fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from replacing the test session's log handlers."""
    with patch("tagarr.cli.configure_logging"):
        yield


@pytest.fixture
def config_file(tmp_path: Path, rules_file: Path) -> Path:
    """A config file for a primary-only setup with HDR disabled."""
    path = tmp_path / "config.toml"
    path.write_text(
        "[primary]\n"
        'url = "http://radarr:7878"\n'
        'api_key = "primary-key"\n'
        'name = "Radarr"\n'
        "\n"
        "[hdr]\n"
        "enabled = false\n"
        "\n"
        "[release_groups]\n"
        f'rules_file = "{rules_file.as_posix()}"\n',
        encoding="utf-8",
    )
    return path

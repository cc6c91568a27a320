"""Shared test fixtures for Tagarr."""

from pathlib import Path

import pytest

from tagarr.config.models import (
    AudioFilterConfig,
    HdrConfig,
    QualityFilterConfig,
    RegistryConnectionConfig,
    TagarrConfig,
)

RULES_YAML = """\
schema_version: 1
release_groups:
  - search: FraMeSToR
    category: framestor
    display_name: FraMeSToR
  - search: BHDStudio
    category: bhdstudio
    display_name: BHDStudio
    mode: filtered
  - search: OldGroup
    category: oldgroup
    enabled: false
"""


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    """Write a small rule file and return its path."""
    path = tmp_path / "rules.yaml"
    path.write_text(RULES_YAML, encoding="utf-8")
    return path


@pytest.fixture
def primary_config() -> RegistryConnectionConfig:
    return RegistryConnectionConfig(
        url="http://radarr:7878", api_key="primary-key", name="Radarr"
    )


@pytest.fixture
def secondary_config() -> RegistryConnectionConfig:
    return RegistryConnectionConfig(
        url="http://radarr4k:7878", api_key="secondary-key", name="Radarr 4K"
    )


@pytest.fixture
def hdr_config() -> HdrConfig:
    return HdrConfig()


@pytest.fixture
def quality_config() -> QualityFilterConfig:
    return QualityFilterConfig()


@pytest.fixture
def audio_config() -> AudioFilterConfig:
    return AudioFilterConfig()


@pytest.fixture
def tagarr_config(
    primary_config: RegistryConnectionConfig, rules_file: Path
) -> TagarrConfig:
    """A valid configuration with HDR disabled and no secondary."""
    config = TagarrConfig(primary=primary_config)
    config.hdr.enabled = False
    config.release_groups.rules_file = rules_file
    return config

"""Fixtures for workflow tests: a small library on two in-memory instances."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from tagarr.config.models import TagarrConfig
from tagarr.registry.models import Label
from tagarr.registry.testing import InMemoryRegistry, make_item
from tagarr.rules.editor import RuleFileEditor
from tagarr.rules.loader import load_rules
from tagarr.workflow.runtime import Runtime


class FakeNotifier:
    """Notifier that keeps every payload it is given."""

    def __init__(self) -> None:
        self.payloads: list[dict[str, Any]] = []

    def send(self, payload: dict[str, Any]) -> bool:
        self.payloads.append(payload)
        return True

    def titles(self) -> list[str]:
        return [
            embed.get("title", "")
            for payload in self.payloads
            for embed in payload.get("embeds", [])
        ]


class FakeAnalyzer:
    """Analyzer returning a fixed summary, or raising the given exception."""

    def __init__(self, summary: str = "", error: Exception | None = None) -> None:
        self.summary = summary
        self.error = error

    def extract_profile_summary(self, file_path: str) -> str:
        if self.error is not None:
            raise self.error
        return self.summary


@pytest.fixture
def primary() -> InMemoryRegistry:
    return InMemoryRegistry(
        "Radarr",
        items=[
            make_item(
                1,
                title="Dune",
                year=2021,
                external_id=100,
                release_group="FraMeSToR",
                relative_path="Dune.2021.2160p.BluRay.REMUX.DTS-HD.MA-FraMeSToR.mkv",
            ),
            make_item(
                2,
                title="Alien",
                year=1979,
                external_id=200,
                labels=[1],
                release_group="NTb",
                relative_path="Alien.1979.1080p.BluRay.x264-NTb.mkv",
            ),
            make_item(
                3,
                title="Heat",
                year=1995,
                external_id=300,
                release_group="BHDStudio",
                relative_path="Heat.1995.2160p.MA.WEB-DL.TrueHD.Atmos.7.1-BHDStudio.mkv",
            ),
            make_item(
                4,
                title="Up",
                year=2009,
                external_id=400,
                release_group="HONE",
                relative_path="Up.2009.2160p.MA.WEB-DL.TrueHD.Atmos.7.1-HONE.mkv",
            ),
        ],
        labels=[Label(1, "framestor")],
    )


@pytest.fixture
def secondary() -> InMemoryRegistry:
    return InMemoryRegistry(
        "Radarr 4K",
        items=[
            make_item(11, title="Dune", year=2021, external_id=100),
            make_item(12, title="Alien", year=1979, external_id=200, labels=[7]),
            make_item(13, title="Gone", year=1999, external_id=999, labels=[7]),
        ],
        labels=[Label(7, "framestor"), Label(8, "bhdstudio")],
    )


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def runtime(
    tagarr_config: TagarrConfig,
    rules_file: Path,
    primary: InMemoryRegistry,
    secondary: InMemoryRegistry,
    notifier: FakeNotifier,
) -> Runtime:
    """Runtime over the in-memory library, HDR disabled."""
    return Runtime(
        config=tagarr_config,
        primary=primary,
        secondary=secondary,
        rules=load_rules(rules_file),
        notifier=notifier,
        rule_editor=RuleFileEditor(rules_file),
    )


@pytest.fixture
def analyzer_factory():
    """Build a FakeAnalyzer: analyzer_factory(summary) or analyzer_factory(error=exc)."""
    return FakeAnalyzer

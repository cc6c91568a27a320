"""Discovery of release groups that would pass the filters.

Movies whose release group is not covered by any rule, but whose release
text passes both the quality and audio filters, point at groups worth
adding. Each group is registered once per run; later sightings only add
to its count.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from tagarr.classify.matchers import AudioFilter, QualityFilter, filter_text
from tagarr.config.models import AudioFilterConfig, QualityFilterConfig
from tagarr.registry.models import Item

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveryCandidate:
    """A release group seen for the first time in this run."""

    token: str
    """Lowercased release-group token, used as the category name."""

    display_name: str
    """Token in the case it was first seen."""

    quality_detail: str
    audio_detail: str
    first_title: str


@dataclass(frozen=True)
class DiscoverySighting:
    """One movie from a discovered group."""

    token: str
    display_name: str
    title: str
    quality_detail: str
    audio_detail: str
    relative_path: str


class DiscoveryEngine:
    """Collects candidate release groups across a run."""

    def __init__(
        self,
        known_tokens: Iterable[str],
        quality: QualityFilterConfig,
        audio: AudioFilterConfig,
    ) -> None:
        self._known = frozenset(token.lower() for token in known_tokens)
        self._quality = QualityFilter(quality)
        self._audio = AudioFilter(audio)
        self._candidates: dict[str, DiscoveryCandidate] = {}
        self._sightings: list[DiscoverySighting] = []

    @property
    def known_count(self) -> int:
        return len(self._known)

    @property
    def candidates(self) -> list[DiscoveryCandidate]:
        """Candidates in the order they were first seen."""
        return list(self._candidates.values())

    @property
    def sightings(self) -> list[DiscoverySighting]:
        return list(self._sightings)

    def count(self, token: str) -> int:
        return sum(1 for s in self._sightings if s.token == token)

    def inspect(self, item: Item) -> DiscoveryCandidate | None:
        """Check one movie for an unknown, filter-passing release group.

        Returns:
            The candidate if this movie registered a new group, else None.
        """
        display_name = item.release_group.strip()
        token = display_name.lower()
        if not token or token in self._known:
            return None

        text = filter_text(item)
        quality = self._quality.check(text)
        if not quality.passed:
            return None
        audio = self._audio.check(text)
        if not audio.passed:
            return None

        self._sightings.append(
            DiscoverySighting(
                token=token,
                display_name=display_name,
                title=item.display_title,
                quality_detail=quality.detail,
                audio_detail=audio.detail,
                relative_path=item.relative_path,
            )
        )
        if token in self._candidates:
            return None

        candidate = DiscoveryCandidate(
            token=token,
            display_name=display_name,
            quality_detail=quality.detail,
            audio_detail=audio.detail,
            first_title=item.display_title,
        )
        self._candidates[token] = candidate
        logger.info(
            "Discovered release group %s (%s + %s)",
            display_name,
            quality.detail,
            audio.detail,
        )
        return candidate

"""Release-group classification.

Each active rule names a release-group token and the tag it maps to. A
movie qualifies for a category when the token is found in one of its
release fields and, for filtered rules, its release text also passes the
quality and audio filters.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

from tagarr.classify.matchers import (
    AudioFilter,
    FilterVerdict,
    MatchLocation,
    QualityFilter,
    filter_text,
    match_fields,
)
from tagarr.config.models import AudioFilterConfig, QualityFilterConfig
from tagarr.registry.models import Item
from tagarr.rules.models import CategoryRule, RuleMode


class RemovalReason(str, enum.Enum):
    """Why a movie does not qualify for a category."""

    WRONG_RELEASE_GROUP = "wrong release group"
    FAILED_QUALITY = "failed quality"
    FAILED_AUDIO = "failed audio"
    FAILED_QUALITY_AND_AUDIO = "failed quality & audio"


@dataclass(frozen=True)
class RuleDecision:
    """Outcome of one rule for one movie."""

    rule: CategoryRule
    desired: bool
    location: MatchLocation | None = None
    quality: FilterVerdict | None = None
    audio: FilterVerdict | None = None
    reason: RemovalReason | None = None

    @property
    def category(self) -> str:
        return self.rule.category

    @property
    def matched(self) -> bool:
        """Whether the release-group token was found at all."""
        return self.location is not None

    def trail(self) -> str:
        """One-line description for the debug trail."""
        if self.location is None:
            return f"{self.rule.display_name}: no match"
        parts = [f"{self.rule.display_name}: matched in {self.location.value}"]
        if self.quality is not None and self.audio is not None:
            parts.append(f"quality={self.quality.detail}")
            parts.append(f"audio={self.audio.detail}")
        parts.append("-> tag" if self.desired else f"-> skip ({self.reason.value})")
        return " ".join(parts)


class ReleaseGroupClassifier:
    """Evaluates every active rule against a movie."""

    def __init__(
        self,
        rules: Iterable[CategoryRule],
        quality: QualityFilterConfig,
        audio: AudioFilterConfig,
    ) -> None:
        self._rules = tuple(rules)
        self._quality = QualityFilter(quality)
        self._audio = AudioFilter(audio)

    @property
    def rules(self) -> tuple[CategoryRule, ...]:
        return self._rules

    def classify(self, item: Item) -> list[RuleDecision]:
        """Return one decision per active rule, in rule order."""
        decisions: list[RuleDecision] = []
        verdicts: tuple[FilterVerdict, FilterVerdict] | None = None

        for rule in self._rules:
            location = match_fields(item, rule.search)
            if location is None:
                decisions.append(
                    RuleDecision(
                        rule=rule,
                        desired=False,
                        reason=RemovalReason.WRONG_RELEASE_GROUP,
                    )
                )
                continue

            if rule.mode is RuleMode.SIMPLE:
                decisions.append(RuleDecision(rule=rule, desired=True, location=location))
                continue

            if verdicts is None:
                text = filter_text(item)
                verdicts = (self._quality.check(text), self._audio.check(text))
            quality, audio = verdicts
            decisions.append(
                RuleDecision(
                    rule=rule,
                    desired=quality.passed and audio.passed,
                    location=location,
                    quality=quality,
                    audio=audio,
                    reason=_filter_reason(quality, audio),
                )
            )
        return decisions


def _filter_reason(quality: FilterVerdict, audio: FilterVerdict) -> RemovalReason | None:
    if not quality.passed and not audio.passed:
        return RemovalReason.FAILED_QUALITY_AND_AUDIO
    if not quality.passed:
        return RemovalReason.FAILED_QUALITY
    if not audio.passed:
        return RemovalReason.FAILED_AUDIO
    return None

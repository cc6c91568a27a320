"""Tests for release-group classification."""

from __future__ import annotations

import pytest

from tagarr.classify.matchers import MatchLocation
from tagarr.classify.release_group import ReleaseGroupClassifier, RemovalReason
from tagarr.config.models import AudioFilterConfig, QualityFilterConfig
from tagarr.registry.testing import make_item
from tagarr.rules.models import CategoryRule, RuleMode

SIMPLE = CategoryRule(search="FraMeSToR", category="framestor")
FILTERED = CategoryRule(search="FLUX", category="flux", mode=RuleMode.FILTERED)


@pytest.fixture
def classifier() -> ReleaseGroupClassifier:
    return ReleaseGroupClassifier(
        [SIMPLE, FILTERED], QualityFilterConfig(), AudioFilterConfig()
    )


class TestReleaseGroupClassifier:
    """Tests for ReleaseGroupClassifier."""

    def test_one_decision_per_rule_in_order(self, classifier) -> None:
        decisions = classifier.classify(make_item())

        assert [d.category for d in decisions] == ["framestor", "flux"]
        assert all(d.reason is RemovalReason.WRONG_RELEASE_GROUP for d in decisions)
        assert not any(d.desired for d in decisions)

    def test_simple_match_qualifies(self, classifier) -> None:
        item = make_item(
            release_group="FraMeSToR",
            relative_path="Movie.2021.2160p.BluRay.REMUX.DTS-HD.MA-FraMeSToR.mkv",
        )

        decision = classifier.classify(item)[0]

        assert decision.desired is True
        assert decision.location is MatchLocation.RELEASE_GROUP
        assert decision.quality is None
        assert decision.reason is None

    def test_filtered_match_passing_filters(self, classifier) -> None:
        item = make_item(
            scene_name="Movie.2021.2160p.MA.WEB-DL.TrueHD.Atmos.7.1.DV.HEVC-FLUX",
        )

        decision = classifier.classify(item)[1]

        assert decision.desired is True
        assert decision.location is MatchLocation.SCENE_NAME
        assert decision.quality.detail == "MA WEB-DL"
        assert decision.audio.detail == "TrueHD Atmos"
        assert decision.trail() == (
            "flux: matched in sceneName quality=MA WEB-DL "
            "audio=TrueHD Atmos -> tag"
        )

    @pytest.mark.parametrize(
        ("path", "reason"),
        [
            (
                "Movie.2021.2160p.AMZN.WEB-DL.TrueHD.Atmos-FLUX.mkv",
                RemovalReason.FAILED_QUALITY,
            ),
            (
                "Movie.2021.2160p.MA.WEB-DL.DDP5.1-FLUX.mkv",
                RemovalReason.FAILED_AUDIO,
            ),
            (
                "Movie.2021.2160p.WEB-DL.AAC-FLUX.mkv",
                RemovalReason.FAILED_QUALITY_AND_AUDIO,
            ),
        ],
    )
    def test_filtered_match_failing_filters(self, classifier, path, reason) -> None:
        decision = classifier.classify(make_item(relative_path=path))[1]

        assert decision.matched is True
        assert decision.desired is False
        assert decision.reason is reason
        assert decision.trail().endswith(f"-> skip ({reason.value})")

    def test_embedded_token_is_not_a_match(self, classifier) -> None:
        item = make_item(relative_path="Movie.2021.2160p.MA.WEB-DL.TrueHD-FLUXX.mkv")

        decision = classifier.classify(item)[1]

        assert decision.matched is False
        assert decision.trail() == "flux: no match"

    def test_disabled_filters_accept_any_match(self) -> None:
        classifier = ReleaseGroupClassifier(
            [FILTERED],
            QualityFilterConfig(enabled=False),
            AudioFilterConfig(enabled=False),
        )

        decision = classifier.classify(make_item(release_group="FLUX"))[0]

        assert decision.desired is True
        assert decision.quality.detail == "Quality filter disabled"

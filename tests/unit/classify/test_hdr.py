"""Tests for HDR / Dolby Vision classification."""

from __future__ import annotations

import pytest

from tagarr.analyzer.interface import AnalysisFailure
from tagarr.classify.hdr import (
    HDR_LABELS,
    HdrClassifier,
    TagGroup,
    base_format,
    group_of,
    group_enabled,
    has_dv_indicator,
    parse_cm,
    parse_profile,
)
from tagarr.config.models import ConfigurationError, HdrConfig
from tagarr.registry.testing import make_item

P7_FEL_CM4 = """\
Summary:
  Frames: 100
  Profile: 7 (FEL)
  DM version: 2 (CM v4.0)
"""

P7_MEL_CM29 = """\
Summary:
  Frames: 100
  Profile: 7 (MEL)
  DM version: 1 (CM v2.9)
"""

P8_CM4 = """\
Summary:
  Frames: 100
  Profile: 8.1 (BL+RPU)
  DM version: 2 (CM v4.0)
"""


class FakeAnalyzer:
    """Returns a fixed summary or raises, and records the paths it saw."""

    def __init__(self, summary: str = "", error: str | None = None) -> None:
        self.summary = summary
        self.error = error
        self.paths: list[str] = []

    def extract_profile_summary(self, file_path: str) -> str:
        self.paths.append(file_path)
        if self.error is not None:
            raise AnalysisFailure(self.error)
        return self.summary


def _present(decision) -> set[str]:
    return {label for label, wanted in decision.desired.items() if wanted}


class TestBaseFormat:
    """Tests for mapping videoDynamicRangeType to a base format."""

    @pytest.mark.parametrize(
        ("drt", "expected"),
        [
            ("", "sdr"),
            ("SDR", "sdr"),
            ("HDR10", "hdr10"),
            ("HDR10Plus", "hdr10plus"),
            ("HDR10+", "hdr10plus"),
            ("DV HDR10", "hdr10"),
            ("DV HDR10Plus", "hdr10plus"),
            ("HLG", "sdr"),
            ("PQ", "pq"),
            ("DV", "sdr"),
        ],
    )
    def test_mapping(self, drt: str, expected: str) -> None:
        assert base_format(drt) == expected

    def test_dv_indicator(self) -> None:
        assert has_dv_indicator("DV HDR10") is True
        assert has_dv_indicator("Dolby Vision") is True
        assert has_dv_indicator("HDR10") is False
        assert has_dv_indicator("") is False


class TestSummaryParsing:
    """Tests for RPU summary parsing."""

    def test_profile_7_fel(self) -> None:
        assert parse_profile(P7_FEL_CM4) == "fel"

    def test_profile_7_mel(self) -> None:
        assert parse_profile(P7_MEL_CM29) == "mel"

    def test_profile_8(self) -> None:
        assert parse_profile(P8_CM4) == "dvprofile8"

    def test_other_profile(self) -> None:
        assert parse_profile("Profile: 5") is None

    def test_cm_versions(self) -> None:
        assert parse_cm(P7_FEL_CM4) == "cm4"
        assert parse_cm(P7_MEL_CM29) == "cm2"
        assert parse_cm("Profile: 8") == "cm2"


class TestGroups:
    """Tests for tag groups."""

    def test_every_label_has_a_group(self) -> None:
        for label in HDR_LABELS:
            assert isinstance(group_of(label), TagGroup)

    def test_unknown_label_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown HDR tag"):
            group_of("hlg")

    def test_group_enabled_follows_config(self) -> None:
        config = HdrConfig(profile8=False, no_dv=True)
        assert group_enabled(group_of("dvprofile8"), config) is False
        assert group_enabled(group_of("no-dv"), config) is True
        assert group_enabled(group_of("hdr10"), config) is True


class TestHdrClassifier:
    """Tests for HdrClassifier."""

    def test_hdr10_without_dv(self) -> None:
        analyzer = FakeAnalyzer()
        classifier = HdrClassifier(HdrConfig(no_dv=True), analyzer)

        decision = classifier.classify(make_item(dynamic_range_type="HDR10"))

        assert _present(decision) == {"hdr10", "no-dv"}
        assert set(decision.desired) == set(HDR_LABELS)
        assert analyzer.paths == []

    def test_sdr_without_dv(self) -> None:
        analyzer = FakeAnalyzer()
        classifier = HdrClassifier(HdrConfig(no_dv=True), analyzer)

        decision = classifier.classify(make_item(dynamic_range_type=""))

        assert _present(decision) == {"sdr", "no-dv"}
        assert analyzer.paths == []

    def test_profile_7_fel_supersedes_base(self) -> None:
        analyzer = FakeAnalyzer(P7_FEL_CM4)
        classifier = HdrClassifier(HdrConfig(), analyzer)

        decision = classifier.classify(
            make_item(dynamic_range_type="DV HDR10", file_path="/movies/a.mkv")
        )

        assert _present(decision) == {"dv", "fel", "cm4"}
        assert decision.dv_confirmed is True
        assert analyzer.paths == ["/movies/a.mkv"]

    def test_dv_keeps_base_when_not_superseding(self) -> None:
        classifier = HdrClassifier(
            HdrConfig(dv_supersedes_hdr=False), FakeAnalyzer(P7_MEL_CM29)
        )

        decision = classifier.classify(make_item(dynamic_range_type="DV HDR10"))

        assert _present(decision) == {"hdr10", "dv", "mel", "cm2"}

    def test_profile8_group(self) -> None:
        disabled = HdrClassifier(HdrConfig(), FakeAnalyzer(P8_CM4))
        enabled = HdrClassifier(HdrConfig(profile8=True), FakeAnalyzer(P8_CM4))
        item = make_item(dynamic_range_type="DV HDR10")

        assert _present(disabled.classify(item)) == {"dv", "cm4"}
        assert _present(enabled.classify(item)) == {"dv", "dvprofile8", "cm4"}

    def test_analysis_failure_is_not_dv(self) -> None:
        classifier = HdrClassifier(
            HdrConfig(no_dv=True), FakeAnalyzer(error="dovi_tool timed out")
        )

        decision = classifier.classify(make_item(dynamic_range_type="DV HDR10"))

        assert _present(decision) == {"hdr10", "no-dv"}
        assert decision.dv_indicated is True
        assert decision.dv_confirmed is False
        assert decision.analysis_error == "dovi_tool timed out"
        assert "DV unconfirmed" in decision.trail()

    def test_disabled_groups_are_absent(self) -> None:
        config = HdrConfig(profile=False, cm=False)
        classifier = HdrClassifier(config, FakeAnalyzer(P7_FEL_CM4))

        decision = classifier.classify(make_item(dynamic_range_type="DV HDR10"))

        assert _present(decision) == {"dv"}
        for label in ("mel", "fel", "cm2", "cm4"):
            assert decision.desired[label] is False

    def test_no_file_only_forces_disabled_groups(self) -> None:
        classifier = HdrClassifier(HdrConfig(), FakeAnalyzer())

        decision = classifier.classify(make_item(has_file=False))

        assert set(decision.desired) == {"no-dv", "dvprofile8"}
        assert not any(decision.desired.values())
        assert decision.trail() == "HDR: no file"

    def test_trail(self) -> None:
        classifier = HdrClassifier(HdrConfig(), FakeAnalyzer(P7_FEL_CM4))
        decision = classifier.classify(make_item(dynamic_range_type="DV HDR10"))

        assert decision.trail() == "HDR: hdr10 DV fel cm4 -> dv, fel, cm4"

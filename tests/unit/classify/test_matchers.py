"""Tests for release-name matching and the quality/audio filters."""

import pytest

from tagarr.classify.matchers import (
    AudioFilter,
    MatchLocation,
    QualityFilter,
    filter_text,
    match_fields,
    matches,
)
from tagarr.config.models import AudioFilterConfig, QualityFilterConfig
from tagarr.registry.testing import make_item


class TestMatches:
    """Tests for whole-word token matching."""

    @pytest.mark.parametrize(
        "haystack",
        [
            "FLUX",
            "Movie.2021.2160p.WEB-DL-FLUX.mkv",
            "movie 2021 [flux]",
            "Movie.FLUX.mkv",
        ],
    )
    def test_bounded_token_matches(self, haystack: str) -> None:
        assert matches(haystack, "flux") is True

    @pytest.mark.parametrize(
        "haystack",
        ["FLUXCAPACITOR", "Movie-SUPERFLUX.mkv", "flux2", ""],
    )
    def test_embedded_token_does_not_match(self, haystack: str) -> None:
        assert matches(haystack, "flux") is False

    def test_none_haystack(self) -> None:
        assert matches(None, "flux") is False

    def test_metacharacters_are_literal(self) -> None:
        assert matches("Movie-C.R.E.W.mkv", "c.r.e.w") is True
        assert matches("Movie-CXRXEXW.mkv", "c.r.e.w") is False


class TestMatchFields:
    """Tests for field priority."""

    def test_release_group_wins(self) -> None:
        item = make_item(
            release_group="FLUX",
            scene_name="Movie.2021-FLUX",
            relative_path="Movie.2021-FLUX.mkv",
        )
        assert match_fields(item, "flux") is MatchLocation.RELEASE_GROUP

    def test_scene_name_before_path(self) -> None:
        item = make_item(scene_name="Movie.2021-FLUX", relative_path="Movie-FLUX.mkv")
        assert match_fields(item, "flux") is MatchLocation.SCENE_NAME

    def test_relative_path_fallback(self) -> None:
        item = make_item(relative_path="Movie (2021)/Movie.2021-FLUX.mkv")
        assert match_fields(item, "flux") is MatchLocation.RELATIVE_PATH

    def test_no_match(self) -> None:
        item = make_item(release_group="NTb", relative_path="Movie-NTb.mkv")
        assert match_fields(item, "flux") is None

    def test_filter_text_is_lowercase(self) -> None:
        item = make_item(release_group="FLUX", scene_name="A.B", relative_path="C.mkv")
        assert filter_text(item) == "c.mkv a.b flux"


class TestQualityFilter:
    """Tests for the WEB-DL source filter."""

    def test_ma_webdl_passes(self) -> None:
        verdict = QualityFilter(QualityFilterConfig()).check(
            "movie.2021.2160p.ma.web-dl.truehd.atmos-flux.mkv"
        )
        assert verdict.passed is True
        assert verdict.detail == "MA WEB-DL"

    def test_play_webdl_requires_flag(self) -> None:
        text = "movie.2021.2160p.play.web-dl.dts-hd.ma-group.mkv"
        rejected = QualityFilter(QualityFilterConfig()).check(text)
        accepted = QualityFilter(QualityFilterConfig(play_webdl=True)).check(text)

        assert rejected.passed is False
        assert accepted.passed is True
        assert accepted.detail == "Play WEB-DL"

    @pytest.mark.parametrize(
        ("text", "detail"),
        [
            ("movie.2021.amzn.web-dl.ddp5.1-group.mkv", "AMZN (not MA/Play)"),
            ("movie.2021.nf.web-dl.ddp5.1-group.mkv", "Netflix (not MA/Play)"),
            ("movie.2021.web-dl.ddp5.1-group.mkv", "Plain WEB-DL (no MA/Play prefix)"),
            ("movie.2021.bluray.remux-group.mkv", "No WEB-DL source"),
        ],
    )
    def test_failure_details(self, text: str, detail: str) -> None:
        verdict = QualityFilter(QualityFilterConfig()).check(text)
        assert verdict.passed is False
        assert verdict.detail == detail

    def test_disabled_always_passes(self) -> None:
        verdict = QualityFilter(QualityFilterConfig(enabled=False)).check("bluray")
        assert verdict.passed is True
        assert verdict.detail == "Quality filter disabled"


class TestAudioFilter:
    """Tests for the lossless audio filter."""

    @pytest.mark.parametrize(
        ("text", "detail"),
        [
            ("movie.ma.web-dl.truehd.atmos.7.1-group", "TrueHD Atmos"),
            ("movie.ma.web-dl.truehd.7.1-group", "TrueHD"),
            ("movie.ma.web-dl.dts-x.7.1-group", "DTS-X"),
            ("movie.ma.web-dl.dts-hd.ma.5.1-group", "DTS-HD.MA"),
        ],
    )
    def test_lossless_passes(self, text: str, detail: str) -> None:
        verdict = AudioFilter(AudioFilterConfig()).check(text)
        assert verdict.passed is True
        assert verdict.detail == detail

    def test_reencode_vetoes_lossless(self) -> None:
        verdict = AudioFilter(AudioFilterConfig()).check(
            "movie.ma.web-dl.truehd.atmos.upmix-group"
        )
        assert verdict.passed is False
        assert verdict.detail == "Re-encoded audio"

    def test_atmos_disabled_rejects_atmos(self) -> None:
        verdict = AudioFilter(AudioFilterConfig(truehd_atmos=False)).check(
            "movie.truehd.atmos-group"
        )
        assert verdict.passed is False

    @pytest.mark.parametrize(
        ("text", "detail"),
        [
            ("movie.ma.web-dl.eac3.5.1-group", "EAC3/DD+ (lossy)"),
            ("movie.ma.web-dl.dd+5.1-group", "EAC3/DD+ (lossy)"),
            ("movie.ma.web-dl.aac.2.0-group", "AAC (lossy)"),
            ("movie.ma.web-dl.ac3.5.1-group", "AC3 (lossy)"),
            ("movie.ma.web-dl-group", "No lossless audio"),
        ],
    )
    def test_lossy_details(self, text: str, detail: str) -> None:
        verdict = AudioFilter(AudioFilterConfig()).check(text)
        assert verdict.passed is False
        assert verdict.detail == detail

    def test_disabled_always_passes(self) -> None:
        verdict = AudioFilter(AudioFilterConfig(enabled=False)).check("aac")
        assert verdict.passed is True
        assert verdict.detail == "Audio filter disabled"

"""Tests for the ffmpeg + dovi_tool analyzer."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from tagarr.analyzer.dovi import DoviToolAnalyzer, map_path
from tagarr.analyzer.interface import AnalysisFailure
from tagarr.config.models import AnalyzerConfig

SUMMARY = "Summary:\n  Profile: 7 (FEL)\n  DM version: 2 (CM v4.0)\n"

RUN_COMMAND = "tagarr.analyzer.dovi.run_command"
FIND_TOOL = "tagarr.analyzer.dovi.find_tool"


def _find_tool(name: str, configured_path: Path | None = None) -> Path:
    return Path(f"/usr/bin/{name}")


@pytest.fixture
def movie(tmp_path: Path) -> Path:
    path = tmp_path / "movie.mkv"
    path.write_bytes(b"\x00")
    return path


class TestMapPath:
    """Tests for container to host path mapping."""

    def test_longest_prefix_wins(self) -> None:
        mappings = {"/data": "/mnt/data", "/data/movies": "/mnt/movies"}
        assert map_path("/data/movies/a.mkv", mappings) == "/mnt/movies/a.mkv"
        assert map_path("/data/tv/b.mkv", mappings) == "/mnt/data/tv/b.mkv"

    def test_prefix_must_end_at_separator(self) -> None:
        assert map_path("/movies2/a.mkv", {"/movies": "/mnt"}) == "/movies2/a.mkv"

    def test_trailing_slashes_ignored(self) -> None:
        assert map_path("/movies/a.mkv", {"/movies/": "/mnt/"}) == "/mnt/a.mkv"

    def test_no_mapping(self) -> None:
        assert map_path("/movies/a.mkv", {}) == "/movies/a.mkv"


class TestDoviToolAnalyzer:
    """Tests for DoviToolAnalyzer.extract_profile_summary."""

    @patch(FIND_TOOL, side_effect=_find_tool)
    @patch(RUN_COMMAND)
    def test_runs_three_steps(self, mock_run, mock_find, movie: Path) -> None:
        mock_run.side_effect = [("", "", 0), ("", "", 0), (SUMMARY, "", 0)]
        analyzer = DoviToolAnalyzer(AnalyzerConfig(max_frames=50))

        assert analyzer.extract_profile_summary(str(movie)) == SUMMARY

        ffmpeg_args = mock_run.call_args_list[0].args[0]
        assert ffmpeg_args[0] == Path("/usr/bin/ffmpeg")
        assert str(movie) in ffmpeg_args
        assert ffmpeg_args[ffmpeg_args.index("-frames:v") + 1] == "50"
        extract_args = mock_run.call_args_list[1].args[0]
        assert extract_args[:2] == [Path("/usr/bin/dovi_tool"), "extract-rpu"]
        info_args = mock_run.call_args_list[2].args[0]
        assert info_args[-1] == "--summary"
        assert mock_run.call_args_list[2].kwargs["timeout"] == 10

    @patch(FIND_TOOL, side_effect=_find_tool)
    @patch(RUN_COMMAND)
    def test_temp_directory_removed(self, mock_run, mock_find, movie: Path) -> None:
        mock_run.side_effect = [("", "", 0), ("", "", 0), (SUMMARY, "", 0)]

        DoviToolAnalyzer(AnalyzerConfig()).extract_profile_summary(str(movie))

        sample = Path(mock_run.call_args_list[0].args[0][-1])
        assert sample.name == "sample.hevc"
        assert not sample.parent.exists()

    @patch(FIND_TOOL, side_effect=_find_tool)
    @patch(RUN_COMMAND)
    def test_path_mapping_applied(self, mock_run, mock_find, movie: Path) -> None:
        mock_run.side_effect = [("", "", 0), ("", "", 0), (SUMMARY, "", 0)]
        config = AnalyzerConfig(path_mappings={"/movies": str(movie.parent)})

        DoviToolAnalyzer(config).extract_profile_summary("/movies/movie.mkv")

        assert str(movie) in mock_run.call_args_list[0].args[0]

    def test_missing_file(self, tmp_path: Path) -> None:
        analyzer = DoviToolAnalyzer(AnalyzerConfig())
        with pytest.raises(AnalysisFailure, match="File not found"):
            analyzer.extract_profile_summary(str(tmp_path / "missing.mkv"))

    @patch(FIND_TOOL, return_value=None)
    def test_missing_tool(self, mock_find, movie: Path) -> None:
        with pytest.raises(AnalysisFailure, match="ffmpeg not found"):
            DoviToolAnalyzer(AnalyzerConfig()).extract_profile_summary(str(movie))

    @patch(FIND_TOOL, side_effect=_find_tool)
    @patch(RUN_COMMAND)
    def test_timeout(self, mock_run, mock_find, movie: Path) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired("ffmpeg", 30)

        with pytest.raises(AnalysisFailure, match="ffmpeg timed out"):
            DoviToolAnalyzer(AnalyzerConfig()).extract_profile_summary(str(movie))

    @patch(FIND_TOOL, side_effect=_find_tool)
    @patch(RUN_COMMAND)
    def test_nonzero_exit(self, mock_run, mock_find, movie: Path) -> None:
        mock_run.side_effect = [
            ("", "", 0),
            ("", "Error: no RPU found\n", 1),
        ]

        with pytest.raises(
            AnalysisFailure, match="dovi_tool extract-rpu failed: Error: no RPU found"
        ):
            DoviToolAnalyzer(AnalyzerConfig()).extract_profile_summary(str(movie))

    @patch(FIND_TOOL, side_effect=_find_tool)
    @patch(RUN_COMMAND)
    def test_empty_summary(self, mock_run, mock_find, movie: Path) -> None:
        mock_run.side_effect = [("", "", 0), ("", "", 0), ("  \n", "", 0)]

        with pytest.raises(AnalysisFailure, match="empty summary"):
            DoviToolAnalyzer(AnalyzerConfig()).extract_profile_summary(str(movie))

"""Dolby Vision analysis with ffmpeg and dovi_tool.

The first frames of the video stream are demuxed to a raw HEVC elementary
stream, the RPU metadata is extracted from it and summarised:

    ffmpeg -i FILE -c:v copy -bsf:v hevc_mp4toannexb -f hevc -frames:v N sample.hevc
    dovi_tool extract-rpu -i sample.hevc -o RPU.bin
    dovi_tool info -i RPU.bin --summary

All intermediate files live in a temporary directory that is removed when
analysis finishes, whatever the outcome.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - needed to catch TimeoutExpired
import tempfile
import time
from pathlib import Path

from tagarr.analyzer.interface import AnalysisFailure
from tagarr.analyzer.tools import find_tool
from tagarr.config.models import AnalyzerConfig
from tagarr.core.subprocess_utils import run_command

logger = logging.getLogger(__name__)


def map_path(path: str, mappings: dict[str, str]) -> str:
    """Translate a Radarr-side path to a local path.

    The longest matching prefix wins, so "/data/movies" is preferred over
    "/data" when both are mapped.

    Args:
        path: Path as reported by Radarr.
        mappings: Remote prefix -> local prefix.

    Returns:
        Translated path, or the input unchanged if no prefix matches.
    """
    for remote in sorted(mappings, key=len, reverse=True):
        prefix = remote.rstrip("/")
        if path == prefix or path.startswith(prefix + "/"):
            return mappings[remote].rstrip("/") + path[len(prefix) :]
    return path


class DoviToolAnalyzer:
    """MediaAnalyzer backed by ffmpeg and dovi_tool.

    Tools are resolved on first use so a library without Dolby Vision
    content never needs them installed.
    """

    def __init__(self, config: AnalyzerConfig) -> None:
        self._config = config
        self._ffmpeg: Path | None = None
        self._dovi_tool: Path | None = None

    def _tools(self) -> tuple[Path, Path]:
        if self._ffmpeg is None:
            self._ffmpeg = find_tool("ffmpeg", self._config.ffmpeg_path)
        if self._dovi_tool is None:
            self._dovi_tool = find_tool("dovi_tool", self._config.dovi_tool_path)
        if self._ffmpeg is None:
            raise AnalysisFailure("ffmpeg not found")
        if self._dovi_tool is None:
            raise AnalysisFailure("dovi_tool not found")
        return self._ffmpeg, self._dovi_tool

    def extract_profile_summary(self, file_path: str) -> str:
        """Return the dovi_tool RPU summary for a file.

        Raises:
            AnalysisFailure: If the file is missing, a tool is missing, a
                step times out or fails, or the summary is empty.
        """
        local_path = map_path(file_path, self._config.path_mappings)
        if not local_path:
            raise AnalysisFailure("No file path")
        if not Path(local_path).is_file():
            raise AnalysisFailure(f"File not found: {local_path}")

        ffmpeg, dovi_tool = self._tools()

        with tempfile.TemporaryDirectory(prefix="tagarr-dovi-") as tmp:
            sample = Path(tmp) / "sample.hevc"
            rpu = Path(tmp) / "RPU.bin"

            # ffmpeg and extract-rpu share the extraction deadline
            deadline = time.monotonic() + self._config.extraction_timeout
            self._run(
                "ffmpeg",
                [
                    ffmpeg,
                    "-loglevel",
                    "error",
                    "-y",
                    "-i",
                    local_path,
                    "-c:v",
                    "copy",
                    "-bsf:v",
                    "hevc_mp4toannexb",
                    "-f",
                    "hevc",
                    "-frames:v",
                    str(self._config.max_frames),
                    sample,
                ],
                deadline - time.monotonic(),
            )
            self._run(
                "dovi_tool extract-rpu",
                [dovi_tool, "extract-rpu", "-i", sample, "-o", rpu],
                deadline - time.monotonic(),
            )
            summary = self._run(
                "dovi_tool info",
                [dovi_tool, "info", "-i", rpu, "--summary"],
                self._config.analysis_timeout,
            )

        if not summary.strip():
            raise AnalysisFailure("dovi_tool returned an empty summary")

        logger.debug("RPU summary for %s: %s", local_path, summary.strip())
        return summary

    @staticmethod
    def _run(step: str, args: list[str | Path], timeout: float) -> str:
        if timeout <= 0:
            raise AnalysisFailure(f"{step} timed out")
        try:
            stdout, stderr, rc = run_command(args, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise AnalysisFailure(f"{step} timed out") from e
        except OSError as e:
            raise AnalysisFailure(f"{step} could not be started: {e}") from e

        if rc != 0:
            detail = stderr.strip().splitlines()[-1:] or [f"exit code {rc}"]
            raise AnalysisFailure(f"{step} failed: {detail[0]}")
        return stdout

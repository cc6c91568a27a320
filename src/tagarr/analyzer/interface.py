"""Protocol for Dolby Vision metadata analyzers."""

from __future__ import annotations

from typing import Protocol


class AnalysisFailure(Exception):
    """Raised when a file's Dolby Vision metadata cannot be read.

    Covers missing tools, timeouts, tool errors and empty output. Callers
    treat the file as having no confirmed Dolby Vision.
    """


class MediaAnalyzer(Protocol):
    """Reads the Dolby Vision RPU summary of a media file."""

    def extract_profile_summary(self, file_path: str) -> str:
        """Return the textual RPU summary for a file.

        Args:
            file_path: Path as reported by Radarr.

        Returns:
            Non-empty summary text (contains "Profile: N" and "CM vX.Y").

        Raises:
            AnalysisFailure: If the summary cannot be produced.
        """
        ...

"""Discovery report file.

Each run that discovers something appends a section listing every movie
from an unknown group that passed the filters. The file is rotated to
``<name>.old`` once it grows past its size limit.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from pathlib import Path

from tagarr.classify.discovery import DiscoverySighting

logger = logging.getLogger(__name__)

RULE = "=" * 40


class DiscoveryReportWriter:
    """Appends discovery sections to a text report."""

    def __init__(self, path: Path, max_bytes: int = 2_097_152) -> None:
        self.path = path
        self.max_bytes = max_bytes

    def _rotate(self) -> None:
        if self.path.exists() and self.path.stat().st_size > self.max_bytes:
            self.path.replace(self.path.with_name(self.path.name + ".old"))

    def write(
        self,
        sightings: list[DiscoverySighting],
        *,
        known_groups: int,
        dry_run: bool,
        now: datetime,
    ) -> bool:
        """Append one run's section.

        Returns:
            False if there was nothing to write.
        """
        if not sightings:
            return False

        counts = Counter(s.display_name for s in sightings)
        mode = "DRY-RUN" if dry_run else "LIVE"
        lines = [
            "",
            RULE,
            f"Discovery Run: {now.strftime('%Y-%m-%d %H:%M:%S')}  |  "
            f"Mode: {mode}  |  Known groups: {known_groups}",
            RULE,
            "",
            f"SUMMARY: {len(counts)} groups, {len(sightings)} movies",
            "",
        ]
        lines.extend(f"  {name:<20} {counts[name]} movies" for name in sorted(counts))
        lines.extend(
            [
                "",
                "RlsGrp  |  Movie  |  Quality  |  Audio  |  Filename",
                "--------|---------|-----------|---------|----------",
            ]
        )
        lines.extend(
            sorted(
                f"{s.display_name}  |  {s.title}  |  {s.quality_detail}  |  "
                f"{s.audio_detail}  |  {s.relative_path}"
                for s in sightings
            )
        )
        lines.append("")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._rotate()
        with open(self.path, "a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

        logger.info("Discovery report: %s", self.path)
        return True

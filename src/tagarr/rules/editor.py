"""Round-trip editor for appending discovered groups to the rule file.

Uses ruamel.yaml so comments, ordering and quoting written by the user
survive the edit. The edited document is validated before it is written.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterable
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from tagarr.rules.loader import load_rules_from_dict
from tagarr.rules.models import (
    SCHEMA_VERSION,
    RuleMode,
    RuleValidationError,
    is_valid_category,
)

if TYPE_CHECKING:
    from tagarr.classify.discovery import DiscoveryCandidate

logger = logging.getLogger(__name__)


class RuleFileEditor:
    """Appends disabled entries for discovered release groups.

    Example:
        >>> editor = RuleFileEditor(Path("~/.tagarr/rules.yaml"))
        >>> editor.append_discovered(engine.candidates, date.today())
    """

    def __init__(self, rules_path: Path) -> None:
        self.rules_path = rules_path
        self.yaml = YAML(typ="rt")
        self.yaml.preserve_quotes = True
        self.yaml.default_flow_style = False

    def _load(self) -> CommentedMap:
        if not self.rules_path.exists():
            data = CommentedMap()
            data["schema_version"] = SCHEMA_VERSION
            return data

        try:
            with open(self.rules_path, encoding="utf-8") as f:
                data = self.yaml.load(f)
        except Exception as e:
            raise RuleValidationError(f"Failed to load rule file: {e}") from e

        if data is None:
            data = CommentedMap()
            data["schema_version"] = SCHEMA_VERSION
        if not isinstance(data, dict):
            raise RuleValidationError("Rule file must be a YAML mapping")
        return data

    def append_discovered(
        self, candidates: Iterable[DiscoveryCandidate], today: date
    ) -> list[str]:
        """Append one disabled rule per candidate.

        Candidates whose token or category already appears in the file are
        skipped, so appending the same discovery twice is harmless.

        Args:
            candidates: Discovered groups, in discovery order.
            today: Date recorded on each new entry.

        Returns:
            Categories that were written.

        Raises:
            RuleValidationError: If the resulting file would be invalid.
        """
        data = self._load()
        groups = data.get("release_groups")
        if groups is None:
            groups = CommentedSeq()
            data["release_groups"] = groups

        entries = [entry for entry in groups if isinstance(entry, dict)]
        existing_tokens = {str(entry.get("search", "")).lower() for entry in entries}
        existing_categories = {str(entry.get("category", "")) for entry in entries}

        added: list[str] = []
        for candidate in candidates:
            if candidate.token in existing_tokens or candidate.token in existing_categories:
                continue
            if not is_valid_category(candidate.token):
                logger.warning(
                    "Skipping discovered group %r: not usable as a tag name",
                    candidate.display_name,
                )
                continue
            groups.append(self._entry(candidate, today))
            existing_tokens.add(candidate.token)
            added.append(candidate.token)

        if not added:
            return added

        # Raises RuleValidationError if the edit produced an invalid file
        load_rules_from_dict(_plain(data))

        self.rules_path.parent.mkdir(parents=True, exist_ok=True)
        self._write(data)

        logger.info(
            "Appended %d discovered group(s) to rule file",
            len(added),
            extra={"rules_path": str(self.rules_path), "categories": added},
        )
        return added

    def _write(self, data: CommentedMap) -> None:
        """Dump to a temp file beside the rule file, then move it into place."""
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            suffix=".yaml",
            delete=False,
            dir=self.rules_path.parent,
        ) as tmp:
            temp_path = Path(tmp.name)
            try:
                self.yaml.dump(data, tmp)
            except Exception:
                tmp.close()
                temp_path.unlink(missing_ok=True)
                raise

        try:
            temp_path.replace(self.rules_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    @staticmethod
    def _entry(candidate: DiscoveryCandidate, today: date) -> CommentedMap:
        entry = CommentedMap()
        entry["search"] = candidate.display_name
        entry["category"] = candidate.token
        entry["display_name"] = candidate.display_name
        entry["mode"] = RuleMode.FILTERED.value
        entry["enabled"] = False
        entry["discovered"] = today.isoformat()
        entry["note"] = f"{candidate.quality_detail} + {candidate.audio_detail}"
        return entry


def _plain(data: Any) -> Any:
    """Convert ruamel containers to plain dicts and lists for validation."""
    if isinstance(data, dict):
        return {str(k): _plain(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_plain(v) for v in data]
    return data

"""Data models for Radarr movies and tags."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from tagarr.core.formatting import format_title


class LabelOp(enum.Enum):
    """Bulk tag edit operation."""

    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class Label:
    """A tag defined in a Radarr instance."""

    id: int
    name: str


@dataclass(frozen=True)
class Item:
    """A movie as reported by one Radarr instance.

    Text fields are kept in their original case; classifiers lowercase
    them before matching.
    """

    id: int
    title: str
    year: int = 0
    external_id: int | None = None
    """TMDb id, used to find the same movie in the other instance."""

    has_file: bool = False
    file_path: str = ""
    relative_path: str = ""
    scene_name: str = ""
    release_group: str = ""
    dynamic_range_type: str = ""
    labels: frozenset[int] = field(default_factory=frozenset)
    poster_url: str | None = None

    @property
    def display_title(self) -> str:
        """Title with year, e.g. "Dune (2021)"."""
        return format_title(self.title, self.year)

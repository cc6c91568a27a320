"""Pydantic models for the release-group rule file.

Example rule file::

    schema_version: 1
    release_groups:
      - search: FraMeSToR
        category: framestor
        display_name: FraMeSToR
        mode: simple
      - search: FLUX
        category: flux
        mode: filtered
      - search: playWEB
        category: playweb
        mode: filtered
        enabled: false
        discovered: 2024-05-01
        note: MA WEB-DL + TrueHD Atmos
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tagarr.config.models import ConfigurationError

SCHEMA_VERSION = 1

_CATEGORY_RE = re.compile(r"^[a-z0-9][a-z0-9._-]*$")


def is_valid_category(name: str) -> bool:
    """Whether name can be used as a category (and Radarr tag) as-is."""
    return bool(_CATEGORY_RE.match(name))


class RuleValidationError(ConfigurationError):
    """Error during rule file validation."""


class RuleMode(str, enum.Enum):
    """How a release-group match qualifies a movie."""

    SIMPLE = "simple"
    """A token match alone qualifies."""

    FILTERED = "filtered"
    """A token match qualifies only if the quality and audio filters pass."""


class CategoryRule(BaseModel):
    """One release group mapped to a Radarr tag."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    search: str = Field(min_length=1)
    category: str
    display_name: str
    mode: RuleMode = RuleMode.SIMPLE
    enabled: bool = True
    discovered: date | None = None
    note: str | None = None

    @model_validator(mode="before")
    @classmethod
    def default_display_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("display_name"):
            data = dict(data)
            data["display_name"] = data.get("category") or data.get("search")
        return data

    @field_validator("search")
    @classmethod
    def validate_search(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("search must not be blank")
        if any(c.isspace() for c in v):
            raise ValueError(f"search must be a single token, got {v!r}")
        return v

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        v = v.strip().lower()
        if not _CATEGORY_RE.match(v):
            raise ValueError(
                f"category must be lowercase letters, digits, '.', '_' or '-', got {v!r}"
            )
        return v


class RuleFileModel(BaseModel):
    """Top-level rule file."""

    model_config = ConfigDict(extra="forbid")

    schema_version: Literal[1] = SCHEMA_VERSION
    release_groups: list[CategoryRule] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique(self) -> RuleFileModel:
        seen: set[str] = set()
        for rule in self.release_groups:
            if rule.category in seen:
                raise ValueError(f"Duplicate category: {rule.category}")
            seen.add(rule.category)
        return self


@dataclass(frozen=True)
class RuleSet:
    """Validated rules, split into active rules and known tokens."""

    rules: tuple[CategoryRule, ...] = ()

    # Categories chosen with --category (None = every enabled rule)
    selected: frozenset[str] | None = None

    @property
    def active(self) -> tuple[CategoryRule, ...]:
        return tuple(
            rule
            for rule in self.rules
            if rule.enabled
            and (self.selected is None or rule.category in self.selected)
        )

    @property
    def known_tokens(self) -> frozenset[str]:
        """Lowercased search tokens of every rule, enabled or not.

        Discovery never proposes a group whose token is already known.
        """
        return frozenset(rule.search.lower() for rule in self.rules)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(rule.category for rule in self.active)

    def get(self, category: str) -> CategoryRule | None:
        for rule in self.rules:
            if rule.category == category:
                return rule
        return None

    def select(self, categories: list[str] | tuple[str, ...]) -> RuleSet:
        """Restrict the active rules to the named categories.

        Every rule stays known to discovery, selected or not.

        Raises:
            ConfigurationError: If a name is not an active category.
        """
        wanted = {c.lower() for c in categories}
        unknown = sorted(wanted - set(self.categories))
        if unknown:
            raise ConfigurationError(
                f"Unknown release-group categories: {', '.join(unknown)}"
            )
        return RuleSet(rules=self.rules, selected=frozenset(wanted))

"""Data models for tag reconciliation plans and results."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field

from tagarr.registry.models import Item, LabelOp


class RegistryRole(enum.Enum):
    """Which Radarr instance a plan entry targets."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class PlanAction(enum.Enum):
    """What happens to one tag on one movie."""

    ADD = "add"
    REMOVE = "remove"
    KEEP_PRESENT = "keep-present"
    KEEP_ABSENT = "keep-absent"

    @classmethod
    def decide(cls, desired: bool, current: bool) -> PlanAction:
        if desired:
            return cls.KEEP_PRESENT if current else cls.ADD
        return cls.REMOVE if current else cls.KEEP_ABSENT

    @property
    def op(self) -> LabelOp | None:
        """Bulk edit operation, or None when nothing changes."""
        if self is PlanAction.ADD:
            return LabelOp.ADD
        if self is PlanAction.REMOVE:
            return LabelOp.REMOVE
        return None


class Outcome(enum.Enum):
    """Sync conditions reported alongside tag changes."""

    NOT_FOUND_IN_SECONDARY = "not found in secondary"
    ORPHANED = "orphaned"


@dataclass(frozen=True)
class PlanKey:
    """One category in one registry."""

    registry: RegistryRole
    category: str


@dataclass(frozen=True)
class DesiredState:
    """Desired tags for one primary movie.

    ``labels`` maps category to desired presence. Categories the
    classifiers have no opinion on are simply absent and left untouched.
    ``reasons`` explains categories desired absent.
    """

    item: Item
    labels: Mapping[str, bool]
    reasons: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PlanEntry:
    """A planned tag change (or kept tag) on one movie."""

    key: PlanKey
    item_id: int
    title: str
    action: PlanAction
    reason: str | None = None


@dataclass(frozen=True)
class OutcomeRecord:
    """A sync condition for one movie and category."""

    outcome: Outcome
    category: str
    title: str


@dataclass
class ReconciliationPlan:
    """Every tag change for a run, before it is applied."""

    entries: list[PlanEntry] = field(default_factory=list)
    outcomes: list[OutcomeRecord] = field(default_factory=list)

    def changes(self) -> list[PlanEntry]:
        return [e for e in self.entries if e.action.op is not None]

    def batches(self) -> dict[tuple[PlanKey, LabelOp], list[int]]:
        """Group changes into one bulk edit per (registry, category, op).

        Movie ids keep plan order and appear at most once per batch.
        """
        batches: dict[tuple[PlanKey, LabelOp], list[int]] = {}
        for entry in self.entries:
            op = entry.action.op
            if op is None:
                continue
            ids = batches.setdefault((entry.key, op), [])
            if entry.item_id not in ids:
                ids.append(entry.item_id)
        return batches


@dataclass
class ReconcileResult:
    """What a reconciliation did (or would do under dry-run)."""

    plan: ReconciliationPlan = field(default_factory=ReconciliationPlan)
    applied: list[PlanEntry] = field(default_factory=list)
    failed: list[PlanEntry] = field(default_factory=list)
    requests: int = 0
    dry_run: bool = False

    def entries_for(
        self, category: str, role: RegistryRole, action: PlanAction
    ) -> list[PlanEntry]:
        """Plan entries for one category, registry and action.

        Changes whose bulk edit failed are excluded.
        """
        failed = set(self.failed)
        return [
            e
            for e in self.plan.entries
            if e.key.category == category
            and e.key.registry is role
            and e.action is action
            and e not in failed
        ]

    def outcomes_for(self, category: str, outcome: Outcome) -> list[str]:
        return [
            r.title
            for r in self.plan.outcomes
            if r.category == category and r.outcome is outcome
        ]

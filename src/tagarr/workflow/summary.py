"""Run summaries for the end-of-run log, JSON output and notifications."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from tagarr.core.formatting import format_duration
from tagarr.reconcile.models import Outcome, PlanAction, ReconcileResult, RegistryRole
from tagarr.reconcile.sweeper import SweepResult


@dataclass
class CategorySummary:
    """Per-category counts and titles for one run."""

    category: str
    display_name: str
    matched: int = 0
    tagged: dict[RegistryRole, list[str]] = field(default_factory=dict)
    kept: dict[RegistryRole, int] = field(default_factory=dict)
    untagged: dict[RegistryRole, list[tuple[str, str]]] = field(default_factory=dict)
    not_found: list[str] = field(default_factory=list)
    orphaned: list[str] = field(default_factory=list)

    def tagged_titles(self, role: RegistryRole) -> list[str]:
        return self.tagged.get(role, [])

    def untagged_titles(self, role: RegistryRole) -> list[str]:
        return [title for title, _ in self.untagged.get(role, [])]

    @property
    def has_activity(self) -> bool:
        return bool(
            self.matched
            or any(self.tagged.values())
            or any(self.kept.values())
            or any(self.untagged.values())
            or self.not_found
            or self.orphaned
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "display_name": self.display_name,
            "matched": self.matched,
            "tagged": {role.value: titles for role, titles in self.tagged.items()},
            "kept": {role.value: count for role, count in self.kept.items()},
            "untagged": {
                role.value: [{"title": t, "reason": r} for t, r in entries]
                for role, entries in self.untagged.items()
            },
            "not_found_in_secondary": self.not_found,
            "orphaned": self.orphaned,
        }


def summarize_categories(
    result: ReconcileResult,
    categories: Iterable[tuple[str, str]],
    matched: dict[str, int] | None = None,
) -> list[CategorySummary]:
    """Build per-category summaries from a reconciliation result.

    Args:
        result: The applied (or dry-run) result.
        categories: (category, display name) pairs in display order.
        matched: Release-group token matches per category.
    """
    matched = matched or {}
    summaries = []
    for category, display_name in categories:
        summary = CategorySummary(
            category=category,
            display_name=display_name,
            matched=matched.get(category, 0),
        )
        for role in RegistryRole:
            added = result.entries_for(category, role, PlanAction.ADD)
            kept = result.entries_for(category, role, PlanAction.KEEP_PRESENT)
            removed = result.entries_for(category, role, PlanAction.REMOVE)
            if added:
                summary.tagged[role] = [e.title for e in added]
            if kept:
                summary.kept[role] = len(kept)
            if removed:
                summary.untagged[role] = [(e.title, e.reason or "") for e in removed]
        summary.not_found = result.outcomes_for(category, Outcome.NOT_FOUND_IN_SECONDARY)
        summary.orphaned = result.outcomes_for(category, Outcome.ORPHANED)
        summaries.append(summary)
    return summaries


@dataclass
class RunSummary:
    """Everything a batch run reports at the end."""

    primary_name: str
    secondary_name: str | None = None
    dry_run: bool = False
    duration: float = 0.0
    items_total: int = 0
    items_failed: int = 0
    requests: int = 0
    categories: list[CategorySummary] = field(default_factory=list)
    discovered: list[tuple[str, int]] = field(default_factory=list)
    swept: SweepResult = field(default_factory=SweepResult)
    trail: list[str] = field(default_factory=list)

    def totals(self, role: RegistryRole) -> tuple[int, int]:
        """(tagged, untagged) across all categories for one instance."""
        tagged = sum(len(c.tagged_titles(role)) for c in self.categories)
        untagged = sum(len(c.untagged.get(role, [])) for c in self.categories)
        return tagged, untagged

    def format_lines(self) -> list[str]:
        """Human-readable summary for the end-of-run log."""
        mode = "DRY-RUN" if self.dry_run else "LIVE"
        lines = [
            f"Run summary ({mode}) - {self.items_total} movies "
            f"in {format_duration(self.duration)}",
        ]
        if self.items_failed:
            lines.append(f"  {self.items_failed} movie(s) failed and were skipped")

        for c in self.categories:
            if not c.has_activity:
                continue
            p_tagged = len(c.tagged_titles(RegistryRole.PRIMARY))
            p_kept = c.kept.get(RegistryRole.PRIMARY, 0)
            p_removed = len(c.untagged.get(RegistryRole.PRIMARY, []))
            line = (
                f"  {c.display_name}: matched {c.matched}, "
                f"{self.primary_name} +{p_tagged} ={p_kept} -{p_removed}"
            )
            if self.secondary_name is not None:
                s_tagged = len(c.tagged_titles(RegistryRole.SECONDARY))
                s_kept = c.kept.get(RegistryRole.SECONDARY, 0)
                s_removed = len(c.untagged.get(RegistryRole.SECONDARY, []))
                line += f", {self.secondary_name} +{s_tagged} ={s_kept} -{s_removed}"
                if c.not_found:
                    line += f", not found {len(c.not_found)}"
                if c.orphaned:
                    line += f", orphaned {len(c.orphaned)}"
            lines.append(line)

        if self.discovered:
            total = sum(count for _, count in self.discovered)
            lines.append(f"Discovered: {len(self.discovered)} groups, {total} movies")
            for name, count in sorted(self.discovered):
                lines.append(f"  {name:<20} {count} movies")

        if self.swept.deleted:
            verb = "Would delete" if self.dry_run else "Deleted"
            for registry_name, label in self.swept.deleted:
                lines.append(f"{verb} empty tag '{label}' from {registry_name}")

        return lines

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary": self.primary_name,
            "secondary": self.secondary_name,
            "dry_run": self.dry_run,
            "duration_seconds": round(self.duration, 3),
            "items_total": self.items_total,
            "items_failed": self.items_failed,
            "requests": self.requests,
            "categories": [c.to_dict() for c in self.categories],
            "discovered": [
                {"group": name, "movies": count} for name, count in self.discovered
            ],
            "deleted_tags": [
                {"instance": registry_name, "tag": label}
                for registry_name, label in self.swept.deleted
            ],
        }

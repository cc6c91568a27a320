"""Per-movie classification combining the HDR, release-group and discovery passes."""

from __future__ import annotations

from dataclasses import dataclass, field

from tagarr.classify.discovery import DiscoveryCandidate, DiscoveryEngine
from tagarr.classify.hdr import HDR_LABELS, HdrClassifier, HdrDecision
from tagarr.classify.release_group import ReleaseGroupClassifier, RuleDecision
from tagarr.reconcile.models import DesiredState
from tagarr.registry.models import Item

# Reason recorded when an HDR tag no longer applies
HDR_REASON = "no longer applies"


@dataclass
class ItemClassification:
    """All classifier outcomes for one movie."""

    item: Item
    hdr: HdrDecision | None = None
    rules: list[RuleDecision] = field(default_factory=list)
    discovered: DiscoveryCandidate | None = None

    @property
    def tagged_categories(self) -> list[RuleDecision]:
        """Release-group rules the movie qualifies for."""
        return [d for d in self.rules if d.desired]

    def desired_state(self) -> DesiredState:
        labels: dict[str, bool] = {}
        reasons: dict[str, str] = {}
        if self.hdr is not None:
            for label, desired in self.hdr.desired.items():
                labels[label] = desired
                if not desired:
                    reasons[label] = HDR_REASON
        for decision in self.rules:
            labels[decision.category] = decision.desired
            if decision.reason is not None:
                reasons[decision.category] = decision.reason.value
        return DesiredState(item=self.item, labels=labels, reasons=reasons)

    def trail(self) -> list[str]:
        """Decision trail lines for debug output."""
        lines = [f"[M{self.item.id}] {self.item.display_title}"]
        if self.hdr is not None:
            lines.append(f"    {self.hdr.trail()}")
        lines.extend(f"    {d.trail()}" for d in self.rules if d.matched)
        if self.discovered is not None:
            lines.append(f"    discovered group {self.discovered.display_name}")
        return lines


class ItemClassifier:
    """Runs every enabled classifier against a movie."""

    def __init__(
        self,
        hdr: HdrClassifier | None = None,
        release_groups: ReleaseGroupClassifier | None = None,
        discovery: DiscoveryEngine | None = None,
    ) -> None:
        self.hdr = hdr
        self.release_groups = release_groups
        self.discovery = discovery

    def classify(self, item: Item) -> ItemClassification:
        result = ItemClassification(item=item)
        if self.hdr is not None:
            result.hdr = self.hdr.classify(item)
        if self.release_groups is not None:
            result.rules = self.release_groups.classify(item)
        if self.discovery is not None:
            result.discovered = self.discovery.inspect(item)
        return result

    def managed_categories(self) -> list[tuple[str, str]]:
        """(category, display name) for every tag this classifier manages."""
        categories: list[tuple[str, str]] = []
        if self.release_groups is not None:
            categories.extend(
                (rule.category, rule.display_name) for rule in self.release_groups.rules
            )
        if self.hdr is not None:
            categories.extend((label, label) for label in HDR_LABELS)
        return categories

"""Removal of managed tags that no movie carries any more."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from tagarr.registry.client import RegistryUnavailable
from tagarr.registry.interface import LabelRegistry

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Tags deleted (or that would be deleted) per instance."""

    deleted: list[tuple[str, str]] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


class OrphanSweeper:
    """Deletes managed tags with zero members.

    Runs after all tag changes so the membership it sees is final. Tags
    outside the managed set are never touched.
    """

    def __init__(
        self, registries: Sequence[LabelRegistry], *, dry_run: bool = False
    ) -> None:
        self._registries = registries
        self._dry_run = dry_run

    def sweep(self, categories: Iterable[str]) -> SweepResult:
        managed = {c.lower() for c in categories}
        result = SweepResult()
        for registry in self._registries:
            self._sweep_registry(registry, managed, result)
        return result

    def _sweep_registry(
        self, registry: LabelRegistry, managed: set[str], result: SweepResult
    ) -> None:
        try:
            labels = registry.list_labels()
            items = registry.list_items()
        except RegistryUnavailable as e:
            logger.warning("Skipping tag cleanup for %s: %s", registry.name, e)
            return

        in_use: set[int] = set()
        for item in items:
            in_use.update(item.labels)

        for label in labels:
            if label.name.lower() not in managed or label.id in in_use:
                continue
            if self._dry_run:
                logger.info(
                    "[DRY-RUN] Would delete empty tag '%s' from %s",
                    label.name,
                    registry.name,
                )
                result.deleted.append((registry.name, label.name))
                continue
            try:
                registry.delete_label(label.id)
            except RegistryUnavailable as e:
                logger.warning(
                    "Failed to delete tag '%s' from %s: %s", label.name, registry.name, e
                )
                result.failed.append((registry.name, label.name))
                continue
            logger.info("Deleted empty tag '%s' from %s", label.name, registry.name)
            result.deleted.append((registry.name, label.name))

"""Tag reconciliation across the primary and secondary Radarr instances.

The engine turns desired tag states into a plan by diffing them against
the tags each movie currently carries, then applies the plan with one
bulk edit per (instance, category, operation).

With a secondary instance, every primary decision is mirrored onto the
movie with the same TMDb id. A batch run additionally performs an orphan
pass over the secondary: any managed tag on a secondary movie whose
primary counterpart does not want it is removed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tagarr.reconcile.models import (
    DesiredState,
    Outcome,
    OutcomeRecord,
    PlanAction,
    PlanEntry,
    PlanKey,
    ReconcileResult,
    ReconciliationPlan,
    RegistryRole,
)
from tagarr.registry.client import RegistryUnavailable
from tagarr.registry.interface import LabelRegistry
from tagarr.registry.models import Item, LabelOp

logger = logging.getLogger(__name__)

ORPHAN_REASON = "orphaned"


class LabelCatalog:
    """Tag name to id lookup for one instance.

    Tags are loaded once and created on first use. Under dry-run nothing
    is created and a missing tag simply has no id.
    """

    def __init__(self, registry: LabelRegistry, *, dry_run: bool = False) -> None:
        self._registry = registry
        self._dry_run = dry_run
        self._ids: dict[str, int] | None = None

    def _load(self) -> dict[str, int]:
        if self._ids is None:
            try:
                labels = self._registry.list_labels()
            except RegistryUnavailable as e:
                logger.warning("Could not list tags in %s: %s", self._registry.name, e)
                labels = []
            self._ids = {label.name.lower(): label.id for label in labels}
        return self._ids

    def id_for(self, name: str) -> int | None:
        return self._load().get(name.lower())

    def name_for(self, label_id: int) -> str | None:
        for name, known_id in self._load().items():
            if known_id == label_id:
                return name
        return None

    def ensure(self, name: str) -> int | None:
        """Return the tag's id, creating the tag if needed.

        Raises:
            RegistryUnavailable: If creation fails.
        """
        ids = self._load()
        key = name.lower()
        if key in ids:
            return ids[key]
        if self._dry_run:
            logger.info("[DRY-RUN] Would create tag '%s' in %s", name, self._registry.name)
            return None
        ids[key] = self._registry.create_label(name)
        return ids[key]


class ReconciliationEngine:
    """Plans and applies tag changes."""

    def __init__(
        self,
        primary: LabelRegistry,
        secondary: LabelRegistry | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        self._registries: dict[RegistryRole, LabelRegistry] = {
            RegistryRole.PRIMARY: primary
        }
        if secondary is not None:
            self._registries[RegistryRole.SECONDARY] = secondary
        self._catalogs = {
            role: LabelCatalog(registry, dry_run=dry_run)
            for role, registry in self._registries.items()
        }
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def registry(self, role: RegistryRole) -> LabelRegistry | None:
        return self._registries.get(role)

    def catalog(self, role: RegistryRole) -> LabelCatalog | None:
        return self._catalogs.get(role)

    def plan(
        self,
        states: Iterable[DesiredState],
        secondary_items: Iterable[Item] | None = None,
        *,
        orphan_categories: Iterable[str] | None = None,
        unclassified: Iterable[int] = (),
    ) -> ReconciliationPlan:
        """Diff desired states against current tags.

        Args:
            states: Desired tags per primary movie. Each movie's ``labels``
                must reflect tags fetched immediately before classification.
            secondary_items: Current secondary movies. Mirroring is skipped
                when None or when the engine has no secondary instance.
            orphan_categories: Managed categories for the orphan pass. The
                pass is skipped when None.
            unclassified: TMDb ids of primary movies that could not be
                classified. Their secondary counterparts are left out of the
                orphan pass.

        Returns:
            The plan; nothing has been written yet.
        """
        plan = ReconciliationPlan()
        primary_catalog = self._catalogs[RegistryRole.PRIMARY]
        secondary_catalog = self._catalogs.get(RegistryRole.SECONDARY)
        mirror = secondary_catalog is not None and secondary_items is not None

        index: dict[int, Item] = {}
        secondary_list: list[Item] = []
        if mirror:
            secondary_list = list(secondary_items or ())
            index = {i.external_id: i for i in secondary_list if i.external_id}

        wanted: dict[tuple[int, str], bool] = {}
        planned: set[tuple[int, str]] = set()

        for state in states:
            item = state.item
            for category, desired in state.labels.items():
                reason = state.reasons.get(category)
                self._plan_entry(
                    plan,
                    RegistryRole.PRIMARY,
                    category,
                    item,
                    desired,
                    _has(primary_catalog, item, category),
                    reason,
                )
                if not mirror:
                    continue

                ext = item.external_id
                if ext is not None:
                    wanted[(ext, category)] = wanted.get((ext, category), False) or desired
                counterpart = index.get(ext) if ext is not None else None
                if counterpart is None:
                    if desired:
                        plan.outcomes.append(
                            OutcomeRecord(
                                Outcome.NOT_FOUND_IN_SECONDARY,
                                category,
                                item.display_title,
                            )
                        )
                    continue

                self._plan_entry(
                    plan,
                    RegistryRole.SECONDARY,
                    category,
                    counterpart,
                    desired,
                    _has(secondary_catalog, counterpart, category),
                    reason,
                )
                planned.add((counterpart.id, category))

        if mirror and orphan_categories is not None:
            self._plan_orphans(
                plan,
                secondary_list,
                set(orphan_categories),
                wanted,
                planned,
                frozenset(unclassified),
            )

        return plan

    @staticmethod
    def _plan_entry(
        plan: ReconciliationPlan,
        role: RegistryRole,
        category: str,
        item: Item,
        desired: bool,
        current: bool,
        reason: str | None,
    ) -> None:
        action = PlanAction.decide(desired, current)
        if action is PlanAction.KEEP_ABSENT:
            return
        plan.entries.append(
            PlanEntry(
                key=PlanKey(role, category),
                item_id=item.id,
                title=item.display_title,
                action=action,
                reason=reason if action is PlanAction.REMOVE else None,
            )
        )

    def _plan_orphans(
        self,
        plan: ReconciliationPlan,
        secondary_items: list[Item],
        categories: set[str],
        wanted: dict[tuple[int, str], bool],
        planned: set[tuple[int, str]],
        unclassified: frozenset[int],
    ) -> None:
        catalog = self._catalogs[RegistryRole.SECONDARY]
        for item in secondary_items:
            if item.external_id in unclassified:
                continue
            for label_id in sorted(item.labels):
                category = catalog.name_for(label_id)
                if category is None or category not in categories:
                    continue
                if (item.id, category) in planned:
                    continue
                ext = item.external_id
                if ext is not None and wanted.get((ext, category)):
                    continue
                plan.entries.append(
                    PlanEntry(
                        key=PlanKey(RegistryRole.SECONDARY, category),
                        item_id=item.id,
                        title=item.display_title,
                        action=PlanAction.REMOVE,
                        reason=ORPHAN_REASON,
                    )
                )
                plan.outcomes.append(
                    OutcomeRecord(Outcome.ORPHANED, category, item.display_title)
                )

    def apply(self, plan: ReconciliationPlan) -> ReconcileResult:
        """Apply a plan with one bulk edit per (instance, category, op).

        A failed edit is logged and recorded; the remaining batches still
        run. Under dry-run every change is logged and nothing is written.
        """
        result = ReconcileResult(plan=plan, dry_run=self._dry_run)

        for (key, op), item_ids in plan.batches().items():
            registry = self._registries[key.registry]
            catalog = self._catalogs[key.registry]
            entries = [e for e in plan.entries if e.key == key and e.action.op is op]

            if self._dry_run:
                for entry in entries:
                    logger.info(
                        "[DRY-RUN] Would %s tag '%s' %s %s in %s",
                        op.value,
                        key.category,
                        "to" if op is LabelOp.ADD else "from",
                        entry.title,
                        registry.name,
                    )
                result.applied.extend(entries)
                continue

            try:
                if op is LabelOp.ADD:
                    label_id = catalog.ensure(key.category)
                else:
                    label_id = catalog.id_for(key.category)
                if label_id is None:
                    continue
                registry.edit_item_labels(item_ids, [label_id], op)
            except RegistryUnavailable as e:
                logger.warning(
                    "Failed to %s tag '%s' for %d movie(s) in %s: %s",
                    op.value,
                    key.category,
                    len(item_ids),
                    registry.name,
                    e,
                )
                result.failed.extend(entries)
                continue

            result.requests += 1
            result.applied.extend(entries)
            logger.info(
                "%s tag '%s' %s %d movie(s) in %s",
                "Added" if op is LabelOp.ADD else "Removed",
                key.category,
                "to" if op is LabelOp.ADD else "from",
                len(item_ids),
                registry.name,
            )

        return result

    def reconcile(
        self,
        states: Iterable[DesiredState],
        secondary_items: Iterable[Item] | None = None,
        *,
        orphan_categories: Iterable[str] | None = None,
        unclassified: Iterable[int] = (),
    ) -> ReconcileResult:
        """Plan and apply in one step."""
        plan = self.plan(
            states,
            secondary_items,
            orphan_categories=orphan_categories,
            unclassified=unclassified,
        )
        return self.apply(plan)


def _has(catalog: LabelCatalog | None, item: Item, category: str) -> bool:
    if catalog is None:
        return False
    label_id = catalog.id_for(category)
    return label_id is not None and label_id in item.labels

"""Tests for the reconciliation engine."""

from __future__ import annotations

import logging

import pytest

from tagarr.reconcile.engine import ORPHAN_REASON, LabelCatalog, ReconciliationEngine
from tagarr.reconcile.models import (
    DesiredState,
    Outcome,
    PlanAction,
    PlanKey,
    RegistryRole,
)
from tagarr.registry.models import Label, LabelOp
from tagarr.registry.testing import InMemoryRegistry, make_item


def _state(item, reasons=None, **labels) -> DesiredState:
    return DesiredState(item=item, labels=labels, reasons=reasons or {})


class TestPlanAction:
    """Tests for PlanAction.decide."""

    @pytest.mark.parametrize(
        ("desired", "current", "action"),
        [
            (True, False, PlanAction.ADD),
            (True, True, PlanAction.KEEP_PRESENT),
            (False, True, PlanAction.REMOVE),
            (False, False, PlanAction.KEEP_ABSENT),
        ],
    )
    def test_decide(self, desired, current, action) -> None:
        assert PlanAction.decide(desired, current) is action


class TestLabelCatalog:
    """Tests for LabelCatalog."""

    def test_case_insensitive_lookup(self) -> None:
        catalog = LabelCatalog(InMemoryRegistry(labels=[Label(3, "FLUX")]))

        assert catalog.id_for("flux") == 3
        assert catalog.name_for(3) == "flux"

    def test_ensure_creates_once(self) -> None:
        registry = InMemoryRegistry()
        catalog = LabelCatalog(registry)

        first = catalog.ensure("flux")
        second = catalog.ensure("flux")

        assert first == second
        assert registry.calls == [("create_label", "flux")]

    def test_dry_run_never_creates(self) -> None:
        registry = InMemoryRegistry()

        assert LabelCatalog(registry, dry_run=True).ensure("flux") is None
        assert registry.calls == []

    def test_list_failure_is_empty(self) -> None:
        registry = InMemoryRegistry(labels=[Label(1, "flux")])
        registry.fail_on.add("list_labels")

        assert LabelCatalog(registry).id_for("flux") is None


class TestPrimaryReconciliation:
    """Tests for reconciling the primary instance only."""

    def test_adds_and_removes(self) -> None:
        primary = InMemoryRegistry(
            items=[make_item(1), make_item(2, labels=[1])],
            labels=[Label(1, "flux")],
        )
        engine = ReconciliationEngine(primary)

        result = engine.reconcile(
            [
                _state(primary.items[1], flux=True),
                _state(primary.items[2], {"flux": "failed audio"}, flux=False),
            ]
        )

        assert primary.label_names(1) == {"flux"}
        assert primary.label_names(2) == set()
        assert result.requests == 2
        [removed] = result.entries_for("flux", RegistryRole.PRIMARY, PlanAction.REMOVE)
        assert removed.reason == "failed audio"

    def test_creates_missing_tag_on_first_add(self) -> None:
        primary = InMemoryRegistry(items=[make_item(1)])

        ReconciliationEngine(primary).reconcile([_state(primary.items[1], hdr10=True)])

        assert primary.label_names(1) == {"hdr10"}
        assert primary.calls[0] == ("create_label", "hdr10")

    def test_absent_tag_not_created_for_removal(self) -> None:
        primary = InMemoryRegistry(items=[make_item(1)])

        result = ReconciliationEngine(primary).reconcile(
            [_state(primary.items[1], flux=False)]
        )

        assert primary.mutation_count == 0
        assert result.plan.entries == []

    def test_one_edit_per_category_and_op(self) -> None:
        items = [make_item(i) for i in range(1, 6)]
        primary = InMemoryRegistry(items=items, labels=[Label(1, "flux")])

        result = ReconciliationEngine(primary).reconcile(
            [_state(item, flux=True, hdr10=True) for item in items]
        )

        edits = [c for c in primary.calls if c[0] == "edit_item_labels"]
        assert len(edits) == 2
        assert edits[0] == ("edit_item_labels", (1, 2, 3, 4, 5), (1,), LabelOp.ADD)
        assert result.requests == 2

    def test_second_run_is_idempotent(self) -> None:
        primary = InMemoryRegistry(
            items=[make_item(1), make_item(2, labels=[1])], labels=[Label(1, "flux")]
        )
        engine = ReconciliationEngine(primary)
        engine.reconcile(
            [_state(primary.items[1], flux=True), _state(primary.items[2], flux=False)]
        )
        calls = primary.mutation_count

        result = ReconciliationEngine(primary).reconcile(
            [_state(primary.items[1], flux=True), _state(primary.items[2], flux=False)]
        )

        assert primary.mutation_count == calls
        assert result.plan.changes() == []
        assert result.requests == 0

    def test_unmentioned_tags_untouched(self) -> None:
        primary = InMemoryRegistry(
            items=[make_item(1, labels=[1, 2])],
            labels=[Label(1, "flux"), Label(2, "favourite")],
        )

        ReconciliationEngine(primary).reconcile([_state(primary.items[1], flux=False)])

        assert primary.label_names(1) == {"favourite"}

    def test_dry_run_writes_nothing(self, caplog: pytest.LogCaptureFixture) -> None:
        primary = InMemoryRegistry(
            items=[make_item(1, title="Dune", year=2021), make_item(2, labels=[1])],
            labels=[Label(1, "flux")],
        )
        engine = ReconciliationEngine(primary, dry_run=True)

        with caplog.at_level(logging.INFO):
            result = engine.reconcile(
                [
                    _state(primary.items[1], flux=True, hdr10=True),
                    _state(primary.items[2], flux=False),
                ]
            )

        assert primary.mutation_count == 0
        assert result.dry_run is True
        assert len(result.applied) == 3
        assert "[DRY-RUN] Would add tag 'flux' to Dune (2021) in Primary" in caplog.text
        assert "[DRY-RUN] Would create tag 'hdr10'" not in caplog.text

    def test_failed_batch_recorded_and_others_continue(self) -> None:
        primary = InMemoryRegistry(items=[make_item(1)], labels=[Label(1, "flux")])
        primary.fail_on.add("create_label")

        result = ReconciliationEngine(primary).reconcile(
            [_state(primary.items[1], flux=True, hdr10=True)]
        )

        assert primary.label_names(1) == {"flux"}
        assert [e.key.category for e in result.failed] == ["hdr10"]
        assert result.entries_for("hdr10", RegistryRole.PRIMARY, PlanAction.ADD) == []
        assert result.requests == 1


class TestSecondaryMirroring:
    """Tests for mirroring decisions to the secondary instance."""

    @pytest.fixture
    def registries(self):
        primary = InMemoryRegistry(
            "Radarr",
            items=[
                make_item(1, external_id=100),
                make_item(2, external_id=200),
                make_item(3, external_id=300),
            ],
            labels=[Label(1, "flux")],
        )
        secondary = InMemoryRegistry(
            "Radarr 4K",
            items=[
                make_item(11, external_id=100),
                make_item(12, external_id=200, labels=[5]),
                make_item(13, external_id=999, labels=[5]),
            ],
            labels=[Label(5, "flux"), Label(6, "favourite")],
        )
        return primary, secondary

    def test_mirrors_by_external_id(self, registries) -> None:
        primary, secondary = registries
        engine = ReconciliationEngine(primary, secondary)

        engine.reconcile(
            [
                _state(primary.items[1], flux=True),
                _state(primary.items[2], flux=False),
            ],
            secondary.list_items(),
        )

        assert secondary.label_names(11) == {"flux"}
        assert secondary.label_names(12) == set()

    def test_not_found_recorded_for_desired_present(self, registries) -> None:
        primary, secondary = registries
        engine = ReconciliationEngine(primary, secondary)
        item = make_item(4, title="Missing", year=2022, external_id=400)
        primary.items[item.id] = item

        result = engine.reconcile(
            [_state(item, flux=True), _state(primary.items[3], flux=False)],
            secondary.list_items(),
        )

        assert result.outcomes_for("flux", Outcome.NOT_FOUND_IN_SECONDARY) == [
            "Missing (2022)"
        ]

    def test_orphan_pass_removes_unwanted(self, registries) -> None:
        primary, secondary = registries
        engine = ReconciliationEngine(primary, secondary)

        result = engine.reconcile(
            [_state(primary.items[1], flux=True)],
            secondary.list_items(),
            orphan_categories=["flux"],
        )

        # 12 has no decision from a state here; 13 has no primary counterpart
        assert secondary.label_names(12) == set()
        assert secondary.label_names(13) == set()
        assert secondary.label_names(11) == {"flux"}
        orphans = result.outcomes_for("flux", Outcome.ORPHANED)
        assert sorted(orphans) == ["Test Movie (2020)", "Test Movie (2020)"]
        removed = result.entries_for("flux", RegistryRole.SECONDARY, PlanAction.REMOVE)
        assert {e.reason for e in removed} == {ORPHAN_REASON}

    def test_orphan_pass_leaves_unmanaged_tags(self, registries) -> None:
        primary, secondary = registries
        secondary.edit_item_labels([13], [6], LabelOp.ADD)

        ReconciliationEngine(primary, secondary).reconcile(
            [], secondary.list_items(), orphan_categories=["flux"]
        )

        assert secondary.label_names(13) == {"favourite"}

    def test_orphan_pass_skipped_without_categories(self, registries) -> None:
        primary, secondary = registries

        ReconciliationEngine(primary, secondary).reconcile([], secondary.list_items())

        assert secondary.label_names(13) == {"flux"}

    def test_orphan_pass_skips_unclassified_movies(self, registries) -> None:
        primary, secondary = registries

        result = ReconciliationEngine(primary, secondary).reconcile(
            [_state(primary.items[1], flux=True)],
            secondary.list_items(),
            orphan_categories=["flux"],
            unclassified=[200],
        )

        assert secondary.label_names(12) == {"flux"}
        assert secondary.label_names(13) == set()
        assert len(result.outcomes_for("flux", Outcome.ORPHANED)) == 1

    def test_no_mirroring_without_secondary_items(self, registries) -> None:
        primary, secondary = registries

        ReconciliationEngine(primary, secondary).reconcile(
            [_state(primary.items[1], flux=True)], None
        )

        assert secondary.mutation_count == 0

    def test_batches_per_registry(self, registries) -> None:
        primary, secondary = registries
        plan = ReconciliationEngine(primary, secondary).plan(
            [_state(primary.items[1], flux=True)], secondary.list_items()
        )

        assert set(plan.batches()) == {
            (PlanKey(RegistryRole.PRIMARY, "flux"), LabelOp.ADD),
            (PlanKey(RegistryRole.SECONDARY, "flux"), LabelOp.ADD),
        }

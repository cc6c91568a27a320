"""Tag reconciliation: plans, the two-instance engine and empty-tag cleanup."""

from tagarr.reconcile.engine import LabelCatalog, ReconciliationEngine
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
from tagarr.reconcile.sweeper import OrphanSweeper, SweepResult

__all__ = [
    "DesiredState",
    "LabelCatalog",
    "OrphanSweeper",
    "Outcome",
    "OutcomeRecord",
    "PlanAction",
    "PlanEntry",
    "PlanKey",
    "ReconcileResult",
    "ReconciliationEngine",
    "ReconciliationPlan",
    "RegistryRole",
    "SweepResult",
]

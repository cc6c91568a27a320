"""Run orchestration: batch runs, Radarr events and run summaries."""

from tagarr.workflow.batch import BatchRunner
from tagarr.workflow.classification import ItemClassification, ItemClassifier
from tagarr.workflow.event import (
    EventHandler,
    EventRequest,
    EventResult,
    EventType,
    UnknownEventError,
)
from tagarr.workflow.report import DiscoveryReportWriter
from tagarr.workflow.runtime import Runtime, build_runtime
from tagarr.workflow.summary import CategorySummary, RunSummary, summarize_categories

__all__ = [
    "BatchRunner",
    "CategorySummary",
    "DiscoveryReportWriter",
    "EventHandler",
    "EventRequest",
    "EventResult",
    "EventType",
    "ItemClassification",
    "ItemClassifier",
    "RunSummary",
    "Runtime",
    "UnknownEventError",
    "build_runtime",
    "summarize_categories",
]

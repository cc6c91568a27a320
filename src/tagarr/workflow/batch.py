"""Full-library batch run.

A run validates the connections, classifies every movie on the primary,
reconciles tags on the primary and the secondary (including the orphan
pass), records discoveries, optionally deletes empty tags, and reports a
summary to the log and the notifier.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Callable
from datetime import datetime

from tagarr import __version__
from tagarr.core.formatting import format_duration
from tagarr.logging import item_context
from tagarr.notify.discord import (
    GREEN,
    PURPLE,
    SECONDARY_MARK,
    discovery_payload,
    summary_payload,
    text_payloads,
    title_list_payloads,
)
from tagarr.reconcile.engine import ReconciliationEngine
from tagarr.reconcile.models import DesiredState, RegistryRole
from tagarr.reconcile.sweeper import OrphanSweeper
from tagarr.registry.client import RegistryUnavailable
from tagarr.registry.models import Item
from tagarr.workflow.classification import ItemClassifier
from tagarr.workflow.report import DiscoveryReportWriter
from tagarr.workflow.runtime import Runtime
from tagarr.workflow.summary import CategorySummary, RunSummary, summarize_categories

logger = logging.getLogger(__name__)


class BatchRunner:
    """Runs one full pass over the primary library."""

    def __init__(
        self,
        runtime: Runtime,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._runtime = runtime
        self._config = runtime.config
        self._clock = clock

    def run(self) -> RunSummary:
        """Execute the run.

        Returns:
            The run summary.

        Raises:
            RegistryUnavailable: If the primary cannot be reached or its
                movies cannot be listed.
        """
        start = time.monotonic()
        runtime = self._runtime
        dry_run = self._config.dry_run
        if dry_run:
            logger.info("DRY-RUN mode: no changes will be written")

        runtime.primary.validate_connection()
        secondary_items = self._load_secondary()

        items = runtime.primary.list_items()
        logger.info("Processing %d movies from %s", len(items), runtime.primary.name)

        classifier = runtime.build_classifier()
        states, matched, trail, failed = self._classify_all(classifier, items)

        engine = ReconciliationEngine(
            runtime.primary, runtime.secondary, dry_run=dry_run
        )
        categories = classifier.managed_categories()
        managed = [category for category, _ in categories]
        result = engine.reconcile(
            states,
            secondary_items,
            orphan_categories=managed if runtime.secondary is not None else None,
            unclassified=[i.external_id for i in failed if i.external_id is not None],
        )

        discovered = self._record_discoveries(classifier)

        summary = RunSummary(
            primary_name=runtime.primary.name,
            secondary_name=runtime.secondary.name if runtime.secondary else None,
            dry_run=dry_run,
            items_total=len(items),
            items_failed=len(failed),
            requests=result.requests,
            categories=summarize_categories(result, categories, matched),
            discovered=discovered,
            trail=trail,
        )

        if self._config.cleanup.enabled:
            registries = [runtime.primary]
            if runtime.secondary is not None:
                registries.append(runtime.secondary)
            summary.swept = OrphanSweeper(registries, dry_run=dry_run).sweep(managed)

        summary.duration = time.monotonic() - start
        self._log_summary(summary)
        self._notify(summary)
        return summary

    def _load_secondary(self) -> list[Item] | None:
        runtime = self._runtime
        if runtime.secondary is None:
            return None
        try:
            runtime.secondary.validate_connection()
            items = runtime.secondary.list_items()
        except RegistryUnavailable as e:
            runtime.disable_secondary(str(e))
            return None
        logger.info("Loaded %d movies from %s", len(items), runtime.secondary.name)
        return items

    def _classify_all(
        self, classifier: ItemClassifier, items: list[Item]
    ) -> tuple[list[DesiredState], Counter[str], list[str], list[Item]]:
        states: list[DesiredState] = []
        matched: Counter[str] = Counter()
        trail: list[str] = []
        failed: list[Item] = []

        for item in items:
            with item_context(item.id, item.display_title):
                try:
                    classification = classifier.classify(item)
                except Exception as e:
                    # One bad movie must not stop the run
                    logger.exception("Failed to classify movie: %s", e)
                    failed.append(item)
                    continue

            states.append(classification.desired_state())
            for decision in classification.rules:
                if decision.matched:
                    matched[decision.category] += 1
            if self._config.debug:
                trail.extend(classification.trail())

        return states, matched, trail, failed

    def _record_discoveries(self, classifier: ItemClassifier) -> list[tuple[str, int]]:
        discovery = classifier.discovery
        if discovery is None:
            return []

        candidates = discovery.candidates
        sightings = discovery.sightings
        counts = Counter(s.display_name for s in sightings)
        now = self._clock()

        if candidates:
            editor = self._runtime.rule_editor
            if self._config.dry_run:
                for candidate in candidates:
                    logger.info(
                        "[DRY-RUN] Would add discovered group %s to rule file",
                        candidate.display_name,
                    )
            elif editor is not None:
                editor.append_discovered(candidates, now.date())

        log_file = self._config.discovery.log_file
        if log_file is not None:
            DiscoveryReportWriter(log_file, self._config.discovery.max_bytes).write(
                sightings,
                known_groups=discovery.known_count,
                dry_run=self._config.dry_run,
                now=now,
            )

        return [(c.display_name, counts[c.display_name]) for c in candidates]

    def _log_summary(self, summary: RunSummary) -> None:
        for line in summary.format_lines():
            logger.info(line)
        if summary.trail:
            logger.info("Decision trail:")
            for line in summary.trail:
                logger.info(line)

    def _notify(self, summary: RunSummary) -> None:
        notifier = self._runtime.notifier
        if notifier is None:
            return

        now = self._clock()
        payloads = [
            summary_payload(
                version=__version__,
                primary_name=summary.primary_name,
                primary_counts=summary.totals(RegistryRole.PRIMARY),
                secondary_name=summary.secondary_name,
                secondary_counts=summary.totals(RegistryRole.SECONDARY),
                runtime=format_duration(summary.duration),
                dry_run=summary.dry_run,
                now=now,
            )
        ]
        if summary.discovered:
            payloads.append(
                discovery_payload(summary.discovered, dry_run=summary.dry_run, now=now)
            )
        payloads.extend(
            title_list_payloads(
                "Tagged Movies",
                [(c.display_name, _tagged_lines(c)) for c in summary.categories],
                color=GREEN,
            )
        )
        payloads.extend(
            title_list_payloads(
                "Untagged Movies",
                [(c.display_name, _untagged_lines(c)) for c in summary.categories],
                color=PURPLE,
            )
        )
        not_found = [
            f"{title} [{c.display_name}]"
            for c in summary.categories
            for title in c.not_found
        ]
        if not_found:
            payloads.extend(text_payloads("Not found in secondary", not_found))

        for payload in payloads:
            notifier.send(payload)


def _tagged_lines(category: CategorySummary) -> list[str]:
    mirrored = set(category.tagged_titles(RegistryRole.SECONDARY))
    return [
        f"{title}{SECONDARY_MARK}" if title in mirrored else title
        for title in category.tagged_titles(RegistryRole.PRIMARY)
    ]


def _untagged_lines(category: CategorySummary) -> list[str]:
    primary = category.untagged_titles(RegistryRole.PRIMARY)
    secondary = category.untagged_titles(RegistryRole.SECONDARY)
    mirrored = set(secondary)
    lines = [f"{t}{SECONDARY_MARK}" if t in mirrored else t for t in primary]
    seen = set(primary)
    lines.extend(t for t in secondary if t not in seen)
    return lines

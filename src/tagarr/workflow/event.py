"""Single-movie handling for Radarr custom-script events.

Radarr runs ``tagarr event`` on import, upgrade and file deletion with
the movie described in ``radarr_*`` environment variables. Imports are
classified and reconciled immediately; deletions strip every managed tag.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime

from tagarr import __version__
from tagarr.classify.release_group import RuleDecision
from tagarr.logging import item_context
from tagarr.notify.discord import connection_test_payload, item_payload
from tagarr.reconcile.engine import ReconciliationEngine
from tagarr.reconcile.models import DesiredState, PlanAction, ReconcileResult, RegistryRole
from tagarr.registry.client import RegistryUnavailable
from tagarr.registry.models import Item
from tagarr.workflow.runtime import Runtime

logger = logging.getLogger(__name__)


class EventType(str, enum.Enum):
    """Radarr event types handled by ``tagarr event``."""

    TEST = "Test"
    DOWNLOAD = "Download"
    UPGRADE = "Upgrade"
    MANUAL_IMPORT = "ManualImport"
    FILE_DELETE = "MovieFileDelete"
    FILE_DELETE_FOR_UPGRADE = "MovieFileDeleteForUpgrade"


IMPORT_EVENTS = frozenset({EventType.DOWNLOAD, EventType.UPGRADE, EventType.MANUAL_IMPORT})
DELETE_EVENTS = frozenset({EventType.FILE_DELETE, EventType.FILE_DELETE_FOR_UPGRADE})


class UnknownEventError(Exception):
    """Raised for event types tagarr does not handle."""


@dataclass(frozen=True)
class EventRequest:
    """An event as delivered by Radarr."""

    event_type: str
    movie_id: int | None = None
    file_path: str | None = None
    relative_path: str | None = None
    scene_name: str | None = None

    def parsed_type(self) -> EventType:
        try:
            return EventType(self.event_type)
        except ValueError:
            raise UnknownEventError(f"Unknown event type: {self.event_type}") from None


@dataclass
class EventResult:
    """What handling an event did."""

    event_type: EventType
    title: str | None = None
    tags: list[str] = field(default_factory=list)
    tagged_in: list[str] = field(default_factory=list)
    discovered: str | None = None
    reconcile: ReconcileResult | None = None
    notified: bool = False


class EventHandler:
    """Dispatches one Radarr event."""

    def __init__(
        self,
        runtime: Runtime,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._runtime = runtime
        self._config = runtime.config
        self._clock = clock

    def handle(self, request: EventRequest) -> EventResult:
        """Handle an event.

        Raises:
            UnknownEventError: If the event type is not handled.
            ValueError: If a movie event carries no movie id.
            RegistryUnavailable: If the primary cannot be reached.
        """
        event_type = request.parsed_type()
        logger.info("Handling %s event", event_type.value)

        if event_type is EventType.TEST:
            return self._handle_test()

        if request.movie_id is None:
            raise ValueError(f"{event_type.value} event requires a movie id")

        item = self._runtime.primary.get_item(request.movie_id)
        with item_context(item.id, item.display_title):
            if event_type in DELETE_EVENTS:
                return self._handle_delete(event_type, item)
            if event_type in IMPORT_EVENTS:
                return self._handle_import(event_type, _with_event_file(item, request))
        raise UnknownEventError(f"Unhandled event type: {event_type.value}")

    def _handle_test(self) -> EventResult:
        runtime = self._runtime
        runtime.primary.validate_connection()
        status = "Connection successful"
        if runtime.secondary is not None:
            try:
                runtime.secondary.validate_connection()
            except RegistryUnavailable as e:
                logger.warning("Secondary connection failed: %s", e)
                status = f"Connection successful ({runtime.secondary.name} unavailable)"

        result = EventResult(event_type=EventType.TEST)
        if runtime.notifier is not None:
            result.notified = runtime.notifier.send(
                connection_test_payload(
                    version=__version__,
                    status=status,
                    discovery_enabled=self._config.discovery.enabled,
                    now=self._clock(),
                )
            )
        return result

    def _secondary_items(self) -> list[Item] | None:
        runtime = self._runtime
        if runtime.secondary is None:
            return None
        try:
            return runtime.secondary.list_items()
        except RegistryUnavailable as e:
            runtime.disable_secondary(str(e))
            return None

    def _engine(self) -> ReconciliationEngine:
        return ReconciliationEngine(
            self._runtime.primary, self._runtime.secondary, dry_run=self._config.dry_run
        )

    def _handle_delete(self, event_type: EventType, item: Item) -> EventResult:
        classifier = self._runtime.build_classifier(discovery=False)
        labels = {category: False for category, _ in classifier.managed_categories()}
        secondary_items = self._secondary_items()
        state = DesiredState(
            item=item,
            labels=labels,
            reasons={category: "file deleted" for category in labels},
        )
        result = self._engine().reconcile([state], secondary_items)
        removed = len(result.plan.changes())
        logger.info("Removed %d managed tag(s) after file deletion", removed)
        return EventResult(event_type=event_type, title=item.display_title, reconcile=result)

    def _handle_import(self, event_type: EventType, item: Item) -> EventResult:
        classifier = self._runtime.build_classifier()
        classification = classifier.classify(item)
        secondary_items = self._secondary_items()
        result = self._engine().reconcile(
            [classification.desired_state()], secondary_items
        )

        event = EventResult(
            event_type=event_type, title=item.display_title, reconcile=result
        )

        # Tags the movie now carries, as reported in the notification
        for decision in classification.tagged_categories:
            event.tags.append(decision.rule.display_name)
        if event.tags:
            event.tagged_in.append(self._runtime.primary.name)
            secondary = self._runtime.secondary
            if secondary is not None and self._mirrored(result, classification.tagged_categories):
                event.tagged_in.append(secondary.name)

        candidate = classification.discovered
        if candidate is not None:
            event.discovered = candidate.display_name
            editor = self._runtime.rule_editor
            if self._config.dry_run:
                logger.info(
                    "[DRY-RUN] Would add discovered group %s to rule file",
                    candidate.display_name,
                )
            elif editor is not None:
                editor.append_discovered([candidate], self._clock().date())

        if self._config.debug:
            for line in classification.trail():
                logger.info(line)

        if event.tags or event.discovered:
            event.notified = self._notify(event, item)
        else:
            logger.info("No tags applied and nothing discovered")
        return event

    @staticmethod
    def _mirrored(result: ReconcileResult, decisions: list[RuleDecision]) -> bool:
        for decision in decisions:
            for action in (PlanAction.ADD, PlanAction.KEEP_PRESENT):
                if result.entries_for(decision.category, RegistryRole.SECONDARY, action):
                    return True
        return False

    def _notify(self, event: EventResult, item: Item) -> bool:
        notifier = self._runtime.notifier
        if notifier is None:
            return False
        return notifier.send(
            item_payload(
                title=item.display_title,
                tagged_in=event.tagged_in,
                tags=event.tags,
                event_type=event.event_type.value,
                filename=item.relative_path,
                discovered=event.discovered,
                poster_url=item.poster_url,
                now=self._clock(),
            )
        )


def _with_event_file(item: Item, request: EventRequest) -> Item:
    """Prefer the file details Radarr passed with the event.

    Radarr can report the new file in the event before its API reflects
    the import.
    """
    changes: dict[str, object] = {}
    if request.file_path:
        changes["file_path"] = request.file_path
        changes["has_file"] = True
    if request.relative_path:
        changes["relative_path"] = request.relative_path
    if request.scene_name:
        changes["scene_name"] = request.scene_name
    return replace(item, **changes) if changes else item

"""Construction of the collaborators a run needs from configuration."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from tagarr.analyzer.dovi import DoviToolAnalyzer
from tagarr.analyzer.interface import MediaAnalyzer
from tagarr.classify.discovery import DiscoveryEngine
from tagarr.classify.hdr import HDR_LABELS, HdrClassifier
from tagarr.classify.release_group import ReleaseGroupClassifier
from tagarr.config.models import ConfigurationError, TagarrConfig
from tagarr.notify.discord import DiscordNotifier
from tagarr.notify.interface import Notifier
from tagarr.registry.client import RadarrClient
from tagarr.registry.interface import LabelRegistry
from tagarr.rules.editor import RuleFileEditor
from tagarr.rules.loader import load_rules
from tagarr.rules.models import RuleSet
from tagarr.workflow.classification import ItemClassifier

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Everything a batch run or event needs, built once per invocation."""

    config: TagarrConfig
    primary: LabelRegistry
    secondary: LabelRegistry | None = None
    analyzer: MediaAnalyzer | None = None
    rules: RuleSet = field(default_factory=RuleSet)
    notifier: Notifier | None = None
    rule_editor: RuleFileEditor | None = None
    _closables: list[Any] = field(default_factory=list, repr=False)

    def build_classifier(self, *, discovery: bool | None = None) -> ItemClassifier:
        """Create a classifier for one run.

        Args:
            discovery: Override for discovery; defaults to the config.
        """
        config = self.config
        hdr = None
        if config.hdr.enabled and self.analyzer is not None:
            hdr = HdrClassifier(config.hdr, self.analyzer)

        release_groups = None
        engine = None
        if config.release_groups.enabled:
            release_groups = ReleaseGroupClassifier(
                self.rules.active, config.quality, config.audio
            )
            use_discovery = config.discovery.enabled if discovery is None else discovery
            if use_discovery:
                engine = DiscoveryEngine(
                    self.rules.known_tokens, config.quality, config.audio
                )

        return ItemClassifier(hdr=hdr, release_groups=release_groups, discovery=engine)

    def disable_secondary(self, reason: str) -> None:
        if self.secondary is not None:
            logger.warning(
                "Secondary sync disabled: %s unavailable: %s", self.secondary.name, reason
            )
            self.secondary = None

    def close(self) -> None:
        for closable in self._closables:
            closable.close()
        self._closables.clear()

    def __enter__(self) -> Runtime:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def build_runtime(
    config: TagarrConfig, categories: Sequence[str] = ()
) -> Runtime:
    """Create clients, analyzer, rules and notifier from configuration.

    Args:
        config: Validated configuration.
        categories: Restrict release-group tagging to these categories.

    Raises:
        ConfigurationError: If the rule file is invalid, a selected
            category does not exist, or a category collides with an HDR tag.
    """
    if config.primary is None:
        raise ConfigurationError("Primary Radarr url and api_key are not set")

    primary = RadarrClient(config.primary)
    runtime = Runtime(config=config, primary=primary, _closables=[primary])

    if config.sync_enabled and config.secondary is not None:
        secondary = RadarrClient(config.secondary)
        runtime.secondary = secondary
        runtime._closables.append(secondary)

    if config.hdr.enabled:
        runtime.analyzer = DoviToolAnalyzer(config.analyzer)

    if config.release_groups.enabled and config.release_groups.rules_file is not None:
        rules_file = config.release_groups.rules_file
        rules = load_rules(rules_file)
        if categories:
            rules = rules.select(list(categories))
        if config.hdr.enabled:
            _check_collisions(rules)
        runtime.rules = rules
        runtime.rule_editor = RuleFileEditor(rules_file)
        logger.debug(
            "Loaded %d active release-group rule(s) from %s",
            len(rules.active),
            rules_file,
        )
    elif categories:
        raise ConfigurationError("--category requires release-group tagging")

    if config.discord.enabled and config.discord.webhook_url:
        notifier = DiscordNotifier(config.discord.webhook_url)
        runtime.notifier = notifier
        runtime._closables.append(notifier)

    return runtime


def _check_collisions(rules: RuleSet) -> None:
    clashes = sorted(set(rules.categories) & set(HDR_LABELS))
    if clashes:
        raise ConfigurationError(
            f"Release-group categories clash with HDR tags: {', '.join(clashes)}"
        )

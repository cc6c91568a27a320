"""HDR and Dolby Vision classification.

The base dynamic-range format comes from Radarr's media info. Files that
advertise Dolby Vision are confirmed by reading the RPU metadata with the
media analyzer, which also yields the DV profile and content-mapping
version.

Tags are organised in groups that can be switched off independently. A
disabled group never receives tags; every tag in it is desired absent so
the reconciler strips it from the library.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

from tagarr.analyzer.interface import AnalysisFailure, MediaAnalyzer
from tagarr.classify.matchers import matches
from tagarr.config.models import ConfigurationError, HdrConfig
from tagarr.registry.models import Item

logger = logging.getLogger(__name__)


class TagGroup(enum.Enum):
    """Independently switchable HDR tag groups."""

    FORMATS = "formats"
    NO_DV = "no_dv"
    PROFILE = "profile"
    PROFILE8 = "profile8"
    CM = "cm"


BASE_FORMATS = ("sdr", "pq", "hdr10", "hdr10plus")

GROUP_LABELS: dict[TagGroup, tuple[str, ...]] = {
    TagGroup.FORMATS: (*BASE_FORMATS, "dv"),
    TagGroup.NO_DV: ("no-dv",),
    TagGroup.PROFILE: ("mel", "fel"),
    TagGroup.PROFILE8: ("dvprofile8",),
    TagGroup.CM: ("cm2", "cm4"),
}

HDR_LABELS: tuple[str, ...] = tuple(
    label for labels in GROUP_LABELS.values() for label in labels
)

_LABEL_GROUPS = {
    label: group for group, labels in GROUP_LABELS.items() for label in labels
}

_DV_INDICATOR = re.compile(r"DV|Dolby", re.IGNORECASE)
_HDR10_PLUS = re.compile(r"HDR10Plus|HDR10\+", re.IGNORECASE)
_HDR10 = re.compile(r"^HDR10$|HDR10[^P+]| HDR10", re.IGNORECASE)
_PQ = re.compile(r"^HDR|PQ", re.IGNORECASE)

_PROFILE_7 = re.compile(r"Profile: 7")
_PROFILE_8 = re.compile(r"Profile: 8")
_CM_V4 = re.compile(r"CM v4\.", re.IGNORECASE)


def group_of(label: str) -> TagGroup:
    """Return the group a tag belongs to.

    Raises:
        ConfigurationError: If the tag is not an HDR tag.
    """
    try:
        return _LABEL_GROUPS[label]
    except KeyError:
        raise ConfigurationError(f"Unknown HDR tag: {label}") from None


def group_enabled(group: TagGroup, config: HdrConfig) -> bool:
    return bool(getattr(config, group.value))


def base_format(dynamic_range_type: str) -> str:
    """Map Radarr's videoDynamicRangeType to a base format tag.

    Checks run most-specific first: HDR10+ before HDR10, HDR10 before the
    generic PQ catch-all. Empty or unrecognised values are SDR.
    """
    if not dynamic_range_type:
        return "sdr"
    if _HDR10_PLUS.search(dynamic_range_type):
        return "hdr10plus"
    if _HDR10.search(dynamic_range_type):
        return "hdr10"
    if _PQ.search(dynamic_range_type):
        return "pq"
    return "sdr"


def has_dv_indicator(dynamic_range_type: str) -> bool:
    return bool(dynamic_range_type) and bool(_DV_INDICATOR.search(dynamic_range_type))


def parse_profile(summary: str) -> str | None:
    """Return "fel", "mel", "dvprofile8" or None for an RPU summary."""
    if _PROFILE_7.search(summary):
        return "fel" if matches(summary, "FEL") else "mel"
    if _PROFILE_8.search(summary):
        return "dvprofile8"
    return None


def parse_cm(summary: str) -> str:
    """Return the content-mapping tag for an RPU summary.

    Anything without a CM v4.x marker is reported as cm2, including
    summaries that carry no CM version at all.
    """
    if _CM_V4.search(summary):
        return "cm4"
    return "cm2"


@dataclass
class HdrDecision:
    """Desired HDR tags for one movie.

    ``desired`` only holds tags the classifier has an opinion on; a movie
    without a file gets opinions for disabled groups only.
    """

    desired: dict[str, bool] = field(default_factory=dict)
    base_format: str | None = None
    dv_indicated: bool = False
    dv_confirmed: bool = False
    profile: str | None = None
    cm: str | None = None
    analysis_error: str | None = None

    @property
    def present(self) -> list[str]:
        """Tags desired present, in group order."""
        return [label for label in HDR_LABELS if self.desired.get(label)]

    def trail(self) -> str:
        """One-line description for the debug trail."""
        if self.base_format is None:
            return "HDR: no file"
        parts = [f"HDR: {self.base_format}"]
        if self.dv_indicated:
            if self.dv_confirmed:
                parts.append(f"DV {self.profile or 'unknown profile'} {self.cm}")
            else:
                parts.append(f"DV unconfirmed ({self.analysis_error})")
        parts.append(f"-> {', '.join(self.present) or 'none'}")
        return " ".join(parts)


class HdrClassifier:
    """Computes desired HDR tags for movies."""

    def __init__(self, config: HdrConfig, analyzer: MediaAnalyzer) -> None:
        self._config = config
        self._analyzer = analyzer

    def classify(self, item: Item) -> HdrDecision:
        """Classify one movie.

        The analyzer is only invoked when Radarr reports Dolby Vision. An
        analyzer failure is not fatal: the movie is treated as non-DV.
        """
        if not item.has_file:
            decision = HdrDecision()
            self._apply_disabled_groups(decision)
            return decision

        dr_type = item.dynamic_range_type
        decision = HdrDecision(
            base_format=base_format(dr_type),
            dv_indicated=has_dv_indicator(dr_type),
        )

        if decision.dv_indicated:
            self._confirm_dv(item, decision)

        self._assign(decision)
        self._apply_disabled_groups(decision)
        return decision

    def _confirm_dv(self, item: Item, decision: HdrDecision) -> None:
        try:
            summary = self._analyzer.extract_profile_summary(item.file_path)
        except AnalysisFailure as e:
            decision.analysis_error = str(e)
            logger.warning("Dolby Vision analysis failed: %s", e)
            return

        decision.dv_confirmed = True
        decision.profile = parse_profile(summary)
        decision.cm = parse_cm(summary)
        if decision.profile is None:
            logger.info("Dolby Vision profile is neither 7 nor 8, no profile tag")

    def _assign(self, decision: HdrDecision) -> None:
        confirmed = decision.dv_confirmed
        suppress_base = confirmed and self._config.dv_supersedes_hdr
        desired = decision.desired

        for label in BASE_FORMATS:
            desired[label] = label == decision.base_format and not suppress_base
        desired["dv"] = confirmed
        desired["no-dv"] = not confirmed
        for label in ("mel", "fel", "dvprofile8"):
            desired[label] = confirmed and decision.profile == label
        for label in ("cm2", "cm4"):
            desired[label] = confirmed and decision.cm == label

    def _apply_disabled_groups(self, decision: HdrDecision) -> None:
        for group, labels in GROUP_LABELS.items():
            if not group_enabled(group, self._config):
                for label in labels:
                    decision.desired[label] = False

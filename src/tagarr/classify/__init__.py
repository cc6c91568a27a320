"""Movie classifiers: HDR / Dolby Vision, release groups and discovery."""

from tagarr.classify.discovery import (
    DiscoveryCandidate,
    DiscoveryEngine,
    DiscoverySighting,
)
from tagarr.classify.hdr import (
    HDR_LABELS,
    HdrClassifier,
    HdrDecision,
    TagGroup,
)
from tagarr.classify.matchers import (
    AudioFilter,
    FilterVerdict,
    MatchLocation,
    QualityFilter,
    match_fields,
    matches,
)
from tagarr.classify.release_group import (
    ReleaseGroupClassifier,
    RemovalReason,
    RuleDecision,
)

__all__ = [
    "AudioFilter",
    "DiscoveryCandidate",
    "DiscoveryEngine",
    "DiscoverySighting",
    "FilterVerdict",
    "HDR_LABELS",
    "HdrClassifier",
    "HdrDecision",
    "MatchLocation",
    "QualityFilter",
    "ReleaseGroupClassifier",
    "RemovalReason",
    "RuleDecision",
    "TagGroup",
    "match_fields",
    "matches",
]

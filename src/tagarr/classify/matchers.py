"""Pattern matching for release names.

Release-group tokens, quality sources and audio formats are all found by
whole-word, case-insensitive matching: a token only counts when it is
bounded by a non-alphanumeric character or the ends of the text, so
"FLUX" does not match inside "FLUXCAPACITOR".
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from functools import lru_cache
from re import Pattern

from tagarr.config.models import AudioFilterConfig, QualityFilterConfig
from tagarr.registry.models import Item

_LEFT = r"(?<![a-z0-9])"
_RIGHT = r"(?![a-z0-9])"


def _word(pattern: str) -> Pattern[str]:
    return re.compile(f"{_LEFT}(?:{pattern}){_RIGHT}", re.IGNORECASE)


def _prefix(pattern: str) -> Pattern[str]:
    # Left boundary only; the pattern supplies its own trailing separator.
    return re.compile(f"{_LEFT}(?:{pattern})", re.IGNORECASE)


@lru_cache(maxsize=512)
def _token_pattern(token: str) -> Pattern[str]:
    return _word(re.escape(token))


def matches(haystack: str | None, token: str) -> bool:
    """Check whether token occurs in haystack as a whole word.

    Args:
        haystack: Text to search. None or empty never matches.
        token: Literal token (regex metacharacters are escaped).

    Returns:
        True if the token is present with non-alphanumeric boundaries.
    """
    if not haystack or not token:
        return False
    return _token_pattern(token).search(haystack) is not None


class MatchLocation(enum.Enum):
    """Item field a release-group token was found in."""

    RELEASE_GROUP = "releaseGroup"
    SCENE_NAME = "sceneName"
    RELATIVE_PATH = "relativePath"


def match_fields(item: Item, token: str) -> MatchLocation | None:
    """Find token in the item's release fields.

    Fields are checked in priority order (release group, scene name,
    relative path); the first field that matches wins.

    Returns:
        The matching field, or None if the token is absent from all three.
    """
    candidates = (
        (MatchLocation.RELEASE_GROUP, item.release_group),
        (MatchLocation.SCENE_NAME, item.scene_name),
        (MatchLocation.RELATIVE_PATH, item.relative_path),
    )
    for location, value in candidates:
        if matches(value, token):
            return location
    return None


def filter_text(item: Item) -> str:
    """Combined lowercase text the quality and audio filters inspect."""
    return f"{item.relative_path} {item.scene_name} {item.release_group}".lower()


@dataclass(frozen=True)
class FilterVerdict:
    """Outcome of a quality or audio filter with a human-readable detail."""

    passed: bool
    detail: str


# Quality sources
_MA_WEBDL = _prefix(r"ma[._-]web(?:[-.]?dl)?[._-]")
_PLAY_WEBDL = _prefix(r"play[._-]web(?:[-.]?dl)?[._-]")
_AMZN_WEB = _prefix(r"amzn[._-]web")
_NF_WEB = _prefix(r"nf[._-]web")
_ANY_WEB = _prefix(r"web")

# Audio formats
_AUDIO_VETO = _word(r"upmix|encode|transcode|lossy|converted|re-?encode")
_TRUEHD = _word(r"truehd")
_ATMOS = _word(r"atmos")
_DTS_X = _word(r"dts[._-]?x")
_DTS_HD_MA = _word(r"dts[._-]?hd[._-]?ma")
_EAC3 = re.compile(rf"{_LEFT}eac3{_RIGHT}|{_LEFT}dd\+", re.IGNORECASE)
_AAC = _word(r"aac")
_AC3 = _word(r"ac3")


class QualityFilter:
    """Requires a premium WEB-DL source (MA and/or Play, per config)."""

    def __init__(self, config: QualityFilterConfig) -> None:
        self._config = config

    def check(self, text: str) -> FilterVerdict:
        """Evaluate the quality filter against combined release text."""
        if not self._config.enabled:
            return FilterVerdict(True, "Quality filter disabled")

        if self._config.ma_webdl and _MA_WEBDL.search(text):
            return FilterVerdict(True, "MA WEB-DL")
        if self._config.play_webdl and _PLAY_WEBDL.search(text):
            return FilterVerdict(True, "Play WEB-DL")

        return FilterVerdict(False, self._failure_detail(text))

    @staticmethod
    def _failure_detail(text: str) -> str:
        if _AMZN_WEB.search(text):
            return "AMZN (not MA/Play)"
        if _NF_WEB.search(text):
            return "Netflix (not MA/Play)"
        if _ANY_WEB.search(text):
            return "Plain WEB-DL (no MA/Play prefix)"
        return "No WEB-DL source"


class AudioFilter:
    """Requires lossless audio and rejects anything marked as re-encoded."""

    def __init__(self, config: AudioFilterConfig) -> None:
        self._config = config

    def check(self, text: str) -> FilterVerdict:
        """Evaluate the audio filter against combined release text."""
        if not self._config.enabled:
            return FilterVerdict(True, "Audio filter disabled")

        if _AUDIO_VETO.search(text):
            return FilterVerdict(False, "Re-encoded audio")

        if _TRUEHD.search(text):
            has_atmos = _ATMOS.search(text) is not None
            if has_atmos and self._config.truehd_atmos:
                return FilterVerdict(True, "TrueHD Atmos")
            if not has_atmos and self._config.truehd:
                return FilterVerdict(True, "TrueHD")
        if self._config.dts_x and _DTS_X.search(text):
            return FilterVerdict(True, "DTS-X")
        if self._config.dts_hd_ma and _DTS_HD_MA.search(text):
            return FilterVerdict(True, "DTS-HD.MA")

        return FilterVerdict(False, self._failure_detail(text))

    @staticmethod
    def _failure_detail(text: str) -> str:
        if _EAC3.search(text):
            return "EAC3/DD+ (lossy)"
        if _AAC.search(text):
            return "AAC (lossy)"
        if _AC3.search(text):
            return "AC3 (lossy)"
        return "No lossless audio"

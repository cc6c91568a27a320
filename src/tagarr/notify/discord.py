"""Discord webhook notifications.

Payload builders are plain functions returning webhook JSON, so the
workflow decides what to send and DiscordNotifier only delivers it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

import httpx

from tagarr.core.formatting import chunk_lines

logger = logging.getLogger(__name__)

ORANGE = 16753920
GOLD = 16766720
GREEN = 5763719
PURPLE = 10181046

# Movies per title-list embed
TITLES_PER_EMBED = 50

# Characters of list text per plain message, leaving room for formatting
MAX_TEXT_CHARS = 1800

SECONDARY_MARK = " ✓"


class DiscordNotifier:
    """Posts payloads to a Discord webhook.

    Implements the Notifier protocol.
    """

    def __init__(self, webhook_url: str, timeout: float = 10) -> None:
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> DiscordNotifier:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send(self, payload: dict[str, Any]) -> bool:
        """Post one payload. Failures are logged, never raised."""
        try:
            response = self._get_client().post(self._webhook_url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("Discord notification failed: %s", e)
            return False

        if response.status_code not in (200, 204):
            logger.warning("Discord notification failed (HTTP %d)", response.status_code)
            return False
        return True


def _footer(now: datetime, prefix: str = "Tagarr") -> dict[str, str]:
    return {"text": f"{prefix} • {now.strftime('%d-%m-%Y %H:%M')}"}


def _timestamp(now: datetime) -> str:
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def _counts(tagged: int, untagged: int) -> str:
    return f"Tagged: {tagged}\nUntagged: {untagged}"


def summary_payload(
    *,
    version: str,
    primary_name: str,
    primary_counts: tuple[int, int],
    secondary_name: str | None,
    secondary_counts: tuple[int, int],
    runtime: str,
    dry_run: bool,
    now: datetime,
) -> dict[str, Any]:
    """End-of-run summary embed.

    Args:
        primary_counts: (tagged, untagged) on the primary instance.
        secondary_counts: (tagged, untagged) on the secondary instance;
            ignored when secondary_name is None.
        runtime: Formatted run duration.
    """
    fields = [
        {
            "name": f"Primary ({primary_name})",
            "value": _counts(*primary_counts),
            "inline": True,
        }
    ]
    if secondary_name is not None:
        fields.append(
            {
                "name": f"Secondary ({secondary_name})",
                "value": _counts(*secondary_counts),
                "inline": True,
            }
        )
    fields.append(
        {
            "name": "Runtime",
            "value": f"Completed in {runtime} | Dry-run: {str(dry_run).lower()}",
            "inline": False,
        }
    )
    return {
        "embeds": [
            {
                "title": f"Tagarr v{version}",
                "color": ORANGE,
                "fields": fields,
                "footer": _footer(now),
                "timestamp": _timestamp(now),
            }
        ]
    }


def discovery_payload(
    groups: Sequence[tuple[str, int]], *, dry_run: bool, now: datetime
) -> dict[str, Any]:
    """Discovered release groups embed.

    Args:
        groups: (display name, movie count) pairs.
    """
    total = sum(count for _, count in groups)
    listing = "".join(f"{name:<20} {count} movies\n" for name, count in sorted(groups))
    note = (
        "_Dry-run: not written to rule file_"
        if dry_run
        else "_Written to rule file (disabled, for review)_"
    )
    return {
        "embeds": [
            {
                "title": f"Discovered: {len(groups)} groups | {total} movies",
                "description": f"```\n{listing}```{note}",
                "color": GOLD,
                "footer": _footer(now),
                "timestamp": _timestamp(now),
            }
        ]
    }


def title_list_payloads(
    heading: str,
    groups: Sequence[tuple[str, Sequence[str]]],
    *,
    color: int,
) -> list[dict[str, Any]]:
    """Movie titles grouped by release group, one embed per 50 titles.

    The first embed of each group is titled with the group's display name;
    the very first message also carries the heading.

    Args:
        heading: e.g. "Tagged Movies".
        groups: (display name, titles) pairs in rule order. Empty groups
            are skipped.
        color: Embed color.
    """
    payloads: list[dict[str, Any]] = []
    for display_name, titles in groups:
        for start in range(0, len(titles), TITLES_PER_EMBED):
            chunk = titles[start : start + TITLES_PER_EMBED]
            description = "```\n" + "".join(f"{t}\n" for t in chunk) + "```"
            payloads.append(
                {
                    "content": f"**{heading}:**" if not payloads else "",
                    "embeds": [
                        {
                            "title": f"🎬 {display_name}" if start == 0 else "",
                            "description": description,
                            "color": color,
                        }
                    ],
                }
            )
    return payloads


def text_payloads(heading: str, lines: Sequence[str]) -> list[dict[str, Any]]:
    """Plain code-block messages, split at line boundaries."""
    chunks = chunk_lines(list(lines), MAX_TEXT_CHARS)
    payloads = []
    for number, chunk in enumerate(chunks, start=1):
        label = f"**{heading}:**" if len(chunks) == 1 else f"**{heading}:** (part {number})"
        payloads.append({"content": f"{label}\n```\n{chunk}```"})
    return payloads


def connection_test_payload(
    *, version: str, status: str, discovery_enabled: bool, now: datetime
) -> dict[str, Any]:
    """Embed sent for Radarr's connection test event."""
    return {
        "embeds": [
            {
                "title": f"Tagarr Import v{version} - Test OK",
                "color": ORANGE,
                "fields": [
                    {"name": "Status", "value": status, "inline": True},
                    {
                        "name": "Discovery",
                        "value": str(discovery_enabled).lower(),
                        "inline": True,
                    },
                ],
                "footer": _footer(now, "Tagarr Import"),
                "timestamp": _timestamp(now),
            }
        ]
    }


def item_payload(
    *,
    title: str,
    tagged_in: Sequence[str],
    tags: Sequence[str],
    event_type: str,
    filename: str,
    discovered: str | None,
    poster_url: str | None,
    now: datetime,
) -> dict[str, Any]:
    """Embed for a single imported movie.

    Args:
        title: Display title, e.g. "Dune (2021)".
        tagged_in: Instance names that now carry the tags (empty if none).
        tags: Tags added or kept on the movie.
        discovered: Display name of a newly discovered group, if any.
    """
    if tags and discovered:
        heading, color = f"Tagged + Discovered - {title}", ORANGE
    elif discovered:
        heading, color = f"Discovered - {title}", GOLD
    else:
        heading, color = f"Tagged - {title}", ORANGE

    fields = [
        {
            "name": "Tagged in",
            "value": " + ".join(tagged_in) if tagged_in else "None",
            "inline": False,
        },
        {"name": "Tags Applied", "value": ", ".join(tags) or "None", "inline": True},
        {"name": "Event", "value": event_type, "inline": True},
        {"name": "Filename", "value": filename or "Unknown", "inline": False},
    ]
    if discovered:
        fields.append(
            {
                "name": "Discovered Group",
                "value": f"{discovered} - added to rule file",
                "inline": False,
            }
        )

    embed: dict[str, Any] = {
        "title": heading,
        "color": color,
        "fields": fields,
        "footer": _footer(now, "Tagarr Import"),
        "timestamp": _timestamp(now),
    }
    if poster_url:
        embed["thumbnail"] = {"url": poster_url}
    return {"embeds": [embed]}

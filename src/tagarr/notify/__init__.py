"""Run notifications."""

from tagarr.notify.discord import (
    GOLD,
    GREEN,
    ORANGE,
    PURPLE,
    DiscordNotifier,
    discovery_payload,
    item_payload,
    summary_payload,
    connection_test_payload,
    text_payloads,
    title_list_payloads,
)
from tagarr.notify.interface import Notifier

__all__ = [
    "GOLD",
    "GREEN",
    "ORANGE",
    "PURPLE",
    "DiscordNotifier",
    "Notifier",
    "discovery_payload",
    "item_payload",
    "summary_payload",
    "connection_test_payload",
    "text_payloads",
    "title_list_payloads",
]

"""Protocol for run notifications."""

from __future__ import annotations

from typing import Any, Protocol


class Notifier(Protocol):
    """Posts a prepared message payload somewhere a human will see it.

    Delivery is best-effort: implementations log failures and return False
    instead of raising.
    """

    def send(self, payload: dict[str, Any]) -> bool:
        """Send one message. Returns True if it was accepted."""
        ...

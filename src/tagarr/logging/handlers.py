"""JSON log output for Tagarr.

One object per line, for log shippers. Only the context fields Tagarr
itself attaches are carried over; anything else passed in ``extra`` is
left to the text format.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Passed via extra= by the rule editor and the subprocess wrapper
EXTRA_FIELDS = (
    "rules_path",
    "categories",
    "command",
    "returncode",
    "timeout_seconds",
    "elapsed_seconds",
)


class JSONFormatter(logging.Formatter):
    """Render a record as ``{"ts", "level", "logger", "msg", ...}``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        item_id = getattr(record, "item_id", None)
        if item_id is not None:
            # Set by ItemContextFilter
            entry["item"] = {"id": item_id}
            title = getattr(record, "item_title", None)
            if title:
                entry["item"]["title"] = title

        fields = {
            key: getattr(record, key)
            for key in EXTRA_FIELDS
            if getattr(record, key, None) is not None
        }
        if fields:
            entry["fields"] = fields

        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)

"""Movie context for structured logging.

Tracks the movie currently being classified so every log record emitted
while it is processed carries its id, without passing it to every call.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_item_id: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "item_id", default=None
)
_item_title: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "item_title", default=None
)


@contextmanager
def item_context(
    item_id: int, title: str | None = None
) -> Generator[None, None, None]:
    """Context manager for per-movie processing context.

    Example:
        with item_context(42, "Dune (2021)"):
            logger.info("Classifying")  # "[M42] ..." in text logs
    """
    id_token = _item_id.set(item_id)
    title_token = _item_title.set(title)
    try:
        yield
    finally:
        _item_id.reset(id_token)
        _item_title.reset(title_token)


def get_item_context() -> tuple[int | None, str | None]:
    """Get current movie context as (item_id, title)."""
    return _item_id.get(), _item_title.get()


class ItemContextFilter(logging.Filter):
    """Logging filter that injects movie context into log records.

    Adds item_id, item_title and item_tag attributes. item_tag is
    "[M42] " when a movie is in context and "" otherwise, so the text
    format string can always reference it.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        item_id, title = get_item_context()
        record.item_id = item_id
        record.item_title = title
        record.item_tag = f"[M{item_id}] " if item_id is not None else ""
        return True

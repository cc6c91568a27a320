"""Logging setup for Tagarr."""

from tagarr.logging.config import configure_logging
from tagarr.logging.context import ItemContextFilter, get_item_context, item_context
from tagarr.logging.handlers import JSONFormatter

__all__ = [
    "ItemContextFilter",
    "JSONFormatter",
    "configure_logging",
    "get_item_context",
    "item_context",
]

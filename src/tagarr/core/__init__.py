"""Shared utilities."""

from tagarr.core.formatting import chunk_lines, format_duration, format_title
from tagarr.core.subprocess_utils import run_command

__all__ = ["chunk_lines", "format_duration", "format_title", "run_command"]

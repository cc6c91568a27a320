"""Display formatting helpers shared by the CLI, summaries and notifications."""

from __future__ import annotations


def format_duration(seconds: float) -> str:
    """Format a run duration.

    Args:
        seconds: Elapsed seconds.

    Returns:
        Formatted string (e.g., "1h 2m 3s", "4m 5s", "6s").
    """
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_title(title: str, year: int | None) -> str:
    """Format a movie title with its year, e.g. "Dune (2021)"."""
    if year:
        return f"{title} ({year})"
    return title


def chunk_lines(lines: list[str], max_chars: int) -> list[str]:
    """Join lines into newline-terminated chunks of at most max_chars.

    A single line longer than max_chars becomes its own chunk.

    Args:
        lines: Lines to pack.
        max_chars: Maximum characters per chunk.

    Returns:
        List of chunks, each ending in a newline.
    """
    chunks: list[str] = []
    current = ""
    for line in lines:
        candidate = f"{current}{line}\n"
        if len(candidate) > max_chars and current:
            chunks.append(current)
            current = f"{line}\n"
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks

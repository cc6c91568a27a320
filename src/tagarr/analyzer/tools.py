"""Detection of the external tools used for Dolby Vision analysis."""

from __future__ import annotations

import enum
import logging
import re
import shutil
import subprocess  # nosec B404 - needed to catch TimeoutExpired
from dataclasses import dataclass
from pathlib import Path

from tagarr.core.subprocess_utils import run_command

logger = logging.getLogger(__name__)

# Timeout for version checks
DETECTION_TIMEOUT = 10

_VERSION_PATTERNS = {
    "ffmpeg": r"ffmpeg version (\S+)",
    "dovi_tool": r"dovi_tool (\S+)",
}


class ToolStatus(enum.Enum):
    """Availability of an external tool."""

    AVAILABLE = "available"
    MISSING = "missing"
    ERROR = "error"


@dataclass
class ToolInfo:
    """Detection result for one tool."""

    name: str
    status: ToolStatus
    path: Path | None = None
    version: str | None = None
    status_message: str | None = None

    @property
    def is_available(self) -> bool:
        return self.status is ToolStatus.AVAILABLE


def find_tool(name: str, configured_path: Path | None = None) -> Path | None:
    """Find a tool executable.

    Args:
        name: Tool name (e.g., "dovi_tool").
        configured_path: Optional configured path override.

    Returns:
        Path to tool executable, or None if not found.
    """
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", name, configured_path
        )

    which_result = shutil.which(name)
    if which_result:
        return Path(which_result)

    return None


def detect_tool(name: str, configured_path: Path | None = None) -> ToolInfo:
    """Locate a tool and read its version.

    Args:
        name: "ffmpeg" or "dovi_tool".
        configured_path: Optional configured path override.

    Returns:
        ToolInfo describing the tool's availability.
    """
    path = find_tool(name, configured_path)
    if path is None:
        return ToolInfo(
            name=name,
            status=ToolStatus.MISSING,
            status_message=f"{name} not found in PATH",
        )

    flag = "-version" if name == "ffmpeg" else "--version"
    try:
        stdout, stderr, rc = run_command([path, flag], timeout=DETECTION_TIMEOUT)
    except (subprocess.TimeoutExpired, OSError) as e:
        return ToolInfo(
            name=name, status=ToolStatus.ERROR, path=path, status_message=str(e)
        )

    if rc != 0:
        return ToolInfo(
            name=name,
            status=ToolStatus.ERROR,
            path=path,
            status_message=f"Failed to get {name} version: {stderr.strip()}",
        )

    version = None
    pattern = _VERSION_PATTERNS.get(name)
    if pattern and (match := re.search(pattern, stdout)):
        version = match.group(1)

    return ToolInfo(name=name, status=ToolStatus.AVAILABLE, path=path, version=version)

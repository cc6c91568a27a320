"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (config, rules, input)
    30-39: Tool/dependency errors
    40-49: Operation errors
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for tagarr CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2

    # Validation errors (10-19)
    CONFIG_ERROR = 11
    UNKNOWN_EVENT = 13

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30
    REGISTRY_UNAVAILABLE = 31

    # Operation errors (40-49)
    OPERATION_FAILED = 40

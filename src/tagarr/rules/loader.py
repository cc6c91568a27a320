"""Rule file loading and validation.

This module provides functions to load the YAML rule file and validate
it using Pydantic models.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tagarr.rules.models import SCHEMA_VERSION, RuleFileModel, RuleSet, RuleValidationError


def load_rules(rules_path: Path) -> RuleSet:
    """Load and validate release-group rules from a YAML file.

    Args:
        rules_path: Path to the YAML rule file.

    Returns:
        Validated RuleSet.

    Raises:
        RuleValidationError: If the file is missing or invalid.
    """
    if not rules_path.exists():
        raise RuleValidationError(f"Rule file not found: {rules_path}")

    try:
        with open(rules_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RuleValidationError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        return RuleSet()

    if not isinstance(data, dict):
        raise RuleValidationError("Rule file must be a YAML mapping")

    return load_rules_from_dict(data)


def load_rules_from_dict(data: dict[str, Any]) -> RuleSet:
    """Load and validate rules from a dictionary.

    Raises:
        RuleValidationError: If the rule data is invalid.
    """
    schema_version = data.get("schema_version", SCHEMA_VERSION)
    if schema_version != SCHEMA_VERSION:
        raise RuleValidationError(
            f"Only schema_version {SCHEMA_VERSION} is supported, got {schema_version}"
        )

    try:
        model = RuleFileModel.model_validate(data)
    except ValidationError as e:
        raise RuleValidationError(_format_validation_error(e)) from e

    return RuleSet(rules=tuple(model.release_groups))


def _format_validation_error(error: ValidationError) -> str:
    """Format a Pydantic validation error into a user-friendly message."""
    errors = error.errors()
    if errors:
        first_error = errors[0]
        loc = ".".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", str(error))
        if loc:
            return f"Rule validation failed: {loc}: {msg}"
        return f"Rule validation failed: {msg}"
    return f"Rule validation failed: {error}"

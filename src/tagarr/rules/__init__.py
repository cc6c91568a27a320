"""Release-group rule file: models, loading and round-trip editing."""

from tagarr.rules.editor import RuleFileEditor
from tagarr.rules.loader import load_rules, load_rules_from_dict
from tagarr.rules.models import (
    CategoryRule,
    RuleFileModel,
    RuleMode,
    RuleSet,
    RuleValidationError,
)

__all__ = [
    "CategoryRule",
    "RuleFileEditor",
    "RuleFileModel",
    "RuleMode",
    "RuleSet",
    "RuleValidationError",
    "load_rules",
    "load_rules_from_dict",
]

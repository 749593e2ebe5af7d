"""Boilerplate filtering (safe and aggressive passes)."""

from .boilerplate import BoilerplateFilter, FilterReport
from .rules import AGGRESSIVE_RULES, ALLOWED_ATTRIBUTES, CODE_DOCS_RULES, SAFE_RULES

__all__ = [
    "BoilerplateFilter",
    "FilterReport",
    # Rule lists
    "AGGRESSIVE_RULES",
    "ALLOWED_ATTRIBUTES",
    "CODE_DOCS_RULES",
    "SAFE_RULES",
]

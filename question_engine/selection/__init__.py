"""
Selection Module - Which question style comes next.

Components:
- patterns: Base prompt patterns per style
- targets: Target distribution resolution (objective > exam > default)
- selector: Deterministic deficit-based PatternSelector
"""

from question_engine.selection.patterns import QUESTION_PATTERNS, StylePattern, get_pattern
from question_engine.selection.selector import PatternSelector, SelectorConfig
from question_engine.selection.targets import BUILTIN_EXAM_DISTRIBUTIONS, TargetResolver

__all__ = [
    "QUESTION_PATTERNS",
    "StylePattern",
    "get_pattern",
    "PatternSelector",
    "SelectorConfig",
    "BUILTIN_EXAM_DISTRIBUTIONS",
    "TargetResolver",
]

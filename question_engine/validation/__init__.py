"""
Validation Module - Does a generated question match its intended style?

Components:
- text_features: Regex-based sentence, data point and actor detection
- validator: QuestionValidator score model and verdicts
- similarity: Near-duplicate and repetitive-pattern detection
"""

from question_engine.validation.similarity import QuestionSimilarityDetector, SimilarityMatch
from question_engine.validation.validator import (
    IssueCategory,
    QuestionForValidation,
    QuestionValidator,
    Severity,
    ValidationIssue,
    ValidationVerdict,
    ValidatorConfig,
    quick_style_check,
)

__all__ = [
    "QuestionSimilarityDetector",
    "SimilarityMatch",
    "IssueCategory",
    "QuestionForValidation",
    "QuestionValidator",
    "Severity",
    "ValidationIssue",
    "ValidationVerdict",
    "ValidatorConfig",
    "quick_style_check",
]

"""
Core Module - Shared errors and logging setup.

Components:
- errors: Exception hierarchy raised across the engine
- logging: One-time loguru sink configuration for entry points
"""

from question_engine.core.errors import (
    ExamNotFoundError,
    InvalidDistributionError,
    ObjectiveNotFoundError,
    ProfileLookupError,
    QuestionEngineError,
)
from question_engine.core.logging import configure_logging

__all__ = [
    "QuestionEngineError",
    "ProfileLookupError",
    "ExamNotFoundError",
    "ObjectiveNotFoundError",
    "InvalidDistributionError",
    "configure_logging",
]

"""
Exam profiles: the read-only inputs the engine works against.

- models: ExamProfile, ExamObjective, QuestionStyle, TargetDistribution
- registry: ProfileRegistry lookup with JSON loading
- builtin: Sample CFA / AWS / guild profiles
"""

from question_engine.profiles.models import (
    STYLE_PRIORITY,
    CognitiveLevel,
    Difficulty,
    ExamConstraints,
    ExamContext,
    ExamObjective,
    ExamProfile,
    QuestionGenerationSettings,
    QuestionStyle,
    QuestionType,
    StylePreferences,
    TargetDistribution,
    ValidationToggles,
)
from question_engine.profiles.registry import ProfileRegistry, default_registry

__all__ = [
    "STYLE_PRIORITY",
    "CognitiveLevel",
    "Difficulty",
    "ExamConstraints",
    "ExamContext",
    "ExamObjective",
    "ExamProfile",
    "QuestionGenerationSettings",
    "QuestionStyle",
    "QuestionType",
    "StylePreferences",
    "TargetDistribution",
    "ValidationToggles",
    "ProfileRegistry",
    "default_registry",
]

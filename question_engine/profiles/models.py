"""
Exam profile domain models.

Profiles and objectives are owned by an external registry and treated as
immutable for the lifetime of a session, so every model here is frozen.
Validators enforce the invariants the rest of the engine relies on:

- objective weights sum to 100
- target distributions are non-negative and sum to 1.0
"""
from __future__ import annotations

import hashlib
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from question_engine.core.errors import InvalidDistributionError, ObjectiveNotFoundError

DISTRIBUTION_TOLERANCE = 0.01
WEIGHT_TOLERANCE = 0.5


class QuestionStyle(str, Enum):
    """Rhetorical shape of a generated question."""
    DIRECT = "direct"          # Single-sentence factual/conceptual question
    SCENARIO = "scenario"      # Short narrative requiring applied reasoning
    CASE_STUDY = "case_study"  # Multi-paragraph vignette with several data points


# Tie-break order for selection
STYLE_PRIORITY: tuple[QuestionStyle, ...] = (
    QuestionStyle.DIRECT,
    QuestionStyle.SCENARIO,
    QuestionStyle.CASE_STUDY,
)


class CognitiveLevel(str, Enum):
    KNOWLEDGE = "knowledge"
    APPLICATION = "application"
    SYNTHESIS = "synthesis"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    MULTIPLE_RESPONSE = "multiple_response"
    VIGNETTE = "vignette"
    ESSAY = "essay"


class TargetDistribution(BaseModel):
    """Target fraction per question style."""

    model_config = ConfigDict(frozen=True)

    direct: float = 0.0
    scenario: float = 0.0
    case_study: float = 0.0

    @model_validator(mode="after")
    def _check_fractions(self) -> "TargetDistribution":
        values = (self.direct, self.scenario, self.case_study)
        if any(v < 0 for v in values):
            raise ValueError(f"Negative fraction in distribution: {values}")
        total = sum(values)
        if abs(total - 1.0) > DISTRIBUTION_TOLERANCE:
            raise ValueError(f"Distribution fractions must sum to 1.0 (got {total:.3f})")
        return self

    def fraction(self, style: QuestionStyle) -> float:
        return getattr(self, QuestionStyle(style).value)

    def as_dict(self) -> dict[QuestionStyle, float]:
        return {style: self.fraction(style) for style in STYLE_PRIORITY}

    def as_percentages(self) -> dict[str, float]:
        return {style.value: round(self.fraction(style) * 100, 1) for style in STYLE_PRIORITY}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, float]) -> "TargetDistribution":
        """Build from a partial style -> fraction mapping (missing styles are 0)."""
        values = {QuestionStyle(k).value: float(v) for k, v in mapping.items()}
        try:
            return cls(**values)
        except ValidationError as exc:
            raise InvalidDistributionError(str(exc)) from exc

    @classmethod
    def default(cls) -> "TargetDistribution":
        """Global default distribution from settings (60/30/10 unless overridden)."""
        from config import get_settings

        settings = get_settings()
        return cls(
            direct=settings.default_direct_ratio,
            scenario=settings.default_scenario_ratio,
            case_study=settings.default_case_study_ratio,
        )


class StylePreferences(BaseModel):
    """Objective-level overrides for style selection."""

    model_config = ConfigDict(frozen=True)

    distribution: Optional[TargetDistribution] = None
    forbidden_styles: frozenset[QuestionStyle] = Field(default_factory=frozenset)


class ExamObjective(BaseModel):
    """One weighted learning-outcome unit within an exam profile."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    weight: float = Field(..., ge=0, le=100, description="Percentage of exam")
    level: CognitiveLevel = CognitiveLevel.APPLICATION
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    questions_per_session: int = Field(10, ge=0)
    key_topics: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    learning_outcomes: list[str] = Field(default_factory=list)
    style_preferences: Optional[StylePreferences] = None

    @property
    def forbidden_styles(self) -> frozenset[QuestionStyle]:
        if self.style_preferences is None:
            return frozenset()
        return self.style_preferences.forbidden_styles

    def signature(self) -> str:
        """
        Stable short hash of everything that shapes this objective's templates.

        Objectives with the same id/level/difficulty/constraints in sibling
        exams share a signature, which is what lets a family share templates.
        """
        forbidden = ",".join(sorted(s.value for s in self.forbidden_styles))
        raw = f"{self.id}|{self.level.value}|{self.difficulty.value}|{forbidden}"
        return hashlib.sha1(raw.encode("utf-8")).hexdigest()[:12]


class ExamConstraints(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_questions: int = Field(..., ge=1)
    time_minutes: int = Field(..., ge=1)
    option_count: int = Field(4, ge=0)
    passing_score: float = Field(70, ge=0, le=100)


class ExamContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    exam_format: str = ""
    difficulty: str = ""
    focus: str = ""
    calculator_allowed: bool = False
    common_formulas: list[str] = Field(default_factory=list)
    terminology: list[str] = Field(default_factory=list)


class ValidationToggles(BaseModel):
    """Per-exam switches for the question validator."""

    model_config = ConfigDict(frozen=True)

    check_terminology: bool = True
    check_option_count: bool = True
    min_score: Optional[int] = Field(None, ge=0, le=100)


class QuestionGenerationSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    style_distribution: Optional[TargetDistribution] = None
    validation: ValidationToggles = Field(default_factory=ValidationToggles)


class ExamProfile(BaseModel):
    """Static description of a certification exam."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    provider: str = ""
    objectives: list[ExamObjective] = Field(default_factory=list)
    question_types: list[QuestionType] = Field(
        default_factory=lambda: [QuestionType.MULTIPLE_CHOICE]
    )
    constraints: ExamConstraints
    context: ExamContext = Field(default_factory=ExamContext)
    question_generation: Optional[QuestionGenerationSettings] = None

    @field_validator("objectives")
    @classmethod
    def _check_objectives(cls, objectives: list[ExamObjective]) -> list[ExamObjective]:
        if not objectives:
            return objectives

        ids = [o.id for o in objectives]
        duplicates = {i for i in ids if ids.count(i) > 1}
        if duplicates:
            raise ValueError(f"Duplicate objective ids: {sorted(duplicates)}")

        total = sum(o.weight for o in objectives)
        if abs(total - 100) > WEIGHT_TOLERANCE:
            raise ValueError(f"Objective weights must sum to 100 (got {total:g})")
        return objectives

    @property
    def validation(self) -> ValidationToggles:
        if self.question_generation is None:
            return ValidationToggles()
        return self.question_generation.validation

    @property
    def style_distribution(self) -> Optional[TargetDistribution]:
        if self.question_generation is None:
            return None
        return self.question_generation.style_distribution

    def objective(self, objective_id: str) -> ExamObjective:
        """Look up one objective by id."""
        for objective in self.objectives:
            if objective.id == objective_id:
                return objective
        raise ObjectiveNotFoundError(self.id, objective_id)

    def expects_options(self) -> bool:
        """True when questions for this exam are answered by picking options."""
        option_types = {QuestionType.MULTIPLE_CHOICE, QuestionType.MULTIPLE_RESPONSE, QuestionType.VIGNETTE}
        return self.constraints.option_count > 0 and any(t in option_types for t in self.question_types)

"""
Question Validator.

Scores a finished question against the style it was supposed to satisfy.
Rule-based and deterministic; no model calls.

Score model:
- start at 100
- subtract a fixed penalty per issue by severity (high 25, medium 10, low 5)
- floor at 0
- valid when score >= min_score (default 70)

Malformed input (blank text, missing options when the exam expects them, a
payload that is not a question at all) is a quality signal, not an error:
it yields score 0 and an invalid verdict.

Usage:
    validator = QuestionValidator()
    verdict = validator.validate_question(question, QuestionStyle.DIRECT, profile, objective)
    if not verdict.is_valid:
        print(verdict.preview_suggestions())
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from question_engine.profiles.models import ExamObjective, ExamProfile, QuestionStyle
from question_engine.validation.text_features import (
    count_data_points,
    find_actors,
    has_conditional_frame,
    has_named_organisation,
    matched_terms,
    split_sentences,
)


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IssueCategory(str, Enum):
    STYLE = "style"
    CONTENT = "content"
    FORMAT = "format"
    CLARITY = "clarity"


class QuestionForValidation(BaseModel):
    """A generated question as handed back by the text generator."""

    model_config = ConfigDict(frozen=True)

    question: str
    options: list[str] = Field(default_factory=list)
    correct: Optional[int] = None
    explanation: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    severity: Severity
    category: IssueCategory
    description: str
    location: str = "question"  # question, options, explanation


class ValidationVerdict(BaseModel):
    """Pass/fail verdict with score, issues and one rewrite suggestion per issue."""

    is_valid: bool
    score: int = Field(..., ge=0, le=100)
    issues: list[ValidationIssue] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @property
    def high_severity_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == Severity.HIGH)

    def preview_suggestions(self, n: int = 2) -> list[str]:
        return self.suggestions[:n]


@dataclass(frozen=True)
class ValidatorConfig:
    """Score model. Penalties and threshold are calibration defaults."""
    min_score: int = 70
    penalties: Mapping[Severity, int] = field(default_factory=lambda: {
        Severity.HIGH: 25,
        Severity.MEDIUM: 10,
        Severity.LOW: 5,
    })

    @classmethod
    def from_settings(cls, settings=None) -> "ValidatorConfig":
        from config import get_settings

        settings = settings or get_settings()
        return cls(
            min_score=settings.validation_min_score,
            penalties={
                Severity.HIGH: settings.penalty_high,
                Severity.MEDIUM: settings.penalty_medium,
                Severity.LOW: settings.penalty_low,
            },
        )


# =============================================================================
# Rule tables
# =============================================================================

INTERROGATIVE_FOCUS = re.compile(
    r"\b(?:what|which|how|why|who|when|formula|calculate|define|definition|principle|rule)\b",
    re.IGNORECASE,
)

DEFINITION_RECALL = re.compile(
    r"^\s*(?:what\s+(?:is|are)\s+(?:the\s+)?(?:definition|meaning)\s+of"
    r"|define\b"
    r"|which\s+(?:term|statement)\s+(?:best\s+)?(?:defines|describes))",
    re.IGNORECASE,
)

AMBIGUOUS_QUANTIFIERS = re.compile(r"\b(?:some|many|often|usually|sometimes)\b", re.IGNORECASE)
NEGATIONS = re.compile(r"\b(?:not|never|no|none)\b", re.IGNORECASE)

MIN_QUESTION_CHARS = 20
MIN_CASE_STUDY_CHARS = 200
MIN_CASE_STUDY_SENTENCES = 4
MIN_CASE_STUDY_DATA_POINTS = 3
MIN_CASE_STUDY_TERMS = 2
MAX_SCENARIO_SENTENCES = 4

# How to fix each issue. Kept separate from issue descriptions so a UI can
# show "what's wrong" and "how to fix" side by side.
SUGGESTIONS: dict[str, str] = {
    "MALFORMED_QUESTION": "Regenerate the question with non-empty text and a complete option list",
    "DIRECT_NARRATIVE_FRAMING": "Drop the actor and situation; ask about the concept itself, e.g. \"What is the primary difference between X and Y?\"",
    "DIRECT_MULTIPLE_SENTENCES": "Collapse the question into a single sentence",
    "DIRECT_MULTIPLE_DATA_POINTS": "Keep at most one number in the stem, or request a scenario question instead",
    "DIRECT_NO_FOCUS": "Phrase the stem around a definition, formula or principle (\"What...\", \"Which...\", \"How...\")",
    "SCENARIO_DEFINITION_RECALL": "Frame the concept inside a short situation that requires applying it",
    "SCENARIO_NO_SITUATION": "Open with one actor or situation (\"A portfolio has...\", \"An application requires...\")",
    "SCENARIO_NO_DETAIL": "Add a concrete parameter such as a rate, a limit or a condition (\"If...\", \"Given...\")",
    "SCENARIO_TOO_LONG": "Trim the context to 2-3 sentences",
    "SCENARIO_MULTIPLE_ACTORS": "Keep a single actor so the situation stays focused",
    "CASE_STUDY_TOO_SHORT": "Expand the vignette into several paragraphs of interconnected detail",
    "CASE_STUDY_FEW_SENTENCES": "Add setup sentences covering constraints, stakeholders and objectives",
    "CASE_STUDY_FEW_DATA_POINTS": "Include at least three figures the candidate must weigh against each other",
    "CASE_STUDY_FEW_TERMS": "Work more of the exam's own terminology into the vignette",
    "TERMINOLOGY_ABSENT": "Use the exam's terminology for the concept being tested",
    "DUPLICATE_OPTIONS": "Rewrite the repeated answer options so every choice is distinct",
    "TOO_FEW_OPTIONS": "Provide at least two plausible answer options",
    "OPTION_COUNT_MISMATCH": "Match the number of answer options the exam uses",
    "INVALID_CORRECT_INDEX": "Point the correct answer at an existing option",
    "KEY_TOPIC_MISSING": "Anchor the question in one of the objective's key topics",
    "MISSING_QUESTION_MARK": "End the stem with a question mark",
    "TOO_SHORT": "Add enough wording for the question to stand on its own",
    "AMBIGUOUS_LANGUAGE": "Replace vague quantifiers (some, many, often) with precise terms",
    "DOUBLE_NEGATIVE": "Rephrase positively so the stem has at most one negation",
}


class _VerdictBuilder:
    """Accumulates issues and penalties for one validation run."""

    def __init__(self, config: ValidatorConfig):
        self.config = config
        self.score = 100
        self.issues: list[ValidationIssue] = []

    def add(
        self,
        code: str,
        severity: Severity,
        category: IssueCategory,
        description: str,
        location: str = "question",
    ) -> None:
        self.issues.append(ValidationIssue(
            code=code,
            severity=severity,
            category=category,
            description=description,
            location=location,
        ))
        self.score = max(0, self.score - self.config.penalties[severity])

    def build(self, min_score: int) -> ValidationVerdict:
        return ValidationVerdict(
            is_valid=self.score >= min_score,
            score=self.score,
            issues=list(self.issues),
            suggestions=[SUGGESTIONS[issue.code] for issue in self.issues],
        )


QuestionInput = Union[QuestionForValidation, Mapping[str, Any]]


class QuestionValidator:
    """Rule-based style and quality checks for generated questions."""

    def __init__(self, config: Optional[ValidatorConfig] = None):
        self.config = config if config is not None else ValidatorConfig()

    def validate_question(
        self,
        question: QuestionInput,
        intended_style: QuestionStyle | str,
        profile: ExamProfile,
        objective: Optional[ExamObjective] = None,
    ) -> ValidationVerdict:
        """
        Validate a generated question.

        Args:
            question: QuestionForValidation or a plain dict with the same keys
            intended_style: Style the question was generated for
            profile: Exam the question belongs to
            objective: Objective it was generated for (enables key-topic checks)

        Returns:
            ValidationVerdict; never raises on malformed questions
        """
        intended_style = QuestionStyle(intended_style)
        toggles = profile.validation
        min_score = toggles.min_score if toggles.min_score is not None else self.config.min_score

        parsed, problem = self._parse(question, profile)
        if parsed is None:
            logger.debug(f"Malformed question for {profile.id}: {problem}")
            return ValidationVerdict(
                is_valid=False,
                score=0,
                issues=[ValidationIssue(
                    code="MALFORMED_QUESTION",
                    severity=Severity.HIGH,
                    category=IssueCategory.FORMAT,
                    description=f"Malformed question: {problem}",
                )],
                suggestions=[SUGGESTIONS["MALFORMED_QUESTION"]],
            )

        builder = _VerdictBuilder(self.config)
        text = parsed.question.strip()

        if intended_style == QuestionStyle.DIRECT:
            self._check_direct(text, builder)
        elif intended_style == QuestionStyle.SCENARIO:
            self._check_scenario(text, builder)
        else:
            self._check_case_study(text, profile, builder)

        self._check_content(text, profile, objective, builder)
        self._check_options(parsed, profile, builder)
        self._check_clarity(text, builder)

        verdict = builder.build(min_score)
        logger.debug(
            f"Validated {intended_style.value} question for {profile.id}: "
            f"score={verdict.score} valid={verdict.is_valid} issues={len(verdict.issues)}"
        )
        return verdict

    @staticmethod
    def _parse(question: QuestionInput, profile: ExamProfile) -> tuple[Optional[QuestionForValidation], str]:
        if isinstance(question, QuestionForValidation):
            parsed = question
        else:
            try:
                parsed = QuestionForValidation.model_validate(question)
            except ValidationError as e:
                return None, f"{e.error_count()} invalid field(s)"

        if not parsed.question or not parsed.question.strip():
            return None, "question text is empty"
        if profile.expects_options() and not parsed.options:
            return None, "no answer options"
        return parsed, ""

    # =========================================================================
    # Style checks
    # =========================================================================

    @staticmethod
    def _check_direct(text: str, builder: _VerdictBuilder) -> None:
        actors = find_actors(text)
        if actors or has_named_organisation(text):
            framing = actors[0] if actors else "named organisation"
            builder.add(
                "DIRECT_NARRATIVE_FRAMING", Severity.HIGH, IssueCategory.STYLE,
                f"Direct question uses scenario framing ('{framing}')",
            )

        sentences = split_sentences(text)
        if len(sentences) > 1:
            builder.add(
                "DIRECT_MULTIPLE_SENTENCES", Severity.MEDIUM, IssueCategory.STYLE,
                f"Direct question has {len(sentences)} sentences (expected 1)",
            )

        data_points = count_data_points(text)
        if data_points > 1:
            builder.add(
                "DIRECT_MULTIPLE_DATA_POINTS", Severity.MEDIUM, IssueCategory.STYLE,
                f"Direct question embeds {data_points} numeric data points",
            )

        if not INTERROGATIVE_FOCUS.search(text):
            builder.add(
                "DIRECT_NO_FOCUS", Severity.LOW, IssueCategory.STYLE,
                "Direct question does not target a definition, formula or principle",
            )

    @staticmethod
    def _check_scenario(text: str, builder: _VerdictBuilder) -> None:
        sentences = split_sentences(text)
        actors = find_actors(text)
        conditional = has_conditional_frame(text)
        data_points = count_data_points(text)

        recall = DEFINITION_RECALL.search(text) is not None or (
            len(sentences) == 1 and not actors and not conditional and data_points == 0
        )
        if recall:
            builder.add(
                "SCENARIO_DEFINITION_RECALL", Severity.HIGH, IssueCategory.STYLE,
                "Scenario question is pure definition recall",
            )
        else:
            if not actors and not conditional and not has_named_organisation(text):
                builder.add(
                    "SCENARIO_NO_SITUATION", Severity.MEDIUM, IssueCategory.STYLE,
                    "Scenario question introduces no actor or situation",
                )
            if data_points == 0 and not conditional:
                builder.add(
                    "SCENARIO_NO_DETAIL", Severity.MEDIUM, IssueCategory.STYLE,
                    "Scenario question has no concrete numeric or contextual detail",
                )

        if len(sentences) > MAX_SCENARIO_SENTENCES:
            builder.add(
                "SCENARIO_TOO_LONG", Severity.MEDIUM, IssueCategory.STYLE,
                f"Scenario question has {len(sentences)} sentences (expected 2-3)",
            )

        if len(set(a.lower() for a in actors)) > 1:
            builder.add(
                "SCENARIO_MULTIPLE_ACTORS", Severity.LOW, IssueCategory.STYLE,
                f"Scenario question introduces {len(actors)} actors (expected one)",
            )

    @staticmethod
    def _check_case_study(text: str, profile: ExamProfile, builder: _VerdictBuilder) -> None:
        if len(text) < MIN_CASE_STUDY_CHARS:
            builder.add(
                "CASE_STUDY_TOO_SHORT", Severity.HIGH, IssueCategory.STYLE,
                f"Case study is only {len(text)} characters (expected {MIN_CASE_STUDY_CHARS}+)",
            )

        sentences = split_sentences(text)
        if len(sentences) < MIN_CASE_STUDY_SENTENCES:
            builder.add(
                "CASE_STUDY_FEW_SENTENCES", Severity.MEDIUM, IssueCategory.STYLE,
                f"Case study has {len(sentences)} sentences of setup",
            )

        data_points = count_data_points(text)
        if data_points < MIN_CASE_STUDY_DATA_POINTS:
            builder.add(
                "CASE_STUDY_FEW_DATA_POINTS", Severity.MEDIUM, IssueCategory.STYLE,
                f"Case study has {data_points} data points (expected {MIN_CASE_STUDY_DATA_POINTS}+)",
            )

        # No matches at all is reported once, by the cross-style terminology check
        terminology = profile.context.terminology
        if terminology and profile.validation.check_terminology:
            found = matched_terms(text, terminology)
            if 0 < len(found) < MIN_CASE_STUDY_TERMS:
                builder.add(
                    "CASE_STUDY_FEW_TERMS", Severity.LOW, IssueCategory.CONTENT,
                    f"Case study uses {len(found)} exam term(s)",
                )

    # =========================================================================
    # Cross-style checks
    # =========================================================================

    @staticmethod
    def _check_content(
        text: str,
        profile: ExamProfile,
        objective: Optional[ExamObjective],
        builder: _VerdictBuilder,
    ) -> None:
        terminology = profile.context.terminology
        if terminology and profile.validation.check_terminology and not matched_terms(text, terminology):
            builder.add(
                "TERMINOLOGY_ABSENT", Severity.MEDIUM, IssueCategory.CONTENT,
                f"Question uses none of the {profile.id} terminology",
            )

        if objective is not None and objective.key_topics:
            lowered = text.lower()
            anchors = [topic.split()[0].lower() for topic in objective.key_topics if topic.split()]
            if not any(re.search(rf"\b{re.escape(anchor)}", lowered) for anchor in anchors):
                builder.add(
                    "KEY_TOPIC_MISSING", Severity.LOW, IssueCategory.CONTENT,
                    f"Question does not reference any key topic of {objective.id}",
                )

    @staticmethod
    def _check_options(parsed: QuestionForValidation, profile: ExamProfile, builder: _VerdictBuilder) -> None:
        options = parsed.options
        if not options and not profile.expects_options():
            return

        normalized = [" ".join(option.lower().split()) for option in options]
        if len(set(normalized)) < len(normalized):
            builder.add(
                "DUPLICATE_OPTIONS", Severity.HIGH, IssueCategory.CONTENT,
                "Answer options contain duplicate text", location="options",
            )

        if len(options) < 2:
            builder.add(
                "TOO_FEW_OPTIONS", Severity.HIGH, IssueCategory.CONTENT,
                f"Only {len(options)} answer option(s) provided", location="options",
            )

        expected = profile.constraints.option_count
        if profile.validation.check_option_count and expected and len(options) != expected:
            builder.add(
                "OPTION_COUNT_MISMATCH", Severity.MEDIUM, IssueCategory.FORMAT,
                f"Expected {expected} options, got {len(options)}", location="options",
            )

        if parsed.correct is not None and not 0 <= parsed.correct < len(options):
            builder.add(
                "INVALID_CORRECT_INDEX", Severity.HIGH, IssueCategory.FORMAT,
                f"Correct answer index {parsed.correct} is out of range", location="options",
            )

    @staticmethod
    def _check_clarity(text: str, builder: _VerdictBuilder) -> None:
        if not text.endswith("?"):
            builder.add(
                "MISSING_QUESTION_MARK", Severity.LOW, IssueCategory.FORMAT,
                "Question should end with a question mark",
            )

        if len(text) < MIN_QUESTION_CHARS:
            builder.add(
                "TOO_SHORT", Severity.MEDIUM, IssueCategory.CLARITY,
                f"Question is only {len(text)} characters",
            )

        ambiguous = sorted({m.group(0).lower() for m in AMBIGUOUS_QUANTIFIERS.finditer(text)})
        if ambiguous:
            builder.add(
                "AMBIGUOUS_LANGUAGE", Severity.LOW, IssueCategory.CLARITY,
                f"Question uses ambiguous quantifiers: {', '.join(ambiguous)}",
            )

        if len(NEGATIONS.findall(text)) > 1:
            builder.add(
                "DOUBLE_NEGATIVE", Severity.LOW, IssueCategory.CLARITY,
                "Question contains multiple negatives",
            )


def quick_style_check(text: str, style: QuestionStyle | str) -> bool:
    """Cheap pre-filter: does the text look like the requested style at all?"""
    style = QuestionStyle(style)
    sentences = len(split_sentences(text))

    if style == QuestionStyle.DIRECT:
        return not find_actors(text) and not has_named_organisation(text) and sentences <= 1
    if style == QuestionStyle.SCENARIO:
        return 1 <= sentences <= MAX_SCENARIO_SENTENCES and (
            count_data_points(text) > 0 or has_conditional_frame(text)
        )
    return len(text) >= MIN_CASE_STUDY_CHARS and sentences >= MIN_CASE_STUDY_SENTENCES

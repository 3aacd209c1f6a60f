"""
Question Style Engine.

Facade wiring the profile registry, distribution tracker, pattern selector,
template cache and validator into the per-question control flow:

1. next_style     - what style should the next question for this objective be?
2. (caller generates the question text from the returned template)
3. record         - count the style that was actually generated
4. validate       - optionally check the text matches the intended style

Usage:
    engine = QuestionStyleEngine.create()
    decision = engine.next_style(session_id, "cfa-l1", "economics")
    text = my_generator(decision.template)
    engine.record(session_id, "cfa-l1", "economics", decision.style)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from loguru import logger

from question_engine.distribution.counts import StyleCounts
from question_engine.distribution.store import InMemoryDistributionStore
from question_engine.distribution.tracker import (
    DistributionHealth,
    DistributionSummary,
    DistributionTracker,
)
from question_engine.profiles.models import QuestionStyle
from question_engine.profiles.registry import ProfileRegistry, default_registry
from question_engine.selection.selector import PatternSelector, SelectorConfig
from question_engine.selection.targets import TargetResolver
from question_engine.templates.cache import TemplateCache
from question_engine.templates.generator import TemplateGenerator
from question_engine.validation.validator import (
    QuestionInput,
    QuestionValidator,
    ValidationVerdict,
    ValidatorConfig,
)


@dataclass(frozen=True)
class StyleDecision:
    """The style to request next, with its prompt skeleton."""
    style: QuestionStyle
    template: Optional[str]
    question_index: int
    counts: StyleCounts

    def to_dict(self) -> dict[str, Any]:
        return {
            "style": self.style.value,
            "template": self.template,
            "question_index": self.question_index,
            "counts": self.counts.to_dict(),
        }


class QuestionStyleEngine:
    """In-process entry point for style selection, tracking and validation."""

    def __init__(
        self,
        registry: ProfileRegistry,
        tracker: DistributionTracker,
        selector: PatternSelector,
        cache: TemplateCache,
        validator: QuestionValidator,
    ):
        self.registry = registry
        self.tracker = tracker
        self.selector = selector
        self.cache = cache
        self.validator = validator

    @classmethod
    def create(
        cls,
        settings=None,
        registry: Optional[ProfileRegistry] = None,
        generator: Optional[TemplateGenerator] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "QuestionStyleEngine":
        """
        Build an engine from settings.

        Args:
            settings: Settings instance (defaults to get_settings())
            registry: Profile registry (defaults to the built-in profiles)
            generator: Template generator (defaults to InheritedTemplateGenerator)
            clock: Monotonic clock shared by the session store and cache
        """
        from config import get_settings

        settings = settings or get_settings()
        registry = registry if registry is not None else default_registry()

        resolver = TargetResolver.from_settings(settings, exam_overrides=registry.exam_overrides())
        tracker = DistributionTracker(
            store=InMemoryDistributionStore.from_settings(settings, clock=clock),
            resolver=resolver,
            health_deviation_threshold=settings.health_deviation_threshold,
        )
        engine = cls(
            registry=registry,
            tracker=tracker,
            selector=PatternSelector(resolver, SelectorConfig.from_settings(settings)),
            cache=TemplateCache.from_settings(settings, generator=generator, clock=clock),
            validator=QuestionValidator(ValidatorConfig.from_settings(settings)),
        )
        logger.debug(f"Question style engine ready with {len(registry)} exam profiles")
        return engine

    def next_style(
        self,
        session_id: str,
        exam_id: str,
        objective_id: str,
        with_template: bool = True,
    ) -> StyleDecision:
        """
        Choose the style for the next question of an objective.

        Does not record anything; call record() once the question exists.

        Raises:
            ExamNotFoundError: Unknown exam id
            ObjectiveNotFoundError: Unknown objective id
        """
        objective = self.registry.get_objective(exam_id, objective_id)

        self.tracker.initialize_session(session_id, exam_id)
        counts = self.tracker.get_next_style_counts(session_id, objective_id, exam_id)
        question_index = self.tracker.question_count(session_id)

        style = self.selector.select_style(exam_id, objective, counts, question_index)

        # Tracker locks are released by now; synthesis may be slow
        template = self.cache.get_optimized_template(exam_id, style, objective) if with_template else None

        return StyleDecision(style=style, template=template, question_index=question_index, counts=counts)

    def record(self, session_id: str, exam_id: str, objective_id: str, style: QuestionStyle | str) -> StyleCounts:
        """Record a generated question. Validates the ids first."""
        self.registry.get_objective(exam_id, objective_id)
        return self.tracker.record_generated(session_id, exam_id, objective_id, style)

    def validate(
        self,
        question: QuestionInput,
        intended_style: QuestionStyle | str,
        exam_id: str,
        objective_id: Optional[str] = None,
    ) -> ValidationVerdict:
        profile = self.registry.get(exam_id)
        objective = profile.objective(objective_id) if objective_id else None
        return self.validator.validate_question(question, intended_style, profile, objective)

    def summary(self, session_id: str) -> Optional[DistributionSummary]:
        return self.tracker.get_distribution_summary(session_id)

    def health(self, session_id: str, exam_id: str) -> DistributionHealth:
        return self.tracker.calculate_distribution_health(session_id, exam_id)

    def reset(self, session_id: str) -> None:
        self.tracker.reset_session(session_id)

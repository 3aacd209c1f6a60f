"""
Pattern Selector: deterministic next-style selection.

Pipeline (each step is a pure function, tested on its own):
1. allowed_styles        - drop styles the objective forbids (fallback: direct)
2. observed_fractions    - normalise running counts (no observations -> zeros)
3. compute_deficits      - target fraction minus observed fraction
4. apply_cognitive_bias  - nudge scenario/case_study for harder objectives
5. pick_style            - largest deficit, ties broken by STYLE_PRIORITY

With no observations the deficits equal the targets, so the first question
of an objective gets the style with the highest target fraction.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Union

from loguru import logger

from question_engine.distribution.counts import StyleCounts
from question_engine.profiles.models import (
    STYLE_PRIORITY,
    CognitiveLevel,
    Difficulty,
    ExamObjective,
    QuestionStyle,
    TargetDistribution,
)
from question_engine.selection.targets import TargetResolver

TIE_EPSILON = 1e-9

# Styles that benefit from the cognitive bias
RICH_STYLES = (QuestionStyle.SCENARIO, QuestionStyle.CASE_STUDY)

DistributionInput = Union[StyleCounts, Mapping[str, int]]


@dataclass(frozen=True)
class SelectorConfig:
    """
    Tunable selection bias.

    Both values are deficit bonuses added to scenario and case_study before
    the max is taken. They were inferred rather than measured and need
    product-level calibration.
    """
    synthesis_bias: float = 0.10  # objectives at the synthesis cognitive level
    advanced_bias: float = 0.05   # objectives at advanced difficulty

    @classmethod
    def from_settings(cls, settings=None) -> "SelectorConfig":
        from config import get_settings

        settings = settings or get_settings()
        return cls(
            synthesis_bias=settings.synthesis_style_bias,
            advanced_bias=settings.advanced_style_bias,
        )


def allowed_styles(objective: ExamObjective) -> tuple[QuestionStyle, ...]:
    """Priority-ordered candidate styles after hard constraints."""
    forbidden = objective.forbidden_styles
    candidates = tuple(s for s in STYLE_PRIORITY if s not in forbidden)
    if not candidates:
        logger.debug(f"Objective {objective.id} forbids every style, falling back to direct")
        return (QuestionStyle.DIRECT,)
    return candidates


def observed_fractions(counts: DistributionInput) -> dict[QuestionStyle, float]:
    """Observed fraction per style; all zeros when nothing has been recorded."""
    if not isinstance(counts, StyleCounts):
        counts = StyleCounts.from_mapping(counts)
    return counts.fractions()


def compute_deficits(
    target: TargetDistribution,
    observed: Mapping[QuestionStyle, float],
    candidates: tuple[QuestionStyle, ...],
) -> dict[QuestionStyle, float]:
    return {style: target.fraction(style) - observed.get(style, 0.0) for style in candidates}


def apply_cognitive_bias(
    deficits: Mapping[QuestionStyle, float],
    objective: ExamObjective,
    config: SelectorConfig,
) -> dict[QuestionStyle, float]:
    bonus = 0.0
    if objective.level == CognitiveLevel.SYNTHESIS:
        bonus += config.synthesis_bias
    if objective.difficulty == Difficulty.ADVANCED:
        bonus += config.advanced_bias

    biased = dict(deficits)
    if bonus:
        for style in RICH_STYLES:
            if style in biased:
                biased[style] += bonus
    return biased


def pick_style(deficits: Mapping[QuestionStyle, float]) -> QuestionStyle:
    """Largest deficit wins; near-equal deficits go to the higher-priority style."""
    best: Optional[QuestionStyle] = None
    for style in STYLE_PRIORITY:
        if style not in deficits:
            continue
        if best is None or deficits[style] > deficits[best] + TIE_EPSILON:
            best = style
    return best if best is not None else QuestionStyle.DIRECT


class PatternSelector:
    """
    Chooses the next question style for an objective.

    Usage:
        selector = PatternSelector(TargetResolver())
        style = selector.select_style("cfa-l1", objective, counts, question_index=3)
    """

    def __init__(self, resolver: Optional[TargetResolver] = None, config: Optional[SelectorConfig] = None):
        self.resolver = resolver if resolver is not None else TargetResolver()
        self.config = config if config is not None else SelectorConfig()

    def select_style(
        self,
        exam_id: str,
        objective: ExamObjective,
        current_distribution: DistributionInput,
        question_index: int = 0,
    ) -> QuestionStyle:
        """
        Select the next style for an objective.

        Args:
            exam_id: Exam the question belongs to (drives target resolution)
            objective: Objective being generated for
            current_distribution: Style counts recorded so far for the objective
            question_index: Position of the question within the session

        Returns:
            The QuestionStyle with the largest (biased) deficit
        """
        if question_index < 0:
            raise ValueError(f"question_index must be >= 0 (got {question_index})")

        target = self.resolver.resolve(exam_id, objective)
        candidates = allowed_styles(objective)
        observed = observed_fractions(current_distribution)
        deficits = compute_deficits(target, observed, candidates)
        deficits = apply_cognitive_bias(deficits, objective, self.config)
        style = pick_style(deficits)

        logger.debug(
            f"Selected {style.value} for {exam_id}/{objective.id} "
            f"(q#{question_index}, deficits: "
            + ", ".join(f"{s.value}={d:+.3f}" for s, d in deficits.items())
            + ")"
        )
        return style

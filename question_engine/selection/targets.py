"""
Target distribution resolution.

Priority order:
1. Objective-level override (objective.style_preferences.distribution)
2. Exam-level override (profile question_generation, then built-in table)
3. Global default from settings
"""
from __future__ import annotations

from typing import Mapping, Optional

from question_engine.profiles.models import ExamObjective, TargetDistribution

# Per-exam defaults used when a profile declares no override of its own
BUILTIN_EXAM_DISTRIBUTIONS: dict[str, TargetDistribution] = {
    "cfa-l1": TargetDistribution(direct=0.70, scenario=0.25, case_study=0.05),
    "cfa-l2": TargetDistribution(direct=0.50, scenario=0.40, case_study=0.10),
    "cfa-l3": TargetDistribution(direct=0.40, scenario=0.40, case_study=0.20),
    "aws-saa": TargetDistribution(direct=0.55, scenario=0.35, case_study=0.10),
    "data-engineer-cert": TargetDistribution(direct=0.60, scenario=0.30, case_study=0.10),
}


class TargetResolver:
    """Resolves the target style distribution for an exam/objective pair."""

    def __init__(
        self,
        exam_overrides: Optional[Mapping[str, TargetDistribution]] = None,
        default: Optional[TargetDistribution] = None,
        use_builtin: bool = True,
    ):
        """
        Args:
            exam_overrides: Exam id -> distribution (usually from the registry)
            default: Global fallback, settings-based 60/30/10 when omitted
            use_builtin: Consult BUILTIN_EXAM_DISTRIBUTIONS after the overrides
        """
        self._exam_overrides = dict(exam_overrides or {})
        self._default = default or TargetDistribution.default()
        self._use_builtin = use_builtin

    @classmethod
    def from_settings(
        cls,
        settings=None,
        exam_overrides: Optional[Mapping[str, TargetDistribution]] = None,
    ) -> "TargetResolver":
        """Resolver whose global default comes from the QENGINE_DEFAULT_*_RATIO settings."""
        from config import get_settings

        settings = settings or get_settings()
        default = TargetDistribution.from_mapping({
            "direct": settings.default_direct_ratio,
            "scenario": settings.default_scenario_ratio,
            "case_study": settings.default_case_study_ratio,
        })
        return cls(exam_overrides=exam_overrides, default=default)

    @property
    def default(self) -> TargetDistribution:
        return self._default

    def for_exam(self, exam_id: str) -> TargetDistribution:
        """Exam-level target, ignoring objective overrides."""
        if exam_id in self._exam_overrides:
            return self._exam_overrides[exam_id]
        if self._use_builtin and exam_id in BUILTIN_EXAM_DISTRIBUTIONS:
            return BUILTIN_EXAM_DISTRIBUTIONS[exam_id]
        return self._default

    def resolve(self, exam_id: str, objective: Optional[ExamObjective] = None) -> TargetDistribution:
        if objective is not None and objective.style_preferences is not None:
            override = objective.style_preferences.distribution
            if override is not None:
                return override
        return self.for_exam(exam_id)

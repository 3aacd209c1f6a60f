"""
Question Distribution Tracker.

Tracks which question styles have been emitted in each session and how far
the running mix is from the exam's target ratios.

- record_generated increments under the session lock, so N concurrent calls
  on one bucket always add exactly N
- reads on unknown sessions return zero/empty structures, never raise
- the health score is a diagnostic signal, not a constraint
"""
from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from loguru import logger

from question_engine.distribution.counts import StyleCounts
from question_engine.distribution.store import DistributionStore, InMemoryDistributionStore
from question_engine.profiles.models import STYLE_PRIORITY, QuestionStyle
from question_engine.selection.targets import TargetResolver


@dataclass
class ObjectiveDistribution:
    """Observed mix for one (exam, objective) bucket."""
    exam_id: str
    objective_id: str
    counts: StyleCounts
    fractions: dict[QuestionStyle, float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "exam_id": self.exam_id,
            "objective_id": self.objective_id,
            "counts": self.counts.to_dict(),
            "fractions": {s.value: round(f, 4) for s, f in self.fractions.items()},
        }


@dataclass
class DistributionHealth:
    """How closely a session's pooled style mix matches the exam target."""
    overall_health: int = 100
    style_deviations: dict[QuestionStyle, float] = field(
        default_factory=lambda: {style: 0.0 for style in STYLE_PRIORITY}
    )
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_health": self.overall_health,
            "style_deviations": {s.value: round(d, 4) for s, d in self.style_deviations.items()},
            "recommendations": list(self.recommendations),
        }


@dataclass
class DistributionSummary:
    """Monitoring view of one session."""
    session_id: str
    exam_id: str
    total_questions: int
    percentages: dict[QuestionStyle, float]
    target: dict[QuestionStyle, float]
    objectives: list[ObjectiveDistribution]
    health: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "exam_id": self.exam_id,
            "total_questions": self.total_questions,
            "percentages": {s.value: round(p, 1) for s, p in self.percentages.items()},
            "target": {s.value: round(p, 1) for s, p in self.target.items()},
            "objectives": [o.to_dict() for o in self.objectives],
            "health": self.health,
        }


def generate_session_id() -> str:
    """Opaque, unique session id."""
    return f"session_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


class DistributionTracker:
    """
    Per-session style counters.

    Usage:
        tracker = DistributionTracker()
        tracker.record_generated("s1", "cfa-l1", "economics", QuestionStyle.DIRECT)
        tracker.calculate_distribution_health("s1", "cfa-l1").overall_health
    """

    def __init__(
        self,
        store: Optional[DistributionStore] = None,
        resolver: Optional[TargetResolver] = None,
        health_deviation_threshold: float = 0.15,
    ):
        self.store = store if store is not None else InMemoryDistributionStore()
        self.resolver = resolver if resolver is not None else TargetResolver()
        self.health_deviation_threshold = health_deviation_threshold

    def initialize_session(self, session_id: str, exam_id: str) -> None:
        """Create empty counters for a session; no-op if it already exists."""
        with self.store.locked(session_id, exam_id, create=True):
            pass

    def get_next_style_counts(
        self,
        session_id: str,
        objective_id: str,
        exam_id: Optional[str] = None,
    ) -> StyleCounts:
        """
        Current per-style counts for an objective.

        Without exam_id the objective's buckets are summed across exams.
        Unknown sessions and objectives give all-zero counts.
        """
        state = self.store.snapshot(session_id)
        if state is None:
            return StyleCounts()

        counts = StyleCounts()
        for (bucket_exam, bucket_objective), bucket in state.buckets.items():
            if bucket_objective != objective_id:
                continue
            if exam_id is None or bucket_exam == exam_id:
                counts = counts.merge(bucket)
        return counts

    def record_generated(
        self,
        session_id: str,
        exam_id: str,
        objective_id: str,
        style: QuestionStyle | str,
    ) -> StyleCounts:
        """
        Record an emitted style. Auto-initialises the session.

        Returns:
            Snapshot of the bucket's counts after the increment
        """
        style = QuestionStyle(style)
        with self.store.locked(session_id, exam_id, create=True) as state:
            bucket = state.bucket(exam_id, objective_id)
            bucket.increment(style)
            state.last_updated = self.store.now()
            snapshot = bucket.copy()

        logger.debug(
            f"Recorded {style.value} for {session_id} {exam_id}/{objective_id} "
            f"(bucket total {snapshot.total})"
        )
        return snapshot

    def question_count(self, session_id: str) -> int:
        """Questions recorded so far in the session, across all buckets."""
        state = self.store.snapshot(session_id)
        return state.totals().total if state is not None else 0

    def get_distribution_summary(self, session_id: str) -> Optional[DistributionSummary]:
        """Observed fractions per touched objective; None for unknown sessions."""
        state = self.store.snapshot(session_id)
        if state is None:
            return None

        pooled = state.totals()
        objectives = [
            ObjectiveDistribution(
                exam_id=exam_id,
                objective_id=objective_id,
                counts=counts,
                fractions=counts.fractions(),
            )
            for (exam_id, objective_id), counts in sorted(state.buckets.items())
        ]
        target = self.resolver.for_exam(state.exam_id)

        return DistributionSummary(
            session_id=session_id,
            exam_id=state.exam_id,
            total_questions=pooled.total,
            percentages={s: f * 100 for s, f in pooled.fractions().items()},
            target={s: f * 100 for s, f in target.as_dict().items()},
            objectives=objectives,
            health=self._health_from_counts(state.totals(state.exam_id), state.exam_id).overall_health,
        )

    def calculate_distribution_health(self, session_id: str, exam_id: str) -> DistributionHealth:
        """
        Score (0-100) of how well the session matches the exam's target mix.

        Observed fractions are pooled over every objective touched for the
        exam; health = 100 - (sum of |observed - target|) * 100, clamped to
        [0, 100]. A session with no observations is perfectly healthy.
        """
        state = self.store.snapshot(session_id)
        if state is None:
            return DistributionHealth()
        return self._health_from_counts(state.totals(exam_id), exam_id)

    def _health_from_counts(self, pooled: StyleCounts, exam_id: str) -> DistributionHealth:
        if pooled.total == 0:
            return DistributionHealth()

        target = self.resolver.for_exam(exam_id)
        observed = pooled.fractions()
        deviations = {
            style: abs(observed[style] - target.fraction(style)) for style in STYLE_PRIORITY
        }
        total_deviation = sum(deviations.values())
        overall = int(round(max(0.0, min(100.0, 100.0 - total_deviation * 100))))

        recommendations = []
        for style, deviation in deviations.items():
            if deviation <= self.health_deviation_threshold:
                continue
            direction = "Reduce" if observed[style] > target.fraction(style) else "Increase"
            recommendations.append(
                f"{direction} {style.value} questions (currently {observed[style] * 100:.1f}%, "
                f"target {target.fraction(style) * 100:.1f}%)"
            )

        return DistributionHealth(
            overall_health=overall,
            style_deviations=deviations,
            recommendations=recommendations,
        )

    def reset_session(self, session_id: str) -> None:
        """Forget all counters for a session."""
        if self.store.delete(session_id):
            logger.info(f"Reset distribution session {session_id}")

    def cleanup_expired_sessions(self) -> int:
        return self.store.cleanup_expired()

    def active_sessions(self) -> list[str]:
        return self.store.session_ids()

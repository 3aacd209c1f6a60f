"""
Distribution Module - Per-session style accounting.

Components:
- counts: StyleCounts per (exam, objective) bucket
- store: DistributionStore protocol and the in-memory implementation
- tracker: DistributionTracker with summaries and health scoring
"""

from question_engine.distribution.counts import StyleCounts
from question_engine.distribution.store import (
    DistributionStore,
    InMemoryDistributionStore,
    SessionDistributionState,
)
from question_engine.distribution.tracker import (
    DistributionHealth,
    DistributionSummary,
    DistributionTracker,
    ObjectiveDistribution,
    generate_session_id,
)

__all__ = [
    "StyleCounts",
    "DistributionStore",
    "InMemoryDistributionStore",
    "SessionDistributionState",
    "DistributionHealth",
    "DistributionSummary",
    "DistributionTracker",
    "ObjectiveDistribution",
    "generate_session_id",
]

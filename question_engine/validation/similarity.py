"""
Question similarity and repetition detection.

Word-level Jaccard similarity over normalised text, used to stop a session
from serving near-duplicate questions and to steer the generator away from
overused openings.
"""
from __future__ import annotations

import hashlib
import re
from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence

RECENT_WINDOW = 10
PATTERN_WINDOW = 8
STARTER_WINDOW = 5
MIN_WORD_LENGTH = 3

QUESTION_STARTERS = (
    "What is", "How does", "Which factor", "What distinguishes",
    "In what way", "When does", "Which statement", "What happens",
    "How is", "Which approach", "What determines", "Which method",
    "What indicates", "How can", "Which principle", "What defines",
)


@dataclass(frozen=True)
class SimilarityMatch:
    is_similar: bool
    similarity: float = 0.0
    most_similar: Optional[str] = None


class QuestionSimilarityDetector:
    """Near-duplicate and repetitive-pattern detection for generated questions."""

    @staticmethod
    def normalize(text: str) -> str:
        """Lowercase, punctuation to spaces, collapsed whitespace."""
        text = re.sub(r"[^\w\s]", " ", text.lower())
        return re.sub(r"\s+", " ", text).strip()

    @classmethod
    def question_hash(cls, text: str) -> str:
        """Stable hash of the normalised text; equal for trivially different phrasings."""
        return hashlib.sha1(cls.normalize(text).encode("utf-8")).hexdigest()[:12]

    @classmethod
    def similarity(cls, first: str, second: str) -> float:
        """Jaccard similarity (0-1) of the words longer than two characters."""
        a, b = cls.normalize(first), cls.normalize(second)
        if a == b:
            return 1.0

        words_a = {w for w in a.split() if len(w) >= MIN_WORD_LENGTH}
        words_b = {w for w in b.split() if len(w) >= MIN_WORD_LENGTH}
        union = words_a | words_b
        if not union:
            return 0.0
        return len(words_a & words_b) / len(union)

    @classmethod
    def is_too_similar(
        cls,
        new_question: str,
        previous: Sequence[str],
        threshold: float = 0.7,
        window: int = RECENT_WINDOW,
    ) -> SimilarityMatch:
        """Compare against the last `window` non-empty questions."""
        recent = [q for q in previous if q][-window:]

        best_score = 0.0
        best: Optional[str] = None
        for candidate in recent:
            score = cls.similarity(new_question, candidate)
            if score > best_score:
                best_score, best = score, candidate

        return SimilarityMatch(is_similar=best_score >= threshold, similarity=best_score, most_similar=best)

    @classmethod
    def detect_repetitive_patterns(cls, previous: Sequence[str]) -> list[str]:
        """Human-readable warnings about overused starters and structures."""
        recent = [q for q in previous if q][-PATTERN_WINDOW:]
        patterns = []

        starters = Counter(
            " ".join(cls.normalize(q).split()[:3]) for q in recent if len(cls.normalize(q).split()) >= 3
        )
        for starter, count in starters.items():
            if count >= 3:
                patterns.append(f'Repetitive question starter: "{starter}" (used {count} times)')

        characteristic = sum(1 for q in recent if "which characteristic" in q.lower())
        if characteristic >= 2:
            patterns.append(f'Overused "Which characteristic" pattern ({characteristic} recent questions)')

        # Shape of the sentence with every word and number masked out
        shapes = Counter(re.sub(r"\d+", "N", re.sub(r"[^\W\d_]+", "X", q)) for q in recent)
        for count in shapes.values():
            if count >= 2:
                patterns.append(f"Repetitive question structure detected ({count} similar structures)")

        return patterns

    @classmethod
    def diverse_starters(cls, previous: Sequence[str], limit: int = 6) -> list[str]:
        """Question openings not used in the last few questions."""
        used = set()
        for question in [q for q in previous if q][-STARTER_WINDOW:]:
            words = cls.normalize(question).split()
            if len(words) >= 2:
                used.add(" ".join(words[:2]))

        return [s for s in QUESTION_STARTERS if s.lower() not in used][:limit]

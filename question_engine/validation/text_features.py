"""
Surface-form text features used by the question validator.

All helpers are pure, regex-based and deterministic.
"""
from __future__ import annotations

import re
from typing import Iterable

# Split after terminal punctuation followed by whitespace and a sentence start.
# "beta of 1.3" or "$2.5 million" never split because the dot is not followed
# by whitespace.
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+(?=[A-Z0-9\"'(])")

# Numbers glued to letters (S3, EC2, L1) are identifiers, not data points
DATA_POINT = re.compile(r"(?<![\w.])\$?\d+(?:[.,]\d+)*%?(?!\w)")

ACTOR_NOUNS = (
    "manager", "analyst", "company", "firm", "investor", "client", "team",
    "engineer", "developer", "organization", "organisation", "corporation",
    "bank", "fund", "startup", "business", "architect", "administrator",
    "auditor", "trader", "portfolio", "bond", "application", "system",
    "workload", "pipeline",
)

ACTOR_VERBS = (
    "is", "are", "has", "have", "was", "were", "needs?", "wants?", "must",
    "plans?", "holds?", "owns?", "manages?", "recently", "currently",
    "decides?", "considers?", "runs?", "operates?", "reports?", "expects?",
    "requires?",
)

# "A portfolio manager at ABC firm is ...", "A company has ...",
# "An application requires ..."
NARRATIVE_ACTOR = re.compile(
    r"\b(?:a|an)\s+(?:[\w-]+\s+){0,3}?(?:" + "|".join(ACTOR_NOUNS) + r")\b"
    r"(?:\s+(?:at|of|for|with|in)\s+[\w&.-]+(?:\s+[\w&.-]+){0,3}?)?"
    r"\s+(?:" + "|".join(ACTOR_VERBS) + r")\b",
    re.IGNORECASE,
)

NAMED_ORGANISATION = re.compile(
    r"\b[A-Z]{2,}\s+(?i:firm|corp|corporation|inc|company|bank|capital|fund)\b"
)

CONDITIONAL_FRAME = re.compile(r"\b(?:if|when|given|assuming|suppose|consider)\b", re.IGNORECASE)


def split_sentences(text: str) -> list[str]:
    """Sentences in text, decimal-safe."""
    return [s.strip() for s in SENTENCE_BOUNDARY.split(text.strip()) if s.strip()]


def count_data_points(text: str) -> int:
    """Numeric data points: 15%, 1.3, $2,000, 10."""
    return len(DATA_POINT.findall(text))


def opens_clause(text: str, position: int) -> bool:
    """True if position starts a sentence or a comma/semicolon-delimited clause."""
    sentence_start = max(text.rfind(mark, 0, position) for mark in ".!?")
    clause_start = max(text.rfind(mark, 0, position) for mark in ",;:")
    return not text[max(sentence_start, clause_start) + 1:position].strip()


def find_actors(text: str) -> list[str]:
    """
    Narrative actor phrases introducing a situation.

    Only actors opening a sentence or clause count, so "when a company has
    negative ROE" inside a direct question is a condition, not a narrative.
    """
    return [
        match.group(0) for match in NARRATIVE_ACTOR.finditer(text)
        if opens_clause(text, match.start())
    ]


def has_named_organisation(text: str) -> bool:
    return NAMED_ORGANISATION.search(text) is not None


def has_conditional_frame(text: str) -> bool:
    return CONDITIONAL_FRAME.search(text) is not None


def matched_terms(text: str, terms: Iterable[str]) -> list[str]:
    """Terms from the list that appear in text as whole words, case-insensitively."""
    found = []
    for term in terms:
        term = term.strip()
        if term and re.search(rf"\b{re.escape(term)}\b", text, re.IGNORECASE):
            found.append(term)
    return found

"""Exception hierarchy for the question-style engine."""
from __future__ import annotations


class QuestionEngineError(Exception):
    """Base class for all engine errors."""


class ProfileLookupError(QuestionEngineError, KeyError):
    """An exam or objective id could not be resolved."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead
        return self.args[0] if self.args else ""


class ExamNotFoundError(ProfileLookupError):
    """Raised when no exam profile is registered under the given id."""

    def __init__(self, exam_id: str):
        self.exam_id = exam_id
        super().__init__(f"Exam not found: {exam_id}")


class ObjectiveNotFoundError(ProfileLookupError):
    """Raised when an exam profile has no objective with the given id."""

    def __init__(self, exam_id: str, objective_id: str):
        self.exam_id = exam_id
        self.objective_id = objective_id
        super().__init__(f"Objective not found: {objective_id} (exam {exam_id})")


class InvalidDistributionError(QuestionEngineError, ValueError):
    """Raised for target distributions that are negative or do not sum to 1.0."""

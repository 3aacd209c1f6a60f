"""
Adaptive question-style distribution and validation engine.

Decides which style (direct / scenario / case_study) each generated exam
question should take, tracks how the running mix compares with the exam's
target, caches prompt templates across exam families, and scores finished
questions against their intended style.

Usage:
    from question_engine import QuestionStyleEngine

    engine = QuestionStyleEngine.create()
    decision = engine.next_style("session-1", "cfa-l1", "economics")
"""
from question_engine.engine import QuestionStyleEngine, StyleDecision
from question_engine.profiles.models import QuestionStyle

__version__ = "0.1.0"

__all__ = [
    "QuestionStyleEngine",
    "StyleDecision",
    "QuestionStyle",
    "__version__",
]

"""
Unit tests for QuestionSimilarityDetector.

Tests:
- Jaccard similarity and normalised hashing
- Recent-window near-duplicate detection
- Repetitive starter / structure warnings
- Diverse starter suggestions
"""

import pytest

from question_engine.validation import QuestionSimilarityDetector

ROE_QUESTION = "What is the primary difference between ROE and ROA?"
ROE_REPHRASED = "What is the main difference between ROE and ROA?"


class TestSimilarity:
    """Tests for word-level similarity."""

    def test_one_word_swap(self):
        assert QuestionSimilarityDetector.similarity(ROE_QUESTION, ROE_REPHRASED) == pytest.approx(7 / 9)

    def test_identical_after_normalisation(self):
        assert QuestionSimilarityDetector.similarity("What is ROE?", "what is   ROE") == 1.0

    def test_unrelated(self):
        assert QuestionSimilarityDetector.similarity(ROE_QUESTION, "Which AWS service stores objects?") == 0.0

    def test_short_words_ignored(self):
        assert QuestionSimilarityDetector.similarity("Is it a b?", "Or is c d?") == 0.0

    def test_hash_ignores_case_and_punctuation(self):
        assert QuestionSimilarityDetector.question_hash("What is ROE?") == (
            QuestionSimilarityDetector.question_hash("what is  roe")
        )
        assert len(QuestionSimilarityDetector.question_hash("What is ROE?")) == 12


class TestTooSimilar:
    """Tests for near-duplicate detection."""

    def test_rephrased_question_flagged(self):
        match = QuestionSimilarityDetector.is_too_similar(ROE_REPHRASED, ["Which AWS service stores objects?", ROE_QUESTION])

        assert match.is_similar
        assert match.most_similar == ROE_QUESTION
        assert match.similarity == pytest.approx(7 / 9)

    def test_threshold(self):
        match = QuestionSimilarityDetector.is_too_similar(ROE_REPHRASED, [ROE_QUESTION], threshold=0.8)
        assert not match.is_similar

    def test_only_recent_window_compared(self):
        filler = [f"Question number {i} about topic{i}" for i in range(10)]
        match = QuestionSimilarityDetector.is_too_similar(ROE_REPHRASED, [ROE_QUESTION] + filler)
        assert not match.is_similar

    def test_empty_history(self):
        match = QuestionSimilarityDetector.is_too_similar(ROE_QUESTION, [])
        assert not match.is_similar
        assert match.most_similar is None


class TestRepetitivePatterns:
    """Tests for overused openings and structures."""

    def test_repeated_starter(self):
        previous = [
            "What is the beta of a stock?",
            "What is the alpha?",
            "What is the ROE formula today?",
        ]
        patterns = QuestionSimilarityDetector.detect_repetitive_patterns(previous)
        assert patterns == ['Repetitive question starter: "what is the" (used 3 times)']

    def test_which_characteristic_overuse(self):
        previous = ["Which characteristic defines REST?", "Which characteristic defines gRPC?"]
        patterns = QuestionSimilarityDetector.detect_repetitive_patterns(previous)

        assert any("Which characteristic" in p for p in patterns)
        assert any("structure" in p for p in patterns)

    def test_varied_questions_clean(self):
        previous = [
            "What is ROE?",
            "How does beta relate to market risk?",
            "Which AWS service stores objects durably?",
        ]
        assert QuestionSimilarityDetector.detect_repetitive_patterns(previous) == []


class TestDiverseStarters:
    def test_excludes_recent_openings(self):
        starters = QuestionSimilarityDetector.diverse_starters(["What is ROE?", "How does beta work?"])

        assert "What is" not in starters
        assert "How does" not in starters
        assert starters[0] == "Which factor"
        assert len(starters) == 6

    def test_limit(self):
        assert len(QuestionSimilarityDetector.diverse_starters([], limit=3)) == 3

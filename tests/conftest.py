"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from question_engine.profiles import (  # noqa: E402
    CognitiveLevel,
    Difficulty,
    ExamConstraints,
    ExamContext,
    ExamObjective,
    ExamProfile,
    TargetDistribution,
    default_registry,
)
from question_engine.selection.targets import TargetResolver  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (engine wired end to end)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def registry():
    """Registry with the built-in exam profiles."""
    return default_registry()


@pytest.fixture
def default_target():
    return TargetDistribution(direct=0.6, scenario=0.3, case_study=0.1)


@pytest.fixture
def plain_resolver(default_target):
    """Resolver that always answers 60/30/10 (no per-exam tables)."""
    return TargetResolver(default=default_target, use_builtin=False)


@pytest.fixture
def plain_objective():
    """Application-level, intermediate objective with no overrides."""
    return ExamObjective(
        id="obj-plain",
        title="Plain objective",
        weight=100,
        level=CognitiveLevel.APPLICATION,
        difficulty=Difficulty.INTERMEDIATE,
    )


@pytest.fixture
def mock_objective():
    """Objective used by the validation samples."""
    return ExamObjective(
        id="mock-objective",
        title="Financial Analysis",
        description="Mock objective for testing",
        weight=100,
        level=CognitiveLevel.APPLICATION,
        difficulty=Difficulty.INTERMEDIATE,
        key_topics=["Financial ratios", "Portfolio analysis"],
    )


@pytest.fixture
def mock_profile(mock_objective):
    """CFA-like exam with a short terminology list and 3-option questions."""
    return ExamProfile(
        id="cfa-mock",
        name="Mock CFA Exam",
        provider="Mock",
        objectives=[mock_objective],
        constraints=ExamConstraints(total_questions=10, time_minutes=30, option_count=3),
        context=ExamContext(
            exam_format="Multiple choice",
            difficulty="Intermediate",
            terminology=["ROE", "ROA", "beta", "alpha"],
        ),
    )


@pytest.fixture
def sample_direct_question():
    return {
        "question": "What is the primary difference between ROE and ROA?",
        "options": ["ROE includes debt effects", "ROA is always higher", "No difference"],
        "correct": 0,
        "explanation": "ROE reflects leverage while ROA does not.",
    }


@pytest.fixture
def scenario_as_direct_question():
    """A scenario-shaped question that was requested as direct."""
    return {
        "question": (
            "A portfolio manager at ABC firm is analyzing a stock with a beta of 1.3 and "
            "expected return of 15%. If the risk-free rate is 3% and market return is 10%, "
            "what is the stock's alpha?"
        ),
        "options": ["0.9%", "2.9%", "5.0%"],
        "correct": 1,
    }

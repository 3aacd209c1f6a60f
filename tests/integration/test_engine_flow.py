"""
Integration tests for QuestionStyleEngine.

Drives the full select -> record -> validate loop the way a question
generation service would, with the real registry, tracker, selector,
template cache and validator wired by QuestionStyleEngine.create().
"""

import pytest

from config import Settings
from question_engine import QuestionStyle, QuestionStyleEngine
from question_engine.core.errors import ExamNotFoundError, ObjectiveNotFoundError
from question_engine.profiles import (
    ExamConstraints,
    ExamObjective,
    ExamProfile,
    ProfileRegistry,
    default_registry,
)


class FailingGenerator:
    def generate(self, family, style, objective):
        raise RuntimeError("template backend down")


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def engine(settings, fake_clock):
    return QuestionStyleEngine.create(settings=settings, clock=fake_clock)


@pytest.fixture
def practice_registry():
    """One standalone exam with two plain objectives and the global 60/30/10 target."""
    profile = ExamProfile(
        id="practice-exam",
        name="Practice Exam",
        objectives=[
            ExamObjective(id="alpha-topic", title="Alpha", weight=50),
            ExamObjective(id="beta-topic", title="Beta", weight=50),
        ],
        constraints=ExamConstraints(total_questions=50, time_minutes=60),
    )
    registry = default_registry()
    registry.register(profile)
    return registry


def _run(engine, session_id, exam_id, objective_ids, steps):
    styles = []
    for step in range(steps):
        objective_id = objective_ids[step % len(objective_ids)]
        decision = engine.next_style(session_id, exam_id, objective_id, with_template=False)
        engine.record(session_id, exam_id, objective_id, decision.style)
        styles.append(decision.style)
    return styles


class TestConvergence:
    """Closed-loop selection converges on the target mix."""

    def test_thousand_questions_within_two_points(self, settings, fake_clock, practice_registry):
        engine = QuestionStyleEngine.create(settings=settings, registry=practice_registry, clock=fake_clock)
        _run(engine, "s1", "practice-exam", ["alpha-topic"], 1000)

        summary = engine.summary("s1")
        assert summary.total_questions == 1000
        for style, target in summary.target.items():
            assert abs(summary.percentages[style] - target) <= 2.0
        assert engine.health("s1", "practice-exam").overall_health >= 96

    def test_each_objective_converges(self, settings, fake_clock, practice_registry):
        engine = QuestionStyleEngine.create(settings=settings, registry=practice_registry, clock=fake_clock)
        _run(engine, "s1", "practice-exam", ["alpha-topic", "beta-topic"], 200)

        for bucket in engine.summary("s1").objectives:
            assert bucket.counts.total == 100
            assert abs(bucket.counts.direct - 60) <= 2
            assert abs(bucket.counts.scenario - 30) <= 2
            assert abs(bucket.counts.case_study - 10) <= 2

    def test_first_question_is_direct(self, engine):
        decision = engine.next_style("s1", "cfa-l1", "ethical-professional-standards")
        assert decision.style == QuestionStyle.DIRECT
        assert decision.question_index == 0
        assert decision.counts.total == 0

    def test_next_style_does_not_record(self, engine):
        engine.next_style("s1", "cfa-l1", "economics")
        engine.next_style("s1", "cfa-l1", "economics")
        assert engine.tracker.question_count("s1") == 0


class TestHardConstraints:
    """Forbidden styles are never emitted."""

    def test_economics_never_case_study(self, engine):
        styles = _run(engine, "s1", "cfa-l1", ["economics"], 300)
        assert QuestionStyle.CASE_STUDY not in styles
        assert QuestionStyle.SCENARIO in styles


class TestTemplates:
    """Selection returns a prompt skeleton from the shared cache."""

    def test_template_returned(self, engine):
        decision = engine.next_style("s1", "cfa-l1", "quantitative-methods")
        assert "CFA" in decision.template
        assert decision.to_dict()["style"] == "direct"

    def test_template_reused_within_session(self, engine):
        engine.next_style("s1", "cfa-l1", "quantitative-methods")
        engine.next_style("s2", "cfa-l1", "quantitative-methods")

        metrics = engine.cache.get_performance_metrics()
        assert metrics.hits == 1
        assert metrics.synthesized == 1

    def test_generator_failure_propagates_and_records_nothing(self, settings, fake_clock):
        engine = QuestionStyleEngine.create(settings=settings, generator=FailingGenerator(), clock=fake_clock)

        with pytest.raises(RuntimeError):
            engine.next_style("s1", "cfa-l1", "economics")

        assert engine.tracker.question_count("s1") == 0
        assert len(engine.cache) == 0


class TestLookupErrors:
    """Unknown ids fail fast instead of being silently tracked."""

    def test_unknown_exam(self, engine):
        with pytest.raises(ExamNotFoundError):
            engine.next_style("s1", "no-such-exam", "economics")
        assert engine.summary("s1") is None

    def test_unknown_objective(self, engine):
        with pytest.raises(ObjectiveNotFoundError):
            engine.next_style("s1", "cfa-l1", "no-such-objective")

    def test_record_unknown_objective(self, engine):
        with pytest.raises(ObjectiveNotFoundError):
            engine.record("s1", "cfa-l1", "no-such-objective", QuestionStyle.DIRECT)
        assert engine.summary("s1") is None

    def test_validate_unknown_exam(self, engine):
        with pytest.raises(ExamNotFoundError):
            engine.validate({"question": "What is ROE?"}, QuestionStyle.DIRECT, "no-such-exam")


class TestSessionLifecycle:
    """Reset and idle expiry."""

    def test_reset(self, engine):
        _run(engine, "s1", "cfa-l1", ["economics"], 5)
        engine.reset("s1")

        assert engine.summary("s1") is None
        assert engine.next_style("s1", "cfa-l1", "economics").counts.total == 0

    def test_idle_session_expires(self, engine, fake_clock):
        _run(engine, "s1", "cfa-l1", ["economics"], 3)
        fake_clock.advance(120 * 60)

        assert engine.summary("s1") is None
        assert engine.next_style("s1", "cfa-l1", "economics", with_template=False).counts.total == 0

    def test_create_wires_settings_and_clock(self, settings, fake_clock):
        engine = QuestionStyleEngine.create(settings=settings, clock=fake_clock)
        store = engine.tracker.store

        assert store.timeout_seconds == settings.session_timeout_minutes * 60
        assert store.now() == fake_clock()
        fake_clock.advance(5)
        assert store.now() == fake_clock()
        assert engine.selector.resolver is engine.tracker.resolver

    def test_session_alive_just_before_timeout(self, engine, fake_clock):
        _run(engine, "s1", "cfa-l1", ["economics"], 3)
        fake_clock.advance(120 * 60 - 1)

        assert engine.summary("s1").total_questions == 3

    def test_sessions_are_isolated(self, engine):
        _run(engine, "s1", "cfa-l1", ["economics"], 4)
        _run(engine, "s2", "aws-saa", ["secure-architectures"], 2)

        assert engine.summary("s1").total_questions == 4
        assert engine.summary("s2").total_questions == 2
        assert engine.summary("s2").exam_id == "aws-saa"


class TestValidationThroughEngine:
    def test_validate_with_objective(self, engine):
        verdict = engine.validate(
            {
                "question": "What is the primary difference between ROE and ROA?",
                "options": ["Leverage", "Taxes", "Nothing"],
                "correct": 0,
            },
            QuestionStyle.DIRECT,
            "cfa-l1",
            "financial-statement-analysis",
        )
        assert verdict.is_valid

    def test_validate_uses_exam_option_count(self, engine):
        verdict = engine.validate(
            {"question": "Which AWS service provides object storage?", "options": ["S3", "EC2", "RDS"], "correct": 0},
            QuestionStyle.DIRECT,
            "aws-saa",
        )
        assert "OPTION_COUNT_MISMATCH" in [issue.code for issue in verdict.issues]


def test_custom_registry_only():
    """An engine can run on a registry without the built-in profiles."""
    profile = ExamProfile(
        id="solo",
        name="Solo",
        objectives=[ExamObjective(id="only", title="Only", weight=100)],
        constraints=ExamConstraints(total_questions=5, time_minutes=5),
    )
    engine = QuestionStyleEngine.create(registry=ProfileRegistry([profile]))

    decision = engine.next_style("s1", "solo", "only")
    assert decision.style == QuestionStyle.DIRECT
    assert engine.cache.get_inheritance_tree("solo").family_key == "exam:solo"

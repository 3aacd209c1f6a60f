"""
Unit tests for exam profile models and the profile registry.

Tests:
- TargetDistribution invariants (non-negative, sums to 1.0)
- ExamProfile objective invariants (unique ids, weights sum to 100)
- Objective signatures
- Registry lookup, not-found errors, JSON loading
"""

import json

import pytest
from pydantic import ValidationError

from question_engine.core.errors import (
    ExamNotFoundError,
    InvalidDistributionError,
    ObjectiveNotFoundError,
    ProfileLookupError,
)
from question_engine.profiles import (
    CognitiveLevel,
    Difficulty,
    ExamConstraints,
    ExamObjective,
    ExamProfile,
    ProfileRegistry,
    QuestionStyle,
    QuestionType,
    StylePreferences,
    TargetDistribution,
)


def _objective(objective_id: str, weight: float, **kwargs) -> ExamObjective:
    return ExamObjective(id=objective_id, title=objective_id.title(), weight=weight, **kwargs)


class TestTargetDistribution:
    """Tests for target distribution validation."""

    def test_valid_distribution(self):
        target = TargetDistribution(direct=0.6, scenario=0.3, case_study=0.1)
        assert target.fraction(QuestionStyle.SCENARIO) == pytest.approx(0.3)
        assert target.as_percentages() == {"direct": 60.0, "scenario": 30.0, "case_study": 10.0}

    def test_rounding_tolerance_accepted(self):
        """Fractions like 0.33/0.33/0.33 are within tolerance."""
        target = TargetDistribution(direct=0.34, scenario=0.33, case_study=0.33)
        assert sum(target.as_dict().values()) == pytest.approx(1.0)

    def test_sum_not_one_rejected(self):
        with pytest.raises(ValidationError):
            TargetDistribution(direct=0.5, scenario=0.3, case_study=0.1)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            TargetDistribution(direct=1.2, scenario=-0.2, case_study=0.0)

    def test_from_mapping_partial(self):
        target = TargetDistribution.from_mapping({"direct": 0.8, "scenario": 0.2})
        assert target.case_study == 0.0

    def test_from_mapping_raises_domain_error(self):
        with pytest.raises(InvalidDistributionError):
            TargetDistribution.from_mapping({"direct": 0.9})

    def test_from_mapping_unknown_style(self):
        with pytest.raises(ValueError):
            TargetDistribution.from_mapping({"essay": 1.0})

    def test_default_is_60_30_10(self):
        target = TargetDistribution.default()
        assert target.as_percentages() == {"direct": 60.0, "scenario": 30.0, "case_study": 10.0}


class TestExamProfile:
    """Tests for profile-level invariants."""

    def test_weights_must_sum_to_100(self):
        with pytest.raises(ValidationError):
            ExamProfile(
                id="bad",
                name="Bad",
                objectives=[_objective("a", 50), _objective("b", 30)],
                constraints=ExamConstraints(total_questions=10, time_minutes=10),
            )

    def test_duplicate_objective_ids_rejected(self):
        with pytest.raises(ValidationError):
            ExamProfile(
                id="dup",
                name="Dup",
                objectives=[_objective("a", 50), _objective("a", 50)],
                constraints=ExamConstraints(total_questions=10, time_minutes=10),
            )

    def test_objective_lookup(self, mock_profile):
        assert mock_profile.objective("mock-objective").title == "Financial Analysis"

    def test_unknown_objective_raises(self, mock_profile):
        with pytest.raises(ObjectiveNotFoundError) as exc_info:
            mock_profile.objective("nope")
        assert exc_info.value.objective_id == "nope"
        assert "nope" in str(exc_info.value)

    def test_expects_options(self, mock_profile):
        assert mock_profile.expects_options()

        essay = mock_profile.model_copy(update={"question_types": [QuestionType.ESSAY]})
        assert not essay.expects_options()

    def test_validation_defaults(self, mock_profile):
        assert mock_profile.validation.check_terminology
        assert mock_profile.validation.min_score is None
        assert mock_profile.style_distribution is None


class TestObjectiveSignature:
    """Tests for the template-sharing signature."""

    def test_same_shape_same_signature(self):
        a = _objective("ethics", 50, level=CognitiveLevel.KNOWLEDGE)
        b = ExamObjective(id="ethics", title="Different title", weight=20, level=CognitiveLevel.KNOWLEDGE)
        assert a.signature() == b.signature()

    def test_level_changes_signature(self):
        a = _objective("ethics", 50, level=CognitiveLevel.KNOWLEDGE)
        b = _objective("ethics", 50, level=CognitiveLevel.APPLICATION)
        assert a.signature() != b.signature()

    def test_forbidden_styles_change_signature(self):
        a = _objective("ethics", 50, difficulty=Difficulty.BEGINNER)
        b = _objective(
            "ethics", 50, difficulty=Difficulty.BEGINNER,
            style_preferences=StylePreferences(forbidden_styles=frozenset({QuestionStyle.CASE_STUDY})),
        )
        assert a.signature() != b.signature()


class TestProfileRegistry:
    """Tests for profile lookup and loading."""

    def test_builtin_profiles_registered(self, registry):
        assert {"cfa-l1", "cfa-l2", "aws-saa", "data-engineer-cert"} <= set(registry.exam_ids())
        assert "cfa-l1" in registry

    def test_unknown_exam_raises_not_found(self, registry):
        with pytest.raises(ExamNotFoundError):
            registry.get("unknown-exam")

    def test_not_found_is_a_key_error(self, registry):
        with pytest.raises(KeyError):
            registry.get("unknown-exam")

    def test_unknown_objective_raises(self, registry):
        with pytest.raises(ProfileLookupError):
            registry.get_objective("cfa-l1", "unknown-objective")

    def test_exam_overrides(self, registry):
        overrides = registry.exam_overrides()
        assert overrides["data-engineer-cert"].scenario == pytest.approx(0.4)
        assert "cfa-l1" not in overrides

    def test_load_json(self, tmp_path):
        data = {
            "id": "json-exam",
            "name": "JSON Exam",
            "objectives": [
                {"id": "one", "title": "One", "weight": 60, "level": "synthesis"},
                {"id": "two", "title": "Two", "weight": 40},
            ],
            "constraints": {"total_questions": 20, "time_minutes": 40, "option_count": 4},
            "question_generation": {
                "style_distribution": {"direct": 0.4, "scenario": 0.4, "case_study": 0.2},
            },
        }
        path = tmp_path / "json-exam.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        registry = ProfileRegistry()
        profile = registry.load_json(path)

        assert registry.get("json-exam") is profile
        assert profile.objective("one").level == CognitiveLevel.SYNTHESIS
        assert registry.exam_overrides()["json-exam"].case_study == pytest.approx(0.2)

    def test_load_directory(self, tmp_path):
        for exam_id in ("a-exam", "b-exam"):
            (tmp_path / f"{exam_id}.json").write_text(json.dumps({
                "id": exam_id,
                "name": exam_id,
                "objectives": [{"id": "only", "title": "Only", "weight": 100}],
                "constraints": {"total_questions": 5, "time_minutes": 5},
            }), encoding="utf-8")

        registry = ProfileRegistry()
        assert registry.load_directory(tmp_path) == 2
        assert len(registry) == 2

# tests/test_models.py

"""
Model Validation Tests - Tests for all Pydantic model validations
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from competency_engine.config import Settings
from competency_engine.models.assessment import (
    Assessment,
    AssessmentView,
    Response,
    StartAssessmentRequest,
    SubmitResponseRequest,
)
from competency_engine.models.enumerations import (
    AssessmentStatus,
    QuestionType,
    ScaleType,
    ScoringModelKind,
)
from competency_engine.models.question import Category, Competency, Question
from competency_engine.models.scoring_system import (
    ScoreScale,
    ScoringSystem,
    ScoringSystemConfig,
    WeightConfig,
)


# ENUMERATION TESTS


class TestEnumerations:

    def test_question_types(self):
        expected = ["BEHAVIORAL", "SITUATIONAL", "TECHNICAL", "KNOWLEDGE"]
        assert [t.value for t in QuestionType] == expected

    def test_assessment_statuses(self):
        assert [s.value for s in AssessmentStatus] == ["IN_PROGRESS", "COMPLETED", "ABANDONED"]

    def test_terminal_statuses(self):
        assert not AssessmentStatus.IN_PROGRESS.is_terminal
        assert AssessmentStatus.COMPLETED.is_terminal
        assert AssessmentStatus.ABANDONED.is_terminal

    def test_scoring_model_count(self):
        assert len(ScoringModelKind) == 6


# QUESTION / COMPETENCY TESTS


class TestQuestionModel:

    def test_defaults(self):
        q = Question(id="q1", competency_id="c1", statement="Does things")
        assert q.type == QuestionType.BEHAVIORAL
        assert (q.score_min, q.score_max) == (1, 5)
        assert q.weight == 1.0
        assert q.examples == []

    def test_score_range_must_be_ordered(self):
        with pytest.raises(ValidationError) as exc_info:
            Question(id="q1", competency_id="c1", statement="x", score_min=5, score_max=5)
        assert "score_max must be > score_min" in str(exc_info.value)

    @pytest.mark.parametrize("weight", [0, -0.1, 1.5])
    def test_weight_bounds(self, weight):
        with pytest.raises(ValidationError):
            Question(id="q1", competency_id="c1", statement="x", weight=weight)

    def test_frozen(self):
        q = Question(id="q1", competency_id="c1", statement="x")
        with pytest.raises(ValidationError):
            q.weight = 0.5

    def test_blank_statement_rejected(self):
        with pytest.raises(ValidationError):
            Question(id="q1", competency_id="c1", statement="")


class TestCompetencyModel:

    def test_category_optional(self):
        assert Competency(id="c1", name="Leadership").category is None

    def test_weight_bounds(self):
        with pytest.raises(ValidationError):
            Competency(id="c1", name="Leadership", weight=0)

    def test_category_weight_bounds(self):
        assert Category(name="People").weight == 1.0
        with pytest.raises(ValidationError):
            Category(name="People", weight=2)


# SCORING SYSTEM TESTS


class TestScoringSystemConfig:

    def test_defaults(self):
        config = ScoringSystemConfig()
        levels = config.weight_levels
        assert levels.question and levels.competency and not levels.category
        assert config.scale == ScoreScale(min=1, max=5, type=ScaleType.LIKERT)

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            ScoringSystemConfig(question_weight=True)
        assert "extra_forbidden" in str(exc_info.value)

    def test_scale_must_be_ordered(self):
        with pytest.raises(ValidationError):
            ScoringSystemConfig(scale_min=4, scale_max=1)

    def test_label_outside_scale(self):
        with pytest.raises(ValidationError):
            ScoringSystemConfig(labels={6: "Exceptional"})

    def test_anchor_score_outside_scale(self):
        with pytest.raises(ValidationError):
            ScoringSystemConfig(anchors={3: 7.5})

    def test_valid_anchors(self):
        config = ScoringSystemConfig(anchors={1: 1.0, 3: 3.5, 5: 5.0})
        assert config.anchors[3] == 3.5

    def test_scale_contains(self):
        scale = ScoreScale(min=0, max=100, type=ScaleType.PERCENTAGE)
        assert scale.contains(0) and scale.contains(100)
        assert not scale.contains(100.01)
        assert scale.matches(0, 100)

    def test_scoring_system_requires_model(self):
        with pytest.raises(ValidationError):
            ScoringSystem(id="custom", name="Custom")


class TestWeightConfig:

    def test_empty_by_default(self):
        weights = WeightConfig()
        assert weights.competency_weights == {}
        assert weights.category_weights == {}
        assert weights.cycle_id is None

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            WeightConfig(category_weights={"People": -0.5})
        assert "must be >= 0" in str(exc_info.value)

    def test_zero_weight_allowed(self):
        assert WeightConfig(competency_weights={"c1": 0.0}).competency_weights["c1"] == 0.0


# ASSESSMENT MODEL TESTS


class TestAssessmentModel:

    def test_next_question_in_snapshot_order(self, competencies, questions):
        assessment = Assessment(
            subject_id="user-001",
            scoring_system_id="weighted_likert",
            competency_ids=["comp-leadership"],
            competencies=competencies[:1],
            questions=questions[:2],
            responses={"q-lead-1": Response(question_id="q-lead-1", rating=3)},
        )
        assert assessment.next_question().id == "q-lead-2"
        assert assessment.answered_count == 1
        assert assessment.total_questions == 2

    def test_requires_competencies(self):
        with pytest.raises(ValidationError):
            Assessment(subject_id="u", scoring_system_id="s", competency_ids=[])

    def test_started_at_is_utc(self):
        assessment = Assessment(subject_id="u", scoring_system_id="s", competency_ids=["c"])
        assert assessment.started_at.tzinfo == timezone.utc
        assert assessment.status == AssessmentStatus.IN_PROGRESS

    def test_view_includes_competency_names(self, competencies, questions):
        assessment = Assessment(
            subject_id="user-001",
            scoring_system_id="weighted_likert",
            competency_ids=["comp-leadership"],
            competencies=competencies[:1],
            questions=questions[:2],
            started_at=datetime(2026, 1, 28, tzinfo=timezone.utc),
        )
        view = AssessmentView.from_assessment(assessment)
        assert view.next_question.competency_name == "Leadership"
        assert [q.id for q in view.questions] == ["q-lead-1", "q-lead-2"]
        assert AssessmentView.from_assessment(assessment, include_questions=False).questions == []


class TestRequestPayloads:

    def test_start_request_strips_blank_ids(self):
        payload = StartAssessmentRequest(subject_id="u", competency_ids=[" c1 ", "", "  "])
        assert payload.competency_ids == ["c1"]
        assert payload.scoring_system_id is None

    def test_start_request_subject_required(self):
        with pytest.raises(ValidationError):
            StartAssessmentRequest(subject_id="", competency_ids=["c1"])

    def test_comment_length(self):
        with pytest.raises(ValidationError):
            SubmitResponseRequest(question_id="q1", rating=3, comment="x" * 2001)


# SETTINGS TESTS


class TestSettings:

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("SNOWFLAKE_ACCOUNT", "SNOWFLAKE_USER", "SNOWFLAKE_PASSWORD", "DEBUG"):
            monkeypatch.delenv(name, raising=False)

    def test_memory_backend_needs_no_credentials(self):
        assert Settings(_env_file=None, REPOSITORY_BACKEND="memory").REPOSITORY_BACKEND == "memory"

    def test_snowflake_backend_requires_credentials(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None, REPOSITORY_BACKEND="snowflake", SNOWFLAKE_ACCOUNT="acct")
        assert "SNOWFLAKE_USER" in str(exc_info.value)

    def test_snowflake_backend_with_credentials(self):
        s = Settings(
            _env_file=None,
            REPOSITORY_BACKEND="snowflake",
            SNOWFLAKE_ACCOUNT="acct",
            SNOWFLAKE_USER="svc",
            SNOWFLAKE_PASSWORD="secret",
        )
        assert s.SNOWFLAKE_PASSWORD.get_secret_value() == "secret"

    def test_production_rejects_debug(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, APP_ENV="production", DEBUG=True)

    def test_invalid_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, REPOSITORY_BACKEND="postgres")

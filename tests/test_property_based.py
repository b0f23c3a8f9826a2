# tests/test_property_based.py
"""
Property-Based Tests - scoring engine invariants

Hypothesis tests with max_examples=500, covering:
  - bounds of overall and competency scores for every built-in model
  - determinism of AggregationEngine.compute
  - normalized model tracks its base model
  - counts and completion rate
  - learned Bayesian weight vectors
"""

from datetime import datetime, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from competency_engine.models.assessment import Assessment, Response
from competency_engine.models.question import Competency, Question
from competency_engine.models.scoring_system import WeightConfig
from competency_engine.scoring.aggregation import AggregationEngine
from competency_engine.scoring.bayesian_model import learn_competency_weights
from competency_engine.scoring.catalog import default_scoring_systems
from competency_engine.scoring.registry import ScoreModelRegistry

REGISTRY = ScoreModelRegistry(default_scoring_systems())
ENGINE = AggregationEngine()
FIXED_COMPLETION = datetime(2026, 1, 28, 12, 0, tzinfo=timezone.utc)

FIVE_POINT_SYSTEMS = [
    "weighted_likert",
    "bars",
    "weighted_rubric",
    "hierarchical",
    "bayesian_adjusted",
]

# ---------------------------------------------------------------------------
# Shared strategies
# ---------------------------------------------------------------------------

weight_st = st.floats(min_value=0.01, max_value=1.0, allow_nan=False, allow_infinity=False)
rating_st = st.integers(min_value=1, max_value=5)
category_st = st.sampled_from([None, "People", "Technical", "Delivery"])


@st.composite
def assessment_st(draw, scoring_system_id="weighted_likert"):
    """Draw an assessment with 1-4 competencies, 1-4 questions each, at least one answer."""
    n_competencies = draw(st.integers(min_value=1, max_value=4))
    competencies = []
    questions = []
    responses = {}
    for c in range(n_competencies):
        competency = Competency(
            id=f"c{c}",
            name=f"Competency {c}",
            category=draw(category_st),
            weight=draw(weight_st),
        )
        competencies.append(competency)
        for q in range(draw(st.integers(min_value=1, max_value=4))):
            question = Question(
                id=f"c{c}-q{q}",
                competency_id=competency.id,
                statement=f"Statement {c}.{q}",
                weight=draw(weight_st),
            )
            questions.append(question)
            if (c == 0 and q == 0) or draw(st.booleans()):
                responses[question.id] = Response(
                    question_id=question.id,
                    rating=draw(rating_st),
                    submitted_at=FIXED_COMPLETION,
                )

    return Assessment(
        id="assessment-prop",
        subject_id="user-prop",
        scoring_system_id=scoring_system_id,
        competency_ids=[c.id for c in competencies],
        competencies=competencies,
        questions=questions,
        responses=responses,
        started_at=FIXED_COMPLETION,
    )


@st.composite
def category_weights_st(draw):
    return WeightConfig(category_weights={
        name: draw(weight_st) for name in ("People", "Technical", "Delivery", "uncategorized")
    })


# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------


class TestScoreBounds:

    @pytest.mark.parametrize("scoring_system_id", FIVE_POINT_SYSTEMS)
    @given(assessment=assessment_st())
    @settings(max_examples=500, deadline=None)
    def test_overall_within_scale(self, scoring_system_id, assessment):
        """Overall score stays within [1, 5] for every five-point model."""
        result = ENGINE.compute(assessment, REGISTRY.resolve(scoring_system_id))
        assert 1.0 <= result.overall_score <= 5.0

    @given(assessment=assessment_st())
    @settings(max_examples=500, deadline=None)
    def test_competency_scores_within_scale(self, assessment):
        """Every scored competency stays within [1, 5]; unscored ones report None."""
        result = ENGINE.compute(assessment, REGISTRY.resolve("weighted_likert"))
        for entry in result.competency_breakdown:
            if entry.answered_count == 0:
                assert entry.average_score is None
            else:
                assert 1.0 <= entry.average_score <= 5.0

    @given(assessment=assessment_st())
    @settings(max_examples=500, deadline=None)
    def test_normalized_within_percent(self, assessment):
        """Normalized overall score stays within [0, 100]."""
        result = ENGINE.compute(assessment, REGISTRY.resolve("normalized_100"))
        assert 0.0 <= result.overall_score <= 100.0

    @given(assessment=assessment_st(), weights=category_weights_st())
    @settings(max_examples=500, deadline=None)
    def test_hierarchical_with_category_weights_within_scale(self, assessment, weights):
        """Category weighting never pushes the overall score out of scale."""
        result = ENGINE.compute(assessment, REGISTRY.resolve("hierarchical"), weights)
        assert 1.0 <= result.overall_score <= 5.0
        for entry in result.category_breakdown:
            if entry.average_score is not None:
                assert 1.0 <= entry.average_score <= 5.0


# ---------------------------------------------------------------------------
# Determinism and consistency
# ---------------------------------------------------------------------------


class TestDeterminism:

    @given(assessment=assessment_st())
    @settings(max_examples=500, deadline=None)
    def test_compute_is_deterministic(self, assessment):
        """Same snapshot and responses always serialize to the same Result."""
        model = REGISTRY.resolve("weighted_likert")
        first = ENGINE.compute(assessment, model, completed_at=FIXED_COMPLETION)
        second = ENGINE.compute(assessment, model, completed_at=FIXED_COMPLETION)
        assert first.model_dump_json() == second.model_dump_json()

    @given(assessment=assessment_st())
    @settings(max_examples=500, deadline=None)
    def test_normalized_tracks_base(self, assessment):
        """Normalized score equals the rescaled Weighted Likert score (within rounding)."""
        base = ENGINE.compute(assessment, REGISTRY.resolve("weighted_likert"))
        normalized = ENGINE.compute(assessment, REGISTRY.resolve("normalized_100"))
        expected = (base.overall_score - 1.0) / 4.0 * 100.0
        assert normalized.overall_score == pytest.approx(expected, abs=0.13)

    @given(assessment=assessment_st())
    @settings(max_examples=500, deadline=None)
    def test_counts_match_snapshot(self, assessment):
        """answered/total count the whole snapshot and completion rate follows."""
        result = ENGINE.compute(assessment, REGISTRY.resolve("weighted_likert"))
        assert result.total_questions == len(assessment.questions)
        assert result.answered_count == len(assessment.responses)
        assert 0.0 < result.completion_rate <= 100.0
        assert sum(e.questions_count for e in result.competency_breakdown) == result.total_questions
        assert len(result.competency_breakdown) == len(assessment.competency_ids)


# ---------------------------------------------------------------------------
# Bayesian weight learning
# ---------------------------------------------------------------------------


@st.composite
def history_st(draw):
    n_obs = draw(st.integers(min_value=2, max_value=12))
    score = st.floats(min_value=1.0, max_value=5.0, allow_nan=False, allow_infinity=False)
    outcomes = draw(st.lists(score, min_size=n_obs, max_size=n_obs))
    n_comp = draw(st.integers(min_value=1, max_value=5))
    history = {
        f"c{i}": draw(st.lists(score, min_size=n_obs, max_size=n_obs))
        for i in range(n_comp)
    }
    return history, outcomes


class TestLearnedWeightsPropertyBased:

    @given(history_st())
    @settings(max_examples=500, deadline=None)
    def test_learned_weights_are_a_distribution(self, data):
        """Learned weights are non-negative and sum to 1."""
        history, outcomes = data
        learned = learn_competency_weights(history, outcomes)
        assert set(learned) == set(history)
        assert all(w >= 0 for w in learned.values())
        assert sum(learned.values()) == pytest.approx(1.0)

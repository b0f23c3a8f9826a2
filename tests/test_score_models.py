# tests/test_score_models.py

"""
Score Model Tests - leaf scoring strategies and the Bayesian weight learner
"""

import pytest

from competency_engine.core.exceptions import ConfigurationError, InsufficientDataError
from competency_engine.models.enumerations import ScaleType, ScoringModelKind
from competency_engine.models.question import Competency, Question
from competency_engine.models.scoring_system import ScoringSystemConfig, WeightConfig
from competency_engine.scoring.bars_model import BarsModel
from competency_engine.scoring.base import ScoreInput
from competency_engine.scoring.bayesian_model import BayesianAdjustedModel, learn_competency_weights
from competency_engine.scoring.hierarchical_model import HierarchicalModel
from competency_engine.scoring.likert_model import WeightedLikertModel
from competency_engine.scoring.normalized_model import NormalizedModel
from competency_engine.scoring.rubric_model import WeightedRubricModel


def _question(weight=1.0, score_min=1, score_max=5):
    return Question(
        id="q",
        competency_id="c",
        statement="s",
        weight=weight,
        score_min=score_min,
        score_max=score_max,
    )


# =============================================================================
# WEIGHTED LIKERT
# =============================================================================

class TestWeightedLikertModel:

    def test_competency_score_from_question_weights(self):
        model = WeightedLikertModel(ScoringSystemConfig())
        output = model.compute([ScoreInput(4, 0.6), ScoreInput(5, 0.4)])
        assert output.aggregate == pytest.approx(4.4)
        assert output.total_weight == pytest.approx(1.0)

    def test_overall_from_competency_weights(self):
        model = WeightedLikertModel(ScoringSystemConfig())
        output = model.combine([ScoreInput(4.4, 0.8), ScoreInput(3.0, 0.2)])
        assert output.aggregate == pytest.approx(4.12)

    def test_weights_need_not_sum_to_one(self):
        model = WeightedLikertModel(ScoringSystemConfig())
        output = model.compute([ScoreInput(2, 0.3), ScoreInput(4, 0.3)])
        assert output.aggregate == pytest.approx(3.0)
        assert output.total_weight == pytest.approx(0.6)

    def test_zero_total_weight_raises(self):
        model = WeightedLikertModel(ScoringSystemConfig())
        with pytest.raises(InsufficientDataError):
            model.compute([ScoreInput(4, 0.0)])

    def test_empty_inputs_raise(self):
        model = WeightedLikertModel(ScoringSystemConfig())
        with pytest.raises(InsufficientDataError):
            model.compute([])

    def test_question_weight_ignored_when_disabled(self):
        model = WeightedLikertModel(ScoringSystemConfig(question_weights=False))
        assert model.question_weight(_question(weight=0.3)) == 1.0

    def test_configured_competency_weight_overrides_snapshot(self):
        model = WeightedLikertModel(ScoringSystemConfig())
        comps = [Competency(id="a", name="A", weight=0.5), Competency(id="b", name="B", weight=0.5)]
        weights = model.competency_weights(comps, WeightConfig(competency_weights={"a": 0.9}))
        assert weights == {"a": 0.9, "b": 0.5}

    def test_competency_weights_flat_when_disabled(self):
        model = WeightedLikertModel(ScoringSystemConfig(competency_weights=False))
        comps = [Competency(id="a", name="A", weight=0.5)]
        assert model.competency_weights(comps, WeightConfig()) == {"a": 1.0}

    def test_category_weights_rejected(self):
        with pytest.raises(ConfigurationError):
            WeightedLikertModel(ScoringSystemConfig(category_weights=True))


# =============================================================================
# BARS
# =============================================================================

class TestBarsModel:

    def test_anchor_maps_rating(self):
        model = BarsModel(ScoringSystemConfig(anchors={1: 1.0, 2: 2.5, 3: 3.5}))
        assert model.response_score(_question(), 2) == 2.5

    def test_missing_anchor_is_identity(self):
        model = BarsModel(ScoringSystemConfig(anchors={1: 1.5}))
        assert model.response_score(_question(), 4) == 4.0

    def test_scale_type_reported(self):
        model = BarsModel(ScoringSystemConfig(scale_type=ScaleType.BEHAVIORAL))
        assert model.describe()["input_scale"]["type"] == "behavioral"


# =============================================================================
# WEIGHTED RUBRIC
# =============================================================================

class TestWeightedRubricModel:

    def test_criterion_weights_normalized(self):
        model = WeightedRubricModel(ScoringSystemConfig())
        output = model.compute([ScoreInput(5, 0.2), ScoreInput(3, 0.2)])
        assert output.aggregate == pytest.approx(4.0)

    def test_unbalanced_criteria(self):
        model = WeightedRubricModel(ScoringSystemConfig())
        output = model.compute([ScoreInput(5, 0.75), ScoreInput(1, 0.25)])
        assert output.aggregate == pytest.approx(4.0)

    def test_zero_weight_raises(self):
        model = WeightedRubricModel(ScoringSystemConfig())
        with pytest.raises(InsufficientDataError):
            model.compute([ScoreInput(3, 0.0), ScoreInput(4, 0.0)])


# =============================================================================
# HIERARCHICAL
# =============================================================================

class TestHierarchicalModel:

    def test_always_uses_categories(self):
        model = HierarchicalModel(ScoringSystemConfig(category_weights=True))
        assert model.uses_categories(WeightConfig()) is True

    def test_unconfigured_category_weight_defaults_to_one(self):
        model = HierarchicalModel(ScoringSystemConfig(category_weights=True))
        weights = WeightConfig(category_weights={"People": 0.7})
        assert model.category_weight("People", weights) == 0.7
        assert model.category_weight("Technical", weights) == 1.0


# =============================================================================
# NORMALIZED 0-100
# =============================================================================

class TestNormalizedModel:

    def _model(self):
        config = ScoringSystemConfig(base_model=ScoringModelKind.WEIGHTED_LIKERT)
        return NormalizedModel(config, WeightedLikertModel(ScoringSystemConfig()))

    def test_normalizes_base_score(self):
        assert self._model().normalize(4.2) == pytest.approx(80.0)

    def test_scale_endpoints(self):
        model = self._model()
        assert model.response_score(_question(), 1) == pytest.approx(0.0)
        assert model.response_score(_question(), 5) == pytest.approx(100.0)

    def test_output_scale_is_percentage(self):
        model = self._model()
        assert model.output_scale.min == 0.0
        assert model.output_scale.max == 100.0
        assert model.input_scale.max == 5

    def test_aggregate_equals_rescaled_base(self):
        model = self._model()
        base = WeightedLikertModel(ScoringSystemConfig())
        raw = [(4, 0.6), (5, 0.4)]
        base_out = base.compute([ScoreInput(s, w) for s, w in raw]).aggregate
        norm_out = model.compute([
            ScoreInput(model.response_score(_question(), s), w) for s, w in raw
        ]).aggregate
        assert norm_out == pytest.approx(model.normalize(base_out))

    def test_describe_includes_base(self):
        assert self._model().describe()["base_model"] == "weighted_likert"


# =============================================================================
# BAYESIAN / AI-ADJUSTED
# =============================================================================

class TestBayesianAdjustedModel:

    def test_weight_vector_renormalized(self):
        model = BayesianAdjustedModel(ScoringSystemConfig())
        comps = [Competency(id="a", name="A"), Competency(id="b", name="B")]
        weights = model.competency_weights(comps, WeightConfig(competency_weights={"a": 3.0, "b": 1.0}))
        assert weights["a"] == pytest.approx(0.75)
        assert weights["b"] == pytest.approx(0.25)
        assert sum(weights.values()) == pytest.approx(1.0)

    def test_missing_competency_keeps_snapshot_weight(self):
        model = BayesianAdjustedModel(ScoringSystemConfig())
        comps = [Competency(id="a", name="A", weight=0.5), Competency(id="b", name="B", weight=0.5)]
        weights = model.competency_weights(comps, WeightConfig(competency_weights={"a": 0.5}))
        assert weights == {"a": pytest.approx(0.5), "b": pytest.approx(0.5)}

    def test_all_zero_vector_raises(self):
        model = BayesianAdjustedModel(ScoringSystemConfig())
        comps = [Competency(id="a", name="A")]
        with pytest.raises(InsufficientDataError):
            model.competency_weights(comps, WeightConfig(competency_weights={"a": 0.0}))


class TestLearnCompetencyWeights:

    def test_positive_and_negative_correlation(self):
        learned = learn_competency_weights({"a": [1, 2, 3], "b": [3, 2, 1]}, [1, 2, 3])
        assert learned["a"] == pytest.approx(1.0)
        assert learned["b"] == pytest.approx(0.0)

    def test_uniform_when_nothing_correlates(self):
        learned = learn_competency_weights({"a": [3, 2, 1], "b": [2, 2, 2]}, [1, 2, 3])
        assert learned == {"a": pytest.approx(0.5), "b": pytest.approx(0.5)}

    def test_weights_sum_to_one(self):
        learned = learn_competency_weights(
            {"a": [1, 2, 3, 4], "b": [1, 3, 2, 4], "c": [4, 3, 2, 1]},
            [1, 2, 3, 4],
        )
        assert sum(learned.values()) == pytest.approx(1.0)
        assert learned["a"] > learned["b"] > 0
        assert learned["c"] == 0

    def test_misaligned_history_rejected(self):
        with pytest.raises(ValueError):
            learn_competency_weights({"a": [1, 2]}, [1, 2, 3])

    def test_empty_history_raises(self):
        with pytest.raises(InsufficientDataError):
            learn_competency_weights({}, [1, 2])

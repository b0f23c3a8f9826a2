"""
Score Model Base
competency_engine/scoring/base.py

Every scoring algorithm shares one skeleton:

    aggregate = Σ(score × weight) / Σ(weight)

Models differ only in where the score comes from (response_score), which
weights they honour (question_weight, competency_weights, category_weight)
and whether they roll competencies up through categories.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Sequence

from competency_engine.core.exceptions import ConfigurationError, InsufficientDataError
from competency_engine.models.enumerations import ScoringModelKind
from competency_engine.models.question import Competency, Question
from competency_engine.models.scoring_system import (
    ScoreScale,
    ScoringSystemConfig,
    WeightConfig,
    WeightLevels,
)


@dataclass(frozen=True)
class ScoreInput:
    """One weighted score entering an aggregation step."""
    score: float
    weight: float = 1.0
    parent_weight: float = 1.0   # Weight of the enclosing node (e.g. the competency)


@dataclass(frozen=True)
class ModelOutput:
    """Output of ScoreModel.compute()."""
    aggregate: float     # Weighted average, unrounded
    total_weight: float  # Realized Σweight the average was divided by


class ScoreModel:
    """Base class for the closed family of scoring models."""

    kind: ScoringModelKind = ScoringModelKind.WEIGHTED_LIKERT
    supported_levels: WeightLevels = WeightLevels(question=True, competency=True)
    always_categorize: bool = False

    def __init__(self, config: ScoringSystemConfig):
        unsupported = [
            level for level in ("question", "competency", "category")
            if getattr(config.weight_levels, level) and not getattr(self.supported_levels, level)
        ]
        if unsupported:
            raise ConfigurationError(
                f"{self.kind.value} does not support {', '.join(unsupported)} weights",
                details={"model": self.kind.value, "unsupported_levels": unsupported},
            )
        self.config = config

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def weight_levels(self) -> WeightLevels:
        """Levels this instance actually applies weights at."""
        return self.config.weight_levels

    @property
    def input_scale(self) -> ScoreScale:
        """Rating range the model expects questions to use."""
        return self.config.scale

    @property
    def output_scale(self) -> ScoreScale:
        """Range every aggregate produced by this model falls in."""
        return self.config.scale

    def describe(self) -> Dict[str, object]:
        return {
            "model": self.kind.value,
            "weight_levels": self.weight_levels.model_dump(),
            "input_scale": self.input_scale.model_dump(mode="json"),
            "output_scale": self.output_scale.model_dump(mode="json"),
        }

    # ------------------------------------------------------------------
    # Score and weight sources
    # ------------------------------------------------------------------

    def response_score(self, question: Question, rating: int) -> float:
        """Score contributed by a rating; the raw rating by default."""
        return float(rating)

    def question_weight(self, question: Question) -> float:
        return question.weight if self.weight_levels.question else 1.0

    def competency_weights(
        self,
        competencies: Iterable[Competency],
        weights: WeightConfig,
    ) -> Dict[str, float]:
        """Weight per competency id; configured weights override snapshotted ones."""
        if not self.weight_levels.competency:
            return {c.id: 1.0 for c in competencies}
        return {
            c.id: weights.competency_weights.get(c.id, c.weight)
            for c in competencies
        }

    def uses_categories(self, weights: WeightConfig) -> bool:
        if self.always_categorize:
            return True
        return self.weight_levels.category and bool(weights.category_weights)

    def category_weight(self, category: str, weights: WeightConfig) -> float:
        if not self.weight_levels.category:
            return 1.0
        return weights.category_weights.get(category, 1.0)

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def compute(self, inputs: Sequence[ScoreInput]) -> ModelOutput:
        """
        Aggregate one competency's question scores.

        Raises InsufficientDataError when the inputs carry no weight.
        """
        return weighted_average(inputs)

    def combine(self, inputs: Sequence[ScoreInput]) -> ModelOutput:
        """Roll already-aggregated scores up one level (scale-preserving)."""
        return weighted_average(inputs)


def weighted_average(inputs: Sequence[ScoreInput]) -> ModelOutput:
    """Shared Σ(score·weight)/Σ(weight) skeleton."""
    total_weight = sum(i.weight for i in inputs)
    if total_weight <= 0:
        raise InsufficientDataError(
            f"Total weight is zero across {len(inputs)} input(s)"
        )
    aggregate = sum(i.score * i.weight for i in inputs) / total_weight
    return ModelOutput(aggregate=aggregate, total_weight=total_weight)

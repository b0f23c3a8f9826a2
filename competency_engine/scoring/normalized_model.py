# competency_engine/scoring/normalized_model.py
"""
Normalized 0-100 Model
----------------------
Wraps any base model and rescales its output:

    normalized = ((s − min) / (max − min)) × 100

where [min, max] is the base model's output scale. Each response score is
rescaled as it enters aggregation; the mapping is affine, so the weighted
averages above it equal the rescaled base averages.

Example (Weighted Likert on [1, 5], base score 4.2):
    ((4.2 − 1) / (5 − 1)) × 100 = 80.0
"""

from typing import Dict, Iterable, Sequence

from competency_engine.models.enumerations import ScaleType, ScoringModelKind
from competency_engine.models.question import Competency, Question
from competency_engine.models.scoring_system import (
    ScoreScale,
    ScoringSystemConfig,
    WeightConfig,
    WeightLevels,
)
from competency_engine.scoring.base import ModelOutput, ScoreInput, ScoreModel
from competency_engine.scoring.utils import rescale

PERCENT_SCALE = ScoreScale(min=0.0, max=100.0, type=ScaleType.PERCENTAGE)


class NormalizedModel(ScoreModel):
    """Delegates scoring and weighting to `base`, reports on a 0-100 scale."""

    kind = ScoringModelKind.NORMALIZED_100

    def __init__(self, config: ScoringSystemConfig, base: ScoreModel):
        self.base = base
        super().__init__(config)

    @property
    def supported_levels(self) -> WeightLevels:
        return self.base.supported_levels

    @property
    def always_categorize(self) -> bool:
        return self.base.always_categorize

    @property
    def weight_levels(self) -> WeightLevels:
        return self.base.weight_levels

    @property
    def input_scale(self) -> ScoreScale:
        return self.base.input_scale

    @property
    def output_scale(self) -> ScoreScale:
        return PERCENT_SCALE

    def describe(self) -> Dict[str, object]:
        info = super().describe()
        info["base_model"] = self.base.kind.value
        return info

    def normalize(self, score: float) -> float:
        base_scale = self.base.output_scale
        return rescale(score, base_scale.min, base_scale.max, PERCENT_SCALE.min, PERCENT_SCALE.max)

    def response_score(self, question: Question, rating: int) -> float:
        return self.normalize(self.base.response_score(question, rating))

    def question_weight(self, question: Question) -> float:
        return self.base.question_weight(question)

    def competency_weights(
        self,
        competencies: Iterable[Competency],
        weights: WeightConfig,
    ) -> Dict[str, float]:
        return self.base.competency_weights(competencies, weights)

    def uses_categories(self, weights: WeightConfig) -> bool:
        return self.base.uses_categories(weights)

    def category_weight(self, category: str, weights: WeightConfig) -> float:
        return self.base.category_weight(category, weights)

    def compute(self, inputs: Sequence[ScoreInput]) -> ModelOutput:
        """
        Base aggregation over scores already rescaled by response_score.

        Equal to rescaling the base aggregate since the mapping is affine.
        """
        return self.base.compute(inputs)

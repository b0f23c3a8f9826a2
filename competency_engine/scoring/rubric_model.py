# competency_engine/scoring/rubric_model.py
"""
Weighted Rubric Model
---------------------
Each question is a rubric criterion. Criterion weights are normalized to
sum to 1 within the competency before the competency score is formed:

    w_i'       = w_i / Σ w
    competency = Σ (criterion_score × w_i')

The competency-level roll-up then uses the shared weighted average.
"""

from typing import Sequence

from competency_engine.core.exceptions import InsufficientDataError
from competency_engine.models.enumerations import ScoringModelKind
from competency_engine.models.scoring_system import WeightLevels
from competency_engine.scoring.base import ModelOutput, ScoreInput, ScoreModel


class WeightedRubricModel(ScoreModel):
    """Criterion weights normalized per competency, then weighted competency average."""

    kind = ScoringModelKind.WEIGHTED_RUBRIC
    supported_levels = WeightLevels(question=True, competency=True, category=False)

    def compute(self, inputs: Sequence[ScoreInput]) -> ModelOutput:
        total_weight = sum(i.weight for i in inputs)
        if total_weight <= 0:
            raise InsufficientDataError(
                f"Rubric criteria carry no weight ({len(inputs)} criteria)"
            )
        normalized = [i.weight / total_weight for i in inputs]
        aggregate = sum(i.score * w for i, w in zip(inputs, normalized))
        return ModelOutput(aggregate=aggregate, total_weight=total_weight)

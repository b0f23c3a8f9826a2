# competency_engine/scoring/likert_model.py
"""
Weighted Likert Model
---------------------
Classic rating scale (1-5 by default) with question and competency weights.

Formula:
    competency = Σ (rating × question_weight) / Σ question_weight
    overall    = Σ (competency × competency_weight) / Σ competency_weight

Example (weights 0.6 / 0.4, ratings 4 / 5):
    competency = (4 × 0.6 + 5 × 0.4) / 1.0 = 4.4
"""

from competency_engine.models.enumerations import ScoringModelKind
from competency_engine.models.scoring_system import WeightLevels
from competency_engine.scoring.base import ScoreModel


class WeightedLikertModel(ScoreModel):
    """Raw rating as score, weighted at question and competency level."""

    kind = ScoringModelKind.WEIGHTED_LIKERT
    supported_levels = WeightLevels(question=True, competency=True, category=False)

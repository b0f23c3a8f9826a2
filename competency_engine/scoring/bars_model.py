# competency_engine/scoring/bars_model.py
"""
BARS Model (Behaviorally Anchored Rating Scales)
------------------------------------------------
The subject picks a behavioral anchor; the submitted rating is the anchor id.
The anchor -> score table is configuration (ScoringSystemConfig.anchors);
anchors missing from the table score as their own id.
"""

from typing import Dict

from competency_engine.models.enumerations import ScoringModelKind
from competency_engine.models.question import Question
from competency_engine.models.scoring_system import WeightLevels
from competency_engine.scoring.base import ScoreModel


class BarsModel(ScoreModel):
    """Anchor-mapped score, weighted at question and competency level."""

    kind = ScoringModelKind.BARS
    supported_levels = WeightLevels(question=True, competency=True, category=False)

    @property
    def anchors(self) -> Dict[int, float]:
        return self.config.anchors

    def response_score(self, question: Question, rating: int) -> float:
        return float(self.anchors.get(rating, rating))

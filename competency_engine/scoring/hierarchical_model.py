# competency_engine/scoring/hierarchical_model.py
"""
Hierarchical Category Aggregation Model
---------------------------------------
Three sequential weighted averages:

    question   -> competency  (question weights)
    competency -> category    (competency weights)
    category   -> overall     (category weights)

Competencies without a category are grouped under "uncategorized";
categories without a configured weight count as 1.0.
"""

from competency_engine.models.enumerations import ScoringModelKind
from competency_engine.models.scoring_system import WeightLevels
from competency_engine.scoring.base import ScoreModel


class HierarchicalModel(ScoreModel):
    """Always rolls competencies up through their categories."""

    kind = ScoringModelKind.HIERARCHICAL
    supported_levels = WeightLevels(question=True, competency=True, category=True)
    always_categorize = True

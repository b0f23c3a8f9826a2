"""
Built-in Scoring Systems
competency_engine/scoring/catalog.py

Scoring systems every tenant starts with. weighted_likert is the default.
"""

from typing import List

from competency_engine.models.enumerations import ScaleType, ScoringModelKind
from competency_engine.models.scoring_system import ScoringSystem, ScoringSystemConfig

LIKERT_LABELS = {
    1: "Strongly Disagree",
    2: "Disagree",
    3: "Neutral",
    4: "Agree",
    5: "Strongly Agree",
}

PERFORMANCE_LABELS = {
    1: "Below Expectations",
    2: "Meets Expectations",
    3: "Exceeds Expectations",
    4: "Outstanding",
}


def default_scoring_systems() -> List[ScoringSystem]:
    """Fresh copies of the built-in scoring systems."""
    return [
        ScoringSystem(
            id="weighted_likert",
            name="Weighted Likert Scale",
            description="Classic 1-5 rating scale with question and competency weights",
            model=ScoringModelKind.WEIGHTED_LIKERT,
            is_default=True,
            config=ScoringSystemConfig(
                question_weights=True,
                competency_weights=True,
                category_weights=False,
                scale_min=1,
                scale_max=5,
                scale_type=ScaleType.LIKERT,
                labels=LIKERT_LABELS,
            ),
        ),
        ScoringSystem(
            id="bars",
            name="BARS (Behaviorally Anchored Rating Scales)",
            description="Rating scale with specific behavioral descriptions for each score level",
            model=ScoringModelKind.BARS,
            config=ScoringSystemConfig(
                question_weights=True,
                competency_weights=True,
                category_weights=False,
                scale_min=1,
                scale_max=5,
                scale_type=ScaleType.BEHAVIORAL,
            ),
        ),
        ScoringSystem(
            id="four_point_scale",
            name="4-Point Performance Scale",
            description="Below Expectations, Meets Expectations, Exceeds Expectations, Outstanding",
            model=ScoringModelKind.WEIGHTED_LIKERT,
            config=ScoringSystemConfig(
                question_weights=True,
                competency_weights=True,
                category_weights=False,
                scale_min=1,
                scale_max=4,
                scale_type=ScaleType.PERFORMANCE,
                labels=PERFORMANCE_LABELS,
            ),
        ),
        ScoringSystem(
            id="weighted_rubric",
            name="Weighted Rubric",
            description="Per-criterion scores with criteria weights normalized within each competency",
            model=ScoringModelKind.WEIGHTED_RUBRIC,
            config=ScoringSystemConfig(
                question_weights=True,
                competency_weights=True,
                category_weights=False,
                scale_min=1,
                scale_max=5,
                scale_type=ScaleType.RUBRIC,
            ),
        ),
        ScoringSystem(
            id="hierarchical",
            name="Hierarchical Category Aggregation",
            description="Question, competency and category weighted averages rolled up in sequence",
            model=ScoringModelKind.HIERARCHICAL,
            config=ScoringSystemConfig(
                question_weights=True,
                competency_weights=True,
                category_weights=True,
                scale_min=1,
                scale_max=5,
            ),
        ),
        ScoringSystem(
            id="normalized_100",
            name="Normalized 0-100",
            description="Weighted Likert scores rescaled to a 0-100 range",
            model=ScoringModelKind.NORMALIZED_100,
            config=ScoringSystemConfig(
                question_weights=True,
                competency_weights=True,
                category_weights=False,
                scale_min=1,
                scale_max=5,
                base_model=ScoringModelKind.WEIGHTED_LIKERT,
            ),
        ),
        ScoringSystem(
            id="bayesian_adjusted",
            name="Bayesian / AI-Adjusted Weights",
            description="Competency weights recomputed each cycle from performance outcomes",
            model=ScoringModelKind.BAYESIAN_ADJUSTED,
            config=ScoringSystemConfig(
                question_weights=True,
                competency_weights=True,
                category_weights=False,
                scale_min=1,
                scale_max=5,
            ),
        ),
    ]

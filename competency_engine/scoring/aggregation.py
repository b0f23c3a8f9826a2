"""
Aggregation Engine
competency_engine/scoring/aggregation.py

Rolls an assessment's responses up through the hierarchy with a selected
ScoreModel:

    question -> competency -> [category ->] overall

Pipeline:
  1. Scale check: every snapshotted question must use the model's input scale
  2. Partition responses by competency using the question snapshot
  3. Competency score = model.compute(answered questions)
     (unanswered competencies report None and carry no weight upward)
  4. Optional category level when the model rolls up through categories
  5. Overall = weighted average of the top level
  6. Round reported scores to 2 places, never intermediate values
"""

from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import structlog

from competency_engine.core.exceptions import InsufficientDataError, ScaleMismatchError
from competency_engine.models.assessment import Assessment
from competency_engine.models.question import Competency
from competency_engine.models.result import (
    CategoryBreakdown,
    CompetencyBreakdown,
    ResponseDetail,
    Result,
)
from competency_engine.models.scoring_system import WeightConfig
from competency_engine.scoring.base import ScoreInput, ScoreModel
from competency_engine.scoring.utils import round_score

logger = structlog.get_logger(__name__)

UNCATEGORIZED = "uncategorized"


class AggregationEngine:
    """Compute a Result from an assessment snapshot. Never mutates the assessment."""

    def __init__(self, decimal_places: int = 2):
        self.decimal_places = decimal_places

    def compute(
        self,
        assessment: Assessment,
        model: ScoreModel,
        weights: Optional[WeightConfig] = None,
        completed_at: Optional[datetime] = None,
    ) -> Result:
        """
        Score an assessment.

        Args:
            assessment: Assessment with its question snapshot and responses.
            model: Resolved ScoreModel for the assessment's scoring system.
            weights: Weight overrides for this run (competency/category).
            completed_at: Completion instant stamped onto the Result.

        Returns:
            Result with overall score and per-competency breakdown.

        Raises:
            ScaleMismatchError: a question's range differs from the model scale.
            InsufficientDataError: nothing answered carries any weight.
        """
        weights = weights or WeightConfig()
        self._check_scale(assessment, model)

        competencies = self._competencies(assessment)
        competency_weights = model.competency_weights(competencies, weights)

        breakdown: List[CompetencyBreakdown] = []
        competency_scores: Dict[str, float] = {}

        # Steps 2-3: question -> competency
        for competency in competencies:
            score, entry = self._score_competency(
                assessment, model, competency, competency_weights[competency.id]
            )
            breakdown.append(entry)
            if score is not None:
                competency_scores[competency.id] = score

        if not competency_scores:
            raise InsufficientDataError(
                f"Assessment {assessment.id} has no scored competencies "
                f"({assessment.answered_count}/{assessment.total_questions} answered)"
            )

        # Steps 4-5: competency -> [category ->] overall
        category_breakdown: List[CategoryBreakdown] = []
        if model.uses_categories(weights):
            overall, category_breakdown = self._roll_up_categories(
                model, weights, competencies, competency_scores, competency_weights
            )
        else:
            overall = model.combine([
                ScoreInput(score=score, weight=competency_weights[cid])
                for cid, score in competency_scores.items()
            ]).aggregate

        total = assessment.total_questions
        answered = assessment.answered_count

        result = Result(
            assessment_id=assessment.id,
            subject_id=assessment.subject_id,
            scoring_system_id=assessment.scoring_system_id,
            model=model.kind,
            overall_score=round_score(overall, self.decimal_places),
            scale_min=model.output_scale.min,
            scale_max=model.output_scale.max,
            answered_count=answered,
            total_questions=total,
            completion_rate=round_score(answered / total * 100 if total else 0.0, self.decimal_places),
            competency_breakdown=breakdown,
            category_breakdown=category_breakdown,
            weight_cycle_id=weights.cycle_id,
            started_at=assessment.started_at,
            completed_at=completed_at,
        )

        logger.info(
            "assessment_scored",
            assessment_id=assessment.id,
            model=model.kind.value,
            overall_score=result.overall_score,
            answered_count=answered,
            total_questions=total,
            scored_competencies=len(competency_scores),
            categorized=bool(category_breakdown),
        )
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_scale(self, assessment: Assessment, model: ScoreModel) -> None:
        scale = model.input_scale
        for question in assessment.questions:
            if not scale.matches(question.score_min, question.score_max):
                raise ScaleMismatchError(
                    int(scale.min), int(scale.max),
                    question.score_min, question.score_max,
                    question_id=question.id,
                )

    def _competencies(self, assessment: Assessment) -> List[Competency]:
        """Snapshotted competencies in selection order; ids without a snapshot get a bare entry."""
        competencies = []
        for competency_id in assessment.competency_ids:
            competency = assessment.get_competency(competency_id)
            competencies.append(competency or Competency(id=competency_id, name=competency_id))
        return competencies

    def _score_competency(
        self,
        assessment: Assessment,
        model: ScoreModel,
        competency: Competency,
        competency_weight: float,
    ) -> Tuple[Optional[float], CompetencyBreakdown]:
        details: List[ResponseDetail] = []
        inputs: List[ScoreInput] = []

        questions = assessment.questions_for(competency.id)
        for question in questions:
            response = assessment.responses.get(question.id)
            if response is None:
                details.append(ResponseDetail(question_id=question.id, statement=question.statement))
                continue
            score = model.response_score(question, response.rating)
            inputs.append(ScoreInput(
                score=score,
                weight=model.question_weight(question),
                parent_weight=competency_weight,
            ))
            details.append(ResponseDetail(
                question_id=question.id,
                statement=question.statement,
                rating=response.rating,
                score=round_score(score, self.decimal_places),
                comment=response.comment,
            ))

        score: Optional[float] = None
        if inputs:
            try:
                score = model.compute(inputs).aggregate
            except InsufficientDataError:
                logger.warning(
                    "competency_without_weight",
                    assessment_id=assessment.id,
                    competency_id=competency.id,
                    answered=len(inputs),
                )

        entry = CompetencyBreakdown(
            competency_id=competency.id,
            competency_name=competency.name,
            category=competency.category,
            weight=competency_weight,
            average_score=round_score(score, self.decimal_places),
            questions_count=len(questions),
            answered_count=len(inputs),
            responses=details,
        )
        return score, entry

    def _roll_up_categories(
        self,
        model: ScoreModel,
        weights: WeightConfig,
        competencies: List[Competency],
        competency_scores: Dict[str, float],
        competency_weights: Dict[str, float],
    ) -> Tuple[float, List[CategoryBreakdown]]:
        groups: "OrderedDict[str, List[str]]" = OrderedDict()
        for competency in competencies:
            groups.setdefault(competency.category or UNCATEGORIZED, []).append(competency.id)

        category_inputs: List[ScoreInput] = []
        category_breakdown: List[CategoryBreakdown] = []
        for category, member_ids in groups.items():
            category_weight = model.category_weight(category, weights)
            scored = [cid for cid in member_ids if cid in competency_scores]
            score: Optional[float] = None
            if scored:
                try:
                    score = model.combine([
                        ScoreInput(
                            score=competency_scores[cid],
                            weight=competency_weights[cid],
                            parent_weight=category_weight,
                        )
                        for cid in scored
                    ]).aggregate
                except InsufficientDataError:
                    score = None
            if score is not None and category_weight > 0:
                category_inputs.append(ScoreInput(score=score, weight=category_weight))
            category_breakdown.append(CategoryBreakdown(
                category=category,
                weight=category_weight,
                average_score=round_score(score, self.decimal_places),
                competency_ids=member_ids,
            ))

        overall = model.combine(category_inputs).aggregate
        return overall, category_breakdown

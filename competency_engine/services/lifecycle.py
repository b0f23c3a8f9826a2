"""
Assessment Lifecycle - Competency Assessment Engine
competency_engine/services/lifecycle.py

State machine for an assessment run:

    (none) --start--> IN_PROGRESS --complete--> COMPLETED
                          |
                          +--abandon--> ABANDONED

Responses may be submitted (and overwritten) only while IN_PROGRESS.
Completion scores the assessment exactly once: the status change and the
stored Result are written together, and later calls return that Result.
The write is guarded by the revision the score was computed from, so a
response that lands mid-scoring forces a rescore instead of being dropped
from the Result.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

import structlog

from competency_engine.core.exceptions import (
    ComputationError,
    ConcurrentModificationError,
    EmptySelectionError,
    EntityNotFoundException,
    InvalidRatingError,
    NoQuestionsError,
    ResultNotAvailableError,
    TerminalStateError,
    UnknownQuestionError,
    ValidationError,
)
from competency_engine.models.assessment import Assessment, Response
from competency_engine.models.enumerations import AssessmentStatus
from competency_engine.models.question import Competency, Question
from competency_engine.models.result import Result
from competency_engine.models.scoring_system import ScoringSystem, WeightConfig
from competency_engine.repositories.assessment_repository import AssessmentRepository
from competency_engine.repositories.scoring_config_repository import (
    InMemoryScoringConfigRepository,
    ScoringConfigRepository,
)
from competency_engine.scoring.aggregation import AggregationEngine
from competency_engine.scoring.registry import ScoreModelRegistry
from competency_engine.services.cache import ResultCache
from competency_engine.services.question_source import QuestionSource

logger = structlog.get_logger(__name__)

MAX_COMPLETION_ATTEMPTS = 3


def _dedupe(ids: Iterable[str]) -> List[str]:
    """Drop blanks and repeats, keeping first-seen order."""
    seen = set()
    unique = []
    for raw in ids:
        cid = (raw or "").strip()
        if cid and cid not in seen:
            seen.add(cid)
            unique.append(cid)
    return unique


class AssessmentLifecycle:
    """Orchestrates start, answering, completion and abandonment."""

    def __init__(
        self,
        repository: AssessmentRepository,
        question_source: QuestionSource,
        registry: ScoreModelRegistry,
        engine: Optional[AggregationEngine] = None,
        result_cache: Optional[ResultCache] = None,
        config_repository: Optional[ScoringConfigRepository] = None,
    ):
        self.repository = repository
        self.question_source = question_source
        self.registry = registry
        self.engine = engine or AggregationEngine()
        self.result_cache = result_cache or ResultCache(None)
        self.config_repository = config_repository or InMemoryScoringConfigRepository()

    # ------------------------------------------------------------------
    # Weight configuration
    # ------------------------------------------------------------------

    def set_weights(self, scoring_system_id: str, weights: WeightConfig) -> None:
        """Install the weight vector used by future completions of a system."""
        self.registry.get_system(scoring_system_id)
        self.config_repository.save_weights(scoring_system_id, weights)
        logger.info(
            "weights_configured",
            scoring_system_id=scoring_system_id,
            cycle_id=weights.cycle_id,
            competencies=len(weights.competency_weights),
            categories=len(weights.category_weights),
        )

    def weights_for(self, scoring_system_id: str) -> WeightConfig:
        return self.config_repository.load_weights(scoring_system_id) or WeightConfig()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(
        self,
        subject_id: str,
        competency_ids: List[str],
        scoring_system_id: Optional[str] = None,
    ) -> Assessment:
        """
        Create an IN_PROGRESS assessment with a snapshot of its questions.

        The returned assessment's next_question() is the first question.

        Raises:
            EmptySelectionError: no competency selected.
            UnknownScoringSystemError: scoring_system_id is not registered.
            ValidationError: the scoring system is inactive.
            NoQuestionsError: the selection has no questions.
            QuestionSourceError: the question source failed.
        """
        selected = _dedupe(competency_ids)
        if not selected:
            raise EmptySelectionError()

        system = self._resolve_system(scoring_system_id)

        competencies: List[Competency] = []
        questions: List[Question] = []
        for competency_id in selected:
            competency = self.question_source.get_competency(competency_id)
            if competency is None:
                logger.warning("competency_not_found", competency_id=competency_id)
                competency = Competency(id=competency_id, name=competency_id)
            competencies.append(competency)
            for question in self.question_source.list_questions(competency_id):
                if question.competency_id != competency_id:
                    question = question.model_copy(update={"competency_id": competency_id})
                questions.append(question)

        if not questions:
            raise NoQuestionsError(selected)

        assessment = Assessment(
            subject_id=subject_id,
            scoring_system_id=system.id,
            competency_ids=selected,
            competencies=competencies,
            questions=questions,
        )
        self.repository.save(assessment)

        logger.info(
            "assessment_started",
            assessment_id=assessment.id,
            subject_id=subject_id,
            scoring_system_id=system.id,
            competencies=len(selected),
            total_questions=len(questions),
        )
        return assessment

    def submit_response(
        self,
        assessment_id: str,
        question_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> Assessment:
        """
        Record (or overwrite) the response to one snapshotted question.

        Raises:
            TerminalStateError: assessment is COMPLETED or ABANDONED.
            UnknownQuestionError: question is not in the snapshot.
            InvalidRatingError: rating outside [score_min, score_max].
        """
        assessment = self.repository.load(assessment_id)
        self._require_in_progress(assessment, "submit a response to")

        question = assessment.get_question(question_id)
        if question is None:
            raise UnknownQuestionError(assessment_id, question_id)
        if not question.score_min <= rating <= question.score_max:
            raise InvalidRatingError(question_id, rating, question.score_min, question.score_max)

        replaced = question_id in assessment.responses
        updated = self.repository.upsert_response(
            assessment_id,
            Response(question_id=question_id, rating=rating, comment=comment),
        )

        logger.info(
            "response_submitted",
            assessment_id=assessment_id,
            question_id=question_id,
            rating=rating,
            replaced=replaced,
            answered_count=updated.answered_count,
            total_questions=updated.total_questions,
        )
        return updated

    def complete(self, assessment_id: str) -> Result:
        """
        Score and complete an assessment; safe to call more than once.

        A COMPLETED assessment returns its stored Result unchanged. When
        scoring fails the assessment stays IN_PROGRESS. A response written
        while the score was being computed triggers a rescore from the
        updated assessment.

        Raises:
            TerminalStateError: assessment was ABANDONED.
            InsufficientDataError / ScaleMismatchError: scoring failed.
            ConcurrentModificationError: responses kept arriving for
                MAX_COMPLETION_ATTEMPTS rescoring rounds.
        """
        assessment = self.repository.load(assessment_id)
        attempt = 0
        while True:
            if assessment.status == AssessmentStatus.COMPLETED:
                logger.info("assessment_already_completed", assessment_id=assessment_id)
                return self._stored_result(assessment_id)
            self._require_in_progress(assessment, "complete")
            if attempt == MAX_COMPLETION_ATTEMPTS:
                raise ConcurrentModificationError(assessment_id, attempt)
            attempt += 1

            completed_at = datetime.now(timezone.utc)
            result = self._score(assessment, completed_at)
            if self.repository.mark_completed(
                assessment_id, result, completed_at, expected_revision=assessment.revision
            ):
                break

            assessment = self.repository.load(assessment_id)
            logger.info(
                "assessment_changed_during_completion",
                assessment_id=assessment_id,
                attempt=attempt,
                status=assessment.status.value,
                revision=assessment.revision,
            )

        self.result_cache.put(result)
        logger.info(
            "assessment_completed",
            assessment_id=assessment_id,
            scoring_system_id=assessment.scoring_system_id,
            overall_score=result.overall_score,
            answered_count=result.answered_count,
            total_questions=result.total_questions,
        )
        return result

    def abandon(self, assessment_id: str) -> Assessment:
        """
        Move an IN_PROGRESS assessment to ABANDONED.

        Raises:
            TerminalStateError: assessment is already terminal.
        """
        assessment = self.repository.load(assessment_id)
        self._require_in_progress(assessment, "abandon")

        if not self.repository.mark_abandoned(assessment_id):
            current = self.repository.load(assessment_id)
            raise TerminalStateError(assessment_id, current.status.value, "abandon")

        logger.info(
            "assessment_abandoned",
            assessment_id=assessment_id,
            answered_count=assessment.answered_count,
            total_questions=assessment.total_questions,
        )
        return self.repository.load(assessment_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_assessment(self, assessment_id: str) -> Assessment:
        return self.repository.load(assessment_id)

    def get_results(self, assessment_id: str) -> Result:
        """
        Stored Result of a completed assessment (never recomputed).

        Raises:
            ResultNotAvailableError: assessment is not COMPLETED.
        """
        assessment = self.repository.load(assessment_id)
        if assessment.status != AssessmentStatus.COMPLETED:
            raise ResultNotAvailableError(assessment_id, assessment.status.value)
        return self._stored_result(assessment_id)

    def list_assessments(self, subject_id: str) -> List[Assessment]:
        """A subject's assessments, newest first."""
        return self.repository.list_by_subject(subject_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_system(self, scoring_system_id: Optional[str]) -> ScoringSystem:
        if scoring_system_id is None:
            return self.registry.default()
        system = self.registry.get_system(scoring_system_id)
        if not system.is_active:
            raise ValidationError(
                f"Scoring system {scoring_system_id} is not active",
                details={"scoring_system_id": scoring_system_id},
            )
        return system

    def _score(self, assessment: Assessment, completed_at: datetime) -> Result:
        model = self.registry.resolve(assessment.scoring_system_id)
        weights = self.weights_for(assessment.scoring_system_id)
        try:
            return self.engine.compute(assessment, model, weights, completed_at=completed_at)
        except ComputationError as e:
            logger.warning(
                "assessment_completion_failed",
                assessment_id=assessment.id,
                error_code=e.error_code,
                reason=e.message,
            )
            raise

    def _require_in_progress(self, assessment: Assessment, event: str) -> None:
        if assessment.status.is_terminal:
            raise TerminalStateError(assessment.id, assessment.status.value, event)

    def _stored_result(self, assessment_id: str) -> Result:
        result = self.result_cache.get_or_load(
            assessment_id, lambda: self.repository.load_result(assessment_id)
        )
        if result is None:
            raise EntityNotFoundException("Result", assessment_id)
        return result

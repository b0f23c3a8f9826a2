from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from competency_engine.models.enumerations import AssessmentStatus, QuestionType
from competency_engine.models.question import Competency, Question


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Response(BaseModel):
    """
    Rating submitted for one snapshotted question.

    Keyed by (assessment_id, question_id); a resubmission replaces it.
    """

    question_id: str = Field(..., min_length=1)

    rating: int = Field(..., description="Rating within the question's [score_min, score_max]")

    comment: Optional[str] = Field(default=None, max_length=2000)

    submitted_at: datetime = Field(default_factory=_utcnow)


class Assessment(BaseModel):
    """
    One subject's assessment run.

    The question and competency lists are snapshots taken when the
    assessment started; scoring only ever reads these copies.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))

    subject_id: str = Field(..., min_length=1, description="User who owns the assessment")

    scoring_system_id: str = Field(..., min_length=1)

    competency_ids: List[str] = Field(..., min_length=1)

    competencies: List[Competency] = Field(
        default_factory=list,
        description="Competency snapshot (name, category, weight)"
    )

    questions: List[Question] = Field(
        default_factory=list,
        description="Ordered question snapshot"
    )

    responses: Dict[str, Response] = Field(
        default_factory=dict,
        description="question_id -> latest response"
    )

    status: AssessmentStatus = Field(default=AssessmentStatus.IN_PROGRESS)

    revision: int = Field(
        default=0,
        ge=0,
        description="Bumped on every response write; completion is guarded by it"
    )

    started_at: datetime = Field(default_factory=_utcnow)

    completed_at: Optional[datetime] = Field(default=None)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def answered_count(self) -> int:
        return len(self.responses)

    def get_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def get_competency(self, competency_id: str) -> Optional[Competency]:
        for competency in self.competencies:
            if competency.id == competency_id:
                return competency
        return None

    def questions_for(self, competency_id: str) -> List[Question]:
        return [q for q in self.questions if q.competency_id == competency_id]

    def next_question(self) -> Optional[Question]:
        """First snapshotted question without a response, in snapshot order."""
        for question in self.questions:
            if question.id not in self.responses:
                return question
        return None


# =============================================================================
# API PAYLOADS
# =============================================================================

class StartAssessmentRequest(BaseModel):
    """Body of POST /assessments."""

    subject_id: str = Field(..., min_length=1, max_length=255)

    competency_ids: List[str] = Field(..., description="Competencies to assess")

    scoring_system_id: Optional[str] = Field(
        default=None,
        description="Scoring system to use; the tenant default when omitted"
    )

    @field_validator("competency_ids")
    @classmethod
    def strip_blank_ids(cls, v: List[str]) -> List[str]:
        return [cid.strip() for cid in v if cid and cid.strip()]


class SubmitResponseRequest(BaseModel):
    """Body of POST /assessments/{id}/responses."""

    question_id: str = Field(..., min_length=1)

    rating: int = Field(..., description="Rating within the question's score range")

    comment: Optional[str] = Field(default=None, max_length=2000)


class QuestionView(BaseModel):
    """Snapshotted question together with the subject's current answer."""

    id: str
    competency_id: str
    competency_name: Optional[str] = None
    statement: str
    type: QuestionType
    examples: List[str]
    score_min: int
    score_max: int
    response: Optional[Response] = None


class AssessmentView(BaseModel):
    """Assessment as returned to API callers."""

    id: str
    subject_id: str
    scoring_system_id: str
    status: AssessmentStatus
    competency_ids: List[str]
    total_questions: int
    answered_count: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    next_question: Optional[QuestionView] = None
    questions: List[QuestionView] = Field(default_factory=list)

    @classmethod
    def from_assessment(cls, assessment: Assessment, include_questions: bool = True) -> "AssessmentView":
        names = {c.id: c.name for c in assessment.competencies}

        def view(question: Question) -> QuestionView:
            return QuestionView(
                id=question.id,
                competency_id=question.competency_id,
                competency_name=names.get(question.competency_id),
                statement=question.statement,
                type=question.type,
                examples=list(question.examples),
                score_min=question.score_min,
                score_max=question.score_max,
                response=assessment.responses.get(question.id),
            )

        upcoming = assessment.next_question()
        return cls(
            id=assessment.id,
            subject_id=assessment.subject_id,
            scoring_system_id=assessment.scoring_system_id,
            status=assessment.status,
            competency_ids=list(assessment.competency_ids),
            total_questions=assessment.total_questions,
            answered_count=assessment.answered_count,
            started_at=assessment.started_at,
            completed_at=assessment.completed_at,
            next_question=view(upcoming) if upcoming is not None else None,
            questions=[view(q) for q in assessment.questions] if include_questions else [],
        )


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error occurrence timestamp")

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from competency_engine.models.enumerations import ScoringModelKind


class ResponseDetail(BaseModel):
    """One snapshotted question inside a competency breakdown."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    statement: str
    rating: Optional[int] = Field(default=None, description="None when unanswered")
    score: Optional[float] = Field(default=None, description="Model score for the rating")
    comment: Optional[str] = None


class CompetencyBreakdown(BaseModel):
    """Score of one competency; average_score is None when nothing was answered."""

    model_config = ConfigDict(frozen=True)

    competency_id: str
    competency_name: str
    category: Optional[str] = None
    weight: float
    average_score: Optional[float] = None
    questions_count: int = Field(..., description="Snapshotted questions, answered or not")
    answered_count: int
    responses: List[ResponseDetail] = Field(default_factory=list)


class CategoryBreakdown(BaseModel):
    """Score of one category (only present when category weighting applies)."""

    model_config = ConfigDict(frozen=True)

    category: str
    weight: float
    average_score: Optional[float] = None
    competency_ids: List[str] = Field(default_factory=list)


class Result(BaseModel):
    """
    Immutable scoring artifact produced once at completion.

    Stored as-is and returned on every later request; never recomputed.
    """

    model_config = ConfigDict(frozen=True)

    assessment_id: str
    subject_id: str
    scoring_system_id: str
    model: ScoringModelKind
    overall_score: float
    scale_min: float
    scale_max: float
    answered_count: int
    total_questions: int
    completion_rate: float = Field(..., description="answered / total x 100")
    competency_breakdown: List[CompetencyBreakdown]
    category_breakdown: List[CategoryBreakdown] = Field(default_factory=list)
    weight_cycle_id: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None

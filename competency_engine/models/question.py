from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from competency_engine.models.enumerations import QuestionType


class Question(BaseModel):
    """
    Assessable question as supplied by the question source.

    Frozen: an assessment keeps its own copy taken at start, so later edits
    to the upstream question never reach an in-flight or completed assessment.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Question identifier")

    competency_id: str = Field(..., min_length=1, description="Owning competency")

    statement: str = Field(..., min_length=1, description="Question text shown to the subject")

    type: QuestionType = Field(
        default=QuestionType.BEHAVIORAL,
        description="BEHAVIORAL, SITUATIONAL, TECHNICAL or KNOWLEDGE"
    )

    examples: List[str] = Field(
        default_factory=list,
        description="Ordered example behaviors or answers"
    )

    weight: float = Field(
        default=1.0,
        gt=0,
        le=1,
        description="Relative weight among the competency's questions"
    )

    score_min: int = Field(default=1, description="Lowest allowed rating")

    score_max: int = Field(default=5, description="Highest allowed rating")

    @model_validator(mode="after")
    def validate_score_range(self):
        """Ensure score_max > score_min."""
        if self.score_max <= self.score_min:
            raise ValueError("score_max must be > score_min")
        return self


class Competency(BaseModel):
    """Competency being assessed; weight is relative to its siblings."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)

    name: str = Field(..., min_length=1, max_length=255)

    category: Optional[str] = Field(
        default=None,
        description="Optional grouping used by category-level weighting"
    )

    weight: float = Field(default=1.0, gt=0, le=1)


class Category(BaseModel):
    """Optional competency grouping."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)

    weight: float = Field(default=1.0, gt=0, le=1)

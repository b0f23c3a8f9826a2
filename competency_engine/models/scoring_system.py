from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from competency_engine.models.enumerations import ScaleType, ScoringModelKind


class ScoreScale(BaseModel):
    """Inclusive score bounds of a model's inputs or outputs."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    type: ScaleType = ScaleType.LIKERT

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def matches(self, score_min: float, score_max: float) -> bool:
        return self.min == score_min and self.max == score_max


class WeightLevels(BaseModel):
    """Which hierarchy levels a model (or a configuration) applies weights at."""

    model_config = ConfigDict(frozen=True)

    question: bool = False
    competency: bool = False
    category: bool = False


class ScoringSystemConfig(BaseModel):
    """
    Validated scoring system configuration.

    Unknown keys are rejected so a typo in a stored config fails at load time
    instead of being silently ignored.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    question_weights: bool = Field(default=True, description="Apply per-question weights")

    competency_weights: bool = Field(default=True, description="Apply per-competency weights")

    category_weights: bool = Field(default=False, description="Apply per-category weights")

    scale_min: int = Field(default=1, description="Lowest rating on the question scale")

    scale_max: int = Field(default=5, description="Highest rating on the question scale")

    scale_type: ScaleType = Field(default=ScaleType.LIKERT)

    labels: Dict[int, str] = Field(
        default_factory=dict,
        description="Display label per rating value"
    )

    anchors: Dict[int, float] = Field(
        default_factory=dict,
        description="BARS only: behavioral anchor id -> score"
    )

    base_model: Optional[ScoringModelKind] = Field(
        default=None,
        description="normalized_100 only: model whose output gets rescaled"
    )

    @model_validator(mode="after")
    def validate_scale(self):
        """Ensure scale bounds are ordered and anchors/labels sit inside them."""
        if self.scale_max <= self.scale_min:
            raise ValueError("scale_max must be > scale_min")
        for rating in self.labels:
            if not self.scale_min <= rating <= self.scale_max:
                raise ValueError(f"label key {rating} outside scale [{self.scale_min}, {self.scale_max}]")
        for anchor_id, score in self.anchors.items():
            if not self.scale_min <= anchor_id <= self.scale_max:
                raise ValueError(f"anchor id {anchor_id} outside scale [{self.scale_min}, {self.scale_max}]")
            if not self.scale_min <= score <= self.scale_max:
                raise ValueError(f"anchor score {score} outside scale [{self.scale_min}, {self.scale_max}]")
        return self

    @property
    def weight_levels(self) -> WeightLevels:
        return WeightLevels(
            question=self.question_weights,
            competency=self.competency_weights,
            category=self.category_weights,
        )

    @property
    def scale(self) -> ScoreScale:
        return ScoreScale(min=self.scale_min, max=self.scale_max, type=self.scale_type)


class ScoringSystem(BaseModel):
    """Named, configured scoring model available to a tenant."""

    id: str = Field(..., min_length=1, description="Stable system id, e.g. 'weighted_likert'")

    name: str = Field(..., min_length=1, max_length=255)

    description: str = Field(default="")

    model: ScoringModelKind = Field(..., description="Algorithm used to score")

    is_default: bool = Field(default=False)

    is_active: bool = Field(default=True)

    config: ScoringSystemConfig = Field(default_factory=ScoringSystemConfig)


class WeightConfig(BaseModel):
    """
    Weights resolved for one scoring run.

    Weights are relative: they are divided by the realized sum of the weights
    actually present, so they never need to pre-sum to 1.
    """

    model_config = ConfigDict(frozen=True)

    competency_weights: Dict[str, float] = Field(
        default_factory=dict,
        description="Competency id -> weight; overrides the competency's own weight"
    )

    category_weights: Dict[str, float] = Field(
        default_factory=dict,
        description="Category name -> weight"
    )

    cycle_id: Optional[str] = Field(
        default=None,
        description="Batch cycle that produced an adjusted weight vector"
    )

    @field_validator("competency_weights", "category_weights")
    @classmethod
    def validate_non_negative(cls, v: Dict[str, float]) -> Dict[str, float]:
        for key, weight in v.items():
            if weight < 0:
                raise ValueError(f"weight for {key} must be >= 0, got {weight}")
        return v


# =============================================================================
# API PAYLOADS
# =============================================================================

class CreateScoringSystemRequest(BaseModel):
    """Body of POST /scoring-systems. New systems start active and non-default."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, max_length=64, pattern=r"^[a-z0-9][a-z0-9_\-]*$")

    name: str = Field(..., min_length=1, max_length=255)

    description: str = Field(default="", max_length=2000)

    model: ScoringModelKind

    config: ScoringSystemConfig = Field(default_factory=ScoringSystemConfig)


class UpdateScoringSystemRequest(BaseModel):
    """Body of PUT /scoring-systems/{id}; omitted fields keep their value."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)

    description: Optional[str] = Field(default=None, max_length=2000)

    config: Optional[ScoringSystemConfig] = None

    is_active: Optional[bool] = None

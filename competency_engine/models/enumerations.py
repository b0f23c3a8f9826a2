from enum import Enum


class QuestionType(str, Enum):
    BEHAVIORAL = "BEHAVIORAL"
    SITUATIONAL = "SITUATIONAL"
    TECHNICAL = "TECHNICAL"
    KNOWLEDGE = "KNOWLEDGE"


class AssessmentStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"

    @property
    def is_terminal(self) -> bool:
        return self is not AssessmentStatus.IN_PROGRESS


class ScoringModelKind(str, Enum):
    WEIGHTED_LIKERT = "weighted_likert"      # Raw rating, question + competency weights
    BARS = "bars"                            # Behavioral anchor id -> configured score
    WEIGHTED_RUBRIC = "weighted_rubric"      # Criterion weights normalized per competency
    HIERARCHICAL = "hierarchical"            # question -> competency -> category -> overall
    NORMALIZED_100 = "normalized_100"        # Wraps a base model, rescales to 0-100
    BAYESIAN_ADJUSTED = "bayesian_adjusted"  # Competency weights from a per-cycle vector


class ScaleType(str, Enum):
    LIKERT = "likert"
    BEHAVIORAL = "behavioral"
    PERFORMANCE = "performance"
    RUBRIC = "rubric"
    PERCENTAGE = "percentage"

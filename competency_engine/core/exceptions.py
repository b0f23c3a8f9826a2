"""
Custom Exceptions - Competency Assessment Engine
competency_engine/core/exceptions.py

Error taxonomy for the scoring engine and the assessment lifecycle, plus the
repository exceptions raised by the persistence layer.
"""

from typing import Any, Dict, Optional


class AssessmentEngineError(Exception):
    """Base exception for scoring and lifecycle operations."""

    error_code = "ENGINE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)


# =============================================================================
# VALIDATION ERRORS - caller must fix the request
# =============================================================================

class ValidationError(AssessmentEngineError):
    """Request is malformed or references data outside the assessment."""

    error_code = "VALIDATION_ERROR"


class EmptySelectionError(ValidationError):
    """Assessment started without any competency."""

    def __init__(self):
        super().__init__("competency_ids must be a non-empty list")


class NoQuestionsError(ValidationError):
    """Selected competencies have no assessable questions."""

    def __init__(self, competency_ids):
        super().__init__(
            "No questions found for the selected competencies",
            details={"competency_ids": list(competency_ids)},
        )


class UnknownQuestionError(ValidationError):
    """Question is not part of the assessment's snapshot."""

    def __init__(self, assessment_id: str, question_id: str):
        super().__init__(
            f"Question {question_id} does not belong to assessment {assessment_id}",
            details={"assessment_id": assessment_id, "question_id": question_id},
        )


class InvalidRatingError(ValidationError):
    """Rating falls outside the question's score range."""

    def __init__(self, question_id: str, rating: int, score_min: int, score_max: int):
        super().__init__(
            f"rating must be between {score_min} and {score_max}, got {rating}",
            details={
                "question_id": question_id,
                "rating": rating,
                "score_min": score_min,
                "score_max": score_max,
            },
        )


# =============================================================================
# STATE ERRORS - surfaced as conflicts
# =============================================================================

class StateError(AssessmentEngineError):
    """Operation is not allowed in the assessment's current state."""

    error_code = "CONFLICT"


class TerminalStateError(StateError):
    """Mutating event on a COMPLETED or ABANDONED assessment."""

    def __init__(self, assessment_id: str, status: str, event: str):
        self.assessment_id = assessment_id
        self.status = status
        super().__init__(
            f"Cannot {event} assessment {assessment_id}: status is {status}",
            details={"assessment_id": assessment_id, "status": status, "event": event},
        )


class ConcurrentModificationError(StateError):
    """Assessment kept changing while it was being completed."""

    def __init__(self, assessment_id: str, attempts: int):
        self.assessment_id = assessment_id
        super().__init__(
            f"Assessment {assessment_id} changed during completion; retry the request",
            details={"assessment_id": assessment_id, "attempts": attempts},
        )


class ResultNotAvailableError(StateError):
    """Results requested for an assessment that has not been completed."""

    def __init__(self, assessment_id: str, status: str):
        super().__init__(
            f"Assessment {assessment_id} has no results (status is {status})",
            details={"assessment_id": assessment_id, "status": status},
        )


# =============================================================================
# COMPUTATION ERRORS - assessment stays IN_PROGRESS
# =============================================================================

class ComputationError(AssessmentEngineError):
    """Scores could not be computed from the assessment data."""

    error_code = "COMPUTATION_ERROR"


class InsufficientDataError(ComputationError):
    """Total realized weight is zero; there is nothing to average."""

    def __init__(self, message: str = "No weighted inputs to aggregate"):
        super().__init__(message)


class ScaleMismatchError(ComputationError):
    """Model scale disagrees with the question score range."""

    def __init__(self, expected_min: int, expected_max: int, actual_min: int, actual_max: int,
                 question_id: Optional[str] = None):
        super().__init__(
            f"Scoring scale [{expected_min}, {expected_max}] does not match "
            f"question scale [{actual_min}, {actual_max}]",
            details={
                "expected": [expected_min, expected_max],
                "actual": [actual_min, actual_max],
                "question_id": question_id,
            },
        )


# =============================================================================
# CONFIGURATION / COLLABORATOR ERRORS
# =============================================================================

class ConfigurationError(AssessmentEngineError):
    """Scoring system configuration is inconsistent with its model."""

    error_code = "CONFIGURATION_ERROR"


class UnknownScoringSystemError(AssessmentEngineError):
    """No scoring system registered under the requested id."""

    error_code = "SCORING_SYSTEM_NOT_FOUND"

    def __init__(self, scoring_system_id: str):
        self.scoring_system_id = scoring_system_id
        super().__init__(
            f"Scoring system {scoring_system_id} not found",
            details={"scoring_system_id": scoring_system_id},
        )


class QuestionSourceError(AssessmentEngineError):
    """Upstream question source failed or returned an unusable payload."""

    error_code = "QUESTION_SOURCE_ERROR"


# =============================================================================
# REPOSITORY ERRORS
# =============================================================================

class RepositoryException(Exception):
    """Base exception for repository operations."""

    pass


class EntityNotFoundException(RepositoryException):
    """Entity not found in storage."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class DuplicateEntityException(RepositoryException):
    """Duplicate entity violation."""

    def __init__(self, message: str = "Entity already exists"):
        self.message = message
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Database connection failure."""

    def __init__(self, message: str = "Database connection failed"):
        self.message = message
        super().__init__(message)

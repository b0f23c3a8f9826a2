"""
Assessment Router - Competency Assessment Engine
competency_engine/routers/assessments.py

Assessment lifecycle endpoints: start, answer, complete, abandon, results.
Engine and repository errors are translated by the handlers in errors.py.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from competency_engine.core.dependencies import get_lifecycle
from competency_engine.models.assessment import (
    AssessmentView,
    ErrorResponse,
    StartAssessmentRequest,
    SubmitResponseRequest,
)
from competency_engine.models.result import Result
from competency_engine.services.lifecycle import AssessmentLifecycle

router = APIRouter(prefix="/api/v1/assessments", tags=["Assessments"])


NOT_FOUND = {
    "model": ErrorResponse,
    "description": "Assessment not found",
    "content": {
        "application/json": {
            "example": {
                "error_code": "NOT_FOUND",
                "message": "Assessment with ID 3f0c... not found",
                "details": {"entity_type": "Assessment", "entity_id": "3f0c..."},
                "timestamp": "2026-01-28T12:00:00Z"
            }
        }
    }
}

CONFLICT = {
    "model": ErrorResponse,
    "description": "Assessment is not in a state that allows this operation",
    "content": {
        "application/json": {
            "example": {
                "error_code": "CONFLICT",
                "message": "Cannot submit a response to assessment 3f0c...: status is COMPLETED",
                "details": {"assessment_id": "3f0c...", "status": "COMPLETED"},
                "timestamp": "2026-01-28T12:00:00Z"
            }
        }
    }
}

VALIDATION = {
    "model": ErrorResponse,
    "description": "Validation error",
    "content": {
        "application/json": {
            "example": {
                "error_code": "VALIDATION_ERROR",
                "message": "rating must be between 1 and 5, got 7",
                "details": {"question_id": "q-1", "rating": 7, "score_min": 1, "score_max": 5},
                "timestamp": "2026-01-28T12:00:00Z"
            }
        }
    }
}


#  Routes

@router.post(
    "",
    response_model=AssessmentView,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Scoring system not found"},
        422: VALIDATION,
        502: {"model": ErrorResponse, "description": "Question source unavailable"},
    },
    summary="Start an assessment",
    description="Snapshots the questions of the selected competencies and returns the new assessment with its first question.",
)
def start_assessment(
    payload: StartAssessmentRequest,
    lifecycle: AssessmentLifecycle = Depends(get_lifecycle),
) -> AssessmentView:
    assessment = lifecycle.start(
        subject_id=payload.subject_id,
        competency_ids=payload.competency_ids,
        scoring_system_id=payload.scoring_system_id,
    )
    return AssessmentView.from_assessment(assessment)


@router.get(
    "",
    response_model=List[AssessmentView],
    responses={422: VALIDATION},
    summary="List a subject's assessments",
    description="Assessment history for a subject, newest first.",
)
def list_assessments(
    subject_id: str = Query(..., min_length=1),
    lifecycle: AssessmentLifecycle = Depends(get_lifecycle),
) -> List[AssessmentView]:
    return [
        AssessmentView.from_assessment(a, include_questions=False)
        for a in lifecycle.list_assessments(subject_id)
    ]


@router.get(
    "/{assessment_id}",
    response_model=AssessmentView,
    responses={404: NOT_FOUND},
    summary="Get assessment by ID",
    description="Returns the assessment with every snapshotted question and its current response.",
)
def get_assessment(
    assessment_id: str,
    lifecycle: AssessmentLifecycle = Depends(get_lifecycle),
) -> AssessmentView:
    return AssessmentView.from_assessment(lifecycle.get_assessment(assessment_id))


@router.post(
    "/{assessment_id}/responses",
    response_model=AssessmentView,
    responses={404: NOT_FOUND, 409: CONFLICT, 422: VALIDATION},
    summary="Submit a response",
    description="Records the rating for one question. Resubmitting replaces the previous answer.",
)
def submit_response(
    assessment_id: str,
    payload: SubmitResponseRequest,
    lifecycle: AssessmentLifecycle = Depends(get_lifecycle),
) -> AssessmentView:
    assessment = lifecycle.submit_response(
        assessment_id,
        question_id=payload.question_id,
        rating=payload.rating,
        comment=payload.comment,
    )
    return AssessmentView.from_assessment(assessment)


@router.post(
    "/{assessment_id}/complete",
    response_model=Result,
    responses={
        404: NOT_FOUND,
        409: CONFLICT,
        422: {"model": ErrorResponse, "description": "Scores could not be computed"},
    },
    summary="Complete an assessment",
    description="Scores the assessment and stores the result. Repeated calls return the stored result.",
)
def complete_assessment(
    assessment_id: str,
    lifecycle: AssessmentLifecycle = Depends(get_lifecycle),
) -> Result:
    return lifecycle.complete(assessment_id)


@router.post(
    "/{assessment_id}/abandon",
    response_model=AssessmentView,
    responses={404: NOT_FOUND, 409: CONFLICT},
    summary="Abandon an assessment",
)
def abandon_assessment(
    assessment_id: str,
    lifecycle: AssessmentLifecycle = Depends(get_lifecycle),
) -> AssessmentView:
    return AssessmentView.from_assessment(lifecycle.abandon(assessment_id), include_questions=False)


@router.get(
    "/{assessment_id}/results",
    response_model=Result,
    responses={404: NOT_FOUND, 409: CONFLICT},
    summary="Get assessment results",
    description="Returns the result stored at completion; never recomputed.",
)
def get_results(
    assessment_id: str,
    lifecycle: AssessmentLifecycle = Depends(get_lifecycle),
) -> Result:
    return lifecycle.get_results(assessment_id)

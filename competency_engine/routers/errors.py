"""
Error Handlers - Competency Assessment Engine
competency_engine/routers/errors.py

Maps request validation failures, engine errors and repository errors onto
the shared ErrorResponse body. Registered on the app in main.py.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from competency_engine.core.exceptions import (
    AssessmentEngineError,
    ComputationError,
    ConfigurationError,
    DatabaseConnectionException,
    EntityNotFoundException,
    QuestionSourceError,
    RepositoryException,
    StateError,
    UnknownScoringSystemError,
    ValidationError,
)
from competency_engine.models.assessment import ErrorResponse

logger = structlog.get_logger(__name__)


FIELD_MESSAGES = {
    "subject_id": {
        "missing": "Subject ID is required",
        "string_too_short": "Subject ID must not be empty",
        "string_too_long": "Subject ID must not exceed 255 characters",
    },
    "competency_ids": {
        "missing": "competency_ids is required",
        "list_type": "competency_ids must be a list of competency IDs",
    },
    "question_id": {
        "missing": "Question ID is required",
        "string_too_short": "Question ID must not be empty",
    },
    "rating": {
        "missing": "Rating is required",
        "int_type": "Rating must be an integer",
        "int_parsing": "Rating must be a valid integer",
        "int_from_float": "Rating must be a whole number",
    },
    "comment": {
        "string_too_long": "Comment must not exceed 2000 characters",
    },
}

DEFAULT_MESSAGES = {
    "missing": "Field '{field}' is required",
    "string_too_short": "Field '{field}' is too short",
    "string_too_long": "Field '{field}' is too long",
    "less_than_equal": "Field '{field}' exceeds maximum allowed value",
    "greater_than_equal": "Field '{field}' is below minimum allowed value",
    "string_type": "Field '{field}' must be a string",
    "int_type": "Field '{field}' must be an integer",
    "int_parsing": "Field '{field}' must be a valid integer",
    "list_type": "Field '{field}' must be a list",
    "enum": "Field '{field}' has an invalid value",
    "extra_forbidden": "Unknown field '{field}' is not allowed",
}

# Most specific first
ENGINE_STATUS = [
    (UnknownScoringSystemError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (StateError, status.HTTP_409_CONFLICT),
    (ComputationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (QuestionSourceError, status.HTTP_502_BAD_GATEWAY),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def error_body(error_code: str, message: str, details: Optional[Dict[str, Any]] = None) -> dict:
    return ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        timestamp=datetime.now(timezone.utc),
    ).model_dump(mode="json")


def get_validation_message(field: str, error_type: str) -> str:
    if field in FIELD_MESSAGES:
        field_msgs = FIELD_MESSAGES[field]
        for key in field_msgs:
            if key in error_type:
                return field_msgs[key]

    for key, template in DEFAULT_MESSAGES.items():
        if key in error_type:
            return template.format(field=field)

    return f"Invalid value for field '{field}'"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()

    if not errors:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body("VALIDATION_ERROR", "Request validation failed"),
        )

    err = errors[0]
    error_type = err.get("type", "")
    loc = err.get("loc", [])

    if "json_invalid" in error_type:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("INVALID_REQUEST", "Malformed JSON request body"),
        )

    field = ".".join(str(part) for part in loc if part not in ("body", "query", "path"))
    message = get_validation_message(field, error_type)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            "VALIDATION_ERROR",
            message,
            {"field": field, "type": error_type} if field else None,
        ),
    )


async def engine_exception_handler(request: Request, exc: AssessmentEngineError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exc_type, code in ENGINE_STATUS:
        if isinstance(exc, exc_type):
            status_code = code
            break

    log = logger.error if status_code >= 500 else logger.info
    log(
        "request_failed",
        path=request.url.path,
        error_code=exc.error_code,
        status_code=status_code,
        reason=exc.message,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.error_code, exc.message, exc.details),
    )


async def repository_exception_handler(request: Request, exc: RepositoryException):
    if isinstance(exc, EntityNotFoundException):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_body(
                "NOT_FOUND",
                str(exc),
                {"entity_type": exc.entity_type, "entity_id": exc.entity_id},
            ),
        )
    if isinstance(exc, DatabaseConnectionException):
        logger.error("database_unavailable", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_body("SERVICE_UNAVAILABLE", "Database unavailable"),
        )

    logger.error("repository_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_SERVER_ERROR", "Unexpected server error"),
    )

"""
Core Package - Competency Assessment Engine
competency_engine/core/__init__.py

Core infrastructure: dependencies, exceptions.
"""

from competency_engine.core.exceptions import (
    AssessmentEngineError,
    ComputationError,
    ConfigurationError,
    DatabaseConnectionException,
    DuplicateEntityException,
    EntityNotFoundException,
    QuestionSourceError,
    RepositoryException,
    StateError,
    UnknownScoringSystemError,
    ValidationError,
)

__all__ = [
    "AssessmentEngineError",
    "ComputationError",
    "ConfigurationError",
    "DatabaseConnectionException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "QuestionSourceError",
    "RepositoryException",
    "StateError",
    "UnknownScoringSystemError",
    "ValidationError",
]

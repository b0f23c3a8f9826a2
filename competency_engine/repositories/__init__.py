"""
Repositories Package - Competency Assessment Engine
competency_engine/repositories/__init__.py

Data access layer: in-memory storage and Snowflake.
"""

from competency_engine.repositories.assessment_repository import (
    AssessmentRepository,
    SnowflakeAssessmentRepository,
)
from competency_engine.repositories.base import BaseRepository
from competency_engine.repositories.memory_repository import InMemoryAssessmentRepository
from competency_engine.repositories.scoring_config_repository import (
    InMemoryScoringConfigRepository,
    ScoringConfigRepository,
    SnowflakeScoringConfigRepository,
)

__all__ = [
    "AssessmentRepository",
    "BaseRepository",
    "InMemoryAssessmentRepository",
    "InMemoryScoringConfigRepository",
    "ScoringConfigRepository",
    "SnowflakeAssessmentRepository",
    "SnowflakeScoringConfigRepository",
]

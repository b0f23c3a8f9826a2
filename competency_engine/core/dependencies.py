"""
Dependencies - Competency Assessment Engine
competency_engine/core/dependencies.py

FastAPI dependency injection for the lifecycle and its collaborators.
"""

from functools import lru_cache

from competency_engine.config import settings
from competency_engine.repositories.assessment_repository import (
    AssessmentRepository,
    SnowflakeAssessmentRepository,
)
from competency_engine.repositories.memory_repository import InMemoryAssessmentRepository
from competency_engine.repositories.scoring_config_repository import (
    InMemoryScoringConfigRepository,
    ScoringConfigRepository,
    SnowflakeScoringConfigRepository,
)
from competency_engine.scoring.aggregation import AggregationEngine
from competency_engine.scoring.catalog import default_scoring_systems
from competency_engine.scoring.registry import ScoreModelRegistry
from competency_engine.services.cache import ResultCache, get_cache
from competency_engine.services.lifecycle import AssessmentLifecycle
from competency_engine.services.question_source import QuestionSource, build_question_source
from competency_engine.services.scoring_systems import ScoringSystemService, load_stored_systems


@lru_cache()
def get_assessment_repository() -> AssessmentRepository:
    """Get cached repository for the configured backend."""
    if settings.REPOSITORY_BACKEND == "snowflake":
        return SnowflakeAssessmentRepository()
    return InMemoryAssessmentRepository()


@lru_cache()
def get_scoring_config_repository() -> ScoringConfigRepository:
    """Stored scoring systems and weight vectors for the configured backend."""
    if settings.REPOSITORY_BACKEND == "snowflake":
        return SnowflakeScoringConfigRepository()
    return InMemoryScoringConfigRepository()


@lru_cache()
def get_question_source() -> QuestionSource:
    """Get cached QuestionSource instance."""
    return build_question_source()


@lru_cache()
def get_scoring_registry() -> ScoreModelRegistry:
    """Registry seeded with the built-in scoring systems, then the stored ones."""
    registry = ScoreModelRegistry(default_scoring_systems())
    if settings.DEFAULT_SCORING_SYSTEM in registry:
        registry.set_default(settings.DEFAULT_SCORING_SYSTEM)
    load_stored_systems(registry, get_scoring_config_repository())
    return registry


@lru_cache()
def get_aggregation_engine() -> AggregationEngine:
    return AggregationEngine(decimal_places=settings.SCORE_DECIMAL_PLACES)


@lru_cache()
def get_lifecycle() -> AssessmentLifecycle:
    """Get cached AssessmentLifecycle wired from settings."""
    return AssessmentLifecycle(
        repository=get_assessment_repository(),
        question_source=get_question_source(),
        registry=get_scoring_registry(),
        engine=get_aggregation_engine(),
        result_cache=ResultCache(get_cache(), ttl_seconds=settings.CACHE_TTL_RESULTS),
        config_repository=get_scoring_config_repository(),
    )


@lru_cache()
def get_scoring_system_service() -> ScoringSystemService:
    return ScoringSystemService(
        registry=get_scoring_registry(),
        config_repository=get_scoring_config_repository(),
        assessment_repository=get_assessment_repository(),
        builtin_ids=[s.id for s in default_scoring_systems()],
    )


def close_resources() -> None:
    """Release clients held by cached dependencies; runs on app shutdown."""
    if get_question_source.cache_info().currsize:
        get_question_source().close()
        get_question_source.cache_clear()

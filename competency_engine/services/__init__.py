"""
Services module for the Competency Assessment Engine.
"""

from competency_engine.services.cache import ResultCache, get_cache
from competency_engine.services.question_source import (
    HttpQuestionSource,
    InMemoryQuestionSource,
    QuestionSource,
)
from competency_engine.services.redis_cache import RedisCache
from competency_engine.services.snowflake import get_snowflake_connection


def get_assessment_lifecycle():
    """Lazy import to avoid circular dependency."""
    from competency_engine.core.dependencies import get_lifecycle as _get
    return _get()


__all__ = [
    "HttpQuestionSource",
    "InMemoryQuestionSource",
    "QuestionSource",
    "RedisCache",
    "ResultCache",
    "get_assessment_lifecycle",
    "get_cache",
    "get_snowflake_connection",
]

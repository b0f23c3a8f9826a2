"""
Health Check Router - Competency Assessment Engine
competency_engine/routers/health.py

Reports the configured backends. Redis is optional: when it is down the
service still runs without result caching, so it only degrades status.
"""
from datetime import datetime, timezone
from typing import Dict

import redis
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from competency_engine.config import settings
from competency_engine.core.exceptions import RepositoryException
from competency_engine.repositories.base import BaseRepository

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: Dict[str, str]


def check_repository() -> str:
    if settings.REPOSITORY_BACKEND == "memory":
        return "healthy (in-memory)"
    try:
        BaseRepository().execute_query("SELECT CURRENT_USER()", fetch_one=True)
        return "healthy (snowflake)"
    except RepositoryException as e:
        error_msg = str(e)[:100]
        return f"unhealthy: {error_msg}"


def check_redis() -> str:
    if not settings.CACHE_ENABLED:
        return "disabled"
    try:
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
        )
        client.ping()
        client.close()
        return "healthy"
    except redis.RedisError as e:
        error_msg = str(e)[:100]
        return f"unavailable: {error_msg}"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "Service healthy (or degraded without cache)"},
        503: {"description": "Repository unhealthy"},
    },
    summary="Health check",
)
def health_check():
    dependencies = {
        "repository": check_repository(),
        "redis": check_redis(),
    }
    repository_ok = dependencies["repository"].startswith("healthy")
    cache_ok = dependencies["redis"] in ("healthy", "disabled")

    response = HealthResponse(
        status="healthy" if repository_ok and cache_ok else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        dependencies=dependencies,
    )

    if repository_ok:
        return response
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(mode="json"),
    )

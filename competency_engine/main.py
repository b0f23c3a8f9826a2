import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from competency_engine.config import settings
from competency_engine.core.dependencies import close_resources
from competency_engine.core.exceptions import AssessmentEngineError, RepositoryException
from competency_engine.logging_config import configure_logging

# IMPORT ROUTERS
from competency_engine.routers.assessments import router as assessments_router
from competency_engine.routers.errors import (
    engine_exception_handler,
    repository_exception_handler,
    validation_exception_handler,
)
from competency_engine.routers.health import router as health_router
from competency_engine.routers.scoring_systems import router as scoring_systems_router

configure_logging(settings)
logger = structlog.get_logger(__name__)


# SWAGGER UI - tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Assessments"},
    {"name": "Scoring Systems"},
]

# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

# REGISTER EXCEPTION HANDLERS
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(AssessmentEngineError, engine_exception_handler)
app.add_exception_handler(RepositoryException, repository_exception_handler)

# REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
app.include_router(health_router)           # Health
app.include_router(assessments_router)      # Assessments
app.include_router(scoring_systems_router)  # Scoring Systems


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


# STARTUP EVENT
@app.on_event("startup")
async def startup_event():
    logger.info(
        "service_starting",
        env=settings.APP_ENV,
        repository_backend=settings.REPOSITORY_BACKEND,
        question_source="http" if settings.QUESTION_SOURCE_URL else "memory",
        default_scoring_system=settings.DEFAULT_SCORING_SYSTEM,
    )


# SHUTDOWN EVENT
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("service_stopping")
    close_resources()


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "competency_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )

# tests/conftest.py

"""
Pytest Fixtures - Shared test configurations and data for models, engine and APIs

SEED DATA ID REFERENCE:
- Competencies: comp-leadership (0.8, "People"), comp-communication (0.2, "People"),
                comp-python (1.0, "Technical")
- Questions:    q-lead-1 (0.6), q-lead-2 (0.4), q-comm-1 (1.0), q-py-1, q-py-2
- Subject:      user-001
"""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("REPOSITORY_BACKEND", "memory")
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
from fastapi.testclient import TestClient

from competency_engine.core.dependencies import get_lifecycle, get_scoring_system_service
from competency_engine.main import app
from competency_engine.models.enumerations import QuestionType
from competency_engine.models.question import Competency, Question
from competency_engine.repositories.memory_repository import InMemoryAssessmentRepository
from competency_engine.repositories.scoring_config_repository import InMemoryScoringConfigRepository
from competency_engine.scoring.aggregation import AggregationEngine
from competency_engine.scoring.catalog import default_scoring_systems
from competency_engine.scoring.registry import ScoreModelRegistry
from competency_engine.services.lifecycle import AssessmentLifecycle
from competency_engine.services.question_source import InMemoryQuestionSource
from competency_engine.services.scoring_systems import ScoringSystemService


# =============================================================================
# COMPETENCY / QUESTION FIXTURES
# =============================================================================

@pytest.fixture
def sample_subject_id():
    return "user-001"


@pytest.fixture
def competencies():
    """Three competencies across two categories."""
    return [
        Competency(id="comp-leadership", name="Leadership", category="People", weight=0.8),
        Competency(id="comp-communication", name="Communication", category="People", weight=0.2),
        Competency(id="comp-python", name="Python", category="Technical", weight=1.0),
    ]


@pytest.fixture
def questions():
    """Questions on the default 1-5 scale."""
    return [
        Question(
            id="q-lead-1",
            competency_id="comp-leadership",
            statement="Sets a clear direction for the team",
            type=QuestionType.BEHAVIORAL,
            examples=["Shares quarterly goals", "Explains trade-offs"],
            weight=0.6,
        ),
        Question(
            id="q-lead-2",
            competency_id="comp-leadership",
            statement="Handles conflict between team members",
            type=QuestionType.SITUATIONAL,
            weight=0.4,
        ),
        Question(
            id="q-comm-1",
            competency_id="comp-communication",
            statement="Writes clear design documents",
            type=QuestionType.BEHAVIORAL,
            weight=1.0,
        ),
        Question(
            id="q-py-1",
            competency_id="comp-python",
            statement="Uses generators for streaming data",
            type=QuestionType.TECHNICAL,
            weight=0.5,
        ),
        Question(
            id="q-py-2",
            competency_id="comp-python",
            statement="Explains the GIL",
            type=QuestionType.KNOWLEDGE,
            weight=0.5,
        ),
    ]


@pytest.fixture
def question_source(competencies, questions):
    return InMemoryQuestionSource(competencies, questions)


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def registry():
    """Registry seeded with the built-in scoring systems."""
    return ScoreModelRegistry(default_scoring_systems())


@pytest.fixture
def engine():
    return AggregationEngine()


@pytest.fixture
def repository():
    return InMemoryAssessmentRepository()


@pytest.fixture
def config_repository():
    return InMemoryScoringConfigRepository()


@pytest.fixture
def lifecycle(repository, question_source, registry, engine, config_repository):
    """Lifecycle over in-memory collaborators, no result cache."""
    return AssessmentLifecycle(
        repository=repository,
        question_source=question_source,
        registry=registry,
        engine=engine,
        config_repository=config_repository,
    )


@pytest.fixture
def scoring_system_service(registry, config_repository, repository):
    return ScoringSystemService(
        registry=registry,
        config_repository=config_repository,
        assessment_repository=repository,
        builtin_ids=[s.id for s in default_scoring_systems()],
    )


@pytest.fixture
def started_assessment(lifecycle, sample_subject_id):
    """Weighted Likert assessment over leadership + communication."""
    return lifecycle.start(sample_subject_id, ["comp-leadership", "comp-communication"])


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture
def client(lifecycle, scoring_system_service):
    """TestClient wired to the in-memory lifecycle."""
    app.dependency_overrides[get_lifecycle] = lambda: lifecycle
    app.dependency_overrides[get_scoring_system_service] = lambda: scoring_system_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# REQUEST PAYLOAD FIXTURES
# =============================================================================

@pytest.fixture
def valid_start_payload(sample_subject_id):
    return {
        "subject_id": sample_subject_id,
        "competency_ids": ["comp-leadership", "comp-communication"],
    }


@pytest.fixture
def likert_scenario_ratings():
    """Ratings whose Weighted Likert overall is 4.12."""
    return {"q-lead-1": 4, "q-lead-2": 5, "q-comm-1": 3}

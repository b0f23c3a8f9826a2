"""
Question Source - Competency Assessment Engine
competency_engine/services/question_source.py

Read-only access to competencies and their questions. The lifecycle only
calls it while starting an assessment; everything it returns is snapshotted.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from competency_engine.config import settings
from competency_engine.core.exceptions import QuestionSourceError
from competency_engine.models.question import Competency, Question

logger = structlog.get_logger(__name__)


class QuestionSource(ABC):
    """Supplies competencies and their ordered questions."""

    @abstractmethod
    def get_competency(self, competency_id: str) -> Optional[Competency]:
        """Competency by id, or None when it does not exist."""

    @abstractmethod
    def list_questions(self, competency_id: str) -> List[Question]:
        """Questions of a competency in presentation order."""

    def close(self) -> None:
        """Release held connections; nothing to do for local sources."""


class InMemoryQuestionSource(QuestionSource):
    """Process-local catalog of competencies and questions."""

    def __init__(
        self,
        competencies: Optional[Iterable[Competency]] = None,
        questions: Optional[Iterable[Question]] = None,
    ):
        self._competencies: Dict[str, Competency] = {}
        self._questions: Dict[str, List[Question]] = {}
        for competency in competencies or []:
            self.add_competency(competency)
        for question in questions or []:
            self.add_question(question)

    def add_competency(self, competency: Competency) -> None:
        self._competencies[competency.id] = competency

    def add_question(self, question: Question) -> None:
        self._questions.setdefault(question.competency_id, []).append(question)

    def get_competency(self, competency_id: str) -> Optional[Competency]:
        return self._competencies.get(competency_id)

    def list_questions(self, competency_id: str) -> List[Question]:
        return list(self._questions.get(competency_id, []))


class HttpQuestionSource(QuestionSource):
    """
    Client for the competency service.

    Endpoints:
        GET {base_url}/competencies/{id}            -> Competency JSON
        GET {base_url}/competencies/{id}/questions  -> list of Question JSON

    A 404 on the competency endpoint means "unknown competency"; any other
    non-2xx status, transport failure or malformed payload raises
    QuestionSourceError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def _get(self, path: str) -> Optional[httpx.Response]:
        try:
            response = self.client.get(path)
        except httpx.HTTPError as e:
            logger.error("question_source_unreachable", path=path, error=str(e))
            raise QuestionSourceError(
                f"Question source request failed: {e}",
                details={"path": path},
            )

        if response.status_code == 404:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "question_source_error",
                path=path,
                status_code=e.response.status_code,
            )
            raise QuestionSourceError(
                f"Question source returned {e.response.status_code}",
                details={"path": path, "status_code": e.response.status_code},
            )
        return response

    def get_competency(self, competency_id: str) -> Optional[Competency]:
        path = f"/competencies/{competency_id}"
        response = self._get(path)
        if response is None:
            return None
        try:
            return Competency.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise QuestionSourceError(
                f"Malformed competency payload for {competency_id}",
                details={"path": path, "error": str(e)},
            )

    def list_questions(self, competency_id: str) -> List[Question]:
        path = f"/competencies/{competency_id}/questions"
        response = self._get(path)
        if response is None:
            return []
        try:
            payload = response.json()
            items = payload.get("questions", []) if isinstance(payload, dict) else payload
            questions = [Question.model_validate(item) for item in items]
        except (ValueError, AttributeError, TypeError, PydanticValidationError) as e:
            raise QuestionSourceError(
                f"Malformed question payload for {competency_id}",
                details={"path": path, "error": str(e)},
            )
        logger.debug("questions_fetched", competency_id=competency_id, count=len(questions))
        return questions

    def close(self) -> None:
        self.client.close()
        logger.debug("question_source_closed", base_url=self.base_url)


def build_question_source() -> QuestionSource:
    """HTTP source when QUESTION_SOURCE_URL is set, else an empty in-memory one."""
    if settings.QUESTION_SOURCE_URL:
        return HttpQuestionSource(
            settings.QUESTION_SOURCE_URL,
            timeout=settings.QUESTION_SOURCE_TIMEOUT,
        )
    return InMemoryQuestionSource()

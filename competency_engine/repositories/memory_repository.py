"""
In-Memory Assessment Repository - Competency Assessment Engine
competency_engine/repositories/memory_repository.py

Process-local storage used for development and tests. Every read returns
a deep copy so callers can never mutate stored state.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional

from competency_engine.core.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    TerminalStateError,
)
from competency_engine.models.assessment import Assessment, Response
from competency_engine.models.enumerations import AssessmentStatus
from competency_engine.models.result import Result
from competency_engine.repositories.assessment_repository import AssessmentRepository


class InMemoryAssessmentRepository(AssessmentRepository):
    """Dict-backed repository with one lock per assessment."""

    def __init__(self):
        self._assessments: Dict[str, Assessment] = {}
        self._results: Dict[str, Result] = {}
        self._sequence: Dict[str, int] = {}
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def _lock_for(self, assessment_id: str) -> threading.Lock:
        # Locks exist only for saved assessments
        with self._registry_lock:
            lock = self._locks.get(assessment_id)
        if lock is None:
            raise EntityNotFoundException("Assessment", assessment_id)
        return lock

    def _get(self, assessment_id: str) -> Assessment:
        assessment = self._assessments.get(assessment_id)
        if assessment is None:
            raise EntityNotFoundException("Assessment", assessment_id)
        return assessment

    def save(self, assessment: Assessment) -> Assessment:
        with self._registry_lock:
            if assessment.id in self._assessments:
                raise DuplicateEntityException(f"Assessment {assessment.id} already exists")
            self._assessments[assessment.id] = assessment.model_copy(deep=True)
            self._sequence[assessment.id] = len(self._sequence)
            self._locks[assessment.id] = threading.Lock()
        return assessment.model_copy(deep=True)

    def load(self, assessment_id: str) -> Assessment:
        with self._lock_for(assessment_id):
            return self._get(assessment_id).model_copy(deep=True)

    def upsert_response(self, assessment_id: str, response: Response) -> Assessment:
        with self._lock_for(assessment_id):
            assessment = self._get(assessment_id)
            if assessment.status != AssessmentStatus.IN_PROGRESS:
                raise TerminalStateError(assessment_id, assessment.status.value, "submit a response to")
            responses = dict(assessment.responses)
            responses[response.question_id] = response.model_copy()
            self._assessments[assessment_id] = assessment.model_copy(
                update={"responses": responses, "revision": assessment.revision + 1}
            )
            return self._assessments[assessment_id].model_copy(deep=True)

    def mark_completed(
        self,
        assessment_id: str,
        result: Result,
        completed_at: datetime,
        expected_revision: Optional[int] = None,
    ) -> bool:
        with self._lock_for(assessment_id):
            assessment = self._get(assessment_id)
            if assessment.status != AssessmentStatus.IN_PROGRESS:
                return False
            if expected_revision is not None and assessment.revision != expected_revision:
                return False
            self._assessments[assessment_id] = assessment.model_copy(
                update={"status": AssessmentStatus.COMPLETED, "completed_at": completed_at}
            )
            self._results[assessment_id] = result
            return True

    def mark_abandoned(self, assessment_id: str) -> bool:
        with self._lock_for(assessment_id):
            assessment = self._get(assessment_id)
            if assessment.status != AssessmentStatus.IN_PROGRESS:
                return False
            self._assessments[assessment_id] = assessment.model_copy(
                update={"status": AssessmentStatus.ABANDONED}
            )
            return True

    def save_result(self, assessment_id: str, result: Result) -> None:
        with self._lock_for(assessment_id):
            self._get(assessment_id)
            self._results[assessment_id] = result

    def load_result(self, assessment_id: str) -> Optional[Result]:
        # Result is frozen, no copy needed
        return self._results.get(assessment_id)

    def list_by_subject(self, subject_id: str) -> List[Assessment]:
        with self._registry_lock:
            owned = [a for a in self._assessments.values() if a.subject_id == subject_id]
        owned.sort(key=lambda a: (a.started_at, self._sequence[a.id]), reverse=True)
        return [a.model_copy(deep=True) for a in owned]

    def count_in_progress(self, scoring_system_id: str) -> int:
        with self._registry_lock:
            return sum(
                1 for a in self._assessments.values()
                if a.scoring_system_id == scoring_system_id and a.status == AssessmentStatus.IN_PROGRESS
            )

    def clear(self) -> None:
        """Drop all stored state."""
        with self._registry_lock:
            self._assessments.clear()
            self._results.clear()
            self._sequence.clear()
            self._locks.clear()

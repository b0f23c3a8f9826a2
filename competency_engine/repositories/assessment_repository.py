"""
Assessment Repository - Competency Assessment Engine
competency_engine/repositories/assessment_repository.py

Persistence contract for assessments, responses and results, and its
Snowflake implementation.

Tables:
    COMPETENCY_ASSESSMENTS  (ID, SUBJECT_ID, SCORING_SYSTEM_ID, STATUS, REVISION,
                             COMPETENCY_IDS, SNAPSHOT, STARTED_AT, COMPLETED_AT)
    ASSESSMENT_RESPONSES    (ASSESSMENT_ID, QUESTION_ID, RATING, COMMENT, SUBMITTED_AT)
                            UNIQUE (ASSESSMENT_ID, QUESTION_ID)
    ASSESSMENT_RESULTS      (ASSESSMENT_ID, PAYLOAD, CREATED_AT)
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from snowflake.connector.errors import DatabaseError, ProgrammingError

from competency_engine.core.exceptions import (
    EntityNotFoundException,
    RepositoryException,
    TerminalStateError,
)
from competency_engine.models.assessment import Assessment, Response
from competency_engine.models.enumerations import AssessmentStatus
from competency_engine.models.question import Competency, Question
from competency_engine.models.result import Result
from competency_engine.repositories.base import BaseRepository


class AssessmentRepository(ABC):
    """
    Storage contract used by the assessment lifecycle.

    Implementations serialize mutations per assessment: upsert_response,
    mark_completed and mark_abandoned are atomic with respect to status.
    Every response write bumps the assessment revision.
    """

    @abstractmethod
    def save(self, assessment: Assessment) -> Assessment:
        """Insert a new assessment (snapshot included)."""

    @abstractmethod
    def load(self, assessment_id: str) -> Assessment:
        """Load an assessment with its responses; raises EntityNotFoundException."""

    @abstractmethod
    def upsert_response(self, assessment_id: str, response: Response) -> Assessment:
        """
        Insert or replace the response for (assessment_id, question_id).

        Raises TerminalStateError if the assessment is no longer IN_PROGRESS.
        """

    @abstractmethod
    def mark_completed(
        self,
        assessment_id: str,
        result: Result,
        completed_at: datetime,
        expected_revision: Optional[int] = None,
    ) -> bool:
        """
        Compare-and-set IN_PROGRESS -> COMPLETED and store the result.

        Returns False (and stores nothing) when the assessment was not
        IN_PROGRESS, or when expected_revision is given and a response was
        written after that revision was read.
        """

    @abstractmethod
    def mark_abandoned(self, assessment_id: str) -> bool:
        """Compare-and-set IN_PROGRESS -> ABANDONED."""

    @abstractmethod
    def save_result(self, assessment_id: str, result: Result) -> None:
        """Store a result artifact for an assessment."""

    @abstractmethod
    def load_result(self, assessment_id: str) -> Optional[Result]:
        """Stored result, or None."""

    @abstractmethod
    def list_by_subject(self, subject_id: str) -> List[Assessment]:
        """Assessments owned by a subject, newest first."""

    @abstractmethod
    def count_in_progress(self, scoring_system_id: str) -> int:
        """Number of IN_PROGRESS assessments scored by a scoring system."""


class SnowflakeAssessmentRepository(BaseRepository, AssessmentRepository):
    """Snowflake-backed assessment storage."""

    TABLE_NAME = "COMPETENCY_ASSESSMENTS"
    RESPONSES_TABLE = "ASSESSMENT_RESPONSES"
    RESULTS_TABLE = "ASSESSMENT_RESULTS"

    def save(self, assessment: Assessment) -> Assessment:
        """
        Create a new assessment row.

        Args:
            assessment: Assessment with its question snapshot

        Returns:
            The stored assessment
        """
        snapshot = {
            "competencies": [c.model_dump(mode="json") for c in assessment.competencies],
            "questions": [q.model_dump(mode="json") for q in assessment.questions],
        }
        sql = """
            INSERT INTO COMPETENCY_ASSESSMENTS (ID, SUBJECT_ID, SCORING_SYSTEM_ID, STATUS, REVISION,
                                               COMPETENCY_IDS, SNAPSHOT, STARTED_AT, COMPLETED_AT)
            SELECT %s, %s, %s, %s, %s, PARSE_JSON(%s), PARSE_JSON(%s), %s, %s
        """
        params = (
            assessment.id,
            assessment.subject_id,
            assessment.scoring_system_id,
            assessment.status.value,
            assessment.revision,
            json.dumps(assessment.competency_ids),
            json.dumps(snapshot),
            assessment.started_at,
            assessment.completed_at,
        )
        self.execute_query(sql, params, commit=True)
        return assessment

    def load(self, assessment_id: str) -> Assessment:
        """
        Retrieve an assessment by ID, responses included.

        Args:
            assessment_id: ID of the assessment

        Returns:
            Assessment
        """
        sql = """
            SELECT ID, SUBJECT_ID, SCORING_SYSTEM_ID, STATUS, REVISION, COMPETENCY_IDS,
                   SNAPSHOT, STARTED_AT, COMPLETED_AT
            FROM COMPETENCY_ASSESSMENTS
            WHERE ID = %s
        """
        row = self.execute_query(sql, (assessment_id,), fetch_one=True)
        if not row:
            raise EntityNotFoundException("Assessment", assessment_id)

        response_rows = self.execute_query(
            """
            SELECT QUESTION_ID, RATING, COMMENT, SUBMITTED_AT
            FROM ASSESSMENT_RESPONSES
            WHERE ASSESSMENT_ID = %s
            """,
            (assessment_id,),
            fetch_all=True,
        ) or []
        return self._row_to_assessment(row, response_rows)

    def upsert_response(self, assessment_id: str, response: Response) -> Assessment:
        """
        Upsert keyed by (ASSESSMENT_ID, QUESTION_ID).

        The revision bump and the MERGE share one transaction. The bump only
        matches an IN_PROGRESS row, so a response can never land on a
        terminal assessment, and a completion scored from an older revision
        loses its compare-and-set.
        """
        merge_sql = """
            MERGE INTO ASSESSMENT_RESPONSES t
            USING (
                SELECT ID AS ASSESSMENT_ID, %s AS QUESTION_ID
                FROM COMPETENCY_ASSESSMENTS
                WHERE ID = %s AND STATUS = %s
            ) s
            ON t.ASSESSMENT_ID = s.ASSESSMENT_ID AND t.QUESTION_ID = s.QUESTION_ID
            WHEN MATCHED THEN UPDATE SET
                RATING = %s,
                COMMENT = %s,
                SUBMITTED_AT = %s
            WHEN NOT MATCHED THEN INSERT (ASSESSMENT_ID, QUESTION_ID, RATING, COMMENT, SUBMITTED_AT)
            VALUES (s.ASSESSMENT_ID, s.QUESTION_ID, %s, %s, %s)
        """
        params = (
            response.question_id,
            assessment_id,
            AssessmentStatus.IN_PROGRESS.value,
            response.rating, response.comment, response.submitted_at,
            response.rating, response.comment, response.submitted_at,
        )
        with self.get_cursor() as cursor:
            try:
                cursor.execute("BEGIN")
                cursor.execute(
                    """
                    UPDATE COMPETENCY_ASSESSMENTS
                    SET REVISION = REVISION + 1
                    WHERE ID = %s AND STATUS = %s
                    """,
                    (assessment_id, AssessmentStatus.IN_PROGRESS.value),
                )
                accepted = cursor.rowcount == 1
                if accepted:
                    cursor.execute(merge_sql, params)
                    cursor.connection.commit()
                else:
                    cursor.connection.rollback()
            except ProgrammingError as e:
                cursor.connection.rollback()
                self.raise_for_programming_error(e)
            except DatabaseError as e:
                cursor.connection.rollback()
                raise RepositoryException(f"Database error: {e}")

        if not accepted:
            current = self.load(assessment_id)
            raise TerminalStateError(assessment_id, current.status.value, "submit a response to")
        return self.load(assessment_id)

    def mark_completed(
        self,
        assessment_id: str,
        result: Result,
        completed_at: datetime,
        expected_revision: Optional[int] = None,
    ) -> bool:
        """Status CAS and result insert in one transaction."""
        sql = """
            UPDATE COMPETENCY_ASSESSMENTS
            SET STATUS = %s, COMPLETED_AT = %s
            WHERE ID = %s AND STATUS = %s
        """
        params = (
            AssessmentStatus.COMPLETED.value,
            completed_at,
            assessment_id,
            AssessmentStatus.IN_PROGRESS.value,
        )
        if expected_revision is not None:
            sql += " AND REVISION = %s"
            params += (expected_revision,)

        with self.get_cursor() as cursor:
            try:
                cursor.execute("BEGIN")
                cursor.execute(sql, params)
                if cursor.rowcount != 1:
                    cursor.connection.rollback()
                    return False
                cursor.execute(
                    """
                    INSERT INTO ASSESSMENT_RESULTS (ASSESSMENT_ID, PAYLOAD, CREATED_AT)
                    SELECT %s, PARSE_JSON(%s), %s
                    """,
                    (assessment_id, result.model_dump_json(), completed_at),
                )
                cursor.connection.commit()
                return True
            except ProgrammingError as e:
                cursor.connection.rollback()
                self.raise_for_programming_error(e)
            except DatabaseError as e:
                cursor.connection.rollback()
                raise RepositoryException(f"Database error: {e}")

    def mark_abandoned(self, assessment_id: str) -> bool:
        sql = """
            UPDATE COMPETENCY_ASSESSMENTS
            SET STATUS = %s
            WHERE ID = %s AND STATUS = %s
        """
        affected = self.execute_query(
            sql,
            (AssessmentStatus.ABANDONED.value, assessment_id, AssessmentStatus.IN_PROGRESS.value),
            commit=True,
        )
        return affected == 1

    def save_result(self, assessment_id: str, result: Result) -> None:
        sql = """
            INSERT INTO ASSESSMENT_RESULTS (ASSESSMENT_ID, PAYLOAD, CREATED_AT)
            SELECT %s, PARSE_JSON(%s), %s
        """
        self.execute_query(
            sql,
            (assessment_id, result.model_dump_json(), datetime.now(timezone.utc)),
            commit=True,
        )

    def load_result(self, assessment_id: str) -> Optional[Result]:
        sql = "SELECT PAYLOAD FROM ASSESSMENT_RESULTS WHERE ASSESSMENT_ID = %s"
        row = self.execute_query(sql, (assessment_id,), fetch_one=True)
        if not row:
            return None
        return Result.model_validate(self._variant(row["PAYLOAD"]))

    def list_by_subject(self, subject_id: str) -> List[Assessment]:
        """
        Retrieve a subject's assessments (without responses), newest first.

        Args:
            subject_id: Owner of the assessments

        Returns:
            List of assessments
        """
        sql = """
            SELECT ID, SUBJECT_ID, SCORING_SYSTEM_ID, STATUS, REVISION, COMPETENCY_IDS,
                   SNAPSHOT, STARTED_AT, COMPLETED_AT
            FROM COMPETENCY_ASSESSMENTS
            WHERE SUBJECT_ID = %s
            ORDER BY STARTED_AT DESC
        """
        rows = self.execute_query(sql, (subject_id,), fetch_all=True) or []
        return [self._row_to_assessment(row, []) for row in rows]

    def count_in_progress(self, scoring_system_id: str) -> int:
        sql = """
            SELECT COUNT(*) AS IN_PROGRESS
            FROM COMPETENCY_ASSESSMENTS
            WHERE SCORING_SYSTEM_ID = %s AND STATUS = %s
        """
        row = self.execute_query(
            sql,
            (scoring_system_id, AssessmentStatus.IN_PROGRESS.value),
            fetch_one=True,
        )
        return int(row["IN_PROGRESS"]) if row else 0

    def _variant(self, value: Any) -> Any:
        """VARIANT columns come back as JSON text."""
        if isinstance(value, str):
            return json.loads(value)
        return value

    def _row_to_assessment(
        self,
        row: Dict[str, Any],
        response_rows: List[Dict[str, Any]],
    ) -> Assessment:
        """Convert Snowflake rows to an Assessment."""
        snapshot = self._variant(row["SNAPSHOT"]) or {}
        responses = {
            r["QUESTION_ID"]: Response(
                question_id=r["QUESTION_ID"],
                rating=int(r["RATING"]),
                comment=r["COMMENT"],
                submitted_at=self.normalize_timestamp(r["SUBMITTED_AT"]),
            )
            for r in response_rows
        }
        return Assessment(
            id=row["ID"],
            subject_id=row["SUBJECT_ID"],
            scoring_system_id=row["SCORING_SYSTEM_ID"],
            status=AssessmentStatus(row["STATUS"]),
            revision=int(row.get("REVISION") or 0),
            competency_ids=self._variant(row["COMPETENCY_IDS"]),
            competencies=[Competency(**c) for c in snapshot.get("competencies", [])],
            questions=[Question(**q) for q in snapshot.get("questions", [])],
            responses=responses,
            started_at=self.normalize_timestamp(row["STARTED_AT"]),
            completed_at=self.normalize_timestamp(row["COMPLETED_AT"]),
        )

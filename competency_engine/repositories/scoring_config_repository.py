"""
Scoring Configuration Repository - Competency Assessment Engine
competency_engine/repositories/scoring_config_repository.py

Stored scoring system definitions and the weight vector installed for each
system. Weights are read on every completion, so a vector installed by one
worker is used by all of them.

Tables:
    SCORING_SYSTEMS  (ID, PAYLOAD, UPDATED_AT)
    SCORING_WEIGHTS  (SCORING_SYSTEM_ID, PAYLOAD, CYCLE_ID, UPDATED_AT)
"""

import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from competency_engine.models.scoring_system import ScoringSystem, WeightConfig
from competency_engine.repositories.base import BaseRepository


class ScoringConfigRepository(ABC):
    """Storage contract for scoring systems and their weight vectors."""

    @abstractmethod
    def save_weights(self, scoring_system_id: str, weights: WeightConfig) -> WeightConfig:
        """Insert or replace the weight vector of a scoring system."""

    @abstractmethod
    def load_weights(self, scoring_system_id: str) -> Optional[WeightConfig]:
        """Installed weight vector, or None."""

    @abstractmethod
    def delete_weights(self, scoring_system_id: str) -> None:
        """Drop the weight vector of a scoring system, if any."""

    @abstractmethod
    def save_system(self, system: ScoringSystem) -> ScoringSystem:
        """Insert or replace a scoring system definition."""

    @abstractmethod
    def delete_system(self, scoring_system_id: str) -> None:
        """Drop a stored scoring system definition, if any."""

    @abstractmethod
    def list_systems(self) -> List[ScoringSystem]:
        """Stored scoring systems in insertion order."""


class InMemoryScoringConfigRepository(ScoringConfigRepository):
    """Process-local scoring configuration."""

    def __init__(self):
        self._weights: Dict[str, WeightConfig] = {}
        self._systems: Dict[str, ScoringSystem] = {}
        self._lock = threading.Lock()

    def save_weights(self, scoring_system_id: str, weights: WeightConfig) -> WeightConfig:
        # WeightConfig is frozen, no copy needed
        with self._lock:
            self._weights[scoring_system_id] = weights
        return weights

    def load_weights(self, scoring_system_id: str) -> Optional[WeightConfig]:
        with self._lock:
            return self._weights.get(scoring_system_id)

    def delete_weights(self, scoring_system_id: str) -> None:
        with self._lock:
            self._weights.pop(scoring_system_id, None)

    def save_system(self, system: ScoringSystem) -> ScoringSystem:
        with self._lock:
            self._systems[system.id] = system.model_copy(deep=True)
        return system

    def delete_system(self, scoring_system_id: str) -> None:
        with self._lock:
            self._systems.pop(scoring_system_id, None)

    def list_systems(self) -> List[ScoringSystem]:
        with self._lock:
            return [s.model_copy(deep=True) for s in self._systems.values()]


class SnowflakeScoringConfigRepository(BaseRepository, ScoringConfigRepository):
    """Snowflake-backed scoring configuration."""

    SYSTEMS_TABLE = "SCORING_SYSTEMS"
    WEIGHTS_TABLE = "SCORING_WEIGHTS"

    def save_weights(self, scoring_system_id: str, weights: WeightConfig) -> WeightConfig:
        """
        Upsert keyed by SCORING_SYSTEM_ID.

        Args:
            scoring_system_id: Owning scoring system
            weights: Weight vector to install

        Returns:
            The stored weight vector
        """
        sql = """
            MERGE INTO SCORING_WEIGHTS t
            USING (
                SELECT %s AS SCORING_SYSTEM_ID, PARSE_JSON(%s) AS PAYLOAD,
                       %s AS CYCLE_ID, %s AS UPDATED_AT
            ) s
            ON t.SCORING_SYSTEM_ID = s.SCORING_SYSTEM_ID
            WHEN MATCHED THEN UPDATE SET
                PAYLOAD = s.PAYLOAD,
                CYCLE_ID = s.CYCLE_ID,
                UPDATED_AT = s.UPDATED_AT
            WHEN NOT MATCHED THEN INSERT (SCORING_SYSTEM_ID, PAYLOAD, CYCLE_ID, UPDATED_AT)
            VALUES (s.SCORING_SYSTEM_ID, s.PAYLOAD, s.CYCLE_ID, s.UPDATED_AT)
        """
        params = (
            scoring_system_id,
            weights.model_dump_json(),
            weights.cycle_id,
            datetime.now(timezone.utc),
        )
        self.execute_query(sql, params, commit=True)
        return weights

    def load_weights(self, scoring_system_id: str) -> Optional[WeightConfig]:
        sql = "SELECT PAYLOAD FROM SCORING_WEIGHTS WHERE SCORING_SYSTEM_ID = %s"
        row = self.execute_query(sql, (scoring_system_id,), fetch_one=True)
        if not row:
            return None
        return WeightConfig.model_validate(self._variant(row["PAYLOAD"]))

    def delete_weights(self, scoring_system_id: str) -> None:
        self.execute_query(
            "DELETE FROM SCORING_WEIGHTS WHERE SCORING_SYSTEM_ID = %s",
            (scoring_system_id,),
            commit=True,
        )

    def save_system(self, system: ScoringSystem) -> ScoringSystem:
        sql = """
            MERGE INTO SCORING_SYSTEMS t
            USING (SELECT %s AS ID, PARSE_JSON(%s) AS PAYLOAD, %s AS UPDATED_AT) s
            ON t.ID = s.ID
            WHEN MATCHED THEN UPDATE SET
                PAYLOAD = s.PAYLOAD,
                UPDATED_AT = s.UPDATED_AT
            WHEN NOT MATCHED THEN INSERT (ID, PAYLOAD, UPDATED_AT)
            VALUES (s.ID, s.PAYLOAD, s.UPDATED_AT)
        """
        params = (system.id, system.model_dump_json(), datetime.now(timezone.utc))
        self.execute_query(sql, params, commit=True)
        return system

    def delete_system(self, scoring_system_id: str) -> None:
        self.execute_query(
            "DELETE FROM SCORING_SYSTEMS WHERE ID = %s",
            (scoring_system_id,),
            commit=True,
        )

    def list_systems(self) -> List[ScoringSystem]:
        sql = "SELECT PAYLOAD FROM SCORING_SYSTEMS ORDER BY UPDATED_AT"
        rows = self.execute_query(sql, fetch_all=True) or []
        return [ScoringSystem.model_validate(self._variant(row["PAYLOAD"])) for row in rows]

    def _variant(self, value: Any) -> Any:
        """VARIANT columns come back as JSON text."""
        if isinstance(value, str):
            return json.loads(value)
        return value

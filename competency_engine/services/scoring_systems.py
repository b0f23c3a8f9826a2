"""
Scoring System Service - Competency Assessment Engine
competency_engine/services/scoring_systems.py

Tenant-side management of scoring systems: create, update, choose the
default and delete. Every change is applied to the in-process registry and
written to the scoring configuration repository, which is replayed into the
registry at startup.
"""

from typing import Iterable, List, Optional

import structlog

from competency_engine.core.exceptions import ConfigurationError, StateError, ValidationError
from competency_engine.models.scoring_system import (
    CreateScoringSystemRequest,
    ScoringSystem,
    UpdateScoringSystemRequest,
)
from competency_engine.repositories.assessment_repository import AssessmentRepository
from competency_engine.repositories.scoring_config_repository import ScoringConfigRepository
from competency_engine.scoring.registry import ScoreModelRegistry

logger = structlog.get_logger(__name__)


def load_stored_systems(registry: ScoreModelRegistry, config_repository: ScoringConfigRepository) -> int:
    """Register every stored scoring system, replacing built-ins with the same id."""
    count = 0
    for system in config_repository.list_systems():
        try:
            registry.register(system)
        except ConfigurationError as e:
            logger.error("stored_scoring_system_invalid", scoring_system_id=system.id, reason=e.message)
            continue
        count += 1
    return count


class ScoringSystemService:
    """Scoring system management backed by the registry and its repository."""

    def __init__(
        self,
        registry: ScoreModelRegistry,
        config_repository: ScoringConfigRepository,
        assessment_repository: AssessmentRepository,
        builtin_ids: Optional[Iterable[str]] = None,
    ):
        self.registry = registry
        self.config_repository = config_repository
        self.assessment_repository = assessment_repository
        self.builtin_ids = frozenset(builtin_ids or ())

    def list_systems(self) -> List[ScoringSystem]:
        return self.registry.list_systems()

    def get(self, scoring_system_id: str) -> ScoringSystem:
        return self.registry.get_system(scoring_system_id)

    def default(self) -> ScoringSystem:
        return self.registry.default()

    def create(self, payload: CreateScoringSystemRequest) -> ScoringSystem:
        """
        Register a custom scoring system.

        Raises:
            StateError: a system with this id already exists.
            ValidationError: the config enables options the model cannot honour.
        """
        if payload.id in self.registry:
            raise StateError(
                f"Scoring system {payload.id} already exists",
                details={"scoring_system_id": payload.id},
            )
        system = ScoringSystem(**payload.model_dump(), is_default=False, is_active=True)
        self._register(system)
        self.config_repository.save_system(system)

        logger.info("scoring_system_created", scoring_system_id=system.id, model=system.model.value)
        return system

    def update(self, scoring_system_id: str, payload: UpdateScoringSystemRequest) -> ScoringSystem:
        """
        Apply the supplied fields to a scoring system.

        Completions after the call score with the new configuration; stored
        results are unaffected.

        Raises:
            StateError: the default system would be deactivated.
            ValidationError: the config enables options the model cannot honour.
        """
        current = self.registry.get_system(scoring_system_id)
        changes = payload.model_dump(exclude_none=True)
        if current.is_default and changes.get("is_active") is False:
            raise StateError(
                "Cannot deactivate the default scoring system; set another system as default first",
                details={"scoring_system_id": scoring_system_id},
            )
        updated = ScoringSystem.model_validate({**current.model_dump(), **changes})
        self._register(updated)
        self.config_repository.save_system(updated)

        logger.info(
            "scoring_system_updated",
            scoring_system_id=scoring_system_id,
            fields=sorted(changes),
        )
        return updated

    def set_default(self, scoring_system_id: str) -> ScoringSystem:
        """
        Make a system the tenant default; the previous default loses the flag.

        Raises:
            ValidationError: the system is inactive.
        """
        system = self.registry.get_system(scoring_system_id)
        if not system.is_active:
            raise ValidationError(
                f"Scoring system {scoring_system_id} is not active",
                details={"scoring_system_id": scoring_system_id},
            )
        previous = self.registry.default()
        updated = self.registry.set_default(scoring_system_id)
        if previous.id != scoring_system_id:
            self.config_repository.save_system(self.registry.get_system(previous.id))
        self.config_repository.save_system(updated)

        logger.info(
            "scoring_system_default_changed",
            scoring_system_id=scoring_system_id,
            previous_default=previous.id,
        )
        return updated

    def delete(self, scoring_system_id: str) -> None:
        """
        Delete a custom scoring system and its weight vector.

        Raises:
            StateError: the system is built in, is the default, or still
                scores IN_PROGRESS assessments.
        """
        system = self.registry.get_system(scoring_system_id)
        if system.id in self.builtin_ids:
            raise StateError(
                f"Scoring system {scoring_system_id} is built in; deactivate it instead",
                details={"scoring_system_id": scoring_system_id},
            )
        in_progress = self.assessment_repository.count_in_progress(scoring_system_id)
        if in_progress:
            raise StateError(
                f"Cannot delete scoring system {scoring_system_id}: "
                f"{in_progress} assessment(s) in progress use it",
                details={"scoring_system_id": scoring_system_id, "in_progress": in_progress},
            )
        self.registry.unregister(scoring_system_id)
        self.config_repository.delete_system(scoring_system_id)
        self.config_repository.delete_weights(scoring_system_id)

        logger.info("scoring_system_deleted", scoring_system_id=scoring_system_id)

    def _register(self, system: ScoringSystem) -> None:
        try:
            self.registry.register(system)
        except ConfigurationError as e:
            raise ValidationError(e.message, details=e.details) from e

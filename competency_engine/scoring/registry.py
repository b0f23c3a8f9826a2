"""
Score Model Registry
competency_engine/scoring/registry.py

Maps scoring system ids to configured ScoreModel instances. Each system's
configuration is validated against its model when it is registered, so a
bad config fails at load time instead of during an assessment.
"""

import threading
from typing import Dict, Iterable, List, Optional, Type

import structlog

from competency_engine.core.exceptions import (
    ConfigurationError,
    StateError,
    UnknownScoringSystemError,
)
from competency_engine.models.enumerations import ScoringModelKind
from competency_engine.models.scoring_system import ScoringSystem, ScoringSystemConfig
from competency_engine.scoring.bars_model import BarsModel
from competency_engine.scoring.base import ScoreModel
from competency_engine.scoring.bayesian_model import BayesianAdjustedModel
from competency_engine.scoring.hierarchical_model import HierarchicalModel
from competency_engine.scoring.likert_model import WeightedLikertModel
from competency_engine.scoring.normalized_model import NormalizedModel
from competency_engine.scoring.rubric_model import WeightedRubricModel

logger = structlog.get_logger(__name__)

MODEL_CLASSES: Dict[ScoringModelKind, Type[ScoreModel]] = {
    ScoringModelKind.WEIGHTED_LIKERT: WeightedLikertModel,
    ScoringModelKind.BARS: BarsModel,
    ScoringModelKind.WEIGHTED_RUBRIC: WeightedRubricModel,
    ScoringModelKind.HIERARCHICAL: HierarchicalModel,
    ScoringModelKind.BAYESIAN_ADJUSTED: BayesianAdjustedModel,
}


def build_model(kind: ScoringModelKind, config: ScoringSystemConfig) -> ScoreModel:
    """
    Instantiate the model for `kind` with `config`.

    Raises ConfigurationError when the config enables options the model
    cannot honour.
    """
    if config.anchors and kind is not ScoringModelKind.BARS:
        raise ConfigurationError(
            f"anchors are only valid for {ScoringModelKind.BARS.value}",
            details={"model": kind.value},
        )

    if kind is ScoringModelKind.NORMALIZED_100:
        base_kind = config.base_model or ScoringModelKind.WEIGHTED_LIKERT
        if base_kind is ScoringModelKind.NORMALIZED_100:
            raise ConfigurationError("normalized_100 cannot wrap itself")
        base = build_model(base_kind, config.model_copy(update={"base_model": None}))
        return NormalizedModel(config, base)

    if config.base_model is not None:
        raise ConfigurationError(
            f"base_model is only valid for {ScoringModelKind.NORMALIZED_100.value}",
            details={"model": kind.value},
        )

    return MODEL_CLASSES[kind](config)


class ScoreModelRegistry:
    """Registry of scoring systems and their models."""

    def __init__(self, systems: Optional[Iterable[ScoringSystem]] = None):
        self._systems: Dict[str, ScoringSystem] = {}
        self._models: Dict[str, ScoreModel] = {}
        self._lock = threading.RLock()
        for system in systems or []:
            self.register(system)

    def register(self, system: ScoringSystem) -> ScoreModel:
        """
        Validate and register a scoring system (replacing one with the same id).

        A system registered as default takes the default flag from all others.
        """
        model = build_model(system.model, system.config)
        with self._lock:
            if system.is_default:
                for other_id, other in self._systems.items():
                    if other.is_default and other_id != system.id:
                        self._systems[other_id] = other.model_copy(update={"is_default": False})
            self._systems[system.id] = system
            self._models[system.id] = model
        logger.debug(
            "scoring_system_registered",
            scoring_system_id=system.id,
            model=system.model.value,
            is_default=system.is_default,
        )
        return model

    def resolve(self, scoring_system_id: str) -> ScoreModel:
        """Get the model for a scoring system id."""
        model = self._models.get(scoring_system_id)
        if model is None:
            raise UnknownScoringSystemError(scoring_system_id)
        return model

    def get_system(self, scoring_system_id: str) -> ScoringSystem:
        system = self._systems.get(scoring_system_id)
        if system is None:
            raise UnknownScoringSystemError(scoring_system_id)
        return system

    def default(self) -> ScoringSystem:
        """
        The default scoring system.

        Falls back to the first active system by name when none is flagged.
        """
        with self._lock:
            systems = list(self._systems.values())
        for system in systems:
            if system.is_default:
                return system
        active = sorted(
            (s for s in systems if s.is_active),
            key=lambda s: s.name,
        )
        if not active:
            raise ConfigurationError("No scoring systems available")
        return active[0]

    def set_default(self, scoring_system_id: str) -> ScoringSystem:
        with self._lock:
            system = self.get_system(scoring_system_id)
            self.register(system.model_copy(update={"is_default": True}))
            return self._systems[scoring_system_id]

    def unregister(self, scoring_system_id: str) -> ScoringSystem:
        """Remove a scoring system; the default one must be replaced first."""
        with self._lock:
            system = self.get_system(scoring_system_id)
            if system.is_default:
                raise StateError(
                    "Cannot delete the default scoring system; set another system as default first",
                    details={"scoring_system_id": scoring_system_id},
                )
            del self._systems[scoring_system_id]
            del self._models[scoring_system_id]
        logger.debug("scoring_system_unregistered", scoring_system_id=scoring_system_id)
        return system

    def list_systems(self) -> List[ScoringSystem]:
        """Default first, then by name."""
        with self._lock:
            systems = list(self._systems.values())
        return sorted(systems, key=lambda s: (not s.is_default, s.name))

    def __contains__(self, scoring_system_id: str) -> bool:
        return scoring_system_id in self._systems

    def __len__(self) -> int:
        return len(self._systems)

# competency_engine/scoring/bayesian_model.py
"""
Bayesian / AI-Adjusted Weight Model
-----------------------------------
Same weighted-average skeleton as Weighted Likert, but competency weights
are not static configuration. An offline batch job derives a weight vector
per assessment cycle from how well each competency's historical scores
track an external performance outcome; the online engine only consumes
that vector (WeightConfig.competency_weights) and renormalizes it to sum
to 1 over the competencies actually assessed.

Offline step (learn_competency_weights):
    r_c  = pearson(historical scores of c, outcomes)
    w_c  = max(0, r_c)            # competencies that do not predict get 0
    w_c' = w_c / Σ w              # renormalized
    falls back to uniform weights when no competency correlates positively
"""

from typing import Dict, Iterable, List, Mapping

import structlog

from competency_engine.core.exceptions import InsufficientDataError
from competency_engine.models.enumerations import ScoringModelKind
from competency_engine.models.question import Competency
from competency_engine.models.scoring_system import WeightConfig, WeightLevels
from competency_engine.scoring.base import ScoreModel
from competency_engine.scoring.utils import normalize_weights, pearson_correlation

logger = structlog.get_logger(__name__)


class BayesianAdjustedModel(ScoreModel):
    """Competency weights taken from a precomputed per-cycle vector."""

    kind = ScoringModelKind.BAYESIAN_ADJUSTED
    supported_levels = WeightLevels(question=True, competency=True, category=False)

    def competency_weights(
        self,
        competencies: Iterable[Competency],
        weights: WeightConfig,
    ) -> Dict[str, float]:
        """
        Resolve the cycle's weight vector over the assessed competencies.

        Competencies absent from the vector keep their snapshotted weight.
        The result sums to 1; an all-zero vector raises InsufficientDataError.
        """
        vector = weights.competency_weights
        resolved = {c.id: vector.get(c.id, c.weight) for c in competencies}
        if not resolved:
            return {}
        return normalize_weights(resolved)


def learn_competency_weights(
    history: Mapping[str, List[float]],
    outcomes: List[float],
) -> Dict[str, float]:
    """
    Derive a competency weight vector from historical batches.

    Args:
        history: Competency id -> historical scores, aligned index-by-index
                 with `outcomes` (one entry per subject/cycle observation).
        outcomes: External performance-outcome signal per observation.

    Returns:
        Competency id -> weight, summing to 1.

    Examples:
        >>> learn_competency_weights({"a": [1, 2, 3], "b": [3, 2, 1]}, [1, 2, 3])
        {'a': 1.0, 'b': 0.0}
    """
    if not history:
        raise InsufficientDataError("No competency history to learn weights from")

    raw: Dict[str, float] = {}
    for competency_id, scores in history.items():
        if len(scores) != len(outcomes):
            raise ValueError(
                f"history for {competency_id} has {len(scores)} observations, "
                f"outcomes has {len(outcomes)}"
            )
        raw[competency_id] = max(0.0, pearson_correlation(list(scores), list(outcomes)))

    if sum(raw.values()) <= 0:
        learned = {competency_id: 1.0 / len(raw) for competency_id in raw}
    else:
        learned = normalize_weights(raw)

    logger.info(
        "competency_weights_learned",
        competencies=len(learned),
        observations=len(outcomes),
        weights=learned,
    )
    return learned

"""
Scoring Utilities
competency_engine/scoring/utils.py

Weight normalization and rescaling helpers, plus the single
rounding step applied to reported scores.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from competency_engine.core.exceptions import InsufficientDataError


def round_score(value: Optional[float], places: int = 2) -> Optional[float]:
    """
    Round a reported score half-up to `places` decimals.

    Only applied to externally reported values, never between aggregation
    levels.
    """
    if value is None:
        return None
    quantum = Decimal(10) ** -places
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def normalize_weights(weights: Dict[str, float]) -> Dict[str, float]:
    """
    Rescale weights so they sum to 1.

    Raises InsufficientDataError when every weight is zero.
    """
    total = sum(weights.values())
    if total <= 0:
        raise InsufficientDataError("Cannot normalize weights that sum to zero")
    return {key: w / total for key, w in weights.items()}


def rescale(value: float, src_min: float, src_max: float,
            dst_min: float = 0.0, dst_max: float = 100.0) -> float:
    """Linearly map value from [src_min, src_max] onto [dst_min, dst_max]."""
    if src_max <= src_min:
        raise ValueError("src_max must be > src_min")
    return dst_min + (value - src_min) / (src_max - src_min) * (dst_max - dst_min)


def pearson_correlation(xs: List[float], ys: List[float]) -> float:
    """
    Pearson correlation coefficient.

    Returns 0.0 when either series has zero variance.
    """
    if len(xs) != len(ys):
        raise ValueError("xs and ys must have same length")
    n = len(xs)
    if n < 2:
        return 0.0

    mean_x = sum(xs) / n
    mean_y = sum(ys) / n
    cov = sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys))
    var_x = sum((x - mean_x) ** 2 for x in xs)
    var_y = sum((y - mean_y) ** 2 for y in ys)
    if var_x == 0 or var_y == 0:
        return 0.0
    return cov / (var_x * var_y) ** 0.5

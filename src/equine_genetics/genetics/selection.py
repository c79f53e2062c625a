"""
Weighted random selection for the equine genetics engine.

select_weighted is the leaf primitive behind genotype generation, the
inheritance fallback, shade selection and marking selection. Randomness is an
explicit capability: every sampling function accepts an rng object exposing
random() -> float in [0, 1). A seeded numpy Generator makes results
reproducible; when none is given a fresh generator is created per call.
"""

import logging
import math
from typing import Any, Mapping, Optional

import numpy

logger = logging.getLogger(__name__)


def resolve_rng(rng: Optional[Any] = None) -> Any:
    """
    Return rng unchanged, or a freshly seeded numpy Generator when rng is None.

    Args:
        rng: Any object with a random() method returning a float in [0, 1)

    Returns:
        Random source to draw from
    """
    if rng is None:
        return numpy.random.default_rng()
    return rng


def _is_valid_weight(weight: Any) -> bool:
    """Numbers >= 0 count as weights. Booleans and NaN do not."""
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        return False
    return not math.isnan(weight) and weight >= 0


def select_weighted(weights: Any, rng: Optional[Any] = None) -> Optional[str]:
    """
    Choose one key with probability proportional to its weight.

    Draws a uniform value in [0, total) and walks the mapping in insertion order,
    subtracting each weight until the remainder goes negative. Entries with a
    non-numeric or negative weight are skipped while weighting.

    Args:
        weights: Mapping of item label to non-negative weight,
            e.g. {"e/e": 0.3, "E/e": 0.4, "E/E": 0.3}
        rng: Random source; see resolve_rng

    Returns:
        The chosen key. The first declared key when the total weight is zero.
        None when weights is not a mapping or is empty; callers treat None as
        "omit this attribute".
    """
    if not isinstance(weights, Mapping) or len(weights) == 0:
        logger.error("select_weighted: invalid or empty weights provided: %r", weights)
        return None

    valid = [(item, weight) for item, weight in weights.items() if _is_valid_weight(weight)]
    total = sum(weight for _, weight in valid)
    if total == 0:
        return next(iter(weights))

    remainder = resolve_rng(rng).random() * total
    for item, weight in valid:
        if remainder < weight:
            return item
        remainder -= weight

    # Floating point drift only
    return valid[-1][0] if valid else None

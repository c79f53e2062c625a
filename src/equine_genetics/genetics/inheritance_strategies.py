"""
Concrete inheritance tiers and the allele-combination rules they share.

Tiers run in DEFAULT_LOCUS_STRATEGIES order: sample gametes from the parents,
then fall back to the breed's allele weights, then to a single last-resort
pair taken from the allowed list.
"""

import logging
from typing import Any, Optional, Tuple

from .abstract_strategies import AbstractLocusStrategy, LocusConstraints
from .loci import (
    CANONICAL_RECESSIVE_PAIRS,
    DOMINANT_TOKENS,
    ORDER_PRESERVING_PREFIXES,
    RECESSIVE_TOKENS,
    join_pair,
    split_pair,
)
from .selection import select_weighted

logger = logging.getLogger(__name__)


def sample_gamete(pair: Any, rng: Any) -> Optional[str]:
    """
    Simulate a gamete: pick one allele of the pair uniformly.

    Returns:
        The passed allele, or None when pair is not a "/"-separated string
    """
    alleles = split_pair(pair)
    if alleles is None:
        return None
    return alleles[int(rng.random() * len(alleles))]


def combine_alleles(first: Optional[str], second: Optional[str]) -> Optional[str]:
    """
    Join two gamete alleles into a pair using dominance notation.

    Rules, first match wins:
    1. Exactly one allele is recessive-like (case-insensitive): the other goes first.
    2. A named W/SW/EDXW variant with bare "w": the variant goes first.
    3. A dominant token with "n" or its own lowercase form: the dominant token goes first.
    4. Otherwise the tokens are sorted, e.g. "W20/W5".

    Args:
        first: Allele passed by the sire
        second: Allele passed by the dam

    Returns:
        Combined pair such as "E/e" or "Cr/n", or None if either allele is missing
    """
    if first is None or second is None:
        return None

    first_recessive = first.lower() in RECESSIVE_TOKENS
    second_recessive = second.lower() in RECESSIVE_TOKENS
    if not first_recessive and second_recessive:
        return join_pair(first, second)
    if first_recessive and not second_recessive:
        return join_pair(second, first)

    for prefix in ORDER_PRESERVING_PREFIXES:
        if first.startswith(prefix) and first != second and second == "w":
            return join_pair(first, second)
        if second.startswith(prefix) and second != first and first == "w":
            return join_pair(second, first)

    if first in DOMINANT_TOKENS and second in ("n", first.lower()):
        return join_pair(first, second)
    if second in DOMINANT_TOKENS and first in ("n", second.lower()):
        return join_pair(second, first)

    return join_pair(*sorted((first, second)))


class DirectGameteSampling(AbstractLocusStrategy):
    """
    Mendelian inheritance: one gamete from each parent, combined by dominance.

    Combinations that violate the locus constraints are redrawn up to
    max_attempts times. Declines when either parent lacks the locus, when a
    parent's pair is malformed, or when every attempt was rejected.
    """

    def __init__(self, max_attempts: int = 10):
        """
        Args:
            max_attempts: Draws to try before deferring to the next tier
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts

    def handle_locus(
        self,
        sire_pair: Any,
        dam_pair: Any,
        constraints: LocusConstraints,
        rng: Any,
    ) -> Optional[str]:
        if not sire_pair or not dam_pair:
            return None

        for attempt in range(self.max_attempts):
            sire_allele = sample_gamete(sire_pair, rng)
            dam_allele = sample_gamete(dam_pair, rng)
            if sire_allele is None or dam_allele is None:
                return None

            pair = combine_alleles(sire_allele, dam_allele)
            if constraints.permits(pair):
                return pair
            logger.debug(
                "Rejected %s for %s (attempt %d of %d)",
                pair,
                constraints.locus,
                attempt + 1,
                self.max_attempts,
            )
        return None


class WeightedTableFallback(AbstractLocusStrategy):
    """
    Draw from the foal breed's allele_weights for the locus.

    Only disallowed combinations are rejected here; the allowed list is not
    consulted.
    """

    def handle_locus(
        self,
        sire_pair: Any,
        dam_pair: Any,
        constraints: LocusConstraints,
        rng: Any,
    ) -> Optional[str]:
        if not constraints.weights:
            return None
        pair = select_weighted(constraints.weights, rng)
        if not pair or constraints.is_disallowed(pair):
            return None
        return pair


class LastResortFallback(AbstractLocusStrategy):
    """
    Take one fixed candidate from the allowed list.

    The candidate is the first canonical homozygous-recessive pair the allowed
    list contains, otherwise the first allowed pair. A disallowed candidate
    declines the locus; no other allowed pair is tried.
    """

    def __init__(self, canonical_pairs: Tuple[str, ...] = CANONICAL_RECESSIVE_PAIRS):
        self.canonical_pairs = canonical_pairs

    def handle_locus(
        self,
        sire_pair: Any,
        dam_pair: Any,
        constraints: LocusConstraints,
        rng: Any,
    ) -> Optional[str]:
        if not constraints.allowed:
            return None
        pair = next((p for p in self.canonical_pairs if p in constraints.allowed), constraints.allowed[0])
        return None if constraints.is_disallowed(pair) else pair


DEFAULT_LOCUS_STRATEGIES: Tuple[AbstractLocusStrategy, ...] = (
    DirectGameteSampling(max_attempts=10),
    WeightedTableFallback(),
    LastResortFallback(),
)

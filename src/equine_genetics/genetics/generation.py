"""
Genotype generation for newly created horses.

Builds a complete genotype from a breed's allele probability profile: one
weighted draw per locus in allele_weights, one Bernoulli draw per boolean
modifier in boolean_modifiers_prevalence.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from .genotype import Genotype
from .profile import coerce_profile, profile_section
from .selection import resolve_rng, select_weighted

logger = logging.getLogger(__name__)


def _is_probability(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return 0 <= value <= 1


def generate_genotype(profile: Any, rng: Optional[Any] = None) -> Genotype:
    """
    Generate the genotype of a store-bought horse from its breed profile.

    A locus whose drawn pair is listed in disallowed_combinations is omitted
    rather than redrawn. A modifier with an invalid prevalence is set to False.
    Both cases log a warning and generation continues with the next entry.

    Args:
        profile: Breed genetic profile (plain mapping or BreedGeneticProfile)
        rng: Random source; see selection.resolve_rng

    Returns:
        New Genotype. Empty when profile is None.

    Raises:
        TypeError: If profile is neither None, a mapping nor a BreedGeneticProfile
    """
    profile = coerce_profile(profile)
    if profile is None:
        logger.error("Breed genetic profile is missing; returning an empty genotype.")
        return Genotype()

    rng = resolve_rng(rng)
    loci = {}
    modifiers = {}

    allele_weights = profile.get("allele_weights")
    if isinstance(allele_weights, Mapping):
        disallowed = profile_section(profile, "disallowed_combinations")
        for locus, weighted_pairs in allele_weights.items():
            pair = select_weighted(weighted_pairs, rng)
            if not pair:
                logger.warning("Could not determine allele pair for %s; omitting it.", locus)
            elif pair in (disallowed.get(locus) or ()):
                logger.warning("Drew disallowed allele pair %s for %s; omitting it.", pair, locus)
            else:
                loci[locus] = pair
    else:
        logger.warning("allele_weights missing or invalid in breed profile.")

    prevalences = profile.get("boolean_modifiers_prevalence")
    if isinstance(prevalences, Mapping):
        for name, prevalence in prevalences.items():
            if _is_probability(prevalence):
                modifiers[name] = bool(rng.random() < prevalence)
            else:
                logger.warning(
                    "Invalid prevalence %r for boolean modifier %s; defaulting to False.",
                    prevalence,
                    name,
                )
                modifiers[name] = False
    else:
        logger.warning("boolean_modifiers_prevalence missing or invalid in breed profile.")

    genotype = Genotype(loci=loci, modifiers=modifiers)
    logger.debug("Generated genotype: %r", genotype)
    return genotype

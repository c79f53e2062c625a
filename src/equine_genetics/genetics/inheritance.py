"""
Inheritance Calculator: a foal genotype from sire, dam and the foal's breed.

Each locus is decided by the first tier in the strategy list that produces a
pair (see inheritance_strategies). Boolean modifiers follow their own rules:
agreement between parents is inherited outright, disagreement is a coin flip,
and missing parental information falls back to breed prevalence.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from .abstract_strategies import AbstractLocusStrategy, LocusConstraints
from .genotype import Genotype
from .inheritance_strategies import (  # noqa: F401  (re-exported)
    DEFAULT_LOCUS_STRATEGIES,
    combine_alleles,
    sample_gamete,
)
from .loci import BOOLEAN_MODIFIERS
from .profile import coerce_profile
from .selection import resolve_rng

logger = logging.getLogger(__name__)


def loci_to_inherit(sire: Mapping, dam: Mapping, profile: Mapping) -> List[str]:
    """
    Loci the foal receives.

    The foal breed's allowed_alleles keys when that table is declared,
    otherwise every key either parent carries, boolean modifiers excluded.
    """
    allowed = profile.get("allowed_alleles")
    if isinstance(allowed, Mapping):
        return list(allowed)

    loci: Dict[str, None] = {}
    for key in list(sire) + list(dam):
        if key not in BOOLEAN_MODIFIERS:
            loci[key] = None
    return list(loci)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def inherit_modifier(
    name: str,
    sire: Mapping,
    dam: Mapping,
    prevalence: Any,
    rng: Any,
) -> bool:
    """
    Decide one boolean modifier for a foal.

    A parent "defines" the modifier when the key is present in its genotype.

    Args:
        name: Modifier name, e.g. "sooty"
        sire: Sire genotype
        dam: Dam genotype
        prevalence: Breed prevalence for the modifier
        rng: Random source

    Returns:
        Foal's flag
    """
    sire_defines = name in sire
    dam_defines = name in dam
    sire_value = sire.get(name)
    dam_value = dam.get(name)
    prevalence_draw_limit = prevalence if _is_number(prevalence) else 0

    if sire_value is True and dam_value is True:
        return True
    if sire_value is False and dam_value is False:
        return False
    if sire_defines and dam_defines:
        return bool(rng.random() < 0.5)
    if sire_defines or dam_defines:
        parent_value = sire_value if sire_defines else dam_value
        if rng.random() < 0.5:
            return parent_value is True
        return bool(rng.random() < prevalence_draw_limit)
    if not _is_number(prevalence):
        return False
    return bool(rng.random() < prevalence)


def inherit_genotype(
    sire: Optional[Mapping],
    dam: Optional[Mapping],
    foal_profile: Any,
    rng: Optional[Any] = None,
    strategies: Sequence[AbstractLocusStrategy] = DEFAULT_LOCUS_STRATEGIES,
) -> Genotype:
    """
    Compute a foal's genotype from its parents.

    Args:
        sire: Sire genotype (Genotype or plain mapping)
        dam: Dam genotype (Genotype or plain mapping)
        foal_profile: Foal breed genetic profile (plain mapping or BreedGeneticProfile)
        rng: Random source; see selection.resolve_rng
        strategies: Ordered fallback tiers tried for each locus

    Returns:
        Foal Genotype. Empty when sire, dam or foal_profile is None. A locus
        for which every tier declines is omitted with a warning.

    Raises:
        TypeError: If a parent is neither None nor a mapping, or the profile is
            of an unsupported type
    """
    for role, parent in (("sire", sire), ("dam", dam)):
        if parent is not None and not isinstance(parent, Mapping):
            raise TypeError(f"{role} genotype must be a mapping, got {type(parent).__name__}")

    profile = coerce_profile(foal_profile)
    if sire is None or dam is None or profile is None:
        logger.error("Missing sire, dam or foal breed profile; returning an empty genotype.")
        return Genotype()

    rng = resolve_rng(rng)
    loci = {}
    for locus in loci_to_inherit(sire, dam, profile):
        constraints = LocusConstraints.from_profile(locus, profile)
        pair = None
        for strategy in strategies:
            pair = strategy.apply_strategy(sire.get(locus), dam.get(locus), constraints, rng)
            if pair is not None:
                break
        if pair is None:
            logger.warning("No valid allele pair for %s; omitting it from the foal genotype.", locus)
        else:
            loci[locus] = pair

    modifiers = {}
    prevalences = profile.get("boolean_modifiers_prevalence")
    if isinstance(prevalences, Mapping):
        for name, prevalence in prevalences.items():
            if name in BOOLEAN_MODIFIERS:
                modifiers[name] = inherit_modifier(name, sire, dam, prevalence, rng)

    genotype = Genotype(loci=loci, modifiers=modifiers)
    logger.debug("Inherited foal genotype: %r", genotype)
    return genotype

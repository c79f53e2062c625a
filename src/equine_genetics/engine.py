"""
Engine facade for callers of the genetics library.

GeneticsEngine holds a single random source and routes every sampling call
through it, so a service can seed one engine per request (or per test) and get
reproducible horses. It also packages the two workflows the game backend runs:
creating a store-bought horse and breeding a foal.
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Tuple

from .genetics.abstract_strategies import AbstractLocusStrategy
from .genetics.generation import generate_genotype
from .genetics.genotype import Genotype
from .genetics.inheritance import inherit_genotype
from .genetics.inheritance_strategies import DEFAULT_LOCUS_STRATEGIES
from .genetics.phenotype import PhenotypeResult, resolve_phenotype
from .genetics.selection import resolve_rng, select_weighted

logger = logging.getLogger(__name__)

FOAL_AGE_IN_YEARS = 0


class GeneticsEngine:
    """
    Coordinates genotype generation, phenotype resolution and inheritance.

    Concrete class. Stateful only through its random source; the genetics
    functions it delegates to are pure.
    """

    def __init__(
        self,
        rng: Optional[Any] = None,
        locus_strategies: Sequence[AbstractLocusStrategy] = DEFAULT_LOCUS_STRATEGIES,
    ):
        """
        Construct engine with its dependencies.

        Args:
            rng: Random source shared by all calls. Defaults to a fresh
                numpy Generator.
            locus_strategies: Ordered inheritance tiers for each locus
        """
        self.rng = resolve_rng(rng)
        self.locus_strategies = tuple(locus_strategies)

    def select_weighted(self, weights: Mapping[str, float]) -> Optional[str]:
        return select_weighted(weights, self.rng)

    def generate_genotype(self, profile: Any) -> Genotype:
        return generate_genotype(profile, self.rng)

    def resolve_phenotype(
        self,
        genotype: Mapping[str, Any],
        profile: Any,
        age_in_years: float = 0,
    ) -> PhenotypeResult:
        return resolve_phenotype(genotype, profile, age_in_years, self.rng)

    def inherit_genotype(
        self,
        sire: Optional[Mapping[str, Any]],
        dam: Optional[Mapping[str, Any]],
        foal_profile: Any,
    ) -> Genotype:
        return inherit_genotype(sire, dam, foal_profile, self.rng, self.locus_strategies)

    def create_horse(self, profile: Any, age_in_years: float) -> Tuple[Genotype, PhenotypeResult]:
        """
        Generate a store-bought horse of the given breed and age.

        Args:
            profile: Breed genetic profile
            age_in_years: Horse age used for the phenotype

        Returns:
            (genotype, phenotype)
        """
        genotype = self.generate_genotype(profile)
        phenotype = self.resolve_phenotype(genotype, profile, age_in_years)
        logger.info("Created horse: %s", phenotype.final_display_color)
        return genotype, phenotype

    def breed_foal(
        self,
        sire: Mapping[str, Any],
        dam: Mapping[str, Any],
        foal_profile: Any,
    ) -> Tuple[Genotype, PhenotypeResult]:
        """
        Breed a newborn foal.

        Args:
            sire: Sire genotype
            dam: Dam genotype
            foal_profile: Breed genetic profile of the foal

        Returns:
            (genotype, phenotype) with the phenotype resolved at age 0
        """
        genotype = self.inherit_genotype(sire, dam, foal_profile)
        phenotype = self.resolve_phenotype(genotype, foal_profile, FOAL_AGE_IN_YEARS)
        logger.info("Bred foal: %s", phenotype.final_display_color)
        return genotype, phenotype

"""
Breed genetic profiles: validated configuration consumed by the genetics engine.

A breed profile is owned by the breed catalog and describes how a breed's horses
are generated, which foal genotypes are permitted, and how shades and markings
are biased. The engine itself reads plain mappings so that callers can pass
profiles straight from storage; BreedGeneticProfile is the validated form used
when loading catalogs, and as_mapping() converts it back into what the engine
reads.

## Profile Schema (owned here)

- allele_weights: locus -> (allele pair -> relative weight)
- disallowed_combinations: locus -> forbidden allele pairs
- allowed_alleles: locus -> permitted allele pairs. When present, its keys are
  the loci a foal of this breed inherits.
- boolean_modifiers_prevalence: modifier -> probability in [0, 1]
- shade_bias: phenotype key or base color -> (shade name -> weight)
- marking_bias: face and leg marking tables
- advanced_markings_bias: multipliers for snowflake, frost and bloody shoulder
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

Weight = Annotated[float, Field(ge=0.0)]
Probability = Annotated[float, Field(ge=0.0, le=1.0)]

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "breeds.json"


def _check_pair(pair: str) -> str:
    parts = pair.split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"'{pair}' is not a well-formed allele pair (expected 'X/Y')")
    return pair


class MarkingBias(BaseModel):
    """Face and leg marking probability tables."""

    model_config = ConfigDict(extra="forbid")

    face: Dict[str, Weight] = Field(default_factory=dict)
    legs_general_probability: Optional[Probability] = None
    leg_specific_probabilities: Dict[str, Weight] = Field(default_factory=dict)
    max_legs_marked: Annotated[int, Field(ge=0, le=4)] = 4


class AdvancedMarkingsBias(BaseModel):
    """Multipliers applied to the base chance of rare marking sub-features."""

    model_config = ConfigDict(extra="forbid")

    snowflake_probability_multiplier: Weight = 1.0
    frost_probability_multiplier: Weight = 1.0
    bloody_shoulder_probability_multiplier: Weight = 1.0


class BreedGeneticProfile(BaseModel):
    """
    Validated breed genetic profile.

    Validation guarantees well-formed allele pairs, non-negative weights and
    prevalences within [0, 1]. Optional sections that were not declared stay
    unset, because the engine distinguishes "absent" from "empty" (an absent
    allowed_alleles table means "inherit whatever the parents carry").
    """

    model_config = ConfigDict(extra="forbid")

    allele_weights: Dict[str, Dict[str, Weight]] = Field(default_factory=dict)
    disallowed_combinations: Dict[str, List[str]] = Field(default_factory=dict)
    allowed_alleles: Optional[Dict[str, List[str]]] = None
    boolean_modifiers_prevalence: Dict[str, Probability] = Field(default_factory=dict)
    shade_bias: Dict[str, Dict[str, Weight]] = Field(default_factory=dict)
    marking_bias: Optional[MarkingBias] = None
    advanced_markings_bias: Optional[AdvancedMarkingsBias] = None

    @field_validator("allele_weights")
    @classmethod
    def _weighted_pairs_are_well_formed(cls, value: Dict[str, Dict[str, float]]):
        for table in value.values():
            for pair in table:
                _check_pair(pair)
        return value

    @field_validator("disallowed_combinations", "allowed_alleles")
    @classmethod
    def _listed_pairs_are_well_formed(cls, value: Optional[Dict[str, List[str]]]):
        if value is None:
            return value
        for pairs in value.values():
            for pair in pairs:
                _check_pair(pair)
        return value

    def as_mapping(self) -> Dict[str, Any]:
        """
        Convert to the plain mapping read by the engine.

        Returns:
            Dict of declared sections; unset optional sections are omitted
        """
        return self.model_dump(exclude_none=True)


def coerce_profile(profile: Any) -> Optional[Mapping[str, Any]]:
    """
    Normalize an engine profile argument.

    Args:
        profile: None, a plain mapping, or a BreedGeneticProfile

    Returns:
        None or a mapping the engine can read

    Raises:
        TypeError: If profile is none of the accepted kinds
    """
    if profile is None:
        return None
    if isinstance(profile, BreedGeneticProfile):
        return profile.as_mapping()
    if isinstance(profile, Mapping):
        return profile
    raise TypeError(
        f"Breed genetic profile must be a mapping or BreedGeneticProfile, got {type(profile).__name__}"
    )


def load_breed_catalog(path: Union[str, Path]) -> Dict[str, BreedGeneticProfile]:
    """
    Load and validate a JSON breed catalog.

    The file holds a single object mapping breed names to profile objects.

    Args:
        path: Location of the catalog file

    Returns:
        Mapping of breed name to validated profile, in file order

    Raises:
        ValueError: If the file is not a JSON object of profiles
        pydantic.ValidationError: If any profile fails validation
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)

    if not isinstance(raw, dict):
        raise ValueError(f"Breed catalog {path} must contain a JSON object of breed profiles")

    catalog = {
        breed: BreedGeneticProfile.model_validate(profile)
        for breed, profile in raw.items()
    }
    logger.info("Loaded %d breed profiles from %s", len(catalog), path)
    return catalog


def load_default_catalog() -> Dict[str, BreedGeneticProfile]:
    """Load the sample catalog bundled with the package."""
    return load_breed_catalog(DEFAULT_CATALOG_PATH)


def profile_section(profile: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return the named profile section, or an empty mapping when it is absent or malformed."""
    section = profile.get(name)
    return section if isinstance(section, Mapping) else {}

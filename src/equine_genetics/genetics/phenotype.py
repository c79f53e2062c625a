"""
Phenotype resolution: genotype + age -> visible coat color, shade and markings.

The coat color itself comes from the staged pipeline in coat_color; this module
validates inputs, runs the pipeline, samples markings and packages the result.
Shade and marking draws are the only random steps, so resolving with a seeded
rng is reproducible.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .coat_color import PipelineContext, assemble_display_color, run_color_pipeline
from .markings import PhenotypicMarkings, sample_markings
from .profile import coerce_profile
from .selection import resolve_rng

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhenotypeResult:
    final_display_color: str
    phenotypic_markings: PhenotypicMarkings
    determined_shade: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "final_display_color": self.final_display_color,
            "phenotypic_markings": self.phenotypic_markings.as_dict(),
            "determined_shade": self.determined_shade,
        }


def resolve_phenotype(
    genotype: Mapping,
    profile: Any,
    age_in_years: float = 0,
    rng: Optional[Any] = None,
) -> PhenotypeResult:
    """
    Resolve the visible phenotype of a horse.

    Args:
        genotype: Genotype or plain mapping of loci and boolean modifiers
        profile: Breed genetic profile (plain mapping or BreedGeneticProfile).
            None resolves with no shade or marking bias.
        age_in_years: Age used by the gray and leopard complex progressions
        rng: Random source; see selection.resolve_rng

    Returns:
        PhenotypeResult with display color, markings and the drawn shade

    Raises:
        TypeError: If genotype is not a mapping, profile is of an unsupported
            type, or age_in_years is not a real number
    """
    if not isinstance(genotype, Mapping):
        raise TypeError(f"Genotype must be a mapping, got {type(genotype).__name__}")
    if isinstance(age_in_years, bool) or not isinstance(age_in_years, (int, float)):
        raise TypeError(f"age_in_years must be a number, got {type(age_in_years).__name__}")

    profile = coerce_profile(profile)
    if profile is None:
        logger.warning("No breed genetic profile given; resolving without shade or marking bias.")
        profile = {}

    rng = resolve_rng(rng)
    context = PipelineContext(genotype=genotype, profile=profile, age_in_years=age_in_years, rng=rng)
    state = run_color_pipeline(context)
    markings = sample_markings(
        profile,
        rng,
        mottling=state.mottling,
        bloody_shoulder=state.bloody_shoulder,
    )

    result = PhenotypeResult(
        final_display_color=assemble_display_color(state),
        phenotypic_markings=markings,
        determined_shade=state.shade or "",
    )
    logger.debug("Resolved phenotype: %r", result)
    return result

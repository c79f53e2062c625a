"""
White markings on the face and legs.

Markings are sampled independently of coat color from the breed's marking_bias
table. Pattern-driven body markings (leopard mottling and striping, the gray
bloody shoulder) are decided by the coat color pipeline and merged in here.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from .profile import profile_section
from .selection import select_weighted

logger = logging.getLogger(__name__)

LEGS = ("LF", "RF", "LH", "RH")
NO_MARKING = "none"
DEFAULT_MAX_LEGS_MARKED = 4


@dataclass(frozen=True)
class PhenotypicMarkings:
    face: str = NO_MARKING
    legs: Dict[str, str] = field(default_factory=lambda: {leg: NO_MARKING for leg in LEGS})
    mottling: bool = False
    striping: bool = False
    bloody_shoulder: bool = False

    def as_dict(self) -> Dict[str, Any]:
        """Plain-data form. Pattern markings only appear when present."""
        result: Dict[str, Any] = {"face": self.face, "legs": dict(self.legs)}
        if self.mottling:
            result["mottling"] = True
        if self.striping:
            result["striping"] = True
        if self.bloody_shoulder:
            result["body_markings"] = {"bloody_shoulder": True}
        return result


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def sample_leg_markings(marking_bias: Mapping[str, Any], rng: Any) -> Dict[str, str]:
    """
    Roll each leg in LF, RF, LH, RH order against legs_general_probability.

    Once max_legs_marked legs carry a marking, the remaining legs are left
    unmarked without drawing. A triggered leg samples its marking type from
    leg_specific_probabilities.

    Args:
        marking_bias: The breed's marking_bias section
        rng: Random source

    Returns:
        Mapping of leg to marking type, "none" for unmarked legs
    """
    legs = {leg: NO_MARKING for leg in LEGS}
    leg_types = marking_bias.get("leg_specific_probabilities")
    probability = marking_bias.get("legs_general_probability")
    if not isinstance(leg_types, Mapping) or not leg_types or not _is_number(probability):
        return legs

    max_legs = marking_bias.get("max_legs_marked")
    if not _is_number(max_legs):
        max_legs = DEFAULT_MAX_LEGS_MARKED

    marked = 0
    for leg in LEGS:
        if marked < max_legs and rng.random() < probability:
            legs[leg] = select_weighted(leg_types, rng) or NO_MARKING
            if legs[leg] != NO_MARKING:
                marked += 1
    return legs


def sample_markings(
    profile: Mapping[str, Any],
    rng: Any,
    mottling: bool = False,
    bloody_shoulder: bool = False,
) -> PhenotypicMarkings:
    """
    Sample face and leg markings and attach pattern markings.

    Args:
        profile: Breed genetic profile mapping
        rng: Random source
        mottling: Leopard complex present; adds mottling and striping
        bloody_shoulder: Gray bloody shoulder roll succeeded

    Returns:
        PhenotypicMarkings for the horse
    """
    marking_bias = profile_section(profile, "marking_bias")
    face = NO_MARKING
    face_table = marking_bias.get("face")
    if isinstance(face_table, Mapping) and face_table:
        face = select_weighted(face_table, rng) or NO_MARKING

    markings = PhenotypicMarkings(
        face=face,
        legs=sample_leg_markings(marking_bias, rng),
        mottling=mottling,
        striping=mottling,
        bloody_shoulder=bloody_shoulder,
    )
    logger.debug("Sampled markings: %r", markings)
    return markings

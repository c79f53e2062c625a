"""
Abstract strategy classes for per-locus inheritance.

Each strategy is one tier of the foal allele-pair decision: given the parents'
pairs for a locus and the foal breed's constraints on it, a tier either
produces a pair or declines so the next tier can try. The Inheritance
Calculator runs an ordered list of tiers; concrete tiers live in
inheritance_strategies.py.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .profile import profile_section


@dataclass(frozen=True)
class LocusConstraints:
    """
    The foal breed profile's rules for a single locus.

    Attributes:
        locus: Locus name, e.g. "E_Extension"
        allowed: Permitted pairs, or None when the profile declares no
            allowed_alleles table at all. A declared table without this locus
            permits nothing.
        disallowed: Forbidden pairs
        weights: The locus' allele_weights table, if any
    """

    locus: str
    allowed: Optional[Tuple[str, ...]]
    disallowed: Tuple[str, ...]
    weights: Any = None

    @classmethod
    def from_profile(cls, locus: str, profile: Mapping) -> "LocusConstraints":
        allowed_table = profile.get("allowed_alleles")
        allowed = None
        if isinstance(allowed_table, Mapping):
            allowed = tuple(allowed_table.get(locus) or ())
        disallowed = tuple(profile_section(profile, "disallowed_combinations").get(locus) or ())
        weights = profile_section(profile, "allele_weights").get(locus)
        return cls(locus=locus, allowed=allowed, disallowed=disallowed, weights=weights)

    def is_disallowed(self, pair: str) -> bool:
        return pair in self.disallowed

    def permits(self, pair: str) -> bool:
        """Pair is neither disallowed nor outside a declared allowed list."""
        if self.is_disallowed(pair):
            return False
        return self.allowed is None or pair in self.allowed


class AbstractLocusStrategy(ABC):
    """
    One fallback tier of foal allele-pair selection.

    Stateless. Concrete tiers implement handle_locus; apply_strategy wraps it
    with the guarantee every tier shares: a produced pair is never one of the
    locus' disallowed combinations.
    """

    def apply_strategy(
        self,
        sire_pair: Any,
        dam_pair: Any,
        constraints: LocusConstraints,
        rng: Any,
    ) -> Optional[str]:
        """
        Decide the foal's pair for one locus, or decline.

        Args:
            sire_pair: Sire's raw value at the locus (may be missing or malformed)
            dam_pair: Dam's raw value at the locus (may be missing or malformed)
            constraints: Foal breed rules for the locus
            rng: Random source

        Returns:
            Allele pair string, or None to defer to the next tier

        Raises:
            ValueError: If the tier produced a disallowed pair
        """
        pair = self.handle_locus(sire_pair, dam_pair, constraints, rng)
        if pair is not None and constraints.is_disallowed(pair):
            raise ValueError(
                f"{type(self).__name__} produced disallowed pair {pair} for {constraints.locus}"
            )
        return pair

    @abstractmethod
    def handle_locus(
        self,
        sire_pair: Any,
        dam_pair: Any,
        constraints: LocusConstraints,
        rng: Any,
    ) -> Optional[str]:
        """
        Tier-specific decision.

        Args:
            sire_pair: Sire's raw value at the locus
            dam_pair: Dam's raw value at the locus
            constraints: Foal breed rules for the locus
            rng: Random source

        Returns:
            Allele pair string, or None to decline
        """
        ...

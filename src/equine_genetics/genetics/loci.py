"""
Locus vocabulary for the equine genetics engine.

Loci are identified by symbolic names ("E_Extension", "Cr_Cream", ...) and hold an
allele pair written "X/Y". Case carries meaning: dominant alleles are capitalized
("Cr", "E", "W12"), recessive or neutral alleles are lowercase ("n", "e", "w").

This module owns the token tables used by generation, inheritance and phenotype
resolution, and the GenotypeView reader that all of them use to query a genotype.
GenotypeView treats malformed entries (non-string values, strings without a "/")
as absent loci, so no caller ever has to validate a genotype before reading it.
"""

from typing import Any, List, Mapping, Optional, Tuple


# ─── Locus Names ──────────────────────────────────────────────────────────────

EXTENSION = "E_Extension"
AGOUTI = "A_Agouti"
CREAM = "Cr_Cream"
DUN = "D_Dun"
CHAMPAGNE = "CH_Champagne"
SILVER = "Z_Silver"
PEARL = "PRL_Pearl"
MUSHROOM = "MFSD12_Mushroom"
GRAY = "G_Gray"
ROAN = "Rn_Roan"
DOMINANT_WHITE = "W_DominantWhite"
SPLASH_WHITE = "SW_SplashWhite"
EDEN_WHITE = "EDXW"
FRAME_OVERO = "O_FrameOvero"
TOBIANO = "TO_Tobiano"
SABINO = "SB1_Sabino1"
LEOPARD_COMPLEX = "LP_LeopardComplex"
PATTERN_1 = "PATN1_Pattern1"


# ─── Boolean Modifiers ────────────────────────────────────────────────────────

SOOTY = "sooty"
FLAXEN = "flaxen"
PANGARE = "pangare"
RABICANO = "rabicano"

BOOLEAN_MODIFIERS: Tuple[str, ...] = (SOOTY, FLAXEN, PANGARE, RABICANO)


# ─── Allele Token Tables ──────────────────────────────────────────────────────

# Compared case-insensitively. A sampled allele in this set is written second
# when paired with an allele outside it.
RECESSIVE_TOKENS = frozenset({
    "n", "w", "patn1", "nd1", "nd2", "lp", "g", "rn", "to", "o",
    "sb1", "mu", "e", "a", "ch", "cr", "z", "prl", "d",
})

# Written first when paired with "n" or their own lowercase form.
DOMINANT_TOKENS: Tuple[str, ...] = (
    "Ch", "Cr", "Z", "Prl", "D", "Mu", "Lp", "Rn", "To", "O", "Sb1",
)

# Locus prefixes whose named variants keep their position when paired with "w".
ORDER_PRESERVING_PREFIXES: Tuple[str, ...] = ("W", "SW", "EDXW")

# Canonical homozygous recessive pairs, in preference order, for the last-resort
# inheritance fallback.
CANONICAL_RECESSIVE_PAIRS: Tuple[str, ...] = (
    "n/n", "w/w", "e/e", "a/a", "g/g", "rn/rn", "lp/lp", "to/to", "o/o",
    "sb1/sb1", "d/d", "nd2/nd2", "patn1/patn1", "ch/ch", "cr/cr", "z/z",
    "prl/prl", "mu/mu",
)

# Dominant-white alleles that produce a (near) all-white horse on their own.
LETHAL_WHITE_ALLELES = frozenset({"W2", "W4", "W5", "W10", "W13", "W19", "W22"})
MINIMAL_WHITE_ALLELE = "W20"


# ─── Allele Pair Helpers ──────────────────────────────────────────────────────

def split_pair(pair: Any) -> Optional[List[str]]:
    """
    Split an allele pair string into its tokens.

    Args:
        pair: Candidate allele pair, e.g. "Cr/n"

    Returns:
        List of tokens, or None when the value is not a "/"-separated string
    """
    if not isinstance(pair, str) or "/" not in pair:
        return None
    return pair.split("/")


def join_pair(first: str, second: str) -> str:
    return f"{first}/{second}"


class GenotypeView:
    """
    Read-only query helper over a genotype mapping.

    Wraps either a Genotype or a plain dict. Every query answers "absent" for
    loci that are missing or malformed.
    """

    def __init__(self, genotype: Mapping[str, Any]):
        self._genotype = genotype

    def pair(self, locus: str) -> Optional[str]:
        """Return the raw allele pair string for locus, or None if absent or malformed."""
        value = self._genotype.get(locus)
        tokens = split_pair(value)
        return value if tokens is not None and len(tokens) == 2 and all(tokens) else None

    def alleles(self, locus: str) -> List[str]:
        pair = self.pair(locus)
        return pair.split("/") if pair is not None else []

    def carries(self, locus: str, symbol: str) -> bool:
        """True when any allele token at locus contains symbol (e.g. "A" matches "At")."""
        return any(symbol in token for token in self.alleles(locus))

    def is_homozygous(self, locus: str, allele: str) -> bool:
        alleles = self.alleles(locus)
        return len(alleles) == 2 and alleles[0] == allele and alleles[1] == allele

    def is_heterozygous(self, locus: str, first: str, second: str) -> bool:
        """True when locus holds exactly first and second, in either order."""
        alleles = self.alleles(locus)
        return len(alleles) == 2 and sorted(alleles) == sorted([first, second])

    def modifier(self, name: str) -> bool:
        """Boolean modifiers only count when stored as a literal True."""
        return self._genotype.get(name) is True

"""
Pearl dilution.

Pearl is recessive on its own but compounds with a single cream allele, so the
named outcome depends on the color produced by the cream, dun and champagne
stages. The compounding rules can stack a second "Pearl" onto a name that
already carries one; normalize_pearl_terms collapses those repeats and runs as
the last step of every pearl application, since shade lookup keys depend on it.
"""

import logging
from typing import Any, Mapping, Tuple

from ..utilities import collapse_whitespace, contains_term, replace_all_ci
from .loci import CREAM, PEARL, GenotypeView

logger = logging.getLogger(__name__)

PEARL_CREAM_BASES = ("Palomino", "Buckskin", "Smoky Black")


def normalize_pearl_terms(text: str) -> str:
    """Collapse "Pearl Pearl" into "Pearl" and "Pearl Cream Pearl" into "Pearl Cream"."""
    if contains_term(text, "pearl pearl"):
        text = replace_all_ci(text, "Pearl Pearl", "Pearl")
    if contains_term(text, "pearl cream pearl"):
        text = replace_all_ci(text, "Pearl Cream Pearl", "Pearl Cream")
    return text


def apply_pearl_dilution(
    display_color: str,
    shade_key: str,
    genotype: Mapping[str, Any],
    base_color: str,
) -> Tuple[str, str]:
    """
    Apply pearl dilution to the color accumulated so far.

    - prl/prl without cream: " Pearl" suffix, except chestnut without champagne
      which becomes "Apricot".
    - prl/n with one cream: "Palomino Pearl", "Buckskin Pearl" or
      "Smoky Black Pearl", otherwise a " Pearl Cream" suffix.
    - prl/prl with one cream: " Homozygous Pearl Cream" suffix.
    - prl/prl with two creams: " (Pearl)" suffix unless pearl is already named.

    Args:
        display_color: Display color so far, e.g. "Palomino"
        shade_key: Phenotype key used for shade lookup
        genotype: Genotype mapping to read PRL_Pearl and Cr_Cream from
        base_color: "Chestnut", "Bay" or "Black"

    Returns:
        (display_color, shade_key), trimmed; unchanged apart from trimming when
        pearl has no visible effect
    """
    genes = GenotypeView(genotype)
    display = display_color.strip()
    key = shade_key.strip()

    homozygous = genes.is_homozygous(PEARL, "prl")
    heterozygous = genes.is_heterozygous(PEARL, "prl", "n")
    single_cream = genes.is_heterozygous(CREAM, "Cr", "n")
    double_cream = genes.is_homozygous(CREAM, "Cr")

    if not (homozygous or (heterozygous and single_cream)):
        return display, key

    original = display
    if homozygous and not single_cream and not double_cream:
        if base_color == "Chestnut" and not contains_term(original, "champagne"):
            display = key = "Apricot"
        else:
            display = f"{original} Pearl"
            key = f"{key} Pearl"
    elif single_cream and heterozygous:
        if original in PEARL_CREAM_BASES:
            display = key = f"{original} Pearl"
        else:
            display = f"{original} Pearl Cream"
            key = f"{key} Pearl Cream"
    elif single_cream and homozygous:
        display = f"{original} Homozygous Pearl Cream"
        key = display if original in PEARL_CREAM_BASES else f"{key} Homozygous Pearl Cream"

    if homozygous and double_cream and not contains_term(display, "pearl"):
        display = f"{original} (Pearl)"
        key = f"{key} (Pearl)"

    display = normalize_pearl_terms(collapse_whitespace(display))
    key = normalize_pearl_terms(collapse_whitespace(key))
    logger.debug("Pearl dilution: %s -> %s (key %s)", original, display, key)
    return display, key

"""
Coat color pipeline.

Resolves a genotype into a display color through a fixed sequence of stages.
Later dilutions depend on the color produced by earlier ones (Extension masks
Agouti, dun recolors creams, champagne reads both cream dose and dun, ...), so
the order of COLOR_STAGES is part of the behavior.

Each stage is a pure function (ColorState, PipelineContext) -> ColorState. The
state carries explicit flags for what has been applied so far, plus two text
accumulators: `display` (the human-facing color) and `shade_key` (the
normalized label used only to look up shade_bias). From the sooty stage on, the
display is split into `parts` so that descriptors (Flaxen, Tobiano, Rabicano,
...) can be appended, deduplicated and reordered before final assembly.

Stages that read other stages' output do so through the flags wherever the
outcome is structural. The roan family and the final dedup/reorder operate on
the accumulated words, because shade names are breed configuration and take
part in those decisions.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import reduce
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..utilities import capitalize_first, contains_term, replace_first_ci
from .loci import (
    AGOUTI,
    CHAMPAGNE,
    CREAM,
    DOMINANT_WHITE,
    DUN,
    EDEN_WHITE,
    EXTENSION,
    FLAXEN,
    FRAME_OVERO,
    GRAY,
    LEOPARD_COMPLEX,
    LETHAL_WHITE_ALLELES,
    MINIMAL_WHITE_ALLELE,
    MUSHROOM,
    PANGARE,
    PATTERN_1,
    PEARL,
    RABICANO,
    ROAN,
    SABINO,
    SILVER,
    SOOTY,
    SPLASH_WHITE,
    TOBIANO,
    GenotypeView,
)
from .pearl import apply_pearl_dilution
from .profile import profile_section
from .selection import select_weighted

logger = logging.getLogger(__name__)

CHESTNUT = "Chestnut"
BAY = "Bay"
BLACK = "Black"


class CreamDose(Enum):
    NONE = 0
    SINGLE = 1
    DOUBLE = 2


# ─── Lookup Tables ────────────────────────────────────────────────────────────

CREAM_NAMES: Dict[Tuple[str, CreamDose], str] = {
    (CHESTNUT, CreamDose.SINGLE): "Palomino",
    (BAY, CreamDose.SINGLE): "Buckskin",
    (BLACK, CreamDose.SINGLE): "Smoky Black",
    (CHESTNUT, CreamDose.DOUBLE): "Cremello",
    (BAY, CreamDose.DOUBLE): "Perlino",
    (BLACK, CreamDose.DOUBLE): "Smoky Cream",
}

# (base color, cream dose, dun active) -> champagne name
CHAMPAGNE_NAMES: Dict[Tuple[str, CreamDose, bool], str] = {
    (CHESTNUT, CreamDose.NONE, False): "Gold Champagne",
    (BAY, CreamDose.NONE, False): "Amber Champagne",
    (BLACK, CreamDose.NONE, False): "Classic Champagne",
    (CHESTNUT, CreamDose.SINGLE, False): "Gold Cream Champagne",
    (BAY, CreamDose.SINGLE, False): "Amber Cream Champagne",
    (BLACK, CreamDose.SINGLE, False): "Classic Cream Champagne",
    (CHESTNUT, CreamDose.DOUBLE, False): "Ivory Champagne (Cremello)",
    (BAY, CreamDose.DOUBLE, False): "Ivory Champagne (Perlino)",
    (BLACK, CreamDose.DOUBLE, False): "Ivory Champagne (Smoky Cream)",
    (CHESTNUT, CreamDose.NONE, True): "Gold Dun Champagne",
    (BAY, CreamDose.NONE, True): "Amber Dun Champagne",
    (BLACK, CreamDose.NONE, True): "Classic Dun Champagne",
    (CHESTNUT, CreamDose.SINGLE, True): "Gold Cream Dun Champagne",
    (BAY, CreamDose.SINGLE, True): "Amber Cream Dun Champagne",
    (BLACK, CreamDose.SINGLE, True): "Classic Cream Dun Champagne",
    (CHESTNUT, CreamDose.DOUBLE, True): "Ivory Dun Champagne (Cremello)",
    (BAY, CreamDose.DOUBLE, True): "Ivory Dun Champagne (Perlino)",
    (BLACK, CreamDose.DOUBLE, True): "Ivory Dun Champagne (Smoky Cream)",
}

NON_DUN_1_DESCRIPTOR = " (Non-Dun 1 - Primitive Markings)"
NON_DUN_2_DESCRIPTOR = " (Non-Dun 2 - Faint Primitive Markings)"

# Silver only renames pigment words in the shade key
SILVER_KEY_RENAMES = (("Classic", "Black"), ("Amber", "Bay"), ("Gold", "Chestnut"), ("Sable", "Black"))

RED_ROAN_TERMS = ("chestnut", "palomino", "cremello", "gold", "apricot", "mushroom", "ivory")
BAY_ROAN_TERMS = ("bay", "buckskin", "perlino", "amber")
ROAN_DESCRIPTOR_TERMS = ("dun", "champagne", "pearl")

UNPREFIXED_SHADES = ("standard", "medium")
DEFAULT_SHADE = "standard"

# Parts that never serve as the main color term when reordering
DESCRIPTOR_ONLY_PARTS = ("pangare", "flaxen", "rabicano")
PATTERN_TERMS = ("dun (", "white", "overo", "tobiano", "sabino", "appaloosa")

LEOPARD_AGE_BANDS = ((4, "Light"), (8, "Moderate"))
GRAY_AGE_BANDS = ((3, "Gray"), (6, "Dark Dapple Gray"), (9, "Light Dapple Gray"))
BASE_SNOWFLAKE_FROST_WEIGHT = 0.5
BASE_BLOODY_SHOULDER_CHANCE = 0.001


# ─── Pipeline State ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PipelineContext:
    """Read-only inputs shared by every stage."""

    genotype: Mapping[str, Any]
    profile: Mapping[str, Any]
    age_in_years: float
    rng: Any

    @property
    def genes(self) -> GenotypeView:
        return GenotypeView(self.genotype)


@dataclass(frozen=True)
class ColorState:
    """
    Immutable accumulator threaded through the coat color stages.

    Flags record which dilutions and patterns have been applied. `display` and
    `shade_key` hold the color text until the sooty stage, after which `parts`
    holds the display color followed by descriptors in encounter order.
    """

    base_color: str = ""
    display: str = ""
    shade_key: str = ""
    cream: CreamDose = CreamDose.NONE
    mushroom: bool = False
    mushroom_pearl: bool = False
    dun_active: bool = False
    dun_descriptor: str = ""
    champagne: bool = False
    silver: bool = False
    shade: Optional[str] = None
    parts: Tuple[str, ...] = field(default_factory=tuple)
    all_white: bool = False
    gray: bool = False
    mottling: bool = False
    bloody_shoulder: bool = False

    @property
    def joined_parts(self) -> str:
        return " ".join(self.parts)

    def mentions(self, term: str) -> bool:
        """Case-insensitive check against the display parts joined together."""
        return contains_term(self.joined_parts, term)

    def shows_gray(self) -> bool:
        return self.gray or any(contains_term(part, "gray") for part in self.parts)

    def with_part(self, part: str) -> "ColorState":
        return replace(self, parts=self.parts + (part,))


Stage = Callable[[ColorState, PipelineContext], ColorState]


def _multiplier(profile: Mapping[str, Any], name: str) -> float:
    value = profile_section(profile, "advanced_markings_bias").get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 1.0
    return value


# ─── Base Color & Dilutions ───────────────────────────────────────────────────


def determine_base_color(state: ColorState, context: PipelineContext) -> ColorState:
    """e/e is Chestnut whatever Agouti holds; otherwise Agouti decides Bay vs Black."""
    genes = context.genes
    if genes.is_homozygous(EXTENSION, "e"):
        base = CHESTNUT
    elif genes.carries(AGOUTI, "A"):
        base = BAY
    else:
        base = BLACK

    cream = CreamDose.NONE
    if genes.is_heterozygous(CREAM, "Cr", "n"):
        cream = CreamDose.SINGLE
    elif genes.is_homozygous(CREAM, "Cr"):
        cream = CreamDose.DOUBLE

    return replace(state, base_color=base, shade_key=base, cream=cream)


def apply_mushroom(state: ColorState, context: PipelineContext) -> ColorState:
    genes = context.genes
    if state.base_color != CHESTNUT or not genes.carries(MUSHROOM, "Mu"):
        return state

    state = replace(state, display="Mushroom Chestnut", shade_key="Mushroom", mushroom=True)
    if genes.is_homozygous(PEARL, "prl") and not genes.carries(CREAM, "Cr"):
        state = replace(
            state,
            display="Mushroom Pearl",
            shade_key="Mushroom Pearl",
            mushroom=False,
            mushroom_pearl=True,
        )
    return state


def apply_cream(state: ColorState, context: PipelineContext) -> ColorState:
    name = CREAM_NAMES.get((state.base_color, state.cream))
    if name is None:
        return state
    return replace(state, display=name, shade_key=name, mushroom=False)


def apply_dun(state: ColorState, context: PipelineContext) -> ColorState:
    """
    Dun recolors the current color and remembers that it did. Without dun, the
    non-dun alleles only leave a primitive-marking descriptor for later.
    """
    genes = context.genes
    if genes.carries(DUN, "D"):
        if state.base_color == BLACK:
            name = "Grulla"
        elif state.base_color == BAY:
            name = "Buckskin Dun" if state.cream == CreamDose.SINGLE else "Bay Dun"
        elif state.cream == CreamDose.SINGLE:
            name = "Palomino Dun"
        elif state.mushroom:
            name = "Mushroom Dun"
        else:
            name = "Red Dun"
        return replace(state, display=name, shade_key=name, dun_active=True, dun_descriptor="")

    if genes.is_homozygous(DUN, "nd1"):
        return replace(state, dun_descriptor=NON_DUN_1_DESCRIPTOR)
    if genes.is_heterozygous(DUN, "nd1", "nd2"):
        return replace(state, dun_descriptor=NON_DUN_2_DESCRIPTOR)
    return state


def apply_champagne(state: ColorState, context: PipelineContext) -> ColorState:
    if not context.genes.carries(CHAMPAGNE, "Ch"):
        return state

    name = CHAMPAGNE_NAMES.get((state.base_color, state.cream, state.dun_active))
    if name is None:
        logger.warning(
            "Unhandled champagne interaction (base %s, cream %s, dun %s); defaulting to base champagne.",
            state.base_color,
            context.genotype.get(CREAM),
            context.genotype.get(DUN),
        )
        name = CHAMPAGNE_NAMES.get((state.base_color, CreamDose.NONE, False))
        if name is None:
            return state
    return replace(state, display=name, shade_key=name, champagne=True)


def apply_silver(state: ColorState, context: PipelineContext) -> ColorState:
    """Silver only dilutes black pigment, so chestnut-based colors are left alone."""
    if not context.genes.carries(SILVER, "Z") or state.base_color == CHESTNUT:
        return state

    original = state.display or state.base_color
    display = state.display
    key = state.shade_key
    if not contains_term(original, "silver"):
        display = f"Silver {original}"
        for old, new in SILVER_KEY_RENAMES:
            key = replace_first_ci(key, old, new)
        key = f"Silver {key}"
    if key.lower().startswith("silver silver"):
        key = key[len("Silver "):]
    for old, new in SILVER_KEY_RENAMES:
        key = replace_first_ci(key, f"Silver {old}", f"Silver {new}")
    return replace(state, display=display, shade_key=key, silver=True)


def apply_pearl(state: ColorState, context: PipelineContext) -> ColorState:
    if state.mushroom_pearl:
        return state
    display, key = apply_pearl_dilution(
        state.display or state.base_color,
        state.shade_key or state.base_color,
        context.genotype,
        state.base_color,
    )
    return replace(state, display=display, shade_key=key)


# ─── Shade & Boolean Modifiers ────────────────────────────────────────────────


def _shade_table(shade_bias: Mapping[str, Any], key: str, base_color: str) -> Optional[Mapping[str, Any]]:
    """Most specific table first: full key, base color, first word of key, Default."""
    candidates = [key]
    if key != base_color:
        candidates.append(base_color)
    candidates.extend([key.split(" ")[0], "Default"])
    for candidate in candidates:
        table = shade_bias.get(candidate)
        if isinstance(table, Mapping):
            return table
    return None


def apply_shade(state: ColorState, context: PipelineContext) -> ColorState:
    shade = None
    table = _shade_table(profile_section(context.profile, "shade_bias"), state.shade_key, state.base_color)
    if table is not None:
        shade = select_weighted(table, context.rng)
    shade = shade or DEFAULT_SHADE

    display = state.display
    key = state.shade_key
    shade_lower = shade.lower()
    if (
        shade_lower not in UNPREFIXED_SHADES
        and not contains_term(display, shade_lower)
        and not contains_term(display, "gray")
    ):
        display = f"{capitalize_first(shade)} {display}"
        key = f"{capitalize_first(shade)} {key}"
    return replace(state, shade=shade, display=display, shade_key=key)


def apply_sooty(state: ColorState, context: PipelineContext) -> ColorState:
    """Applies the sooty prefix, then opens the parts list with the color so far."""
    display = state.display
    key = state.shade_key
    if context.genes.modifier(SOOTY) and not display.lower().startswith("sooty"):
        display = f"Sooty {display}"
        key = f"Sooty {key}"
    return replace(state, display=display, shade_key=key, parts=(display,))


def apply_flaxen_and_pangare(state: ColorState, context: PipelineContext) -> ColorState:
    genes = context.genes
    if (
        state.base_color == CHESTNUT
        and genes.modifier(FLAXEN)
        and not any(contains_term(state.display, term) for term in ("palomino", "cremello", "flaxen"))
        and not state.mentions("flaxen")
    ):
        state = state.with_part("Flaxen")
    if genes.modifier(PANGARE) and not state.mentions("pangare"):
        state = state.with_part("Pangare")
    return state


# ─── Roan & White Patterns ────────────────────────────────────────────────────


def _roan_name(state: ColorState) -> str:
    text = state.joined_parts.lower()
    if state.base_color == CHESTNUT or any(term in text for term in RED_ROAN_TERMS):
        return "Red Roan"
    if state.base_color == BAY or any(term in text for term in BAY_ROAN_TERMS):
        return "Bay Roan"
    return "Blue Roan"


def _roan_prefix(state: ColorState) -> str:
    """Sooty and/or shade words leading the current color carry over onto the roan name."""
    words = state.parts[0].split(" ")
    first = words[0].lower()
    shade = (state.shade or "").lower()
    if first != "sooty" and not (shade and first == shade):
        return ""
    if first == "sooty" and shade and len(words) > 1 and words[1].lower() == shade:
        return f"{words[0]} {words[1]} "
    return f"{words[0]} "


def apply_roan(state: ColorState, context: PipelineContext) -> ColorState:
    """
    Roan renames the color after its pigment family (Red, Bay or Blue Roan),
    keeping a leading sooty/shade prefix and any Dun, Champagne or Pearl words
    as trailing qualifiers.
    """
    if not context.genes.carries(ROAN, "Rn") or state.shows_gray():
        return state

    roan_name = _roan_name(state)
    prefix = _roan_prefix(state)
    descriptors: List[str] = []
    for word in state.joined_parts.split(" "):
        lower = word.lower()
        if (
            any(term in lower for term in ROAN_DESCRIPTOR_TERMS)
            and lower not in roan_name.lower()
            and lower not in prefix.lower()
            and "(" not in word
            and ")" not in word
            and lower not in [d.lower() for d in descriptors]
        ):
            descriptors.append(capitalize_first(lower))

    return replace(state, parts=(f"{prefix}{roan_name}",) + tuple(descriptors), shade_key=roan_name)


def _prefixed_alleles(genes: GenotypeView, locus: str, prefix: str, neutral: str) -> List[str]:
    if genes.pair(locus) in (None, neutral):
        return []
    return [allele for allele in genes.alleles(locus) if allele.startswith(prefix)]


def apply_white_patterns(state: ColorState, context: PipelineContext) -> ColorState:
    """
    A lethal dominant-white allele turns the whole horse White and short-circuits
    every later pattern, gray and roan effect. Otherwise each pattern present adds
    its descriptor once.
    """
    genes = context.genes
    white_alleles = [a for a in _prefixed_alleles(genes, DOMINANT_WHITE, "W", "w/w") if a != "w"]
    if white_alleles:
        if any(allele in LETHAL_WHITE_ALLELES for allele in white_alleles):
            return replace(state, parts=("White",), shade_key="Dominant White", all_white=True)
        if MINIMAL_WHITE_ALLELE in white_alleles:
            if not state.mentions("minimal white"):
                state = state.with_part(f"Minimal White ({MINIMAL_WHITE_ALLELE})")
        elif not state.mentions("white"):
            state = state.with_part("Dominant White")

    if genes.carries(FRAME_OVERO, "O") and not genes.is_homozygous(FRAME_OVERO, "O"):
        if not state.mentions("frame overo"):
            state = state.with_part("Frame Overo")
    if genes.carries(TOBIANO, "TO") and not state.mentions("tobiano"):
        state = state.with_part("Tobiano")
    if genes.carries(SABINO, "SB1") and not state.mentions("sabino"):
        state = state.with_part("Sabino")

    pattern_terms = [
        f"Splash White {allele.replace('SW', '', 1)}"
        for allele in _prefixed_alleles(genes, SPLASH_WHITE, "SW", "n/n")
    ] + [
        f"Eden White {allele.replace('EDXW', '', 1)}"
        for allele in _prefixed_alleles(genes, EDEN_WHITE, "EDXW", "n/n")
    ]
    for term in pattern_terms:
        if not state.mentions(term):
            state = state.with_part(term)
    return state


# ─── Leopard Complex & Gray ───────────────────────────────────────────────────


def _leopard_pattern_name(state: ColorState, context: PipelineContext) -> str:
    genes = context.genes
    has_pattern_1 = genes.carries(PATTERN_1, "PATN1") and not genes.is_homozygous(PATTERN_1, "patn1")

    if genes.is_homozygous(LEOPARD_COMPLEX, "LP"):
        return "Fewspot Leopard" if has_pattern_1 else "Snowcap"
    if not genes.is_heterozygous(LEOPARD_COMPLEX, "LP", "lp"):
        return ""
    if has_pattern_1:
        return "Leopard Appaloosa"

    age_prefix = "Heavy"
    for upper_age, label in LEOPARD_AGE_BANDS:
        if context.age_in_years <= upper_age:
            age_prefix = label
            break
    sub_modifier = select_weighted(
        {
            "Snowflake": _multiplier(context.profile, "snowflake_probability_multiplier") * BASE_SNOWFLAKE_FROST_WEIGHT,
            "Frost": _multiplier(context.profile, "frost_probability_multiplier") * BASE_SNOWFLAKE_FROST_WEIGHT,
        },
        context.rng,
    )
    underlying = "Blanket" if context.rng.random() < 0.5 else "Varnish Roan"
    return f"{age_prefix} {sub_modifier} {underlying}"


def apply_leopard_complex(state: ColorState, context: PipelineContext) -> ColorState:
    if not context.genes.carries(LEOPARD_COMPLEX, "LP") or state.all_white:
        return state

    state = replace(state, mottling=True)
    pattern_name = _leopard_pattern_name(state, context)
    if pattern_name and not state.mentions(pattern_name):
        state = state.with_part(pattern_name)
        if not state.shows_gray():
            state = replace(state, shade_key=pattern_name)
    return state


def gray_phenotype(base_color: str, age_in_years: float) -> str:
    """Gray lightens with age: dark gray foals, dapples, then white and fleabitten."""
    tone = "Steel" if base_color in (BLACK, BAY) else "Rose"
    for upper_age, label in GRAY_AGE_BANDS:
        if age_in_years <= upper_age:
            return f"{tone} {label}"
    return "White Gray" if age_in_years <= 12 else "Fleabitten Gray"


def apply_gray(state: ColorState, context: PipelineContext) -> ColorState:
    if not context.genes.carries(GRAY, "G") or state.all_white:
        return state

    name = gray_phenotype(state.base_color, context.age_in_years)
    chance = BASE_BLOODY_SHOULDER_CHANCE * _multiplier(context.profile, "bloody_shoulder_probability_multiplier")
    bloody_shoulder = state.bloody_shoulder or context.rng.random() < chance
    return replace(state, parts=(name,), shade_key=name, gray=True, bloody_shoulder=bloody_shoulder)


def apply_rabicano(state: ColorState, context: PipelineContext) -> ColorState:
    if (
        context.genes.modifier(RABICANO)
        and not state.all_white
        and not state.shows_gray()
        and not state.mentions("rabicano")
    ):
        state = state.with_part("Rabicano")
    return state


def apply_dun_primitive_markings(state: ColorState, context: PipelineContext) -> ColorState:
    """Non-dun primitive markings only show when no dun color, gray or white supersedes them."""
    descriptor = state.dun_descriptor
    if (
        not descriptor
        or any(contains_term(part, "dun") and "(" not in part for part in state.parts)
        or descriptor in state.joined_parts
        or state.all_white
        or state.shows_gray()
    ):
        return state
    return state.with_part(descriptor)


# ─── Final Assembly ───────────────────────────────────────────────────────────


def deduplicate_parts(state: ColorState, context: PipelineContext) -> ColorState:
    """
    Collapse parts that end in the same term, keeping the longer phrasing.

    "Bay Roan" followed by "Roan" keeps "Bay Roan"; "Roan" followed by
    "Bay Roan" upgrades the earlier entry in place.
    """
    unique: List[str] = []
    seen = set()
    for part in state.parts:
        if not part or not part.strip():
            continue
        primary = part.split(" ")[-1].lower()
        if primary not in seen:
            unique.append(part.strip())
            seen.add(primary)
            continue
        for index, existing in enumerate(unique):
            if existing.lower().endswith(primary):
                if len(part.split(" ")) > len(existing.split(" ")):
                    unique[index] = part.strip()
                break
    return replace(state, parts=tuple(unique))


def _can_be_main_color(part: str, shade: str) -> bool:
    lower = part.lower()
    if lower.startswith("sooty"):
        return False
    if shade and lower.startswith(shade.lower()) and part != shade:
        return False
    if lower in DESCRIPTOR_ONLY_PARTS:
        return False
    return not any(term in lower for term in PATTERN_TERMS)


def reorder_parts(state: ColorState, context: PipelineContext) -> ColorState:
    """Put the sooty prefix, then the main color term, then the remaining descriptors."""
    parts = list(state.parts)
    if len(parts) <= 1 or state.all_white or contains_term(parts[0], "gray"):
        return state

    shade = state.shade or ""
    main = next((p for p in parts if _can_be_main_color(p, shade)), parts[0])
    sooty = next((p for p in parts if p.lower() == "sooty"), None)

    shade_part = None
    if shade and shade.lower() not in UNPREFIXED_SHADES:
        main_term = main.split(" ")[-1].lower()
        shade_part = next(
            (p for p in parts if p.lower().startswith(shade.lower()) and main_term in p.lower()),
            None,
        )

    ordered = []
    if sooty and sooty != main and sooty != shade_part:
        ordered.append(sooty)
    ordered.append(main)
    ordered.extend(p for p in parts if p != main and p != sooty and p != shade_part)

    unique = []
    for part in ordered:
        if part and part not in unique:
            unique.append(part)
    return replace(state, parts=tuple(unique))


def assemble_display_color(state: ColorState) -> str:
    text = re.sub(r"  +", " ", " ".join(state.parts)).strip()
    return text or state.base_color or "Undefined Phenotype"


COLOR_STAGES: Tuple[Stage, ...] = (
    determine_base_color,
    apply_mushroom,
    apply_cream,
    apply_dun,
    apply_champagne,
    apply_silver,
    apply_pearl,
    apply_shade,
    apply_sooty,
    apply_flaxen_and_pangare,
    apply_roan,
    apply_white_patterns,
    apply_leopard_complex,
    apply_gray,
    apply_rabicano,
    apply_dun_primitive_markings,
    deduplicate_parts,
    reorder_parts,
)


def run_color_pipeline(context: PipelineContext) -> ColorState:
    """
    Fold the genotype through every coat color stage in order.

    Args:
        context: Genotype, profile, age and random source

    Returns:
        Final ColorState; pass it to assemble_display_color for the display text
    """

    def run_stage(state: ColorState, stage: Stage) -> ColorState:
        state = stage(state, context)
        logger.debug(
            "After %s: display=%r shade_key=%r parts=%r",
            stage.__name__,
            state.display,
            state.shade_key,
            state.parts,
        )
        return state

    return reduce(run_stage, COLOR_STAGES, ColorState())

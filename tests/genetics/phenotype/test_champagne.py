"""
Tests for the champagne stage: base color x cream dose x dun.
"""

import pytest

from equine_genetics.genetics import coat_color
from equine_genetics.genetics.coat_color import BAY, CreamDose
from equine_genetics.genetics.phenotype import resolve_phenotype


class _FixedRng:
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


BASES = {
    "Chestnut": {"E_Extension": "e/e", "A_Agouti": "a/a"},
    "Bay": {"E_Extension": "E/e", "A_Agouti": "A/A"},
    "Black": {"E_Extension": "E/E", "A_Agouti": "a/a"},
}

STANDARD_SHADE_PROFILE = {"shade_bias": {"Default": {"standard": 1.0}}}


def _champagne_genotype(base: str, cream: str, dun: str) -> dict:
    genotype = dict(BASES[base])
    genotype.update({"Cr_Cream": cream, "D_Dun": dun, "CH_Champagne": "Ch/n"})
    return genotype


class TestChampagneTable:
    """Every combination of base color, cream dose and dun."""

    @pytest.mark.parametrize(
        "base, cream, dun, expected",
        [
            ("Chestnut", "n/n", "n/n", "Gold Champagne"),
            ("Bay", "n/n", "n/n", "Amber Champagne"),
            ("Black", "n/n", "n/n", "Classic Champagne"),
            ("Chestnut", "Cr/n", "n/n", "Gold Cream Champagne"),
            ("Bay", "Cr/n", "n/n", "Amber Cream Champagne"),
            ("Black", "Cr/n", "n/n", "Classic Cream Champagne"),
            ("Chestnut", "Cr/Cr", "n/n", "Ivory Champagne (Cremello)"),
            ("Bay", "Cr/Cr", "n/n", "Ivory Champagne (Perlino)"),
            ("Black", "Cr/Cr", "n/n", "Ivory Champagne (Smoky Cream)"),
            ("Chestnut", "n/n", "D/n", "Gold Dun Champagne"),
            ("Bay", "n/n", "D/n", "Amber Dun Champagne"),
            ("Black", "n/n", "D/n", "Classic Dun Champagne"),
            ("Chestnut", "Cr/n", "D/n", "Gold Cream Dun Champagne"),
            ("Bay", "Cr/n", "D/n", "Amber Cream Dun Champagne"),
            ("Black", "Cr/n", "D/n", "Classic Cream Dun Champagne"),
            ("Chestnut", "Cr/Cr", "D/n", "Ivory Dun Champagne (Cremello)"),
            ("Bay", "Cr/Cr", "D/n", "Ivory Dun Champagne (Perlino)"),
            ("Black", "Cr/Cr", "D/n", "Ivory Dun Champagne (Smoky Cream)"),
        ],
    )
    def test_champagne_name(self, base, cream, dun, expected):
        result = resolve_phenotype(
            _champagne_genotype(base, cream, dun),
            STANDARD_SHADE_PROFILE,
            5,
            _FixedRng(0.5),
        )

        assert result.final_display_color == expected
        assert result.determined_shade == "standard"

    def test_gold_champagne_shade_table(self):
        """The champagne name is the shade lookup key."""
        genotype = {
            "E_Extension": "e/e",
            "A_Agouti": "a/a",
            "Cr_Cream": "n/n",
            "D_Dun": "n/n",
            "CH_Champagne": "Ch/n",
        }
        profile = {"shade_bias": {"Gold Champagne": {"standard": 1}}}

        result = resolve_phenotype(genotype, profile, 5, _FixedRng(0.5))

        assert result.final_display_color == "Gold Champagne"

    def test_recessive_champagne_has_no_effect(self):
        genotype = dict(BASES["Bay"], CH_Champagne="n/n")

        result = resolve_phenotype(genotype, STANDARD_SHADE_PROFILE, 5, _FixedRng(0.5))

        assert result.final_display_color == "Bay"

    def test_missing_combination_falls_back_to_base_champagne(self, monkeypatch, caplog):
        """An unhandled interaction warns and uses the base champagne name."""
        monkeypatch.delitem(coat_color.CHAMPAGNE_NAMES, (BAY, CreamDose.SINGLE, True))

        with caplog.at_level("WARNING"):
            result = resolve_phenotype(
                _champagne_genotype("Bay", "Cr/n", "D/n"),
                STANDARD_SHADE_PROFILE,
                5,
                _FixedRng(0.5),
            )

        assert result.final_display_color == "Amber Champagne"
        assert "Unhandled champagne interaction" in caplog.text

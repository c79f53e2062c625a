"""
Tests for breed profile validation and catalog loading.
"""

import json

import pydantic
import pytest

from equine_genetics.genetics.profile import (
    BreedGeneticProfile,
    coerce_profile,
    load_breed_catalog,
    load_default_catalog,
    profile_section,
)


def _write_catalog(tmp_path, data) -> str:
    path = tmp_path / "breeds.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestBreedGeneticProfileValidation:
    """Validation rules of the profile model."""

    def test_minimal_profile_is_valid(self):
        profile = BreedGeneticProfile()

        assert profile.allele_weights == {}
        assert profile.allowed_alleles is None

    def test_rejects_negative_weight(self):
        with pytest.raises(pydantic.ValidationError):
            BreedGeneticProfile(allele_weights={"E_Extension": {"E/E": -1.0}})

    def test_rejects_malformed_pair(self):
        """Allele pairs must be written 'X/Y'."""
        with pytest.raises(pydantic.ValidationError):
            BreedGeneticProfile(allele_weights={"E_Extension": {"EE": 1.0}})

        with pytest.raises(pydantic.ValidationError):
            BreedGeneticProfile(disallowed_combinations={"W_DominantWhite": ["W2/"]})

    def test_rejects_prevalence_above_one(self):
        with pytest.raises(pydantic.ValidationError):
            BreedGeneticProfile(boolean_modifiers_prevalence={"sooty": 1.5})

    def test_rejects_unknown_section(self):
        with pytest.raises(pydantic.ValidationError):
            BreedGeneticProfile(colour_weights={})

    def test_rejects_too_many_marked_legs(self):
        with pytest.raises(pydantic.ValidationError):
            BreedGeneticProfile(marking_bias={"max_legs_marked": 5})

    def test_as_mapping_omits_unset_optional_sections(self):
        """Undeclared allowed_alleles stays absent so inheritance uses parental loci."""
        mapping = BreedGeneticProfile(allele_weights={"E_Extension": {"E/e": 1.0}}).as_mapping()

        assert "allowed_alleles" not in mapping
        assert "marking_bias" not in mapping
        assert mapping["allele_weights"] == {"E_Extension": {"E/e": 1.0}}

    def test_as_mapping_keeps_declared_empty_allowed_table(self):
        mapping = BreedGeneticProfile(allowed_alleles={}).as_mapping()

        assert mapping["allowed_alleles"] == {}


class TestCoerceProfile:
    def test_accepts_mapping_and_model(self):
        raw = {"allele_weights": {}}

        assert coerce_profile(raw) is raw
        assert coerce_profile(None) is None
        assert coerce_profile(BreedGeneticProfile()) == BreedGeneticProfile().as_mapping()

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            coerce_profile("Thoroughbred")

    def test_profile_section_ignores_malformed_sections(self):
        profile = {"shade_bias": ["light"], "marking_bias": {"face": {}}}

        assert profile_section(profile, "shade_bias") == {}
        assert profile_section(profile, "missing") == {}
        assert profile_section(profile, "marking_bias") == {"face": {}}


class TestBreedCatalog:
    """Loading breed catalogs from JSON."""

    def test_default_catalog_loads(self):
        """The bundled catalog validates and contains sample breeds."""
        catalog = load_default_catalog()

        assert {"Thoroughbred", "Appaloosa", "Arabian"} <= set(catalog)
        assert all(isinstance(profile, BreedGeneticProfile) for profile in catalog.values())
        assert catalog["Appaloosa"].allowed_alleles is not None

    def test_loads_custom_catalog(self, tmp_path, caplog):
        path = _write_catalog(
            tmp_path,
            {"Pony": {"allele_weights": {"E_Extension": {"e/e": 1.0}}}},
        )

        with caplog.at_level("INFO"):
            catalog = load_breed_catalog(path)

        assert catalog["Pony"].allele_weights == {"E_Extension": {"e/e": 1.0}}
        assert "Loaded 1 breed profiles" in caplog.text

    def test_rejects_non_object_catalog(self, tmp_path):
        path = _write_catalog(tmp_path, [{"allele_weights": {}}])

        with pytest.raises(ValueError):
            load_breed_catalog(path)

    def test_invalid_profile_raises_validation_error(self, tmp_path):
        path = _write_catalog(
            tmp_path,
            {"Broken": {"boolean_modifiers_prevalence": {"sooty": -0.1}}},
        )

        with pytest.raises(pydantic.ValidationError):
            load_breed_catalog(path)

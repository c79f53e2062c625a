"""
Tests for the per-locus inheritance tiers and their shared contract.
"""

import pytest

from equine_genetics.genetics.abstract_strategies import AbstractLocusStrategy, LocusConstraints
from equine_genetics.genetics.inheritance_strategies import (
    DEFAULT_LOCUS_STRATEGIES,
    DirectGameteSampling,
    LastResortFallback,
    WeightedTableFallback,
)


class _FixedRng:
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


class _SequenceRng:
    def __init__(self, values):
        self._it = iter(values)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return next(self._it)


def _constraints(allowed=None, disallowed=(), weights=None, locus="E_Extension"):
    return LocusConstraints(
        locus=locus,
        allowed=tuple(allowed) if allowed is not None else None,
        disallowed=tuple(disallowed),
        weights=weights,
    )


class TestLocusConstraints:
    """Building constraints from a profile."""

    def test_from_profile_reads_all_sections(self):
        profile = {
            "allowed_alleles": {"E_Extension": ["E/e", "e/e"]},
            "disallowed_combinations": {"E_Extension": ["E/E"]},
            "allele_weights": {"E_Extension": {"E/e": 1.0}},
        }

        constraints = LocusConstraints.from_profile("E_Extension", profile)

        assert constraints.allowed == ("E/e", "e/e")
        assert constraints.disallowed == ("E/E",)
        assert constraints.weights == {"E/e": 1.0}

    def test_absent_allowed_table_permits_everything(self):
        constraints = LocusConstraints.from_profile("E_Extension", {})

        assert constraints.allowed is None
        assert constraints.permits("E/E")

    def test_declared_table_without_locus_permits_nothing(self):
        constraints = LocusConstraints.from_profile("E_Extension", {"allowed_alleles": {"A_Agouti": ["A/a"]}})

        assert constraints.allowed == ()
        assert not constraints.permits("E/e")

    def test_disallowed_overrides_allowed(self):
        constraints = _constraints(allowed=["E/E"], disallowed=["E/E"])

        assert not constraints.permits("E/E")


class TestAbstractLocusStrategy:
    """The shared apply_strategy guarantee."""

    def test_disallowed_output_raises(self):
        class _Broken(AbstractLocusStrategy):
            def handle_locus(self, sire_pair, dam_pair, constraints, rng):
                return "E/E"

        with pytest.raises(ValueError):
            _Broken().apply_strategy("E/E", "E/E", _constraints(disallowed=["E/E"]), _FixedRng(0.5))

    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            AbstractLocusStrategy()


class TestDirectGameteSampling:
    """Mendelian sampling with bounded retries."""

    def test_combines_one_gamete_from_each_parent(self):
        rng = _SequenceRng([0.2, 0.8])

        pair = DirectGameteSampling().apply_strategy("E/e", "E/e", _constraints(), rng)

        assert pair == "E/e"

    def test_declines_when_a_parent_lacks_locus(self):
        strategy = DirectGameteSampling()

        assert strategy.apply_strategy("E/e", None, _constraints(), _FixedRng(0.5)) is None
        assert strategy.apply_strategy("", "E/e", _constraints(), _FixedRng(0.5)) is None

    def test_declines_on_malformed_pair(self):
        assert DirectGameteSampling().apply_strategy("Ee", "E/e", _constraints(), _FixedRng(0.5)) is None

    def test_retries_rejected_combinations(self):
        """A disallowed draw is retried until a permitted pair comes up."""
        rng = _SequenceRng([0.1, 0.1, 0.9, 0.9])

        pair = DirectGameteSampling().apply_strategy("E/e", "E/e", _constraints(disallowed=["E/E"]), rng)

        assert pair == "e/e"

    def test_gives_up_after_max_attempts(self):
        rng = _FixedRng(0.1)
        strategy = DirectGameteSampling(max_attempts=3)

        assert strategy.apply_strategy("E/e", "E/e", _constraints(allowed=["e/e"]), rng) is None

    def test_attempt_cap_is_respected(self):
        rng = _SequenceRng([0.1] * 6)

        DirectGameteSampling(max_attempts=3).apply_strategy("E/E", "E/E", _constraints(allowed=["e/e"]), rng)

        assert rng.calls == 6

    def test_rejects_invalid_attempt_count(self):
        with pytest.raises(ValueError):
            DirectGameteSampling(max_attempts=0)


class TestFallbackTiers:
    """Weighted table and last-resort fallbacks."""

    def test_weighted_table(self):
        constraints = _constraints(weights={"E/e": 1.0})

        assert WeightedTableFallback().apply_strategy(None, None, constraints, _FixedRng(0.5)) == "E/e"

    def test_weighted_table_ignores_allowed_list(self):
        constraints = _constraints(allowed=["e/e"], weights={"E/e": 1.0})

        assert WeightedTableFallback().apply_strategy(None, None, constraints, _FixedRng(0.5)) == "E/e"

    def test_weighted_table_declines_disallowed_draw(self):
        constraints = _constraints(disallowed=["E/E"], weights={"E/E": 1.0})

        assert WeightedTableFallback().apply_strategy(None, None, constraints, _FixedRng(0.5)) is None

    def test_weighted_table_declines_without_table(self):
        assert WeightedTableFallback().apply_strategy(None, None, _constraints(), _FixedRng(0.5)) is None

    def test_last_resort_prefers_canonical_recessive(self):
        constraints = _constraints(allowed=["E/e", "e/e", "n/n"])

        assert LastResortFallback().apply_strategy(None, None, constraints, _FixedRng(0.5)) == "n/n"

    def test_last_resort_uses_first_allowed_without_canonical_pair(self):
        constraints = _constraints(allowed=["E/e", "E/E"])

        assert LastResortFallback().apply_strategy(None, None, constraints, _FixedRng(0.5)) == "E/e"

    def test_last_resort_declines_disallowed_canonical_pair(self):
        """A disallowed canonical candidate is not replaced by another allowed pair."""
        constraints = _constraints(allowed=["W20/w", "w/w"], disallowed=["w/w"], locus="W_DominantWhite")

        assert LastResortFallback().apply_strategy(None, None, constraints, _FixedRng(0.5)) is None

    def test_last_resort_declines_disallowed_first_allowed(self):
        constraints = _constraints(allowed=["E/e"], disallowed=["E/e"])

        assert LastResortFallback().apply_strategy(None, None, constraints, _FixedRng(0.5)) is None

    def test_last_resort_declines_without_allowed_list(self):
        assert LastResortFallback().apply_strategy(None, None, _constraints(), _FixedRng(0.5)) is None
        assert LastResortFallback().apply_strategy(None, None, _constraints(allowed=[]), _FixedRng(0.5)) is None

    def test_default_order(self):
        assert [type(s) for s in DEFAULT_LOCUS_STRATEGIES] == [
            DirectGameteSampling,
            WeightedTableFallback,
            LastResortFallback,
        ]
        assert DEFAULT_LOCUS_STRATEGIES[0].max_attempts == 10

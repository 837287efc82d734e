"""Unit tests for bracket stat calculation."""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from ranking_factories import make_species

from pvpranker.ranker.stats import (
    MAX_IVS,
    combat_power,
    compute_stats,
    cpm_for_level,
)

# Mark all tests in this module as unit tests
pytestmark = pytest.mark.unit

# One entry per half level from 1 to 50
CPMS = [0.1 + 0.01 * i for i in range(99)]


class TestCpmForLevel:
    """Tests for cpm_for_level function."""

    def test_half_level_indexing(self):
        assert cpm_for_level(CPMS, 1) == CPMS[0]
        assert cpm_for_level(CPMS, 1.5) == CPMS[1]
        assert cpm_for_level(CPMS, 20) == CPMS[38]

    def test_out_of_range_clamps(self):
        assert cpm_for_level(CPMS, 60) == CPMS[-1]

    def test_empty_table(self):
        with pytest.raises(ValueError):
            cpm_for_level([], 20)


class TestComputeStats:
    """Tests for compute_stats function."""

    def test_default_ivs_for_bracket(self):
        species = make_species("a", base=(200, 150, 180))
        species.default_ivs = {"cp1500": [20, 0, 15, 15]}

        stats, level = compute_stats(species, 1500, CPMS)

        cpm = CPMS[38]
        assert level == 20.0
        assert stats.atk == pytest.approx(cpm * 200)
        assert stats.def_ == pytest.approx(cpm * 165)
        assert stats.hp == int(cpm * 195)

    def test_other_bracket_ignores_default_ivs(self):
        species = make_species("a", base=(200, 150, 180))
        species.default_ivs = {"cp1500": [20, 0, 15, 15]}

        _, level = compute_stats(species, 10000, CPMS)

        assert level == 50.0

    def test_uncapped_respects_level_cap(self):
        species = make_species("a")
        _, level = compute_stats(species, 10000, CPMS, level_cap=40)
        assert level == 40.0

    def test_perfect_ivs_at_max_level(self):
        species = make_species("a", base=(100, 100, 100))

        stats, level = compute_stats(species, 10000, CPMS)

        assert stats.atk == pytest.approx(CPMS[-1] * 115)
        assert stats.hp == int(CPMS[-1] * 115)

    def test_minimum_hp(self):
        species = make_species("a", base=(10, 10, 1))
        stats, _ = compute_stats(species, 500, CPMS)
        assert stats.hp == 10

    def test_empty_cpm_table(self):
        with pytest.raises(ValueError):
            compute_stats(make_species("a"), 1500, [])

    @given(cp=st.integers(min_value=10, max_value=5000))
    def test_highest_level_under_cap(self, cp):
        """Property test: the chosen level fits and the next one would not."""
        species = make_species("a", base=(200, 200, 200))

        _, level = compute_stats(species, cp, CPMS)

        if level > 1:
            assert combat_power(species, MAX_IVS, cpm_for_level(CPMS, level)) <= cp
        if level < 50:
            assert combat_power(species, MAX_IVS, cpm_for_level(CPMS, level + 0.5)) > cp

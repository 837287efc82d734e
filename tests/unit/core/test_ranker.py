"""End-to-end tests for ScenarioRanker."""

import math

import pytest
from ranking_factories import SYMMETRIC, ScriptedSimulator, make_contestant, make_roster

from pvpranker.models import Scenario
from pvpranker.ranker.models import RankerConfig
from pvpranker.ranker.ranker import ScenarioRanker

# Mark all tests in this module as unit tests
pytestmark = pytest.mark.unit

THREE_WAY = {
    ("a", "b"): (100, 20),
    ("b", "c"): (100, 30),
    ("a", "c"): (100, 10),
}


def three_way_roster():
    return make_roster(make_contestant("a"), make_contestant("b"), make_contestant("c"))


def expected_first_pass():
    """Single solver pass over the three-way roster, worked by hand."""
    w_a = (925 / 925 - 0.1) ** 1.65
    w_b = (475 / 925 - 0.1) ** 1.65
    w_c = (100 / 925 - 0.1) ** 1.65
    a = math.floor(((700 + math.sqrt(200)) * w_b + (700 + math.sqrt(250)) * w_c) / (w_b + w_c))
    b = math.floor((300 ** (400 / 600) * w_a + (700 + math.sqrt(150)) * w_c) / (w_a + w_c))
    c = math.floor((300 ** (350 / 600) * w_a + 300 ** (450 / 600) * w_b) / (w_a + w_b))
    return a, b, c


class TestScenarioRanker:
    """Tests for the full orchestrate, weight and finalize pipeline."""

    def test_three_way_scores(self):
        ranker = ScenarioRanker(three_way_roster(), SYMMETRIC, ScriptedSimulator(THREE_WAY))

        rankings = ranker.rank()

        a, b, c = expected_first_pass()
        assert [r.species_id for r in rankings] == ["a", "b", "c"]
        assert [r.score for r in rankings] == [
            100.0,
            math.floor(b / a * 1000) / 10,
            math.floor(c / a * 1000) / 10,
        ]
        assert [r.rating for r in rankings] == [925, 475, 100]

    def test_three_way_matchups(self):
        rankings = ScenarioRanker(three_way_roster(), SYMMETRIC, ScriptedSimulator(THREE_WAY)).rank()
        by_id = {r.species_id: r for r in rankings}

        assert [(m.opponent, m.rating) for m in by_id["a"].matchups] == [("c", 950), ("b", 900)]
        assert by_id["a"].counters == []
        assert [(m.opponent, m.rating) for m in by_id["b"].matchups] == [("c", 850)]
        assert [(m.opponent, m.rating) for m in by_id["b"].counters] == [("a", 100)]
        assert [(m.opponent, m.rating) for m in by_id["c"].counters] == [("a", 50), ("b", 150)]

    def test_move_usage_and_moveset(self):
        rankings = ScenarioRanker(three_way_roster(), SYMMETRIC, ScriptedSimulator(THREE_WAY)).rank()

        top = rankings[0]
        assert top.moveset == ["TACKLE", "BODY_SLAM"]
        assert [(u.move_id, u.uses) for u in top.moves.fast_moves] == [("TACKLE", 30)]
        assert [(u.move_id, u.uses) for u in top.moves.charged_moves] == [("BODY_SLAM", 0)]

    def test_battles_simulated(self):
        ranker = ScenarioRanker(three_way_roster(), SYMMETRIC, ScriptedSimulator(THREE_WAY))
        ranker.rank()
        assert ranker.battles_simulated == 6

    def test_custom_runs_seven_passes(self):
        roster = make_roster(*(make_contestant(f"c{i}") for i in range(4)))
        simulator = ScriptedSimulator()
        ranker = ScenarioRanker(roster, SYMMETRIC, simulator, custom=True)

        rankings = ranker.rank()

        # Every pairing is an even trade, so everyone ties at the top
        assert [r.score for r in rankings] == [100.0] * 4
        assert simulator.calls == 10

    def test_asymmetric_scenario(self):
        scenario = Scenario(slug="attackers", shields=(0, 1), energy=(0, 0))
        simulator = ScriptedSimulator(THREE_WAY)

        rankings = ScenarioRanker(three_way_roster(), scenario, simulator).rank()

        assert simulator.calls == 9
        assert rankings[0].species_id == "a"

    def test_empty_roster(self):
        simulator = ScriptedSimulator()
        assert ScenarioRanker(make_roster(), SYMMETRIC, simulator).rank() == []
        assert simulator.calls == 0

    def test_key_matchup_count_from_config(self):
        config = RankerConfig(key_matchup_count=1)
        ranker = ScenarioRanker(
            three_way_roster(), SYMMETRIC, ScriptedSimulator(THREE_WAY), config=config
        )

        top = ranker.rank()[0]

        # b carries far more weight than c, so the a-b win is the key matchup
        assert [(m.opponent, m.rating) for m in top.matchups] == [("b", 900)]

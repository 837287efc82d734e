"""Unit tests for ranking service workflow behavior."""

import json

import pytest
from ranking_factories import ScriptedSimulator, make_gamemaster, make_species

import pvpranker.ranker.ranker as ranker_module
from pvpranker.models import SCENARIO_ORDER, Cup
from pvpranker.ranker.models import RankerConfig
from pvpranker.results import RankingStore
from pvpranker.service import RankingService

pytestmark = pytest.mark.unit

THREE_WAY = {
    ("a", "b"): (100, 20),
    ("b", "c"): (100, 30),
    ("a", "c"): (100, 10),
}


class _Recorder:
    def __init__(self):
        self.events = []

    def on_progress(self, current, total, message, **kwargs):
        self.events.append(("progress", kwargs.get("scenario")))

    def on_roster_ready(self, candidates, targets, **kwargs):
        self.events.append(("roster", len(candidates)))

    def on_scenario_start(self, scenario, index, total, **kwargs):
        self.events.append(("start", scenario.slug))

    def on_scenario_complete(self, scenario, rankings, **kwargs):
        self.events.append(("complete", scenario.slug))

    def on_overall_complete(self, overall, consistency, **kwargs):
        self.events.append(("overall", len(overall)))


def _gamemaster():
    return make_gamemaster(
        make_species("a"),
        make_species("b"),
        make_species("c"),
        cups=[Cup(name="gl"), Cup(name="custom")],
    )


def _service(tmp_path, config=None, event_handler=None, simulator_factory=None):
    store = RankingStore(tmp_path / "data", tmp_path / "out")
    return RankingService(
        _gamemaster(),
        store,
        simulator_factory or (lambda: ScriptedSimulator(THREE_WAY)),
        config=config,
        event_handler=event_handler,
    )


def _write_official(tmp_path, cup, category, league, data):
    path = tmp_path / "data" / "rankings" / cup / category / f"rankings-{league}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def _no_simulator():
    raise AssertionError("official rankings should not be simulated")


async def test_rank_all_ranks_every_scenario(tmp_path):
    service = _service(tmp_path)

    results = await service.rank_all("gl", 1500)

    assert list(results) == list(SCENARIO_ORDER)
    for slug, rankings in results.items():
        assert [r.species_id for r in rankings][0] == "a"
        assert rankings[0].score == 100.0
        path = tmp_path / "out" / "gl" / slug / "rankings-1500.json"
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert [e["speciesId"] for e in saved] == [r.species_id for r in rankings]


async def test_custom_cup_runs_more_solver_passes(tmp_path, monkeypatch):
    passes = []
    real_weight_matchups = ranker_module.weight_matchups

    def spy(results, roster, scenario, iterations, config=None):
        passes.append(iterations)
        return real_weight_matchups(results, roster, scenario, iterations, config)

    monkeypatch.setattr(ranker_module, "weight_matchups", spy)
    service = _service(tmp_path)

    await service.rank_all("custom", 1500)
    assert passes == [7] * 5

    passes.clear()
    await service.rank_all("gl", 1500)
    assert passes == [1] * 5


async def test_official_rankings_copied_verbatim(tmp_path):
    official = [{"speciesId": "b", "speciesName": "B", "rating": 600, "score": 100.0}]
    _write_official(tmp_path, "gl", "overall", 1500, official)
    _write_official(tmp_path, "gl", "leads", 1500, official)
    service = _service(tmp_path, simulator_factory=_no_simulator)

    results = await service.rank_all("gl", 1500)

    assert list(results) == ["leads"]
    assert results["leads"][0].species_id == "b"
    copied = tmp_path / "out" / "gl" / "leads" / "rankings-1500.json"
    assert json.loads(copied.read_text(encoding="utf-8")) == official


async def test_official_overall_copied_verbatim(tmp_path):
    official = [{"speciesId": "b", "score": 100.0}]
    _write_official(tmp_path, "gl", "overall", 1500, official)
    service = _service(tmp_path, simulator_factory=_no_simulator)

    overall = await service.run("gl", 1500)

    assert [e.species_id for e in overall] == ["b"]
    assert (tmp_path / "out" / "gl" / "overall" / "rankings-1500.json").exists()
    assert not (tmp_path / "out" / "gl" / "consistency" / "rankings-1500.json").exists()


async def test_custom_cup_ignores_official_rankings(tmp_path):
    _write_official(tmp_path, "custom", "overall", 1500, [{"speciesId": "b", "score": 100.0}])
    service = _service(tmp_path)

    results = await service.rank_all("custom", 1500)

    assert len(results) == 5


async def test_run_writes_overall_and_consistency(tmp_path):
    recorder = _Recorder()
    service = _service(tmp_path, event_handler=recorder)

    overall = await service.run("gl", 1500)

    assert overall[0].species_id == "a"
    assert overall[0].score == 100.0
    assert len(overall[0].scores) == 5
    for category in ("overall", "consistency"):
        assert (tmp_path / "out" / "gl" / category / "rankings-1500.json").exists()

    kinds = [kind for kind, _ in recorder.events]
    assert kinds.count("roster") == 1
    assert kinds.count("start") == 5
    assert kinds.count("complete") == 5
    assert kinds[-1] == "overall"


async def test_concurrent_scenarios_match_sequential(tmp_path):
    sequential = await _service(tmp_path / "seq").rank_all("custom", 1500)
    concurrent = await _service(
        tmp_path / "par", config=RankerConfig(concurrency=3)
    ).rank_all("custom", 1500)

    assert list(concurrent) == list(sequential)
    for slug in sequential:
        assert [r.model_dump() for r in concurrent[slug]] == [
            r.model_dump() for r in sequential[slug]
        ]


async def test_unknown_cup(tmp_path):
    service = _service(tmp_path)

    assert await service.rank_all("nope", 1500) is None
    assert await service.run("nope", 1500) is None


async def test_rank_overall_without_scenarios(tmp_path):
    service = _service(tmp_path)
    assert await service.rank_overall("custom", 1500) is None


async def test_accepts_cup_model(tmp_path):
    service = _service(tmp_path)

    results = await service.rank_all(Cup(name="mine", custom=True), 1500)

    assert len(results) == 5
    assert (tmp_path / "out" / "mine" / "leads" / "rankings-1500.json").exists()

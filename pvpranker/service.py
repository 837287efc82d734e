"""Service layer running full ranking jobs for a cup and bracket.

No presentation dependencies: progress goes through an ``EventHandler`` and
results are returned as models and written through a ``RankingStore``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from pydantic import TypeAdapter

from pvpranker.events import EventHandler, NullEventHandler
from pvpranker.gamemaster import GameMaster
from pvpranker.logging import get_logger, log_context
from pvpranker.models import Cup, OverallEntry, RankingEntry, Scenario
from pvpranker.ranker.battle import Simulator
from pvpranker.ranker.models import RankerConfig, Roster
from pvpranker.ranker.overall import rank_consistency, rank_overall
from pvpranker.ranker.ranker import ScenarioRanker
from pvpranker.ranker.roster import build_roster
from pvpranker.results import RankingStore

log = get_logger(__name__)

SimulatorFactory = Callable[[], Simulator]

_entries = TypeAdapter(list[RankingEntry])
_overall_entries = TypeAdapter(list[OverallEntry])


class RankingService:
    """Generates scenario, overall and consistency rankings.

    Official (non-custom) cups with published rankings are copied verbatim;
    everything else is simulated.
    """

    def __init__(
        self,
        gamemaster: GameMaster,
        store: RankingStore,
        simulator_factory: SimulatorFactory,
        config: RankerConfig | None = None,
        event_handler: EventHandler | None = None,
    ):
        """Initialize the service.

        Args:
            gamemaster: Master data
            store: Ranking file storage
            simulator_factory: Builds one combat resolver per scenario run
            config: Scoring policy (uses defaults if None)
            event_handler: Optional progress receiver (uses NullHandler if None)
        """
        self.gm = gamemaster
        self.store = store
        self.simulator_factory = simulator_factory
        self.config = config or RankerConfig()
        self.event_handler = event_handler or NullEventHandler()

    def _resolve_cup(self, cup: Cup | str) -> Cup | None:
        if isinstance(cup, Cup):
            return cup
        cup_data = self.gm.get_cup(cup)
        if cup_data is None:
            log.error("cup_not_found", cup=cup)
        return cup_data

    def _copy_official(self, cup: Cup, league: int, categories: list[str]) -> dict[str, list[RankingEntry]]:
        copied = {}
        for category in categories:
            data = self.store.load_official(cup.name, category, league)
            if data is not None:
                self.store.save(cup.name, category, league, data)
                copied[category] = _entries.validate_python(data)
        return copied

    def prepare_roster(self, cup: Cup, league: int) -> Roster:
        """Build the roster, seeded from existing overall rankings and overrides."""
        prior = self.store.load(cup.name, "overall", league)
        overrides = self.gm.load_overrides(league, cup.name)
        roster = build_roster(self.gm, cup, league, prior, overrides)
        self.event_handler.on_roster_ready(
            candidates=roster.candidates,
            targets=roster.targets,
            cup=cup.name,
            league=league,
        )
        return roster

    async def _rank_scenario(
        self,
        semaphore: asyncio.Semaphore,
        roster: Roster,
        scenario: Scenario,
        index: int,
        total: int,
        cup: Cup,
        league: int,
        custom: bool,
    ) -> tuple[str, list[RankingEntry]]:
        async with semaphore:
            self.event_handler.on_scenario_start(scenario=scenario, index=index, total=total)
            ranker = ScenarioRanker(
                roster.clone(),
                scenario,
                self.simulator_factory(),
                custom=custom,
                config=self.config,
                event_handler=self.event_handler,
            )
            rankings = await asyncio.to_thread(ranker.rank)
            self.store.save(cup.name, scenario.slug, league, rankings)
            self.event_handler.on_scenario_complete(scenario=scenario, rankings=rankings)
            return scenario.slug, rankings

    async def rank_all(self, cup: Cup | str, league: int) -> dict[str, list[RankingEntry]] | None:
        """Rank every scenario for a cup and bracket.

        Scenarios run concurrently up to ``config.concurrency``, each on
        its own roster copy and simulator.

        Returns:
            Mapping of scenario slug to rankings, or None if the cup is unknown
        """
        cup_data = self._resolve_cup(cup)
        if cup_data is None:
            return None

        custom = self.gm.is_custom_cup(cup_data)
        scenarios = self.gm.scenarios

        if not custom and self.store.load_official(cup_data.name, "overall", league) is not None:
            self.event_handler.on_progress(
                current=0,
                total=len(scenarios),
                message=f"Using official rankings for {cup_data.name} @ {league}",
            )
            log.info("using_official_rankings", cup=cup_data.name, league=league)
            return self._copy_official(cup_data, league, [s.slug for s in scenarios])

        roster = self.prepare_roster(cup_data, league)

        semaphore = asyncio.Semaphore(max(1, self.config.concurrency))
        results = await asyncio.gather(*(
            self._rank_scenario(
                semaphore, roster, scenario, i, len(scenarios), cup_data, league, custom
            )
            for i, scenario in enumerate(scenarios)
        ))
        return dict(results)

    async def rank_overall(self, cup: Cup | str, league: int) -> list[OverallEntry] | None:
        """Build overall and consistency rankings from the scenario rankings.

        Returns:
            Overall rankings, or None if the cup is unknown or no scenario
            rankings exist
        """
        cup_data = self._resolve_cup(cup)
        if cup_data is None:
            return None

        if not self.gm.is_custom_cup(cup_data):
            official = self.store.load_official(cup_data.name, "overall", league)
            if official is not None:
                log.info("using_official_overall", cup=cup_data.name, league=league)
                copied = self._copy_official(cup_data, league, ["overall", "consistency"])
                return _overall_entries.validate_python(official) if copied else None

        category_data: dict[str, list[RankingEntry]] = {}
        for scenario in self.gm.scenarios:
            data = self.store.load(cup_data.name, scenario.slug, league)
            if data is None:
                log.warning(
                    "category_missing",
                    category=scenario.slug,
                    cup=cup_data.name,
                    league=league,
                )
                continue
            category_data[scenario.slug] = data

        overall = rank_overall(category_data, self.config)
        if overall is None:
            return None
        self.store.save(cup_data.name, "overall", league, overall)

        consistency = rank_consistency(category_data, self.config)
        if consistency is not None:
            self.store.save(cup_data.name, "consistency", league, consistency)

        self.event_handler.on_overall_complete(overall=overall, consistency=consistency)
        return overall

    async def run(self, cup: Cup | str, league: int) -> list[OverallEntry] | None:
        """Scenario rankings followed by overall and consistency rankings."""
        cup_name = cup.name if isinstance(cup, Cup) else cup
        with log_context(cup=cup_name, league=league):
            scenarios = await self.rank_all(cup, league)
            if scenarios is None:
                return None
            return await self.rank_overall(cup, league)

"""Scenario ranker tying orchestration, weighting and finalization together."""

from __future__ import annotations

from pvpranker.events import EventHandler, NullEventHandler
from pvpranker.logging import get_logger
from pvpranker.models import RankingEntry, Scenario
from pvpranker.ranker.battle import BattleOrchestrator, Simulator
from pvpranker.ranker.finalize import finalize_rankings
from pvpranker.ranker.models import RankerConfig, Roster
from pvpranker.ranker.weighting import weight_matchups

log = get_logger(__name__)


class ScenarioRanker:
    """Ranks one roster under one scenario.

    Every candidate fights every target, the pairing ratings are folded
    into one score per candidate by the iterative weight solver, and the
    scores are scaled so the best candidate gets 100.

    The roster passed in is used as-is; callers running several scenarios
    at once should hand each ranker its own ``Roster.clone()`` and its own
    simulator.
    """

    def __init__(
        self,
        roster: Roster,
        scenario: Scenario,
        simulator: Simulator,
        custom: bool = False,
        config: RankerConfig | None = None,
        event_handler: EventHandler | None = None,
    ):
        """Initialize the scenario ranker.

        Args:
            roster: Candidate and target pools
            scenario: Shields and energy-turns for both sides
            simulator: Combat resolver
            custom: True for user-defined cups, which need more solver passes
            config: Scoring policy (uses defaults if None)
            event_handler: Optional progress receiver (uses NullHandler if None)
        """
        self.roster = roster
        self.scenario = scenario
        self.simulator = simulator
        self.custom = custom
        self.config = config or RankerConfig()
        self.event_handler = event_handler or NullEventHandler()
        self.battles_simulated = 0

    def rank(self) -> list[RankingEntry]:
        """Run the scenario.

        Returns:
            Ranking entries sorted by score (highest first)
        """
        orchestrator = BattleOrchestrator(
            self.roster,
            self.scenario,
            self.simulator,
            config=self.config,
            event_handler=self.event_handler,
        )
        results = orchestrator.run()
        self.battles_simulated = orchestrator.battles_simulated

        iterations = self.config.iterations(self.custom)
        weight_matchups(results, self.roster, self.scenario, iterations, self.config)

        rankings = finalize_rankings(results, self.scenario, self.config)
        log.info(
            "scenario_ranked",
            scenario=self.scenario.slug,
            entries=len(rankings),
            iterations=iterations,
            battles=self.battles_simulated,
        )
        return rankings

"""Pairwise battle orchestration for one scenario."""

from __future__ import annotations

import math
from typing import Protocol

from pvpranker.events import EventHandler, NullEventHandler
from pvpranker.logging import get_logger
from pvpranker.models import MoveUsage, MoveUsageTable, Scenario
from pvpranker.ranker.models import (
    BattleOutcome,
    CandidateResult,
    CombatantState,
    Contestant,
    Match,
    RankerConfig,
    Roster,
)

log = get_logger(__name__)


class Simulator(Protocol):
    """Combat resolver contract.

    ``configure`` receives freshly prepared states for both sides and
    ``simulate`` plays the encounter out. Identical inputs must give
    identical outcomes.
    """

    def configure(self, side_a: CombatantState, side_b: CombatantState) -> None:
        ...

    def simulate(self) -> BattleOutcome:
        ...


def starting_energy(contestant: Contestant, turns: int, max_energy: int = 100) -> int:
    """Energy banked by using the fast move for ``turns`` turns before the encounter."""
    if turns == 0 or contestant.fast_move is None:
        return 0
    fast_move = contestant.fast_move
    fast_move_count = max(1, math.floor(turns * 500 / fast_move.cooldown))
    return int(min(fast_move.energy_gain * fast_move_count, max_energy))


def prepare_state(
    contestant: Contestant,
    shields: int,
    energy_turns: int,
    config: RankerConfig,
) -> CombatantState:
    return CombatantState(
        contestant=contestant,
        starting_shields=shields,
        shields=shields,
        energy=starting_energy(contestant, energy_turns, config.max_energy),
        hp=contestant.stats.hp,
    )


def battle_rating(final_hp: float, max_hp: float, opp_final_hp: float, opp_max_hp: float) -> int:
    """Rating on a 0-1000 scale: own health kept plus damage dealt."""
    health_rating = final_hp / max_hp
    damage_rating = (opp_max_hp - opp_final_hp) / opp_max_hp
    return math.floor((health_rating + damage_rating) * 500)


def rate_encounter(
    side_a: CombatantState,
    side_b: CombatantState,
    outcome: BattleOutcome,
    opponent_index: int,
    config: RankerConfig,
) -> Match:
    """Turn a resolver outcome into a Match from side A's point of view."""
    a, b = side_a.contestant, side_b.contestant
    hp_a, hp_b = outcome.final_hp
    shields_a, shields_b = outcome.final_shields or (side_a.shields, side_b.shields)

    rating = battle_rating(hp_a, a.stats.hp, hp_b, b.stats.hp)
    op_rating = battle_rating(hp_b, b.stats.hp, hp_a, a.stats.hp)

    win = 1 if rating > op_rating else 0
    op_win = 1 if op_rating > rating else 0
    if rating == config.rating_midpoint:
        win = op_win = 0

    bonus = config.shield_bonus
    adj_rating = (
        rating
        + bonus * (side_b.starting_shields - shields_b) * win
        + bonus * shields_a * win
    )
    adj_op_rating = (
        op_rating
        + bonus * (side_a.starting_shields - shields_a) * op_win
        + bonus * shields_b * op_win
    )

    usage_a, usage_b = outcome.move_usage
    return Match(
        opponent=b.species_id,
        opponent_index=opponent_index,
        rating=rating,
        adj_rating=adj_rating,
        op_rating=op_rating,
        adj_op_rating=adj_op_rating,
        move_usage=dict(usage_a),
        opp_move_usage=dict(usage_b),
        is_mirror=a.species_id == b.species_id,
    )


class SymmetricResultCache:
    """Results of one scenario run, keyed by (candidate, target) position.

    When the scenario is symmetric and every candidate is a target, the
    encounter (j, i) is the encounter (i, j) seen from the other side, so
    it is read back instead of simulated again. A cache must never outlive
    the scenario run that filled it.
    """

    def __init__(self, enabled: bool):
        self.enabled = enabled
        self._results: dict[tuple[int, int], Match] = {}

    def store(self, candidate_index: int, target_index: int, match: Match) -> None:
        if self.enabled:
            self._results[(candidate_index, target_index)] = match

    def mirrored(self, candidate_index: int, target_index: int, opponent: str) -> Match | None:
        """The stored reverse encounter, flipped to this candidate's side."""
        if not self.enabled:
            return None
        reverse = self._results.get((target_index, candidate_index))
        if reverse is None:
            return None
        return reverse.swapped(opponent, target_index)

    def __len__(self) -> int:
        return len(self._results)


def aggregate_move_usage(
    contestant: Contestant,
    matches: list[Match],
    targets: list[Contestant],
) -> MoveUsageTable:
    """Sum move usage over all pairings, per move in the contestant's pools.

    Each pairing's counts are scaled by the opponent's weight modifier, so
    moves used against heavily played opponents dominate the totals.
    """
    fast = {m.move_id: 0.0 for m in contestant.fast_move_pool}
    charged = {m.move_id: 0.0 for m in contestant.charged_move_pool}

    for match in matches:
        weight = targets[match.opponent_index].weight_modifier
        for move_id, uses in match.move_usage.items():
            if move_id in fast:
                fast[move_id] += uses * weight
            elif move_id in charged:
                charged[move_id] += uses * weight
            else:
                log.warning(
                    "move_usage_unknown_move",
                    species_id=contestant.species_id,
                    move_id=move_id,
                )

    return MoveUsageTable(
        fast_moves=sorted(
            (MoveUsage(move_id=k, uses=v) for k, v in fast.items()),
            key=lambda u: u.uses,
            reverse=True,
        ),
        charged_moves=sorted(
            (MoveUsage(move_id=k, uses=v) for k, v in charged.items()),
            key=lambda u: u.uses,
            reverse=True,
        ),
    )


class BattleOrchestrator:
    """Runs every candidate against every target for one scenario.

    Candidates are processed in roster order, which the symmetric cache
    relies on: pairing (i, j) with j < i is always available by the time
    candidate i is reached.
    """

    def __init__(
        self,
        roster: Roster,
        scenario: Scenario,
        simulator: Simulator,
        config: RankerConfig | None = None,
        event_handler: EventHandler | None = None,
    ):
        self.roster = roster
        self.scenario = scenario
        self.simulator = simulator
        self.config = config or RankerConfig()
        self.event_handler = event_handler or NullEventHandler()
        self.cache = SymmetricResultCache(
            enabled=roster.is_square and scenario.is_symmetric
        )
        self.battles_simulated = 0

    def _simulate(self, candidate: Contestant, target: Contestant, target_index: int) -> Match:
        shields, energy = self.scenario.shields, self.scenario.energy
        side_a = prepare_state(candidate, shields[0], energy[0], self.config)
        side_b = prepare_state(target, shields[1], energy[1], self.config)

        self.simulator.configure(side_a, side_b)
        outcome = self.simulator.simulate()
        self.battles_simulated += 1

        return rate_encounter(side_a, side_b, outcome, target_index, self.config)

    def run(self) -> list[CandidateResult]:
        """Produce every pairing and the first-pass average for each candidate."""
        candidates = self.roster.candidates
        targets = self.roster.targets
        total = len(candidates)
        results: list[CandidateResult] = []

        for i, candidate in enumerate(candidates):
            if i % self.config.progress_interval == 0:
                self.event_handler.on_progress(
                    current=i,
                    total=total,
                    message=f"{self.scenario.slug}: {i}/{total} contestants...",
                    scenario=self.scenario.slug,
                )

            result = CandidateResult(contestant=candidate)
            total_rating = 0.0
            counted = 0

            for j, target in enumerate(targets):
                match = self.cache.mirrored(i, j, target.species_id)
                if match is None:
                    match = self._simulate(candidate, target, j)
                    self.cache.store(i, j, match)

                result.matches.append(match)
                if not match.is_mirror:
                    total_rating += match.adj_rating
                    counted += 1

            result.scores.append(math.floor(total_rating / (counted or 1)))
            result.moves = aggregate_move_usage(candidate, result.matches, targets)
            results.append(result)

        log.info(
            "battles_complete",
            scenario=self.scenario.slug,
            candidates=total,
            targets=len(targets),
            simulated=self.battles_simulated,
        )
        return results

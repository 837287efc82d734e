"""Scenario finalization: movesets, charger adjustment, key matchups and scaling."""

from __future__ import annotations

import math

from pvpranker.models import KeyMatchup, RankingEntry, Scenario
from pvpranker.ranker.models import CandidateResult, Contestant, RankerConfig

STAB_MULTIPLIER = 1.2
SHADOW_ATK_MULTIPLIER = 1.2


def charger_multiplier(contestant: Contestant) -> float:
    """Score multiplier for the chargers scenario.

    Rewards contestants that get back into a charged-move exchange quickly:
    fast-move damage per turn and the widest energy gap left by the
    cheapest selected charged move.
    """
    fast_move = contestant.fast_move
    if fast_move is None:
        return 1.0

    stab = STAB_MULTIPLIER if fast_move.type in contestant.types else 1.0
    shadow = SHADOW_ATK_MULTIPLIER if contestant.is_shadow else 1.0
    fast_move_dpt = (
        fast_move.power * stab * shadow * (contestant.stats.atk / 100)
    ) / (fast_move.cooldown / 500)

    energies = [m.energy for m in contestant.selected_charged_moves] or [100]
    max_energy_remaining = 100 - min(energies)

    return math.pow(
        math.pow(max_energy_remaining / 100, 0.5) * math.pow(fast_move_dpt / 5, 1 / 6),
        1 / 6,
    )


def key_matchups(
    result: CandidateResult,
    config: RankerConfig,
) -> tuple[list[KeyMatchup], list[KeyMatchup]]:
    """Pick the best wins and worst losses.

    Wins are chosen by weighted score, losses by the opponent's weighted
    score; both lists are then ordered by raw rating.

    Returns:
        Tuple of (matchups, counters)
    """
    matches = [m for m in result.matches if not m.is_mirror]
    limit = min(config.key_matchup_count, len(matches))
    midpoint = config.rating_midpoint

    by_op_score = sorted(matches, key=lambda m: m.op_score, reverse=True)
    counters = [
        KeyMatchup(opponent=m.opponent, rating=m.rating)
        for m in by_op_score
        if m.rating < midpoint
    ][:limit]
    counters.sort(key=lambda k: k.rating)

    # Equal scores keep the op_score order
    matchups = [
        KeyMatchup(opponent=m.opponent, rating=m.rating)
        for m in sorted(by_op_score, key=lambda m: m.score, reverse=True)
        if m.rating > midpoint
    ][:limit]
    matchups.sort(key=lambda k: k.rating, reverse=True)

    return matchups, counters


def finalize_rankings(
    results: list[CandidateResult],
    scenario: Scenario,
    config: RankerConfig | None = None,
) -> list[RankingEntry]:
    """Convert solver output into sorted ranking entries scaled to 0-100."""
    config = config or RankerConfig()
    rankings: list[RankingEntry] = []

    for result in results:
        contestant = result.contestant
        score: float = result.scores[-1]

        if scenario.slug == "chargers":
            score *= charger_multiplier(contestant)

        matchups, counters = key_matchups(result, config)
        rankings.append(
            RankingEntry(
                species_id=contestant.species_id,
                species_name=contestant.species_name,
                rating=result.rating,
                score=score,
                moveset=contestant.moveset,
                matchups=matchups,
                counters=counters,
                moves=result.moves,
            )
        )

    rankings.sort(key=lambda r: r.score, reverse=True)

    highest = rankings[0].score if rankings else 0
    highest = highest or 1
    for entry in rankings:
        entry.score = math.floor(entry.score / highest * 1000) / 10

    return rankings

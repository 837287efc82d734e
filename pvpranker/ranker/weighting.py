"""Iterative meta-relevance weighting of pairing ratings.

Each pass re-scores every candidate as a weighted average of its pairing
ratings, where a pairing's weight grows with the opponent's score from the
previous pass. Opponents below a rising fraction of the best score stop
counting at all, so repeated passes focus on the strongest part of the
field.
"""

from __future__ import annotations

import math

from pvpranker.logging import get_logger
from pvpranker.models import Scenario
from pvpranker.ranker.models import CandidateResult, RankerConfig, Roster

log = get_logger(__name__)


def soft_cap(rating: float, config: RankerConfig) -> float:
    """Compress ratings above the soft-cap threshold."""
    threshold = config.soft_cap_threshold
    if rating > threshold:
        return threshold + math.sqrt(rating - threshold)
    return rating


def harsh_curve(rating: float, config: RankerConfig) -> float:
    """Push ratings below the curve threshold further down."""
    threshold = config.curve_threshold
    if rating < threshold:
        return math.pow(threshold, (threshold + rating) / (2 * threshold))
    return rating


def shape_rating(rating: float, config: RankerConfig) -> float:
    return harsh_curve(soft_cap(rating, config), config)


def switch_penalty(rating: float, config: RankerConfig) -> float:
    """Multiplier that makes hard losses count more in the switches scenario."""
    midpoint = config.rating_midpoint
    if rating < midpoint:
        return 1 + math.pow(midpoint - rating, 2) / config.switch_penalty_divisor
    return 1.0


def pairing_weight(
    target_score: float,
    best_score: float,
    iteration: int,
    config: RankerConfig,
) -> float:
    """Weight of a pairing from the target's relative strength."""
    relative = target_score / best_score - config.rank_cutoff(iteration)
    return math.pow(max(relative, 0), config.rank_weight_exponent)


def weight_matchups(
    results: list[CandidateResult],
    roster: Roster,
    scenario: Scenario,
    iterations: int,
    config: RankerConfig | None = None,
) -> None:
    """Run the solver passes, appending one score per pass to each result.

    Ratings are shaped in place on every pass. ``Match.score`` and
    ``Match.op_score`` keep the last pass's weighted values for picking
    matchups and counters; they are computed before below-cutoff targets
    are dropped from the average.

    Args:
        results: Orchestrator output, one per candidate, each with scores[0] set
        roster: The roster the results were produced from
        scenario: Scenario being ranked (``switches`` adds the loss penalty)
        iterations: Number of passes
        config: Scoring policy
    """
    config = config or RankerConfig()
    if not results:
        return

    square = roster.is_square
    targets = roster.targets
    target_positions = roster.target_positions

    for n in range(iterations):
        best_score = max(r.scores[n] for r in results) or 1
        cutoff = config.rank_cutoff(n)

        for result in results:
            total_score = 0.0
            total_weight = 0.0

            for j, match in enumerate(result.matches):
                target_score = results[target_positions[j]].scores[n]

                weight = 1.0
                if square:
                    weight = pairing_weight(target_score, best_score, n, config)
                if match.is_mirror:
                    weight = 0.0
                weight *= targets[j].weight_modifier

                match.adj_rating = shape_rating(match.adj_rating, config)

                if scenario.slug == "switches":
                    weight *= switch_penalty(match.adj_rating, config)

                # Matchup and counter picks see the weight before the cutoff
                match.score = match.adj_rating * weight
                match.op_score = match.adj_op_rating * math.pow(4, weight)

                if target_score / best_score < cutoff:
                    weight = 0.0

                total_score += match.adj_rating * weight
                total_weight += weight

            result.scores.append(math.floor(total_score / (total_weight or 1)))

        log.debug(
            "weighting_pass_complete",
            scenario=scenario.slug,
            iteration=n,
            best_score=best_score,
        )

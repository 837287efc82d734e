"""Cross-scenario aggregation into overall and consistency rankings."""

from __future__ import annotations

import math

import numpy as np

from pvpranker.logging import get_logger
from pvpranker.models import SCENARIO_ORDER, ConsistencyEntry, OverallEntry, RankingEntry
from pvpranker.ranker.models import RankerConfig

log = get_logger(__name__)

BASE_SCENARIO = "leads"


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, as the published rankings do."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def order_categories(category_data: dict[str, list[RankingEntry]]) -> dict[str, list[RankingEntry]]:
    """Known scenarios first in their standard order, then any others."""
    ordered = {slug: category_data[slug] for slug in SCENARIO_ORDER if slug in category_data}
    for slug, data in category_data.items():
        ordered.setdefault(slug, data)
    return ordered


def select_base_category(category_data: dict[str, list[RankingEntry]]) -> str | None:
    """Scenario whose contestant list drives aggregation.

    ``leads`` when available, otherwise the first available scenario in
    standard order.
    """
    if BASE_SCENARIO in category_data:
        return BASE_SCENARIO
    for slug in order_categories(category_data):
        return slug
    return None


def _scale(entries: list[OverallEntry]) -> None:
    entries.sort(key=lambda e: e.score, reverse=True)
    highest = (entries[0].score if entries else 0) or 1
    for entry in entries:
        entry.score = round_half_up(entry.score / highest * 1000) / 10


def _gather_scores(species_id: str, category_data: dict[str, list[RankingEntry]]) -> list[float]:
    scores = []
    for data in category_data.values():
        for entry in data:
            if entry.species_id == species_id:
                scores.append(entry.score)
                break
    return scores


def geometric_mean(scores: list[float], floor: float = 0.1) -> float:
    """Geometric mean with every input raised to at least ``floor``."""
    values = np.maximum(np.asarray(scores, dtype=float), floor)
    return float(np.prod(values) ** (1 / len(values)))


def consistency_score(scores: list[float], penalty: float = 0.5) -> tuple[float, float]:
    """Population mean minus a share of the population standard deviation.

    Returns:
        Tuple of (unclamped score, standard deviation)
    """
    values = np.asarray(scores, dtype=float)
    std_dev = float(values.std())
    return float(values.mean()) - std_dev * penalty, std_dev


def rank_overall(
    category_data: dict[str, list[RankingEntry]],
    config: RankerConfig | None = None,
) -> list[OverallEntry] | None:
    """Combine scenario rankings with a geometric mean.

    Returns:
        Overall entries sorted by score, or None without any scenario data
    """
    config = config or RankerConfig()
    category_data = order_categories(category_data)
    base = select_base_category(category_data)
    if base is None:
        log.error("overall_no_category_data")
        return None

    leads = {e.species_id: e for e in category_data.get(BASE_SCENARIO, [])}
    rankings: list[OverallEntry] = []

    for base_entry in category_data[base]:
        scores = _gather_scores(base_entry.species_id, category_data)
        if not scores:
            continue

        mean = geometric_mean(scores, config.geometric_floor)
        entry = OverallEntry(
            species_id=base_entry.species_id,
            species_name=base_entry.species_name,
            rating=int(round_half_up(mean * 10)),
            score=mean,
            moveset=list(base_entry.moveset),
            moves=base_entry.moves,
            scores=scores,
        )
        lead_entry = leads.get(base_entry.species_id)
        if lead_entry is not None:
            entry.matchups = list(lead_entry.matchups)
            entry.counters = list(lead_entry.counters)
        rankings.append(entry)

    _scale(rankings)
    log.info("overall_ranked", base=base, categories=list(category_data), entries=len(rankings))
    return rankings


def rank_consistency(
    category_data: dict[str, list[RankingEntry]],
    config: RankerConfig | None = None,
) -> list[ConsistencyEntry] | None:
    """Rank by mean score penalized by cross-scenario spread.

    Returns:
        Consistency entries sorted by score, or None with fewer than two
        scenarios
    """
    config = config or RankerConfig()
    category_data = order_categories(category_data)
    if len(category_data) < 2:
        log.warning("consistency_needs_two_categories", categories=list(category_data))
        return None

    base = select_base_category(category_data)
    rankings: list[ConsistencyEntry] = []

    for base_entry in category_data[base]:
        scores = _gather_scores(base_entry.species_id, category_data)
        if len(scores) < 2:
            continue

        consistency, std_dev = consistency_score(scores, config.consistency_penalty)

        rankings.append(
            ConsistencyEntry(
                species_id=base_entry.species_id,
                species_name=base_entry.species_name,
                rating=int(round_half_up(consistency * 10)),
                score=max(0.0, consistency),
                moveset=list(base_entry.moveset),
                matchups=list(base_entry.matchups),
                counters=list(base_entry.counters),
                moves=base_entry.moves,
                scores=scores,
                std_dev=round_half_up(std_dev, 1),
            )
        )

    _scale(rankings)
    return rankings

"""Bracket stat calculation from base stats, IVs and the CP multiplier table."""

from __future__ import annotations

import math

from pvpranker.models import Species
from pvpranker.ranker.models import Stats

DEFAULT_LEVEL_CAP = 50
UNCAPPED_BRACKET = 10000
MAX_IVS = (15, 15, 15)


def cpm_for_level(cpms: list[float], level: float) -> float:
    """Look up the CP multiplier; the table holds one entry per half level."""
    index = int(round((level - 1) * 2))
    if not cpms:
        raise ValueError("CP multiplier table is empty")
    return cpms[min(max(index, 0), len(cpms) - 1)]


def combat_power(species: Species, ivs: tuple[float, float, float], cpm: float) -> int:
    atk = species.base_stats.atk + ivs[0]
    def_ = species.base_stats.def_ + ivs[1]
    hp = species.base_stats.hp + ivs[2]
    return max(10, math.floor(atk * math.sqrt(def_) * math.sqrt(hp) * cpm * cpm / 10))


def _find_level(
    species: Species,
    cp: int,
    cpms: list[float],
    level_cap: float,
    ivs: tuple[float, float, float],
) -> float:
    max_level = min(level_cap, (len(cpms) + 1) / 2)
    if cp >= UNCAPPED_BRACKET:
        return max_level

    level = max_level
    while level > 1:
        if combat_power(species, ivs, cpm_for_level(cpms, level)) <= cp:
            return level
        level -= 0.5
    return 1.0


def compute_stats(
    species: Species,
    cp: int,
    cpms: list[float],
    level_cap: float | None = None,
) -> tuple[Stats, float]:
    """Compute a species' stats for a bracket.

    Uses the species' default IVs for the bracket when the master data
    provides them, otherwise perfect IVs at the highest level that fits
    under the cap.

    Returns:
        Tuple of (stats, level)
    """
    level_cap = level_cap or DEFAULT_LEVEL_CAP
    default = species.default_ivs.get(f"cp{cp}")

    if default and len(default) >= 4:
        level = float(default[0])
        ivs = (default[1], default[2], default[3])
    else:
        ivs = MAX_IVS
        level = _find_level(species, cp, cpms, level_cap, ivs)

    cpm = cpm_for_level(cpms, level)
    stats = Stats(
        atk=cpm * (species.base_stats.atk + ivs[0]),
        def_=cpm * (species.base_stats.def_ + ivs[1]),
        hp=max(10, math.floor(cpm * (species.base_stats.hp + ivs[2]))),
    )
    return stats, level

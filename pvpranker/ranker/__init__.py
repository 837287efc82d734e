"""Pairwise battle ranking engine."""

from pvpranker.ranker.battle import BattleOrchestrator, Simulator, SymmetricResultCache
from pvpranker.ranker.models import (
    BattleOutcome,
    CombatantState,
    Contestant,
    Match,
    RankerConfig,
    Roster,
)
from pvpranker.ranker.ranker import ScenarioRanker
from pvpranker.ranker.roster import build_roster

__all__ = [
    "BattleOrchestrator",
    "BattleOutcome",
    "CombatantState",
    "Contestant",
    "Match",
    "RankerConfig",
    "Roster",
    "ScenarioRanker",
    "Simulator",
    "SymmetricResultCache",
    "build_roster",
]

"""Master-data and ranking-output models.

Field names are snake_case in Python and camelCase on disk, matching the
gamemaster and ranking JSON files consumed and produced by the ranker.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BaseStats(CamelModel):
    atk: float
    def_: float = Field(alias="def")
    hp: float


class Move(CamelModel):
    """A fast or charged move from the move table."""
    move_id: str
    name: str = ""
    type: str = "normal"
    power: float = 0
    energy: float = 0       # Charged move cost
    energy_gain: float = 0  # Fast move gain
    cooldown: int = 500     # Milliseconds; one turn is 500 ms
    turns: int | None = None

    @property
    def turn_count(self) -> float:
        return self.cooldown / 500


class Species(CamelModel):
    """A roster entry as stored in the gamemaster."""
    dex: int
    species_id: str
    species_name: str
    base_stats: BaseStats
    types: list[str] = Field(default_factory=lambda: ["none", "none"])
    fast_moves: list[str] = Field(default_factory=list)
    charged_moves: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    # e.g. {"cp1500": [level, atk_iv, def_iv, hp_iv]}
    default_ivs: dict[str, list[float]] = Field(default_factory=dict, alias="defaultIVs")
    released: bool = True


class FilterType(str, Enum):
    """Kind of eligibility rule in a cup's include/exclude lists."""
    TYPE = "type"
    DEX = "dex"
    TAG = "tag"
    ID = "id"
    MOVE = "move"


class CupFilter(CamelModel):
    filter_type: FilterType
    values: list[str | int] = Field(default_factory=list)
    leagues: list[int] | None = None  # Brackets the rule applies to; None = all
    include_shadows: bool = False


class Cup(CamelModel):
    """A named ruleset restricting which roster entries are eligible."""
    name: str
    title: str | None = None
    include: list[CupFilter] = Field(default_factory=list)
    exclude: list[CupFilter] = Field(default_factory=list)
    filter_targets: bool = False  # Only weightModifier > 1 entries become targets
    include_low_stat_product: bool = False
    level_cap: int | None = None
    league: int | None = None
    leagues: list[int] | None = None
    custom: bool = False


class Scenario(CamelModel):
    """A tactical condition: starting shields and energy-turns per side."""
    slug: str
    shields: tuple[int, int]
    energy: tuple[int, int] = (0, 0)

    @property
    def is_symmetric(self) -> bool:
        return self.shields[0] == self.shields[1] and self.energy[0] == self.energy[1]


SCENARIO_ORDER = ("leads", "closers", "switches", "chargers", "attackers")

DEFAULT_SCENARIOS = [
    Scenario(slug="leads", shields=(1, 1), energy=(0, 0)),
    Scenario(slug="closers", shields=(0, 0), energy=(0, 0)),
    Scenario(slug="switches", shields=(1, 1), energy=(4, 0)),
    Scenario(slug="chargers", shields=(1, 1), energy=(6, 0)),
    Scenario(slug="attackers", shields=(0, 1), energy=(0, 0)),
]


class GameMasterData(CamelModel):
    """Top-level shape of gamemaster.json."""
    pokemon: list[Species] = Field(default_factory=list)
    moves: list[Move] = Field(default_factory=list)
    cups: list[Cup] = Field(default_factory=list)
    ranking_scenarios: list[Scenario] = Field(default_factory=lambda: list(DEFAULT_SCENARIOS))
    cpms: list[float] = Field(default_factory=list)


class MovesetOverride(CamelModel):
    """Forced moves and/or weight for one species in one cup and bracket."""
    species_id: str
    fast_move: str | None = None
    charged_moves: list[str] | None = None
    weight: float | None = None


class OverrideSet(CamelModel):
    league: int
    cup: str
    pokemon: list[MovesetOverride] = Field(default_factory=list)


class MoveUsage(CamelModel):
    move_id: str
    uses: float = 0


class MoveUsageTable(CamelModel):
    fast_moves: list[MoveUsage] = Field(default_factory=list)
    charged_moves: list[MoveUsage] = Field(default_factory=list)


class KeyMatchup(CamelModel):
    """A notable win (matchup) or loss (counter)."""
    opponent: str
    rating: int


class RankingEntry(CamelModel):
    """One contestant's result in one scenario."""
    species_id: str
    species_name: str = ""
    rating: int = 0  # First-pass average before weighting
    score: float = 0.0
    moveset: list[str] = Field(default_factory=list)
    matchups: list[KeyMatchup] = Field(default_factory=list)
    counters: list[KeyMatchup] = Field(default_factory=list)
    moves: MoveUsageTable = Field(default_factory=MoveUsageTable)


class OverallEntry(RankingEntry):
    """Cross-scenario result; ``scores`` lists the per-scenario inputs."""
    scores: list[float] = Field(default_factory=list)


class ConsistencyEntry(OverallEntry):
    std_dev: float = 0.0

"""Data models for the ranking engine."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pvpranker.models import Move, MoveUsageTable


class Stats(BaseModel):
    """Bracket-adjusted battle stats."""
    atk: float
    def_: float
    hp: int


class Contestant(BaseModel):
    """A roster entry configured for one bracket.

    Built once per ranking run by the roster builder. Battle state (shields,
    energy, health) is never stored here; every encounter gets a fresh
    ``CombatantState``.
    """
    species_id: str
    species_name: str
    dex: int
    types: list[str]
    tags: list[str] = Field(default_factory=list)
    level: float
    stats: Stats
    fast_move_pool: list[Move] = Field(default_factory=list)
    charged_move_pool: list[Move] = Field(default_factory=list)
    fast_move: Move | None = None
    charged_moves: list[Move | None] = Field(default_factory=lambda: [None, None])
    # Real-world usage weight; 0 keeps the contestant out of weighted averages
    weight_modifier: float = 1.0

    @property
    def stat_product(self) -> float:
        return self.stats.atk * self.stats.def_ * self.stats.hp / 1000

    @property
    def is_shadow(self) -> bool:
        return "shadow" in self.tags or self.species_id.endswith("_shadow")

    @property
    def selected_charged_moves(self) -> list[Move]:
        return [m for m in self.charged_moves if m is not None]

    @property
    def moveset(self) -> list[str]:
        moves = [self.fast_move] + self.selected_charged_moves
        return [m.move_id for m in moves if m is not None]

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def knows_move(self, move_id: str) -> bool:
        return any(
            m.move_id == move_id
            for m in self.fast_move_pool + self.charged_move_pool
        )


class Roster(BaseModel):
    """Candidate pool plus the positions of the candidates used as targets."""
    candidates: list[Contestant] = Field(default_factory=list)
    target_positions: list[int] = Field(default_factory=list)

    @property
    def targets(self) -> list[Contestant]:
        return [self.candidates[i] for i in self.target_positions]

    @property
    def is_square(self) -> bool:
        """True when every candidate is also a target."""
        return len(self.candidates) == len(self.target_positions)

    def clone(self) -> Roster:
        """Deep copy for an isolated scenario run."""
        return self.model_copy(deep=True)


class CombatantState(BaseModel):
    """One side of a single encounter, handed to the combat resolver."""
    contestant: Contestant
    starting_shields: int
    shields: int
    energy: int
    hp: float


class BattleOutcome(BaseModel):
    """What the combat resolver reports after an encounter."""
    final_hp: tuple[float, float]
    # None means neither side spent a shield
    final_shields: tuple[int, int] | None = None
    move_usage: tuple[dict[str, int], dict[str, int]] = Field(
        default_factory=lambda: ({}, {})
    )


class Match(BaseModel):
    """Result of one candidate-versus-target pairing, from the candidate's side."""
    opponent: str
    opponent_index: int  # Position in the target list
    rating: int
    adj_rating: float
    op_rating: int
    adj_op_rating: float
    move_usage: dict[str, int] = Field(default_factory=dict)
    opp_move_usage: dict[str, int] = Field(default_factory=dict)
    is_mirror: bool = False
    # Filled in by the weight solver
    score: float = 0.0
    op_score: float = 0.0

    def swapped(self, opponent: str, opponent_index: int) -> Match:
        """The same encounter seen from the other side."""
        return Match(
            opponent=opponent,
            opponent_index=opponent_index,
            rating=self.op_rating,
            adj_rating=self.adj_op_rating,
            op_rating=self.rating,
            adj_op_rating=self.adj_rating,
            move_usage=dict(self.opp_move_usage),
            opp_move_usage=dict(self.move_usage),
            is_mirror=self.is_mirror,
        )


class CandidateResult(BaseModel):
    """Working record for one candidate during one scenario."""
    contestant: Contestant
    matches: list[Match] = Field(default_factory=list)
    # One score per solver pass; scores[0] is the unweighted average
    scores: list[int] = Field(default_factory=list)
    moves: MoveUsageTable = Field(default_factory=MoveUsageTable)

    @property
    def rating(self) -> int:
        return self.scores[0] if self.scores else 0


class RankerConfig(BaseModel):
    """Scoring policy for the ranking engine."""
    # Solver passes
    custom_iterations: int = 7
    official_iterations: int = 1

    # Meta-relevance weighting
    rank_cutoff_base: float = 0.1
    rank_cutoff_increase: float = 0.06
    rank_weight_exponent: float = 1.65

    # Curve shaping
    soft_cap_threshold: float = 700.0
    curve_threshold: float = 300.0
    switch_penalty_divisor: float = 20000.0

    # Battle rating
    rating_midpoint: int = 500
    shield_bonus: int = 100
    max_energy: int = 100

    # Finalization and aggregation
    key_matchup_count: int = 5
    consistency_penalty: float = 0.5
    geometric_floor: float = 0.1

    # Progress events every N candidates
    progress_interval: int = 10

    # Scenarios ranked at once (1 = sequential)
    concurrency: int = 1

    def rank_cutoff(self, iteration: int) -> float:
        """Fraction of the best score a target needs to carry weight."""
        return self.rank_cutoff_base + self.rank_cutoff_increase * iteration

    def iterations(self, custom: bool) -> int:
        return self.custom_iterations if custom else self.official_iterations

"""Master data access: species, moves, cups, scenarios and moveset overrides."""

from __future__ import annotations

import json
from pathlib import Path

from pvpranker.logging import get_logger
from pvpranker.models import (
    Cup,
    GameMasterData,
    Move,
    MovesetOverride,
    OverrideSet,
    Scenario,
    Species,
)

log = get_logger(__name__)

GAMEMASTER_FILE = "gamemaster.json"


class GameMaster:
    """In-memory view of the gamemaster plus the override files beside it.

    Species are kept sorted by display name so roster construction always
    walks them in the same order.
    """

    def __init__(self, data: GameMasterData, data_dir: Path | str | None = None):
        self.data = data
        self.data_dir = Path(data_dir) if data_dir is not None else None
        self.data.pokemon.sort(key=lambda s: s.species_name)
        self._species = {s.species_id: s for s in self.data.pokemon}
        self._moves = {m.move_id: m for m in self.data.moves}
        self._custom_cups: set[str] = set()

    @classmethod
    def load(cls, data_dir: Path | str) -> "GameMaster":
        """Load gamemaster.json from a data directory."""
        data_dir = Path(data_dir)
        with open(data_dir / GAMEMASTER_FILE, encoding="utf-8") as f:
            data = GameMasterData.model_validate(json.load(f))
        log.info(
            "gamemaster_loaded",
            species=len(data.pokemon),
            moves=len(data.moves),
            cups=len(data.cups),
        )
        return cls(data, data_dir)

    @property
    def species(self) -> list[Species]:
        return self.data.pokemon

    @property
    def scenarios(self) -> list[Scenario]:
        return self.data.ranking_scenarios

    @property
    def cpms(self) -> list[float]:
        return self.data.cpms

    def get_species(self, species_id: str) -> Species | None:
        return self._species.get(species_id.replace("_xl", ""))

    def get_move(self, move_id: str) -> Move | None:
        """Look up a move; ``"none"`` means an empty slot."""
        if move_id == "none":
            return None
        move = self._moves.get(move_id)
        if move is None:
            log.error("move_missing", move_id=move_id)
        return move

    def all_cups(self) -> list[Cup]:
        return list(self.data.cups)

    def get_cup(self, name: str) -> Cup | None:
        for cup in self.data.cups:
            if cup.name == name:
                return cup
        return None

    def register_custom_cup(self, cup: Cup) -> None:
        """Add or replace a user-defined cup."""
        for i, existing in enumerate(self.data.cups):
            if existing.name == cup.name:
                self.data.cups[i] = cup
                break
        else:
            self.data.cups.append(cup)
        self._custom_cups.add(cup.name)

    def is_custom_cup(self, cup: Cup | str) -> bool:
        """Whether a cup is user-defined rather than an official ruleset."""
        if isinstance(cup, Cup):
            if cup.custom or cup.name == "custom":
                return True
            cup = cup.name
        return cup == "custom" or cup in self._custom_cups

    def load_overrides(self, league: int, cup_name: str) -> list[OverrideSet]:
        """Read ``overrides/<cup>/<league>.json`` if present."""
        if self.data_dir is None:
            return []
        path = self.data_dir / "overrides" / cup_name / f"{league}.json"
        if not path.exists():
            return []
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        entries = [MovesetOverride.model_validate(item) for item in raw]
        if not entries:
            return []
        return [OverrideSet(league=league, cup=cup_name, pokemon=entries)]

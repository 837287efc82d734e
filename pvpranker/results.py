"""Ranking file storage.

Rankings live in a directory tree shared by the official data and the
generated output:

<root>/
└── <cup>/
    ├── leads/rankings-1500.json
    ├── closers/rankings-1500.json
    ├── ...
    ├── overall/rankings-1500.json
    └── consistency/rankings-1500.json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, TypeAdapter

from pvpranker.logging import get_logger
from pvpranker.models import RankingEntry

log = get_logger(__name__)

_entries = TypeAdapter(list[RankingEntry])


class RankingStore:
    """Reads official rankings and reads/writes generated ones."""

    def __init__(self, data_dir: Path | str, output_dir: Path | str):
        """Initialize the store.

        Args:
            data_dir: Master data directory; official rankings are under ``rankings/``
            output_dir: Directory generated rankings are written to
        """
        self.official_dir = Path(data_dir) / "rankings"
        self.output_dir = Path(output_dir)
        self._cache: dict[tuple[str, str, int], list[dict[str, Any]]] = {}

    @staticmethod
    def _path(root: Path, cup: str, category: str, league: int) -> Path:
        return root / cup / category / f"rankings-{league}.json"

    @staticmethod
    def _read(path: Path) -> list[dict[str, Any]] | None:
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def load_raw(self, cup: str, category: str, league: int) -> list[dict[str, Any]] | None:
        """Generated rankings if present, else official ones."""
        key = (cup, category, league)
        if key not in self._cache:
            data = self._read(self._path(self.output_dir, cup, category, league))
            if data is None:
                data = self._read(self._path(self.official_dir, cup, category, league))
            if data is None:
                return None
            self._cache[key] = data
        return self._cache[key]

    def load(self, cup: str, category: str, league: int) -> list[RankingEntry] | None:
        data = self.load_raw(cup, category, league)
        if data is None:
            return None
        return _entries.validate_python(data)

    def load_official(self, cup: str, category: str, league: int) -> list[dict[str, Any]] | None:
        """Official rankings only, never generated output."""
        return self._read(self._path(self.official_dir, cup, category, league))

    def save(
        self,
        cup: str,
        category: str,
        league: int,
        rankings: list[BaseModel] | list[dict[str, Any]],
    ) -> Path:
        """Write rankings as indented JSON and refresh the cache."""
        data = [
            r.model_dump(mode="json", by_alias=True) if isinstance(r, BaseModel) else r
            for r in rankings
        ]
        path = self._path(self.output_dir, cup, category, league)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=4)

        self._cache[(cup, category, league)] = data
        log.info("rankings_saved", path=str(path), entries=len(data))
        return path

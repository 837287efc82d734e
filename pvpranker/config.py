"""Process-level settings read from the environment, and helpers built on them."""

from __future__ import annotations

import os
from pathlib import Path

from pvpranker.events import EventHandler
from pvpranker.gamemaster import GameMaster
from pvpranker.logging import configure_logging, get_logger
from pvpranker.ranker.models import RankerConfig
from pvpranker.results import RankingStore
from pvpranker.service import RankingService, SimulatorFactory

log = get_logger(__name__)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_CLI_MODE = os.environ.get("PVPRANKER_LOG_CONSOLE", "").lower() == "true"

# Master data (gamemaster.json, overrides/, official rankings/)
DATA_DIR = Path(os.environ.get("PVPRANKER_DATA_DIR", "data"))
# Where generated rankings are written
OUTPUT_DIR = Path(os.environ.get("PVPRANKER_OUTPUT_DIR", "output/rankings"))

# Scenarios ranked in parallel worker threads (1 = sequential)
SCENARIO_CONCURRENCY = int(os.environ.get("PVPRANKER_CONCURRENCY", "1"))

_gamemaster: GameMaster | None = None


def setup() -> None:
    """Apply the environment's logging settings."""
    configure_logging(cli_mode=LOG_CLI_MODE, log_level=LOG_LEVEL)


def get_gamemaster() -> GameMaster:
    global _gamemaster
    if _gamemaster is None:
        if not (DATA_DIR / "gamemaster.json").exists():
            raise RuntimeError(f"gamemaster.json not found in {DATA_DIR}")
        _gamemaster = GameMaster.load(DATA_DIR)
    return _gamemaster


def create_service(
    simulator_factory: SimulatorFactory,
    event_handler: EventHandler | None = None,
) -> RankingService:
    """Ranking service wired to the configured directories."""
    log.debug(
        "service_config",
        data_dir=str(DATA_DIR),
        output_dir=str(OUTPUT_DIR),
        concurrency=SCENARIO_CONCURRENCY,
    )
    return RankingService(
        get_gamemaster(),
        RankingStore(DATA_DIR, OUTPUT_DIR),
        simulator_factory,
        config=RankerConfig(concurrency=SCENARIO_CONCURRENCY),
        event_handler=event_handler,
    )

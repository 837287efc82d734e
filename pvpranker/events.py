"""Event system for decoupling the ranking engine from presentation.

The engine emits events without knowing about Rich or any other
presentation layer. Events are advisory and one-way: handlers must not
block or alter the computation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from pvpranker.models import OverallEntry, RankingEntry, Scenario

if TYPE_CHECKING:
    from pvpranker.ranker.models import Contestant


class EventHandler(Protocol):
    """Protocol for event handlers that process events from the engine."""

    def on_progress(
        self,
        current: int,
        total: int,
        message: str,
        **kwargs: Any
    ) -> None:
        """Called when progress updates occur.

        Args:
            current: Current progress value
            total: Total expected value
            message: Progress message
            **kwargs: Additional context (e.g. ``scenario``)
        """
        ...

    def on_roster_ready(
        self,
        candidates: list[Contestant],
        targets: list[Contestant],
        **kwargs: Any
    ) -> None:
        """Called once the candidate and target pools are built."""
        ...

    def on_scenario_start(
        self,
        scenario: Scenario,
        index: int,
        total: int,
        **kwargs: Any
    ) -> None:
        """Called when a scenario starts.

        Args:
            scenario: The scenario being ranked
            index: Zero-based position of the scenario in this run
            total: Number of scenarios in this run
            **kwargs: Additional context
        """
        ...

    def on_scenario_complete(
        self,
        scenario: Scenario,
        rankings: list[RankingEntry],
        **kwargs: Any
    ) -> None:
        """Called with a scenario's finalized rankings."""
        ...

    def on_overall_complete(
        self,
        overall: list[OverallEntry],
        consistency: list[OverallEntry] | None,
        **kwargs: Any
    ) -> None:
        """Called when the cross-scenario rankings are ready."""
        ...


class NullEventHandler:
    """Null event handler that does nothing.

    Useful as a default when no event handling is needed.
    """

    def on_progress(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_roster_ready(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_scenario_start(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_scenario_complete(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_overall_complete(self, *args: Any, **kwargs: Any) -> None:
        pass

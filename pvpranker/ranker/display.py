"""Rich UI components for ranking runs."""

from __future__ import annotations

from typing import Any

from rich import box
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskID, TextColumn
from rich.table import Table

from pvpranker.models import ConsistencyEntry, OverallEntry, RankingEntry, Scenario

# Shared console instance
console = Console()


def _rank_label(position: int) -> str:
    if position == 1:
        return "[bold gold1]🥇 1[/bold gold1]"
    if position == 2:
        return "[bold grey70]🥈 2[/bold grey70]"
    if position == 3:
        return "[bold orange3]🥉 3[/bold orange3]"
    return f"[dim]{position}[/dim]"


def _score_style(score: float) -> str:
    if score >= 90:
        return f"[green]{score:.1f}[/green]"
    if score < 60:
        return f"[red]{score:.1f}[/red]"
    return f"{score:.1f}"


def create_rankings_table(
    rankings: list[RankingEntry],
    title: str,
    top_n: int = 20,
) -> Table:
    """Create a Rich table for one category's rankings."""
    table = Table(
        title=f"[bold cyan]{title}[/bold cyan]",
        box=box.ROUNDED,
        show_lines=False,
        header_style="bold magenta",
        title_justify="left",
    )

    table.add_column("Rank", style="dim", width=6, justify="center")
    table.add_column("Score", style="yellow", width=7, justify="right")
    table.add_column("Contestant", style="cyan", max_width=30, overflow="ellipsis")
    table.add_column("Moveset", style="white", max_width=45, overflow="ellipsis")
    table.add_column("Top Matchup", style="green", max_width=20, overflow="ellipsis")
    table.add_column("Top Counter", style="red", max_width=20, overflow="ellipsis")

    show_spread = any(isinstance(r, ConsistencyEntry) for r in rankings[:top_n])
    if show_spread:
        table.add_column("Std Dev", style="dim", width=8, justify="right")

    for i, entry in enumerate(rankings[:top_n], 1):
        row = [
            _rank_label(i),
            _score_style(entry.score),
            entry.species_name or entry.species_id,
            " / ".join(entry.moveset) or "-",
            entry.matchups[0].opponent if entry.matchups else "-",
            entry.counters[0].opponent if entry.counters else "-",
        ]
        if show_spread:
            row.append(f"{entry.std_dev:.1f}" if isinstance(entry, ConsistencyEntry) else "-")
        table.add_row(*row)

    if len(rankings) > top_n:
        table.add_row(
            "...",
            "",
            f"[dim]and {len(rankings) - top_n} more[/dim]",
            "",
            "",
            "",
            *([""] if show_spread else []),
        )

    return table


def print_rankings(rankings: list[RankingEntry], title: str, top_n: int = 20) -> None:
    """Print a category's final rankings."""
    console.print(create_rankings_table(rankings, title, top_n))


class ConsoleEventHandler:
    """Event handler rendering progress bars and final tables with Rich."""

    def __init__(self, top_n: int = 20, output: Console | None = None):
        self.top_n = top_n
        self.console = output or console
        self.progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=self.console,
            transient=True,
        )
        self._tasks: dict[str, TaskID] = {}

    def on_progress(self, current: int, total: int, message: str, **kwargs: Any) -> None:
        scenario = kwargs.get("scenario")
        if scenario is None:
            self.console.print(f"[dim]{message}[/dim]")
            return
        task_id = self._tasks.get(scenario)
        if task_id is None:
            self.progress.start()
            task_id = self.progress.add_task(scenario, total=total)
            self._tasks[scenario] = task_id
        self.progress.update(task_id, completed=current, total=total)

    def on_roster_ready(self, candidates: list, targets: list, **kwargs: Any) -> None:
        self.console.print(
            f"[cyan]Roster:[/cyan] {len(candidates)} contestants, {len(targets)} targets"
        )

    def on_scenario_start(self, scenario: Scenario, index: int, total: int, **kwargs: Any) -> None:
        self.console.print(f"[bold]Ranking {scenario.slug}[/bold] [dim]({index + 1}/{total})[/dim]")

    def on_scenario_complete(
        self,
        scenario: Scenario,
        rankings: list[RankingEntry],
        **kwargs: Any
    ) -> None:
        task_id = self._tasks.pop(scenario.slug, None)
        if task_id is not None:
            self.progress.remove_task(task_id)
        if not self._tasks:
            self.progress.stop()
        self.console.print(create_rankings_table(rankings, scenario.slug.title(), self.top_n))

    def on_overall_complete(
        self,
        overall: list[OverallEntry],
        consistency: list[OverallEntry] | None,
        **kwargs: Any
    ) -> None:
        self.console.print(create_rankings_table(overall, "Overall", self.top_n))
        if consistency:
            self.console.print(create_rankings_table(consistency, "Consistency", self.top_n))

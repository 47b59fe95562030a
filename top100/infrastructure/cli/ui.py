"""UI helpers for CLI interaction.

Presentation of run summaries, leaderboard previews and single match
results, kept apart from the use cases that produce them.
"""

from collections.abc import Callable, Sequence
import functools
from typing import ParamSpec, TypeVar

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
import typer

from top100.application.use_cases import RankingRunResult
from top100.config import get_logger
from top100.domain.entities import LocalTrackMetadata, MatchResult, RankedTrack

console = Console()
logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

PREVIEW_SIZE = 10


def command_error_handler(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    Unexpected exceptions are logged with their traceback, shown to the user
    as a single red line and converted into exit code 1.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                raise

            except typer.Abort:
                logger.info(f"Operation {operation} aborted by user")
                raise

            except Exception as e:
                logger.exception(f"Error during {operation}")
                console.print(
                    f"\n[bold red]✗ Error during {operation}:[/bold red] {escape(str(e))}"
                )
                raise typer.Exit(code=1) from e

    return wrapper


def display_run_summary(result: RankingRunResult, dry_run: bool = False) -> None:
    """Show the counters of a leaderboard run in a panel."""
    summary_table = Table(show_header=False, box=None, padding=(0, 2))
    summary_table.add_column(style="cyan")
    summary_table.add_column(style="green bold")

    summary_table.add_row("Files Processed", str(result.total_files))
    summary_table.add_row("Matched", str(result.matched))
    summary_table.add_row("Unmatched", str(result.unmatched))
    summary_table.add_row("Eligible", str(result.eligible))
    summary_table.add_row("Ranked", str(len(result.ranked)))
    summary_table.add_row("Avg Popularity", f"{result.average_popularity:.1f}")
    if result.errors:
        summary_table.add_row("Errors", f"[red]{len(result.errors)}[/red]")
    if result.csv_path:
        summary_table.add_row("Report", escape(str(result.csv_path)))
    elif dry_run:
        summary_table.add_row("Report", "[dim]skipped (dry run)[/dim]")

    console.print(
        Panel(
            summary_table,
            title=f"[bold bright_blue]Top 100 for {result.label_month}[/bold bright_blue]",
            border_style="blue",
        )
    )


def display_top_tracks(tracks: Sequence[RankedTrack], limit: int = PREVIEW_SIZE) -> None:
    """Preview the head of the leaderboard."""
    if not tracks:
        console.print("[yellow]No eligible tracks to rank[/yellow]")
        return

    table = Table(title=f"Top {min(limit, len(tracks))}")
    table.add_column("Rank", style="dim", justify="right")
    table.add_column("Artist", style="cyan")
    table.add_column("Track", style="green")
    table.add_column("Popularity", style="yellow", justify="right")
    table.add_column("Released", style="dim")

    for track in tracks[:limit]:
        table.add_row(
            str(track.rank),
            escape(track.artist),
            escape(track.title),
            str(track.popularity),
            track.release_date or "—",
        )

    console.print(table)


def display_match_result(metadata: LocalTrackMetadata, result: MatchResult) -> None:
    """Show how one local track resolved against the catalog."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column()

    status_style = "green" if result.is_match else "red"
    table.add_row("Input", escape(metadata.label))
    table.add_row("Status", f"[{status_style}]{result.status}[/{status_style}]")
    table.add_row("Matched Via", str(result.matched_via))
    table.add_row("Confidence", f"{result.match_confidence:.3f}")
    table.add_row("Candidates", str(result.candidates_found))

    if result.is_match:
        table.add_row("Catalog ID", result.catalog_id or "")
        table.add_row("Artist", escape(result.artist or ""))
        table.add_row("Title", escape(result.title or ""))
        table.add_row("Album", escape(result.album_name or "—"))
        table.add_row("Released", result.release_date or "—")
        table.add_row("Popularity", str(result.popularity))
        if result.catalog_url:
            table.add_row("URL", result.catalog_url)
    elif result.best_candidate_label:
        table.add_row("Best Candidate", escape(result.best_candidate_label))

    console.print(table)

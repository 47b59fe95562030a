"""Top 100 CLI - Main application entry point and app structure."""

from importlib.metadata import version
from pathlib import Path
from typing import Annotated

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
import typer

from top100.application.services import TrackMatcher
from top100.application.use_cases import (
    GenerateRankingsCommand,
    GenerateRankingsUseCase,
)
from top100.config import (
    Settings,
    get_logger,
    load_settings,
    log_startup_info,
    setup_loguru_logger,
)
from top100.domain.entities import LocalTrackMetadata
from top100.domain.ranking import RankingEngine
from top100.infrastructure.cli.ui import (
    command_error_handler,
    display_match_result,
    display_run_summary,
    display_top_tracks,
)
from top100.infrastructure.connectors import SpotifyCatalogConnector
from top100.infrastructure.services import CsvReportWriter, FileScanner, TagReader

VERSION = version("top100")

console = Console(width=80)
logger = get_logger(__name__)

app = typer.Typer(
    help=f"🎵 Top 100 v{VERSION} - Monthly catalog popularity rankings",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)


def build_matcher(settings: Settings) -> TrackMatcher:
    connector = SpotifyCatalogConnector.from_settings(settings)
    return TrackMatcher.from_settings(connector, settings)


def build_use_case(settings: Settings) -> GenerateRankingsUseCase:
    return GenerateRankingsUseCase(
        scanner=FileScanner.from_settings(settings),
        tag_reader=TagReader(),
        matcher=build_matcher(settings),
        ranking_engine=RankingEngine(top_n=settings.ranking.top_n),
        report_writer=CsvReportWriter.from_settings(settings),
        eligibility_months=settings.ranking.eligibility_months,
    )


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj["settings"]


@app.command(name="rank", rich_help_panel="🏆 Rankings")
@command_error_handler
def rank_command(
    ctx: typer.Context,
    month: Annotated[
        str | None,
        typer.Option("--month", "-m", help="Label month as YYYY-MM (default: current month)"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Match and rank without writing the CSV report"),
    ] = False,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-l", min=1, help="Only process the first N files"),
    ] = None,
    uploads: Annotated[
        Path | None,
        typer.Option("--uploads", help="Uploads directory to scan"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Directory for CSV reports"),
    ] = None,
) -> None:
    """Scan uploads, match them against Spotify and write the monthly Top 100."""
    settings = _settings(ctx)
    if uploads is not None:
        settings = settings.model_copy(
            update={"scan": settings.scan.model_copy(update={"uploads_path": uploads})}
        )
    if output_dir is not None:
        settings = settings.model_copy(
            update={"report": settings.report.model_copy(update={"output_dir": output_dir})}
        )

    command = (
        GenerateRankingsCommand(label_month=month, dry_run=dry_run, limit=limit)
        if month
        else GenerateRankingsCommand(dry_run=dry_run, limit=limit)
    )

    with console.status("[bold blue]Ranking tracks...[/bold blue]"):
        result = build_use_case(settings).execute(command)

    display_run_summary(result, dry_run=dry_run)
    display_top_tracks(result.ranked)


@app.command(name="match", rich_help_panel="🔍 Matching")
@command_error_handler
def match_command(
    ctx: typer.Context,
    artist: Annotated[str, typer.Option("--artist", "-a", help="Artist name")],
    title: Annotated[str, typer.Option("--title", "-t", help="Track title")],
    isrc: Annotated[
        str | None, typer.Option("--isrc", help="ISRC code to try first")
    ] = None,
    duration: Annotated[
        float | None,
        typer.Option("--duration", "-d", min=0, help="Track length in seconds"),
    ] = None,
) -> None:
    """Resolve a single track against the catalog."""
    metadata = LocalTrackMetadata(
        artist=artist, title=title, isrc=isrc, duration_seconds=duration
    )
    result = build_matcher(_settings(ctx)).find_match(metadata)
    display_match_result(metadata, result)


@app.command(name="version", rich_help_panel="⚙️ System")
def version_command() -> None:
    """Show version information."""
    console.print(
        f"[bold bright_blue]🎵 Top 100[/bold bright_blue] [dim]v{VERSION}[/dim]"
    )


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize Top 100 CLI."""
    try:
        settings = load_settings()
    except ValidationError as e:
        console.print(f"[bold red]✗ Invalid configuration:[/bold red]\n{escape(str(e))}")
        raise typer.Exit(code=2) from e

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["settings"] = settings

    setup_loguru_logger(settings, verbose)
    log_startup_info(settings)


def main() -> int:
    """Application entry point."""
    try:
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1

"""Command-line interface for Sponsor Watch."""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional
import click
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn

from sponsor_watch.config.settings import AppConfig
from sponsor_watch.config.schedules import load_schedule_definitions
from sponsor_watch.core.exceptions import SponsorWatchError, ValidationError
from sponsor_watch.core.models import Schedule, RunSummary, DetectionResult
from sponsor_watch.services.youtube import YouTubeService
from sponsor_watch.services.report import ReportFormatter, format_locale_date, LINK_SEPARATOR
from sponsor_watch.scheduler.engine import SponsorWatchEngine
from sponsor_watch.utils.logging import setup_logging


console = Console()


@click.group()
@click.pass_context
def cli(ctx):
    """Sponsor Watch - Scheduled sponsored-content reports for YouTube channels."""
    try:
        config = AppConfig.load_config()
        ctx.ensure_object(dict)
        ctx.obj['config'] = config
    except Exception as e:
        console.print(f"[red]Failed to load configuration: {e}[/red]")
        sys.exit(1)


def _require_valid(config: AppConfig, require_mail: bool = True) -> None:
    errors = config.validate_config(require_mail=require_mail)
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  • {error}")
        sys.exit(1)


def _load_schedules(engine: SponsorWatchEngine, schedule_file: Path) -> List[Schedule]:
    """Create every schedule of the file in the engine's store."""
    try:
        definitions = load_schedule_definitions(schedule_file)
    except SponsorWatchError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    schedules = []
    for index, definition in enumerate(definitions, start=1):
        try:
            schedules.append(engine.store.create(definition))
        except ValidationError as e:
            label = definition.get("name") or f"#{index}"
            console.print(f"[red]Invalid schedule {label}: {e.message}[/red]")
            sys.exit(1)
    return schedules


async def _wait_forever() -> None:
    await asyncio.Event().wait()


def _select(schedules: List[Schedule], name: Optional[str]) -> List[Schedule]:
    if not name:
        return schedules
    selected = [s for s in schedules if s.name == name]
    if not selected:
        console.print(f"[red]No schedule named '{name}'[/red]")
        sys.exit(1)
    return selected


@cli.command()
@click.pass_context
@click.argument('schedule_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def serve(ctx, schedule_file: Path):
    """Install triggers for every schedule in SCHEDULE_FILE and run until interrupted."""
    config = ctx.obj['config']
    _require_valid(config)

    if not config.scheduler.enabled:
        console.print("[yellow]Scheduler is disabled in configuration[/yellow]")
        return

    async def run_service():
        logger = setup_logging(config.logging)
        engine = SponsorWatchEngine(config, logger=logger)
        _load_schedules(engine, schedule_file)
        display_schedules(engine)

        engine.start()
        console.print(f"[green]Scheduler started ({config.scheduler.timezone})[/green]")
        console.print("[dim]Press Ctrl+C to stop[/dim]\n")
        try:
            await _wait_forever()
        finally:
            await engine.shutdown(wait_for_runs=False)

    try:
        asyncio.run(run_service())
    except KeyboardInterrupt:
        console.print("\n[yellow]Scheduler stopped by user[/yellow]")


@cli.command()
@click.pass_context
@click.argument('schedule_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--name', '-n', default=None, help='Only run the schedule with this name')
def run(ctx, schedule_file: Path, name: Optional[str]):
    """Run schedules from SCHEDULE_FILE now and email their reports."""
    config = ctx.obj['config']
    _require_valid(config)

    async def run_now():
        logger = setup_logging(config.logging)
        engine = SponsorWatchEngine(config, logger=logger)
        try:
            schedules = _select(_load_schedules(engine, schedule_file), name)
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console
            ) as progress:
                task = progress.add_task(f"Analyzing {len(schedules)} schedules...", total=None)
                runs = [engine.run_now(schedule.id) for schedule in schedules]
                summaries = await asyncio.gather(*runs)
                progress.update(task, completed=True)
            display_summaries(summaries)
        finally:
            await engine.shutdown()

    asyncio.run(run_now())


@cli.command()
@click.pass_context
@click.argument('schedule_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--name', '-n', default=None, help='Only preview the schedule with this name')
@click.option('--output', '-o', default=None, type=click.Path(dir_okay=False, path_type=Path),
              help='Write the CSV report to this file')
def preview(ctx, schedule_file: Path, name: Optional[str], output: Optional[Path]):
    """Show sponsored videos for schedules in SCHEDULE_FILE without sending email."""
    config = ctx.obj['config']
    _require_valid(config, require_mail=False)

    async def run_preview():
        logger = setup_logging(config.logging)
        engine = SponsorWatchEngine(config, logger=logger)
        try:
            schedules = _select(_load_schedules(engine, schedule_file), name)
            all_results: List[DetectionResult] = []
            for schedule in schedules:
                results, summary = await engine.pipeline.collect(schedule.snapshot())
                all_results.extend(results)
                display_detections(schedule, results, summary, config.scheduler.tzinfo)
        finally:
            await engine.shutdown()

        if output:
            report = ReportFormatter(config.scheduler.tzinfo).format(all_results)
            output.write_text(report, encoding="utf-8")
            console.print(f"[green]Report written to {output}[/green]")

    asyncio.run(run_preview())


@cli.command(name="list")
@click.pass_context
@click.argument('schedule_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def list_schedules(ctx, schedule_file: Path):
    """Show schedules in SCHEDULE_FILE with their cadence and next fire time."""
    config = ctx.obj['config']
    _require_valid(config, require_mail=False)

    engine = SponsorWatchEngine(config)
    _load_schedules(engine, schedule_file)
    display_schedules(engine)
    engine.triggers.shutdown()


@cli.command()
@click.pass_context
@click.argument('api_key')
def check_key(ctx, api_key: str):
    """Verify that API_KEY is accepted by the YouTube Data API."""
    config = ctx.obj['config']

    async def verify():
        async with YouTubeService(config.youtube) as youtube:
            return await youtube.verify_api_key(api_key)

    valid, message = asyncio.run(verify())
    if valid:
        console.print("[green]✓ API key is valid[/green]")
    else:
        console.print(f"[red]✗ API key rejected: {message}[/red]")
        sys.exit(1)


def display_schedules(engine: SponsorWatchEngine):
    """Display loaded schedules in a table."""
    schedules = engine.store.list()
    if not schedules:
        console.print("[yellow]No schedules loaded[/yellow]")
        return

    table = Table(title="Schedules")
    table.add_column("Name", style="cyan")
    table.add_column("Channels", justify="right")
    table.add_column("Weeks", justify="right")
    table.add_column("Cadence")
    table.add_column("Next run")
    table.add_column("Recipients", justify="right")
    table.add_column("Active", justify="center")

    for schedule in schedules:
        binding = engine.triggers.get_binding(schedule.id)
        next_run = engine.triggers.next_fire_time(schedule.id)
        table.add_row(
            schedule.name,
            str(len(schedule.channels)),
            str(schedule.weeks),
            binding.cadence.describe() if binding else "-",
            next_run.strftime("%Y-%m-%d %H:%M %Z") if next_run else "-",
            str(len(schedule.emails)),
            "[green]✓[/green]" if schedule.active else "[red]✗[/red]"
        )

    console.print(table)


def display_detections(schedule: Schedule, results: List[DetectionResult], summary: RunSummary, tz=None):
    """Display sponsored videos found for one schedule."""
    table = Table(title=f"{schedule.name}: {summary.count} sponsored videos")
    table.add_column("Channel", style="cyan")
    table.add_column("Title")
    table.add_column("Published", justify="right")
    table.add_column("Links")

    for result in results:
        table.add_row(
            result.channel,
            result.title,
            format_locale_date(result.published_at, tz),
            LINK_SEPARATOR.join(result.links) if result.links else "-"
        )

    console.print(table)
    for channel in summary.skipped_channels:
        console.print(f"[yellow]Channel not found: {channel}[/yellow]")
    for channel, error in summary.failed_channels.items():
        console.print(f"[red]Channel failed: {channel}: {error}[/red]")


def display_summaries(summaries: List[RunSummary]):
    """Display run summaries in a table."""
    table = Table(title="Run Results")
    table.add_column("Schedule", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Sponsored", justify="right")
    table.add_column("Channels", justify="right")
    table.add_column("Failed channels", justify="right")
    table.add_column("Error")

    successful = 0
    for summary in summaries:
        if summary.is_successful:
            status = "[green]✓[/green]"
            successful += 1
        else:
            status = "[red]✗[/red]"
        table.add_row(
            summary.schedule_name,
            status,
            str(summary.count),
            str(summary.channels_processed),
            str(len(summary.failed_channels)) if summary.failed_channels else "-",
            summary.error or ""
        )

    console.print(table)
    console.print(f"\n[bold]Summary:[/bold] {successful} delivered, {len(summaries) - successful} failed")


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

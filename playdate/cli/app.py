"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig
from ..domain.date_window import DateWindow, parse_date
from ..domain.exceptions import NotFoundError, PlaydateError
from ..domain.models import SlotIntensity
from ..domain.session import PlaydateSession
from ..adapters import InMemoryStore, JsonFileStore, RestKeyValueStore
from ..services.codec import CHILDREN_KEY, DATES_KEY
from ..services.sync_coordinator import RemoteStoreProtocol, SyncCoordinator

app = typer.Typer(
    name="playdate",
    help="Mark children's availability and find play date slots that suit everyone",
    add_completion=False
)

console = Console()

T = TypeVar("T")

INTENSITY_STYLES = {
    SlotIntensity.EMPTY: "dim",
    SlotIntensity.PARTIAL: "yellow",
    SlotIntensity.FULL: "bold green",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_store(config: AppConfig) -> RemoteStoreProtocol:
    store_config = config.store
    if store_config.backend == "memory":
        return InMemoryStore()
    if store_config.backend == "rest":
        return RestKeyValueStore(
            base_url=store_config.url,
            table=store_config.table,
            api_key=store_config.api_key,
            timeout=store_config.timeout_seconds,
        )
    return JsonFileStore(store_config.path)


def _build_session(config: AppConfig) -> PlaydateSession:
    return PlaydateSession(
        grid=config.grid.build(),
        require_phone=config.require_phone,
        thresholds=config.intensity.build(),
    )


def _run(
    ctx: typer.Context,
    operation: Callable[[PlaydateSession], T],
    save: Sequence[str] = ()
) -> T:
    """
    Load the shared state, apply one operation and save what it touched.

    Domain and persistence errors are printed and end the command with exit code 1.
    """
    config: AppConfig = ctx.obj

    async def scope() -> T:
        session = _build_session(config)
        coordinator = SyncCoordinator(
            session,
            _build_store(config),
            status_reset_seconds=config.save_status_seconds,
            window_days=config.window_days,
            timezone=config.timezone,
            poll_interval_seconds=config.store.poll_interval_seconds,
        )
        try:
            async with coordinator:
                result = operation(session)
                for collection in save:
                    await coordinator.save(collection)
                return result
        finally:
            session.close()

    try:
        return asyncio.run(scope())
    except PlaydateError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Shared options for all commands.
    """
    _configure_logging(verbose)
    try:
        ctx.obj = AppConfig.load(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def add(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Child's name")],
    phone: Annotated[Optional[str], typer.Option("--phone", "-p", help="Parent's phone number")] = None,
):
    """
    Add a child.
    """
    participant = _run(ctx, lambda session: session.participants.add(name, phone), save=[CHILDREN_KEY])
    console.print(f"[green]✓ Added {participant.name}[/green] [dim]({participant.id})[/dim]")


@app.command()
def edit(
    ctx: typer.Context,
    participant: Annotated[str, typer.Argument(help="Name or id of the child")],
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone", "-p", help="New phone number")] = None,
):
    """
    Rename a child or change the phone number.
    """
    def operation(session: PlaydateSession):
        current = session.participants.resolve(participant)
        return session.participants.update(
            current.id,
            name if name is not None else current.name,
            phone if phone is not None else current.phone,
        )

    updated = _run(ctx, operation, save=[CHILDREN_KEY])
    console.print(f"[green]✓ Updated {updated.name}[/green]")


@app.command()
def remove(
    ctx: typer.Context,
    participant: Annotated[str, typer.Argument(help="Name or id of the child")],
):
    """
    Remove a child and all of their availability.
    """
    def operation(session: PlaydateSession) -> Optional[str]:
        try:
            found = session.participants.resolve(participant)
        except NotFoundError:
            return None
        session.participants.remove(found.id)
        return found.name

    removed = _run(ctx, operation, save=[CHILDREN_KEY])
    if removed is None:
        console.print(f"[yellow]No child named '{participant}', nothing removed.[/yellow]")
    else:
        console.print(f"[green]✓ Removed {removed}[/green]")


@app.command("list")
def list_participants(ctx: typer.Context):
    """
    List all children.
    """
    participants = _run(ctx, lambda session: session.participants.all())

    if not participants:
        console.print("[yellow]No children added yet.[/yellow]")
        return

    table = Table(title="Children", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold yellow")
    table.add_column("Phone", style="dim")
    table.add_column("Slots", justify="right")
    table.add_column("Id", style="dim")

    for p in participants:
        table.add_row(p.name, p.phone or "–", str(len(p.availability)), p.id)

    console.print()
    console.print(table)
    console.print()


@app.command()
def toggle(
    ctx: typer.Context,
    participant: Annotated[str, typer.Argument(help="Name or id of the child")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Argument(help="Time slot (HH:MM)")],
):
    """
    Mark or unmark one half-hour slot.
    """
    def operation(session: PlaydateSession):
        parse_date(date)
        session.grid.index_of(time)
        found = session.participants.resolve(participant)
        return found.name, session.participants.toggle_slot(found.id, date, time)

    name, available = _run(ctx, operation, save=[CHILDREN_KEY])
    state = "[green]available[/green]" if available else "[dim]unavailable[/dim]"
    console.print(f"{name} is now {state} on {date} at {time}")


@app.command("toggle-day")
def toggle_day(
    ctx: typer.Context,
    participant: Annotated[str, typer.Argument(help="Name or id of the child")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
):
    """
    Fill a whole day, or clear it if it is already full.
    """
    def operation(session: PlaydateSession):
        parse_date(date)
        found = session.participants.resolve(participant)
        return found.name, session.participants.toggle_all_slots_for_date(found.id, date)

    name, filled = _run(ctx, operation, save=[CHILDREN_KEY])
    verb = "filled" if filled else "cleared"
    console.print(f"{name}: {date} {verb}")


@app.command()
def dates(
    ctx: typer.Context,
    start: Annotated[Optional[str], typer.Option("--start", help="First date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Last date (YYYY-MM-DD)")] = None,
    days: Annotated[Optional[int], typer.Option("--days", "-d", help="Number of days from --start")] = None,
):
    """
    Show the date window, or replace it with --start and --end/--days.
    """
    if start is None and (end is not None or days is not None):
        console.print("[red]Error: --end and --days need --start.[/red]")
        raise typer.Exit(1)

    def operation(session: PlaydateSession) -> DateWindow:
        if start is not None:
            if end is not None:
                window = DateWindow.from_range(start, end)
            else:
                window = DateWindow.from_start(start, days or ctx.obj.window_days)
            session.set_window(window)
        return session.window

    window = _run(ctx, operation, save=[DATES_KEY] if start is not None else [])
    console.print(f"[bold]Dates:[/bold] {window.start} – {window.end} ({len(window)} days)")


@app.command()
def grid(
    ctx: typer.Context,
    participant: Annotated[Optional[str], typer.Option("--for", help="Highlight one child's own slots")] = None,
):
    """
    Show who is available in every slot of the date window.
    """
    def operation(session: PlaydateSession):
        highlight = session.participants.resolve(participant) if participant else None
        return session.window, session.aggregation.grid(), highlight

    window, rows, highlight = _run(ctx, operation)

    table = Table(title="Availability", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="bold")
    for date in window:
        table.add_column(date, justify="center", min_width=12)

    for row in rows:
        cells = []
        for cell in row:
            text = cell.names or "·"
            style = INTENSITY_STYLES[cell.intensity]
            if highlight is not None and highlight.is_available(cell.date, cell.time):
                style += " underline"
            cells.append(f"[{style}]{text}[/{style}]")
        table.add_row(row[0].display if row else "", *cells)

    console.print()
    console.print(table)
    console.print()


@app.command()
def top(
    ctx: typer.Context,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Number of slots to show")] = None,
):
    """
    Show the best times, most children first.
    """
    if limit is None:
        limit = ctx.obj.top_slots_limit
    slots = _run(ctx, lambda session: session.aggregation.top_slots(limit))

    if not slots:
        console.print("[yellow]No availability marked in this date window yet.[/yellow]")
        return

    console.print("[bold green]Top available times:[/bold green]\n")
    for slot in slots:
        console.print(f"  [bold]{slot.date} {slot.display}[/bold] – {slot.names}")
    console.print()


@app.command("range")
def meeting_range(
    ctx: typer.Context,
    participant: Annotated[str, typer.Argument(help="Name or id of your child")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Argument(help="Time slot (HH:MM)")],
):
    """
    Propose the longest window around a slot shared with the other children.
    """
    def operation(session: PlaydateSession):
        found = session.participants.resolve(participant)
        return session.ranges.detect(date, time, participant_id=found.id)

    proposal = _run(ctx, operation)

    if proposal is None:
        console.print("[yellow]Nothing to propose for this slot.[/yellow]")
        return

    console.print(f"[bold green]✓ {proposal.format_display()}[/bold green]")
    console.print(f"   With: {proposal.names}")
    if proposal.phones:
        console.print(f"   Contact: {', '.join(proposal.phones)}")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]playdate[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

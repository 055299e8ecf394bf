"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated, Tuple

import pendulum
import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SlotboardError
from ..domain.models import TimeStatus
from ..domain.time_arithmetic import to_time_string
from ..adapters.json_booking_source import JsonBookingSource
from ..services.schedule_board import ScheduleBoardService

app = typer.Typer(
    name="slotboard",
    help="Inspect the booking timeline and slot utilization",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
BookingsOption = Annotated[
    Optional[Path],
    typer.Option("--bookings", "-b", help="Bookings JSON export. Overrides bookings_file from the config."),
]

STATUS_STYLES = {
    TimeStatus.PAST: "dim",
    TimeStatus.NOW: "bold green",
    TimeStatus.SOON: "yellow",
    TimeStatus.UPCOMING: "cyan",
}


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Slot-grid timeline and utilization tools for the booking console.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_file: Optional[Path]) -> Tuple[AppConfig, Optional[Path]]:
    """
    Load the config file; fall back to defaults when no file was given and
    none exists at the default location.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file), config_file

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path), default_path
    return AppConfig(), None


def _build_service(config_file: Optional[Path], bookings_file: Optional[Path]) -> ScheduleBoardService:
    config, config_path = _load_config(config_file)
    bookings_path = bookings_file or config.resolve_bookings_path(config_path)

    return ScheduleBoardService(
        booking_source=JsonBookingSource(bookings_path),
        slot_config=config.to_slot_config(),
        day_metrics=config.layout.day.to_metrics(),
        week_metrics=config.layout.week.to_metrics(),
    )


def _parse_date(value: Optional[str], label: str = "Datum") -> pendulum.Date:
    if value is None:
        return pendulum.today().date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except ValueError as e:
        console.print(f"[red]Fehler beim Parsen von {label}: {e}[/red]")
        raise typer.Exit(1)


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Fehler:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def day(
    date: Annotated[Optional[str], typer.Argument(help="Day to show (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: ConfigOption = None,
    bookings_file: BookingsOption = None,
):
    """
    Show the day timeline with block geometry.
    """
    target = _parse_date(date)

    try:
        service = _build_service(config_file, bookings_file)
        view = asyncio.run(service.day_view(target, pendulum.now()))
    except (FileNotFoundError, ValueError, SlotboardError) as e:
        _fail(e)

    table = Table(
        title=f"Tagesansicht {target.to_date_string()}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Start", style="bold")
    table.add_column("Ende")
    table.add_column("Leistung")
    table.add_column("Status")
    table.add_column("Top (px)", justify="right")
    table.add_column("Höhe (px)", justify="right")

    bookings = {b.id: b for b in view.bookings}
    for block in view.blocks:
        booking = bookings[block.booking_id]
        status = view.statuses[booking.id]
        label = f"{status.value} (ausstehend)" if booking.is_pending else status.value
        end_label = to_time_string(block.effective_end_minutes)
        if block.wrapped:
            end_label += " ↵"
        table.add_row(
            booking.start_time,
            end_label,
            booking.service,
            f"[{STATUS_STYLES[status]}]{label}[/{STATUS_STYLES[status]}]",
            f"{block.top_offset:.1f}",
            f"{block.height_pixels:.1f}",
        )

    console.print()
    if not view.blocks:
        console.print("[yellow]⚠ Keine Termine an diesem Tag.[/yellow]")
    else:
        console.print(table)
    console.print(f"   Zeitleiste: {view.timeline_height:.0f} px, Startposition {view.landing_offset:.0f} px")
    if view.now_offset is not None:
        console.print(f"   Jetzt-Markierung: {view.now_offset:.1f} px")
    console.print(f"   Verbleibend: {view.remaining}")
    console.print()


@app.command()
def week(
    date: Annotated[Optional[str], typer.Argument(help="Any day of the week (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: ConfigOption = None,
    bookings_file: BookingsOption = None,
):
    """
    Show the compressed week timeline, one column per day.
    """
    target = _parse_date(date)

    try:
        service = _build_service(config_file, bookings_file)
        view = asyncio.run(service.week_view(target, pendulum.now()))
    except (FileNotFoundError, ValueError, SlotboardError) as e:
        _fail(e)

    table = Table(
        title=f"Woche {view.days[0].to_date_string()} – {view.days[-1].to_date_string()}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Tag", style="bold")
    table.add_column("Termine", justify="right")
    table.add_column("Blöcke (Start @ Top/Höhe)")

    for column_day in view.days:
        blocks = view.columns[column_day]
        table.add_row(
            column_day.format("ddd DD.MM."),
            str(len(blocks)),
            ", ".join(
                f"{to_time_string(b.start_minutes)} @ {b.top_offset:.0f}/{b.height_pixels:.0f}"
                for b in blocks
            ) or "–",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def month(
    year_month: Annotated[Optional[str], typer.Argument(help="Month to show (YYYY-MM). Defaults to the current month.")] = None,
    config_file: ConfigOption = None,
    bookings_file: BookingsOption = None,
):
    """
    Show the 6-row month grid; days with bookings are marked with *.
    """
    today = pendulum.today().date()
    try:
        anchor = pendulum.from_format(year_month, "YYYY-MM").date() if year_month else today
    except ValueError as e:
        console.print(f"[red]Fehler beim Parsen des Monats: {e}[/red]")
        raise typer.Exit(1)

    try:
        service = _build_service(config_file, bookings_file)
        cells = asyncio.run(service.month_view(anchor.year, anchor.month, today=today))
    except (FileNotFoundError, ValueError, SlotboardError) as e:
        _fail(e)

    table = Table(title=anchor.format("MMMM YYYY"), show_header=True, header_style="bold cyan")
    for name in ("So", "Mo", "Di", "Mi", "Do", "Fr", "Sa"):
        table.add_column(name, justify="right")

    for row_start in range(0, len(cells), 7):
        row = []
        for cell in cells[row_start:row_start + 7]:
            text = f"{cell.day}{'*' if cell.has_bookings else ''}"
            if cell.is_today:
                text = f"[bold green]{text}[/bold green]"
            elif not cell.in_month:
                text = f"[dim]{text}[/dim]"
            row.append(text)
        table.add_row(*row)

    console.print()
    console.print(table)
    console.print()


@app.command()
def report(
    date: Annotated[Optional[str], typer.Option("--date", help="Single day (YYYY-MM-DD)")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Range start (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Range end (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
    bookings_file: BookingsOption = None,
):
    """
    Report grid utilization: service time vs. booked (slot-aligned) time.

    Examples:

        slotboard report
        slotboard report --date 2024-06-12
        slotboard report --start 2024-06-01 --end 2024-06-30
    """
    if date and (start or end):
        console.print("[red]Fehler: --date kann nicht mit --start/--end kombiniert werden.[/red]")
        raise typer.Exit(1)

    single = _parse_date(date) if date else None
    range_start = _parse_date(start, "Startdatum") if start else None
    range_end = _parse_date(end, "Enddatum") if end else None

    if range_start and range_end and range_end < range_start:
        console.print("[red]Fehler: Enddatum liegt vor dem Startdatum.[/red]")
        raise typer.Exit(1)

    try:
        service = _build_service(config_file, bookings_file)
        result = asyncio.run(
            service.utilization(date=single, start_date=range_start, end_date=range_end)
        )
    except (FileNotFoundError, ValueError, SlotboardError) as e:
        _fail(e)

    table = Table(
        title=f"Auslastung (Slot {result.slot_duration} Min.)",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Datum", style="bold")
    table.add_column("Zeit")
    table.add_column("Leistung")
    table.add_column("Typ")
    table.add_column("Dauer", justify="right")
    table.add_column("Gebucht", justify="right")
    table.add_column("Slots", justify="right")
    table.add_column("Verlust", justify="right")

    for day_key, records in result.bookings_by_date.items():
        for record in records:
            table.add_row(
                day_key,
                f"{record.start_time}–{record.end_time}",
                record.service,
                record.kind,
                str(record.service_duration_minutes),
                str(record.booked_duration_minutes),
                str(record.slots_used),
                str(record.waste_minutes),
            )

    console.print()
    if result.records:
        console.print(table)
    else:
        console.print("[yellow]⚠ Keine Buchungen im gewählten Zeitraum.[/yellow]")

    console.print(Panel.fit(
        f"[bold]Buchungen:[/bold] {result.total_bookings}\n"
        f"[bold]Leistungszeit:[/bold] {result.total_service_duration} Min.\n"
        f"[bold]Gebuchte Zeit:[/bold] {result.total_booked_duration} Min.\n"
        f"[bold]Verlust:[/bold] {result.total_waste} Min. ({result.waste_percentage:.1f}%)\n"
        f"[bold]Ø Verlust je Buchung:[/bold] {result.average_waste_per_booking:.1f} Min.",
        title="Zusammenfassung"
    ))
    console.print()


@app.command()
def approve(
    booking_id: Annotated[str, typer.Argument(help="Id of the pending booking")],
    config_file: ConfigOption = None,
    bookings_file: BookingsOption = None,
):
    """
    Preview the grid-exact duration and end time a pending booking would
    be stored with on approval.
    """
    try:
        service = _build_service(config_file, bookings_file)
        timing = asyncio.run(service.approve(booking_id))
    except (FileNotFoundError, ValueError, SlotboardError) as e:
        _fail(e)

    console.print(Panel.fit(
        f"[bold]Dauer:[/bold] {timing.duration_minutes} Min.\n"
        f"[bold]Ende:[/bold] {timing.end_time}",
        title=f"✓ Freigabe {booking_id}"
    ))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotboard[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

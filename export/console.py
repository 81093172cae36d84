"""Terminal-Ausgabe der Abfrageergebnisse mit Rich.

Die Funktionen erhalten ein fertiges Ergebnis-Modell und eine Console;
sie rechnen nichts selbst aus.
"""

from typing import Iterable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from analysis.conflicts import Conflict
from analysis.occupancy import RoomOccupancy, UtilizationReport
from analysis.queries import (
    AvailableRooms,
    CapacityStatus,
    CourseRooms,
    RoomAvailability,
    RoomCapacity,
    RoomCapacityEntry,
)
from config.defaults import EXCEPTIONAL_BUCKET, day_name
from config.schema import AppConfig
from data.errors import Diagnostic


def _ranges(ranges) -> str:
    return ", ".join(str(r) for r in ranges) or "—"


def _rate_color(rate: Optional[float], under: float = 20.0, over: float = 80.0) -> str:
    if rate is None:
        return "dim"
    if rate < under:
        return "yellow"
    if rate > over:
        return "red"
    return "green"


# ─── Kurse & Räume ───

def print_course_rooms(result: CourseRooms, console: Console) -> None:
    """Räume eines Kurses als Tabelle (Raum, Tag, Zeiträume)."""
    if not result.found:
        console.print(f"[yellow]Kurs '{escape(result.course)}' nicht gefunden.[/yellow]")
        return

    table = Table(title=f"Räume für {escape(result.course)}", box=box.ROUNDED)
    table.add_column("Raum", style="bold")
    table.add_column("Tag")
    table.add_column("Zeiträume")
    for room, days in result.rooms.items():
        first = True
        for day, ranges in days.items():
            table.add_row(escape(room) if first else "", day_name(day), _ranges(ranges))
            first = False
    console.print(table)


def print_room_capacity(result: RoomCapacity, console: Console) -> None:
    if result.status == CapacityStatus.FOUND:
        console.print(
            f"Raum [bold]{escape(result.room_name)}[/bold]: "
            f"Kapazität [bold green]{result.capacity}[/bold green] Plätze"
        )
    elif result.status == CapacityStatus.CAPACITY_UNPARSEABLE:
        console.print(
            f"[yellow]Kapazität für Raum '{escape(result.room_name)}' nicht lesbar.[/yellow]")
    else:
        console.print(f"[yellow]Raum '{escape(result.room_name)}' nicht gefunden.[/yellow]")


def print_free_intervals(result: RoomAvailability, console: Console) -> None:
    """Freie Zeiträume pro Tag; voll belegte Tage werden rot markiert."""
    if not result.found:
        console.print(f"[yellow]Raum '{escape(result.room)}' nicht gefunden.[/yellow]")
        return

    table = Table(
        title=f"Freie Zeiträume {escape(result.room)} ({result.window})", box=box.ROUNDED)
    table.add_column("Tag", style="bold")
    table.add_column("Frei")
    for day, free in result.free.items():
        cell = _ranges(free) if free else "[red]voll belegt[/red]"
        table.add_row(day_name(day), cell)
    console.print(table)


def print_available_rooms(result: AvailableRooms, console: Console) -> None:
    """Freie Räume nach Gebäude gruppiert, Sonderräume zuletzt."""
    title = f"Freie Räume {day_name(result.day)} {result.window}"
    if not result.buildings:
        console.print(f"[yellow]{title}: keine Räume frei.[/yellow]")
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Gebäude", style="bold")
    table.add_column("Anzahl", justify="right")
    table.add_column("Räume")
    for building, rooms in result.buildings.items():
        label = "Sonderräume" if building == EXCEPTIONAL_BUCKET else building
        table.add_row(escape(label), str(len(rooms)), escape(", ".join(rooms)))
    console.print(table)


def print_capacity_ranking(entries: list[RoomCapacityEntry], console: Console) -> None:
    if not entries:
        console.print("[dim]Keine Räume.[/dim]")
        return
    table = Table(title="Räume nach Kapazität", box=box.SIMPLE)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Raum", style="bold")
    table.add_column("Kapazität", justify="right")
    for i, e in enumerate(entries, start=1):
        table.add_row(str(i), escape(e.room), str(e.capacity))
    console.print(table)


# ─── Konflikte ───

def print_conflicts(conflicts: list[Conflict], console: Console) -> None:
    if not conflicts:
        console.print(Panel(
            "[green]✓ Keine Raumkonflikte gefunden.[/green]",
            title="Konfliktprüfung", border_style="green",
        ))
        return

    table = Table(title=f"Raumkonflikte ({len(conflicts)})", box=box.ROUNDED)
    table.add_column("Tag")
    table.add_column("Raum", style="bold")
    table.add_column("Kurs A")
    table.add_column("Zeit A")
    table.add_column("Kurs B")
    table.add_column("Zeit B")
    table.add_column("Überschneidung", style="red")
    for c in conflicts:
        table.add_row(
            day_name(c.day), escape(c.room),
            escape(f"{c.first.course} ({c.first.type})"), str(c.first.time_range),
            escape(f"{c.second.course} ({c.second.type})"), str(c.second.time_range),
            str(c.overlap),
        )
    console.print(table)


# ─── Auslastung ───

def print_occupancy(
    occupancies: list[RoomOccupancy],
    console: Console,
    config: Optional[AppConfig] = None,
) -> None:
    """Auslastungstabelle; unbekannte Räume werden darunter gemeldet."""
    under = config.utilization.under if config else 20.0
    over = config.utilization.over if config else 80.0
    known = [o for o in occupancies if o.found]

    if known:
        table = Table(title="Raumauslastung", box=box.ROUNDED)
        table.add_column("Raum", style="bold")
        table.add_column("Belegt", justify="right")
        table.add_column("Verfügbar", justify="right")
        table.add_column("Frei", justify="right")
        table.add_column("Quote", justify="right")
        for o in known:
            color = _rate_color(o.rate, under, over)
            rate = f"{o.rate:.1f} %" if o.rate is not None else "n/a"
            table.add_row(
                escape(o.room), str(o.occupied_slots), str(o.available_slots),
                str(o.remaining_slots), f"[{color}]{rate}[/{color}]",
            )
        console.print(table)
    for o in occupancies:
        if not o.found:
            console.print(f"[yellow]Raum '{escape(o.room)}' nicht gefunden.[/yellow]")


def print_utilization(report: UtilizationReport, console: Console) -> None:
    console.print(Panel(
        f"Unterausgelastet (< {report.under_threshold:.0f} %): "
        f"[bold yellow]{len(report.under_utilized)}[/bold yellow]  |  "
        f"Überausgelastet (> {report.over_threshold:.0f} %): "
        f"[bold red]{len(report.over_utilized)}[/bold red]",
        title="Auslastungsanalyse",
        border_style="cyan",
    ))
    for title, rooms, color in (
        ("Unterausgelastete Räume", report.under_utilized, "yellow"),
        ("Überausgelastete Räume", report.over_utilized, "red"),
    ):
        if not rooms:
            continue
        table = Table(title=title, box=box.SIMPLE)
        table.add_column("Raum", style="bold")
        table.add_column("Quote", justify="right", style=color)
        for o in rooms:
            table.add_row(escape(o.room), f"{o.rate:.1f} %")
        console.print(table)
    if report.undefined:
        console.print(f"[dim]Ohne Quote: {escape(', '.join(report.undefined))}[/dim]")


# ─── Diagnosen & Config ───

def print_diagnostics(
    diagnostics: Iterable[Diagnostic],
    console: Console,
    verbose: bool = False,
) -> None:
    """Zusammenfassung der Einlesefehler; mit verbose als vollständige Tabelle."""
    diagnostics = list(diagnostics)
    if not diagnostics:
        return
    if not verbose:
        console.print(
            f"[dim]{len(diagnostics)} Einträge beim Einlesen übersprungen "
            f"(Details mit --debug).[/dim]"
        )
        return

    table = Table(title=f"Diagnosen ({len(diagnostics)})", box=box.SIMPLE)
    table.add_column("Art", style="yellow")
    table.add_column("Quelle")
    table.add_column("Zeile", justify="right")
    table.add_column("Meldung")
    for d in diagnostics:
        table.add_row(
            d.kind.value, escape(d.source or "—"),
            str(d.line_number) if d.line_number is not None else "",
            escape(d.message),
        )
    console.print(table)


def print_config(config: AppConfig, console: Console) -> None:
    table = Table(title="Konfiguration", box=box.ROUNDED)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    table.add_row("Datenverzeichnis", escape(config.data_dir))
    table.add_row("Stundenplandatei", escape(config.timetable_file))
    table.add_row("Fußzeilen-Präfix", escape(config.footer_prefix))
    table.add_row("Öffnungsfenster", str(config.opening_window.as_range()))
    table.add_row("Slot-Größe", f"{config.slot_minutes} min")
    table.add_row("Sonderräume", escape(", ".join(config.exceptional_prefixes)))
    table.add_row(
        "Schwellen",
        f"< {config.utilization.under:.0f} % / > {config.utilization.over:.0f} %",
    )
    table.add_row("Debug", "ja" if config.debug else "nein")
    console.print(table)

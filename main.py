"""Raumplan: Haupt-CLI für Raumabfragen über edt.cru-Stundenpläne.

Verwendung:
  python main.py rooms <kurs>                      Räume eines Kurses
  python main.py capacity <raum>                   Kapazität eines Raums
  python main.py free <raum>                       Freie Zeiträume eines Raums
  python main.py available <tag> <von> <bis>       Freie Räume im Zeitraum
  python main.py conflicts                         Raumkonflikte prüfen
  python main.py occupancy <von> <bis>             Auslastung (Datumsbereich)
  python main.py ranking                           Räume nach Kapazität
  python main.py utilization <von> <bis>           Unter-/überausgelastete Räume
  python main.py ics <kurs> <von> <bis>            iCalendar-Export eines Kurses
  python main.py config show                       Konfiguration anzeigen
  python main.py config init                       Konfigurationsdatei anlegen

Globale Optionen: --data-dir, --config, --debug
"""

import logging
import sys
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from config.defaults import DAY_CODES
from config.manager import ConfigManager
from config.schema import AppConfig
from data.cru_parser import ParseResult
from data.loader import CorpusLoader

console = Console()
logger = logging.getLogger("raumplan")

DATE_FORMATS = ["%Y-%m-%d", "%d/%m/%Y"]


def _setup_logging(debug: bool) -> None:
    """Rich-Logging auf stderr; DEBUG mit --debug, sonst nur Warnungen."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=debug)],
        force=True,
    )


@dataclass
class AppContext:
    """Gemeinsamer Zustand aller Befehle (an ctx.obj gebunden)."""

    config: AppConfig
    data_dir: Path
    debug: bool = False
    loader: Optional[CorpusLoader] = None

    def __post_init__(self) -> None:
        if self.loader is None:
            self.loader = CorpusLoader(
                file_name=self.config.timetable_file,
                footer_prefix=self.config.footer_prefix,
            )

    def load(self) -> ParseResult:
        """Lädt das Datenverzeichnis und zeigt die Diagnosen an."""
        from export.console import print_diagnostics

        if not self.data_dir.is_dir():
            console.print(f"[red]Datenverzeichnis nicht gefunden: {self.data_dir}[/red]")
            sys.exit(1)
        result = self.loader.load(self.data_dir)
        print_diagnostics(result.diagnostics, console, verbose=self.debug)
        return result


def _to_date(value: datetime) -> date:
    return value.date()


def _check_date_range(start: date, end: date) -> None:
    if start > end:
        raise click.BadParameter(
            f"Startdatum {start} liegt nach Enddatum {end}", param_hint="'START'")


# ─── KURSE & RÄUME ────────────────────────────────────────────────────────────

@click.command("rooms")
@click.argument("course")
@click.pass_obj
def cmd_rooms(app: AppContext, course: str):
    """Zeigt alle Räume eines Kurses mit Tag und Uhrzeit."""
    from analysis.queries import find_rooms_for_course
    from export.console import print_course_rooms

    result = find_rooms_for_course(app.load().records, course)
    print_course_rooms(result, console)


@click.command("capacity")
@click.argument("room")
@click.pass_obj
def cmd_capacity(app: AppContext, room: str):
    """Zeigt die maximale Kapazität eines Raums."""
    from analysis.queries import find_room_capacity
    from export.console import print_room_capacity

    loaded = app.load()
    result = find_room_capacity(loaded.records, room, loaded.diagnostics)
    print_room_capacity(result, console)


@click.command("free")
@click.argument("room")
@click.option("--day", "-d", "days", multiple=True,
              type=click.Choice(list(DAY_CODES), case_sensitive=False),
              help="Nur diese Tage (mehrfach möglich).")
@click.option("--full-day", is_flag=True, default=False,
              help="00:00–24:00 statt Öffnungsfenster verwenden.")
@click.pass_obj
def cmd_free(app: AppContext, room: str, days: tuple, full_day: bool):
    """Zeigt die freien Zeiträume eines Raums pro Tag."""
    from analysis.queries import find_free_intervals
    from export.console import print_free_intervals
    from models.timeslot import FULL_DAY

    window = FULL_DAY if full_day else app.config.opening_window.as_range()
    result = find_free_intervals(
        app.load().records, room, window=window, days=days or DAY_CODES)
    print_free_intervals(result, console)


@click.command("available")
@click.argument("day", type=click.Choice(list(DAY_CODES), case_sensitive=False))
@click.argument("start")
@click.argument("end")
@click.pass_obj
def cmd_available(app: AppContext, day: str, start: str, end: str):
    """Zeigt alle Räume, die am Tag DAY von START bis END frei sind."""
    from analysis.queries import find_available_rooms
    from export.console import print_available_rooms

    records = app.load().records
    try:
        result = find_available_rooms(
            records, day, start, end,
            exceptional_prefixes=app.config.exceptional_prefixes,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    print_available_rooms(result, console)


@click.command("ranking")
@click.option("--desc", is_flag=True, default=False, help="Größte Räume zuerst.")
@click.option("--min", "min_capacity", default=0, type=click.IntRange(min=0),
              help="Nur Räume mit mindestens so vielen Plätzen.")
@click.pass_obj
def cmd_ranking(app: AppContext, desc: bool, min_capacity: int):
    """Listet alle Räume sortiert nach Kapazität."""
    from analysis.queries import rank_rooms_by_capacity
    from export.console import print_capacity_ranking

    entries = rank_rooms_by_capacity(
        app.load().records, ascending=not desc, min_capacity=min_capacity)
    print_capacity_ranking(entries, console)


# ─── KONFLIKTE ────────────────────────────────────────────────────────────────

@click.command("conflicts")
@click.option("--day", "-d", "days", multiple=True,
              type=click.Choice(list(DAY_CODES), case_sensitive=False),
              help="Nur diese Tage prüfen (mehrfach möglich).")
@click.option("--start", default=None, help="Beginn des Prüffensters (HH:MM).")
@click.option("--end", default=None, help="Ende des Prüffensters (HH:MM).")
@click.pass_obj
def cmd_conflicts(app: AppContext, days: tuple, start: Optional[str], end: Optional[str]):
    """Prüft, ob ein Raum zur selben Zeit von zwei Kursen belegt ist.

    Beendet sich mit Code 1, wenn Konflikte gefunden wurden.
    """
    from analysis.conflicts import verify_conflicts
    from analysis.intervals import parse_range
    from export.console import print_conflicts

    try:
        window = parse_range(start or "00:00", end or "24:00")
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    records = app.load().records
    conflicts = verify_conflicts(records, days=days or DAY_CODES, window=window)
    logger.debug(f"Prüffenster {window}")
    print_conflicts(conflicts, console)
    sys.exit(1 if conflicts else 0)


# ─── AUSLASTUNG ───────────────────────────────────────────────────────────────

@click.command("occupancy")
@click.argument("start", type=click.DateTime(formats=DATE_FORMATS))
@click.argument("end", type=click.DateTime(formats=DATE_FORMATS))
@click.option("--room", "-r", "rooms", multiple=True,
              help="Nur diese Räume (mehrfach möglich).")
@click.pass_obj
def cmd_occupancy(app: AppContext, start: datetime, end: datetime, rooms: tuple):
    """Berechnet die Raumauslastung von START bis END (inklusive)."""
    from analysis.occupancy import compute_occupancy
    from export.console import print_occupancy

    start_date, end_date = _to_date(start), _to_date(end)
    _check_date_range(start_date, end_date)

    occupancies = compute_occupancy(
        app.load().records, start_date, end_date,
        rooms=rooms or None,
        window=app.config.opening_window.as_range(),
        slot_minutes=app.config.slot_minutes,
    )
    print_occupancy(occupancies, console, app.config)


@click.command("utilization")
@click.argument("start", type=click.DateTime(formats=DATE_FORMATS))
@click.argument("end", type=click.DateTime(formats=DATE_FORMATS))
@click.option("--under", type=click.FloatRange(0, 100), default=None,
              help="Schwelle Unterauslastung in Prozent (Standard aus Config).")
@click.option("--over", type=click.FloatRange(0, 100), default=None,
              help="Schwelle Überauslastung in Prozent (Standard aus Config).")
@click.pass_obj
def cmd_utilization(app: AppContext, start: datetime, end: datetime,
                    under: Optional[float], over: Optional[float]):
    """Listet unter- und überausgelastete Räume von START bis END."""
    from analysis.occupancy import classify_utilization, compute_occupancy
    from export.console import print_utilization

    start_date, end_date = _to_date(start), _to_date(end)
    _check_date_range(start_date, end_date)
    under = app.config.utilization.under if under is None else under
    over = app.config.utilization.over if over is None else over

    occupancies = compute_occupancy(
        app.load().records, start_date, end_date,
        window=app.config.opening_window.as_range(),
        slot_minutes=app.config.slot_minutes,
    )
    try:
        report = classify_utilization(occupancies, under=under, over=over)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'--under/--over'") from e
    print_utilization(report, console)


# ─── ICS ──────────────────────────────────────────────────────────────────────

@click.command("ics")
@click.argument("course")
@click.argument("start", type=click.DateTime(formats=DATE_FORMATS))
@click.argument("end", type=click.DateTime(formats=DATE_FORMATS))
@click.option("--output", "-o", default=None,
              help="Ausgabepfad (Standard: output/<kurs>.ics).")
@click.pass_obj
def cmd_ics(app: AppContext, course: str, start: datetime, end: datetime,
            output: Optional[str]):
    """Exportiert alle Termine eines Kurses als iCalendar-Datei."""
    from analysis.queries import records_for_course
    from export.ics_export import write_calendar

    start_date, end_date = _to_date(start), _to_date(end)
    _check_date_range(start_date, end_date)

    records = records_for_course(app.load().records, course)
    if not records:
        console.print(f"[yellow]Kurs '{escape(course)}' nicht gefunden.[/yellow]")
        sys.exit(1)

    out_path = Path(output) if output else Path("output") / f"{course.upper()}.ics"
    write_calendar(records, start_date, end_date, out_path)
    console.print(f"[green]✓[/green] iCalendar gespeichert: {out_path}")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder anlegen."""


@cmd_config.command("show")
@click.pass_obj
def config_show(app: AppContext):
    """Zeigt die aktuelle Konfiguration an."""
    from export.console import print_config

    print_config(app.config, console)


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False,
              help="Vorhandene Datei überschreiben.")
@click.pass_context
def config_init(ctx: click.Context, force: bool):
    """Legt eine kommentierte Konfigurationsdatei mit Standardwerten an."""
    from config.defaults import default_app_config

    mgr: ConfigManager = ctx.meta["config_manager"]
    if mgr.exists() and not force:
        console.print(
            f"[yellow]Konfiguration existiert bereits: {mgr.path}[/yellow]\n"
            "Verwenden Sie [bold]--force[/bold] zum Überschreiben."
        )
        sys.exit(1)
    path = mgr.save(default_app_config())
    console.print(f"[green]✓[/green] Konfiguration gespeichert: {path}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--data-dir", type=click.Path(path_type=Path), default=None,
              help="Datenverzeichnis (Standard aus Config).")
@click.option("--config", "config_path", type=click.Path(path_type=Path),
              default=None, help="Pfad zur YAML-Konfiguration.")
@click.option("--debug", is_flag=True, default=False,
              help="Debug-Ausgaben und Diagnosen im Detail.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[Path], config_path: Optional[Path],
        debug: bool):
    """Raumabfragen über edt.cru-Stundenpläne.

    Starten Sie mit: python main.py rooms <kurs>
    """
    mgr = ConfigManager(config_path)
    ctx.meta["config_manager"] = mgr
    try:
        config = mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red bold]Konfiguration ungültig:[/red bold]\n{escape(str(e))}")
        sys.exit(1)

    debug = debug or config.debug
    _setup_logging(debug)
    logger.debug(f"Konfiguration: {mgr.path if mgr.exists() else 'Standardwerte'}")

    ctx.obj = AppContext(
        config=config,
        data_dir=data_dir if data_dir is not None else Path(config.data_dir),
        debug=debug,
    )


def main():
    """Einstiegspunkt."""
    cli()


# Befehle registrieren
cli.add_command(cmd_rooms)
cli.add_command(cmd_capacity)
cli.add_command(cmd_free)
cli.add_command(cmd_available)
cli.add_command(cmd_conflicts)
cli.add_command(cmd_occupancy)
cli.add_command(cmd_ranking)
cli.add_command(cmd_utilization)
cli.add_command(cmd_ics)
cli.add_command(cmd_config)


if __name__ == "__main__":
    main()

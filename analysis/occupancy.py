"""Raumauslastung über einen Datumsbereich und Einstufung in unter-/überausgelastet.

Jedes Datum im Bereich wird über day_code_for auf einen Tagescode abgebildet.
Pro Datum erhält jeder Raum die Slot-Anzahl des Öffnungsfensters als
"verfügbar"; jeder passende Termin zählt ceil(Dauer / Slot) als "belegt".
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Callable, Iterable, Optional

from pydantic import BaseModel

from analysis.intervals import slots_in
from analysis.queries import rooms_matching
from config.defaults import day_code_for_date
from models.session import SessionRecord
from models.timeslot import TimeRange

logger = logging.getLogger(__name__)

# Standard-Öffnungsfenster 08:00–20:00
DEFAULT_WINDOW = TimeRange(8 * 60, 20 * 60)
DEFAULT_SLOT_MINUTES = 30


class RoomOccupancy(BaseModel):
    """Belegte vs. verfügbare Slots eines Raums im Datumsbereich.

    occupied_slots ist auf available_slots begrenzt: überlappende Termine in den
    Quelldaten können sonst mehr Belegung ergeben als Slots vorhanden sind.
    """

    room: str
    occupied_slots: int
    available_slots: int
    # Belegung in Prozent; None wenn keine Slots verfügbar (Quote undefiniert)
    rate: Optional[float] = None
    # False: angefragter Raum kommt in keinem Termin vor
    found: bool = True

    @property
    def remaining_slots(self) -> int:
        return self.available_slots - self.occupied_slots

    @property
    def rate_defined(self) -> bool:
        return self.rate is not None


class UtilizationReport(BaseModel):
    """Räume unter- bzw. oberhalb der Auslastungsschwellen."""

    under_threshold: float
    over_threshold: float
    under_utilized: list[RoomOccupancy]
    over_utilized: list[RoomOccupancy]
    undefined: list[str]   # Räume ohne definierte Quote


def iter_dates(start_date: date, end_date: date) -> Iterable[date]:
    """Alle Kalendertage von start_date bis einschließlich end_date."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def occupancy_rate(occupied: int, remaining: int) -> Optional[float]:
    """occupied / (occupied + remaining) in Prozent; None bei 0 verfügbaren Slots."""
    total = occupied + remaining
    if total <= 0:
        return None
    return occupied / total * 100


def compute_occupancy(
    records: Iterable[SessionRecord],
    start_date: date,
    end_date: date,
    rooms: Optional[Iterable[str]] = None,
    window: TimeRange = DEFAULT_WINDOW,
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
    day_code_for: Callable[[date], str] = day_code_for_date,
) -> list[RoomOccupancy]:
    """Berechnet die Auslastung pro Raum im Datumsbereich (inklusive).

    Args:
        records: Alle Termine.
        start_date: Erster Tag.
        end_date: Letzter Tag (inklusive).
        rooms: Zu betrachtende Räume (Groß-/Kleinschreibung egal);
            None = alle Räume der Termine.
        window: Öffnungsfenster pro Tag.
        slot_minutes: Slot-Größe in Minuten.
        day_code_for: Abbildung Datum → Tagescode.

    Returns:
        RoomOccupancy pro Raum, alphabetisch nach Raum. Angefragte Räume ohne
        Termin folgen danach als found=False ohne Slots und ohne Quote.

    Raises:
        ValueError: wenn start_date > end_date oder slot_minutes <= 0.
    """
    if start_date > end_date:
        raise ValueError(f"Startdatum {start_date} liegt nach Enddatum {end_date}")
    if slot_minutes <= 0:
        raise ValueError(f"Slot-Größe muss > 0 sein: {slot_minutes}")

    records = list(records)
    unknown: list[str] = []
    if rooms is None:
        room_set = {r.room for r in records}
    else:
        room_set = set()
        for name in rooms:
            matched = rooms_matching(records, name)
            if matched:
                room_set.update(matched)
            elif name not in unknown:
                unknown.append(name)
    window_slots = window.duration // slot_minutes

    # Belegte Slots pro (Raum, Tag) einmal vorab summieren
    slots_per_day: dict[tuple[str, str], int] = defaultdict(int)
    for r in records:
        if r.room in room_set:
            slots_per_day[(r.room, r.day)] += slots_in(r.time_range.duration, slot_minutes)

    occupied: dict[str, int] = {room: 0 for room in room_set}
    available: dict[str, int] = {room: 0 for room in room_set}
    for current in iter_dates(start_date, end_date):
        day = day_code_for(current)
        for room in room_set:
            available[room] += window_slots
            occupied[room] += slots_per_day.get((room, day), 0)

    result = []
    for room in sorted(room_set):
        occ = min(occupied[room], available[room])
        remaining = available[room] - occ
        result.append(RoomOccupancy(
            room=room,
            occupied_slots=occ,
            available_slots=available[room],
            rate=occupancy_rate(occ, remaining),
        ))
    for name in unknown:
        logger.debug(f"Raum '{name}' kommt in keinem Termin vor")
        result.append(RoomOccupancy(
            room=name, occupied_slots=0, available_slots=0, found=False))
    return result


def classify_utilization(
    occupancies: Iterable[RoomOccupancy],
    under: float = 20.0,
    over: float = 80.0,
) -> UtilizationReport:
    """Ordnet Räume nach ihrer Quote in unter- und überausgelastet ein.

    Räume mit undefinierter Quote werden separat aufgeführt. Beide Listen
    sind aufsteigend nach Quote (dann Raumname) sortiert.

    Raises:
        ValueError: wenn under > over.
    """
    if under > over:
        raise ValueError(f"Unterauslastung ({under}) > Überauslastung ({over})")

    under_list: list[RoomOccupancy] = []
    over_list: list[RoomOccupancy] = []
    undefined: list[str] = []
    for occ in occupancies:
        if not occ.found:
            continue
        if occ.rate is None:
            undefined.append(occ.room)
        elif occ.rate < under:
            under_list.append(occ)
        elif occ.rate > over:
            over_list.append(occ)

    def by_rate(o: RoomOccupancy) -> tuple:
        return (o.rate, o.room)

    return UtilizationReport(
        under_threshold=under,
        over_threshold=over,
        under_utilized=sorted(under_list, key=by_rate),
        over_utilized=sorted(over_list, key=by_rate),
        undefined=sorted(undefined),
    )

"""Raumabfragen über die geparsten Termine.

Alle Funktionen sind rein: sie lesen die übergebene Terminliste, verändern sie
nie und liefern ein Pydantic-Ergebnis, das CLI und Export nur noch darstellen.
Ein fehlender Kurs oder Raum ist ein erwartetes Ergebnis (found=False bzw.
Status), keine Exception.
"""

from collections import defaultdict
from enum import Enum
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel

from analysis.intervals import (
    building_of,
    group_by,
    parse_range,
    sort_buildings,
    sort_days,
    subtract_intervals,
)
from config.defaults import DAY_CODES, EXCEPTIONAL_PREFIXES
from data.errors import Diagnostic, DiagnosticKind
from models.session import SessionRecord
from models.timeslot import FULL_DAY, TimeRange


# ─── Ergebnis-Modelle ─────────────────────────────────────────────────────────

class CourseRooms(BaseModel):
    """Räume eines Kurses: Raum → Tag → belegte Zeiträume."""

    course: str
    found: bool
    rooms: dict[str, dict[str, list[TimeRange]]] = {}

    @property
    def room_names(self) -> list[str]:
        return list(self.rooms)


class CapacityStatus(str, Enum):
    FOUND = "found"
    ROOM_NOT_FOUND = "room_not_found"
    CAPACITY_UNPARSEABLE = "capacity_unparseable"


class RoomCapacity(BaseModel):
    """Kapazität eines Raums (Maximum über alle Termine)."""

    room_name: str
    status: CapacityStatus
    capacity: Optional[int] = None

    @property
    def found(self) -> bool:
        return self.status == CapacityStatus.FOUND


class RoomAvailability(BaseModel):
    """Freie Zeiträume eines Raums pro Tag innerhalb des Öffnungsfensters."""

    room: str
    found: bool
    window: TimeRange = FULL_DAY
    free: dict[str, list[TimeRange]] = {}

    @property
    def fully_booked(self) -> bool:
        """True wenn der Raum bekannt ist, aber an keinem Tag frei."""
        return self.found and not any(self.free.values())


class AvailableRooms(BaseModel):
    """Freie Räume für einen Zeitraum, gruppiert nach Gebäude."""

    day: str
    window: TimeRange
    buildings: dict[str, list[str]] = {}

    @property
    def rooms(self) -> list[str]:
        return [r for rooms in self.buildings.values() for r in rooms]


class RoomCapacityEntry(BaseModel):
    room: str
    capacity: int


# ─── Abfragen ─────────────────────────────────────────────────────────────────

def _matches(value: str, query: str) -> bool:
    return value.casefold() == query.strip().casefold()


def records_for_course(records: Iterable[SessionRecord], course: str) -> list[SessionRecord]:
    """Alle Termine eines Kurses (Groß-/Kleinschreibung egal), in Eingabereihenfolge."""
    return [r for r in records if _matches(r.course, course)]


def rooms_matching(records: Iterable[SessionRecord], room: str) -> list[str]:
    """Bekannte Raumnamen zu room (Groß-/Kleinschreibung egal), alphabetisch."""
    return sorted({r.room for r in records if _matches(r.room, room)})


def find_rooms_for_course(records: Iterable[SessionRecord], course: str) -> CourseRooms:
    """Räume eines Kurses (Groß-/Kleinschreibung egal), gruppiert nach Raum und Tag.

    Räume alphabetisch, Tage in Wochenreihenfolge, Zeiträume aufsteigend.
    """
    matching = records_for_course(records, course)
    if not matching:
        return CourseRooms(course=course, found=False)

    rooms: dict[str, dict[str, list[TimeRange]]] = {}
    for room, room_records in sorted(group_by(matching, lambda r: r.room).items()):
        by_day = group_by(room_records, lambda r: r.day)
        rooms[room] = {
            day: sorted(r.time_range for r in by_day[day])
            for day in sort_days(by_day)
        }
    return CourseRooms(course=course, found=True, rooms=rooms)


def find_room_capacity(
    records: Iterable[SessionRecord],
    room: str,
    diagnostics: Iterable[Diagnostic] = (),
) -> RoomCapacity:
    """Kapazität eines Raums als Maximum über alle Termine.

    Kommt der Raum nur in Einträgen vor, die wegen einer ungültigen Kapazität
    verworfen wurden (siehe Diagnosen des Loaders), lautet der Status
    CAPACITY_UNPARSEABLE statt ROOM_NOT_FOUND.
    """
    capacities = [r.capacity for r in records if _matches(r.room, room)]
    if capacities:
        return RoomCapacity(
            room_name=room, status=CapacityStatus.FOUND, capacity=max(capacities))

    bad_capacity = any(
        d.kind == DiagnosticKind.MALFORMED_RECORD
        and d.field == "capacity"
        and d.room is not None
        and _matches(d.room, room)
        for d in diagnostics
    )
    status = (CapacityStatus.CAPACITY_UNPARSEABLE if bad_capacity
              else CapacityStatus.ROOM_NOT_FOUND)
    return RoomCapacity(room_name=room, status=status)


def find_free_intervals(
    records: Iterable[SessionRecord],
    room: str,
    window: TimeRange = FULL_DAY,
    days: Sequence[str] = DAY_CODES,
) -> RoomAvailability:
    """Freie Zeiträume eines Raums pro Tag (Fenster minus alle Belegungen)."""
    booked = [r for r in records if _matches(r.room, room)]
    if not booked:
        return RoomAvailability(room=room, found=False, window=window)

    by_day = group_by(booked, lambda r: r.day)
    free = {
        day: subtract_intervals(window, (r.time_range for r in by_day.get(day, [])))
        for day in sort_days(days)
    }
    return RoomAvailability(room=room, found=True, window=window, free=free)


def find_available_rooms(
    records: Iterable[SessionRecord],
    day: str,
    start_time: str,
    end_time: str,
    exceptional_prefixes: Sequence[str] = EXCEPTIONAL_PREFIXES,
) -> AvailableRooms:
    """Alle bekannten Räume ohne überschneidende Belegung im Zeitraum.

    Raises:
        ValueError: bei unbekanntem Tag, ungültiger Uhrzeit oder start >= end.
    """
    if day not in DAY_CODES:
        raise ValueError(f"Unbekannter Tagescode: {day!r}")
    query = parse_range(start_time, end_time)

    records = list(records)
    all_rooms = {r.room for r in records}
    busy = {
        r.room for r in records
        if r.day == day and r.time_range.overlaps(query)
    }

    by_building: dict[str, list[str]] = defaultdict(list)
    for room in all_rooms - busy:
        by_building[building_of(room, exceptional_prefixes)].append(room)

    buildings = {b: sorted(by_building[b]) for b in sort_buildings(by_building)}
    return AvailableRooms(day=day, window=query, buildings=buildings)


def rank_rooms_by_capacity(
    records: Iterable[SessionRecord],
    ascending: bool = True,
    min_capacity: int = 0,
) -> list[RoomCapacityEntry]:
    """Räume nach maximaler Kapazität sortiert; Gleichstand nach Raumname."""
    max_capacity: dict[str, int] = {}
    for r in records:
        if r.capacity > max_capacity.get(r.room, -1):
            max_capacity[r.room] = r.capacity

    entries = [
        RoomCapacityEntry(room=room, capacity=cap)
        for room, cap in max_capacity.items()
        if cap >= min_capacity
    ]
    sign = 1 if ascending else -1
    entries.sort(key=lambda e: (sign * e.capacity, e.room))
    return entries

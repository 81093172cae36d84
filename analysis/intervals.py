"""Intervall-Algebra und gemeinsame Hilfsfunktionen der Raumabfragen.

Alle Zeitvergleiche laufen über Minuten seit Mitternacht, nie über den
String-Vergleich von "HH:MM" ("8:00" > "10:00" als String).
"""

import math
from collections import defaultdict
from typing import Callable, Hashable, Iterable, Sequence, TypeVar

from config.defaults import DAY_CODES, EXCEPTIONAL_BUCKET, EXCEPTIONAL_PREFIXES
from models.timeslot import TimeRange

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def parse_range(start: str, end: str) -> TimeRange:
    """Baut ein TimeRange aus zwei "HH:MM"-Strings; start muss vor end liegen.

    Raises:
        ValueError: bei ungültiger Uhrzeit oder start >= end.
    """
    tr = TimeRange.from_times(start, end)
    if tr.start >= tr.end:
        raise ValueError(f"Beginn ({start}) muss vor Ende ({end}) liegen")
    return tr


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    """Echte Überschneidung: a.start < b.end und b.start < a.end."""
    return a.overlaps(b)


# ─── Differenz ────────────────────────────────────────────────────────────────

def subtract_interval(free: TimeRange, booked: TimeRange) -> list[TimeRange]:
    """Zieht ein belegtes Intervall von einem freien Intervall ab.

    - keine Überschneidung       → [free]
    - belegt liegt innen         → bis zu zwei Stücke
    - belegt überdeckt eine Kante → gekürztes Stück
    - belegt überdeckt alles      → []
    """
    if not free.overlaps(booked):
        return [free]
    pieces = []
    if free.start < booked.start:
        pieces.append(TimeRange(free.start, booked.start))
    if booked.end < free.end:
        pieces.append(TimeRange(booked.end, free.end))
    return pieces


def subtract_intervals(window: TimeRange, booked: Iterable[TimeRange]) -> list[TimeRange]:
    """Freie Intervalle im Fenster nach Abzug aller Belegungen, aufsteigend sortiert."""
    free = [window] if window.duration > 0 else []
    for b in booked:
        if b.duration == 0:
            continue
        free = [piece for f in free for piece in subtract_interval(f, b)]
    return sorted(free)


def slots_in(duration_minutes: int, slot_minutes: int) -> int:
    """Anzahl angebrochener Slots einer Dauer (aufgerundet, nie negativ)."""
    if slot_minutes <= 0:
        raise ValueError(f"Slot-Größe muss > 0 sein: {slot_minutes}")
    if duration_minutes <= 0:
        return 0
    return math.ceil(duration_minutes / slot_minutes)


# ─── Gebäude und Tage ─────────────────────────────────────────────────────────

def is_exceptional(room: str, prefixes: Sequence[str] = EXCEPTIONAL_PREFIXES) -> bool:
    """True für Räume ohne Gebäudecode (EXT…, IUT…, SPOR…)."""
    return any(room.startswith(p) for p in prefixes)


def building_of(room: str, prefixes: Sequence[str] = EXCEPTIONAL_PREFIXES) -> str:
    """Gebäude-Schlüssel eines Raums: erstes Zeichen oder EXCEPTIONAL_BUCKET."""
    if not room or is_exceptional(room, prefixes):
        return EXCEPTIONAL_BUCKET
    return room[0]


def sort_buildings(buildings: Iterable[str]) -> list[str]:
    """Gebäude alphabetisch, der Sonderraum-Bucket immer zuletzt."""
    return sorted(set(buildings), key=lambda b: (b == EXCEPTIONAL_BUCKET, b))


def sort_days(days: Iterable[str]) -> list[str]:
    """Sortiert Tagescodes in Wochenreihenfolge; unbekannte Codes ans Ende."""
    order = {code: i for i, code in enumerate(DAY_CODES)}
    return sorted(days, key=lambda d: (order.get(d, len(order)), d))


def group_by(items: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    """Gruppiert Elemente nach key (Reihenfolge innerhalb der Gruppen bleibt erhalten)."""
    groups: dict[K, list[T]] = defaultdict(list)
    for item in items:
        groups[key(item)].append(item)
    return dict(groups)

"""Prüfung auf Raumkonflikte: derselbe Raum, zur selben Zeit, zwei verschiedene Kurse.

Zwei Gruppen desselben Kurses im selben Raum gelten NICHT als Konflikt.
"""

from collections import defaultdict
from itertools import combinations
from typing import Iterable, Sequence

from pydantic import BaseModel

from config.defaults import DAY_CODES
from models.session import SessionRecord
from models.timeslot import FULL_DAY, TimeRange


class Conflict(BaseModel):
    """Zwei Termine, die denselben Raum gleichzeitig belegen.

    first/second sind kanonisch geordnet (Beginn, Ende, Kurs), sodass ein
    Konflikt unabhängig von der Reihenfolge der Eingabe gleich aussieht.
    """

    room: str
    day: str
    first: SessionRecord
    second: SessionRecord

    @property
    def overlap(self) -> TimeRange:
        a, b = self.first.time_range, self.second.time_range
        return TimeRange(max(a.start, b.start), min(a.end, b.end))


def _order_key(r: SessionRecord) -> tuple:
    return (r.start_minute, r.end_minute, r.course.casefold(), r.course)


def conflict_key(a: SessionRecord, b: SessionRecord) -> tuple:
    """Kanonischer Schlüssel: Raum, Tag und das sortierte Paar (Beginn, Ende, Kurs)."""
    pair = sorted(
        [(a.start_minute, a.end_minute, a.course.casefold()),
         (b.start_minute, b.end_minute, b.course.casefold())]
    )
    return (a.room, a.day, tuple(pair))


def is_conflict(a: SessionRecord, b: SessionRecord, window: TimeRange = FULL_DAY) -> bool:
    """True wenn a und b denselben Raum/Tag belegen, zu verschiedenen Kursen
    gehören, sich echt überschneiden und beide das Prüffenster schneiden."""
    return (
        a.room == b.room
        and a.day == b.day
        and a.course.casefold() != b.course.casefold()
        and a.time_range.overlaps(b.time_range)
        and a.time_range.overlaps(window)
        and b.time_range.overlaps(window)
    )


def verify_conflicts(
    records: Iterable[SessionRecord],
    days: Sequence[str] = DAY_CODES,
    window: TimeRange = FULL_DAY,
) -> list[Conflict]:
    """Findet alle Raumkonflikte an den gegebenen Tagen im Prüffenster.

    Jeder physische Konflikt wird genau einmal gemeldet, auch wenn dieselben
    Zeiten/Kurse mehrfach in den Daten stehen.

    Returns:
        Konflikte sortiert nach Tag (Wochenreihenfolge), Raum und Beginn.
    """
    day_set = set(days)
    by_room_day: dict[tuple[str, str], list[SessionRecord]] = defaultdict(list)
    for r in records:
        if r.day in day_set:
            by_room_day[(r.room, r.day)].append(r)

    seen: set[tuple] = set()
    conflicts: list[Conflict] = []
    for (room, day), group in by_room_day.items():
        for a, b in combinations(group, 2):
            if not is_conflict(a, b, window):
                continue
            key = conflict_key(a, b)
            if key in seen:
                continue
            seen.add(key)
            first, second = sorted((a, b), key=_order_key)
            conflicts.append(Conflict(room=room, day=day, first=first, second=second))

    day_order = {d: i for i, d in enumerate(DAY_CODES)}
    conflicts.sort(key=lambda c: (
        day_order.get(c.day, len(day_order)), c.room,
        _order_key(c.first), _order_key(c.second),
    ))
    return conflicts

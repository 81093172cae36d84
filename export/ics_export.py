"""iCalendar-Export (.ics) der Termine über einen Datumsbereich.

Pro Termin und passendem Kalendertag entsteht ein VEVENT. Zeiten sind
"floating" (ohne Zeitzone), wie im Stundenplan selbst. Maskierung und
Zeilenfaltung übernimmt icalendar.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

from icalendar import Calendar, Event

from analysis.occupancy import iter_dates
from config.defaults import day_code_for_date
from models.session import SessionRecord

logger = logging.getLogger(__name__)

PRODID = "-//Raumplan//edt.cru//FR"


def _at(d: date, minutes: int) -> datetime:
    # 24:00 ergibt 00:00 des Folgetags
    return datetime.combine(d, time()) + timedelta(minutes=minutes)


def _event_uid(record: SessionRecord, d: date) -> str:
    return (
        f"{record.course}-{record.type}-{record.id}-{d.strftime('%Y%m%d')}-"
        f"{record.start_minute:04d}-{record.room}@raumplan"
    )


def make_event(record: SessionRecord, d: date, stamp: datetime) -> Event:
    """VEVENT für einen Termin an einem Kalendertag."""
    event = Event()
    event.add("uid", _event_uid(record, d))
    event.add("dtstamp", stamp)
    event.add("dtstart", _at(d, record.start_minute))
    event.add("dtend", _at(d, record.end_minute))
    event.add("summary", f"{record.course} ({record.type})")
    event.add("location", record.room)
    return event


def _calendar(
    records: Iterable[SessionRecord],
    start_date: date,
    end_date: date,
    stamp: Optional[datetime],
) -> Calendar:
    if start_date > end_date:
        raise ValueError(f"Startdatum {start_date} liegt nach Enddatum {end_date}")

    stamp = stamp or datetime.now(timezone.utc)
    records = sorted(records, key=lambda r: (r.start_minute, r.end_minute, r.course, r.room))

    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    count = 0
    for current in iter_dates(start_date, end_date):
        code = day_code_for_date(current)
        for record in records:
            if record.day == code:
                cal.add_component(make_event(record, current, stamp))
                count += 1

    logger.debug(f"{count} Ereignisse für {start_date} bis {end_date} erzeugt")
    return cal


def build_calendar(
    records: Iterable[SessionRecord],
    start_date: date,
    end_date: date,
    stamp: Optional[datetime] = None,
) -> str:
    """Erzeugt den Kalender als Text (Zeilenende CRLF, gefaltet nach 75 Oktetten).

    Args:
        records: Zu exportierende Termine (z.B. eines Kurses).
        start_date: Erster Tag (inklusive).
        end_date: Letzter Tag (inklusive).
        stamp: Zeitstempel für DTSTAMP; Standard ist jetzt (UTC).

    Raises:
        ValueError: wenn start_date > end_date.
    """
    return _calendar(records, start_date, end_date, stamp).to_ical().decode("utf-8")


def write_calendar(
    records: Iterable[SessionRecord],
    start_date: date,
    end_date: date,
    path: Path,
    stamp: Optional[datetime] = None,
) -> Path:
    """Schreibt den Kalender nach path und gibt den Pfad zurück."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(_calendar(records, start_date, end_date, stamp).to_ical())
    logger.info(f"iCalendar gespeichert: {path}")
    return path

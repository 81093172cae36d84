"""Parser für das Stundenplanformat edt.cru.

Aufbau einer Datei:

    +MATH02
    1,C1,P=30,H=L 10:00-12:00,F1,S=B203//
    2,D1,P=24,H=MA 08:00-10:00,F1,S=B103/ME 14:00-16:00,F2,S=B104//
    Page générée en : 0.1 s

Eine Zeile mit "+" beginnt einen neuen Kurs. Jede Zeile mit "S=" ist ein Termin:
der Basis-Eintrag vor dem ersten "/" hat sechs feste Felder, jedes weitere
"/"-Segment ist ein Zusatztermin, der alle Felder des Basis-Eintrags erbt und
mindestens einen neuen Zeitraum angeben muss.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from pydantic import BaseModel

from data.errors import (
    Diagnostic,
    DiagnosticKind,
    MalformedContinuation,
    MalformedRecord,
)
from data.grammar import (
    CAPACITY_PREFIX,
    COURSE_PREFIX,
    ROOM_MARKER,
    TIME_PREFIX,
    TokenKind,
    classify_token,
    is_valid_capacity_field,
    is_valid_day,
    is_valid_id,
    is_valid_index,
    is_valid_room_field,
    is_valid_time_range,
    is_valid_type,
)
from models.session import SessionRecord

logger = logging.getLogger(__name__)

DEFAULT_FOOTER_PREFIX = "Page générée en"

_BASE_FIELD_COUNT = 6


class ParseResult(BaseModel):
    """Ergebnis eines Parse-Vorgangs: Termine plus lokal behandelte Probleme."""

    records: list[SessionRecord] = []
    diagnostics: list[Diagnostic] = []

    def extend(self, other: "ParseResult") -> None:
        self.records.extend(other.records)
        self.diagnostics.extend(other.diagnostics)

    def diagnostics_of(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]

    @property
    def has_problems(self) -> bool:
        return bool(self.diagnostics)


# ─── Basis-Eintrag ────────────────────────────────────────────────────────────

def _room_from_field(field: str) -> Optional[str]:
    """Gibt den Raumnamen aus "S=B203//" zurück oder None bei ungültigem Feld."""
    cleaned = field.replace("//", "").strip()
    if not is_valid_room_field(cleaned):
        return None
    return cleaned[len(ROOM_MARKER):]


def parse_base_clause(clause: str, course: str) -> SessionRecord:
    """Parst den Basis-Eintrag "id,typ,P=kap,H=tag hh:mm-hh:mm,index,S=raum".

    Raises:
        MalformedRecord: wenn eines der sechs Felder fehlt oder ungültig ist.
    """
    fields = [f.strip() for f in clause.strip().split(",")]
    if len(fields) != _BASE_FIELD_COUNT:
        raise MalformedRecord(
            f"Erwartet {_BASE_FIELD_COUNT} Felder, gefunden {len(fields)}: {clause.strip()!r}",
            field="fields",
        )

    id_, type_, capacity_str, time_str, index, room_str = fields
    room = _room_from_field(room_str)

    if not is_valid_id(id_):
        raise MalformedRecord(f"Ungültige ID: {id_!r}", field="id", room=room)
    if not is_valid_type(type_):
        raise MalformedRecord(f"Ungültiger Typ: {type_!r}", field="type", room=room)

    if not capacity_str.startswith(CAPACITY_PREFIX):
        raise MalformedRecord(
            f"Kapazität fehlt: {capacity_str!r}", field="capacity", room=room)
    if not is_valid_capacity_field(capacity_str):
        raise MalformedRecord(
            f"Ungültige Kapazität: {capacity_str!r}", field="capacity", room=room)
    capacity = int(capacity_str[len(CAPACITY_PREFIX):])

    if not time_str.startswith(TIME_PREFIX):
        raise MalformedRecord(f"Uhrzeit fehlt: {time_str!r}", field="time", room=room)
    time_parts = time_str[len(TIME_PREFIX):].split()
    if len(time_parts) != 2:
        raise MalformedRecord(
            f"Ungültiges Zeitfeld: {time_str!r}", field="time", room=room)
    day, time_range = time_parts
    if not is_valid_day(day):
        raise MalformedRecord(f"Ungültiger Tag: {day!r}", field="day", room=room)
    if not is_valid_time_range(time_range):
        raise MalformedRecord(
            f"Ungültiger Zeitraum: {time_range!r}", field="time", room=room)
    start_time, end_time = time_range.split("-")

    if not is_valid_index(index):
        raise MalformedRecord(f"Ungültiger Index: {index!r}", field="index", room=room)
    if room is None:
        raise MalformedRecord(f"Ungültiger Raum: {room_str!r}", field="room")

    return SessionRecord(
        course=course,
        id=id_,
        type=type_,
        capacity=capacity,
        day=day,
        start_time=start_time,
        end_time=end_time,
        index=index,
        room=room,
    )


# ─── Zusatztermine ────────────────────────────────────────────────────────────

def parse_continuation(clause: str, base: SessionRecord) -> SessionRecord:
    """Parst einen Zusatztermin und überschreibt die Felder des Basis-Eintrags.

    Die Tokens werden unabhängig von ihrer Position über classify_token
    erkannt; unbekannte Tokens werden ignoriert. Zeitraum ist Pflicht,
    Tag, Index und Raum sind optional.

    Raises:
        MalformedContinuation: wenn kein gültiger Zeitraum angegeben ist.
    """
    overrides: dict[str, str] = {}
    for part in clause.strip().split(","):
        for token in part.split():
            kind = classify_token(token)
            if kind == TokenKind.TIME:
                start, end = token.split("-")
                overrides["start_time"] = start
                overrides["end_time"] = end
            elif kind == TokenKind.DAY:
                overrides["day"] = token
            elif kind == TokenKind.INDEX:
                overrides["index"] = token
            elif kind == TokenKind.ROOM:
                overrides["room"] = token[len(ROOM_MARKER):]

    if "start_time" not in overrides:
        raise MalformedContinuation(
            f"Zusatztermin ohne gültigen Zeitraum: {clause.strip()!r}")
    return base.model_copy(update=overrides)


# ─── Zeile ────────────────────────────────────────────────────────────────────

def parse_line(
    raw_line: str,
    course: str,
    source: Optional[str] = None,
    line_number: Optional[int] = None,
) -> ParseResult:
    """Zerlegt eine Terminzeile in Basis-Eintrag und Zusatztermine.

    Ein ungültiger Basis-Eintrag verwirft die ganze Zeile. Ein ungültiger
    Zusatztermin verwirft nur sich selbst.
    """
    result = ParseResult()
    base_clause, *continuations = raw_line.strip().split("/")

    try:
        base = parse_base_clause(base_clause, course)
    except MalformedRecord as e:
        logger.warning(f"Eintrag verworfen ({source or '?'}:{line_number}): {e}")
        result.diagnostics.append(Diagnostic.from_error(e, source, line_number))
        return result

    result.records.append(base)
    for clause in continuations:
        if not clause.strip():
            continue
        try:
            result.records.append(parse_continuation(clause, base))
        except MalformedContinuation as e:
            logger.warning(f"Zusatztermin ignoriert ({source or '?'}:{line_number}): {e}")
            result.diagnostics.append(Diagnostic.from_error(e, source, line_number))
    return result


# ─── Datei-Inhalt ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class _ScanState:
    """Zustand beim zeilenweisen Durchlauf: aktueller Kurs + bisheriges Ergebnis."""

    course: Optional[str]
    result: ParseResult


def _scan_line(
    state: _ScanState,
    line_number: int,
    line: str,
    source: Optional[str],
    footer_prefix: str,
) -> _ScanState:
    line = line.strip()
    if not line or line.startswith(footer_prefix):
        return state

    if line.startswith(COURSE_PREFIX):
        return replace(state, course=line[len(COURSE_PREFIX):].strip())

    if state.course and ROOM_MARKER in line:
        state.result.extend(parse_line(line, state.course, source, line_number))
        return state

    logger.debug(f"Zeile ignoriert ({source or '?'}:{line_number}): {line}")
    return state


def parse_content(
    text: str,
    source: Optional[str] = None,
    footer_prefix: str = DEFAULT_FOOTER_PREFIX,
) -> ParseResult:
    """Parst den vollständigen Inhalt einer edt.cru-Datei.

    Args:
        text: Dateiinhalt.
        source: Herkunft für Diagnosen (z.B. Dateipfad).
        footer_prefix: Präfix der Fußzeilen, die übersprungen werden.

    Returns:
        ParseResult mit allen Terminen in Dateireihenfolge.
    """
    state = _ScanState(course=None, result=ParseResult())
    for line_number, line in enumerate(text.splitlines(), start=1):
        state = _scan_line(state, line_number, line, source, footer_prefix)
    return state.result

"""Reguläre Ausdrücke und Prädikate für die Felder einer edt.cru-Zeile.

Alle Funktionen sind reine Prädikate: keine Seiteneffekte, keine Exceptions.
"""

import re
from enum import Enum

_RE_ID = re.compile(r"^\d+$", re.ASCII)
_RE_TYPE = re.compile(r"^[A-Z]\d+$", re.ASCII)
_RE_DAY = re.compile(r"^(L|MA|ME|J|V|S|D)$")
_RE_TIME_RANGE = re.compile(
    r"^([01]?\d|2[0-3]):[0-5]\d-([01]?\d|2[0-3]):[0-5]\d$",
    re.ASCII,
)
_RE_INDEX = re.compile(r"^F\d+$", re.ASCII)
_RE_ROOM_FIELD = re.compile(r"^S=\w+$", re.ASCII)
_RE_CAPACITY_FIELD = re.compile(r"^P=\d+$", re.ASCII)

# Markierung einer Terminzeile
ROOM_MARKER = "S="
CAPACITY_PREFIX = "P="
TIME_PREFIX = "H="
COURSE_PREFIX = "+"


class TokenKind(str, Enum):
    TIME = "time"
    DAY = "day"
    INDEX = "index"
    ROOM = "room"
    UNKNOWN = "unknown"


def is_valid_day(token: str) -> bool:
    """True für L, MA, ME, J, V, S, D."""
    return bool(_RE_DAY.fullmatch(token))


def is_valid_time_range(token: str) -> bool:
    """True für "HH:MM-HH:MM" (Stunde 0–23, Minute 0–59); keine Prüfung der Reihenfolge."""
    return bool(_RE_TIME_RANGE.fullmatch(token))


def is_valid_id(token: str) -> bool:
    return bool(_RE_ID.fullmatch(token))


def is_valid_type(token: str) -> bool:
    return bool(_RE_TYPE.fullmatch(token))


def is_valid_index(token: str) -> bool:
    return bool(_RE_INDEX.fullmatch(token))


def is_valid_room_field(token: str) -> bool:
    """True für "S=<Raum>" mit alphanumerischem Raumnamen."""
    return bool(_RE_ROOM_FIELD.fullmatch(token))


def is_valid_capacity_field(token: str) -> bool:
    return bool(_RE_CAPACITY_FIELD.fullmatch(token))


def classify_token(token: str) -> TokenKind:
    """Ordnet ein Token eines Zusatztermins einer Feldart zu.

    Reihenfolge: Zeitraum → Tag → Index → Raum; der erste Treffer gewinnt.
    """
    if is_valid_time_range(token):
        return TokenKind.TIME
    if is_valid_day(token):
        return TokenKind.DAY
    if is_valid_index(token):
        return TokenKind.INDEX
    if is_valid_room_field(token):
        return TokenKind.ROOM
    return TokenKind.UNKNOWN

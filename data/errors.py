"""Fehlertypen und Diagnosen beim Einlesen der edt.cru-Dateien.

Die strikten Einzel-Parser werfen Exceptions; die aggregierenden Funktionen
fangen sie ab und sammeln sie als Diagnostic-Einträge. Ein einzelner
fehlerhafter Eintrag bricht nie das Laden des gesamten Verzeichnisses ab.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class CruError(Exception):
    """Basisklasse für Fehler beim Einlesen von edt.cru-Daten."""


class MalformedRecord(CruError):
    """Der Basis-Eintrag einer Zeile verletzt das Format; die ganze Zeile entfällt."""

    def __init__(self, message: str, field: str = "", room: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field
        # Raumname, falls das S=-Feld trotz des Fehlers gültig war
        self.room = room


class MalformedContinuation(CruError):
    """Ein Zusatztermin nach "/" liefert keinen gültigen neuen Zeitraum."""


class UnreadableSource(CruError):
    """Ein Unterordner oder eine Datei kann nicht gelesen werden."""


class DiagnosticKind(str, Enum):
    MALFORMED_RECORD = "malformed_record"
    MALFORMED_CONTINUATION = "malformed_continuation"
    UNREADABLE_SOURCE = "unreadable_source"


class Diagnostic(BaseModel):
    """Ein beim Einlesen aufgetretenes, lokal behandeltes Problem."""

    kind: DiagnosticKind
    message: str
    source: Optional[str] = None       # Dateipfad oder Verzeichnis
    line_number: Optional[int] = None  # 1-basiert
    field: Optional[str] = None        # "capacity", "time", ...
    room: Optional[str] = None

    @classmethod
    def from_error(
        cls,
        error: CruError,
        source: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> "Diagnostic":
        if isinstance(error, MalformedRecord):
            kind = DiagnosticKind.MALFORMED_RECORD
        elif isinstance(error, MalformedContinuation):
            kind = DiagnosticKind.MALFORMED_CONTINUATION
        else:
            kind = DiagnosticKind.UNREADABLE_SOURCE
        return cls(
            kind=kind,
            message=str(error),
            source=source,
            line_number=line_number,
            field=getattr(error, "field", None) or None,
            room=getattr(error, "room", None),
        )

    def __str__(self) -> str:
        where = self.source or "?"
        if self.line_number is not None:
            where = f"{where}:{self.line_number}"
        return f"[{self.kind.value}] {where}: {self.message}"

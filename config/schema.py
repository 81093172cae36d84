from pydantic import BaseModel, Field, field_validator, model_validator

from models.timeslot import TimeRange, to_minutes


# ─── ÖFFNUNGSZEITEN ───

class OpeningWindow(BaseModel):
    """Tägliches Öffnungsfenster der Räume (Basis für freie Slots und Auslastung)."""
    # Öffnung im Format "HH:MM"
    start: str = "08:00"
    # Schließung im Format "HH:MM" ("24:00" erlaubt)
    end: str = "20:00"

    @field_validator("start", "end")
    @classmethod
    def _check_time(cls, v: str) -> str:
        to_minutes(v)
        return v.strip()

    @model_validator(mode='after')
    def _check_order(self):
        if to_minutes(self.start) >= to_minutes(self.end):
            raise ValueError(
                f"Öffnung ({self.start}) muss vor Schließung ({self.end}) liegen")
        return self

    def as_range(self) -> TimeRange:
        return TimeRange.from_times(self.start, self.end)


# ─── AUSLASTUNG ───

class UtilizationThresholds(BaseModel):
    """Schwellwerte für unter- bzw. überausgelastete Räume (in Prozent)."""
    # Unterhalb dieses Werts gilt ein Raum als unterausgelastet
    under: float = Field(20.0, ge=0.0, le=100.0,
        description="Schwelle Unterauslastung (%)")
    # Oberhalb dieses Werts gilt ein Raum als überausgelastet
    over: float = Field(80.0, ge=0.0, le=100.0,
        description="Schwelle Überauslastung (%)")

    @model_validator(mode='after')
    def _check_order(self):
        if self.under > self.over:
            raise ValueError(
                f"Unterauslastung ({self.under}) > Überauslastung ({self.over})")
        return self


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration der Raumabfragen."""
    # Wurzelverzeichnis mit einem Unterordner pro Fachbereich
    data_dir: str = Field("data",
        description="Verzeichnis mit den edt.cru-Unterordnern")
    # Fester Dateiname der Stundenplandatei je Unterordner
    timetable_file: str = Field("edt.cru",
        description="Dateiname der Stundenplandatei")
    # Zeilen mit diesem Präfix sind Seitenfußzeilen und werden ignoriert
    footer_prefix: str = Field("Page générée en",
        description="Präfix der Fußzeilen")
    # Öffnungsfenster für freie Slots und Auslastung
    opening_window: OpeningWindow = Field(default_factory=OpeningWindow)
    # Slot-Größe für die Auslastung in Minuten
    slot_minutes: int = Field(30, ge=5, le=240,
        description="Slot-Größe in Minuten")
    # Raum-Präfixe ohne Gebäudecode (werden zuletzt sortiert)
    exceptional_prefixes: list[str] = Field(
        default=["EXT", "IUT", "SPOR"],
        description="Präfixe für Sonderräume")
    # Schwellwerte für die Auslastungsanalyse
    utilization: UtilizationThresholds = Field(default_factory=UtilizationThresholds)
    # Debug-Ausgaben (Log-Level DEBUG)
    debug: bool = False

    @model_validator(mode='after')
    def _check_window_fits_slots(self):
        window = self.opening_window.as_range()
        if window.duration < self.slot_minutes:
            raise ValueError(
                f"Öffnungsfenster ({window}) kürzer als ein Slot ({self.slot_minutes} min)")
        return self

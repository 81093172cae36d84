"""Datenmodell für einen einzelnen Veranstaltungstermin aus edt.cru (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.timeslot import DAY_CODES, TimeRange, to_minutes


class SessionRecord(BaseModel):
    """Ein Termin: Kurs, Raum, Tag und Uhrzeit.

    Nach dem Parsen unveränderlich. Zwei Termine werden nie zusammengeführt,
    auch wenn alle Felder gleich sind.
    """

    model_config = ConfigDict(frozen=True)

    course: str                  # "MATH02" (Groß-/Kleinschreibung bleibt erhalten)
    id: str                      # "1"
    type: str                    # "C1", "D2", "T1"
    capacity: int = Field(ge=0)  # Plätze
    day: str                     # "L", "MA", ..., "D"
    start_time: str              # "10:00"
    end_time: str                # "12:00"
    index: str                   # "F1"
    room: str                    # "B203"

    @field_validator("day")
    @classmethod
    def _check_day(cls, v: str) -> str:
        if v not in DAY_CODES:
            raise ValueError(f"Ungültiger Tagescode: {v!r}")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time(cls, v: str) -> str:
        to_minutes(v)
        return v

    @property
    def start_minute(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minute(self) -> int:
        return to_minutes(self.end_time)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_minute, self.end_minute)

    def __str__(self) -> str:
        return (f"{self.course} ({self.type}) {self.day} "
                f"{self.start_time}-{self.end_time} {self.room}")

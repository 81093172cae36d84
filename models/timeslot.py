"""Datenmodell für ein Zeitintervall innerhalb eines Tages."""

from dataclasses import dataclass

MINUTES_PER_DAY = 24 * 60

# Kanonische Wochenreihenfolge der Tagescodes (Montag..Sonntag)
DAY_CODES: tuple[str, ...] = ("L", "MA", "ME", "J", "V", "S", "D")


def to_minutes(hhmm: str) -> int:
    """Wandelt "HH:MM" (auch "H:MM" und "24:00") in Minuten seit Mitternacht um.

    Raises:
        ValueError: bei ungültigem Format oder Werten außerhalb des Tages.
    """
    parts = hhmm.strip().split(":")
    if len(parts) != 2 or not all(p.isascii() and p.isdigit() for p in parts):
        raise ValueError(f"Ungültige Uhrzeit: {hhmm!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise ValueError(f"Ungültige Uhrzeit: {hhmm!r}")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Minuten seit Mitternacht → "HH:MM" (1440 → "24:00")."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True, order=True)
class TimeRange:
    """Halboffenes Intervall [start, end) in Minuten seit Mitternacht.

    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    Die Sortierung folgt (start, end).
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if not 0 <= self.start <= MINUTES_PER_DAY or not 0 <= self.end <= MINUTES_PER_DAY:
            raise ValueError(f"Intervall außerhalb des Tages: {self.start}-{self.end}")

    @classmethod
    def parse(cls, text: str) -> "TimeRange":
        """Parst "HH:MM-HH:MM"."""
        start, sep, end = text.partition("-")
        if not sep:
            raise ValueError(f"Ungültiges Intervall: {text!r}")
        return cls(to_minutes(start), to_minutes(end))

    @classmethod
    def from_times(cls, start_time: str, end_time: str) -> "TimeRange":
        return cls(to_minutes(start_time), to_minutes(end_time))

    @property
    def duration(self) -> int:
        """Dauer in Minuten (0 bei leerem oder umgekehrtem Intervall)."""
        return max(0, self.end - self.start)

    @property
    def start_time(self) -> str:
        return format_minutes(self.start)

    @property
    def end_time(self) -> str:
        return format_minutes(self.end)

    def overlaps(self, other: "TimeRange") -> bool:
        """Echte Überschneidung; sich berührende Intervalle überschneiden sich nicht."""
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"{self.start_time}-{self.end_time}"


# Ganzer Tag 00:00–24:00
FULL_DAY = TimeRange(0, MINUTES_PER_DAY)

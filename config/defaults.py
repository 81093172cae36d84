from datetime import date

from config.schema import AppConfig, OpeningWindow, UtilizationThresholds
from models.timeslot import DAY_CODES


DAY_NAMES: dict[str, str] = {
    "L": "Lundi",
    "MA": "Mardi",
    "ME": "Mercredi",
    "J": "Jeudi",
    "V": "Vendredi",
    "S": "Samedi",
    "D": "Dimanche",
}

EXCEPTIONAL_PREFIXES: tuple[str, ...] = ("EXT", "IUT", "SPOR")

# Bucket-Schlüssel für Sonderräume bei der Gruppierung nach Gebäude
EXCEPTIONAL_BUCKET = "EXCEPTIONS"


def day_code_for_date(d: date) -> str:
    """Bildet ein Kalenderdatum auf seinen Tagescode ab (date.weekday(): 0=Montag)."""
    return DAY_CODES[d.weekday()]


def day_name(code: str) -> str:
    """Tagescode → voller Name; unbekannte Codes werden unverändert zurückgegeben."""
    return DAY_NAMES.get(code, code)


def default_app_config() -> AppConfig:
    """Standard: Öffnung 08:00–20:00, 30-Minuten-Slots, Schwellen 20 % / 80 %."""
    return AppConfig(
        data_dir="data",
        timetable_file="edt.cru",
        footer_prefix="Page générée en",
        opening_window=OpeningWindow(start="08:00", end="20:00"),
        slot_minutes=30,
        exceptional_prefixes=list(EXCEPTIONAL_PREFIXES),
        utilization=UtilizationThresholds(under=20.0, over=80.0),
        debug=False,
    )

"""Export-Modul: Rich-Terminalausgabe und iCalendar (.ics) für die Raumabfragen."""

from export.ics_export import build_calendar, write_calendar

__all__ = ["build_calendar", "write_calendar"]

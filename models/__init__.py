from models.timeslot import TimeRange, FULL_DAY, DAY_CODES
from models.session import SessionRecord

__all__ = [
    "TimeRange",
    "FULL_DAY",
    "DAY_CODES",
    "SessionRecord",
]

from datetime import datetime, timedelta
from enum import Enum


class TimeFrame(str, Enum):
    ALL = "all"
    MONTH = "month"
    YEAR = "year"

    def lower_bound(self, now: datetime) -> datetime | None:
        """Inclusive lower timestamp bound for this window, or None for all time."""
        days = _WINDOW_DAYS.get(self)
        if days is None:
            return None
        return now - timedelta(days=days)


_WINDOW_DAYS = {
    TimeFrame.MONTH: 30,
    TimeFrame.YEAR: 365,
}


class QueryStrategy(str, Enum):
    USER_TABLE = "user_table"
    REVISION_BASED = "revision_based"
    SCORED = "scored"


class ResponseStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"

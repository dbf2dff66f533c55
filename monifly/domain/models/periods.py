"""Domain models for named filter periods and resolved date intervals."""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class FilterPeriod(str, Enum):
    CURRENT_WEEK = "currentWeek"
    LAST_WEEK = "lastWeek"
    CURRENT_MONTH = "currentMonth"
    LAST_MONTH = "lastMonth"
    CURRENT_QUARTER = "currentQuarter"
    LAST_QUARTER = "lastQuarter"
    CURRENT_YEAR = "currentYear"
    LAST_YEAR = "lastYear"
    ALL_TIME = "allTime"
    CUSTOM = "custom"


PERIOD_ALIASES = {
    "week": FilterPeriod.CURRENT_WEEK,
    "month": FilterPeriod.CURRENT_MONTH,
    "quarter": FilterPeriod.CURRENT_QUARTER,
    "year": FilterPeriod.CURRENT_YEAR,
    "all": FilterPeriod.ALL_TIME,
    "all_time": FilterPeriod.ALL_TIME,
}


@dataclass(frozen=True)
class PeriodRange:
    """Half-open date interval ``start <= day < end``.

    A ``None`` bound is unbounded on that side.
    """

    start: date | None
    end: date | None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day >= self.end:
            return False
        return True

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None


__all__ = ["FilterPeriod", "PERIOD_ALIASES", "PeriodRange"]

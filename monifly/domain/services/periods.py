"""Resolution of named filter periods into concrete date intervals.

Intervals are half-open (``start <= day < end``). Weeks start on the
configured weekday, Monday by default. Resolution is pure given the
reference date; when none is passed the injected clock supplies it.
"""

import calendar
from collections.abc import Callable
from datetime import date, timedelta

from monifly.domain.errors import ValidationError
from monifly.domain.models import PERIOD_ALIASES, FilterPeriod, PeriodRange


def month_start(day: date) -> date:
    return day.replace(day=1)


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the month's end."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    return clamp_day(year, month + 1, day.day)


def clamp_day(year: int, month: int, day: int) -> date:
    """Return ``year-month-day`` with the day clamped to the month length."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def quarter_start(day: date) -> date:
    first_month = (day.month - 1) // 3 * 3 + 1
    return date(day.year, first_month, 1)


def months_in_range(period: PeriodRange) -> list[date]:
    """Return the first day of every month overlapping a bounded range."""
    if not period.is_bounded:
        raise ValidationError("months_in_range requires a bounded period")
    months = []
    current = month_start(period.start)
    while current < period.end:
        months.append(current)
        current = add_months(current, 1)
    return months


def days_in_range(period: PeriodRange) -> list[date]:
    """Return every day of a bounded range."""
    if not period.is_bounded:
        raise ValidationError("days_in_range requires a bounded period")
    span = (period.end - period.start).days
    return [period.start + timedelta(days=offset) for offset in range(span)]


def parse_filter_period(value) -> FilterPeriod:
    """Return the FilterPeriod for a member, value or alias."""
    if isinstance(value, FilterPeriod):
        return value
    key = str(value or "").strip()
    alias = PERIOD_ALIASES.get(key.lower())
    if alias is not None:
        return alias
    try:
        return FilterPeriod(key)
    except ValueError as exc:
        raise ValidationError(f"Unknown filter period: {value!r}") from exc


class PeriodResolver:
    """Map a named period to a ``PeriodRange``."""

    def __init__(
        self,
        week_start: int = 0,
        clock: Callable[[], date] | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            week_start: First day of the week, 0=Monday .. 6=Sunday.
            clock: Callable returning "today"; defaults to ``date.today``.
        """
        if not 0 <= week_start <= 6:
            raise ValidationError(f"week_start must be in [0, 6]: {week_start}")
        self._week_start = week_start
        self._clock = clock or date.today

    @property
    def week_start(self) -> int:
        return self._week_start

    def today(self) -> date:
        return self._clock()

    def resolve(
        self,
        period,
        reference_date: date | None = None,
        *,
        custom_start: date | None = None,
        custom_end: date | None = None,
    ) -> PeriodRange:
        """Resolve a period key against a reference date.

        Args:
            period: FilterPeriod member, value or alias (``month``...).
            reference_date: Day the period is relative to.
            custom_start: First day of a ``custom`` period.
            custom_end: Last day (inclusive) of a ``custom`` period.

        Returns:
            PeriodRange: Half-open interval for the period.
        """
        key = parse_filter_period(period)
        ref = reference_date or self.today()

        if key is FilterPeriod.ALL_TIME:
            return PeriodRange(start=None, end=None)
        if key is FilterPeriod.CUSTOM:
            return self._custom_range(custom_start, custom_end)
        if key in (FilterPeriod.CURRENT_WEEK, FilterPeriod.LAST_WEEK):
            start = ref - timedelta(days=(ref.weekday() - self._week_start) % 7)
            if key is FilterPeriod.LAST_WEEK:
                start -= timedelta(days=7)
            return PeriodRange(start=start, end=start + timedelta(days=7))
        if key in (FilterPeriod.CURRENT_MONTH, FilterPeriod.LAST_MONTH):
            start = month_start(ref)
            if key is FilterPeriod.LAST_MONTH:
                start = add_months(start, -1)
            return PeriodRange(start=start, end=add_months(start, 1))
        if key in (FilterPeriod.CURRENT_QUARTER, FilterPeriod.LAST_QUARTER):
            start = quarter_start(ref)
            if key is FilterPeriod.LAST_QUARTER:
                start = add_months(start, -3)
            return PeriodRange(start=start, end=add_months(start, 3))
        start = date(ref.year, 1, 1)
        if key is FilterPeriod.LAST_YEAR:
            start = date(ref.year - 1, 1, 1)
        return PeriodRange(start=start, end=date(start.year + 1, 1, 1))

    @staticmethod
    def _custom_range(
        custom_start: date | None,
        custom_end: date | None,
    ) -> PeriodRange:
        if custom_start is None or custom_end is None:
            raise ValidationError("custom period requires a start and an end")
        if custom_end < custom_start:
            raise ValidationError("custom period end is before its start")
        return PeriodRange(
            start=custom_start,
            end=custom_end + timedelta(days=1),
        )


__all__ = [
    "PeriodResolver",
    "parse_filter_period",
    "month_start",
    "add_months",
    "clamp_day",
    "quarter_start",
    "months_in_range",
    "days_in_range",
]

"""Calendar helpers shared by the habit engine (weeks, months, date parsing)."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum, IntEnum
from typing import Iterator, Union

DateLike = Union[date, datetime, str]

# Streak walks never look further back than this many days.
STREAK_LOOKBACK_DAYS = 365


class Weekday(IntEnum):
    """Weekday numbered like ``date.weekday()`` (Monday == 0)."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def key(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: "Weekday | int | str") -> "Weekday":
        """Accept a Weekday, its number, or a (case-insensitive) name like ``"monday"``."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown weekday: {value!r}") from None
        return cls(int(value))


ALL_WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)


class Period(str, Enum):
    """Rolling window used by quota-based habits."""

    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Knobs that change how the engine reads the calendar."""

    week_start: Weekday = Weekday.SUNDAY
    lookback_days: int = STREAK_LOOKBACK_DAYS


def coerce_date(value: DateLike) -> date:
    """Return ``value`` as a ``date``; ISO ``YYYY-MM-DD`` strings are parsed."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Cannot interpret {value!r} as a calendar date")


def coerce_optional_date(value: DateLike | None) -> date | None:
    if value is None or value == "":
        return None
    return coerce_date(value)


def resolve_today(today: DateLike | None = None) -> date:
    """The reference day for a computation; the local calendar date when omitted."""

    return date.today() if today is None else coerce_date(today)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""

    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def week_bounds(on: date, week_start: Weekday = Weekday.SUNDAY) -> tuple[date, date]:
    offset = (on.weekday() - int(week_start)) % 7
    start = on - timedelta(days=offset)
    return start, start + timedelta(days=6)


def month_bounds(on: date) -> tuple[date, date]:
    last_day = calendar.monthrange(on.year, on.month)[1]
    return on.replace(day=1), on.replace(day=last_day)


def period_bounds(
    on: date, period: Period, week_start: Weekday = Weekday.SUNDAY
) -> tuple[date, date]:
    """Return the inclusive (start, end) of the week or month containing ``on``."""

    if period is Period.WEEK:
        return week_bounds(on, week_start)
    if period is Period.MONTH:
        return month_bounds(on)
    raise ValueError(f"Unsupported period: {period!r}")


def add_months(on: date, months: int) -> date:
    """Shift by calendar months, clamping the day to the target month's length."""

    month_index = on.month - 1 + months
    year = on.year + month_index // 12
    month = month_index % 12 + 1
    day = min(on.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def shift_period(on: date, period: Period, steps: int) -> date:
    if period is Period.WEEK:
        return on + timedelta(weeks=steps)
    return add_months(on, steps)


def months_between(earlier: date, later: date) -> int:
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


__all__ = [
    "ALL_WEEKDAYS",
    "DateLike",
    "EngineSettings",
    "Period",
    "STREAK_LOOKBACK_DAYS",
    "Weekday",
    "add_months",
    "coerce_date",
    "coerce_optional_date",
    "iter_days",
    "month_bounds",
    "months_between",
    "period_bounds",
    "resolve_today",
    "shift_period",
    "week_bounds",
]

"""Habit recurrence rules and the "is this date a candidate occurrence?" check.

A stored habit carries its rule as a loose ``{"type": ..., "value": ...}``
payload. :func:`parse_frequency` turns that payload into one of four frozen
dataclasses, substituting safe defaults for anything malformed, so the rest of
the engine only ever deals with well-formed values.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping, Union

from ..logging_config import get_logger
from .periods import ALL_WEEKDAYS, DateLike, Period, Weekday, coerce_date, coerce_optional_date

logger = get_logger("services.frequency")

DAILY = "daily"
INTERVAL = "interval"
X_TIMES_PER_PERIOD = "x_times_per_period"
SPECIFIC_DATES = "specific_dates"

FREQUENCY_TYPES = (DAILY, INTERVAL, X_TIMES_PER_PERIOD, SPECIFIC_DATES)

_WORKWEEK = frozenset(ALL_WEEKDAYS[:5])
_WEEKEND = frozenset(ALL_WEEKDAYS[5:])


@dataclass(frozen=True, slots=True)
class Daily:
    """Due on every date whose weekday is selected."""

    weekdays: frozenset[Weekday]


@dataclass(frozen=True, slots=True)
class Interval:
    """Due on the start date and every ``days``-th day after it."""

    days: int


@dataclass(frozen=True, slots=True)
class XTimesPerPeriod:
    """Any day is a candidate until ``count`` completions land in the period."""

    count: int
    period: Period = Period.WEEK


@dataclass(frozen=True, slots=True)
class SpecificDatesOfMonth:
    """Due on the listed days of each month (1-31)."""

    days_of_month: frozenset[int]


HabitFrequency = Union[Daily, Interval, XTimesPerPeriod, SpecificDatesOfMonth]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def default_frequency() -> Daily:
    """Return a fresh every-day frequency."""

    return Daily(frozenset(ALL_WEEKDAYS))


def daily(*weekdays: Weekday | int | str) -> Daily:
    selected = set()
    for day in weekdays:
        try:
            selected.add(Weekday.parse(day))
        except (TypeError, ValueError):
            logger.warning("Ignoring unknown weekday %r", day)
    return Daily(frozenset(selected)) if selected else default_frequency()


def interval(days: Any) -> Interval:
    return Interval(_positive_int(days, fallback=1))


def x_times_per_period(count: Any, period: Period | str = Period.WEEK) -> XTimesPerPeriod:
    try:
        parsed_period = Period(period)
    except ValueError:
        logger.warning("Unknown quota period %r, using week", period)
        parsed_period = Period.WEEK
    return XTimesPerPeriod(_positive_int(count, fallback=1), parsed_period)


def specific_dates(*days_of_month: Any) -> SpecificDatesOfMonth:
    valid = set()
    for value in days_of_month:
        try:
            day = int(value)
        except (TypeError, ValueError):
            continue
        if 1 <= day <= 31:
            valid.add(day)
    return SpecificDatesOfMonth(frozenset(valid))


def _positive_int(value: Any, *, fallback: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return fallback
    return number if number > 0 else fallback


# ---------------------------------------------------------------------------
# Payload conversion
# ---------------------------------------------------------------------------


def parse_frequency(payload: HabitFrequency | Mapping[str, Any] | None) -> HabitFrequency:
    """Convert a stored payload into a well-formed frequency value.

    Anything that cannot be understood falls back to :func:`default_frequency`;
    partially valid payloads keep what they can (see the builders).
    """

    if isinstance(payload, (Daily, Interval, XTimesPerPeriod, SpecificDatesOfMonth)):
        return _normalize(payload)
    if not isinstance(payload, Mapping):
        return default_frequency()

    kind = payload.get("type")
    value = payload.get("value")

    if kind == DAILY:
        return daily(*_as_iterable(value))
    if kind == SPECIFIC_DATES:
        return specific_dates(*_as_iterable(value))
    if kind == INTERVAL:
        raw = value.get("interval") if isinstance(value, Mapping) else value
        return interval(raw)
    if kind == X_TIMES_PER_PERIOD:
        if not isinstance(value, Mapping):
            return x_times_per_period(None)
        count = value.get("repetitionsPerPeriod", value.get("count"))
        return x_times_per_period(count, value.get("period", Period.WEEK))

    logger.warning("Unknown frequency type %r, defaulting to every day", kind)
    return default_frequency()


def _normalize(frequency: HabitFrequency) -> HabitFrequency:
    if isinstance(frequency, Daily):
        return frequency if frequency.weekdays else default_frequency()
    if isinstance(frequency, Interval):
        return interval(frequency.days)
    if isinstance(frequency, XTimesPerPeriod):
        return x_times_per_period(frequency.count, frequency.period)
    return frequency


def _as_iterable(value: Any) -> Iterable[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return value
    return ()


def frequency_of(habit: Any) -> HabitFrequency:
    """Parsed frequency for a habit row (or anything with a ``frequency`` attribute)."""

    return parse_frequency(getattr(habit, "frequency", None))


def to_payload(frequency: HabitFrequency) -> dict[str, Any]:
    """Serialise a frequency into the JSON shape stored on the habit row."""

    if isinstance(frequency, Daily):
        ordered = sorted(frequency.weekdays)
        return {"type": DAILY, "value": [day.key for day in ordered]}
    if isinstance(frequency, Interval):
        return {"type": INTERVAL, "value": {"interval": frequency.days}}
    if isinstance(frequency, XTimesPerPeriod):
        return {
            "type": X_TIMES_PER_PERIOD,
            "value": {"repetitionsPerPeriod": frequency.count, "period": frequency.period.value},
        }
    if isinstance(frequency, SpecificDatesOfMonth):
        return {"type": SPECIFIC_DATES, "value": sorted(frequency.days_of_month)}
    raise TypeError(f"Unsupported frequency: {frequency!r}")


def is_valid_payload(payload: Mapping[str, Any] | None) -> bool:
    """Strict check for form layers; the engine itself never requires it."""

    if not isinstance(payload, Mapping):
        return False
    kind = payload.get("type")
    value = payload.get("value")
    if kind == DAILY:
        return isinstance(value, (list, tuple)) and len(value) > 0
    if kind == SPECIFIC_DATES:
        return isinstance(value, (list, tuple))
    if kind == INTERVAL:
        raw = value.get("interval") if isinstance(value, Mapping) else None
        return isinstance(raw, int) and not isinstance(raw, bool) and raw > 0
    if kind == X_TIMES_PER_PERIOD:
        if not isinstance(value, Mapping):
            return False
        count = value.get("repetitionsPerPeriod")
        return isinstance(count, int) and not isinstance(count, bool) and count > 0
    return False


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------


def describe(frequency: HabitFrequency | Mapping[str, Any] | None) -> str:
    """Short human summary such as ``"Weekdays (Mon-Fri)"`` or ``"Every 3 days"``."""

    if frequency is None:
        return "No frequency set"
    freq = parse_frequency(frequency)

    if isinstance(freq, Daily):
        days = freq.weekdays
        if len(days) == 7:
            return "Every day"
        if days == _WORKWEEK:
            return "Weekdays (Mon-Fri)"
        if days == _WEEKEND:
            return "Weekends (Sat-Sun)"
        if len(days) <= 3:
            names = [day.key[:3].capitalize() for day in sorted(days)]
            return f"{', '.join(names)} each week"
        return f"{len(days)} days per week"

    if isinstance(freq, Interval):
        return "Every 1 day" if freq.days == 1 else f"Every {freq.days} days"

    if isinstance(freq, XTimesPerPeriod):
        noun = "time" if freq.count == 1 else "times"
        return f"{freq.count} {noun} per {freq.period.value}"

    dates = sorted(freq.days_of_month)
    if not dates:
        return "No dates selected"
    if len(dates) == 1:
        return f"Day {dates[0]} of each month"
    if len(dates) <= 3:
        head = ", ".join(str(d) for d in dates[:-1])
        return f"Days {head} and {dates[-1]} of each month"
    return f"{len(dates)} specific days per month"


# ---------------------------------------------------------------------------
# Due-date check
# ---------------------------------------------------------------------------


def is_due(
    frequency: HabitFrequency | Mapping[str, Any] | None,
    on: DateLike,
    start_date: DateLike | None = None,
) -> bool:
    """Return True when ``on`` is a candidate occurrence for the rule.

    History is not consulted: a quota habit is a candidate on every day from
    its start date, whether or not the quota is already met.
    """

    try:
        day = coerce_date(on)
        start = coerce_optional_date(start_date)
        return _is_due(parse_frequency(frequency), day, start)
    except Exception:
        logger.warning("Could not evaluate due date for %r", on, exc_info=True)
        return False


def _is_due(freq: HabitFrequency, day: date, start: date | None) -> bool:
    if start is not None and day < start:
        return False

    if isinstance(freq, Daily):
        return Weekday(day.weekday()) in freq.weekdays
    if isinstance(freq, SpecificDatesOfMonth):
        return day.day in freq.days_of_month
    if isinstance(freq, XTimesPerPeriod):
        return True
    if isinstance(freq, Interval):
        if start is None:
            return False
        return (day - start).days % freq.days == 0
    raise TypeError(f"Unsupported frequency: {freq!r}")


__all__ = [
    "DAILY",
    "Daily",
    "FREQUENCY_TYPES",
    "HabitFrequency",
    "INTERVAL",
    "Interval",
    "SPECIFIC_DATES",
    "SpecificDatesOfMonth",
    "XTimesPerPeriod",
    "X_TIMES_PER_PERIOD",
    "daily",
    "default_frequency",
    "describe",
    "frequency_of",
    "interval",
    "is_due",
    "is_valid_payload",
    "parse_frequency",
    "specific_dates",
    "to_payload",
    "x_times_per_period",
]

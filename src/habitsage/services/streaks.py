"""Current and best streaks for habits, per recurrence rule.

A streak counts satisfied occurrences in a row under the habit's own cadence:
days that are not due are ignored, and a due day the user explicitly skipped
is excused (it neither adds to nor breaks the run). Quota habits count whole
weeks or months in which the quota was met.

Streak walks look back at most ``EngineSettings.lookback_days`` days, so a
run older than that horizon is truncated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from ..logging_config import get_logger
from .completions import CompletionLedger, as_ledger
from .frequency import (
    Daily,
    HabitFrequency,
    Interval,
    SpecificDatesOfMonth,
    XTimesPerPeriod,
    frequency_of,
    is_due,
)
from .periods import (
    DateLike,
    EngineSettings,
    Period,
    coerce_optional_date,
    months_between,
    period_bounds,
    resolve_today,
    shift_period,
)
from .quota import LedgerLike

logger = get_logger("services.streaks")


@dataclass(frozen=True, slots=True)
class HabitStats:
    """Headline numbers shown next to a habit."""

    streak: int
    best_streak: int
    total_completions: int
    last_completed: date | None


def current_streak(
    habit: Any,
    ledger: LedgerLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> int:
    """Length of the run ending at ``today`` (0 when anything goes wrong)."""

    try:
        settings = settings or EngineSettings()
        view = as_ledger(ledger)
        freq = frequency_of(habit)
        ref = resolve_today(today)
        start = coerce_optional_date(getattr(habit, "start_date", None))

        if isinstance(freq, Interval):
            return _interval_current(habit.id, freq, start, ref, view, settings)
        if isinstance(freq, XTimesPerPeriod):
            return _period_current(habit.id, freq, start, ref, view, settings)
        return _calendar_current(habit.id, freq, start, ref, view, settings)
    except Exception:
        logger.exception("Current streak failed for habit %s", getattr(habit, "id", None))
        return 0


def best_streak(
    habit: Any,
    ledger: LedgerLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> int:
    """Longest run anywhere in the habit's history (0 when anything goes wrong)."""

    try:
        settings = settings or EngineSettings()
        view = as_ledger(ledger)
        freq = frequency_of(habit)
        start = coerce_optional_date(getattr(habit, "start_date", None))

        if isinstance(freq, XTimesPerPeriod):
            return _period_best(habit.id, freq, start, resolve_today(today), view, settings)
        return _record_best(habit.id, freq, start, view)
    except Exception:
        logger.exception("Best streak failed for habit %s", getattr(habit, "id", None))
        return 0


def compute_streaks(
    habit: Any,
    ledger: LedgerLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> tuple[int, int]:
    """Return (current_streak, best_streak); best is never below current."""

    view = as_ledger(ledger)
    current = current_streak(habit, view, today=today, settings=settings)
    best = best_streak(habit, view, today=today, settings=settings)
    return current, max(best, current)


def habit_stats(
    habit: Any,
    ledger: LedgerLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> HabitStats:
    view = as_ledger(ledger)
    current, best = compute_streaks(habit, view, today=today, settings=settings)
    done = view.completed_dates(habit.id)
    return HabitStats(
        streak=current,
        best_streak=best,
        total_completions=len(done),
        last_completed=done[-1] if done else None,
    )


# ---------------------------------------------------------------------------
# Backward walks
# ---------------------------------------------------------------------------


def _calendar_current(
    habit_id: int,
    freq: HabitFrequency,
    start: date | None,
    today: date,
    view: CompletionLedger,
    settings: EngineSettings,
) -> int:
    streak = 0
    cursor = today
    for _ in range(settings.lookback_days):
        if start is not None and cursor < start:
            break
        if is_due(freq, cursor, start):
            if view.is_completed(habit_id, cursor):
                streak += 1
            elif not view.is_skipped(habit_id, cursor):
                break
        cursor -= timedelta(days=1)
    return streak


def _interval_current(
    habit_id: int,
    freq: Interval,
    start: date | None,
    today: date,
    view: CompletionLedger,
    settings: EngineSettings,
) -> int:
    if start is None or today < start:
        return 0

    # Latest scheduled day at or before today.
    anchor = today - timedelta(days=(today - start).days % freq.days)

    streak = 0
    cursor = anchor
    for _ in range(settings.lookback_days // freq.days + 1):
        if cursor < start:
            break
        if view.is_completed(habit_id, cursor):
            streak += 1
        elif not view.is_skipped(habit_id, cursor):
            break
        cursor -= timedelta(days=freq.days)
    return streak


def _max_periods(period: Period, lookback_days: int) -> int:
    days_per_period = 7 if period is Period.WEEK else 28
    return lookback_days // days_per_period + 1


def _period_current(
    habit_id: int,
    freq: XTimesPerPeriod,
    start: date | None,
    today: date,
    view: CompletionLedger,
    settings: EngineSettings,
) -> int:
    streak = 0
    cursor, _ = period_bounds(today, freq.period, settings.week_start)
    for _ in range(_max_periods(freq.period, settings.lookback_days)):
        period_start, period_end = period_bounds(cursor, freq.period, settings.week_start)
        if start is not None and period_end < start:
            break
        if view.count_completed(habit_id, period_start, period_end) >= freq.count:
            streak += 1
        else:
            break
        cursor = shift_period(period_start, freq.period, -1)
    return streak


# ---------------------------------------------------------------------------
# Best-streak scans
# ---------------------------------------------------------------------------


def _record_best(
    habit_id: int,
    freq: HabitFrequency,
    start: date | None,
    view: CompletionLedger,
) -> int:
    # Completions on days the rule never asked for do not extend a run.
    days = [day for day in view.completed_dates(habit_id) if is_due(freq, day, start)]

    best = 0
    run = 0
    previous: date | None = None
    for day in days:
        if previous is not None and _is_consecutive(freq, previous, day, habit_id, start, view):
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day
    return best


def _is_consecutive(
    freq: HabitFrequency,
    previous: date,
    current: date,
    habit_id: int,
    start: date | None,
    view: CompletionLedger,
) -> bool:
    gap = (current - previous).days
    if gap <= 0:
        return False

    if isinstance(freq, Daily):
        if gap == 1:
            return True
        between = (previous + timedelta(days=offset) for offset in range(1, gap))
        return all(
            not is_due(freq, day, start) or view.is_skipped(habit_id, day) for day in between
        )

    if isinstance(freq, Interval):
        if gap % freq.days:
            return False
        slots = (previous + timedelta(days=freq.days * step) for step in range(1, gap // freq.days))
        return all(view.is_skipped(habit_id, day) for day in slots)

    if isinstance(freq, SpecificDatesOfMonth):
        return months_between(previous, current) == 1 and previous.day == current.day

    raise TypeError(f"No record scan for {freq!r}")


def _period_best(
    habit_id: int,
    freq: XTimesPerPeriod,
    start: date | None,
    today: date,
    view: CompletionLedger,
    settings: EngineSettings,
) -> int:
    if start is None:
        done = view.completed_dates(habit_id)
        if not done:
            return 0
        start = done[0]

    cursor, _ = period_bounds(start, freq.period, settings.week_start)
    last, _ = period_bounds(today, freq.period, settings.week_start)

    best = 0
    run = 0
    while cursor <= last:
        period_start, period_end = period_bounds(cursor, freq.period, settings.week_start)
        if view.count_completed(habit_id, period_start, period_end) >= freq.count:
            run += 1
            best = max(best, run)
        else:
            run = 0
        cursor = shift_period(period_start, freq.period, 1)
    return best


__all__ = [
    "HabitStats",
    "best_streak",
    "compute_streaks",
    "current_streak",
    "habit_stats",
]

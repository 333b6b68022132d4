"""Quota bookkeeping for "N times per week/month" habits."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Union

from ..logging_config import get_logger
from ..models.habit import HabitCompletion
from .completions import CompletionLedger, as_ledger
from .frequency import XTimesPerPeriod, frequency_of, is_due
from .periods import DateLike, EngineSettings, Period, coerce_date, period_bounds

logger = get_logger("services.quota")

LedgerLike = Union[CompletionLedger, Iterable[HabitCompletion]]


@dataclass(frozen=True, slots=True)
class QuotaProgress:
    """Completions counted against one period's quota."""

    start: date
    end: date
    completed: int
    required: int

    @property
    def met(self) -> bool:
        return self.completed >= self.required

    @property
    def remaining(self) -> int:
        return max(0, self.required - self.completed)


def count_in_period(
    ledger: CompletionLedger,
    habit_id: int,
    on: date,
    period: Period,
    settings: EngineSettings,
) -> tuple[date, date, int]:
    start, end = period_bounds(on, period, settings.week_start)
    return start, end, ledger.count_completed(habit_id, start, end)


def quota_progress(
    habit: Any,
    ledger: LedgerLike,
    on: DateLike,
    *,
    settings: EngineSettings | None = None,
) -> QuotaProgress | None:
    """Progress for the period containing ``on``; ``None`` for non-quota habits."""

    freq = frequency_of(habit)
    if not isinstance(freq, XTimesPerPeriod):
        return None
    settings = settings or EngineSettings()
    start, end, done = count_in_period(
        as_ledger(ledger), habit.id, coerce_date(on), freq.period, settings
    )
    return QuotaProgress(start=start, end=end, completed=done, required=freq.count)


def quota_met(
    habit: Any,
    ledger: LedgerLike,
    on: DateLike,
    *,
    settings: EngineSettings | None = None,
) -> bool:
    """True when the week/month containing ``on`` already has enough completions."""

    try:
        progress = quota_progress(habit, ledger, on, settings=settings)
    except Exception:
        logger.exception("Quota check failed for habit %s", getattr(habit, "id", None))
        return False
    return progress is not None and progress.met


def period_has_elapsed(
    habit: Any,
    on: DateLike,
    today: DateLike,
    *,
    settings: EngineSettings | None = None,
) -> bool:
    """Whether the quota period containing ``on`` ended before ``today``.

    Non-quota habits have one-day periods, so this is simply ``on < today``.
    """

    day, current = coerce_date(on), coerce_date(today)
    freq = frequency_of(habit)
    if not isinstance(freq, XTimesPerPeriod):
        return day < current
    settings = settings or EngineSettings()
    _, end = period_bounds(day, freq.period, settings.week_start)
    return end < current


def still_needed(
    habit: Any,
    ledger: LedgerLike,
    on: DateLike,
    *,
    settings: EngineSettings | None = None,
) -> bool:
    """Due by frequency and still worth surfacing on ``on``.

    A day the user already acted on stays visible; otherwise a quota habit
    whose period is satisfied drops out.
    """

    if not is_due(frequency_of(habit), on, getattr(habit, "start_date", None)):
        return False
    view = as_ledger(ledger)
    record = view.get_record(habit.id, on)
    if record is not None and (record.completed or record.skipped):
        return True
    return not quota_met(habit, view, on, settings=settings)


__all__ = [
    "LedgerLike",
    "QuotaProgress",
    "count_in_period",
    "period_has_elapsed",
    "quota_met",
    "quota_progress",
    "still_needed",
]

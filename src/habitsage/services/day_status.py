"""One status per (habit, day), resolved with a fixed precedence order.

Several conditions can hold at once (a past day in a satisfied week is both
"past" and "quota met"), so :func:`classify` checks them in this order and
returns the first that applies:

1. LOCKED            day is before the habit's start date
2. NOT_SCHEDULED     the recurrence rule does not ask for this day
3. COMPLETED         completed (and not skipped) on this day
4. SKIPPED           explicitly skipped on this day
5. PERIOD_COMPLETED  quota habit whose week/month is already satisfied
6. FUTURE_LOCKED     day is after today
7. MISSED            past day, and for quota habits the period has closed
8. SCHEDULED         due and still open
9. DEFAULT           evaluation failed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from ..logging_config import get_logger
from .completions import CompletionLedger, as_ledger
from .frequency import XTimesPerPeriod, frequency_of, is_due
from .periods import (
    DateLike,
    EngineSettings,
    coerce_date,
    coerce_optional_date,
    iter_days,
    resolve_today,
)
from .quota import LedgerLike, period_has_elapsed, quota_met

logger = get_logger("services.day_status")


class DayStatus(str, Enum):
    LOCKED = "locked"
    NOT_SCHEDULED = "not_scheduled"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    PERIOD_COMPLETED = "period_completed"
    FUTURE_LOCKED = "future_locked"
    MISSED = "missed"
    SCHEDULED = "scheduled"
    DEFAULT = "default"


# Statuses on which the user may change the day's completion record.
EDITABLE_STATUSES = frozenset(
    {DayStatus.SCHEDULED, DayStatus.SKIPPED, DayStatus.COMPLETED, DayStatus.MISSED}
)


def can_edit(status: DayStatus) -> bool:
    return status in EDITABLE_STATUSES


def classify(
    habit: Any,
    ledger: LedgerLike,
    on: DateLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> DayStatus:
    """Return the single status of ``habit`` on ``on``. Never raises."""

    try:
        return _classify(habit, as_ledger(ledger), coerce_date(on), resolve_today(today), settings)
    except Exception:
        logger.exception("Could not classify habit %s on %r", getattr(habit, "id", None), on)
        return DayStatus.DEFAULT


def _classify(
    habit: Any,
    view: CompletionLedger,
    day: date,
    today: date,
    settings: EngineSettings | None,
) -> DayStatus:
    start = coerce_optional_date(habit.start_date)
    if start is not None and day < start:
        return DayStatus.LOCKED

    freq = frequency_of(habit)
    if not is_due(freq, day, start):
        return DayStatus.NOT_SCHEDULED

    record = view.get_record(habit.id, day)
    if record is not None and record.completed and not record.skipped:
        return DayStatus.COMPLETED
    if record is not None and record.skipped:
        return DayStatus.SKIPPED

    is_quota = isinstance(freq, XTimesPerPeriod)
    if is_quota and quota_met(habit, view, day, settings=settings):
        return DayStatus.PERIOD_COMPLETED

    if day > today:
        return DayStatus.FUTURE_LOCKED

    if day < today:
        if not is_quota or period_has_elapsed(habit, day, today, settings=settings):
            return DayStatus.MISSED
        return DayStatus.SCHEDULED

    return DayStatus.SCHEDULED


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StatusMessage:
    title: str
    description: str
    variant: str


def status_message(status: DayStatus, habit: Any = None) -> StatusMessage:
    """Title/description pair the UI shows for a status."""

    start = coerce_optional_date(getattr(habit, "start_date", None)) if habit is not None else None
    if status is DayStatus.LOCKED:
        description = (
            f"This habit starts on {start.strftime('%B %d, %Y')}"
            if start is not None
            else "This habit is not yet available"
        )
        return StatusMessage("Day Locked", description, "outline")

    messages = {
        DayStatus.PERIOD_COMPLETED: StatusMessage(
            "Period Completed",
            "You have already completed the required repetitions for this period",
            "secondary",
        ),
        DayStatus.NOT_SCHEDULED: StatusMessage(
            "Not Scheduled", "This habit is not scheduled for this date", "outline"
        ),
        DayStatus.SKIPPED: StatusMessage(
            "Skipped", "You chose to skip this habit for today", "secondary"
        ),
        DayStatus.FUTURE_LOCKED: StatusMessage(
            "Future Date", "You cannot complete habits for future dates", "outline"
        ),
        DayStatus.COMPLETED: StatusMessage(
            "Completed", "This habit was completed on this date", "default"
        ),
        DayStatus.SCHEDULED: StatusMessage(
            "Scheduled", "This habit is scheduled for this date", "default"
        ),
        DayStatus.MISSED: StatusMessage(
            "Missed", "This habit was not completed on this date", "destructive"
        ),
    }
    return messages.get(status, StatusMessage("Default", "Default status", "outline"))


@dataclass(slots=True)
class StatusSummary:
    """Per-status day counts over a date range."""

    completed: int = 0
    missed: int = 0
    scheduled: int = 0
    skipped: int = 0
    not_scheduled: int = 0
    period_completed: int = 0
    total_days: int = 0

    @property
    def total_scheduled(self) -> int:
        return self.completed + self.missed + self.scheduled + self.skipped

    @property
    def completion_rate(self) -> float:
        total = self.total_scheduled
        return self.completed / total if total else 0.0


_SUMMARY_FIELDS = {
    DayStatus.COMPLETED: "completed",
    DayStatus.MISSED: "missed",
    DayStatus.SCHEDULED: "scheduled",
    DayStatus.SKIPPED: "skipped",
    DayStatus.NOT_SCHEDULED: "not_scheduled",
    DayStatus.PERIOD_COMPLETED: "period_completed",
}


def summarize_range(
    habit: Any,
    ledger: LedgerLike,
    start: DateLike,
    end: DateLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> StatusSummary:
    """Count statuses for every day in ``[start, end]``; inverted ranges are empty."""

    summary = StatusSummary()
    view = as_ledger(ledger)
    ref = resolve_today(today)
    for day in iter_days(coerce_date(start), coerce_date(end)):
        summary.total_days += 1
        status = classify(habit, view, day, today=ref, settings=settings)
        name = _SUMMARY_FIELDS.get(status)
        if name is not None:
            setattr(summary, name, getattr(summary, name) + 1)
    return summary


@dataclass(slots=True)
class CalendarMarks:
    """Days to highlight on a habit's calendar, grouped by outcome."""

    completed: list[date] = field(default_factory=list)
    missed: list[date] = field(default_factory=list)
    skipped: list[date] = field(default_factory=list)
    period_completed: list[date] = field(default_factory=list)


def calendar_marks(
    habit: Any,
    ledger: LedgerLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> CalendarMarks:
    """Walk from the start date through today and bucket each day by status."""

    marks = CalendarMarks()
    ref = resolve_today(today)
    try:
        first = coerce_optional_date(habit.start_date) or ref
    except ValueError:
        logger.warning("Habit %s has an unreadable start date", getattr(habit, "id", None))
        return marks

    view = as_ledger(ledger)
    for day in iter_days(first, ref):
        status = classify(habit, view, day, today=ref, settings=settings)
        if status is DayStatus.COMPLETED:
            marks.completed.append(day)
        elif status is DayStatus.SKIPPED:
            marks.skipped.append(day)
        elif status is DayStatus.MISSED:
            marks.missed.append(day)
        elif status is DayStatus.PERIOD_COMPLETED and day < ref:
            marks.period_completed.append(day)
    return marks


__all__ = [
    "CalendarMarks",
    "DayStatus",
    "EDITABLE_STATUSES",
    "StatusMessage",
    "StatusSummary",
    "calendar_marks",
    "can_edit",
    "classify",
    "status_message",
    "summarize_range",
]

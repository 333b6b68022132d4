"""Dashboard views: which habits are due on a day, grouped by outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable

from ..logging_config import get_logger
from .completions import as_ledger
from .day_status import DayStatus, classify
from .periods import DateLike, EngineSettings, resolve_today
from .quota import LedgerLike

logger = get_logger("services.scheduling")

# Statuses that keep a habit off the day's list.
HIDDEN_STATUSES = frozenset(
    {
        DayStatus.LOCKED,
        DayStatus.NOT_SCHEDULED,
        DayStatus.PERIOD_COMPLETED,
        DayStatus.DEFAULT,
    }
)


@dataclass(frozen=True, slots=True)
class HabitDayView:
    """A habit together with what it looks like on one day."""

    habit: Any
    status: DayStatus
    is_scheduled: bool
    is_completed: bool
    is_skipped: bool
    actual_amount: float
    can_complete: bool


@dataclass(slots=True)
class GroupStats:
    total: int = 0
    scheduled_count: int = 0
    completed_count: int = 0
    skipped_count: int = 0
    pending_count: int = 0
    completion_rate: float = 0.0


@dataclass(slots=True)
class GroupedHabits:
    scheduled: list[HabitDayView] = field(default_factory=list)
    completed: list[HabitDayView] = field(default_factory=list)
    skipped: list[HabitDayView] = field(default_factory=list)
    not_scheduled: list[HabitDayView] = field(default_factory=list)
    stats: GroupStats = field(default_factory=GroupStats)


@dataclass(frozen=True, slots=True)
class UpcomingDay:
    on: date
    habits: list[Any]
    is_today: bool


def habit_day_view(
    habit: Any,
    ledger: LedgerLike,
    on: DateLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> HabitDayView:
    view = as_ledger(ledger)
    status = classify(habit, view, on, today=today, settings=settings)
    record = None
    try:
        record = view.get_record(habit.id, on)
    except (AttributeError, ValueError):
        logger.warning("No record lookup for habit %r on %r", getattr(habit, "id", None), on)

    scheduled = status not in HIDDEN_STATUSES
    return HabitDayView(
        habit=habit,
        status=status,
        is_scheduled=scheduled,
        is_completed=status is DayStatus.COMPLETED,
        is_skipped=status is DayStatus.SKIPPED,
        actual_amount=record.actual_amount if record is not None else 0.0,
        can_complete=scheduled and status is not DayStatus.FUTURE_LOCKED,
    )


def due_on(
    habits: Iterable[Any],
    ledger: LedgerLike,
    on: DateLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> list[Any]:
    """Habits that should appear on ``on``'s list, in input order."""

    try:
        view = as_ledger(ledger)
        ref = resolve_today(today)
    except ValueError:
        logger.exception("Cannot build the due list for %r", on)
        return []
    return [
        habit
        for habit in habits
        if classify(habit, view, on, today=ref, settings=settings) not in HIDDEN_STATUSES
    ]


def group_by_status(
    habits: Iterable[Any],
    ledger: LedgerLike,
    on: DateLike,
    *,
    today: DateLike | None = None,
    settings: EngineSettings | None = None,
) -> GroupedHabits:
    """Bucket habits into scheduled / completed / skipped / not scheduled for a day."""

    grouped = GroupedHabits()
    try:
        view = as_ledger(ledger)
        ref = resolve_today(today)
    except ValueError:
        logger.exception("Cannot group habits for %r", on)
        return grouped
    for habit in habits:
        item = habit_day_view(habit, view, on, today=ref, settings=settings)
        grouped.stats.total += 1
        if not item.is_scheduled:
            grouped.not_scheduled.append(item)
        elif item.is_completed:
            grouped.completed.append(item)
        elif item.is_skipped:
            grouped.skipped.append(item)
        else:
            grouped.scheduled.append(item)

    stats = grouped.stats
    stats.completed_count = len(grouped.completed)
    stats.skipped_count = len(grouped.skipped)
    stats.pending_count = len(grouped.scheduled)
    stats.scheduled_count = stats.completed_count + stats.skipped_count + stats.pending_count
    if stats.scheduled_count:
        stats.completion_rate = stats.completed_count / stats.scheduled_count
    return grouped


def upcoming(
    habits: Iterable[Any],
    ledger: LedgerLike,
    *,
    today: DateLike | None = None,
    days: int = 7,
    settings: EngineSettings | None = None,
) -> list[UpcomingDay]:
    """Due lists for ``days`` consecutive days starting today."""

    pool = list(habits)
    view = as_ledger(ledger)
    ref = resolve_today(today)
    result = []
    for offset in range(max(0, days)):
        day = ref + timedelta(days=offset)
        result.append(
            UpcomingDay(
                on=day,
                habits=due_on(pool, view, day, today=ref, settings=settings),
                is_today=day == ref,
            )
        )
    return result


__all__ = [
    "GroupStats",
    "GroupedHabits",
    "HIDDEN_STATUSES",
    "HabitDayView",
    "UpcomingDay",
    "due_on",
    "group_by_status",
    "habit_day_view",
    "upcoming",
]

"""Completion records: normalisation on write and a read-only ledger view."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Iterable, Iterator, Mapping

from ..logging_config import get_logger
from ..models.habit import HabitCompletion
from .periods import DateLike, coerce_date

logger = get_logger("services.completions")

# Fields callers may set through create_record/update_record.
RECORD_FIELDS = (
    "completed",
    "skipped",
    "actual_amount",
    "target_amount",
    "completed_at",
    "note",
    "mood",
    "difficulty",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _non_negative(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number < 0:
        return default
    return number


def normalize_completion_data(data: Mapping[str, Any], *, partial: bool = False) -> dict[str, Any]:
    """Coerce user-supplied completion fields into storable values.

    With ``partial=True`` only the keys present in ``data`` are returned, which
    is what updates want; otherwise every field gets its default.
    """

    def wanted(key: str) -> bool:
        return not partial or key in data

    result: dict[str, Any] = {}
    if wanted("completed"):
        result["completed"] = bool(data.get("completed", False))
    if wanted("skipped"):
        result["skipped"] = bool(data.get("skipped", False))
    if wanted("actual_amount"):
        result["actual_amount"] = _non_negative(data.get("actual_amount", 0), 0.0)
    if wanted("target_amount"):
        result["target_amount"] = max(1, int(_non_negative(data.get("target_amount", 1), 1)))
    if wanted("note"):
        result["note"] = str(data.get("note") or "").strip()
    if wanted("mood"):
        result["mood"] = data.get("mood") or None
    if wanted("difficulty"):
        result["difficulty"] = data.get("difficulty") or None

    if "completed" in result:
        if result["completed"]:
            result["completed_at"] = data.get("completed_at") or _now()
        else:
            result["completed_at"] = None
    elif "completed_at" in data:
        result["completed_at"] = data.get("completed_at")
    return result


def create_record(habit_id: int, on: DateLike, **data: Any) -> HabitCompletion:
    """Build a new completion row for ``(habit_id, on)`` from loose input."""

    unknown = set(data) - set(RECORD_FIELDS)
    if unknown:
        raise TypeError(f"Unknown completion fields: {sorted(unknown)}")
    now = _now()
    return HabitCompletion(
        habit_id=habit_id,
        occurred_on=coerce_date(on),
        created_at=now,
        updated_at=now,
        **normalize_completion_data(data),
    )


def update_record(existing: HabitCompletion, **updates: Any) -> HabitCompletion:
    """Return a copy of ``existing`` with ``updates`` applied and ``updated_at`` stamped.

    Identity (habit, day, creation time) is preserved; fields not mentioned in
    ``updates`` keep their current values.
    """

    unknown = set(updates) - set(RECORD_FIELDS)
    if unknown:
        raise TypeError(f"Unknown completion fields: {sorted(unknown)}")
    values = {field: getattr(existing, field) for field in RECORD_FIELDS}
    if updates.get("completed") and existing.completed and "completed_at" not in updates:
        # Re-marking a completed day keeps the original completion time.
        updates = {**updates, "completed_at": existing.completed_at}
    values.update(normalize_completion_data(updates, partial=True))
    return HabitCompletion(
        habit_id=existing.habit_id,
        occurred_on=existing.occurred_on,
        created_at=existing.created_at,
        updated_at=_now(),
        **values,
    )


def _is_done(record: HabitCompletion | None) -> bool:
    return bool(record is not None and record.completed and not record.skipped)


class CompletionLedger:
    """Immutable lookup view over a snapshot of completion records.

    Records are indexed by ``(habit_id, date)``. The ledger never talks to the
    database; build a new one from fresh rows after writing.
    """

    __slots__ = ("_by_key", "_by_habit")

    def __init__(self, records: Iterable[HabitCompletion] = ()) -> None:
        by_key: dict[tuple[int, date], HabitCompletion] = {}
        for record in records:
            key = (record.habit_id, coerce_date(record.occurred_on))
            if key in by_key:
                logger.warning(
                    "Duplicate completion for habit %s on %s; keeping the later row", *key
                )
            by_key[key] = record
        by_habit: dict[int, list[tuple[date, HabitCompletion]]] = {}
        for (habit_id, day), record in sorted(by_key.items(), key=lambda item: item[0][1]):
            by_habit.setdefault(habit_id, []).append((day, record))
        self._by_key = by_key
        self._by_habit = by_habit

    def __len__(self) -> int:
        return len(self._by_key)

    def __iter__(self) -> Iterator[HabitCompletion]:
        for rows in self._by_habit.values():
            for _, record in rows:
                yield record

    def get_record(self, habit_id: int, on: DateLike) -> HabitCompletion | None:
        return self._by_key.get((habit_id, coerce_date(on)))

    def is_completed(self, habit_id: int, on: DateLike) -> bool:
        """True when a record exists, is completed, and was not skipped."""
        return _is_done(self.get_record(habit_id, on))

    def is_skipped(self, habit_id: int, on: DateLike) -> bool:
        record = self.get_record(habit_id, on)
        return bool(record is not None and record.skipped)

    def current_amount(self, habit_id: int, on: DateLike) -> float:
        record = self.get_record(habit_id, on)
        return record.actual_amount if record is not None else 0.0

    def records_for(self, habit_id: int) -> list[HabitCompletion]:
        """All records for a habit, oldest first."""
        return [record for _, record in self._by_habit.get(habit_id, [])]

    def records_in_range(self, habit_id: int, start: DateLike, end: DateLike) -> list[HabitCompletion]:
        """Records with ``start <= date <= end``, oldest first; empty when inverted."""

        first, last = coerce_date(start), coerce_date(end)
        if first > last:
            return []
        return [record for day, record in self._by_habit.get(habit_id, []) if first <= day <= last]

    def completed_dates(self, habit_id: int) -> list[date]:
        return [day for day, record in self._by_habit.get(habit_id, []) if _is_done(record)]

    def count_completed(self, habit_id: int, start: DateLike, end: DateLike) -> int:
        return sum(1 for record in self.records_in_range(habit_id, start, end) if _is_done(record))


def as_ledger(source: CompletionLedger | Iterable[HabitCompletion] | None) -> CompletionLedger:
    """Accept either a ledger or a plain iterable of records."""

    if isinstance(source, CompletionLedger):
        return source
    return CompletionLedger(source or ())


__all__ = [
    "CompletionLedger",
    "RECORD_FIELDS",
    "as_ledger",
    "create_record",
    "normalize_completion_data",
    "update_record",
]

"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from sqlmodel import Session, select

from ...logging_config import get_logger
from ...models.habit import Habit, HabitCompletion
from ...services.completions import RECORD_FIELDS, CompletionLedger, create_record, update_record
from ...services.periods import DateLike, EngineSettings, coerce_date
from ...services.streaks import compute_streaks, current_streak

logger = get_logger("infra.repositories.habit")


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        settings: EngineSettings | None = None,
    ):
        """Initialize with a session factory and the engine's calendar settings."""
        self.session_factory = session_factory
        self.settings = settings or EngineSettings()

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def get_by_name(self, name: str) -> Optional[Habit]:
        """Retrieve a habit by name."""
        with self.session_factory() as session:
            obj = session.exec(select(Habit).where(Habit.name == name)).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, include_inactive: bool = False) -> list[Habit]:
        """List habits by name, optionally including inactive ones."""
        with self.session_factory() as session:
            statement = select(Habit).order_by(Habit.name)  # type: ignore
            if not include_inactive:
                statement = statement.where(Habit.is_active == True)  # noqa: E712
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_active(self) -> list[Habit]:
        """List only active habits."""
        return self.list_all(include_inactive=False)

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            logger.info("Habit created", extra={"habit_id": habit.id})
            return habit

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            habit.updated_at = datetime.now(timezone.utc)
            merged = session.merge(habit)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, habit_id: int) -> None:
        """Delete a habit together with its completion history."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return
            for record in session.exec(
                select(HabitCompletion).where(HabitCompletion.habit_id == habit_id)
            ).all():
                session.delete(record)
            session.delete(habit)
            session.commit()
            logger.info("Habit deleted", extra={"habit_id": habit_id})

    # Completion operations
    def get_completion(self, habit_id: int, occurred_on: DateLike) -> Optional[HabitCompletion]:
        """Get the record for one habit on one day."""
        with self.session_factory() as session:
            obj = session.get(HabitCompletion, (habit_id, coerce_date(occurred_on)))
            if obj:
                session.expunge(obj)
            return obj

    def list_completions(
        self,
        habit_id: Optional[int] = None,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> list[HabitCompletion]:
        """Records ordered by day, optionally narrowed to a habit and a date range."""
        with self.session_factory() as session:
            statement = select(HabitCompletion)
            if habit_id is not None:
                statement = statement.where(HabitCompletion.habit_id == habit_id)
            if start_date is not None:
                statement = statement.where(HabitCompletion.occurred_on >= coerce_date(start_date))
            if end_date is not None:
                statement = statement.where(HabitCompletion.occurred_on <= coerce_date(end_date))
            statement = statement.order_by(HabitCompletion.occurred_on)  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def upsert_completion(self, habit_id: int, occurred_on: DateLike, **data: Any) -> HabitCompletion:
        """Create the day's record on first touch, then update it in place."""
        day = coerce_date(occurred_on)
        with self.session_factory() as session:
            existing = session.get(HabitCompletion, (habit_id, day))
            if existing is None:
                record = create_record(habit_id, day, **data)
                session.add(record)
            else:
                changed = update_record(existing, **data)
                for name in (*RECORD_FIELDS, "updated_at"):
                    setattr(existing, name, getattr(changed, name))
                record = existing
            session.commit()
            session.refresh(record)
            session.expunge(record)
            return record

    def ledger_snapshot(self, habit_id: Optional[int] = None) -> CompletionLedger:
        """Load stored records into an in-memory ledger."""
        return CompletionLedger(self.list_completions(habit_id=habit_id))

    def get_current_streak(self, habit_id: int, today: Optional[date] = None) -> int:
        """Calculate current streak for a habit."""
        habit = self.get_by_id(habit_id)
        if habit is None:
            return 0
        return current_streak(
            habit, self.ledger_snapshot(habit_id), today=today, settings=self.settings
        )

    def get_longest_streak(self, habit_id: int, today: Optional[date] = None) -> int:
        """Calculate longest streak for a habit, never shorter than the current one."""
        habit = self.get_by_id(habit_id)
        if habit is None:
            return 0
        _, longest = compute_streaks(
            habit, self.ledger_snapshot(habit_id), today=today, settings=self.settings
        )
        return longest

"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol

from ...models.habit import Habit, HabitCompletion
from ...services.completions import CompletionLedger


class HabitRepository(Protocol):
    """Persistence the habit engine reads snapshots from."""

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def get_by_name(self, name: str) -> Optional[Habit]:
        """Retrieve a habit by name."""
        ...

    def list_all(self, include_inactive: bool = False) -> list[Habit]:
        """List all habits, optionally including inactive ones."""
        ...

    def list_active(self) -> list[Habit]:
        """List only active habits."""
        ...

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        ...

    def delete(self, habit_id: int) -> None:
        """Delete a habit and its completions."""
        ...

    # Completion operations
    def get_completion(self, habit_id: int, occurred_on: date) -> Optional[HabitCompletion]:
        """Get the record for one habit on one day."""
        ...

    def list_completions(
        self,
        habit_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[HabitCompletion]:
        """Records ordered by day, optionally narrowed to a habit and range."""
        ...

    def upsert_completion(self, habit_id: int, occurred_on: date, **data: Any) -> HabitCompletion:
        """Create the day's record or update it in place."""
        ...

    def ledger_snapshot(self, habit_id: Optional[int] = None) -> CompletionLedger:
        """Load records into an in-memory ledger."""
        ...

    def get_current_streak(self, habit_id: int, today: Optional[date] = None) -> int:
        """Calculate current streak for a habit."""
        ...

    def get_longest_streak(self, habit_id: int, today: Optional[date] = None) -> int:
        """Calculate longest streak for a habit."""
        ...

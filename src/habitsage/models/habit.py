"""Habit tracking tables."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

HABIT_CATEGORIES = ("health", "fitness", "mindfulness", "learning", "productivity", "social", "other")
HABIT_PRIORITIES = ("low", "medium", "high")
HABIT_UNITS = ("times", "minutes", "hours", "pages", "steps", "glasses", "km")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Habit(SQLModel, table=True):
    """A recurring intention with its recurrence rule."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    category: str = Field(default="other", max_length=32)
    priority: str = Field(default="medium", max_length=16)
    unit: str = Field(default="times", max_length=16)
    target_amount: int = Field(default=1, nullable=False)
    # Stored as {"type": ..., "value": ...}; see services.frequency.parse_frequency.
    frequency: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    start_date: Optional[date] = Field(default=None, index=True)
    reminder_enabled: bool = Field(default=False, nullable=False)
    reminder_time: Optional[str] = Field(default=None, max_length=5)
    notes: str = Field(default="", max_length=500)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    completions: list["HabitCompletion"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship("HabitCompletion", back_populates="habit"),
    )


class HabitCompletion(SQLModel, table=True):
    """What happened with a habit on one calendar day."""

    __tablename__: ClassVar[str] = "habit_completion"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    occurred_on: date = Field(primary_key=True, index=True)
    completed: bool = Field(default=False, nullable=False)
    skipped: bool = Field(default=False, nullable=False)
    actual_amount: float = Field(default=0.0, nullable=False)
    target_amount: int = Field(default=1, nullable=False)
    completed_at: Optional[datetime] = Field(default=None)
    note: str = Field(default="", max_length=500)
    mood: Optional[str] = Field(default=None, max_length=16)
    difficulty: Optional[str] = Field(default=None, max_length=16)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    habit: Optional["Habit"] = Relationship(
        back_populates="completions",
        sa_relationship=relationship("Habit", back_populates="completions"),
    )

"""SQLModel table exports."""

from .habit import HABIT_CATEGORIES, HABIT_PRIORITIES, HABIT_UNITS, Habit, HabitCompletion

__all__ = [
    "HABIT_CATEGORIES",
    "HABIT_PRIORITIES",
    "HABIT_UNITS",
    "Habit",
    "HabitCompletion",
]

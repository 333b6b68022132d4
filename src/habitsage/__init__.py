"""HabitSage: habit scheduling, streaks and day status for the tracker app."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .services.completions import CompletionLedger, create_record, update_record
from .services.day_status import DayStatus, can_edit, classify
from .services.frequency import is_due, parse_frequency
from .services.periods import EngineSettings, Period, Weekday
from .services.scheduling import due_on, group_by_status
from .services.streaks import best_streak, current_streak

__all__ = [
    "BaseConfig",
    "CompletionLedger",
    "DayStatus",
    "DevConfig",
    "EngineSettings",
    "Period",
    "Weekday",
    "best_streak",
    "can_edit",
    "classify",
    "create_record",
    "current_streak",
    "due_on",
    "group_by_status",
    "is_due",
    "parse_frequency",
    "update_record",
]

"""Service module exports."""

from . import (
    completions,
    day_status,
    frequency,
    periods,
    quota,
    scheduling,
    streaks,
)

__all__ = [
    "completions",
    "day_status",
    "frequency",
    "periods",
    "quota",
    "scheduling",
    "streaks",
]

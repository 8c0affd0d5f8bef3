"""SQLModel table exports."""

from .habit import ALL_TASK_DAYS, WEEKDAY_TOKENS, Completion, Frequency, Habit, TrackingMethod

__all__ = [
    "ALL_TASK_DAYS",
    "WEEKDAY_TOKENS",
    "Completion",
    "Frequency",
    "Habit",
    "TrackingMethod",
]

"""Service module exports."""

from . import analytics, events, goals, habits, leaderboard, schedule, streaks, trends

__all__ = [
    "analytics",
    "events",
    "goals",
    "habits",
    "leaderboard",
    "schedule",
    "streaks",
    "trends",
]

"""All-time consistency metrics over the live habits and their history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from ..models.habit import Habit
from .goals import round_half_up
from .trends import DayCompletions, live_habits


@dataclass(slots=True, frozen=True)
class AdvancedStats:
    """Derived consistency figures; zeros when there is nothing to measure."""

    consistency_score: int = 0
    all_time_completion_rate: int = 0
    perfect_days: int = 0
    total_habits_completed: int = 0
    total_time_invested_minutes: int = 0
    average_habits_per_day: float = 0.0
    habit_score: int = 0
    habit_age: int = 0


def calculate_stats(
    habits: Iterable[Habit],
    history: Sequence[DayCompletions],
    *,
    today: date,
) -> AdvancedStats:
    """Summarize ``history`` (one entry per day) against the live habits.

    - consistency: completions over ``len(habits) * len(history)``, as a percent.
    - perfect day: every live habit completed.
    - time invested: each completion of a timed habit adds its duration.
    - habit score: ``0.4 * consistency + 2 * perfect_days + 0.3 * min(total, 100)``,
      capped at 100.
    - habit age: mean days since each habit's start date.
    """

    live = live_habits(habits)
    if not live or not history:
        return AdvancedStats()

    durations = {h.id: h.duration_minutes or 0 for h in live}
    total = 0
    perfect = 0
    minutes = 0
    for day in history:
        done = set(durations).intersection(day.completed_ids)
        total += len(done)
        minutes += sum(durations[hid] for hid in done)
        if len(done) == len(live):
            perfect += 1

    days = len(history)
    consistency = round_half_up(100 * total / (len(live) * days))
    ages = [max((today - h.start_date).days, 0) for h in live]
    score = min(100, round_half_up(consistency * 0.4 + perfect * 2 + min(total, 100) * 0.3))

    return AdvancedStats(
        consistency_score=consistency,
        all_time_completion_rate=consistency,
        perfect_days=perfect,
        total_habits_completed=total,
        total_time_invested_minutes=minutes,
        average_habits_per_day=round(total / days, 1),
        habit_score=score,
        habit_age=round_half_up(sum(ages) / len(ages)),
    )


__all__ = ["AdvancedStats", "calculate_stats"]

"""Goal progress estimation against an expected-completions projection."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional, Union

from ..models.habit import Habit
from .schedule import expected_occurrences

DayKey = Union[date, str]


@dataclass(slots=True, frozen=True)
class GoalProgress:
    """Breakdown behind a goal's percentage."""

    percent: int
    completed: int
    expected: int
    remaining: int


def linked_habits(goal: Habit, habits: Iterable[Habit]) -> list[Habit]:
    """Live habits attached to ``goal``."""

    return [h for h in habits if h.goal_id == goal.id and not h.is_archived]


def _as_date(key: DayKey) -> date:
    return key if isinstance(key, date) else date.fromisoformat(key)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def goal_progress_breakdown(
    goal: Habit,
    habits: Iterable[Habit],
    today_completions: Mapping[str, bool],
    history_map: Optional[Mapping[DayKey, Iterable[str]]] = None,
    *,
    today: date | None = None,
) -> Optional[GoalProgress]:
    """Compute completed vs. expected completions for a goal.

    ``today_completions`` supplies today's state; ``history_map`` maps other
    days to the ids completed on them. Returns ``None`` when progress is
    undefined: not a goal, no target date, or no linked habits.
    """

    if not goal.is_goal or goal.target_date is None:
        return None
    linked = linked_habits(goal, habits)
    if not linked:
        return None

    today = today or date.today()
    target = goal.target_date
    history = {_as_date(k): set(v) for k, v in (history_map or {}).items()}
    tomorrow = today + timedelta(days=1)

    expected = 0
    remaining = 0
    completed = 0
    for habit in linked:
        start = habit.start_date or goal.start_date
        expected += expected_occurrences(habit.frequency, habit.task_days, start=start, end=target)
        remaining += expected_occurrences(
            habit.frequency, habit.task_days, start=max(start, tomorrow), end=target
        )

        last = min(today, target)
        completed += sum(
            1
            for day, ids in history.items()
            if day != today and start <= day <= last and habit.id in ids
        )
        if start <= today <= target and today_completions.get(habit.id):
            completed += 1

    expected = max(expected, 1)
    percent = min(100, max(0, round_half_up(100 * completed / expected)))
    return GoalProgress(percent=percent, completed=completed, expected=expected, remaining=remaining)


def calculate_goal_progress_instant(
    goal: Habit,
    habits: Iterable[Habit],
    today_completions: Mapping[str, bool],
    history_map: Optional[Mapping[DayKey, Iterable[str]]] = None,
    *,
    today: date | None = None,
) -> Optional[int]:
    """Percentage 0-100 from already-loaded data, or ``None`` when undefined."""

    breakdown = goal_progress_breakdown(
        goal, habits, today_completions, history_map, today=today
    )
    return breakdown.percent if breakdown is not None else None


__all__ = [
    "GoalProgress",
    "calculate_goal_progress_instant",
    "goal_progress_breakdown",
    "linked_habits",
    "round_half_up",
]

"""Streak helpers: current/best runs, perfect days and completion totals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Iterator, Mapping

from ..models.habit import Habit
from .schedule import is_scheduled


@dataclass(slots=True, frozen=True)
class StreakSummary:
    """Derived streak figures; recomputed from the ledger on every query."""

    current_streak: int = 0
    best_streak: int = 0
    perfect_days: int = 0
    total_completed: int = 0


def _walk_back(today: date, start: date) -> Iterator[date]:
    cursor = today
    while cursor >= start:
        yield cursor
        cursor -= timedelta(days=1)


class _RunTracker:
    """Accumulates runs during a single backward scan.

    The first run closed by a miss is the current streak; the longest run seen
    is the best streak. Today may still be in progress, so an incomplete today
    is skipped instead of closing the run.
    """

    def __init__(self, today: date) -> None:
        self.today = today
        self.current = 0
        self.best = 0
        self.run = 0
        self.broken = False

    def hit(self) -> None:
        self.run += 1

    def miss(self, day: date) -> None:
        if day == self.today:
            return
        if not self.broken:
            self.current = self.run
            self.broken = True
        self.best = max(self.best, self.run)
        self.run = 0

    def finish(self) -> tuple[int, int]:
        if not self.broken:
            self.current = self.run
        self.best = max(self.best, self.run)
        return self.current, self.best


def compute_streaks(
    habit: Habit, completed_days: Iterable[date], *, today: date | None = None
) -> tuple[int, int]:
    """Return (current_streak, best_streak) for one habit.

    Unscheduled days are skipped; the scan ends at the habit's start date.
    """

    summary = summarize_habit(habit, completed_days, today=today)
    return summary.current_streak, summary.best_streak


def summarize_habit(
    habit: Habit, completed_days: Iterable[date], *, today: date | None = None
) -> StreakSummary:
    """Streak summary for a single habit or goal."""

    today = today or date.today()
    done = {d for d in completed_days if habit.start_date <= d <= today}
    if habit.start_date > today:
        return StreakSummary()

    tracker = _RunTracker(today)
    perfect = 0
    for day in _walk_back(today, habit.start_date):
        if not is_scheduled(habit, day):
            continue
        if day in done:
            tracker.hit()
            perfect += 1
        else:
            tracker.miss(day)

    current, best = tracker.finish()
    return StreakSummary(
        current_streak=current,
        best_streak=best,
        perfect_days=perfect,
        total_completed=len(done),
    )


def summarize_habits(
    habits: Iterable[Habit],
    history: Mapping[date, Iterable[str]],
    *,
    today: date | None = None,
) -> StreakSummary:
    """Aggregate streak summary across all live (non-archived, non-goal) habits.

    A day extends the streak when at least one scheduled habit was completed.
    A perfect day has every scheduled habit completed. Ids in ``history`` that
    do not belong to a live habit are ignored.
    """

    today = today or date.today()
    live = [h for h in habits if not h.is_archived and not h.is_goal]
    if not live:
        return StreakSummary()

    live_ids = {h.id for h in live}
    start = min(h.start_date for h in live)
    if start > today:
        return StreakSummary()

    tracker = _RunTracker(today)
    perfect = 0
    total = 0
    for day in _walk_back(today, start):
        done = live_ids.intersection(history.get(day, ()))
        total += len(done)

        scheduled = {h.id for h in live if is_scheduled(h, day)}
        if not scheduled:
            continue
        if scheduled <= done:
            perfect += 1
        if scheduled & done:
            tracker.hit()
        else:
            tracker.miss(day)

    current, best = tracker.finish()
    return StreakSummary(
        current_streak=current,
        best_streak=best,
        perfect_days=perfect,
        total_completed=total,
    )


__all__ = ["StreakSummary", "compute_streaks", "summarize_habit", "summarize_habits"]

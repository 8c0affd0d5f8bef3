"""Heatmap and trend aggregation over the completion ledger.

Every series here is fixed-length and gap-filled: a day without completions
yields an explicit zero entry rather than being skipped. Counts are plain
per-day tallies of completed live habits, with no weighting.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Mapping

from ..models.habit import Habit


@dataclass(slots=True)
class DayCompletions:
    day: date
    completed_ids: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class HeatmapEntry:
    day: date
    count: int

    def as_dict(self) -> dict[str, object]:
        return {"date": self.day.isoformat(), "count": self.count}


@dataclass(slots=True, frozen=True)
class CompletionRate:
    day: date
    total_habits: int
    completed_habits: int
    completion_rate: float


@dataclass(slots=True, frozen=True)
class MonthlyCompletionRate:
    month: str
    year: int
    total_habits: int
    completed_habits: int
    completion_rate: float


@dataclass(slots=True, frozen=True)
class CategoryBreakdown:
    category: str
    total_habits: int
    completed_habits: int
    completion_rate: float


def live_habits(habits: Iterable[Habit]) -> list[Habit]:
    """Non-archived, non-goal habits: the set every daily rate is measured against."""

    return [h for h in habits if not h.is_archived and not h.is_goal]


def window_days(n: int, *, today: date) -> list[date]:
    """The ``n`` calendar days ending today, oldest first."""

    if n < 1:
        raise ValueError("Window must cover at least one day")
    return [today - timedelta(days=offset) for offset in range(n - 1, -1, -1)]


def last_n_days_completions(
    history: Mapping[date, Iterable[str]],
    n: int,
    *,
    today: date,
    allowed_ids: set[str],
) -> list[DayCompletions]:
    """Exactly ``n`` entries, oldest first, listing ids in ``allowed_ids``."""

    result = []
    for day in window_days(n, today=today):
        ids = [hid for hid in history.get(day, ()) if hid in allowed_ids]
        result.append(DayCompletions(day=day, completed_ids=ids))
    return result


def heatmap(days: Iterable[DayCompletions]) -> list[HeatmapEntry]:
    """Collapse a gap-filled window into per-day counts of distinct habits."""

    return [HeatmapEntry(day=d.day, count=len(set(d.completed_ids))) for d in days]


def _rate(completed: int, total: int) -> float:
    return (completed / total) * 100 if total > 0 else 0.0


def completion_rates(
    habits: Iterable[Habit],
    history: Mapping[date, Iterable[str]],
    n: int,
    *,
    today: date,
) -> list[CompletionRate]:
    """Per-day completion rate against the current live habit count."""

    live = live_habits(habits)
    live_ids = {h.id for h in live}
    total = len(live)
    rates = []
    for day in window_days(n, today=today):
        done = len(live_ids.intersection(history.get(day, ())))
        rates.append(
            CompletionRate(
                day=day,
                total_habits=total,
                completed_habits=done,
                completion_rate=_rate(done, total),
            )
        )
    return rates


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def yearly_completion_rates(
    habits: Iterable[Habit],
    history: Mapping[date, Iterable[str]],
    *,
    today: date,
) -> list[MonthlyCompletionRate]:
    """Twelve calendar months ending with the current one; future days excluded."""

    live = live_habits(habits)
    live_ids = {h.id for h in live}
    total = len(live)
    result = []
    for delta in range(-11, 1):
        year, month = _shift_month(today.year, today.month, delta)
        days_in_month = calendar.monthrange(year, month)[1]
        counted_days = 0
        completed = 0
        for dom in range(1, days_in_month + 1):
            day = date(year, month, dom)
            if day > today:
                break
            counted_days += 1
            completed += len(live_ids.intersection(history.get(day, ())))
        result.append(
            MonthlyCompletionRate(
                month=calendar.month_abbr[month],
                year=year,
                total_habits=total,
                completed_habits=round(completed / counted_days) if counted_days else 0,
                completion_rate=_rate(completed, counted_days * total),
            )
        )
    return result


def completion_by_category(
    habits: Iterable[Habit], completions: Mapping[str, bool]
) -> list[CategoryBreakdown]:
    """Share of live habits completed on one day, grouped by category."""

    buckets: dict[str, list[int]] = {}
    for habit in live_habits(habits):
        totals = buckets.setdefault(habit.category, [0, 0])
        totals[0] += 1
        if completions.get(habit.id):
            totals[1] += 1

    return [
        CategoryBreakdown(
            category=category.capitalize(),
            total_habits=total,
            completed_habits=done,
            completion_rate=_rate(done, total),
        )
        for category, (total, done) in buckets.items()
    ]

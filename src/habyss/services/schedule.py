"""Scheduling rules: when a habit is due and how often it is expected."""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Iterable

from ..models.habit import WEEKDAY_TOKENS, Frequency, Habit

# Fixed month length used by goal projections; drifts for 28/31-day months.
MONTH_LENGTH_DAYS = 30


def parse_task_days(raw: str | Iterable[str] | None) -> frozenset[str]:
    """Normalize weekday tokens; an empty value means every day."""

    if raw is None:
        return frozenset(WEEKDAY_TOKENS)
    tokens = raw.split(",") if isinstance(raw, str) else list(raw)
    cleaned = {t.strip().lower()[:3] for t in tokens if t and t.strip()}
    unknown = cleaned - set(WEEKDAY_TOKENS)
    if unknown:
        raise ValueError(f"Unknown task day(s): {', '.join(sorted(unknown))}")
    return frozenset(cleaned) if cleaned else frozenset(WEEKDAY_TOKENS)


def format_task_days(days: Iterable[str]) -> str:
    """Serialize weekday tokens in calendar order."""

    parsed = parse_task_days(list(days))
    return ",".join(token for token in WEEKDAY_TOKENS if token in parsed)


def weekday_token(day: date) -> str:
    return WEEKDAY_TOKENS[day.weekday()]


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def is_scheduled(habit: Habit, day: date) -> bool:
    """Return True when ``habit`` is due on ``day``.

    Days before the start date or after a goal's target date are never due.
    Monthly habits fall on the start date's day-of-month; all others follow
    their task days and optional week interval.
    """

    if day < habit.start_date:
        return False
    if habit.target_date is not None and day > habit.target_date:
        return False

    interval = habit.week_interval or 1
    if interval > 1:
        weeks = (_week_start(day) - _week_start(habit.start_date)).days // 7
        if weeks % interval != 0:
            return False

    if habit.frequency == Frequency.monthly:
        return day.day == habit.start_date.day

    return weekday_token(day) in parse_task_days(habit.task_days)


def expected_occurrences(
    frequency: Frequency | str,
    task_days: str | Iterable[str] | None,
    *,
    start: date,
    end: date,
) -> int:
    """Projected completions between ``start`` and ``end`` (inclusive).

    daily: day count; weekly: weeks * len(task_days); monthly: days / 30.
    Each figure is rounded up; an empty range projects 0.
    """

    if end < start:
        return 0
    days = (end - start).days + 1
    frequency = Frequency(frequency)
    if frequency == Frequency.daily:
        return days
    if frequency == Frequency.weekly:
        return math.ceil(days * len(parse_task_days(task_days)) / 7)
    return math.ceil(days / MONTH_LENGTH_DAYS)

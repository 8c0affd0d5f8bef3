"""Tests for scheduling rules and expected-occurrence projections."""

from __future__ import annotations

from datetime import date

import pytest

from habyss.models import Frequency, Habit
from habyss.services.schedule import (
    expected_occurrences,
    format_task_days,
    is_scheduled,
    parse_task_days,
)


def _habit(**fields) -> Habit:
    fields.setdefault("name", "Habit")
    fields.setdefault("start_date", date(2024, 3, 1))
    return Habit(**fields)


class TestTaskDays:
    def test_empty_means_every_day(self):
        assert parse_task_days("") == frozenset({"mon", "tue", "wed", "thu", "fri", "sat", "sun"})

    def test_tokens_are_normalized(self):
        assert parse_task_days(" Mon,WEDNESDAY , fri") == frozenset({"mon", "wed", "fri"})

    def test_unknown_token_rejected(self):
        with pytest.raises(ValueError):
            parse_task_days("mon,funday")

    def test_format_uses_calendar_order(self):
        assert format_task_days(["sun", "mon", "wed"]) == "mon,wed,sun"


class TestIsScheduled:
    def test_daily_every_day_from_start(self):
        habit = _habit()
        assert is_scheduled(habit, date(2024, 3, 1))
        assert is_scheduled(habit, date(2024, 3, 2))
        assert not is_scheduled(habit, date(2024, 2, 29))

    def test_task_days_restrict_weekdays(self):
        habit = _habit(frequency=Frequency.weekly, task_days="mon,wed,fri")
        assert is_scheduled(habit, date(2024, 3, 4))  # Monday
        assert not is_scheduled(habit, date(2024, 3, 5))  # Tuesday
        assert is_scheduled(habit, date(2024, 3, 8))  # Friday

    def test_monthly_follows_start_day_of_month(self):
        habit = _habit(frequency=Frequency.monthly, start_date=date(2024, 1, 15))
        assert is_scheduled(habit, date(2024, 3, 15))
        assert not is_scheduled(habit, date(2024, 3, 14))

    def test_week_interval_skips_off_weeks(self):
        habit = _habit(frequency=Frequency.weekly, task_days="fri", week_interval=2)
        assert is_scheduled(habit, date(2024, 3, 1))
        assert not is_scheduled(habit, date(2024, 3, 8))
        assert is_scheduled(habit, date(2024, 3, 15))

    def test_nothing_scheduled_after_target_date(self):
        habit = _habit(is_goal=True, target_date=date(2024, 3, 10))
        assert is_scheduled(habit, date(2024, 3, 10))
        assert not is_scheduled(habit, date(2024, 3, 11))


class TestExpectedOccurrences:
    def test_daily_counts_days_inclusive(self):
        assert expected_occurrences("daily", None, start=date(2024, 3, 1), end=date(2024, 3, 10)) == 10

    def test_weekly_scales_by_task_days(self):
        # 10 days = 10/7 weeks, three sessions per week -> ceil(4.28) = 5
        assert expected_occurrences(
            Frequency.weekly, "mon,wed,fri", start=date(2024, 3, 1), end=date(2024, 3, 10)
        ) == 5

    def test_weekly_exact_weeks_do_not_round_up(self):
        assert expected_occurrences(
            Frequency.weekly, "mon,tue,wed,thu,fri,sat,sun", start=date(2024, 3, 1), end=date(2024, 3, 10)
        ) == 10

    def test_monthly_uses_thirty_day_months(self):
        assert expected_occurrences("monthly", None, start=date(2024, 1, 1), end=date(2024, 3, 1)) == 3

    def test_empty_range_projects_zero(self):
        assert expected_occurrences("daily", None, start=date(2024, 3, 2), end=date(2024, 3, 1)) == 0

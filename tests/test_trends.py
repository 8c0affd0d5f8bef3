"""Tests for heatmap and completion-rate series."""

from __future__ import annotations

import pytest

from habyss.services.trends import heatmap, window_days
from tests.conftest import TODAY, days_ago


class TestHeatmap:
    def test_default_window_is_90_days_oldest_first(self, engine, habit_factory, complete):
        habit = habit_factory(name="Read", start_date=days_ago(120))
        complete(habit, TODAY, days_ago(3), days_ago(100))

        entries = engine.get_heatmap_data()

        assert len(entries) == 90
        assert entries[0].day == days_ago(89)
        assert entries[-1].day == TODAY
        counts = {e.day: e.count for e in entries}
        assert counts[TODAY] == 1
        assert counts[days_ago(3)] == 1
        assert sum(counts.values()) == 2

    def test_counts_distinct_habits_and_skips_archived(self, engine, habit_factory, complete):
        a = habit_factory(name="A")
        b = habit_factory(name="B")
        old = habit_factory(name="Old")
        complete(a, TODAY)
        complete(b, TODAY)
        complete(old, TODAY)
        engine.archive_habit(old.id)

        assert engine.get_heatmap_data()[-1].count == 2

    def test_window_follows_config(self, engine):
        engine.config.HEATMAP_DAYS = 14

        assert len(engine.get_heatmap_data()) == 14

    def test_entry_serializes_with_iso_date(self, engine):
        entry = engine.get_heatmap_data()[-1]

        assert entry.as_dict() == {"date": TODAY.isoformat(), "count": 0}

    def test_heatmap_of_no_days(self):
        assert heatmap([]) == []

    def test_window_rejects_non_positive_length(self):
        with pytest.raises(ValueError):
            window_days(0, today=TODAY)


class TestCompletionRates:
    @pytest.fixture
    def tracked(self, habit_factory, goal_factory, complete):
        goal = goal_factory(name="Goal")
        a = habit_factory(name="A", category="health")
        b = habit_factory(name="B", category="health")
        c = habit_factory(name="C", category="work")
        complete(a, TODAY, days_ago(1))
        complete(b, days_ago(1))
        complete(c, days_ago(1))
        complete(goal, TODAY)
        return a, b, c

    def test_weekly_series(self, engine, tracked):
        rates = engine.get_weekly_completion_data()

        assert [r.day for r in rates] == [days_ago(i) for i in range(6, -1, -1)]
        assert rates[-1].total_habits == 3
        assert rates[-1].completed_habits == 1
        assert rates[-1].completion_rate == pytest.approx(100 / 3)
        assert rates[-2].completion_rate == pytest.approx(100.0)
        assert rates[0].completion_rate == 0.0

    def test_monthly_series_has_30_days(self, engine, tracked):
        rates = engine.get_monthly_completion_data()

        assert len(rates) == 30
        assert rates[-1].day == TODAY

    def test_empty_registry_reports_zero_rates(self, engine):
        rates = engine.get_weekly_completion_data()

        assert all(r.total_habits == 0 and r.completion_rate == 0.0 for r in rates)

    def test_yearly_series_ends_with_current_month(self, engine, tracked):
        months = engine.get_yearly_completion_data()

        assert len(months) == 12
        assert (months[0].month, months[0].year) == ("Apr", 2023)
        assert (months[-1].month, months[-1].year) == ("Mar", 2024)
        # 4 completions over 15 elapsed days of 3 habits.
        assert months[-1].completion_rate == pytest.approx(400 / 45)
        assert months[0].completion_rate == 0.0

    def test_completion_by_category(self, engine, tracked):
        breakdown = {c.category: c for c in engine.get_completion_by_category()}

        assert set(breakdown) == {"Health", "Work"}
        assert breakdown["Health"].total_habits == 2
        assert breakdown["Health"].completed_habits == 1
        assert breakdown["Health"].completion_rate == pytest.approx(50.0)
        assert breakdown["Work"].completion_rate == 0.0

    def test_category_breakdown_for_past_day(self, engine, tracked):
        breakdown = {c.category: c for c in engine.get_completion_by_category(days_ago(1))}

        assert breakdown["Health"].completed_habits == 2
        assert breakdown["Work"].completed_habits == 1

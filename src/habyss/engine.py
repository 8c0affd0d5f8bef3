"""Engine facade wiring repositories, clock and events for callers."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Optional

from sqlmodel import Session

from .config import BaseConfig
from .domain.repositories import CompletionRepository, HabitRepository
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelCompletionRepository, SQLModelHabitRepository
from .models.habit import Completion, Habit
from .services import analytics, goals, habits, leaderboard, streaks, trends
from .services.events import CompletionChange, HabitEventBus, HabitsListener, Unsubscribe

logger = logging.getLogger(__name__)


@dataclass
class HabitEngine:
    """Queries and commands over the completion ledger and habit registry.

    Nothing derived is cached: every query reads the stored records again, so
    results are consistent with the latest committed write.
    """

    config: BaseConfig
    session_factory: Callable[[], Session]
    habit_repo: HabitRepository
    completion_repo: CompletionRepository
    events: HabitEventBus = field(default_factory=HabitEventBus)
    clock: Optional[Callable[[], date]] = None

    def today(self) -> date:
        return self.clock() if self.clock is not None else self.config.today()

    # Registry -----------------------------------------------------------

    def get_habits(self, include_archived: bool = False) -> list[Habit]:
        return self.habit_repo.list_all(include_archived=include_archived)

    def get_goals(self) -> list[Habit]:
        return self.habit_repo.list_goals()

    def add_habit(self, name: str, *, is_goal: bool = False, **fields: Any) -> Habit:
        fields.setdefault("start_date", self.today())
        habit = habits.add_habit(self.habit_repo, is_goal=is_goal, name=name, **fields)
        self._publish_habits()
        return habit

    def add_goal(self, name: str, target_date: date | str | None, **fields: Any) -> Habit:
        return self.add_habit(name, is_goal=True, target_date=target_date, **fields)

    def update_habit(self, habit_id: str, **changes: Any) -> Habit:
        habit = habits.update_habit(self.habit_repo, habit_id, **changes)
        self._publish_habits()
        return habit

    def archive_habit(self, habit_id: str) -> list[str]:
        archived = habits.archive_habit(self.habit_repo, habit_id)
        self._publish_habits()
        return archived

    def remove_habit_everywhere(self, habit_id: str) -> bool:
        removed = habits.remove_habit_everywhere(self.habit_repo, self.completion_repo, habit_id)
        if removed:
            self._publish_habits()
        return removed

    def remove_goal_with_linked_habits(self, goal_id: str) -> list[str]:
        removed = habits.remove_goal_with_linked_habits(self.habit_repo, self.completion_repo, goal_id)
        if removed:
            self._publish_habits()
        return removed

    def subscribe_to_habits(self, callback: HabitsListener) -> Unsubscribe:
        """Register ``callback`` and deliver the current habits to it immediately."""

        return self.events.subscribe_to_habits(callback, initial=self.get_habits())

    def subscribe_to_completions(self, callback: Callable[[CompletionChange], None]) -> Unsubscribe:
        return self.events.subscribe_to_completions(callback)

    def _publish_habits(self) -> None:
        self.events.publish_habits(self.get_habits())

    # Ledger -------------------------------------------------------------

    def get_completions(self, day: date | None = None) -> dict[str, bool]:
        """State of every registered habit on ``day``; missing records read as False.

        Today's view lists live habits only; past days include archived ones so
        their history stays queryable.
        """

        today = self.today()
        day = day or today
        registered = self.habit_repo.list_all(include_archived=day != today)
        state = {h.id: False for h in registered}
        for record in self.completion_repo.get_for_day(day):
            if record.habit_id in state:
                state[record.habit_id] = record.completed
        return state

    def toggle_completion(self, habit_id: str, day: date | None = None) -> bool:
        day = day or self.today()
        if self.habit_repo.get_by_id(habit_id) is None:
            raise ValueError(f"Habit {habit_id} not found")
        completed = self.completion_repo.toggle(habit_id, day)
        self.events.publish_completion(CompletionChange(habit_id=habit_id, day=day, completed=completed))
        return completed

    def set_completion(self, habit_id: str, completed: bool, day: date | None = None) -> bool:
        day = day or self.today()
        if self.habit_repo.get_by_id(habit_id) is None:
            raise ValueError(f"Habit {habit_id} not found")
        record = self.completion_repo.set_state(habit_id, day, completed)
        self.events.publish_completion(
            CompletionChange(habit_id=habit_id, day=day, completed=record.completed)
        )
        return record.completed

    def set_completion_value(self, habit_id: str, value: int, day: date | None = None) -> Completion:
        """Record a measured value (steps, pages, minutes) for a numeric habit."""

        day = day or self.today()
        if value < 0:
            raise ValueError("Completion value cannot be negative")
        if self.habit_repo.get_by_id(habit_id) is None:
            raise ValueError(f"Habit {habit_id} not found")
        record = self.completion_repo.set_value(habit_id, day, value)
        self.events.publish_completion(
            CompletionChange(habit_id=habit_id, day=day, completed=record.completed, value=record.value)
        )
        return record

    def completions_between(
        self, start: date, end: date, habit_ids: Optional[Iterable[str]] = None
    ) -> list[Completion]:
        """Stored records within an inclusive range, ordered by day."""

        return self.completion_repo.get_between(start, end, habit_ids)

    def _history(
        self, start: date, end: date, habit_ids: Optional[Iterable[str]] = None
    ) -> dict[date, list[str]]:
        """Completed habit ids per day within ``start..end``."""

        history: dict[date, list[str]] = defaultdict(list)
        for record in self.completion_repo.get_between(start, end, habit_ids):
            if record.completed:
                history[record.occurred_on].append(record.habit_id)
        return dict(history)

    def get_last_n_days_completions(self, n: int) -> list[trends.DayCompletions]:
        today = self.today()
        days = trends.window_days(n, today=today)
        allowed = {h.id for h in self.get_habits()}
        history = self._history(days[0], today)
        return trends.last_n_days_completions(history, n, today=today, allowed_ids=allowed)

    # Streaks ------------------------------------------------------------

    def get_streak_data(self, habit_id: str | None = None) -> streaks.StreakSummary:
        today = self.today()
        if habit_id is not None:
            habit = self.habit_repo.get_by_id(habit_id)
            if habit is None:
                logger.debug(f"Streak requested for unknown habit {habit_id}; returning zeros")
                return streaks.StreakSummary()
            history = self._history(habit.start_date, today, [habit.id])
            return streaks.summarize_habit(habit, history.keys(), today=today)

        live = trends.live_habits(self.get_habits())
        if not live:
            return streaks.StreakSummary()
        start = min(h.start_date for h in live)
        history = self._history(start, today) if start <= today else {}
        return streaks.summarize_habits(live, history, today=today)

    # Goals --------------------------------------------------------------

    def _goal_inputs(self, goal: Habit) -> tuple[list[Habit], dict[str, bool], dict[date, list[str]]]:
        linked = self.habit_repo.list_by_goal(goal.id)
        if not goal.is_goal or goal.target_date is None or not linked:
            return linked, {}, {}
        today = self.today()
        start = min(h.start_date or goal.start_date for h in linked)
        end = min(today, goal.target_date)
        history = self._history(start, end, [h.id for h in linked]) if start <= end else {}
        today_completions = {hid: True for hid in history.pop(today, [])}
        return linked, today_completions, history

    def calculate_goal_progress(self, goal: Habit) -> Optional[int]:
        """Percentage 0-100 loaded from storage; ``None`` means no data."""

        linked, today_completions, history = self._goal_inputs(goal)
        return goals.calculate_goal_progress_instant(
            goal, linked, today_completions, history, today=self.today()
        )

    def goal_progress_breakdown(self, goal: Habit) -> Optional[goals.GoalProgress]:
        linked, today_completions, history = self._goal_inputs(goal)
        return goals.goal_progress_breakdown(goal, linked, today_completions, history, today=self.today())

    def calculate_goal_progress_instant(
        self,
        goal: Habit,
        habit_list: Iterable[Habit],
        today_completions: Mapping[str, bool],
        history_map: Optional[Mapping[Any, Iterable[str]]] = None,
    ) -> Optional[int]:
        return goals.calculate_goal_progress_instant(
            goal, habit_list, today_completions, history_map, today=self.today()
        )

    # Heatmap and trends -------------------------------------------------

    def get_heatmap_data(self) -> list[trends.HeatmapEntry]:
        return trends.heatmap(self.get_last_n_days_completions(self.config.HEATMAP_DAYS))

    def get_completion_data_for_days(self, n: int) -> list[trends.CompletionRate]:
        today = self.today()
        days = trends.window_days(n, today=today)
        return trends.completion_rates(self.get_habits(), self._history(days[0], today), n, today=today)

    def get_weekly_completion_data(self) -> list[trends.CompletionRate]:
        return self.get_completion_data_for_days(self.config.WEEKLY_TREND_DAYS)

    def get_monthly_completion_data(self) -> list[trends.CompletionRate]:
        return self.get_completion_data_for_days(30)

    def get_yearly_completion_data(self) -> list[trends.MonthlyCompletionRate]:
        today = self.today()
        year, month = (today.year - 1, today.month + 1) if today.month < 12 else (today.year, 1)
        history = self._history(date(year, month, 1), today)
        return trends.yearly_completion_rates(self.get_habits(), history, today=today)

    def get_completion_by_category(self, day: date | None = None) -> list[trends.CategoryBreakdown]:
        return trends.completion_by_category(self.get_habits(), self.get_completions(day))

    def get_advanced_stats(self, days: int | None = None) -> analytics.AdvancedStats:
        """Consistency metrics over the last ``days`` days, or since the earliest start."""

        today = self.today()
        live = trends.live_habits(self.get_habits())
        if not live:
            return analytics.AdvancedStats()
        if days is None:
            days = max((today - min(h.start_date for h in live)).days + 1, 1)
        return analytics.calculate_stats(live, self.get_last_n_days_completions(days), today=today)

    # Leaderboard --------------------------------------------------------

    def rank_leaderboard(
        self,
        entries: Iterable[leaderboard.FriendSummary],
        period: str,
        *,
        current_user: Optional[leaderboard.FriendSummary] = None,
    ) -> list[leaderboard.LeaderboardEntry]:
        return leaderboard.rank_leaderboard(entries, period, current_user=current_user)

    def current_user_summary(self, user_id: str, username: str) -> leaderboard.FriendSummary:
        """The local user's public aggregate, derived from this ledger."""

        summary = self.get_streak_data()
        week = self.get_completion_data_for_days(self.config.WEEKLY_TREND_DAYS)
        return leaderboard.FriendSummary(
            id=user_id,
            username=username,
            current_streak=summary.current_streak,
            best_streak=summary.best_streak,
            today_completion=week[-1].completion_rate,
            weekly_activity=tuple(rate.completion_rate for rate in week),
            is_current_user=True,
        )

    def build_leaderboard(
        self,
        source: leaderboard.FriendStatsSource,
        period: str,
        *,
        user_id: str,
        username: str,
    ) -> list[leaderboard.LeaderboardEntry]:
        return leaderboard.build_leaderboard(
            source, period, current_user=self.current_user_summary(user_id, username)
        )


def create_engine_context(
    config: Optional[BaseConfig] = None,
    *,
    clock: Optional[Callable[[], date]] = None,
) -> HabitEngine:
    """Create the database, repositories and engine facade."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    logger.info(f"Engine ready on {engine.url.render_as_string(hide_password=True)}")
    return HabitEngine(
        config=config,
        session_factory=session_factory,
        habit_repo=SQLModelHabitRepository(session_factory),
        completion_repo=SQLModelCompletionRepository(session_factory),
        clock=clock,
    )


__all__ = ["HabitEngine", "create_engine_context"]

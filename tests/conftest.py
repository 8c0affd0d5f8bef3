"""Pytest configuration and shared fixtures for engine tests.

Every test gets an isolated in-memory SQLite database and an engine whose
clock is pinned to ``TODAY`` so date arithmetic is deterministic.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from habyss.config import TestConfig
from habyss.engine import HabitEngine
from habyss.infra.database import create_db_engine, create_session_factory, init_database
from habyss.infra.repositories import SQLModelCompletionRepository, SQLModelHabitRepository
from habyss.models import Habit

# Friday
TODAY = date(2024, 3, 15)


def days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def test_config(tmp_path, monkeypatch) -> TestConfig:
    """Configuration rooted in a temporary data directory."""
    monkeypatch.setenv("HABYSS_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("HABYSS_TIMEZONE", raising=False)
    monkeypatch.delenv("HABYSS_HEATMAP_DAYS", raising=False)
    return TestConfig()


@pytest.fixture
def db_engine(test_config):
    """Create an isolated in-memory SQLite database for each test."""
    engine = create_db_engine(test_config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def completion_repo(session_factory) -> SQLModelCompletionRepository:
    return SQLModelCompletionRepository(session_factory)


@pytest.fixture
def engine(test_config, session_factory, habit_repo, completion_repo) -> HabitEngine:
    """Engine facade with the clock pinned to TODAY."""
    return HabitEngine(
        config=test_config,
        session_factory=session_factory,
        habit_repo=habit_repo,
        completion_repo=completion_repo,
        clock=lambda: TODAY,
    )


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(engine):
    """Factory for creating persisted habits.

    Habits start 30 days before TODAY unless ``start_date`` is given.
    """

    def _create_habit(name: str = "Test Habit", **fields) -> Habit:
        fields.setdefault("start_date", days_ago(30))
        return engine.add_habit(name, **fields)

    return _create_habit


@pytest.fixture
def goal_factory(engine):
    """Factory for creating persisted goals."""

    def _create_goal(
        name: str = "Test Goal",
        target_date: date | None = TODAY + timedelta(days=30),
        **fields,
    ) -> Habit:
        fields.setdefault("start_date", days_ago(30))
        return engine.add_goal(name, target_date, **fields)

    return _create_goal


@pytest.fixture
def complete(engine):
    """Mark a habit completed on each of the given days."""

    def _complete(habit: Habit, *days: date) -> None:
        for day in days:
            engine.set_completion(habit.id, True, day)

    return _complete

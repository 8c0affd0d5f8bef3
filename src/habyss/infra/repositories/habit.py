"""SQLModel implementation of the habit/goal registry."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.habit import Completion, Habit

logger = logging.getLogger(__name__)


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, include_archived: bool = False) -> list[Habit]:
        """List all habits, oldest first, optionally including archived ones."""
        with self.session_factory() as session:
            statement = select(Habit).order_by(Habit.created_at, Habit.name)  # type: ignore[arg-type]
            if not include_archived:
                statement = statement.where(Habit.is_archived == False)  # noqa: E712
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_goals(self, include_archived: bool = False) -> list[Habit]:
        """List habits flagged as goals."""
        return [h for h in self.list_all(include_archived=include_archived) if h.is_goal]

    def list_by_goal(self, goal_id: str, include_archived: bool = False) -> list[Habit]:
        """List habits linked to a goal."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.goal_id == goal_id)
                .order_by(Habit.created_at, Habit.name)  # type: ignore[arg-type]
            )
            if not include_archived:
                statement = statement.where(Habit.is_archived == False)  # noqa: E712
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            logger.info(f"Created habit {habit.id} ({habit.name!r}, goal={habit.is_goal})")
            return habit

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            merged = session.merge(habit)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            logger.info(f"Updated habit {merged.id}")
            return merged

    def archive(self, habit_id: str) -> list[str]:
        """Soft-delete a habit; archiving a goal also archives its linked habits."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return []
            archived = [habit]
            if habit.is_goal:
                archived.extend(session.exec(select(Habit).where(Habit.goal_id == habit_id)).all())
            for row in archived:
                row.is_archived = True
                session.add(row)
            session.commit()
            ids = [row.id for row in archived]
            logger.info(f"Archived habits {ids}")
            return ids

    def delete(self, habit_id: str) -> bool:
        """Hard-delete a habit, its completions, and detach any linked habits."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return False
            for linked in session.exec(select(Habit).where(Habit.goal_id == habit_id)).all():
                linked.goal_id = None
                session.add(linked)
            removed = 0
            for record in session.exec(select(Completion).where(Completion.habit_id == habit_id)).all():
                session.delete(record)
                removed += 1
            session.flush()
            session.delete(habit)
            session.commit()
            logger.info(f"Deleted habit {habit_id} with {removed} completion records")
            return True

"""Habit/goal registry protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.habit import Habit


class HabitRepository(Protocol):
    """Repository for managing habit and goal metadata."""

    def get_by_id(self, habit_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_all(self, include_archived: bool = False) -> list[Habit]:
        """List all habits, optionally including archived ones."""
        ...

    def list_goals(self, include_archived: bool = False) -> list[Habit]:
        """List habits flagged as goals."""
        ...

    def list_by_goal(self, goal_id: str, include_archived: bool = False) -> list[Habit]:
        """List habits linked to a goal."""
        ...

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        ...

    def archive(self, habit_id: str) -> list[str]:
        """Soft-delete a habit; return the ids that were archived."""
        ...

    def delete(self, habit_id: str) -> bool:
        """Hard-delete a habit and its completions."""
        ...

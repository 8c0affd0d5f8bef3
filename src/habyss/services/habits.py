"""Habit/goal registry helpers: validation and lifecycle commands."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from ..domain.repositories import CompletionRepository, HabitRepository
from ..models.habit import Frequency, Habit, TrackingMethod
from .schedule import format_task_days

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {
    "name",
    "description",
    "category",
    "icon",
    "color",
    "frequency",
    "task_days",
    "week_interval",
    "tracking_method",
    "goal_value",
    "unit",
    "duration_minutes",
    "goal_id",
    "target_date",
    "start_date",
    "is_archived",
}


def _normalize_fields(fields: dict[str, Any]) -> dict[str, Any]:
    normalized = dict(fields)
    if "name" in normalized:
        name = (normalized["name"] or "").strip()
        if not name:
            raise ValueError("Habit name cannot be empty")
        normalized["name"] = name
    if "frequency" in normalized:
        try:
            normalized["frequency"] = Frequency(normalized["frequency"])
        except ValueError as exc:
            raise ValueError(f"Invalid frequency: {normalized['frequency']!r}") from exc
    if "task_days" in normalized:
        days = normalized["task_days"]
        normalized["task_days"] = format_task_days(
            days.split(",") if isinstance(days, str) else (days or [])
        )
    if "week_interval" in normalized and int(normalized["week_interval"] or 1) < 1:
        raise ValueError("week_interval must be at least 1")
    if "tracking_method" in normalized:
        try:
            normalized["tracking_method"] = TrackingMethod(normalized["tracking_method"])
        except ValueError as exc:
            raise ValueError(f"Invalid tracking method: {normalized['tracking_method']!r}") from exc
    if "goal_value" in normalized and int(normalized["goal_value"]) < 1:
        raise ValueError("goal_value must be at least 1")
    if (normalized.get("duration_minutes") or 0) < 0:
        raise ValueError("duration_minutes cannot be negative")
    for key in ("target_date", "start_date"):
        value = normalized.get(key)
        if isinstance(value, str):
            normalized[key] = date.fromisoformat(value)
    return normalized


def validate_goal_link(habit: Habit, repository: HabitRepository) -> None:
    """Goals are never nested; a linked habit must point at a live goal."""

    if habit.is_goal:
        if habit.goal_id is not None:
            raise ValueError("A goal cannot be linked to another goal")
        return
    if habit.goal_id is None:
        return
    goal = repository.get_by_id(habit.goal_id)
    if goal is None or not goal.is_goal:
        raise ValueError(f"Goal {habit.goal_id} does not exist")
    if goal.is_archived and not habit.is_archived:
        raise ValueError(f"Goal {habit.goal_id} is archived")


def add_habit(repository: HabitRepository, *, is_goal: bool = False, **fields: Any) -> Habit:
    """Create a habit (or goal) after validating its fields and linkage."""

    unknown = set(fields) - _EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown habit field(s): {', '.join(sorted(unknown))}")
    normalized = _normalize_fields(fields)
    if "name" not in normalized:
        raise ValueError("Habit name cannot be empty")
    habit = Habit(is_goal=is_goal, **normalized)
    if is_goal and habit.target_date is None:
        logger.warning(f"Goal {habit.name!r} created without a target date; progress stays undefined")
    validate_goal_link(habit, repository)
    return repository.create(habit)


def update_habit(repository: HabitRepository, habit_id: str, **changes: Any) -> Habit:
    """Apply edits to an existing habit, re-validating linkage.

    ``is_archived=True`` goes through :func:`archive_habit` so a goal takes its
    linked habits with it. Restoring a habit whose goal is still archived
    raises ``ValueError``.
    """

    habit = repository.get_by_id(habit_id)
    if habit is None:
        raise ValueError(f"Habit {habit_id} not found")
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown habit field(s): {', '.join(sorted(unknown))}")
    archive = changes.pop("is_archived", None)
    for key, value in _normalize_fields(changes).items():
        setattr(habit, key, value)
    if archive is not None and not archive:
        habit.is_archived = False
    validate_goal_link(habit, repository)
    updated = repository.update(habit)
    if archive and not updated.is_archived:
        archive_habit(repository, habit_id)
        updated = repository.get_by_id(habit_id) or updated
    return updated


def archive_habit(repository: HabitRepository, habit_id: str) -> list[str]:
    """Soft-delete a habit; a goal takes its linked habits with it."""

    archived = repository.archive(habit_id)
    if not archived:
        raise ValueError(f"Habit {habit_id} not found")
    return archived


def remove_habit_everywhere(
    habits: HabitRepository, completions: CompletionRepository, habit_id: str
) -> bool:
    """Hard-delete a habit and every completion recorded for it."""

    completions.delete_for_habit(habit_id)
    return habits.delete(habit_id)


def remove_goal_with_linked_habits(
    habits: HabitRepository, completions: CompletionRepository, goal_id: str
) -> list[str]:
    """Hard-delete a goal together with all habits linked to it."""

    linked = habits.list_by_goal(goal_id, include_archived=True)
    removed = [h.id for h in linked if remove_habit_everywhere(habits, completions, h.id)]
    if remove_habit_everywhere(habits, completions, goal_id):
        removed.append(goal_id)
    return removed

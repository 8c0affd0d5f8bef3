"""Habit, goal and completion tracking data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import ClassVar, Optional
from uuid import uuid4

from sqlmodel import Field, SQLModel

WEEKDAY_TOKENS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
ALL_TASK_DAYS = ",".join(WEEKDAY_TOKENS)


class Frequency(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class TrackingMethod(str, Enum):
    boolean = "boolean"
    numeric = "numeric"


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Habit(SQLModel, table=True):
    """A recurring trackable action; a goal when ``is_goal`` is set."""

    __tablename__: ClassVar[str] = "habit"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=32)
    name: str = Field(nullable=False, max_length=80, index=True)
    description: str = Field(default="", max_length=255)
    category: str = Field(default="misc", max_length=32, index=True)
    icon: Optional[str] = Field(default=None, max_length=64)
    color: str = Field(default="#6B46C1", max_length=16)

    frequency: Frequency = Field(default=Frequency.daily)
    # Comma-separated weekday tokens, e.g. "mon,wed,fri".
    task_days: str = Field(default=ALL_TASK_DAYS, max_length=32)
    week_interval: int = Field(default=1, ge=1)

    tracking_method: TrackingMethod = Field(default=TrackingMethod.boolean)
    # Daily target for numeric habits, in `unit`.
    goal_value: int = Field(default=1, ge=1)
    unit: str = Field(default="count", max_length=32)
    duration_minutes: Optional[int] = Field(default=None, ge=0)

    is_goal: bool = Field(default=False, nullable=False)
    goal_id: Optional[str] = Field(default=None, foreign_key="habit.id", index=True)
    target_date: Optional[date] = Field(default=None)

    start_date: date = Field(default_factory=date.today, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    is_archived: bool = Field(default=False, nullable=False, index=True)


class Completion(SQLModel, table=True):
    """Completion state of one habit on one calendar day."""

    __tablename__: ClassVar[str] = "completion"

    habit_id: str = Field(foreign_key="habit.id", primary_key=True, max_length=32)
    occurred_on: date = Field(primary_key=True, index=True)
    completed: bool = Field(default=True, nullable=False)
    value: int = Field(default=1, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

"""Concrete repository implementations using SQLModel."""

from .completion import SQLModelCompletionRepository
from .habit import SQLModelHabitRepository

__all__ = [
    "SQLModelCompletionRepository",
    "SQLModelHabitRepository",
]

"""Completion ledger protocol."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol

from ...models.habit import Completion


class CompletionRepository(Protocol):
    """Append/overwrite ledger of per-day, per-habit completion booleans."""

    def get_for_day(self, day: date) -> list[Completion]:
        """Return every stored record for a calendar day."""
        ...

    def get_between(
        self, start: date, end: date, habit_ids: Optional[Iterable[str]] = None
    ) -> list[Completion]:
        """Return records with ``start <= occurred_on <= end``."""
        ...

    def toggle(self, habit_id: str, day: date) -> bool:
        """Flip the stored state for (habit_id, day) and return the new state."""
        ...

    def set_state(self, habit_id: str, day: date, completed: bool) -> Completion:
        """Overwrite the stored state for (habit_id, day)."""
        ...

    def set_value(self, habit_id: str, day: date, value: int) -> Completion:
        """Record a measured value for (habit_id, day); positive values mark it completed."""
        ...

    def delete_for_habit(self, habit_id: str) -> int:
        """Remove every record of a habit; return the number removed."""
        ...

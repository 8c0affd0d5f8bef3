"""Explicit subscription interface for registry and ledger changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence

from ..models.habit import Habit

logger = logging.getLogger(__name__)

HabitsListener = Callable[[list[Habit]], None]
CompletionListener = Callable[["CompletionChange"], None]
Unsubscribe = Callable[[], None]


@dataclass(slots=True, frozen=True)
class CompletionChange:
    habit_id: str
    day: date
    completed: bool
    value: Optional[int] = None


class HabitEventBus:
    """Fan-out of change notifications to registered callbacks.

    Listeners are invoked synchronously after the change is committed. A
    listener that raises is logged and skipped so the others still run.
    """

    def __init__(self) -> None:
        self._habit_listeners: list[HabitsListener] = []
        self._completion_listeners: list[CompletionListener] = []

    def subscribe_to_habits(
        self, callback: HabitsListener, initial: Optional[Sequence[Habit]] = None
    ) -> Unsubscribe:
        """Register ``callback``; when ``initial`` is given it is delivered right away."""
        self._habit_listeners.append(callback)
        if initial is not None:
            self._dispatch(callback, list(initial))
        return self._remover(self._habit_listeners, callback)

    def subscribe_to_completions(self, callback: CompletionListener) -> Unsubscribe:
        self._completion_listeners.append(callback)
        return self._remover(self._completion_listeners, callback)

    @staticmethod
    def _remover(listeners: list, callback) -> Unsubscribe:
        def unsubscribe() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def publish_habits(self, habits: Sequence[Habit]) -> None:
        snapshot = list(habits)
        for listener in list(self._habit_listeners):
            self._dispatch(listener, snapshot)

    def publish_completion(self, change: CompletionChange) -> None:
        for listener in list(self._completion_listeners):
            self._dispatch(listener, change)

    @staticmethod
    def _dispatch(listener: Callable, payload) -> None:
        try:
            listener(payload)
        except Exception:
            logger.exception(f"Listener {listener!r} failed")

    @property
    def listener_count(self) -> int:
        return len(self._habit_listeners) + len(self._completion_listeners)

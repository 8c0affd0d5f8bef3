"""SQLModel implementation of the completion ledger."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Optional

from sqlalchemy import not_
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, col, select

from ...models.habit import Completion

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


class SQLModelCompletionRepository:
    """Ledger with one row per (habit, day); writes overwrite, never append.

    Writes are single ``INSERT ... ON CONFLICT DO UPDATE`` statements, so the
    read-modify-write of a toggle happens inside the database and concurrent
    toggles of the same key serialize on the row.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_for_day(self, day: date) -> list[Completion]:
        """Return every stored record for a calendar day."""
        with self.session_factory() as session:
            rows = list(session.exec(select(Completion).where(Completion.occurred_on == day)).all())
            session.expunge_all()
            return rows

    def get_between(
        self, start: date, end: date, habit_ids: Optional[Iterable[str]] = None
    ) -> list[Completion]:
        """Return records within an inclusive date range, ordered by day."""
        with self.session_factory() as session:
            statement = (
                select(Completion)
                .where(Completion.occurred_on >= start)
                .where(Completion.occurred_on <= end)
                .order_by(Completion.occurred_on, Completion.habit_id)  # type: ignore[arg-type]
            )
            if habit_ids is not None:
                ids = list(habit_ids)
                if not ids:
                    return []
                statement = statement.where(col(Completion.habit_id).in_(ids))
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def _upsert(
        self,
        session: Session,
        habit_id: str,
        day: date,
        insert_values: dict[str, Any],
        update_values: dict[str, Any],
    ) -> Completion:
        """Write one (habit_id, day) row in a single statement and read it back."""
        now = datetime.now(timezone.utc)
        dialect = session.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Completion upserts are not supported on {dialect}")

        statement = (
            insert(Completion)
            .values(habit_id=habit_id, occurred_on=day, updated_at=now, **insert_values)
            .on_conflict_do_update(
                index_elements=["habit_id", "occurred_on"],
                set_={"updated_at": now, **update_values},
            )
        )
        session.exec(statement)  # type: ignore[call-overload]
        # Same transaction as the write, so no other writer can interleave.
        record = session.exec(
            select(Completion)
            .where(Completion.habit_id == habit_id)
            .where(Completion.occurred_on == day)
        ).one()
        session.commit()
        session.expunge(record)
        return record

    def toggle(self, habit_id: str, day: date) -> bool:
        """Flip the stored state in one statement and return the new state."""
        with self.session_factory() as session:
            record = self._upsert(
                session,
                habit_id,
                day,
                insert_values={"completed": True, "value": 1},
                update_values={"completed": not_(Completion.completed)},
            )
            logger.info(f"Toggled habit {habit_id} on {day.isoformat()} -> {record.completed}")
            return record.completed

    def set_state(self, habit_id: str, day: date, completed: bool) -> Completion:
        """Overwrite the stored state for (habit_id, day)."""
        with self.session_factory() as session:
            return self._upsert(
                session,
                habit_id,
                day,
                insert_values={"completed": completed, "value": 1},
                update_values={"completed": completed},
            )

    def set_value(self, habit_id: str, day: date, value: int) -> Completion:
        """Record a measured value; any positive value counts as completed."""
        completed = value > 0
        with self.session_factory() as session:
            record = self._upsert(
                session,
                habit_id,
                day,
                insert_values={"completed": completed, "value": value},
                update_values={"completed": completed, "value": value},
            )
            logger.info(f"Recorded {value} for habit {habit_id} on {day.isoformat()}")
            return record

    def delete_for_habit(self, habit_id: str) -> int:
        """Remove every record of a habit; return the number removed."""
        with self.session_factory() as session:
            rows = session.exec(select(Completion).where(Completion.habit_id == habit_id)).all()
            for row in rows:
                session.delete(row)
            session.commit()
            return len(rows)

"""SQLModel implementation of Habit repository."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...errors import HabitNotFoundError
from ...models.habit import Habit, HabitLogEntry
from ...services.streaks import ToggleOutcome, WriteAction

logger = logging.getLogger(__name__)


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int, include_inactive: bool = False) -> list[Habit]:
        """List habits ordered by name, optionally including inactive/archived ones."""
        with self.session_factory() as session:
            statement = (
                select(Habit).where(Habit.user_id == user_id).order_by(Habit.name)  # type: ignore
            )

            if not include_inactive:
                statement = statement.where(
                    Habit.is_active == True,  # noqa: E712
                    Habit.archived == False,  # noqa: E712
                )

            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_active(self, *, user_id: int) -> list[Habit]:
        """List active, non-archived habits."""
        return self.list_all(user_id=user_id, include_inactive=False)

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            habit.user_id = user_id
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            logger.info("Habit created", extra={"habit_id": habit.id, "user_id": user_id})
            return habit

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            habit.user_id = user_id
            habit = session.merge(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def delete(self, habit_id: int, *, user_id: int) -> bool:
        """Delete a habit; its log entries go with it."""
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if not habit:
                return False
            removed_logs = len(habit.entries)
            session.delete(habit)
            session.commit()
            logger.info(
                "Habit deleted",
                extra={"habit_id": habit_id, "user_id": user_id, "log_entries": removed_logs},
            )
            return True

    # Log entry operations
    def get_log_entry(
        self, habit_id: int, day: datetime, *, user_id: int
    ) -> Optional[HabitLogEntry]:
        """Get the log entry for ``(habit_id, day)``."""
        with self.session_factory() as session:
            statement = (
                select(HabitLogEntry)
                .where(HabitLogEntry.user_id == user_id)
                .where(HabitLogEntry.habit_id == habit_id)
                .where(HabitLogEntry.date == day)
            )
            obj = session.exec(statement).first()
            if obj:
                session.expunge(obj)
            return obj

    def get_log_entries_between(
        self, start: datetime, end: datetime, *, user_id: int
    ) -> list[HabitLogEntry]:
        """Get every log entry of the user dated within ``[start, end]``."""
        with self.session_factory() as session:
            statement = (
                select(HabitLogEntry)
                .where(HabitLogEntry.user_id == user_id)
                .where(HabitLogEntry.date >= start)
                .where(HabitLogEntry.date <= end)
                .order_by(HabitLogEntry.date)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def apply_toggle(self, habit_id: int, outcome: ToggleOutcome, *, user_id: int) -> Habit:
        """Persist a toggle's habit fields and log write in one transaction.

        Either both the habit row and the log entry change, or neither does.
        """
        with self.session_factory() as session:
            try:
                habit = session.exec(
                    select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
                ).first()
                if habit is None:
                    raise HabitNotFoundError(f"Habit {habit_id} not found")

                write = outcome.log_write
                now = datetime.now(timezone.utc)
                entry = session.exec(
                    select(HabitLogEntry)
                    .where(HabitLogEntry.habit_id == habit_id)
                    .where(HabitLogEntry.date == write.date)
                ).first()

                if entry is None:
                    if write.action is WriteAction.UPDATE:
                        logger.warning(
                            "Log entry vanished before update; inserting instead",
                            extra={"habit_id": habit_id, "date": write.date.isoformat()},
                        )
                    entry = HabitLogEntry(
                        habit_id=habit_id,
                        user_id=user_id,
                        date=write.date,
                        logged_at=now,
                        status=write.status.value,
                    )
                else:
                    entry.status = write.status.value
                    entry.logged_at = now
                session.add(entry)

                if outcome.habit_changed:
                    habit.streak = outcome.new_streak
                    habit.last_completed_date = outcome.new_last_completed_date
                    session.add(habit)

                session.commit()
            except Exception:
                session.rollback()
                raise

            session.refresh(habit)
            session.expunge(habit)
            logger.info(
                "Toggle committed",
                extra={
                    "habit_id": habit_id,
                    "completed": outcome.completed,
                    "streak": habit.streak,
                },
            )
            return habit

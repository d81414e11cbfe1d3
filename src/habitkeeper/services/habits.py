"""Habit application services: creation, today's listing and the toggle command."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Callable, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from ..errors import HabitNotFoundError, InvalidFrequencyError, ToggleCommitError
from ..models.frequency import Daily, EveryXDays, Frequency, Weekly
from ..models.habit import Habit
from .calendar_day import reference_day as current_reference_day
from .calendar_day import start_of_local_day
from .recurrence import is_due_today
from .streaks import ToggleOutcome, compute_toggle, is_completed_today

if TYPE_CHECKING:  # pragma: no cover
    from ..domain.repositories.habit import HabitRepository

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 80


def build_frequency(kind: str, every_x_days: Optional[int] = None) -> Frequency:
    """Turn the habit form's frequency choice and day count into a rule.

    ``every_x_days`` is only read for ``"every_x_days"`` and must be >= 1.
    """

    kind = (kind or "").strip().lower()
    if kind == Daily.kind:
        return Daily()
    if kind == Weekly.kind:
        return Weekly()
    if kind == EveryXDays.kind:
        if every_x_days is None:
            raise InvalidFrequencyError("Every-X-days habits need a day count")
        return EveryXDays(every_x_days)
    raise InvalidFrequencyError(f"Unknown frequency type: {kind!r}")


def new_habit(*, name: str, frequency: Frequency) -> Habit:
    """Return an unsaved habit with a fresh streak."""

    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Habit name is required")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValueError(f"Habit name must be at most {MAX_NAME_LENGTH} characters")

    habit = Habit(name=cleaned, streak=0, last_completed_date=None, is_active=True, archived=False)
    habit.set_frequency(frequency)
    return habit


def create_habit(
    repository: "HabitRepository",
    *,
    user_id: int,
    name: str,
    frequency_kind: str,
    every_x_days: Optional[int] = None,
) -> Habit:
    """Validate form input and persist a new habit."""

    habit = new_habit(name=name, frequency=build_frequency(frequency_kind, every_x_days))
    return repository.create(habit, user_id=user_id)


@dataclass(frozen=True, slots=True)
class DisplayHabit:
    """A habit as shown on the "today" list."""

    habit: Habit
    is_due_today: bool
    is_completed_today: bool
    log_id_for_today: Optional[int] = None

    @property
    def can_toggle(self) -> bool:
        return self.is_due_today or self.is_completed_today


def load_display_habit(
    repository: "HabitRepository",
    habit: Habit,
    *,
    user_id: int,
    reference_day: datetime,
    tz: Optional[tzinfo] = None,
) -> DisplayHabit:
    log = repository.get_log_entry(habit.id, reference_day, user_id=user_id)
    return DisplayHabit(
        habit=habit,
        is_due_today=is_due_today(habit, reference_day, tz),
        is_completed_today=is_completed_today(log),
        log_id_for_today=log.id if log else None,
    )


def load_display_habits(
    repository: "HabitRepository",
    *,
    user_id: int,
    reference_day: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[DisplayHabit]:
    """Return every active habit with its due/completed state for the reference day."""

    if reference_day is None:
        reference_day = current_reference_day(tz=tz)
    else:
        reference_day = start_of_local_day(reference_day, tz)
    return [
        load_display_habit(repository, habit, user_id=user_id, reference_day=reference_day, tz=tz)
        for habit in repository.list_active(user_id=user_id)
    ]


class ToggleCommand:
    """Complete or un-complete a habit for the reference day.

    The command computes the next state, publishes it optimistically through
    ``on_change``, commits it atomically and then publishes either the
    committed state or the original one if the commit failed.
    """

    def __init__(
        self,
        repository: "HabitRepository",
        *,
        user_id: int,
        tz: Optional[tzinfo] = None,
        attempts: int = 3,
        on_change: Optional[Callable[[DisplayHabit], None]] = None,
    ):
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        self.repository = repository
        self.user_id = user_id
        self.tz = tz
        self.attempts = attempts
        self.on_change = on_change

    def _publish(self, state: DisplayHabit) -> None:
        if self.on_change is not None:
            self.on_change(state)

    def execute(self, habit_id: int, reference_day: Optional[datetime] = None) -> DisplayHabit:
        """Toggle ``habit_id`` and return its reconciled display state.

        Raises:
            HabitNotFoundError: unknown habit for this user.
            HabitNotDueError: the habit is neither due nor completed today.
            ToggleCommitError: the commit kept failing; state was reverted.
        """
        if reference_day is None:
            reference_day = current_reference_day(tz=self.tz)
        else:
            reference_day = start_of_local_day(reference_day, self.tz)

        habit = self.repository.get_by_id(habit_id, user_id=self.user_id)
        if habit is None:
            raise HabitNotFoundError(f"Habit {habit_id} not found")
        existing_log = self.repository.get_log_entry(habit_id, reference_day, user_id=self.user_id)
        before = DisplayHabit(
            habit=habit,
            is_due_today=is_due_today(habit, reference_day, self.tz),
            is_completed_today=is_completed_today(existing_log),
            log_id_for_today=existing_log.id if existing_log else None,
        )
        outcome = compute_toggle(habit, existing_log, reference_day, self.tz)
        self._publish(replace(before, is_completed_today=outcome.completed))

        try:
            saved = self._commit(habit_id, outcome)
        except Exception:
            self._publish(before)
            raise

        after = load_display_habit(
            self.repository, saved, user_id=self.user_id, reference_day=reference_day, tz=self.tz
        )
        self._publish(after)
        return after

    def _commit(self, habit_id: int, outcome: ToggleOutcome) -> Habit:
        """Apply the write set, retrying transient database errors."""
        for attempt in range(1, self.attempts + 1):
            try:
                return self.repository.apply_toggle(habit_id, outcome, user_id=self.user_id)
            except OperationalError as exc:
                logger.warning(
                    "Toggle commit failed",
                    extra={"habit_id": habit_id, "attempt": attempt, "attempts": self.attempts},
                )
                if attempt == self.attempts:
                    raise ToggleCommitError(f"Could not update habit {habit_id}") from exc
            except SQLAlchemyError as exc:
                logger.exception("Toggle commit rejected", extra={"habit_id": habit_id})
                raise ToggleCommitError(f"Could not update habit {habit_id}") from exc
        raise AssertionError("unreachable")  # pragma: no cover


def delete_habit(repository: "HabitRepository", habit_id: int, *, user_id: int) -> None:
    """Delete a habit and its history."""

    if not repository.delete(habit_id, user_id=user_id):
        raise HabitNotFoundError(f"Habit {habit_id} not found")


def archive_habit(repository: "HabitRepository", habit_id: int, *, user_id: int) -> Habit:
    """Hide a habit from due-date evaluation while keeping its history."""

    habit = repository.get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise HabitNotFoundError(f"Habit {habit_id} not found")
    habit.archived = True
    return repository.update(habit, user_id=user_id)


__all__ = [
    "DisplayHabit",
    "ToggleCommand",
    "archive_habit",
    "build_frequency",
    "create_habit",
    "delete_habit",
    "load_display_habits",
    "new_habit",
]

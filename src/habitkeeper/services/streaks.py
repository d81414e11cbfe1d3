"""Streak transitions for completing and un-completing a habit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Optional, Protocol

from ..errors import HabitNotDueError
from ..models.frequency import Frequency
from ..models.habit import LogStatus
from .calendar_day import reference_day as current_reference_day
from .calendar_day import same_day, start_of_local_day
from .recurrence import is_due_today

logger = logging.getLogger(__name__)


class StreakHabit(Protocol):
    """Habit fields the mutator reads."""

    @property
    def id(self) -> Optional[int]: ...

    @property
    def frequency(self) -> Frequency: ...

    @property
    def streak(self) -> int: ...

    @property
    def last_completed_date(self) -> Optional[datetime]: ...


class ExistingLog(Protocol):
    """The log entry already stored for ``(habit_id, reference_day)``."""

    @property
    def id(self) -> Optional[int]: ...

    @property
    def status(self) -> str: ...


class WriteAction(str, Enum):
    INSERT = "insert"
    UPDATE = "update"


@dataclass(frozen=True, slots=True)
class LogWriteIntent:
    """Insert-or-update to apply to the log entry of the reference day."""

    action: WriteAction
    habit_id: Optional[int]
    date: datetime
    status: LogStatus
    log_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ToggleOutcome:
    """Complete next state of a toggle; persisted as one unit."""

    completed: bool
    new_streak: int
    new_last_completed_date: Optional[datetime]
    log_write: LogWriteIntent
    habit_changed: bool


def is_completed_today(existing_log: Optional[ExistingLog]) -> bool:
    """Return True when the reference day's log entry is marked completed."""

    return existing_log is not None and existing_log.status == LogStatus.COMPLETED


def compute_toggle(
    habit: StreakHabit,
    existing_log: Optional[ExistingLog],
    reference_day: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> ToggleOutcome:
    """Compute the streak, last-completed marker and log write for a toggle.

    Completing bumps the streak and stamps ``reference_day``. Un-completing only
    rolls the streak back when the completion being undone is the reference
    day's own; the previous completion day is not restored.

    Raises:
        HabitNotDueError: the habit is neither due nor completed today.
    """

    if reference_day is None:
        reference_day = current_reference_day(tz=tz)
    else:
        reference_day = start_of_local_day(reference_day, tz)

    completed_now = is_completed_today(existing_log)
    if not completed_now and not is_due_today(habit, reference_day, tz):
        raise HabitNotDueError(
            f"Habit {habit.id} is not due on {reference_day.date().isoformat()}"
        )

    streak = habit.streak or 0
    last = habit.last_completed_date
    log_id = existing_log.id if existing_log is not None else None

    if not completed_now:
        new_streak = streak + 1
        new_last: Optional[datetime] = reference_day
        log_write = LogWriteIntent(
            action=WriteAction.INSERT if log_id is None else WriteAction.UPDATE,
            habit_id=habit.id,
            date=reference_day,
            status=LogStatus.COMPLETED,
            log_id=log_id,
        )
    else:
        new_streak, new_last = streak, last
        if last is not None and same_day(last, reference_day):
            new_streak = max(0, streak - 1)
            new_last = None
        log_write = LogWriteIntent(
            action=WriteAction.UPDATE,
            habit_id=habit.id,
            date=reference_day,
            status=LogStatus.PENDING,
            log_id=log_id,
        )

    outcome = ToggleOutcome(
        completed=not completed_now,
        new_streak=new_streak,
        new_last_completed_date=new_last,
        log_write=log_write,
        habit_changed=(new_streak != streak or new_last != last),
    )
    logger.debug(
        "Computed toggle",
        extra={
            "habit_id": habit.id,
            "completed": outcome.completed,
            "streak": outcome.new_streak,
            "log_action": log_write.action.value,
        },
    )
    return outcome


__all__ = [
    "ExistingLog",
    "LogWriteIntent",
    "StreakHabit",
    "ToggleOutcome",
    "WriteAction",
    "compute_toggle",
    "is_completed_today",
]

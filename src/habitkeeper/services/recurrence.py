"""Decide whether a habit is due on a reference day."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional, Protocol, assert_never

from ..errors import InvalidFrequencyError
from ..models.frequency import Daily, EveryXDays, Frequency, Weekly
from .calendar_day import add_days, start_of_local_day, start_of_utc_week
from .calendar_day import reference_day as current_reference_day


class HabitSchedule(Protocol):
    """The slice of a habit recurrence needs."""

    @property
    def frequency(self) -> Frequency: ...

    @property
    def last_completed_date(self) -> Optional[datetime]: ...


def _check_frequency(frequency: object) -> None:
    if not isinstance(frequency, (Daily, EveryXDays, Weekly)):
        raise InvalidFrequencyError(f"Unknown frequency: {frequency!r}")


def is_due_today(
    habit: HabitSchedule,
    reference_day: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> bool:
    """Return True when ``habit`` is due on ``reference_day``.

    ``reference_day`` is truncated to the start of its local day (naive values
    are local wall time) and defaults to today. Daily habits are always due;
    whether today's instance is already completed is tracked separately
    through the log entry.
    """

    if reference_day is None:
        reference_day = current_reference_day(tz=tz)
    else:
        reference_day = start_of_local_day(reference_day, tz)
    frequency = habit.frequency
    _check_frequency(frequency)
    last = habit.last_completed_date

    if isinstance(frequency, Daily):
        return True
    if isinstance(frequency, EveryXDays):
        if last is None:
            return True
        next_due = add_days(start_of_local_day(last, tz), frequency.days, tz)
        return reference_day >= next_due
    if isinstance(frequency, Weekly):
        if last is None:
            return True
        # "Weekly" means once per Sunday-Saturday window, not a fixed weekday.
        return start_of_local_day(last, tz) < start_of_utc_week(reference_day)
    assert_never(frequency)


def next_due_day(
    habit: HabitSchedule,
    reference_day: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """Return the first local day, on or after ``reference_day``, the habit is due."""

    if reference_day is None:
        reference_day = current_reference_day(tz=tz)
    else:
        reference_day = start_of_local_day(reference_day, tz)
    if is_due_today(habit, reference_day, tz):
        return reference_day

    frequency = habit.frequency
    last = habit.last_completed_date

    if isinstance(frequency, EveryXDays) and last is not None:
        return add_days(start_of_local_day(last, tz), frequency.days, tz)
    if isinstance(frequency, Weekly) and last is not None:
        # Walk forward to the first local day that lands in a later UTC week.
        candidate = add_days(reference_day, 1, tz)
        while not is_due_today(habit, candidate, tz):
            candidate = add_days(candidate, 1, tz)
        return candidate
    raise InvalidFrequencyError(f"Frequency {frequency!r} has no future due day")


__all__ = ["HabitSchedule", "is_due_today", "next_due_day"]

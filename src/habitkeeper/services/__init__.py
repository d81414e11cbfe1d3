"""Service module exports."""

from . import calendar_day, calendar_log, habits, recurrence, streaks, users

__all__ = [
    "calendar_day",
    "calendar_log",
    "habits",
    "recurrence",
    "streaks",
    "users",
]

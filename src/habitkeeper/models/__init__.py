"""SQLModel table exports."""

from .frequency import Daily, EveryXDays, Frequency, Weekly
from .habit import Habit, HabitLogEntry, LogStatus
from .user import User

__all__ = [
    "Daily",
    "EveryXDays",
    "Frequency",
    "Habit",
    "HabitLogEntry",
    "LogStatus",
    "User",
    "Weekly",
]

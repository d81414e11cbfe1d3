"""Habit repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ...models.habit import Habit, HabitLogEntry
from ...services.streaks import ToggleOutcome


class HabitRepository(Protocol):
    """Repository for habits and their per-day log entries."""

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_active(self, *, user_id: int) -> list[Habit]:
        """List active, non-archived habits."""
        ...

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        ...

    def delete(self, habit_id: int, *, user_id: int) -> bool:
        """Delete a habit and its log entries."""
        ...

    def get_log_entry(
        self, habit_id: int, day: datetime, *, user_id: int
    ) -> Optional[HabitLogEntry]:
        """Get the log entry for ``(habit_id, day)``."""
        ...

    def get_log_entries_between(
        self, start: datetime, end: datetime, *, user_id: int
    ) -> list[HabitLogEntry]:
        """Get every log entry of the user dated within ``[start, end]``."""
        ...

    def apply_toggle(self, habit_id: int, outcome: ToggleOutcome, *, user_id: int) -> Habit:
        """Persist a toggle's habit fields and log write in one transaction."""
        ...

"""Exception types raised by the habit engine and its services."""

from __future__ import annotations


class InvalidFrequencyError(ValueError):
    """A frequency rule is unknown or carries an invalid interval."""


class HabitNotDueError(ValueError):
    """A toggle was requested on a habit that is neither due nor completed today."""


class HabitNotFoundError(LookupError):
    """No habit with the given id exists for the requesting user."""


class ToggleCommitError(RuntimeError):
    """The atomic streak/log commit failed and the toggle was reverted."""


__all__ = [
    "HabitNotDueError",
    "HabitNotFoundError",
    "InvalidFrequencyError",
    "ToggleCommitError",
]

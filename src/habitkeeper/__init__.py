"""HabitKeeper: habit due-date, streak and calendar engine."""

from __future__ import annotations

from .config import BaseConfig

__all__ = ["BaseConfig"]

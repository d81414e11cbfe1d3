"""Habit tracking data structures."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from sqlalchemy import Column, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .frequency import Frequency, frequency_from_record, frequency_to_record
from .types import UTCDateTime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LogStatus(str, Enum):
    """State of a habit on one logged calendar day."""

    COMPLETED = "completed"
    PENDING = "pending"
    SKIPPED = "skipped"
    MISSED = "missed"


class Habit(SQLModel, table=True):
    """A user-defined habit with a recurrence rule and a running streak."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    frequency_type: str = Field(default="daily", max_length=32)
    frequency_days: Optional[int] = Field(default=None)
    streak: int = Field(default=0, nullable=False)
    # Start of the local day the habit was last completed on, stored as UTC.
    last_completed_date: Optional[datetime] = Field(
        default=None, sa_column=Column(UTCDateTime(), nullable=True)
    )
    is_active: bool = Field(default=True, nullable=False)
    archived: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(
        default_factory=_utcnow, sa_column=Column(UTCDateTime(), nullable=False)
    )

    entries: list["HabitLogEntry"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitLogEntry", back_populates="habit", cascade="all, delete-orphan"
        ),
    )

    @property
    def frequency(self) -> Frequency:
        return frequency_from_record(self.frequency_type, self.frequency_days)

    def set_frequency(self, frequency: Frequency) -> None:
        self.frequency_type, self.frequency_days = frequency_to_record(frequency)


class HabitLogEntry(SQLModel, table=True):
    """Status of a habit on one calendar day."""

    __tablename__: ClassVar[str] = "habit_log"
    __table_args__ = (UniqueConstraint("habit_id", "date", name="uq_habit_log_habit_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    # The logged calendar day (start of local day), not the moment of the action.
    date: datetime = Field(sa_column=Column(UTCDateTime(), nullable=False, index=True))
    logged_at: datetime = Field(
        default_factory=_utcnow, sa_column=Column(UTCDateTime(), nullable=False)
    )
    status: str = Field(default=LogStatus.PENDING.value, max_length=16, nullable=False)
    notes: Optional[str] = Field(default=None, max_length=255)

    habit: "Habit" = Relationship(
        back_populates="entries",
        sa_relationship=relationship("Habit", back_populates="entries"),
    )

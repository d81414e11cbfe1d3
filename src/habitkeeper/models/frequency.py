"""Recurrence rules a habit can follow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from ..errors import InvalidFrequencyError


@dataclass(frozen=True, slots=True)
class Daily:
    """Due every calendar day."""

    kind: ClassVar[str] = "daily"


@dataclass(frozen=True, slots=True)
class EveryXDays:
    """Due again ``days`` calendar days after the last completion."""

    days: int
    kind: ClassVar[str] = "every_x_days"

    def __post_init__(self) -> None:
        if isinstance(self.days, bool) or not isinstance(self.days, int):
            raise InvalidFrequencyError(f"EveryXDays needs an integer day count, got {self.days!r}")
        if self.days < 1:
            raise InvalidFrequencyError(f"EveryXDays needs days >= 1, got {self.days}")


@dataclass(frozen=True, slots=True)
class Weekly:
    """Due at least once in each Sunday-to-Saturday week."""

    kind: ClassVar[str] = "weekly"


Frequency = Union[Daily, EveryXDays, Weekly]

FREQUENCY_KINDS = (Daily.kind, EveryXDays.kind, Weekly.kind)


def frequency_from_record(kind: str, days: Optional[int] = None) -> Frequency:
    """Rebuild a frequency from its stored ``(frequency_type, frequency_days)`` pair."""

    if kind == Daily.kind:
        return Daily()
    if kind == EveryXDays.kind:
        if days is None:
            raise InvalidFrequencyError("every_x_days frequency is missing its day count")
        return EveryXDays(days)
    if kind == Weekly.kind:
        return Weekly()
    raise InvalidFrequencyError(f"Unknown frequency type: {kind!r}")


def frequency_to_record(frequency: Frequency) -> tuple[str, Optional[int]]:
    """Split a frequency into the column pair stored on the habit row."""

    if isinstance(frequency, EveryXDays):
        return frequency.kind, frequency.days
    if isinstance(frequency, (Daily, Weekly)):
        return frequency.kind, None
    raise InvalidFrequencyError(f"Unknown frequency: {frequency!r}")


def describe_frequency(frequency: Frequency) -> str:
    """Human label used by the CLI listings."""

    if isinstance(frequency, Daily):
        return "Daily"
    if isinstance(frequency, EveryXDays):
        return "Every day" if frequency.days == 1 else f"Every {frequency.days} days"
    if isinstance(frequency, Weekly):
        return "Weekly"
    raise InvalidFrequencyError(f"Unknown frequency: {frequency!r}")


__all__ = [
    "Daily",
    "EveryXDays",
    "FREQUENCY_KINDS",
    "Frequency",
    "Weekly",
    "describe_frequency",
    "frequency_from_record",
    "frequency_to_record",
]

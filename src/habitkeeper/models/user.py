"""User model owning habits."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from .types import UTCDateTime


class User(SQLModel, table=True):
    """Application user; habits and log entries are scoped to one."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True, max_length=64)
    display_name: Optional[str] = Field(default=None, max_length=120)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(UTCDateTime(), nullable=False),
    )

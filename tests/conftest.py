"""Pytest configuration and shared fixtures for HabitKeeper tests.

Provides a throwaway SQLite database, session helpers and factories for
habits and log entries, so repository and service tests never touch the real
application database.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from sqlmodel import Session, SQLModel, create_engine, select

from habitkeeper.models import Habit, HabitLogEntry, LogStatus, User
from habitkeeper.models.frequency import Daily, Frequency

NEW_YORK = ZoneInfo("America/New_York")


# =============================================================================
# Timezone
# =============================================================================


@pytest.fixture
def tz():
    """Pin the "local" timezone so results don't depend on the host machine."""
    return NEW_YORK


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for a single test.

    Yields:
        Session: SQLModel session for test
    """
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory for repositories that expect Callable[[], Session]."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user(db_session) -> User:
    """Create a default user for scoping data."""

    existing = db_session.exec(select(User).where(User.username == "tester")).first()
    if existing:
        return existing
    u = User(username="tester")
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    return u


@pytest.fixture
def habit_factory(db_session, user):
    """Factory for creating test habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Test Habit",
        frequency: Frequency | None = None,
        streak: int = 0,
        last_completed_date: datetime | None = None,
        is_active: bool = True,
        archived: bool = False,
        owner: User | None = None,
    ) -> Habit:
        owner = owner or user
        habit = Habit(
            user_id=owner.id,
            name=name,
            streak=streak,
            last_completed_date=last_completed_date,
            is_active=is_active,
            archived=archived,
        )
        habit.set_frequency(frequency or Daily())
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _create_habit


@pytest.fixture
def log_factory(db_session, user):
    """Factory for creating log entries directly in the database."""

    def _create_log(
        habit: Habit,
        day: datetime,
        status: LogStatus = LogStatus.COMPLETED,
    ) -> HabitLogEntry:
        entry = HabitLogEntry(
            habit_id=habit.id,
            user_id=habit.user_id,
            date=day,
            logged_at=datetime.now(timezone.utc),
            status=status.value,
        )
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry

    return _create_log


# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep config and log output inside the test's temporary directory."""

    monkeypatch.setenv("HABITKEEPER_DATA_DIR", str(tmp_path / "data"))
    for name in (
        "HABITKEEPER_DATABASE_URL",
        "HABITKEEPER_DEV_MODE",
        "HABITKEEPER_TIMEZONE",
        "HABITKEEPER_REFRESH_SECONDS",
        "HABITKEEPER_COMMIT_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)

    yield

    package_logger = logging.getLogger("habitkeeper")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

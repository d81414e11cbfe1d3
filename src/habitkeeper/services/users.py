"""Local user bootstrap.

Authentication is handled outside this package; the CLI acts on behalf of a
single local user that owns every habit.
"""

from __future__ import annotations

import logging
from typing import Callable, ContextManager, Optional

from sqlmodel import Session, select

from ..models.user import User

SessionFactory = Callable[[], ContextManager[Session]]

LOCAL_USERNAME = "local"

logger = logging.getLogger(__name__)


def get_user_by_username(username: str, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by username."""
    username = username.strip()
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user:
            session.expunge(user)
        return user


def ensure_local_user(session_factory: SessionFactory) -> User:
    """Return the local user, creating it on first run."""
    existing = get_user_by_username(LOCAL_USERNAME, session_factory)
    if existing is not None:
        return existing

    with session_factory() as session:
        user = User(username=LOCAL_USERNAME, display_name="Local user")
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    logger.info("Created local user", extra={"user_id": user.id})
    return user

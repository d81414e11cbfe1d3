"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from datetime import tzinfo
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_positive_int(name: str, default: int) -> int:
    """Read a positive integer from the environment."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < 1:
        raise ValueError(f"{name} must be >= 1, got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitKeeper"
    DB_FILENAME = "habitkeeper.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITKEEPER_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITKEEPER_DATABASE_URL", self._build_sqlite_url())
        self.TIMEZONE = self._resolve_timezone(os.getenv("HABITKEEPER_TIMEZONE"))
        # The host re-reads the clock on this interval to catch midnight rollovers.
        self.REFERENCE_DAY_REFRESH_SECONDS = _env_positive_int("HABITKEEPER_REFRESH_SECONDS", 30)
        self.TOGGLE_COMMIT_ATTEMPTS = _env_positive_int("HABITKEEPER_COMMIT_ATTEMPTS", 3)

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITKEEPER_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def _resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
        """Return the configured zone, or None to use the system local timezone."""

        if name is None or not name.strip():
            return None
        try:
            return ZoneInfo(name.strip())
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone in HABITKEEPER_TIMEZONE: {name!r}") from exc

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            engine_options["connect_args"] = {"check_same_thread": False}
        return engine_options


"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

if TYPE_CHECKING:  # pragma: no cover
    from .services.periods import EngineSettings

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        number = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {number}")
    return number


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitSage"
    DB_FILENAME = "habitsage.db"
    DEFAULT_WEEK_START = "sunday"
    DEFAULT_LOOKBACK_DAYS = 365

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITSAGE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITSAGE_DATABASE_URL", self._build_sqlite_url())
        self.WEEK_START = os.getenv("HABITSAGE_WEEK_START", self.DEFAULT_WEEK_START).strip().lower()
        self.STREAK_LOOKBACK_DAYS = _env_int(
            "HABITSAGE_STREAK_LOOKBACK_DAYS", self.DEFAULT_LOOKBACK_DAYS
        )
        # Fail fast on a bad weekday name instead of at first render.
        self.engine_settings()

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITSAGE_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations: fall back to user-local storage.
            local_app_data = os.getenv("LOCALAPPDATA") or (Path.home() / "AppData" / "Local")
            fallback_path = Path(local_app_data).expanduser() / self.APP_NAME
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}

    def engine_settings(self) -> "EngineSettings":
        """Calendar settings for the habit engine (start of week, streak horizon)."""

        from .services.periods import EngineSettings, Weekday

        try:
            week_start = Weekday.parse(self.WEEK_START)
        except ValueError as exc:
            raise ValueError(
                f"HABITSAGE_WEEK_START must be a weekday name, got {self.WEEK_START!r}"
            ) from exc
        return EngineSettings(week_start=week_start, lookback_days=self.STREAK_LOOKBACK_DAYS)


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """In-memory database for test runs."""

    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = "sqlite://"

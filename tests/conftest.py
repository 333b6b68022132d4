"""Pytest configuration and shared fixtures for HabitSage tests.

Database fixtures and persisted-data factories for repository tests. Pure engine
tests build unsaved habits and ledgers with the helpers in ``factories.py``.
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path
from typing import Any

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from habitsage.models import Habit, HabitCompletion
from habitsage.services.completions import create_record
from habitsage.services.frequency import HabitFrequency, default_frequency, to_payload

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database for each test.

    Yields:
        Engine: SQLModel engine connected to test database
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
    """Create a database session for a single test."""
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
def habit_factory(db_session):
    """Factory for creating persisted test habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Test Habit",
        frequency: HabitFrequency | dict[str, Any] | None = None,
        start_date: date | None = None,
        is_active: bool = True,
    ) -> Habit:
        """Create a test habit; ``frequency`` defaults to every day."""
        freq = frequency if frequency is not None else default_frequency()
        habit = Habit(
            name=name,
            frequency=freq if isinstance(freq, dict) else to_payload(freq),
            start_date=start_date,
            is_active=is_active,
        )
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _create_habit


@pytest.fixture
def completion_factory(db_session):
    """Factory for creating persisted completion records."""

    def _create_completion(habit: Habit, on: date, **data: Any) -> HabitCompletion:
        if not data:
            data = {"completed": True, "actual_amount": 1}
        record = create_record(habit.id, on, **data)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return _create_completion

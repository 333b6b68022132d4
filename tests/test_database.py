"""Tests for engine bootstrap and the transactional session scope."""

from __future__ import annotations

from datetime import date

import pytest
from sqlmodel import select

from habitsage import config as config_module
from habitsage.infra.database import bootstrap_database, session_scope
from habitsage.infra.repositories import SQLModelHabitRepository
from habitsage.models import Habit


@pytest.fixture
def memory_db(monkeypatch, tmp_path):
    monkeypatch.setenv("HABITSAGE_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("HABITSAGE_WEEK_START", raising=False)
    monkeypatch.delenv("HABITSAGE_STREAK_LOOKBACK_DAYS", raising=False)
    engine, factory = bootstrap_database(config_module.TestConfig())
    yield engine, factory
    engine.dispose()


def test_bootstrap_shares_one_in_memory_database(memory_db):
    _, factory = memory_db
    repo = SQLModelHabitRepository(factory)

    habit = repo.create(Habit(name="Floss", start_date=date(2024, 1, 1)))
    repo.upsert_completion(habit.id, date(2024, 1, 1), completed=True)

    assert repo.get_by_id(habit.id).name == "Floss"
    assert repo.get_current_streak(habit.id, today=date(2024, 1, 1)) == 1


def test_session_scope_rolls_back_on_error(memory_db):
    engine, _ = memory_db

    with pytest.raises(RuntimeError):
        with session_scope(engine) as session:
            session.add(Habit(name="Never saved"))
            session.flush()
            raise RuntimeError("boom")

    with session_scope(engine) as session:
        assert session.exec(select(Habit)).all() == []

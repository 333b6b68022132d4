"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from habitsage import config as config_module
from habitsage.config import BaseConfig
from habitsage.services.periods import EngineSettings, Weekday


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Point the data dir at a temp folder and clear engine overrides."""
    monkeypatch.setenv("HABITSAGE_DATA_DIR", str(tmp_path))
    for name in ("HABITSAGE_WEEK_START", "HABITSAGE_STREAK_LOOKBACK_DAYS", "HABITSAGE_DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(env, tmp_path):
    config = BaseConfig()

    assert config.DATA_DIR == tmp_path.resolve()
    assert config.DATABASE_URL.startswith("sqlite:///")
    assert config.DATABASE_URL.endswith("habitsage.db")
    assert config.engine_settings() == EngineSettings(week_start=Weekday.SUNDAY, lookback_days=365)


def test_week_start_override(env):
    env.setenv("HABITSAGE_WEEK_START", " Monday ")

    assert BaseConfig().engine_settings().week_start is Weekday.MONDAY


def test_bad_week_start_fails_fast(env):
    env.setenv("HABITSAGE_WEEK_START", "funday")

    with pytest.raises(ValueError, match="HABITSAGE_WEEK_START"):
        BaseConfig()


def test_lookback_override(env):
    env.setenv("HABITSAGE_STREAK_LOOKBACK_DAYS", "30")

    assert BaseConfig().engine_settings().lookback_days == 30


@pytest.mark.parametrize("value", ["0", "-5", "a year"])
def test_bad_lookback(env, value):
    env.setenv("HABITSAGE_STREAK_LOOKBACK_DAYS", value)

    with pytest.raises(ValueError, match="HABITSAGE_STREAK_LOOKBACK_DAYS"):
        BaseConfig()


def test_sqlite_engine_options(env):
    assert BaseConfig().sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}


def test_database_url_override(env):
    env.setenv("HABITSAGE_DATABASE_URL", "postgresql://localhost/habits")

    config = BaseConfig()
    assert config.DATABASE_URL == "postgresql://localhost/habits"
    assert config.sqlalchemy_engine_options() == {}


def test_test_config_uses_memory_database(env):
    assert config_module.TestConfig().DATABASE_URL == "sqlite://"

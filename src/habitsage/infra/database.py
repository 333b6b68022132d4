"""Database infrastructure: engine, schema and session helpers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Tuple

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger

logger = get_logger("infra.database")


def create_db_engine(config: BaseConfig):
    """Create SQLModel engine from configuration."""
    engine_options = config.sqlalchemy_engine_options()
    if config.DATABASE_URL in {"sqlite://", "sqlite:///:memory:"}:
        # One shared connection, otherwise every session sees an empty database.
        engine_options["poolclass"] = StaticPool
    return create_engine(config.DATABASE_URL, **engine_options)


def init_database(engine) -> None:
    """Initialize database schema."""
    # Import models so their tables are registered on the metadata
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database schema ready", extra={"url": str(engine.url)})


@contextmanager
def session_scope(engine) -> Iterator[Session]:
    """Provide a transactional scope around operations."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_session_factory(engine):
    """Create a session factory function."""

    def factory():
        return session_scope(engine)

    return factory


def bootstrap_database(config: BaseConfig | None = None) -> Tuple:
    """Build engine + session_factory with the schema created.

    Returns (engine, session_factory).
    """

    cfg = config or BaseConfig()
    engine = create_db_engine(cfg)
    init_database(engine)
    return engine, create_session_factory(engine)

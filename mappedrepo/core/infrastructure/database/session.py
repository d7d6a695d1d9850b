"""Database engine and session management."""

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from mappedrepo.core.config import is_sqlite_memory_url, settings


def create_db_engine(url: str | None = None, echo: bool | None = None) -> Engine:
    """Create a synchronous engine, defaulting to the configured database.

    In-memory SQLite databases share one connection so every session sees the
    same data.
    """
    url = url or settings.DATABASE_URL
    echo = settings.DATABASE_ECHO if echo is None else echo

    if is_sqlite_memory_url(url):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, pool_pre_ping=True)


def create_tables(engine: Engine) -> None:
    """Create every table registered on ``SQLModel.metadata``."""
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created")


@contextmanager
def session_scope(engine: Engine) -> Generator[Session, None, None]:
    """Provide a transactional session.

    Usage:
        with session_scope(engine) as session:
            repo = SQLModelRepository(session, UserModel)
            repo.save(UserModel(name="alice"))
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

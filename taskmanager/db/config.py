"""Database configuration for the Task Manager API."""
from typing import Generator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from taskmanager.errors import StoreFailure
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the process-wide engine for the given URL."""
    if not database_url.startswith("sqlite"):
        logger.info("Using PostgreSQL database")
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    logger.info("Using SQLite database", url=database_url)
    connect_args = {"check_same_thread": False}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every session sees an empty database
        engine = create_engine(database_url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
    else:
        engine = create_engine(database_url, echo=echo, connect_args=connect_args)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        # Match Postgres: LIKE is case sensitive
        cursor.execute("PRAGMA case_sensitive_like=ON")
        cursor.close()

    return engine


def get_session(request: Request) -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(request.app.state.engine) as session:
        yield session


def commit_or_fail(session: Session) -> None:
    """Commit the session; roll back and raise StoreFailure on a store error."""
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Commit failed")
        raise StoreFailure(str(e)) from e

import os
import logging
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from . import config

# This file holds the SQLite engine, the session factory and the declarative base.

logger = logging.getLogger(__name__)

Base = declarative_base()


def make_engine(url: str, **kwargs) -> Engine:
    """Create a SQLite engine with foreign key enforcement on every connection."""
    engine = create_engine(url, connect_args={"check_same_thread": False}, **kwargs)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def _database_url(path: str) -> str:
    db_dir = os.path.dirname(path)
    if db_dir and not os.path.exists(db_dir):
        os.makedirs(db_dir, exist_ok=True)
    return f"sqlite:///{path}"


engine = make_engine(_database_url(config.DATABASE_PATH))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine = engine):
    # models must be imported so their tables are registered on Base.metadata
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ready")


def drop_tables(bind: Engine = engine):
    from . import models  # noqa: F401
    Base.metadata.drop_all(bind=bind)
    logger.info("Database tables dropped")

"""
Database connection management for the Websiter back-office.
Engine construction for the configured DATABASE_URL, scoped sessions and
schema bootstrap for local and test databases.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import QueuePool, StaticPool

logger = logging.getLogger(__name__)

# SQLAlchemy Base for model declarations
Base = declarative_base()


def build_engine(url):
    """
    Create an engine for the given URL.

    SQLite (local development and tests) gets a single shared connection so an
    in-memory database survives across sessions; anything else gets a pooled
    engine with pre-ping.
    """
    if not url:
        raise RuntimeError("DATABASE_URL not configured. Cannot connect to the database.")

    if url.startswith('sqlite'):
        return create_engine(
            url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
            echo=False
        )

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=300,    # Recycle connections after 5 minutes
        echo=False           # Set to True for SQL debugging
    )


def get_session_factory(engine):
    """Session factory bound to engine; rows stay readable after commit."""
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def get_db_session(session_factory):
    """
    Context manager for one unit of work.
    Commits on success, rolls back and re-raises on failure.

    Example:
        with get_db_session(factory) as db:
            notes = db.query(ClientNote).all()
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_db_connection(engine):
    """
    Verify that the database answers a trivial query.
    Returns True if connection is successful, raises RuntimeError otherwise.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.info("Database connection verified successfully")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise RuntimeError(f"Cannot connect to database: {e}")


def init_db(engine):
    """
    Create all tables that do not exist yet.
    Production schemas are managed by Alembic; this is for local and test databases.
    """
    # Import models to ensure they're registered with Base
    from database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import sessionmaker, declarative_base
import logging

logger = logging.getLogger(__name__)

# Base class for models - can be imported without connecting to DB
Base = declarative_base()

# Engine and SessionLocal are lazily created
_engine: Optional[Engine] = None
_SessionLocal = None


def build_engine(database_url: str, ssl: bool = False) -> Engine:
    """Create an engine with the options used by the app and every script."""
    kwargs = {"pool_pre_ping": True}
    if database_url.startswith("postgresql"):
        connect_args = {"connect_timeout": 10}
        if ssl:
            connect_args["sslmode"] = "require"
        kwargs.update(pool_size=5, max_overflow=10, connect_args=connect_args)
    return create_engine(database_url, **kwargs)


def get_engine() -> Engine:
    """
    Lazy engine creation - only connects when first used.
    This prevents import-time failures if database is unreachable.

    Raises ConfigurationError when DATABASE_URL is not set.
    """
    global _engine
    if _engine is None:
        from listings.core.config import settings
        database_url = settings.require_database_url()
        logger.info(f"Creating database engine for: {database_url[:50]}...")
        _engine = build_engine(database_url, ssl=settings.DATABASE_SSL)
    return _engine


def set_engine(engine: Optional[Engine]):
    """Replace the shared engine (tests, scripts pointed at another database)."""
    global _engine, _SessionLocal
    if _engine is not None and _engine is not engine:
        _engine.dispose()
    _engine = engine
    _SessionLocal = None


def get_session_local():
    """Get or create SessionLocal factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def get_db():
    """Dependency to get database session."""
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def connection_scope(engine: Optional[Engine] = None) -> Iterator[Connection]:
    """
    Hold one connection for the duration of a script run.

    The connection is released on exit whether the body succeeded or not.
    Callers open their own transactions with ``conn.begin()``.
    """
    engine = engine or get_engine()
    conn = engine.connect()
    try:
        yield conn
    finally:
        conn.close()


def check_database_connection() -> bool:
    """
    Check if database is reachable.
    Returns True if connected, False otherwise.
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False

import threading
from contextlib import contextmanager
from typing import Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .schema import create_all

_ENGINES: Dict[str, Engine] = {}
_SESSION_FACTORIES: Dict[str, sessionmaker] = {}
_LOCK = threading.Lock()


def get_engine(sqlite_path: str) -> Engine:
    """Engine for `sqlite_path`; the schema is created on first use only."""
    with _LOCK:
        engine = _ENGINES.get(sqlite_path)
        if engine is None:
            engine = create_engine(f"sqlite:///{sqlite_path}", future=True)
            create_all(engine)
            _ENGINES[sqlite_path] = engine
            _SESSION_FACTORIES[sqlite_path] = sessionmaker(bind=engine, autoflush=False, autocommit=False)
        return engine


def get_session(sqlite_path: str) -> Session:
    """Get a SQLAlchemy session (caller must close it)."""
    get_engine(sqlite_path)
    return _SESSION_FACTORIES[sqlite_path]()


def dispose_engines() -> None:
    """Close pooled connections and forget every cached engine."""
    with _LOCK:
        for engine in _ENGINES.values():
            engine.dispose()
        _ENGINES.clear()
        _SESSION_FACTORIES.clear()


@contextmanager
def session_context(sqlite_path: str) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Rolls back on error and always closes the session. Commits are left
    to the caller.

    Usage:
        with session_context(sqlite_path) as session:
            # use session
            session.commit()
    """
    session = get_session(sqlite_path)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

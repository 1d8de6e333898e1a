import os
import threading
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

# In-memory by default: state lives as long as the process does.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")

_is_sqlite = DATABASE_URL.startswith("sqlite")
_is_memory = _is_sqlite and DATABASE_URL in ("sqlite://", "sqlite:///:memory:")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
_echo = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

_engine_kwargs = {"echo": _echo, "connect_args": _connect_args}
if _is_memory:
    # Every session must see the same in-memory database
    _engine_kwargs["poolclass"] = StaticPool

engine: Engine = create_engine(DATABASE_URL, **_engine_kwargs)

# Serializes check-then-mutate sequences across request threads
write_lock = threading.RLock()


def close_session(session: Session) -> None:
    # Closing rolls back the connection. In-memory sessions share one
    # connection, so this must not land inside another thread's atomic() block
    with write_lock:
        session.close()


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    session = Session(engine)
    try:
        yield session
    finally:
        close_session(session)


def init_db() -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from court_rotation.models.court import Court  # noqa: F401
    from court_rotation.models.game_event import GameEvent  # noqa: F401
    from court_rotation.models.queue_entry import QueueEntry  # noqa: F401
    from court_rotation.models.team import Team  # noqa: F401

    SQLModel.metadata.create_all(engine)

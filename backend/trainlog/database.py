"""Record store engine and session handling."""

import logging
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from trainlog.config import get_settings
from trainlog.models.base import Base

logger = logging.getLogger(__name__)

settings = get_settings()


def make_engine(url: str, **kwargs) -> Engine:
    """
    Create an engine for the record store.

    SQLite connections are shared with FastAPI's worker threads, so the
    same-thread check is switched off for them.
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, echo=False, **kwargs)


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """Dependency yielding a session that is closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Optional[Engine] = None) -> None:
    """Create the training-log tables on the given engine (default: the app engine)."""
    import trainlog.models  # noqa: F401  registers every model with Base

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info(f"Record store ready at {target.url.render_as_string(hide_password=True)}")

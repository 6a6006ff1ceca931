from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from url_inbox.core.logging import get_logger
from url_inbox.core.settings import get_settings

logger = get_logger(__name__)

Base = declarative_base()

# Global engine instance
_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def init_db(database_url: str | None = None) -> None:
    """Initialize database engine, session factory and the buffer tables."""
    global _engine, _SessionLocal

    if _engine is not None:
        return

    settings = get_settings()
    url = database_url or settings.database_url

    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints on a threadpool
        connect_args["check_same_thread"] = False

    _engine = create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=settings.debug,
    )
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

    # Import models so they register on Base.metadata
    from url_inbox.models import schema  # noqa: F401

    Base.metadata.create_all(bind=_engine)
    logger.info("Database initialized successfully")


def get_engine() -> Engine:
    """Get the database engine, initializing if necessary."""
    if _engine is None:
        init_db()
    return _engine


def get_session_factory() -> sessionmaker:
    """Get the session factory, initializing if necessary."""
    if _SessionLocal is None:
        init_db()
    return _SessionLocal


@contextmanager
def get_db(session_factory: sessionmaker | None = None) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_db() as db:
            row = db.get(BufferSlot, "pending_data")
    """
    SessionLocal = session_factory or get_session_factory()
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

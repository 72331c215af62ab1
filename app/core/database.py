from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from app.core.config import settings
from app.core.errors import TransportError

# Create SQLAlchemy engine.
# The pool is deliberately small: requests beyond DB_POOL_SIZE + DB_MAX_OVERFLOW
# wait up to DB_POOL_TIMEOUT seconds for a connection, and the newsletter worker
# shares the same ceiling.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using them
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    connect_args={"connect_timeout": settings.DB_CONNECT_TIMEOUT},
)

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency function to get database session.
    Used in FastAPI endpoints with Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run the enclosed statements in one transaction.

    Commits when the block exits normally, rolls back and re-raises otherwise.

    Usage:
        with transaction(db):
            db.execute(stmt)
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def ping(db: Session) -> None:
    """
    Round-trip a trivial query.

    Raises:
        TransportError: If the database cannot be reached
    """
    try:
        db.execute(text("SELECT 1"))
    except (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError, ConnectionError) as e:
        raise TransportError() from e


def init_db(bind=None):
    """
    Create the users, jobs and applications tables (and their enum types).

    Safe to call on every startup: existing tables are left untouched.
    """
    from app.models import user, job, application  # noqa: F401  Import models to register them
    Base.metadata.create_all(bind=bind or engine)

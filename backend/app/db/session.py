"""
Database session management

The engine and session factory live on an explicitly constructed
`Database` handle. The application lifespan opens it, stores it on
`app.state.database` and closes it on shutdown; request handlers receive
sessions through the `get_db` dependency.
"""
from contextlib import contextmanager
from typing import Generator, Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.exceptions import DatabaseConstraintError
from app.logging_config import get_logger

logger = get_logger(__name__)


class Database:
    """Owns one engine and its session factory."""

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def open(self) -> "Database":
        if self._engine is not None:
            return self

        url = make_url(self.url)
        if url.get_backend_name() == "sqlite":
            kwargs = {"connect_args": {"check_same_thread": False}}
            if not url.database or url.database == ":memory:":
                # In-memory SQLite needs a single shared connection
                kwargs["poolclass"] = StaticPool
            engine = create_engine(self.url, echo=self.echo, **kwargs)
        else:
            engine = create_engine(
                self.url,
                echo=self.echo,
                pool_pre_ping=True,  # Verify connections before using
                pool_recycle=3600,  # Recycle connections after 1 hour
            )

        self._engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info(f"Database connection opened: {url.render_as_string(hide_password=True)}")
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        logger.info("Database connection closed")
        self._engine = None
        self._session_factory = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    def create_all(self) -> None:
        from app.db.base import Base
        import app.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for getting database session

    Usage in FastAPI endpoints:
        @router.get("/sale-orders")
        def list_orders(db: Session = Depends(get_db)):
            ...
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a unit of work: commit on success, roll back on any exception.

    Integrity failures raised by the store surface as DatabaseConstraintError.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Constraint violation, transaction rolled back: {e.orig}")
        raise DatabaseConstraintError(details={"reason": str(e.orig)}) from e
    except Exception:
        db.rollback()
        raise

"""
Database session management for the Book Ledger.

This module owns the SQLAlchemy engine and session factory. Proper session
handling is what makes the SQL backend safe under concurrent callers:

1. Short-lived sessions: every backend call opens its own session and
   transaction, so no connection or lock outlives a single operation
2. Connection pooling: file databases get a real pool so threads never
   share a connection; in-memory SQLite is pinned to one connection
3. Error translation: driver errors leave this module as ``StorageError``
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from .backend import StorageError
from .schema import Base

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class DatabaseManager:
    """
    Manages database connections and sessions for the ledger.

    This class provides:
    - Lazy engine creation with backend-appropriate pooling
    - Session factory with explicit transactions
    - Schema creation for development and tests
    """

    def __init__(self, database_url: str | None = None, busy_timeout: float | None = None):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, uses the configured URL.
            busy_timeout: Seconds SQLite waits on a locked database. If None,
                uses the configured timeout.
        """
        config = get_config()
        if database_url is None:
            database_url = config.get_database_url()
            logger.info("Using database at: %s", database_url)

        if database_url.startswith("sqlite:///") and not _is_memory_sqlite(database_url):
            # Ensure parent directory exists
            db_file = make_url(database_url).database
            if db_file:
                Path(db_file).parent.mkdir(exist_ok=True, parents=True)

        self.database_url = database_url
        self.busy_timeout = busy_timeout if busy_timeout is not None else config.sqlite_busy_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        """
        Get or create the database engine.

        In-memory SQLite uses StaticPool so every session sees the same
        database. File-backed SQLite keeps the default pool: concurrent
        writers get their own connections and serialize on the database
        lock, waiting up to ``busy_timeout`` seconds.
        """
        if self._engine is None:
            if self.database_url.startswith("sqlite"):
                if _is_memory_sqlite(self.database_url):
                    self._engine = create_engine(
                        self.database_url,
                        poolclass=StaticPool,
                        connect_args={"check_same_thread": False},
                        echo=False,
                    )
                else:
                    self._engine = create_engine(
                        self.database_url,
                        connect_args={
                            "check_same_thread": False,
                            "timeout": self.busy_timeout,
                        },
                        echo=False,
                    )
            else:
                # PostgreSQL or other databases
                self._engine = create_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,
                    echo=False,
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Create a new database session."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for one backend operation.

        ```python
        with db_manager.session_scope() as session:
            row = session.get(Book, book_id)
        # Session is committed, or rolled back on error, and closed
        ```

        Raises:
            StorageError: If the database reports an error
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            logger.exception("Database error, rolling back")
            session.rollback()
            raise StorageError(f"Database operation failed: {e!s}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """
        Initialize the database schema.

        Args:
            drop_existing: If True, drop all tables before creating
        """
        if drop_existing:
            logger.warning("Dropping all existing tables...")
            Base.metadata.drop_all(bind=self.engine)

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database initialization complete")

    def verify_connection(self) -> bool:
        """Verify the database connection is working."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.exception("Database connection failed")
            return False

    def close(self) -> None:
        """Close the database connection and cleanup resources."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None

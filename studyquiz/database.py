"""
Database engine and session management

The engine lives on an explicit ``Database`` object opened at application
startup and disposed at shutdown. Request handlers reach their session
through the ``get_db`` dependency.
"""
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns the SQLAlchemy engine and session factory for one process"""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._echo = echo

    def open(self) -> "Database":
        """Create the engine and session factory"""
        if self.engine is not None:
            return self

        kwargs = {"future": True, "echo": self._echo}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url or self.url.rstrip("/") == "sqlite:":
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True

        self.engine = create_engine(self.url, **kwargs)

        if self.url.startswith("sqlite"):
            # SQLite ignores ON DELETE CASCADE unless foreign keys are enabled
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False, future=True
        )
        logger.info(f"Database engine opened ({self.engine.dialect.name})")
        return self

    def create_all(self) -> None:
        """Create every table registered on the declarative base"""
        # Import models so Base.metadata knows every table
        import studyquiz.models  # noqa: F401

        Base.metadata.create_all(bind=self._require_engine())

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    def close(self) -> None:
        """Dispose of the engine and its connection pool"""
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database engine disposed")
        self.engine = None
        self._session_factory = None

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError("Database is not open")
        return self.engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db(request: Request) -> Iterator[Session]:
    """FastAPI dependency yielding a session bound to the app's database"""
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()

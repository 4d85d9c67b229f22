"""
Database Session Factory
Creates SQLAlchemy sessions for mappers; callers own the transaction
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import Engine, MetaData, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from datamapper.config import Settings, get_settings
from datamapper.infrastructure.database.base_model import Base
from datamapper.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


def _is_sqlite_memory(database_url: str) -> bool:
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def _engine_options(database_url: str) -> dict[str, Any]:
    if _is_sqlite_memory(database_url):
        # One shared connection, or every checkout sees an empty database
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    if make_url(database_url).get_backend_name() == "sqlite":
        return {}
    return {"pool_pre_ping": True, "pool_recycle": 3600}


class DatabaseSessionFactory:
    """
    Factory for creating database sessions.

    Manages the engine and session maker.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        """
        Initialize session factory with database connection.

        Args:
            database_url: SQLAlchemy database URL
            echo: Whether to log SQL statements (debug mode)
        """
        self.database_url = database_url
        self.echo = echo

        self.engine: Engine = create_engine(database_url, echo=echo, **_engine_options(database_url))

        self.session_factory: sessionmaker[Session] = sessionmaker(
            self.engine,
            expire_on_commit=False,
            autoflush=True,
        )

        logger.info(
            "Database session factory initialized",
            backend=self.engine.dialect.name,
            database_url=database_url,
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DatabaseSessionFactory":
        settings = settings or get_settings()
        return cls(settings.database_url, echo=settings.database_echo)

    def create_session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Transactional scope: commits on success, rolls back on error.

        Usage:
            with factory.session_scope() as session:
                ProjectMapper(session).create(project)
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error("Session error, rolled back", error=str(e))
            raise
        finally:
            session.close()

    def create_all(self, metadata: Optional[MetaData] = None) -> None:
        (metadata or Base.metadata).create_all(self.engine)

    def drop_all(self, metadata: Optional[MetaData] = None) -> None:
        (metadata or Base.metadata).drop_all(self.engine)

    def dispose(self) -> None:
        """Close all connections and dispose of the engine."""
        self.engine.dispose()
        logger.info("Database engine disposed")

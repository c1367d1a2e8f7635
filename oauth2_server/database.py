"""
Database setup and connection management for the token service.

This module handles:
- SQLAlchemy engine creation
- Session lifecycle (commit / rollback / close)
- Table creation

A DatabaseManager is created once by the host application and passed to
each component explicitly.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from loguru import logger
from sqlalchemy import create_engine, inspect, pool, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from oauth2_server.config import Settings
from oauth2_server.models import Base


class DatabaseManager:
    """
    Manages the engine and session lifecycle.

    Usage:
        db = DatabaseManager(settings)
        db.create_tables()
        with db.session_scope() as session:
            # Do database operations
            pass
    """

    # Dependencies first
    TABLE_CREATION_ORDER = [
        "users",
        "oauth2_clients",
        "oauth2_redirect_uris",
        "oauth2_codes",
        "oauth2_tokens",
    ]

    def __init__(self, settings: Optional[Settings] = None, engine: Optional[Engine] = None):
        self.settings = settings or Settings()
        self.engine = engine or self._create_engine(self.settings)
        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,
        )
        logger.info(f"DatabaseManager initialized ({self.engine.dialect.name})")

    @staticmethod
    def _create_engine(settings: Settings) -> Engine:
        """Create SQLAlchemy engine with pooling suited to the backend"""
        url = settings.database_url

        if url.startswith("sqlite"):
            kwargs = {
                "echo": settings.echo,
                "connect_args": {"check_same_thread": False},
            }
            # An in-memory database only exists on its one connection
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = pool.StaticPool
            return create_engine(url, **kwargs)

        return create_engine(
            url,
            poolclass=pool.QueuePool,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_recycle=settings.pool_recycle,
            pool_pre_ping=True,
            echo=settings.echo,
        )

    @property
    def supports_delete_returning(self) -> bool:
        """True when the dialect can run DELETE ... RETURNING"""
        return bool(getattr(self.engine.dialect, "delete_returning", False))

    def create_tables(self) -> None:
        """Create all tables if they don't exist (IDEMPOTENT)"""
        try:
            existing_tables = set(inspect(self.engine).get_table_names())

            for table_name in self.TABLE_CREATION_ORDER:
                table = Base.metadata.tables[table_name]
                if table_name not in existing_tables:
                    table.create(self.engine, checkfirst=True)
                    existing_tables.add(table_name)
                    logger.info(f"Created table: {table_name}")
                else:
                    logger.debug(f"Table already exists: {table_name}")
        except SQLAlchemyError as e:
            logger.error(f"Error creating tables: {type(e).__name__}: {e}")
            raise

    def drop_tables(self) -> None:
        """Drop all tables. USE WITH CAUTION (for testing only)."""
        logger.warning("DROPPING ALL OAUTH2 TABLES - THIS IS DESTRUCTIVE")
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Commits when the block exits normally, rolls back and re-raises
        otherwise. The session is always closed.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error: {type(e).__name__}: {e}")
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> bool:
        """Check if database is reachable"""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()

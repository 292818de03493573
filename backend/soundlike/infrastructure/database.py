"""Database Session Manager — async engine with WAL, explicit write transactions, and rollback.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - transaction() commits only when the body completes; any exception triggers an
      explicit rollback before it propagates
    - Write transactions open with BEGIN IMMEDIATE on SQLite: writers serialize at the
      start, so check-then-act sequences inside one transaction cannot interleave
    - All SQLAlchemy exceptions mapped to TransactionError (core/errors.py)
    - No filesystem call is ever made while a transaction is open (callers' contract)

Design Decisions:
    - One manager instance created in the FastAPI lifespan and injected via app.state
      (no module-level singleton)
    - Driver autocommit + our own BEGIN: pysqlite's implicit transaction handling cannot
      express BEGIN IMMEDIATE (SQLAlchemy-documented recipe for (aio)sqlite)
    - journal_mode=WAL: readers are not blocked by the single writer
    - expire_on_commit=False: prevents lazy-load issues in async context
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from soundlike.core.errors import TransactionError
from soundlike.db.base import Base

logger = logging.getLogger(__name__)

_BEGIN_OPTION = "sqlite_begin"


def _install_sqlite_hooks(engine) -> None:
    """Enable WAL + FK enforcement per connection and take over BEGIN emission."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get(_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        busy_timeout_seconds: float = 30.0,
    ):
        url = make_url(database_url)
        self.is_sqlite = url.get_backend_name() == "sqlite"
        engine_kwargs: dict[str, Any] = {"pool_pre_ping": True}
        if self.is_sqlite:
            engine_kwargs["connect_args"] = {"timeout": busy_timeout_seconds}
        if url.database not in (None, "", ":memory:"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        if self.is_sqlite:
            _install_sqlite_hooks(self.engine)
        self._write_options = (
            {_BEGIN_OPTION: "IMMEDIATE"} if self.is_sqlite else {}
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide read session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise TransactionError("Integrity constraint violated", "commit")
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise TransactionError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise TransactionError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise TransactionError("Database operation failed", "unknown")
        finally:
            await session.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Unit of work: begin; run body; commit on success, explicit rollback otherwise."""
        async with self.session() as session:
            await session.connection(execution_options=self._write_options)
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create missing tables (dev bootstrap; production uses alembic)."""
        import soundlike.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()

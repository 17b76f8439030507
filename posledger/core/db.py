import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from posledger.core.config import DB_ECHO, DB_URL
from posledger.core.errors import DatabaseNotOpenError

log = logging.getLogger("posledger.db")

# Set logging level for SQLAlchemy
logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if DB_ECHO else logging.WARNING)


def _on_connect(dbapi_connection, connection_record):
    # Hand BEGIN over to SQLAlchemy so DDL is rolled back with the rest of a transaction
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def _on_begin(conn):
    conn.exec_driver_sql("BEGIN")


class Database:
    """
    Owns the one SQLite connection of the process.

    Repositories borrow it per call through in_transaction(); only open() and
    close() create or release it.
    """

    def __init__(self, url: str = DB_URL, echo: bool = DB_ECHO):
        self.url = url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None
        self._lock: Optional[asyncio.Lock] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseNotOpenError("Database is not open. Call open() first.")
        return self._engine

    async def open(self) -> AsyncEngine:
        """Opens the engine on first call; later calls return the same engine."""
        if self._engine is not None:
            return self._engine

        # StaticPool keeps exactly one connection for the lifetime of the engine
        engine = create_async_engine(self.url, echo=self.echo, poolclass=StaticPool)
        event.listen(engine.sync_engine, "connect", _on_connect)
        event.listen(engine.sync_engine, "begin", _on_begin)

        self._engine = engine
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
        # One connection, so one unit of work at a time
        self._lock = asyncio.Lock()
        log.info(f"Database connection opened: {self.url}")
        return engine

    async def close(self) -> None:
        """Releases the connection. Safe to call more than once."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        self._lock = None
        log.info("Database connection closed.")

    @asynccontextmanager
    async def in_transaction(self, session: Optional[AsyncSession] = None) -> AsyncIterator[AsyncSession]:
        """
        Unit of work: everything executed on the yielded session commits together
        or rolls back together when the block raises.

        Passing an existing session joins the caller's unit of work instead of
        starting a new one. New units of work queue behind each other, so a
        repository must never open one while it already holds another.
        """
        if session is not None:
            yield session
            return

        if self._sessionmaker is None or self._lock is None:
            raise DatabaseNotOpenError("Database is not open. Call open() first.")

        async with self._lock:
            async with self._sessionmaker() as new_session:
                async with new_session.begin():
                    yield new_session


async def close_db(db: Database) -> None:
    """Closes the database connection."""
    await db.close()

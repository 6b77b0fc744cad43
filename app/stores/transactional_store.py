"""
Asynchronous transactional storage used by the worker image cache.

Opening, reading and writing may all suspend; they yield to the event loop
while the database is busy.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.errors import StoreUnavailable, TransactionAborted
from app.db.base import Base
from app.models.cached_image import CachedWorkerPhoto

logger = logging.getLogger(__name__)


class AsyncTransactionalStore(Protocol):
    async def open(self) -> "AsyncTransactionalStore":
        ...

    def read_transaction(self) -> AsyncContextManager[AsyncSession]:
        ...

    def write_transaction(self) -> AsyncContextManager[AsyncSession]:
        ...

    async def close(self) -> None:
        ...


class SqlAlchemyTransactionalStore:
    """
    Photo record-space in a local database reached through SQLAlchemy's asyncio
    extension (aiosqlite for the on-device file).

    open() is lazy and idempotent: the first call creates the engine and the
    worker_photos table if absent, later calls return the same handle. Needs a
    file-backed URL; every transaction opens its own connection.
    """

    def __init__(self, database_url: str, open_timeout: Optional[float] = None):
        self.database_url = database_url
        self.open_timeout = open_timeout
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None
        self._open_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._sessionmaker is not None

    async def open(self) -> "SqlAlchemyTransactionalStore":
        if self.is_open:
            return self
        async with self._open_lock:
            if self.is_open:
                return self
            try:
                if self.open_timeout:
                    await asyncio.wait_for(self._initialize(), timeout=self.open_timeout)
                else:
                    await self._initialize()
            except asyncio.TimeoutError as e:
                await self._dispose()
                raise StoreUnavailable(f"Opening image cache timed out after {self.open_timeout}s") from e
            except (SQLAlchemyError, OSError) as e:
                await self._dispose()
                raise StoreUnavailable(f"Cannot open image cache: {e}") from e
            logger.info("Image cache store opened")
        return self

    async def _initialize(self) -> None:
        # No pooled connections: each transaction connects on the loop that runs it
        engine = create_async_engine(self.database_url, poolclass=NullPool, echo=False)
        self._engine = engine
        async with engine.begin() as conn:
            await conn.run_sync(
                lambda sync_conn: Base.metadata.create_all(sync_conn, tables=[CachedWorkerPhoto.__table__])
            )
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)

    async def _dispose(self) -> None:
        engine = self._engine
        self._engine = None
        self._sessionmaker = None
        if engine is not None:
            await engine.dispose()

    @asynccontextmanager
    async def read_transaction(self) -> AsyncIterator[AsyncSession]:
        await self.open()
        try:
            async with self._sessionmaker() as session:
                yield session
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Image cache read failed: {e}") from e

    @asynccontextmanager
    async def write_transaction(self) -> AsyncIterator[AsyncSession]:
        """Commit on normal exit, roll back and raise TransactionAborted otherwise"""
        await self.open()
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            raise TransactionAborted(f"Image cache write aborted: {e}") from e

    async def close(self) -> None:
        await self._dispose()
        logger.info("Image cache store closed")

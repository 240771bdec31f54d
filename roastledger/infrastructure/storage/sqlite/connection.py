"""
aiosqlite connection pool for the ledger database.

Connections are opened on demand, up to ``pool_size``, and reused. A write
transaction binds its connection to the current context: stores called inside
it run on that connection and see its uncommitted writes.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from pathlib import Path

import aiosqlite

from roastledger.config import get_logger, get_settings

logger = get_logger(__name__)

PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)

_active_connection: ContextVar[aiosqlite.Connection | None] = ContextVar(
    "_active_connection", default=None
)


class ConnectionPool:
    """Bounded set of aiosqlite connections to one database file."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: list[aiosqlite.Connection] = []
        self._slots = asyncio.Semaphore(pool_size)
        self._opened = 0

    @property
    def open_connections(self) -> int:
        return self._opened

    async def initialize(self) -> None:
        """Open the first connection so a bad path fails at startup."""
        if self._opened:
            return
        self._idle.append(await self._connect())
        logger.info(
            "connection_pool_initialized",
            db_path=str(self.db_path),
            pool_size=self.pool_size,
        )

    async def _connect(self) -> aiosqlite.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(self.db_path)
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        for pragma in PRAGMAS:
            await conn.execute(pragma)
        conn.row_factory = aiosqlite.Row

        self._opened += 1
        logger.debug("sqlite_connection_opened", open_connections=self._opened)
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection; inside a transaction, the transaction's own.

        Waits when all ``pool_size`` connections are borrowed.
        """
        active = _active_connection.get()
        if active is not None:
            yield active
            return

        async with self._slots:
            conn = self._idle.pop() if self._idle else await self._connect()
            try:
                yield conn
            finally:
                # Never hand out a connection that still holds the write lock
                if conn.in_transaction:
                    await conn.rollback()
                self._idle.append(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Run a block as one write transaction.

        BEGIN IMMEDIATE takes the write lock up front, so a stock balance read
        inside the block cannot change before the block commits. Nested calls
        join the outer transaction.
        """
        active = _active_connection.get()
        if active is not None:
            yield active
            return

        async with self.acquire() as conn:
            token = _active_connection.set(conn)
            try:
                await conn.execute("BEGIN IMMEDIATE")
                yield conn
            except BaseException as e:
                await conn.rollback()
                logger.debug("sqlite_transaction_rolled_back", error_type=type(e).__name__)
                raise
            else:
                await conn.commit()
            finally:
                _active_connection.reset(token)

    async def close(self) -> None:
        """Close idle connections; call once nothing is borrowed."""
        while self._idle:
            await self._idle.pop().close()
            self._opened -= 1
        logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the pool for the configured database."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn

"""SQLite transaction manager."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from roastledger.core.interfaces.transaction import ITransactionManager
from roastledger.infrastructure.storage.sqlite.connection import get_transaction


class SQLiteTransactionManager(ITransactionManager):
    """Binds one pooled connection to the current task for the block's duration."""

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with get_transaction():
            yield

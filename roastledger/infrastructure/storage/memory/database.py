"""
Process-local state for the in-memory backend.

All stores of one backend share a MemoryDatabase. Transactions are serialized
by an asyncio.Lock and roll back by restoring a snapshot taken on entry.
"""

import asyncio
import copy
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any

from roastledger.config import get_logger
from roastledger.core.interfaces.transaction import ITransactionManager

logger = get_logger(__name__)


class MemoryDatabase:
    """Tables of JSON-dumped records plus the ledger list."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict[str, Any]]] = {}
        self.ledger: list[dict[str, Any]] = []
        self.next_entry_id = 1
        self._lock = asyncio.Lock()
        self._active: ContextVar[bool] = ContextVar(f"memory_tx_{id(self)}", default=False)

    def table(self, name: str) -> dict[str, dict[str, Any]]:
        return self.tables.setdefault(name, {})

    def _snapshot(self) -> tuple:
        return copy.deepcopy((self.tables, self.ledger, self.next_entry_id))

    def _restore(self, snapshot: tuple) -> None:
        self.tables, self.ledger, self.next_entry_id = snapshot

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Open a transaction, or join the one already open in this task."""
        if self._active.get():
            yield
            return

        async with self._lock:
            token = self._active.set(True)
            snapshot = self._snapshot()
            try:
                yield
            except BaseException:
                self._restore(snapshot)
                logger.debug("memory_transaction_rolled_back")
                raise
            finally:
                self._active.reset(token)

    def clear(self) -> None:
        self.tables = {}
        self.ledger = []
        self.next_entry_id = 1


class MemoryTransactionManager(ITransactionManager):
    """Transaction manager over a MemoryDatabase."""

    def __init__(self, db: MemoryDatabase):
        self._db = db

    def transaction(self):
        return self._db.transaction()

"""Abstract interface for storage transactions."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class ITransactionManager(ABC):
    """
    Groups store writes into one atomic unit.

    Nested transaction() blocks join the outermost one; an exception escaping
    the outermost block rolls back every write made inside it.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Open (or join) a transaction."""
        pass

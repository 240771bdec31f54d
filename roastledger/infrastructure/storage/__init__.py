"""Storage infrastructure implementations."""

from roastledger.config import get_logger, get_settings
from roastledger.core.exceptions import ConfigurationError
from roastledger.core.interfaces import Repositories
from roastledger.infrastructure.storage.memory import create_memory_repositories
from roastledger.infrastructure.storage.sqlite import (
    close_pool,
    create_sqlite_repositories,
    get_connection,
    get_pool,
    get_transaction,
)

logger = get_logger(__name__)

# Singleton repositories for the configured backend
_repositories: Repositories | None = None


def get_repositories() -> Repositories:
    """Get or create the repositories for the configured storage backend."""
    global _repositories
    if _repositories is None:
        backend = get_settings().storage.backend
        if backend == "sqlite":
            _repositories = create_sqlite_repositories()
        elif backend == "memory":
            _repositories = create_memory_repositories()
        else:
            raise ConfigurationError(f"Unknown storage backend: {backend}")
        logger.info("repositories_created", backend=backend)
    return _repositories


def reset_repositories() -> None:
    """Reset repositories (for testing)."""
    global _repositories
    _repositories = None


__all__ = [
    # Repositories
    "get_repositories",
    "reset_repositories",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]

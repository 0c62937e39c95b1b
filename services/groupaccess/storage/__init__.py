"""
Role configuration store for groupaccess.

Provides init_store() / close_store() for the embedding application's
lifespan and get_store() for callers that need the active store.
"""

from __future__ import annotations

from groupaccess.config import StoreBackend, settings
from groupaccess.logging_config import get_logger
from groupaccess.storage.protocol import RoleStore

logger = get_logger(__name__)

# Module-level store instance
_store: RoleStore | None = None


async def init_store() -> RoleStore:
    """Initialize the store backend based on configuration.

    Called during application startup.
    """
    global _store  # noqa: PLW0603
    cfg = settings.store

    match cfg.backend:
        case StoreBackend.MEMORY:
            from groupaccess.storage.memory import InMemoryRoleStore

            _store = InMemoryRoleStore()
            logger.info("Role store initialized", backend="memory")

        case StoreBackend.FILESYSTEM:
            from groupaccess.storage.filesystem import FilesystemRoleStore

            _store = FilesystemRoleStore(root_dir=cfg.filesystem.root_dir)
            logger.info(
                "Role store initialized", backend="filesystem", root_dir=cfg.filesystem.root_dir
            )

    return _store


async def close_store() -> None:
    """Close the store backend and release resources.

    Called during application shutdown.
    """
    global _store  # noqa: PLW0603
    if _store is not None:
        await _store.close()
        _store = None
        logger.info("Role store closed")


def get_store() -> RoleStore:
    """Return the active store.

    Raises RuntimeError if the store has not been initialized.
    """
    if _store is None:
        raise RuntimeError("Role store not initialized; call init_store() first")
    return _store


def get_store_or_none() -> RoleStore | None:
    """Return the store if initialized, otherwise None."""
    return _store

"""
Shared fixtures for role store tests.
"""

from __future__ import annotations

import tempfile
from collections.abc import AsyncGenerator

import pytest_asyncio

from groupaccess.storage.filesystem import FilesystemRoleStore
from groupaccess.storage.memory import InMemoryRoleStore
from groupaccess.storage.protocol import RoleStore


@pytest_asyncio.fixture
async def fs_store() -> AsyncGenerator[FilesystemRoleStore]:
    """Create a FilesystemRoleStore with a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = FilesystemRoleStore(root_dir=tmpdir)
        yield store
        await store.close()


@pytest_asyncio.fixture(params=["memory", "filesystem"])
async def role_store(request) -> AsyncGenerator[RoleStore]:
    """Every store backend, for the conformance suite."""
    if request.param == "memory":
        store = InMemoryRoleStore()
        yield store
        await store.close()
        return

    with tempfile.TemporaryDirectory() as tmpdir:
        store = FilesystemRoleStore(root_dir=tmpdir)
        yield store
        await store.close()

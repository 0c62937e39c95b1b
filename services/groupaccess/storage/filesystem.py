"""
Filesystem role store for groupaccess.

Uses aiofiles for async I/O against a local directory holding one YAML file
per record:

    group.type.<group_type_id>.yml
    group.role.<group_type_id>.<role_name>.yml

Records are written in export order so the files diff cleanly when kept
under version control.
"""

from __future__ import annotations

from pathlib import Path

import aiofiles
import aiofiles.os
import yaml

from groupaccess.errors import ConfigurationError
from groupaccess.logging_config import get_logger
from groupaccess.storage.base import Record, RoleStoreBase
from groupaccess.storage.protocol import RoleStoreError

logger = get_logger(__name__)

GROUP_TYPE_PREFIX = "group.type."
GROUP_ROLE_PREFIX = "group.role."
RECORD_SUFFIX = ".yml"


class FilesystemRoleStore(RoleStoreBase):
    """Role store backed by YAML files in a local directory."""

    def __init__(self, root_dir: str) -> None:
        super().__init__()
        self._root = Path(root_dir)

        # Ensure root directory exists
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info("Filesystem role store initialized", root_dir=str(self._root))

    @property
    def root_dir(self) -> Path:
        """The directory holding the record files."""
        return self._root

    def _path(self, prefix: str, record_id: str) -> Path:
        """Resolve a record id to its file, rejecting path separators."""
        if not record_id or "/" in record_id or "\\" in record_id or record_id.startswith("."):
            raise ConfigurationError(f"Invalid record id: {record_id!r}")
        return self._root / f"{prefix}{record_id}{RECORD_SUFFIX}"

    async def _read(self, path: Path) -> Record | None:
        if not path.exists():
            return None
        try:
            async with aiofiles.open(path) as f:
                content = await f.read()
        except OSError as e:
            raise RoleStoreError(f"Failed to read {path.name}: {e}") from e

        try:
            record = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed record file {path.name}: {e}") from e
        if not isinstance(record, dict):
            raise ConfigurationError(f"Malformed record file {path.name}: not a mapping")
        return record

    async def _write(self, path: Path, record: Record) -> None:
        content = yaml.safe_dump(record, sort_keys=False, default_flow_style=False)
        try:
            async with aiofiles.open(path, "w") as f:
                await f.write(content)
        except OSError as e:
            raise RoleStoreError(f"Failed to write {path.name}: {e}") from e

    async def _remove(self, path: Path) -> None:
        if path.exists():
            try:
                await aiofiles.os.remove(path)
            except OSError as e:
                raise RoleStoreError(f"Failed to remove {path.name}: {e}") from e

    async def _read_all(self, pattern: str) -> list[Record]:
        records = []
        for path in sorted(self._root.glob(pattern)):
            record = await self._read(path)
            if record is not None:
                records.append(record)
        return records

    # --- Group types ---

    async def _get_group_type_record(self, group_type_id: str) -> Record | None:
        return await self._read(self._path(GROUP_TYPE_PREFIX, group_type_id))

    async def _list_group_type_records(self) -> list[Record]:
        return await self._read_all(f"{GROUP_TYPE_PREFIX}*{RECORD_SUFFIX}")

    async def _put_group_type_record(self, record: Record) -> None:
        await self._write(self._path(GROUP_TYPE_PREFIX, record["id"]), record)

    async def _remove_group_type_record(self, group_type_id: str) -> None:
        await self._remove(self._path(GROUP_TYPE_PREFIX, group_type_id))

    # --- Roles ---

    async def _get_role_record(self, role_id: str) -> Record | None:
        return await self._read(self._path(GROUP_ROLE_PREFIX, role_id))

    async def _list_role_records(self, group_type_id: str | None = None) -> list[Record]:
        if group_type_id is None:
            return await self._read_all(f"{GROUP_ROLE_PREFIX}*{RECORD_SUFFIX}")
        return await self._read_all(f"{GROUP_ROLE_PREFIX}{group_type_id}.*{RECORD_SUFFIX}")

    async def _put_role_record(self, record: Record) -> None:
        await self._write(self._path(GROUP_ROLE_PREFIX, record["id"]), record)

    async def _remove_role_record(self, role_id: str) -> None:
        await self._remove(self._path(GROUP_ROLE_PREFIX, role_id))

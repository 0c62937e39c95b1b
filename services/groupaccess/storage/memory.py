"""
In-memory role store.

Keeps deep copies of export records in dicts, so objects handed to or
returned from the store are never shared with it. The default backend for
tests and for applications that load configuration from elsewhere.
"""

from __future__ import annotations

import copy

from groupaccess.storage.base import Record, RoleStoreBase


class InMemoryRoleStore(RoleStoreBase):
    """Role store backed by process memory."""

    def __init__(self) -> None:
        super().__init__()
        self._group_types: dict[str, Record] = {}
        self._roles: dict[str, Record] = {}

    async def _get_group_type_record(self, group_type_id: str) -> Record | None:
        record = self._group_types.get(group_type_id)
        return copy.deepcopy(record) if record is not None else None

    async def _list_group_type_records(self) -> list[Record]:
        return [copy.deepcopy(r) for r in self._group_types.values()]

    async def _put_group_type_record(self, record: Record) -> None:
        self._group_types[record["id"]] = copy.deepcopy(record)

    async def _remove_group_type_record(self, group_type_id: str) -> None:
        self._group_types.pop(group_type_id, None)

    async def _get_role_record(self, role_id: str) -> Record | None:
        record = self._roles.get(role_id)
        return copy.deepcopy(record) if record is not None else None

    async def _list_role_records(self, group_type_id: str | None = None) -> list[Record]:
        return [
            copy.deepcopy(r)
            for r in self._roles.values()
            if group_type_id is None or r["group_type"] == group_type_id
        ]

    async def _put_role_record(self, record: Record) -> None:
        self._roles[record["id"]] = copy.deepcopy(record)

    async def _remove_role_record(self, role_id: str) -> None:
        self._roles.pop(role_id, None)

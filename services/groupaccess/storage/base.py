"""
Shared role store behaviour.

Backends implement eight record primitives (get/list/put/remove for group
types and roles). Everything else, including weight assignment, cascade
deletes and change notification, lives here so every backend behaves the
same way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from groupaccess.entities.catalog import RoleCatalog
from groupaccess.entities.group_role import GroupRole, role_sort_key
from groupaccess.entities.group_type import GroupType
from groupaccess.errors import ConfigurationError
from groupaccess.logging_config import get_logger
from groupaccess.storage.protocol import (
    ChangeListener,
    GroupTypeNotFoundError,
    RoleNotFoundError,
)

logger = get_logger(__name__)

Record = dict[str, Any]


class RoleStoreBase(ABC):
    """Base class implementing RoleStore on top of record primitives."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    # --- Primitives ---

    @abstractmethod
    async def _get_group_type_record(self, group_type_id: str) -> Record | None: ...

    @abstractmethod
    async def _list_group_type_records(self) -> list[Record]: ...

    @abstractmethod
    async def _put_group_type_record(self, record: Record) -> None: ...

    @abstractmethod
    async def _remove_group_type_record(self, group_type_id: str) -> None: ...

    @abstractmethod
    async def _get_role_record(self, role_id: str) -> Record | None: ...

    @abstractmethod
    async def _list_role_records(self, group_type_id: str | None = None) -> list[Record]: ...

    @abstractmethod
    async def _put_role_record(self, record: Record) -> None: ...

    @abstractmethod
    async def _remove_role_record(self, role_id: str) -> None: ...

    # --- Listeners ---

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()

    # --- Group types ---

    async def create_group_type(self, group_type_id: str, label: str = "") -> GroupType:
        existing = await self._get_group_type_record(group_type_id)
        if existing is not None:
            group_type = GroupType.from_export(existing)
        else:
            group_type = await self.save_group_type(GroupType(id=group_type_id, label=label))
            logger.info("Group type created", group_type=group_type_id)

        for role in group_type.build_internal_roles():
            if await self._get_role_record(role.id) is None:
                await self.save_role(role)
                logger.info("Internal group role provisioned", role=role.id)
        return group_type

    async def save_group_type(self, group_type: GroupType) -> GroupType:
        await self._put_group_type_record(group_type.to_export())
        self._notify()
        return group_type

    async def load_group_type(self, group_type_id: str) -> GroupType:
        record = await self._get_group_type_record(group_type_id)
        if record is None:
            raise GroupTypeNotFoundError(group_type_id)
        return GroupType.from_export(record)

    async def load_group_types(self) -> list[GroupType]:
        group_types = [GroupType.from_export(r) for r in await self._list_group_type_records()]
        return sorted(group_types, key=lambda gt: gt.id)

    async def delete_group_type(self, group_type_id: str) -> None:
        role_records = await self._list_role_records(group_type_id)
        for record in role_records:
            await self._remove_role_record(record["id"])
        await self._remove_group_type_record(group_type_id)
        logger.info(
            "Group type deleted",
            group_type=group_type_id,
            roles_deleted=len(role_records),
        )
        self._notify()

    # --- Roles ---

    async def save_role(self, role: GroupRole) -> GroupRole:
        if await self._get_group_type_record(role.group_type_id) is None:
            raise ConfigurationError(
                f"Group role '{role.id}' references unknown group type '{role.group_type_id}'"
            )

        if role.weight is None:
            siblings = [
                r for r in await self.load_roles(role.group_type_id) if r.id != role.id
            ]
            role.set_weight(RoleCatalog(role.group_type_id, siblings).next_weight())

        await self._put_role_record(role.to_export())
        logger.debug("Group role saved", role=role.id, weight=role.weight)
        self._notify()
        return role

    async def load_role(self, role_id: str) -> GroupRole:
        record = await self._get_role_record(role_id)
        if record is None:
            raise RoleNotFoundError(role_id)
        return GroupRole.from_export(record)

    async def load_roles(self, group_type_id: str | None = None) -> list[GroupRole]:
        roles = [GroupRole.from_export(r) for r in await self._list_role_records(group_type_id)]
        return sorted(roles, key=role_sort_key)

    async def load_catalog(self, group_type_id: str) -> RoleCatalog:
        await self.load_group_type(group_type_id)
        return RoleCatalog(group_type_id, await self.load_roles(group_type_id))

    async def load_catalogs(self) -> dict[str, RoleCatalog]:
        catalogs = {gt.id: RoleCatalog(gt.id) for gt in await self.load_group_types()}
        for role in await self.load_roles():
            catalog = catalogs.get(role.group_type_id)
            if catalog is None:
                raise ConfigurationError(
                    f"Group role '{role.id}' references unknown group type '{role.group_type_id}'"
                )
            catalog.add(role)
        return catalogs

    async def delete_role(self, role_id: str) -> None:
        await self._remove_role_record(role_id)
        logger.debug("Group role deleted", role=role_id)
        self._notify()

    async def close(self) -> None:
        """No resources to release by default."""

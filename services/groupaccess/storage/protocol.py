"""
Role configuration store protocol and exceptions for groupaccess.

Defines the RoleStore Protocol that all store backends must satisfy.
Group types and roles are persisted as export records; see
GroupRole.to_export() and GroupType.to_export().
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from groupaccess.entities.catalog import RoleCatalog
from groupaccess.entities.group_role import GroupRole
from groupaccess.entities.group_type import GroupType
from groupaccess.errors import GroupAccessError

# --- Exceptions ---


class RoleStoreError(GroupAccessError):
    """Base exception for role store operations."""


class RoleNotFoundError(RoleStoreError):
    """Raised when a requested group role does not exist."""

    def __init__(self, role_id: str) -> None:
        self.role_id = role_id
        super().__init__(f"Group role not found: {role_id}")


class GroupTypeNotFoundError(RoleStoreError):
    """Raised when a requested group type does not exist."""

    def __init__(self, group_type_id: str) -> None:
        self.group_type_id = group_type_id
        super().__init__(f"Group type not found: {group_type_id}")


ChangeListener = Callable[[], None]


# --- Protocol ---


@runtime_checkable
class RoleStore(Protocol):
    """Protocol defining the role configuration store interface.

    All I/O methods are async. Implementations must satisfy this interface
    structurally; RoleStoreBase provides the shared behaviour on top of a
    handful of record primitives.
    """

    async def create_group_type(self, group_type_id: str, label: str = "") -> GroupType:
        """Save a group type and provision its anonymous, outsider and member roles.

        Idempotent: an existing group type is returned as is, with any
        missing internal role provisioned.
        """
        ...

    async def save_group_type(self, group_type: GroupType) -> GroupType:
        """Store a group type record without touching its roles."""
        ...

    async def load_group_type(self, group_type_id: str) -> GroupType:
        """Load a group type.

        Raises:
            GroupTypeNotFoundError: If the group type does not exist.
        """
        ...

    async def load_group_types(self) -> list[GroupType]:
        """Load every group type, ordered by id."""
        ...

    async def delete_group_type(self, group_type_id: str) -> None:
        """Delete a group type and every role belonging to it.

        Idempotent: does not raise if the group type does not exist.
        """
        ...

    async def save_role(self, role: GroupRole) -> GroupRole:
        """Store a group role.

        A role saved without a weight gets max(existing weights) + 1, or the
        configured baseline when it is the first role of its group type.

        Raises:
            ConfigurationError: If the role's group type does not exist.
        """
        ...

    async def load_role(self, role_id: str) -> GroupRole:
        """Load a group role.

        Raises:
            RoleNotFoundError: If the role does not exist.
        """
        ...

    async def load_roles(self, group_type_id: str | None = None) -> list[GroupRole]:
        """Load roles, optionally limited to one group type, ordered by weight then id."""
        ...

    async def load_catalog(self, group_type_id: str) -> RoleCatalog:
        """Load the role catalog of one group type.

        Raises:
            GroupTypeNotFoundError: If the group type does not exist.
        """
        ...

    async def load_catalogs(self) -> dict[str, RoleCatalog]:
        """Load a catalog for every group type, keyed by group type id.

        Raises:
            ConfigurationError: If a stored role references a missing group type.
        """
        ...

    async def delete_role(self, role_id: str) -> None:
        """Delete a group role. Idempotent."""
        ...

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback invoked after every successful mutation."""
        ...

    def remove_listener(self, listener: ChangeListener) -> None:
        """Unregister a callback. Unknown callbacks are ignored."""
        ...

    async def close(self) -> None:
        """Release any resources held by the backend."""
        ...

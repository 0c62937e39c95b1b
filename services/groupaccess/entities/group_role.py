"""Group role entity.

A group role is a named, weighted set of permission strings scoped to one
group type. Three roles per group type are internal: they stand for the
anonymous, outsider and member tiers and are provisioned automatically
when the group type is created. All other roles are custom roles created
by administrators and handed to members through membership data.

Role ids are structured as ``<group_type_id>.<role_name>``. The tier is
stored explicitly on the role and never re-parsed from the id.
"""

import re
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, StringConstraints, ValidationError

from groupaccess.errors import ConfigurationError

MACHINE_NAME_PATTERN = re.compile(r"^[a-z0-9_]+$")
ROLE_ID_DELIMITER = "."

PermissionName = Annotated[str, StringConstraints(min_length=1, pattern=r"^\S(.*\S)?$")]


class RoleTier(StrEnum):
    """Classification of a role relative to the group it applies in."""

    ANONYMOUS = "anonymous"
    OUTSIDER = "outsider"
    MEMBER = "member"
    CUSTOM = "custom"


INTERNAL_TIERS: tuple[RoleTier, ...] = (RoleTier.ANONYMOUS, RoleTier.OUTSIDER, RoleTier.MEMBER)
INTERNAL_ROLE_NAMES: frozenset[str] = frozenset(t.value for t in INTERNAL_TIERS)


def validate_machine_name(value: str, what: str) -> str:
    """Return value if it is a valid machine name, else raise ConfigurationError."""
    if not isinstance(value, str) or not MACHINE_NAME_PATTERN.match(value):
        raise ConfigurationError(f"Invalid {what}: {value!r}")
    return value


def validate_permission(permission: str) -> str:
    """Return permission if it is a well-formed permission string."""
    if not isinstance(permission, str) or not permission or permission != permission.strip():
        raise ConfigurationError(f"Invalid permission: {permission!r}")
    return permission


def split_role_id(role_id: str) -> tuple[str, str]:
    """Split ``<group_type_id>.<role_name>`` into its two halves."""
    if not isinstance(role_id, str) or ROLE_ID_DELIMITER not in role_id:
        raise ConfigurationError(f"Invalid group role id: {role_id!r}")
    group_type_id, role_name = role_id.split(ROLE_ID_DELIMITER, 1)
    validate_machine_name(group_type_id, "group type id")
    validate_machine_name(role_name, "group role name")
    return group_type_id, role_name


def build_role_id(group_type_id: str, role_name: str) -> str:
    validate_machine_name(group_type_id, "group type id")
    validate_machine_name(role_name, "group role name")
    return f"{group_type_id}{ROLE_ID_DELIMITER}{role_name}"


class GroupRoleRecord(BaseModel):
    """Export representation of a group role.

    Field order is the export order.
    """

    model_config = ConfigDict(extra="forbid")

    id: str
    label: str
    weight: int | None = None
    internal: bool = False
    group_type: str
    permissions: list[PermissionName] = []


class GroupRole:
    """A group role and its grant set."""

    def __init__(
        self,
        id: str,
        label: str,
        group_type_id: str,
        *,
        weight: int | None = None,
        internal: bool = False,
        tier: RoleTier | None = None,
        permissions: Iterable[str] = (),
    ) -> None:
        prefix, role_name = split_role_id(id)
        if prefix != group_type_id:
            raise ConfigurationError(
                f"Group role '{id}' does not belong to group type '{group_type_id}'"
            )

        if tier is None:
            if internal and role_name in INTERNAL_ROLE_NAMES:
                tier = RoleTier(role_name)
            else:
                tier = RoleTier.CUSTOM
        _check_tier(id, role_name, internal, RoleTier(tier))

        object.__setattr__(self, "_id", id)
        object.__setattr__(self, "_group_type_id", group_type_id)
        object.__setattr__(self, "_tier", RoleTier(tier))
        self.label = label
        self.weight = weight
        self._internal = internal
        self._permissions: set[str] = set()
        self.grant_permissions(permissions)

    @classmethod
    def create(cls, group_type_id: str, role_name: str, label: str, **kwargs: Any) -> "GroupRole":
        """Build a role from its group type and short machine name."""
        return cls(build_role_id(group_type_id, role_name), label, group_type_id, **kwargs)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("_id", "_group_type_id", "_tier"):
            raise ConfigurationError(f"Group role field '{name.lstrip('_')}' is immutable")
        super().__setattr__(name, value)

    # --- Identity ---

    @property
    def id(self) -> str:
        return self._id

    @property
    def group_type_id(self) -> str:
        return self._group_type_id

    @property
    def tier(self) -> RoleTier:
        return self._tier

    @property
    def role_name(self) -> str:
        return self._id.split(ROLE_ID_DELIMITER, 1)[1]

    def is_internal(self) -> bool:
        return self._internal

    def is_anonymous(self) -> bool:
        return self._tier is RoleTier.ANONYMOUS

    def is_outsider(self) -> bool:
        return self._tier is RoleTier.OUTSIDER

    def is_member(self) -> bool:
        return self._tier is RoleTier.MEMBER

    # --- Weight ---

    def get_weight(self) -> int | None:
        return self.weight

    def set_weight(self, weight: int) -> "GroupRole":
        self.weight = int(weight)
        return self

    # --- Permissions ---

    def get_permissions(self) -> frozenset[str]:
        return frozenset(self._permissions)

    def has_permission(self, permission: str) -> bool:
        return permission in self._permissions

    def grant_permission(self, permission: str) -> "GroupRole":
        return self.grant_permissions([permission])

    def grant_permissions(self, permissions: Iterable[str]) -> "GroupRole":
        # Validate all entries before mutating
        validated = [validate_permission(p) for p in _as_list(permissions)]
        self._permissions.update(validated)
        return self

    def revoke_permission(self, permission: str) -> "GroupRole":
        return self.revoke_permissions([permission])

    def revoke_permissions(self, permissions: Iterable[str]) -> "GroupRole":
        self._permissions.difference_update(_as_list(permissions))
        return self

    def change_permissions(self, permissions: Mapping[str, Any]) -> "GroupRole":
        """Apply a checkbox-style delta.

        Truthy values are granted, falsy values are revoked. Permissions not
        present in the mapping are left untouched.
        """
        grant = [p for p, enabled in permissions.items() if enabled]
        revoke = [p for p, enabled in permissions.items() if not enabled]
        if grant:
            self.grant_permissions(grant)
        if revoke:
            self.revoke_permissions(revoke)
        return self

    # --- Export ---

    def to_export(self) -> dict[str, Any]:
        """Return the ordered export record for this role."""
        return GroupRoleRecord(
            id=self._id,
            label=self.label,
            weight=self.weight,
            internal=self._internal,
            group_type=self._group_type_id,
            permissions=sorted(self._permissions),
        ).model_dump()

    @classmethod
    def from_export(cls, record: Mapping[str, Any]) -> "GroupRole":
        """Build a role from an export record, validating its shape."""
        try:
            parsed = GroupRoleRecord.model_validate(dict(record))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid group role record: {e}") from e
        return cls(
            parsed.id,
            parsed.label,
            parsed.group_type,
            weight=parsed.weight,
            internal=parsed.internal,
            permissions=parsed.permissions,
        )

    def copy(self) -> "GroupRole":
        return GroupRole(
            self._id,
            self.label,
            self._group_type_id,
            weight=self.weight,
            internal=self._internal,
            tier=self._tier,
            permissions=self._permissions,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GroupRole):
            return NotImplemented
        return self._tier is other._tier and self.to_export() == other.to_export()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"GroupRole(id={self._id!r}, tier={self._tier.value!r}, weight={self.weight!r})"


def role_sort_key(role: GroupRole) -> tuple[int, str]:
    """Sort key for administrative listings: weight ascending, then id.

    Roles without a weight sort as 0. Python's sort is stable, so equal keys
    keep their relative order, but (weight, id) is already unique within a
    catalog.
    """
    return (role.weight if role.weight is not None else 0, role.id)


def _check_tier(role_id: str, role_name: str, internal: bool, tier: RoleTier) -> None:
    if tier is RoleTier.CUSTOM:
        if internal:
            raise ConfigurationError(f"Internal group role '{role_id}' must use a reserved tier")
        if role_name in INTERNAL_ROLE_NAMES:
            raise ConfigurationError(
                f"Group role name '{role_name}' is reserved for internal roles"
            )
        return
    if not internal:
        raise ConfigurationError(f"Group role '{role_id}' has tier '{tier}' but is not internal")
    if role_name != tier.value:
        raise ConfigurationError(
            f"Internal group role '{role_id}' must be named '{tier.value}'"
        )


def _as_list(permissions: Iterable[str]) -> list[str]:
    # A bare string is a single permission, not an iterable of characters
    if isinstance(permissions, str):
        return [permissions]
    return list(permissions)

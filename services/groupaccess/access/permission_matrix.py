"""Permission matrix for role administration screens.

Renders roles against the universe of known permissions as a grid of
booleans, and writes a submitted grid back through
GroupRole.change_permissions(). Rendering the grid is left to the caller.
"""

from collections.abc import Iterable, Mapping

from groupaccess.entities.catalog import RoleCatalog
from groupaccess.entities.group_role import GroupRole, role_sort_key, validate_permission
from groupaccess.errors import ConfigurationError


class PermissionMatrix:
    """Roles (columns) by known permissions (rows)."""

    def __init__(self, roles: Iterable[GroupRole], known_permissions: Iterable[str]) -> None:
        self.roles = sorted(roles, key=role_sort_key)
        self.known_permissions = list(
            dict.fromkeys(validate_permission(p) for p in known_permissions)
        )

    @classmethod
    def from_catalog(
        cls, catalog: RoleCatalog, known_permissions: Iterable[str]
    ) -> "PermissionMatrix":
        """Matrix over every role of one group type."""
        return cls(catalog.sorted(), known_permissions)

    def role_ids(self) -> list[str]:
        return [role.id for role in self.roles]

    def rows(self) -> list[tuple[str, dict[str, bool]]]:
        return [
            (permission, {role.id: role.has_permission(permission) for role in self.roles})
            for permission in self.known_permissions
        ]

    def apply(self, submitted: Mapping[str, Mapping[str, bool]]) -> list[GroupRole]:
        """Write checkbox values back to the roles.

        Every known permission not checked for a submitted role is revoked
        from it. Roles absent from submitted are left alone. Returns the
        roles whose grants changed.
        """
        by_id = {role.id: role for role in self.roles}
        unknown = [role_id for role_id in submitted if role_id not in by_id]
        if unknown:
            raise ConfigurationError(f"Unknown group roles in submission: {', '.join(unknown)}")

        changed = []
        for role_id, values in submitted.items():
            role = by_id[role_id]
            before = role.get_permissions()
            delta = {p: bool(values.get(p, False)) for p in self.known_permissions}
            role.change_permissions(delta)
            if role.get_permissions() != before:
                changed.append(role)
        return changed

"""Role catalog: the ordered set of roles belonging to one group type.

A catalog is an explicit object handed to whoever needs it. There is no
global registry of loaded roles.
"""

from collections.abc import Iterable, Iterator

from groupaccess.config import settings
from groupaccess.entities.group_role import INTERNAL_TIERS, GroupRole, RoleTier, role_sort_key
from groupaccess.errors import ConfigurationError, InvariantViolation
from groupaccess.logging_config import get_logger

logger = get_logger(__name__)


class RoleCatalog:
    """Roles of a single group type, ordered by (weight, id)."""

    def __init__(
        self,
        group_type_id: str,
        roles: Iterable[GroupRole] = (),
        default_weight: int | None = None,
    ) -> None:
        self.group_type_id = group_type_id
        self.default_weight = (
            settings.roles.default_weight if default_weight is None else default_weight
        )
        self._roles: dict[str, GroupRole] = {}
        for role in roles:
            self.add(role)

    def next_weight(self) -> int:
        """Weight that sorts a new role after every existing one."""
        weights = [r.weight for r in self._roles.values() if r.weight is not None]
        if not weights:
            return self.default_weight
        return max(weights) + 1

    def add(self, role: GroupRole) -> GroupRole:
        """Add a role, assigning it the next weight if it has none."""
        if role.group_type_id != self.group_type_id:
            raise ConfigurationError(
                f"Group role '{role.id}' belongs to group type '{role.group_type_id}', "
                f"not '{self.group_type_id}'"
            )
        if role.id in self._roles:
            raise ConfigurationError(f"Group role '{role.id}' already exists")
        if role.weight is None:
            role.set_weight(self.next_weight())
        self._roles[role.id] = role
        return role

    def remove(self, role_id: str) -> GroupRole | None:
        return self._roles.pop(role_id, None)

    def get(self, role_id: str) -> GroupRole | None:
        return self._roles.get(role_id)

    def sorted(self) -> list[GroupRole]:
        return sorted(self._roles.values(), key=role_sort_key)

    def role_ids(self) -> list[str]:
        return [r.id for r in self.sorted()]

    def roles_of_tier(self, tier: RoleTier) -> list[GroupRole]:
        return [r for r in self.sorted() if r.tier is tier]

    def internal_role(self, tier: RoleTier) -> GroupRole | None:
        """Return the internal role for tier, or None if not provisioned."""
        roles = self.roles_of_tier(tier)
        if len(roles) > 1:
            raise InvariantViolation(self.group_type_id, tier.value, [r.id for r in roles])
        return roles[0] if roles else None

    def validate(self) -> None:
        """Raise InvariantViolation if any internal tier is held by more than one role."""
        for tier in INTERNAL_TIERS:
            roles = self.roles_of_tier(tier)
            if len(roles) > 1:
                role_ids = [r.id for r in roles]
                logger.error(
                    "Duplicate internal group role",
                    group_type=self.group_type_id,
                    tier=tier.value,
                    roles=role_ids,
                )
                raise InvariantViolation(self.group_type_id, tier.value, role_ids)

    def __contains__(self, role_id: object) -> bool:
        return role_id in self._roles

    def __len__(self) -> int:
        return len(self._roles)

    def __iter__(self) -> Iterator[GroupRole]:
        return iter(self.sorted())

    def __repr__(self) -> str:
        return f"RoleCatalog(group_type_id={self.group_type_id!r}, roles={self.role_ids()!r})"

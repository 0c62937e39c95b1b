"""Group permission calculator.

Aggregates role grants into a CalculatedGroupPermissions for one account.

Calculation order:
1. Anonymous role of every group type -> anonymous[group_type_id]
2. Outsider role of every group type  -> outsider[group_type_id]
3. For each membership of an authenticated account:
   member role + the membership's custom roles -> member[group_id]
   (an entry is written even when the union is empty; role ids missing
   from the catalog are skipped with a warning)

The calculator works on an in-memory snapshot of role catalogs and never
mutates them. It does not decide who is a member of what: that comes from
the membership source.
"""

from collections.abc import Hashable, Mapping

from groupaccess.access.account import AccountLike
from groupaccess.access.calculated import CalculatedGroupPermissions
from groupaccess.access.membership import GroupMembership, MembershipSource
from groupaccess.config import settings
from groupaccess.entities.catalog import RoleCatalog
from groupaccess.entities.group_role import RoleTier, split_role_id
from groupaccess.errors import ConfigurationError
from groupaccess.logging_config import get_logger

logger = get_logger(__name__)

ANONYMOUS_CACHE_KEY = "__anonymous__"


class GroupPermissionCalculator:
    """Calculates the group permissions of an account."""

    def __init__(
        self,
        catalogs: Mapping[str, RoleCatalog],
        membership_source: MembershipSource,
        member_inherits_outsider: bool | None = None,
    ) -> None:
        self.catalogs = catalogs
        self.membership_source = membership_source
        self.member_inherits_outsider = (
            settings.access.member_inherits_outsider
            if member_inherits_outsider is None
            else member_inherits_outsider
        )

    def calculate_permissions(self, account: AccountLike) -> CalculatedGroupPermissions:
        """Return the scope-partitioned permissions of account."""
        anonymous: dict[Hashable, set[str]] = {}
        outsider: dict[Hashable, set[str]] = {}
        member: dict[Hashable, set[str]] = {}

        for group_type_id, catalog in self.catalogs.items():
            catalog.validate()
            anonymous[group_type_id] = self._tier_permissions(catalog, RoleTier.ANONYMOUS)
            outsider[group_type_id] = self._tier_permissions(catalog, RoleTier.OUTSIDER)

        if not account.is_anonymous():
            for membership in self.membership_source.get_memberships(account):
                permissions = self._membership_permissions(membership)
                if self.member_inherits_outsider:
                    permissions |= outsider.get(membership.group.bundle(), set())
                member.setdefault(membership.group.id, set()).update(permissions)

        logger.debug(
            "Calculated group permissions",
            account=account.id,
            group_types=len(anonymous),
            memberships=len(member),
        )
        return CalculatedGroupPermissions(anonymous=anonymous, outsider=outsider, member=member)

    def _tier_permissions(self, catalog: RoleCatalog, tier: RoleTier) -> set[str]:
        permissions: set[str] = set()
        for role in catalog.roles_of_tier(tier):
            permissions.update(role.get_permissions())
        return permissions

    def _membership_permissions(self, membership: GroupMembership) -> set[str]:
        group = membership.group
        catalog = self.catalogs.get(group.bundle())
        if catalog is None:
            raise ConfigurationError(
                f"Group '{group.id}' uses unknown group type '{group.bundle()}'"
            )

        permissions = self._tier_permissions(catalog, RoleTier.MEMBER)
        for role_id in membership.role_ids:
            group_type_id, _ = split_role_id(role_id)
            if group_type_id != group.bundle():
                raise ConfigurationError(
                    f"Group role '{role_id}' does not belong to group type '{group.bundle()}'"
                )
            role = catalog.get(role_id)
            if role is None:
                # Deleted roles may still be referenced by memberships
                logger.warning(
                    "Membership references unknown group role",
                    role=role_id,
                    group=group.id,
                )
                continue
            if role.is_anonymous() or role.is_outsider():
                raise ConfigurationError(
                    f"Group role '{role_id}' cannot be assigned to a member"
                )
            permissions.update(role.get_permissions())
        return permissions


class CalculatedPermissionsCache:
    """Per-request memo of calculated permissions, keyed by account id.

    Exposes calculate_permissions() so it can stand in for the calculator.
    Register invalidate_all() as a store listener so role changes are never
    served stale.
    """

    def __init__(self, calculator: GroupPermissionCalculator) -> None:
        self.calculator = calculator
        self._entries: dict[Hashable, CalculatedGroupPermissions] = {}

    @staticmethod
    def _key(account: AccountLike) -> Hashable:
        return ANONYMOUS_CACHE_KEY if account.is_anonymous() else account.id

    def calculate_permissions(self, account: AccountLike) -> CalculatedGroupPermissions:
        key = self._key(account)
        cached = self._entries.get(key)
        if cached is None:
            cached = self.calculator.calculate_permissions(account)
            self._entries[key] = cached
        return cached

    get = calculate_permissions

    def invalidate(self, account_id: Hashable | None = None) -> None:
        """Drop the entry for one account, or every entry when account_id is None.

        Anonymous accounts share the entry stored under ANONYMOUS_CACHE_KEY.
        """
        if account_id is None:
            self._entries.clear()
        else:
            self._entries.pop(account_id, None)

    def invalidate_all(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

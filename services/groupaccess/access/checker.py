"""Group permission checker.

Answers "does this account have this permission in this group?".

Evaluation order:
1. Account holds the bypass permission -> ALLOW (no group data consulted)
2. Calculate (or fetch cached) group permissions for the account
3. Anonymous account -> anonymous permissions of the group's type
4. Authenticated, no member entry for the group -> outsider permissions of the group's type
5. Otherwise -> member permissions of the group

Exactly one of 3-5 applies. A member does not fall back to outsider or
anonymous permissions here; see member_inherits_outsider in the calculator.
If calculating fails with a GroupAccessError the check is denied.
"""

from typing import Protocol

from groupaccess.access.account import AccountLike
from groupaccess.access.calculated import CalculatedGroupPermissions
from groupaccess.config import settings
from groupaccess.entities.group_type import Group
from groupaccess.errors import GroupAccessError
from groupaccess.logging_config import get_logger

logger = get_logger(__name__)


class PermissionCalculator(Protocol):
    """Anything that can turn an account into calculated group permissions."""

    def calculate_permissions(self, account: AccountLike) -> CalculatedGroupPermissions: ...


class GroupPermissionChecker:
    """Checks group permissions against calculated permissions."""

    def __init__(
        self,
        calculator: PermissionCalculator,
        bypass_permission: str | None = None,
    ) -> None:
        self.calculator = calculator
        self.bypass_permission = (
            settings.access.bypass_permission if bypass_permission is None else bypass_permission
        )

    def has_permission_in_group(self, permission: str, account: AccountLike, group: Group) -> bool:
        """Check if account has permission in group."""
        if account.has_permission(self.bypass_permission):
            logger.debug("Access granted: bypass", account=account.id, group=group.id)
            return True

        try:
            calculated = self.calculator.calculate_permissions(account)
        except GroupAccessError as e:
            logger.error(
                "Access denied: group permissions could not be calculated",
                account=account.id,
                group=group.id,
                error=str(e),
            )
            return False

        if account.is_anonymous():
            scope = "anonymous"
            granted = calculated.anonymous_permissions(group.bundle())
        elif not calculated.is_member_of(group.id):
            scope = "outsider"
            granted = calculated.outsider_permissions(group.bundle())
        else:
            scope = "member"
            granted = calculated.member_permissions(group.id)

        allowed = permission in granted
        logger.debug(
            "Access granted" if allowed else "Access denied",
            account=account.id,
            group=group.id,
            scope=scope,
            permission=permission,
        )
        return allowed

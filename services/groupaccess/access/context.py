"""Request-scoped access context.

Wires a role store, a membership source, the calculator, its cache and the
checker together for one authorization window (typically one request).

Catalogs are loaded from the store once and reused. Any mutation made
through the store during the window clears the cache and marks the catalogs
stale, so the next check reloads them instead of answering from old data.
"""

from groupaccess.access.account import AccountLike
from groupaccess.access.calculated import CalculatedGroupPermissions
from groupaccess.access.calculator import CalculatedPermissionsCache, GroupPermissionCalculator
from groupaccess.access.checker import GroupPermissionChecker
from groupaccess.access.membership import MembershipSource
from groupaccess.entities.group_type import Group
from groupaccess.logging_config import get_logger
from groupaccess.storage.protocol import RoleStore

logger = get_logger(__name__)


class GroupAccessContext:
    """Store-backed permission checks for one authorization window."""

    def __init__(
        self,
        store: RoleStore,
        membership_source: MembershipSource,
        bypass_permission: str | None = None,
        member_inherits_outsider: bool | None = None,
    ) -> None:
        self.store = store
        self.calculator = GroupPermissionCalculator(
            {}, membership_source, member_inherits_outsider=member_inherits_outsider
        )
        self.cache = CalculatedPermissionsCache(self.calculator)
        self.checker = GroupPermissionChecker(self.cache, bypass_permission=bypass_permission)
        self._stale = True
        self._generation = 0
        store.add_listener(self._on_change)

    def _on_change(self) -> None:
        self._generation += 1
        self._stale = True
        self.cache.invalidate_all()

    async def refresh(self) -> None:
        """Reload catalogs from the store. Store errors propagate.

        A mutation that lands while the load is suspended leaves the context
        stale, so the next check reloads again.
        """
        generation = self._generation
        self.calculator.catalogs = await self.store.load_catalogs()
        self.cache.invalidate_all()
        self._stale = self._generation != generation
        logger.debug("Group role catalogs loaded", group_types=len(self.calculator.catalogs))

    async def _ensure_fresh(self) -> None:
        if self._stale:
            await self.refresh()

    async def calculate_permissions(self, account: AccountLike) -> CalculatedGroupPermissions:
        await self._ensure_fresh()
        return self.cache.calculate_permissions(account)

    async def has_permission_in_group(
        self, permission: str, account: AccountLike, group: Group
    ) -> bool:
        # Bypass never depends on stored configuration
        if account.has_permission(self.checker.bypass_permission):
            return self.checker.has_permission_in_group(permission, account, group)
        await self._ensure_fresh()
        return self.checker.has_permission_in_group(permission, account, group)

    def close(self) -> None:
        """Detach from the store. The context must not be used afterwards."""
        self.store.remove_listener(self._on_change)
        self.cache.invalidate_all()

"""Membership facts consumed by the permission calculator.

Deciding whether an account belongs to a group is not this library's job.
A MembershipSource hands over the already-resolved facts: which groups the
account is a member of and which custom roles it holds in each.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from groupaccess.access.account import AccountLike
from groupaccess.entities.group_type import Group


@dataclass(frozen=True)
class GroupMembership:
    """An account's membership in one group."""

    group: Group
    role_ids: tuple[str, ...] = ()


@runtime_checkable
class MembershipSource(Protocol):
    """Protocol for looking up an account's memberships."""

    def get_memberships(self, account: AccountLike) -> Iterable[GroupMembership]:
        """Return every membership of the account.

        Anonymous accounts have no memberships.
        """
        ...

    def get_membership(self, account: AccountLike, group: Group) -> GroupMembership | None:
        """Return the account's membership in group, or None for non-members."""
        ...


class InMemoryMembershipSource:
    """Membership source backed by a dict. Used in tests and embedding apps."""

    def __init__(self) -> None:
        self._memberships: dict[int | str, dict[int | str, GroupMembership]] = {}

    def add_member(
        self, account_id: int | str, group: Group, role_ids: Iterable[str] = ()
    ) -> GroupMembership:
        membership = GroupMembership(group=group, role_ids=tuple(role_ids))
        self._memberships.setdefault(account_id, {})[group.id] = membership
        return membership

    def remove_member(self, account_id: int | str, group_id: int | str) -> None:
        self._memberships.get(account_id, {}).pop(group_id, None)

    def get_memberships(self, account: AccountLike) -> list[GroupMembership]:
        if account.is_anonymous():
            return []
        return list(self._memberships.get(account.id, {}).values())

    def get_membership(self, account: AccountLike, group: Group) -> GroupMembership | None:
        if account.is_anonymous():
            return None
        return self._memberships.get(account.id, {}).get(group.id)

"""Tests for the group permission calculator and its per-request cache."""

from unittest.mock import MagicMock

import pytest

from groupaccess.access.account import Account
from groupaccess.access.calculated import CalculatedGroupPermissions
from groupaccess.access.calculator import (
    ANONYMOUS_CACHE_KEY,
    CalculatedPermissionsCache,
    GroupPermissionCalculator,
)
from groupaccess.access.membership import InMemoryMembershipSource
from groupaccess.entities.catalog import RoleCatalog
from groupaccess.entities.group_role import GroupRole
from groupaccess.entities.group_type import Group, GroupType
from groupaccess.errors import ConfigurationError, InvariantViolation


def _catalog(group_type_id: str, anonymous=(), outsider=(), member=(), custom=None) -> RoleCatalog:
    _, internal = GroupType.create(group_type_id)
    grants = {"anonymous": anonymous, "outsider": outsider, "member": member}
    for role in internal:
        role.grant_permissions(grants[role.role_name])
    catalog = RoleCatalog(group_type_id, internal)
    for name, permissions in (custom or {}).items():
        catalog.add(GroupRole.create(group_type_id, name, name.title(), permissions=permissions))
    return catalog


@pytest.fixture
def catalogs() -> dict[str, RoleCatalog]:
    return {
        "foo": _catalog(
            "foo",
            anonymous=["view group"],
            outsider=["view group", "join group"],
            member=["view group", "leave group"],
            custom={"editor": ["edit group"], "admin": ["administer group"]},
        ),
        "bar": _catalog("bar", outsider=["view group"]),
    }


@pytest.fixture
def memberships() -> InMemoryMembershipSource:
    return InMemoryMembershipSource()


@pytest.fixture
def calculator(catalogs, memberships) -> GroupPermissionCalculator:
    return GroupPermissionCalculator(catalogs, memberships, member_inherits_outsider=False)


class TestCalculatePermissions:
    def test_anonymous_and_outsider_keyed_by_type(self, calculator):
        calculated = calculator.calculate_permissions(Account.anonymous())
        assert calculated.anonymous_permissions("foo") == {"view group"}
        assert calculated.anonymous_permissions("bar") == frozenset()
        assert calculated.outsider_permissions("foo") == {"view group", "join group"}
        assert calculated.outsider_permissions("bar") == {"view group"}
        assert dict(calculated.member) == {}

    def test_anonymous_account_ignores_memberships(self, calculator, memberships):
        memberships.get_memberships = MagicMock(return_value=[])
        calculator.calculate_permissions(Account.anonymous())
        memberships.get_memberships.assert_not_called()

    def test_member_entry_keyed_by_group(self, calculator, memberships):
        group = Group(id=1, group_type_id="foo")
        memberships.add_member(42, group)
        calculated = calculator.calculate_permissions(Account(id=42))
        assert calculated.member_permissions(1) == {"view group", "leave group"}
        assert not calculated.is_member_of(2)

    def test_custom_roles_are_unioned(self, calculator, memberships):
        memberships.add_member(42, Group(id=1, group_type_id="foo"), ["foo.editor", "foo.admin"])
        calculated = calculator.calculate_permissions(Account(id=42))
        assert calculated.member_permissions(1) == {
            "view group",
            "leave group",
            "edit group",
            "administer group",
        }

    def test_empty_member_entry_is_present(self, calculator, memberships):
        memberships.add_member(42, Group(id=7, group_type_id="bar"))
        calculated = calculator.calculate_permissions(Account(id=42))
        assert calculated.is_member_of(7)
        assert calculated.member_permissions(7) == frozenset()

    def test_members_do_not_inherit_outsider_by_default(self, calculator, memberships):
        memberships.add_member(42, Group(id=1, group_type_id="foo"))
        calculated = calculator.calculate_permissions(Account(id=42))
        assert "join group" not in calculated.member_permissions(1)

    def test_member_inherits_outsider_when_enabled(self, catalogs, memberships):
        calculator = GroupPermissionCalculator(catalogs, memberships, member_inherits_outsider=True)
        memberships.add_member(42, Group(id=1, group_type_id="foo"))
        calculated = calculator.calculate_permissions(Account(id=42))
        assert "join group" in calculated.member_permissions(1)

    def test_unknown_group_type(self, calculator, memberships):
        memberships.add_member(42, Group(id=1, group_type_id="baz"))
        with pytest.raises(ConfigurationError):
            calculator.calculate_permissions(Account(id=42))

    def test_role_of_other_type(self, calculator, memberships):
        memberships.add_member(42, Group(id=1, group_type_id="bar"), ["foo.editor"])
        with pytest.raises(ConfigurationError):
            calculator.calculate_permissions(Account(id=42))

    def test_unknown_role_grants_nothing(self, calculator, memberships):
        memberships.add_member(42, Group(id=1, group_type_id="foo"), ["foo.ghost", "foo.editor"])
        calculated = calculator.calculate_permissions(Account(id=42))
        assert calculated.member_permissions(1) == {"view group", "leave group", "edit group"}

    def test_unknown_role_keeps_other_scopes(self, calculator, memberships):
        memberships.add_member(42, Group(id=1, group_type_id="foo"), ["foo.ghost"])
        calculated = calculator.calculate_permissions(Account(id=42))
        assert calculated.outsider_permissions("bar") == {"view group"}
        assert calculated.is_member_of(1)

    def test_outsider_role_cannot_be_assigned(self, calculator, memberships):
        memberships.add_member(42, Group(id=1, group_type_id="foo"), ["foo.outsider"])
        with pytest.raises(ConfigurationError):
            calculator.calculate_permissions(Account(id=42))

    def test_broken_catalog(self, catalogs, memberships):
        member = catalogs["foo"].get("foo.member")
        catalogs["foo"]._roles["foo.member_copy"] = member.copy()
        calculator = GroupPermissionCalculator(catalogs, memberships)
        with pytest.raises(InvariantViolation):
            calculator.calculate_permissions(Account(id=42))

    def test_result_is_a_snapshot(self, calculator, catalogs, memberships):
        memberships.add_member(42, Group(id=1, group_type_id="foo"))
        calculated = calculator.calculate_permissions(Account(id=42))
        catalogs["foo"].get("foo.member").grant_permission("delete group")
        catalogs["foo"].get("foo.anonymous").revoke_permission("view group")
        assert "delete group" not in calculated.member_permissions(1)
        assert calculated.anonymous_permissions("foo") == {"view group"}

    def test_does_not_mutate_catalogs(self, calculator, catalogs, memberships):
        before = {k: [r.to_export() for r in c] for k, c in catalogs.items()}
        memberships.add_member(42, Group(id=1, group_type_id="foo"), ["foo.editor"])
        calculator.calculate_permissions(Account(id=42))
        assert {k: [r.to_export() for r in c] for k, c in catalogs.items()} == before

    def test_deterministic(self, calculator, memberships):
        memberships.add_member(42, Group(id=1, group_type_id="foo"), ["foo.editor"])
        account = Account(id=42)
        first = calculator.calculate_permissions(account)
        assert calculator.calculate_permissions(account) == first


class TestCalculatedPermissionsCache:
    @pytest.fixture
    def inner(self):
        inner = MagicMock(spec=GroupPermissionCalculator)
        inner.calculate_permissions.side_effect = lambda account: CalculatedGroupPermissions(
            member={account.id: ["x"]} if account.id is not None else {}
        )
        return inner

    def test_memoizes_per_account(self, inner):
        cache = CalculatedPermissionsCache(inner)
        first = cache.calculate_permissions(Account(id=1))
        second = cache.calculate_permissions(Account(id=1))
        assert first is second
        cache.calculate_permissions(Account(id=2))
        assert inner.calculate_permissions.call_count == 2
        assert len(cache) == 2

    def test_anonymous_accounts_share_entry(self, inner):
        cache = CalculatedPermissionsCache(inner)
        cache.get(Account.anonymous())
        cache.get(Account.anonymous())
        assert inner.calculate_permissions.call_count == 1

    def test_invalidate_one(self, inner):
        cache = CalculatedPermissionsCache(inner)
        cache.get(Account(id=1))
        cache.get(Account(id=2))
        cache.invalidate(1)
        assert len(cache) == 1
        cache.get(Account(id=1))
        assert inner.calculate_permissions.call_count == 3

    def test_invalidate_anonymous(self, inner):
        cache = CalculatedPermissionsCache(inner)
        cache.get(Account.anonymous())
        cache.get(Account(id=1))
        cache.invalidate(ANONYMOUS_CACHE_KEY)
        assert len(cache) == 1
        cache.get(Account.anonymous())
        assert inner.calculate_permissions.call_count == 3

    def test_invalidate_all(self, inner):
        cache = CalculatedPermissionsCache(inner)
        cache.get(Account(id=1))
        cache.get(Account(id=2))
        cache.invalidate()
        assert len(cache) == 0
        cache.get(Account(id=1))
        cache.invalidate_all()
        assert len(cache) == 0

    def test_errors_are_not_cached(self, inner):
        inner.calculate_permissions.side_effect = ConfigurationError("broken")
        cache = CalculatedPermissionsCache(inner)
        with pytest.raises(ConfigurationError):
            cache.get(Account(id=1))
        assert len(cache) == 0

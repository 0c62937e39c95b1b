"""Tests for group types, internal role provisioning and groups."""

import pytest

from groupaccess.entities.group_role import RoleTier
from groupaccess.entities.group_type import Group, GroupType
from groupaccess.errors import ConfigurationError


class TestGroupType:
    def test_create_provisions_internal_roles(self):
        group_type, roles = GroupType.create("foo", "Foo")
        assert group_type == GroupType(id="foo", label="Foo")
        assert [(r.id, r.label, r.weight, r.tier) for r in roles] == [
            ("foo.anonymous", "Anonymous", -102, RoleTier.ANONYMOUS),
            ("foo.outsider", "Outsider", -101, RoleTier.OUTSIDER),
            ("foo.member", "Member", -100, RoleTier.MEMBER),
        ]
        assert all(r.is_internal() and not r.get_permissions() for r in roles)

    def test_invalid_id(self):
        with pytest.raises(ConfigurationError):
            GroupType(id="foo.bar")

    def test_export_round_trip(self):
        group_type = GroupType(id="foo", label="Foo")
        assert GroupType.from_export(group_type.to_export()) == group_type

    def test_from_export_without_id(self):
        with pytest.raises(ConfigurationError):
            GroupType.from_export({"label": "Nameless"})


class TestGroup:
    def test_bundle(self):
        group = Group(id=1, group_type_id="foo")
        assert group.bundle() == "foo"

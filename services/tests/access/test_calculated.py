"""Tests for CalculatedGroupPermissions."""

import dataclasses

import pytest

from groupaccess.access.calculated import CalculatedGroupPermissions


class TestCalculatedGroupPermissions:
    def test_lookups(self):
        calculated = CalculatedGroupPermissions(
            anonymous={"foo": ["view group"]},
            outsider={"foo": ["join group"]},
            member={1: ["administer group"]},
        )
        assert calculated.anonymous_permissions("foo") == {"view group"}
        assert calculated.outsider_permissions("foo") == {"join group"}
        assert calculated.member_permissions(1) == {"administer group"}

    def test_unknown_scopes_are_empty(self):
        calculated = CalculatedGroupPermissions()
        assert calculated.anonymous_permissions("foo") == frozenset()
        assert calculated.outsider_permissions("foo") == frozenset()
        assert calculated.member_permissions(1) == frozenset()

    def test_member_entry_presence(self):
        calculated = CalculatedGroupPermissions(member={1: []})
        assert calculated.is_member_of(1)
        assert not calculated.is_member_of(2)

    def test_immutable(self):
        calculated = CalculatedGroupPermissions(anonymous={"foo": ["view group"]})
        with pytest.raises(dataclasses.FrozenInstanceError):
            calculated.anonymous = {}
        with pytest.raises(TypeError):
            calculated.anonymous["bar"] = frozenset()
        assert isinstance(calculated.anonymous_permissions("foo"), frozenset)

    def test_snapshot_of_input(self):
        source = {"foo": {"view group"}}
        calculated = CalculatedGroupPermissions(anonymous=source)
        source["foo"].add("edit group")
        source["bar"] = {"x"}
        assert calculated.anonymous_permissions("foo") == {"view group"}
        assert calculated.anonymous_permissions("bar") == frozenset()

    def test_merge_unions_per_key(self):
        left = CalculatedGroupPermissions(member={1: ["a"]}, outsider={"foo": ["x"]})
        right = CalculatedGroupPermissions(member={1: ["b"], 2: ["c"]})
        merged = left.merge(right)
        assert merged.member_permissions(1) == {"a", "b"}
        assert merged.member_permissions(2) == {"c"}
        assert merged.outsider_permissions("foo") == {"x"}
        assert left.member_permissions(1) == {"a"}

    def test_equality_and_hash(self):
        a = CalculatedGroupPermissions(member={1: ["a", "b"]})
        b = CalculatedGroupPermissions(member={1: ["b", "a"]})
        assert a == b
        assert hash(a) == hash(b)

    def test_to_dict(self):
        calculated = CalculatedGroupPermissions(member={1: ["b", "a"]})
        assert calculated.to_dict() == {"anonymous": {}, "outsider": {}, "member": {1: ["a", "b"]}}

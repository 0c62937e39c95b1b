"""Calculated group permissions.

The result of running the permission calculator for one account: every
permission it holds, split by scope. Anonymous and outsider grants are keyed
by group type id, member grants by group id.

Instances are immutable snapshots. They never reference live role objects,
so changing a role afterwards does not affect an existing result.
"""

from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

_EMPTY: frozenset[str] = frozenset()


def _freeze(scoped: Mapping[Hashable, Iterable[str]] | None) -> Mapping[Hashable, frozenset[str]]:
    if not scoped:
        return MappingProxyType({})
    frozen = {}
    for key, permissions in scoped.items():
        if isinstance(permissions, str):
            permissions = [permissions]
        frozen[key] = frozenset(permissions)
    return MappingProxyType(frozen)


def _union(
    left: Mapping[Hashable, frozenset[str]], right: Mapping[Hashable, frozenset[str]]
) -> dict[Hashable, frozenset[str]]:
    merged = dict(left)
    for key, permissions in right.items():
        merged[key] = merged.get(key, _EMPTY) | permissions
    return merged


@dataclass(frozen=True)
class CalculatedGroupPermissions:
    """Scope-partitioned permissions for one account."""

    anonymous: Mapping[Hashable, frozenset[str]] = field(default_factory=dict)
    outsider: Mapping[Hashable, frozenset[str]] = field(default_factory=dict)
    member: Mapping[Hashable, frozenset[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "anonymous", _freeze(self.anonymous))
        object.__setattr__(self, "outsider", _freeze(self.outsider))
        object.__setattr__(self, "member", _freeze(self.member))

    def anonymous_permissions(self, group_type_id: str) -> frozenset[str]:
        return self.anonymous.get(group_type_id, _EMPTY)

    def outsider_permissions(self, group_type_id: str) -> frozenset[str]:
        return self.outsider.get(group_type_id, _EMPTY)

    def member_permissions(self, group_id: Hashable) -> frozenset[str]:
        return self.member.get(group_id, _EMPTY)

    def is_member_of(self, group_id: Hashable) -> bool:
        """Whether a member entry exists for the group, even an empty one."""
        return group_id in self.member

    def merge(self, other: "CalculatedGroupPermissions") -> "CalculatedGroupPermissions":
        """Return a new instance holding the per-key union of both."""
        return CalculatedGroupPermissions(
            anonymous=_union(self.anonymous, other.anonymous),
            outsider=_union(self.outsider, other.outsider),
            member=_union(self.member, other.member),
        )

    def to_dict(self) -> dict[str, dict[Any, list[str]]]:
        return {
            "anonymous": {k: sorted(v) for k, v in self.anonymous.items()},
            "outsider": {k: sorted(v) for k, v in self.outsider.items()},
            "member": {k: sorted(v) for k, v in self.member.items()},
        }

    def __hash__(self) -> int:
        return hash(
            (
                frozenset(self.anonymous.items()),
                frozenset(self.outsider.items()),
                frozenset(self.member.items()),
            )
        )

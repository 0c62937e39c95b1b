"""Accounts as seen by the permission checker.

Authentication lives elsewhere. The checker only needs to know whether an
account is anonymous and which global permissions it holds.
"""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class AccountLike(Protocol):
    """Structural interface for an actor."""

    @property
    def id(self) -> int | str | None: ...

    def is_anonymous(self) -> bool: ...

    def has_permission(self, permission: str) -> bool: ...


@dataclass(frozen=True)
class Account:
    """A resolved account: id plus the global permissions it was granted."""

    id: int | str | None
    permissions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def anonymous(cls, permissions: frozenset[str] = frozenset()) -> "Account":
        return cls(id=None, permissions=frozenset(permissions))

    def is_anonymous(self) -> bool:
        return self.id is None

    def is_authenticated(self) -> bool:
        return self.id is not None

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions

"""
Exception hierarchy for groupaccess.

Absence of configuration is never an error: a group type or group with no
roles simply yields no permissions. These exceptions cover malformed or
inconsistent configuration only.
"""


class GroupAccessError(Exception):
    """Base exception for all groupaccess failures."""


class ConfigurationError(GroupAccessError):
    """Raised when role or group type configuration is malformed.

    Examples: an identifier that does not follow ``<group_type>.<name>``,
    a role pointing at a group type that does not exist, or an attempt to
    change an immutable field.
    """


class InvariantViolation(GroupAccessError):
    """Raised when a catalog breaks tier exclusivity.

    A group type must have at most one internal role per tier. This is a
    programming error and is logged where it is detected.
    """

    def __init__(self, group_type_id: str, tier: str, role_ids: list[str]) -> None:
        self.group_type_id = group_type_id
        self.tier = tier
        self.role_ids = role_ids
        super().__init__(
            f"Group type '{group_type_id}' has {len(role_ids)} internal "
            f"'{tier}' roles: {', '.join(role_ids)}"
        )

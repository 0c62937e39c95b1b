"""Group types and groups.

A group type is the template a group is created from. It exclusively owns
its role catalog: the three internal roles are provisioned with it and all
of its roles are removed with it.
"""

from dataclasses import dataclass

from groupaccess.config import settings
from groupaccess.entities.group_role import INTERNAL_TIERS, GroupRole, validate_machine_name


@dataclass(frozen=True)
class GroupType:
    """A resource type. Owns one role catalog."""

    id: str
    label: str = ""

    def __post_init__(self) -> None:
        validate_machine_name(self.id, "group type id")

    def to_export(self) -> dict[str, str]:
        return {"id": self.id, "label": self.label}

    @classmethod
    def from_export(cls, record: dict) -> "GroupType":
        return cls(id=record.get("id", ""), label=record.get("label", ""))

    def build_internal_roles(self) -> list[GroupRole]:
        """Create the anonymous, outsider and member roles for this type.

        Labels and weights come from settings.roles. The roles start with no
        permissions.
        """
        roles = []
        for tier in INTERNAL_TIERS:
            defaults = getattr(settings.roles, tier.value)
            roles.append(
                GroupRole.create(
                    self.id,
                    tier.value,
                    defaults.label,
                    weight=defaults.weight,
                    internal=True,
                    tier=tier,
                )
            )
        return roles

    @classmethod
    def create(cls, id: str, label: str = "") -> tuple["GroupType", list[GroupRole]]:
        """Create a group type together with its internal roles."""
        group_type = cls(id=id, label=label)
        return group_type, group_type.build_internal_roles()


@dataclass(frozen=True)
class Group:
    """A group: a concrete resource instance accounts can be members of."""

    id: int | str
    group_type_id: str
    label: str = ""

    def bundle(self) -> str:
        """Return the id of the group type this group was created from."""
        return self.group_type_id

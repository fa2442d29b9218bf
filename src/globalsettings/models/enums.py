"""Enumerations describing setting roles, groups and field types."""

from __future__ import annotations

from enum import Enum


class SettingRole(str, Enum):
    """Origin and protection level of a setting."""

    SYSTEM = "system"
    USER = "user"
    PLUGIN = "plugin"


class SettingGroup(str, Enum):
    """Categorical tag used to filter settings in the admin panel."""

    GENERAL = "general"
    AUTHENTICATION = "authentication"
    NOTIFICATIONS = "notifications"
    SECURITY = "security"
    APPEARANCE = "appearance"
    SYSTEM = "system"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def options(cls) -> list[dict[str, str]]:
        """Return ``{value, label}`` pairs for select widgets."""

        return [{"value": group.value, "label": group.label} for group in cls]


class FieldType(str, Enum):
    """UI rendering hint for a setting value."""

    INPUT = "input"
    CHECKBOX = "checkbox"
    MULTIOPTIONS = "multioptions"


def enum_values(enum_cls: type[Enum]) -> frozenset[str]:
    """Return the raw string values of an enum."""

    return frozenset(member.value for member in enum_cls)


__all__ = ["FieldType", "SettingGroup", "SettingRole", "enum_values"]

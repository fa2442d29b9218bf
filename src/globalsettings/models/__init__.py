"""SQLModel table exports."""

from .enums import FieldType, SettingGroup, SettingRole
from .setting import Setting

__all__ = [
    "FieldType",
    "Setting",
    "SettingGroup",
    "SettingRole",
]

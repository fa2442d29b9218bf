"""Setting records persisted in the ``settings`` table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar, Optional

from sqlalchemy import JSON, Text
from sqlmodel import Field, SQLModel

from .enums import FieldType, SettingRole


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Setting(SQLModel, table=True):
    """A single named configuration entry.

    ``value`` always holds the stored string form; typed access goes through
    :mod:`globalsettings.codec`.
    """

    __tablename__: ClassVar[str] = "settings"

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(nullable=False, unique=True, index=True, max_length=255)
    value: Optional[str] = Field(default=None, sa_type=Text)
    field_type: str = Field(default=FieldType.INPUT.value, nullable=False, max_length=32)
    options: Optional[list[Any]] = Field(default=None, sa_type=JSON)
    label: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, sa_type=Text)
    role: str = Field(default=SettingRole.USER.value, nullable=False, max_length=16, index=True)
    group: Optional[str] = Field(default=None, max_length=32, index=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    @property
    def is_system(self) -> bool:
        return self.role == SettingRole.SYSTEM.value

    def snapshot(self) -> dict[str, Any]:
        """Key/value pair recorded by audit sinks."""

        return {"key": self.key, "value": self.value}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the admin JSON surface."""

        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
            "field_type": self.field_type or FieldType.INPUT.value,
            "options": self.options,
            "label": self.label or self.key,
            "description": self.description,
            "role": self.role or SettingRole.USER.value,
            "group": self.group,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

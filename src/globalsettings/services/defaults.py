"""Default system settings and idempotent seeding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..logging_config import get_logger
from ..models.enums import FieldType, SettingGroup, SettingRole
from .settings import SettingsService

logger = get_logger(__name__)


@dataclass(frozen=True)
class SeedSummary:
    """Keys touched by a seeding run."""

    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


DEFAULT_SETTINGS: tuple[Mapping[str, Any], ...] = (
    {
        "key": "site_name",
        "value": "My Application",
        "field_type": FieldType.INPUT,
        "label": "Site name",
        "description": "Name shown in page titles and outgoing mail.",
        "role": SettingRole.SYSTEM,
        "group": SettingGroup.GENERAL,
    },
    {
        "key": "maintenance_mode",
        "value": False,
        "field_type": FieldType.CHECKBOX,
        "label": "Maintenance mode",
        "description": "Serve a maintenance page to non-admin visitors.",
        "role": SettingRole.SYSTEM,
        "group": SettingGroup.SYSTEM,
    },
    {
        "key": "registration_enabled",
        "value": True,
        "field_type": FieldType.CHECKBOX,
        "label": "Allow registration",
        "description": "Let visitors create their own accounts.",
        "role": SettingRole.SYSTEM,
        "group": SettingGroup.AUTHENTICATION,
    },
    {
        "key": "session_lifetime",
        "value": 120,
        "field_type": FieldType.INPUT,
        "label": "Session lifetime (minutes)",
        "role": SettingRole.SYSTEM,
        "group": SettingGroup.SECURITY,
    },
    {
        "key": "password_min_length",
        "value": 8,
        "field_type": FieldType.INPUT,
        "label": "Minimum password length",
        "role": SettingRole.SYSTEM,
        "group": SettingGroup.SECURITY,
    },
    {
        "key": "theme",
        "value": "light",
        "field_type": FieldType.MULTIOPTIONS,
        "options": [
            {"value": "light", "label": "Light"},
            {"value": "dark", "label": "Dark"},
            {"value": "system", "label": "Follow system"},
        ],
        "label": "Theme",
        "role": SettingRole.USER,
        "group": SettingGroup.APPEARANCE,
    },
    {
        "key": "notify_admins_on_signup",
        "value": False,
        "field_type": FieldType.CHECKBOX,
        "label": "Notify admins on signup",
        "role": SettingRole.USER,
        "group": SettingGroup.NOTIFICATIONS,
    },
)


def seed_defaults(
    service: SettingsService,
    definitions: Iterable[Mapping[str, Any]] = DEFAULT_SETTINGS,
) -> SeedSummary:
    """Create each missing setting; rows that already exist are left alone."""

    summary = SeedSummary()
    for definition in definitions:
        key = definition["key"]
        if service.find_by_key(key) is not None:
            summary.skipped.append(key)
            continue
        service.create(definition)
        summary.created.append(key)

    logger.info(
        "Default settings seeded",
        extra={"created": len(summary.created), "skipped": len(summary.skipped)},
    )
    return summary


__all__ = ["DEFAULT_SETTINGS", "SeedSummary", "seed_defaults"]

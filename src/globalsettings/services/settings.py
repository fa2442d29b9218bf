"""Business rules for settings: validation, transactions and protection."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional, Union

from .. import codec
from ..domain.repositories.setting import Page, SettingRepository
from ..errors import ProtectedSettingError, SettingValidationError
from ..logging_config import get_logger
from ..models.enums import FieldType, SettingGroup, SettingRole, enum_values
from ..models.setting import Setting
from .audit import CREATED, DELETED, UPDATED, AuditSink

logger = get_logger(__name__)

KEY_MAX_LENGTH = 255
LABEL_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000

_FIELD_TYPES = enum_values(FieldType)
_ROLES = enum_values(SettingRole)
_GROUPS = enum_values(SettingGroup)
_MUTABLE_FIELDS = ("key", "value", "field_type", "options", "label", "description", "role", "group")


class _BatchAborted(Exception):
    def __init__(self, key: str):
        self.key = key
        super().__init__(key)


def _raw(value: Any) -> Any:
    """Unwrap enum members to their stored string."""

    return getattr(value, "value", value)


def _check_key(key: Any, errors: dict[str, list[str]]) -> None:
    if key is None or (isinstance(key, str) and not key.strip()):
        errors.setdefault("key", []).append("The key field is required.")
    elif not isinstance(key, str):
        errors.setdefault("key", []).append("The key field must be a string.")
    elif len(key) > KEY_MAX_LENGTH:
        errors.setdefault("key", []).append(
            f"The key field must not be greater than {KEY_MAX_LENGTH} characters."
        )


def _check_text(
    name: str, value: Any, max_length: int, errors: dict[str, list[str]]
) -> None:
    if value is None:
        return
    if not isinstance(value, str):
        errors.setdefault(name, []).append(f"The {name} field must be a string.")
    elif len(value) > max_length:
        errors.setdefault(name, []).append(
            f"The {name} field must not be greater than {max_length} characters."
        )


def _check_choice(
    name: str,
    value: Any,
    choices: frozenset[str],
    errors: dict[str, list[str]],
    *,
    required: bool = True,
) -> None:
    label = name.replace("_", " ")
    if value is None or value == "":
        if required:
            errors.setdefault(name, []).append(f"The {label} field is required.")
    elif not isinstance(value, str):
        errors.setdefault(name, []).append(f"The {label} field must be a string.")
    elif value not in choices:
        errors.setdefault(name, []).append(f"The selected {label} is invalid.")


def _encode_value(value: Any, errors: dict[str, list[str]]) -> Optional[str]:
    try:
        return codec.encode(value)
    except TypeError:
        errors.setdefault("value", []).append("The value field has an unsupported type.")
        return None


def _normalize_options(value: Any, errors: dict[str, list[str]]) -> Optional[list[Any]]:
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except ValueError:
            errors.setdefault("options", []).append("The options field must be valid JSON.")
            return None
    if value is None or value == [] or value == ():
        return None
    if isinstance(value, tuple):
        value = list(value)
    if not isinstance(value, list):
        errors.setdefault("options", []).append("The options field must be a list.")
        return None
    return value


class SettingsService:
    """Settings operations layered over a :class:`SettingRepository`."""

    def __init__(self, repository: SettingRepository, audit_sink: Optional[AuditSink] = None):
        self.repository = repository
        self.audit_sink = audit_sink

    # -- key/value access -------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self.repository.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        errors: dict[str, list[str]] = {}
        _check_key(key, errors)
        _encode_value(value, errors)
        if errors:
            raise SettingValidationError(errors)
        return self.repository.set(key, value)

    def has(self, key: str) -> bool:
        return self.repository.has(key)

    def get_multiple(self, keys: Union[Iterable[str], Mapping[str, Any]]) -> dict[str, Any]:
        """Resolve several keys at once.

        ``keys`` is either an iterable of keys (missing ones map to ``None``) or
        a mapping of key to its own default.
        """
        if isinstance(keys, Mapping):
            return {key: self.get(key, default) for key, default in keys.items()}
        return {key: self.get(key) for key in keys}

    def set_multiple(self, settings: Mapping[str, Any]) -> bool:
        """Set every pair or none of them."""
        try:
            with self.repository.transaction():
                for key, value in settings.items():
                    if not self.set(key, value):
                        raise _BatchAborted(key)
        except _BatchAborted as exc:
            logger.warning("Bulk settings update rolled back", extra={"key": exc.key})
            return False
        logger.info("Settings updated", extra={"keys": sorted(settings)})
        return True

    # -- records ------------------------------------------------------------

    def all(self) -> list[Setting]:
        return self.repository.all()

    def find_by_id(self, setting_id: int) -> Optional[Setting]:
        return self.repository.find(setting_id)

    def find_or_fail(self, setting_id: int) -> Setting:
        return self.repository.find_or_fail(setting_id)

    def find_by_key(self, key: str) -> Optional[Setting]:
        return self.repository.find_by({"key": key})

    def search(self, term: str) -> list[Setting]:
        return self.repository.search(term)

    def get_by_role(self, role: Union[str, SettingRole]) -> list[Setting]:
        return self.repository.find_all_by({"role": _raw(role)})

    def get_by_group(self, group: Union[str, SettingGroup]) -> list[Setting]:
        return self.repository.find_all_by({"group": _raw(group)})

    def paginate(
        self,
        per_page: int = 15,
        page: int = 1,
        *,
        search: Optional[str] = None,
        group: Optional[str] = None,
    ) -> Page:
        return self.repository.paginate(per_page, page, search=search, group=group)

    def create(self, data: Mapping[str, Any]) -> Setting:
        """Validate and persist a new setting atomically.

        Raises:
            SettingValidationError: when any field is invalid; nothing is written.
        """
        with self.repository.transaction():
            validated = self._validate(data)
            setting = self.repository.create(validated)

        logger.info("Setting created", extra={"key": setting.key, "setting_id": setting.id})
        self._audit(CREATED, setting, None, setting.snapshot())
        return setting

    def update(self, setting_id: int, data: Mapping[str, Any]) -> bool:
        """Validate and apply changes to an existing setting atomically.

        Fields missing from ``data`` keep their stored values. A system
        setting keeps the system role whatever ``data`` says.
        """
        with self.repository.transaction():
            existing = self.repository.find(setting_id)
            if existing is None:
                return False

            merged = {name: getattr(existing, name) for name in _MUTABLE_FIELDS}
            merged.update(data)
            if existing.is_system and _raw(merged.get("role")) != SettingRole.SYSTEM.value:
                logger.info(
                    "Ignoring role change on system setting",
                    extra={"key": existing.key, "requested_role": _raw(merged.get("role"))},
                )
                merged["role"] = SettingRole.SYSTEM.value

            validated = self._validate(merged, ignore_id=setting_id)
            updated = self.repository.update(setting_id, validated)

        if updated:
            logger.info("Setting updated", extra={"key": validated["key"], "setting_id": setting_id})
            current = self.repository.find(setting_id)
            if current is not None:
                self._audit(UPDATED, current, existing.snapshot(), current.snapshot())
        return updated

    def delete(self, setting_id: int) -> bool:
        """Delete a non-system setting.

        Returns False when the setting does not exist.

        Raises:
            ProtectedSettingError: when the setting has the system role.
        """
        setting = self.find_by_id(setting_id)
        if setting is None:
            return False

        if setting.is_system:
            logger.warning(
                "Refused to delete system setting",
                extra={"key": setting.key, "setting_id": setting_id},
            )
            raise ProtectedSettingError(setting.key)

        deleted = self.repository.delete(setting_id)
        if deleted:
            logger.info("Setting deleted", extra={"key": setting.key, "setting_id": setting_id})
            self._audit(DELETED, setting, setting.snapshot(), None)
        return deleted

    # -- helpers --------------------------------------------------------------

    def _validate(self, data: Mapping[str, Any], *, ignore_id: Optional[int] = None) -> dict[str, Any]:
        errors: dict[str, list[str]] = {}

        key = data.get("key")
        _check_key(key, errors)
        if "key" not in errors:
            duplicate = self.repository.find_by({"key": key})
            if duplicate is not None and duplicate.id != ignore_id:
                errors.setdefault("key", []).append("The key has already been taken.")

        _check_text("label", data.get("label"), LABEL_MAX_LENGTH, errors)
        _check_text("description", data.get("description"), DESCRIPTION_MAX_LENGTH, errors)

        field_type = _raw(data.get("field_type"))
        _check_choice("field_type", field_type, _FIELD_TYPES, errors)

        options = _normalize_options(data.get("options"), errors)
        if field_type == FieldType.MULTIOPTIONS.value and options is None and "options" not in errors:
            errors.setdefault("options", []).append(
                "The options field is required when field type is multioptions."
            )

        role = _raw(data.get("role"))
        _check_choice("role", role, _ROLES, errors)

        group = _raw(data.get("group"))
        if group == "":
            group = None
        _check_choice("group", group, _GROUPS, errors, required=False)

        value = _encode_value(data.get("value"), errors)

        if errors:
            raise SettingValidationError(errors)

        return {
            "key": key,
            "value": value,
            "field_type": field_type,
            "options": options,
            "label": data.get("label"),
            "description": data.get("description"),
            "role": role,
            "group": group,
        }

    def _audit(
        self,
        event: str,
        setting: Setting,
        before: Optional[dict[str, Any]],
        after: Optional[dict[str, Any]],
    ) -> None:
        if self.audit_sink is None:
            return
        try:
            self.audit_sink.record(event, setting, before, after)
        except Exception:
            logger.exception("Audit sink failed", extra={"event": event, "key": setting.key})


__all__ = ["SettingsService"]

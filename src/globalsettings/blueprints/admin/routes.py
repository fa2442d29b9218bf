"""Admin routes serving settings as JSON for the admin frontend."""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify, request

from ... import codec
from ...errors import ProtectedSettingError, SettingValidationError
from ...extensions import get_settings_service
from ...models.enums import FieldType, SettingGroup, SettingRole
from . import bp


_WRITABLE_FIELDS = ("key", "value", "field_type", "options", "label", "description", "role", "group")
# Roles an admin may assign through this surface; system rows come from seeding.
_CREATABLE_ROLES = {SettingRole.USER.value, SettingRole.PLUGIN.value}


def _payload() -> dict[str, Any]:
    if request.is_json:
        body = request.get_json(silent=True)
        return body if isinstance(body, dict) else {}
    return request.form.to_dict()


def _setting_fields(payload: dict[str, Any]) -> dict[str, Any]:
    return {name: payload[name] for name in _WRITABLE_FIELDS if name in payload}


def _coerce_checkbox(data: dict[str, Any], field_type: Any) -> None:
    if field_type == FieldType.CHECKBOX.value and data.get("value") is not None:
        data["value"] = codec.coerce_checkbox(data["value"])


def _listing(group: str | None = None):
    config = current_app.config["GLOBALSETTINGS_CONFIG"]
    search = request.args.get("search", "").strip()
    page = request.args.get("page", 1, type=int)
    per_page = request.args.get("per_page", config.DEFAULT_PER_PAGE, type=int)

    paginated = get_settings_service().paginate(
        per_page, page, search=search or None, group=group
    )
    return {
        "settings": paginated.to_dict(),
        "groups": SettingGroup.options(),
        "filters": {"search": search},
    }


@bp.before_request
def authorize_admin():
    """Reject callers whose host-resolved roles include no admin role."""
    resolver = current_app.config.get("GLOBALSETTINGS_ROLE_RESOLVER")
    allowed = set(current_app.config["GLOBALSETTINGS_CONFIG"].ADMIN_ROLES)
    roles = set(resolver() or ()) if resolver is not None else set()
    if not roles & allowed:
        return jsonify({"error": "forbidden", "message": "Admin access required."}), 403
    return None


@bp.errorhandler(SettingValidationError)
def validation_failed(exc: SettingValidationError):
    return jsonify({"error": "validation_failed", "errors": exc.errors}), 422


@bp.get("/")
def index():
    """List settings with optional search and pagination."""
    return jsonify(_listing())


@bp.get("/group/<group>")
def group_index(group: str):
    """List the settings of a single group."""
    try:
        setting_group = SettingGroup(group)
    except ValueError:
        return jsonify({"error": "group_not_found", "group": group}), 404

    body = _listing(setting_group.value)
    body["current_group"] = {"value": setting_group.value, "label": setting_group.label}
    return jsonify(body)


@bp.get("/<key>")
def show(key: str):
    setting = get_settings_service().find_by_key(key)
    if setting is None:
        return jsonify({"error": "setting_not_found", "key": key}), 404
    return jsonify({"setting": setting.to_dict(), "groups": SettingGroup.options()})


@bp.post("/")
def store():
    """Create a setting from the submitted fields."""
    data = _setting_fields(_payload())
    data["role"] = data.get("role") or SettingRole.USER.value
    if not isinstance(data["role"], str) or data["role"] not in _CREATABLE_ROLES:
        raise SettingValidationError({"role": ["The selected role is invalid."]})
    _coerce_checkbox(data, data.get("field_type"))

    setting = get_settings_service().create(data)
    return jsonify({"setting": setting.to_dict(), "status": "Setting created successfully."}), 201


@bp.route("/<key>", methods=["PUT", "PATCH"])
def update(key: str):
    """Update a setting; system settings keep their role."""
    service = get_settings_service()
    setting = service.find_by_key(key)
    if setting is None or setting.id is None:
        return jsonify({"error": "setting_not_found", "key": key}), 404

    data = _setting_fields(_payload())
    _coerce_checkbox(data, data.get("field_type", setting.field_type))
    service.update(setting.id, data)

    refreshed = service.find_by_id(setting.id)
    return jsonify({"setting": refreshed.to_dict() if refreshed else None, "status": "Setting updated successfully."})


@bp.patch("/bulk")
def bulk_update():
    """Set many values at once; all of them or none."""
    settings = _payload().get("settings")
    if not isinstance(settings, dict):
        raise SettingValidationError({"settings": ["The settings field must be an object."]})

    values = {
        key: codec.coerce_checkbox(value) if codec.is_boolean_like(value) else value
        for key, value in settings.items()
    }
    if not get_settings_service().set_multiple(values):
        return jsonify({"error": "bulk_update_failed"}), 409
    return jsonify({"status": "Settings updated successfully.", "keys": sorted(values)})


@bp.delete("/<key>")
def destroy(key: str):
    service = get_settings_service()
    setting = service.find_by_key(key)
    if setting is None or setting.id is None:
        return jsonify({"error": "setting_not_found", "key": key}), 404

    try:
        service.delete(setting.id)
    except ProtectedSettingError as exc:
        return jsonify({"error": "protected_setting", "message": str(exc)}), 409

    return jsonify({"status": "Setting deleted successfully."})

"""Tests for the settings service business rules."""

from __future__ import annotations

import pytest

from globalsettings.errors import ProtectedSettingError, SettingValidationError
from globalsettings.models import FieldType, SettingGroup, SettingRole
from globalsettings.services import SettingsService


def _data(**overrides):
    data = {
        "key": "site_name",
        "value": "Acme",
        "field_type": "input",
        "role": "user",
    }
    data.update(overrides)
    return data


class RecordingSink:
    def __init__(self):
        self.events = []

    def record(self, event, setting, before, after):
        self.events.append((event, setting.key, before, after))


class BrokenSink:
    def record(self, event, setting, before, after):
        raise RuntimeError("sink offline")


# =============================================================================
# get / set / has
# =============================================================================


def test_boolean_round_trip_decodes_as_integer(service):
    service.set("maintenance_mode", True)

    assert service.find_by_key("maintenance_mode").value == "1"
    assert service.get("maintenance_mode") == 1
    assert service.get("maintenance_mode") is not True


def test_list_round_trip(service):
    service.set("feature_flags", ["a", "b"])

    assert service.find_by_key("feature_flags").value == '["a","b"]'
    assert service.get("feature_flags") == ["a", "b"]


def test_numeric_looking_strings_are_decoded(service):
    service.set("port", "8080")
    service.set("enabled", "true")

    assert service.get("port") == 8080
    assert service.get("enabled") is True


def test_set_rejects_empty_key(service):
    with pytest.raises(SettingValidationError) as excinfo:
        service.set("", "x")
    assert "key" in excinfo.value.errors


def test_set_rejects_unsupported_value_type(service):
    with pytest.raises(SettingValidationError) as excinfo:
        service.set("tags", {"a", "b"})

    assert "value" in excinfo.value.errors
    assert not service.has("tags")


def test_set_multiple_rolls_back_on_unsupported_value(service, count_settings):
    service.set("a", "original")

    with pytest.raises(SettingValidationError):
        service.set_multiple({"a": "changed", "tags": {"x"}})

    assert count_settings() == 1
    assert service.get("a") == "original"


def test_has_follows_set_and_delete(service):
    service.set("temp", "x")
    assert service.has("temp")

    service.delete(service.find_by_key("temp").id)
    assert not service.has("temp")
    assert service.get("temp", "default") == "default"


def test_no_stale_read_after_write(service):
    service.set("greeting", "hello")
    assert service.get("greeting") == "hello"

    service.set("greeting", "goodbye")
    assert service.get("greeting") == "goodbye"


# =============================================================================
# create / update
# =============================================================================


def test_create_persists_validated_fields(service):
    setting = service.create(
        _data(
            key="theme",
            value="dark",
            field_type=FieldType.MULTIOPTIONS,
            options='[{"value": "dark", "label": "Dark"}]',
            label="Theme",
            group=SettingGroup.APPEARANCE,
        )
    )

    assert setting.id is not None
    assert setting.field_type == "multioptions"
    assert setting.options == [{"value": "dark", "label": "Dark"}]
    assert setting.group == "appearance"
    assert service.get("theme") == "dark"


def test_create_encodes_values(service):
    setting = service.create(_data(key="flag", value=False, field_type="checkbox"))
    assert setting.value == "0"


def test_create_duplicate_key_fails_without_writing(service, count_settings):
    service.create(_data())

    with pytest.raises(SettingValidationError) as excinfo:
        service.create(_data(value="Other"))

    assert excinfo.value.errors["key"] == ["The key has already been taken."]
    assert count_settings() == 1


def test_multioptions_requires_options(service, count_settings):
    with pytest.raises(SettingValidationError) as excinfo:
        service.create(_data(key="theme", field_type="multioptions"))

    assert list(excinfo.value.errors) == ["options"]
    assert count_settings() == 0


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"key": ""}, "key"),
        ({"key": "k" * 256}, "key"),
        ({"field_type": "slider"}, "field_type"),
        ({"field_type": None}, "field_type"),
        ({"role": "owner"}, "role"),
        ({"role": None}, "role"),
        ({"group": "billing"}, "group"),
        ({"label": "l" * 256}, "label"),
        ({"description": "d" * 1001}, "description"),
        ({"options": "not json"}, "options"),
        ({"options": {"a": 1}}, "options"),
        ({"value": object()}, "value"),
        ({"value": {1, 2}}, "value"),
        ({"field_type": ["input"]}, "field_type"),
        ({"role": ["user"]}, "role"),
        ({"group": {"name": "general"}}, "group"),
    ],
)
def test_create_validation_errors(service, count_settings, overrides, field):
    with pytest.raises(SettingValidationError) as excinfo:
        service.create(_data(**overrides))

    assert field in excinfo.value.errors
    assert count_settings() == 0


@pytest.mark.parametrize("options", [[], "", "[]", "  "])
def test_multioptions_rejects_empty_options_in_any_form(service, count_settings, options):
    with pytest.raises(SettingValidationError) as excinfo:
        service.create(_data(key="theme", field_type="multioptions", options=options))

    assert excinfo.value.errors["options"] == [
        "The options field is required when field type is multioptions."
    ]
    assert count_settings() == 0


def test_validation_reports_every_field(service):
    with pytest.raises(SettingValidationError) as excinfo:
        service.create({"key": "", "field_type": "nope"})

    assert set(excinfo.value.errors) == {"key", "field_type", "role"}


def test_update_merges_and_validates(service):
    setting = service.create(_data(label="Site"))

    assert service.update(setting.id, {"value": "Acme Corp"}) is True

    updated = service.find_by_id(setting.id)
    assert updated.value == "Acme Corp"
    assert updated.label == "Site"


def test_update_allows_keeping_own_key(service):
    setting = service.create(_data())
    assert service.update(setting.id, _data(value="same key")) is True


def test_update_rejects_key_of_another_setting(service):
    service.create(_data(key="a"))
    other = service.create(_data(key="b"))

    with pytest.raises(SettingValidationError):
        service.update(other.id, {"key": "a"})
    assert service.find_by_id(other.id).key == "b"


def test_update_missing_setting_returns_false(service):
    assert service.update(999, _data()) is False


def test_system_role_cannot_be_changed(service):
    setting = service.create(_data(role=SettingRole.SYSTEM))

    assert service.update(setting.id, {"role": "user", "value": "New"}) is True

    updated = service.find_by_id(setting.id)
    assert updated.role == "system"
    assert updated.value == "New"


# =============================================================================
# delete
# =============================================================================


def test_delete_system_setting_is_refused(service, count_settings):
    setting = service.create(_data(role="system"))

    with pytest.raises(ProtectedSettingError, match="System settings cannot be deleted."):
        service.delete(setting.id)

    assert count_settings() == 1
    assert service.get("site_name") == "Acme"


@pytest.mark.parametrize("role", ["user", "plugin"])
def test_delete_non_system_setting(service, role):
    setting = service.create(_data(role=role))

    assert service.delete(setting.id) is True
    assert service.get("site_name", "gone") == "gone"


def test_delete_missing_setting_returns_false(service):
    assert service.delete(12345) is False


# =============================================================================
# bulk operations and queries
# =============================================================================


def test_set_multiple(service):
    assert service.set_multiple({"a": 1, "b": [1, 2], "c": True}) is True
    assert service.get_multiple(["a", "b", "c", "d"]) == {"a": 1, "b": [1, 2], "c": 1, "d": None}


def test_set_multiple_is_all_or_nothing(service, count_settings):
    service.set("a", "original")

    with pytest.raises(SettingValidationError):
        service.set_multiple({"a": "changed", "new": 1, "": 2})

    assert count_settings() == 1
    assert service.get("a") == "original"
    assert not service.has("new")


def test_set_multiple_returns_false_when_a_write_reports_failure(service, count_settings, monkeypatch):
    original_set = service.repository.set

    def flaky_set(key, value):
        if key == "b":
            return False
        return original_set(key, value)

    monkeypatch.setattr(service.repository, "set", flaky_set)

    assert service.set_multiple({"a": 1, "b": 2}) is False
    assert count_settings() == 0


def test_get_multiple_with_per_key_defaults(service):
    service.set("present", "yes")

    assert service.get_multiple({"present": "no", "absent": 10}) == {"present": "yes", "absent": 10}


def test_search_and_role_queries(service):
    service.create(_data(key="site_name", role="system", label="Site Name"))
    service.create(_data(key="plugin_token", role="plugin", value="secret"))
    service.create(_data(key="theme", role="user", group="appearance", value="dark"))

    assert [s.key for s in service.search("NAME")] == ["site_name"]
    assert [s.key for s in service.search("SECRET")] == ["plugin_token"]
    assert [s.key for s in service.get_by_role("plugin")] == ["plugin_token"]
    assert [s.key for s in service.get_by_role(SettingRole.SYSTEM)] == ["site_name"]
    assert [s.key for s in service.get_by_group(SettingGroup.APPEARANCE)] == ["theme"]
    assert [s.key for s in service.all()] == ["site_name", "plugin_token", "theme"]


# =============================================================================
# audit sink
# =============================================================================


def test_audit_sink_receives_snapshots(repository):
    sink = RecordingSink()
    service = SettingsService(repository, audit_sink=sink)

    setting = service.create(_data())
    service.update(setting.id, {"value": "New"})
    service.delete(setting.id)

    assert sink.events == [
        ("setting.created", "site_name", None, {"key": "site_name", "value": "Acme"}),
        (
            "setting.updated",
            "site_name",
            {"key": "site_name", "value": "Acme"},
            {"key": "site_name", "value": "New"},
        ),
        ("setting.deleted", "site_name", {"key": "site_name", "value": "New"}, None),
    ]


def test_failed_validation_is_not_audited(repository):
    sink = RecordingSink()
    service = SettingsService(repository, audit_sink=sink)

    with pytest.raises(SettingValidationError):
        service.create(_data(role="nobody"))
    assert sink.events == []


def test_audit_sink_failure_does_not_break_writes(repository, caplog):
    service = SettingsService(repository, audit_sink=BrokenSink())

    setting = service.create(_data())

    assert setting.id is not None
    assert service.has("site_name")
    assert "Audit sink failed" in caplog.text

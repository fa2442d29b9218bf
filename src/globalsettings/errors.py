"""Domain errors raised by the settings repository and service."""

from __future__ import annotations

from typing import Mapping, Sequence


class SettingsError(Exception):
    """Base class for settings domain errors."""


class SettingNotFoundError(SettingsError, LookupError):
    """Raised by "or fail" lookups when no setting matches."""

    def __init__(self, identifier: object):
        self.identifier = identifier
        super().__init__(f"Setting not found: {identifier!r}")


class SettingValidationError(SettingsError, ValueError):
    """Input violated one or more field constraints.

    ``errors`` maps each offending field to its list of messages so callers can
    render field-level feedback.
    """

    def __init__(self, errors: Mapping[str, Sequence[str]]):
        self.errors: dict[str, list[str]] = {field: list(msgs) for field, msgs in errors.items()}
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid setting data: {fields}")


class ProtectedSettingError(SettingsError):
    """Raised when a system setting is about to be deleted."""

    def __init__(self, key: str, message: str = "System settings cannot be deleted."):
        self.key = key
        super().__init__(message)


__all__ = [
    "ProtectedSettingError",
    "SettingNotFoundError",
    "SettingValidationError",
    "SettingsError",
]

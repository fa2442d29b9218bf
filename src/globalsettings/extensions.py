"""Settings store wiring for Flask applications."""

from __future__ import annotations

from typing import Optional

from flask import Flask, current_app

from .config import BaseConfig
from .context import SettingsContext, create_settings_context
from .services.audit import AuditSink
from .services.settings import SettingsService

EXTENSION_KEY = "globalsettings"


def init_settings(app: Flask, *, audit_sink: Optional[AuditSink] = None) -> SettingsContext:
    """Build the settings context from the app config and attach it to ``app``."""

    config: BaseConfig = app.config["GLOBALSETTINGS_CONFIG"]
    context = create_settings_context(config, audit_sink=audit_sink)
    app.extensions[EXTENSION_KEY] = context
    return context


def get_settings_context(app: Optional[Flask] = None) -> SettingsContext:
    """Return the context attached by :func:`init_settings`."""

    target = app or current_app
    context = target.extensions.get(EXTENSION_KEY)
    if context is None:  # pragma: no cover - misconfiguration guard
        raise RuntimeError("Settings store not initialized")
    return context


def get_settings_service(app: Optional[Flask] = None) -> SettingsService:
    return get_settings_context(app).service

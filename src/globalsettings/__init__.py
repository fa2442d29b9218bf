"""GlobalSettings: a key/value settings store with an admin JSON surface."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from flask import Flask

from .config import BaseConfig, DevConfig, TestConfig
from .context import SettingsContext, create_settings_context
from .errors import (
    ProtectedSettingError,
    SettingNotFoundError,
    SettingsError,
    SettingValidationError,
)
from .services.audit import AuditSink
from .services.settings import SettingsService

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def create_app(
    config_name: str | None = None,
    *,
    config: Optional[BaseConfig] = None,
    role_resolver: Optional[Callable[[], Iterable[str]]] = None,
    audit_sink: Optional[AuditSink] = None,
) -> Flask:
    """Create and configure the Flask application instance.

    ``role_resolver`` is the host's authorization hook: it returns the role
    names of the current user and gates the admin blueprint.
    """

    app = Flask(__name__, instance_relative_config=True)
    config_obj = config or _resolve_config(config_name)()
    app.config.from_object(config_obj)
    app.config["GLOBALSETTINGS_CONFIG"] = config_obj
    app.config["GLOBALSETTINGS_ROLE_RESOLVER"] = role_resolver

    # Imported lazily so importing the package does not build mappers early.
    from . import cli as _cli
    from .extensions import init_settings
    from .logging_config import setup_logging

    if not app.config.get("TESTING"):
        setup_logging(config_obj)
    init_settings(app, audit_sink=audit_sink)
    _register_blueprints(app, config_obj)
    _cli.init_app(app)

    return app


def _register_blueprints(app: Flask, config: BaseConfig) -> None:
    if not config.ADMIN_ENABLED:
        return
    from .blueprints.admin import bp

    app.register_blueprint(bp, url_prefix=config.ADMIN_PREFIX)


__all__ = [
    "BaseConfig",
    "DevConfig",
    "ProtectedSettingError",
    "SettingNotFoundError",
    "SettingValidationError",
    "SettingsContext",
    "SettingsError",
    "SettingsService",
    "TestConfig",
    "create_app",
    "create_settings_context",
]

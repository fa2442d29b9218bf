"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Split a comma-separated environment variable into trimmed items."""

    value = os.getenv(name)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "GlobalSettings"
    DB_FILENAME = "globalsettings.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}
    DEFAULT_ADMIN_PREFIX = "/admin/settings"
    DEFAULT_ADMIN_ROLES = ("super-admin", "admin")
    DEFAULT_PER_PAGE = 15

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("GLOBALSETTINGS_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("GLOBALSETTINGS_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("GLOBALSETTINGS_DATABASE_URL", self._build_sqlite_url())
        self.CACHE_ENABLED = _env_bool("GLOBALSETTINGS_CACHE_ENABLED", default=True)
        self.AUDIT_LOG = _env_bool("GLOBALSETTINGS_AUDIT_LOG", default=False)
        self.ADMIN_ENABLED = _env_bool("GLOBALSETTINGS_ADMIN_ENABLED", default=True)
        self.ADMIN_PREFIX = os.getenv("GLOBALSETTINGS_ADMIN_PREFIX", self.DEFAULT_ADMIN_PREFIX)
        self.ADMIN_ROLES = _env_list("GLOBALSETTINGS_ADMIN_ROLES", self.DEFAULT_ADMIN_ROLES)
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("GLOBALSETTINGS_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("GLOBALSETTINGS_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if not self.DATABASE_URL.startswith("sqlite"):
            return {}
        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Isolated in-memory database for test runs."""

    __test__ = False  # not a pytest test class

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = True
        self.DATABASE_URL = "sqlite://"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        # a single shared connection keeps the in-memory database alive
        options = super().sqlalchemy_engine_options()
        options["poolclass"] = StaticPool
        return options

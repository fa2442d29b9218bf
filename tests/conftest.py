"""Pytest configuration and shared fixtures for settings store tests.

Provides an isolated SQLite database per test, repository/service fixtures
wired the same way the application wires them, a setting factory, and a Flask
app/client pair running on the in-memory test configuration.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from sqlalchemy import func
from sqlmodel import Session, SQLModel, create_engine, select

from globalsettings import create_app
from globalsettings.cache import SettingsCache
from globalsettings.config import TestConfig
from globalsettings.infra.repositories import SQLModelSettingRepository
from globalsettings.models import Setting
from globalsettings.services import SettingsService

# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def _isolated_data_dir(tmp_path, monkeypatch):
    """Keep config-created directories (instance/, logs/) inside tmp_path."""
    monkeypatch.setenv("GLOBALSETTINGS_DATA_DIR", str(tmp_path / "instance"))
    monkeypatch.delenv("GLOBALSETTINGS_DATABASE_URL", raising=False)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Session for arranging and inspecting rows directly."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Factory matching the ``Callable[[], Session]`` repositories expect."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def cache() -> SettingsCache:
    return SettingsCache()


@pytest.fixture
def repository(session_factory, cache) -> SQLModelSettingRepository:
    """Repository reading through a fresh cache."""
    return SQLModelSettingRepository(session_factory, cache=cache)


@pytest.fixture
def uncached_repository(session_factory) -> SQLModelSettingRepository:
    return SQLModelSettingRepository(session_factory)


@pytest.fixture
def service(repository) -> SettingsService:
    return SettingsService(repository)


@pytest.fixture
def count_settings(db_engine):
    """Return a callable counting rows in the settings table."""

    def _count() -> int:
        with Session(db_engine) as session:
            return session.exec(select(func.count()).select_from(Setting)).one()

    return _count


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def setting_factory(db_session):
    """Factory for inserting settings directly, bypassing validation.

    Returns:
        Callable: Function that creates and persists Setting instances
    """

    def _create_setting(
        key: str = "test_setting",
        value: str | None = "value",
        field_type: str = "input",
        role: str = "user",
        label: str | None = None,
        description: str | None = None,
        group: str | None = None,
        options: list | None = None,
    ) -> Setting:
        setting = Setting(
            key=key,
            value=value,
            field_type=field_type,
            role=role,
            label=label,
            description=description,
            group=group,
            options=options,
        )
        db_session.add(setting)
        db_session.commit()
        db_session.refresh(setting)
        return setting

    return _create_setting


# =============================================================================
# Flask Fixtures
# =============================================================================


class RoleResolver:
    """Mutable stand-in for the host's current-user role lookup."""

    def __init__(self, roles: tuple[str, ...] = ("admin",)):
        self.roles = roles

    def __call__(self) -> tuple[str, ...]:
        return self.roles


@pytest.fixture
def role_resolver() -> RoleResolver:
    return RoleResolver()


@pytest.fixture
def app(role_resolver):
    app = create_app(config=TestConfig(), role_resolver=role_resolver)
    yield app
    app.extensions["globalsettings"].dispose()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def app_service(app) -> SettingsService:
    return app.extensions["globalsettings"].service

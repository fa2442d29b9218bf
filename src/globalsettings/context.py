"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .cache import SettingsCache
from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelSettingRepository
from .services.audit import AuditSink, LoggingAuditSink
from .services.settings import SettingsService


@dataclass
class SettingsContext:
    """Everything a host needs to read and write settings."""

    config: BaseConfig
    engine: Engine
    session_factory: Callable[[], Session]
    repository: SQLModelSettingRepository
    service: SettingsService
    cache: Optional[SettingsCache] = None

    def dispose(self) -> None:
        self.engine.dispose()


def create_settings_context(
    config: Optional[BaseConfig] = None,
    *,
    audit_sink: Optional[AuditSink] = None,
) -> SettingsContext:
    """Create the engine, schema, cache, repository and service."""

    if config is None:
        config = BaseConfig()

    engine, session_factory = bootstrap_database(config)

    cache = SettingsCache() if config.CACHE_ENABLED else None
    repository = SQLModelSettingRepository(session_factory, cache=cache)

    if audit_sink is None and config.AUDIT_LOG:
        audit_sink = LoggingAuditSink()
    service = SettingsService(repository, audit_sink=audit_sink)

    return SettingsContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        repository=repository,
        service=service,
        cache=cache,
    )

"""Service module exports."""

from . import audit, defaults, settings
from .audit import AuditSink, LoggingAuditSink
from .settings import SettingsService

__all__ = [
    "AuditSink",
    "LoggingAuditSink",
    "SettingsService",
    "audit",
    "defaults",
    "settings",
]

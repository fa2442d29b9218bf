"""Audit sinks notified after settings are created, updated or deleted."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from ..logging_config import get_logger
from ..models.setting import Setting

CREATED = "setting.created"
UPDATED = "setting.updated"
DELETED = "setting.deleted"


class AuditSink(Protocol):
    """Host-supplied collaborator receiving before/after snapshots."""

    def record(
        self,
        event: str,
        setting: Setting,
        before: Optional[dict[str, Any]],
        after: Optional[dict[str, Any]],
    ) -> None:
        """Record a single audit event."""
        ...


class LoggingAuditSink:
    """Write audit events to the ``globalsettings.audit`` logger."""

    def __init__(self, logger_name: str = "audit"):
        self.logger = get_logger(logger_name)

    def record(
        self,
        event: str,
        setting: Setting,
        before: Optional[dict[str, Any]],
        after: Optional[dict[str, Any]],
    ) -> None:
        self.logger.info(
            event,
            extra={
                "event": event,
                "setting_id": setting.id,
                "before": before,
                "after": after,
            },
        )


__all__ = ["AuditSink", "CREATED", "DELETED", "LoggingAuditSink", "UPDATED"]

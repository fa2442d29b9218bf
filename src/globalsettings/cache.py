"""Process-local memoization of the settings table."""

from __future__ import annotations

import threading
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from .logging_config import get_logger

logger = get_logger(__name__)

Loader = Callable[[], Iterable[tuple[str, Optional[str]]]]


class SettingsCache:
    """Full-table ``key -> stored value`` snapshot, valid until the next write.

    The snapshot is local to this process. Other processes writing to the same
    database are not observed until this cache is invalidated.
    """

    def __init__(self) -> None:
        self._values: Optional[dict[str, Optional[str]]] = None
        self._lock = threading.RLock()

    @property
    def loaded(self) -> bool:
        return self._values is not None

    def values(self, loader: Loader) -> dict[str, Optional[str]]:
        """Return the snapshot, loading it through ``loader`` when unloaded.

        A store that cannot be read (unreachable, table not migrated yet) yields
        an empty mapping. The failure is not memoized so the next read retries.
        """
        with self._lock:
            if self._values is None:
                try:
                    loaded = dict(loader())
                except SQLAlchemyError as exc:
                    logger.warning(
                        "Settings store unreadable; serving empty cache",
                        extra={"error": str(exc)},
                    )
                    return {}
                self._values = loaded
                logger.debug("Settings cache loaded", extra={"count": len(loaded)})
            return self._values

    def get(self, key: str, default: Any, loader: Loader) -> Any:
        values = self.values(loader)
        if key not in values:
            return default
        return values[key]

    def has(self, key: str, loader: Loader) -> bool:
        return key in self.values(loader)

    def invalidate(self) -> None:
        with self._lock:
            self._values = None


__all__ = ["SettingsCache"]

"""Setting repository protocol."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

from sqlmodel import Session

from ...models.setting import Setting


@dataclass
class Page:
    """One page of settings plus the totals needed to render pagination."""

    items: list[Setting] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 15

    @property
    def pages(self) -> int:
        if self.total == 0:
            return 1
        return -(-self.total // self.per_page)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [item.to_dict() for item in self.items],
            "total": self.total,
            "page": self.page,
            "per_page": self.per_page,
            "pages": self.pages,
        }


class SettingRepository(Protocol):
    """Primitive CRUD and query access to settings, without business rules."""

    def find(self, setting_id: int) -> Optional[Setting]:
        """Retrieve a setting by ID."""
        ...

    def find_or_fail(self, setting_id: int) -> Setting:
        """Retrieve a setting by ID or raise SettingNotFoundError."""
        ...

    def find_by(self, attributes: Mapping[str, Any]) -> Optional[Setting]:
        """Retrieve the first setting matching all attributes."""
        ...

    def find_all_by(self, attributes: Mapping[str, Any]) -> list[Setting]:
        """List settings matching all attributes."""
        ...

    def create(self, attributes: Mapping[str, Any]) -> Setting:
        """Create a new setting."""
        ...

    def update(self, setting_id: int, attributes: Mapping[str, Any]) -> bool:
        """Update a setting; False when it does not exist."""
        ...

    def delete(self, setting_id: int) -> bool:
        """Delete a setting; False when it does not exist."""
        ...

    def all(self) -> list[Setting]:
        """List all settings."""
        ...

    def paginate(
        self,
        per_page: int = 15,
        page: int = 1,
        *,
        search: Optional[str] = None,
        group: Optional[str] = None,
    ) -> Page:
        """Return one page of settings."""
        ...

    def search(self, term: str) -> list[Setting]:
        """Case-insensitive substring search over key/label/description/value."""
        ...

    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value for key, or default."""
        ...

    def set(self, key: str, value: Any) -> bool:
        """Encode and store value under key, creating the row if needed."""
        ...

    def has(self, key: str) -> bool:
        """Check whether a setting exists."""
        ...

    def transaction(self) -> AbstractContextManager[Session]:
        """Group several operations into one commit."""
        ...

"""SQLModel implementation of the Setting repository."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Mapping, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from ... import codec
from ...cache import SettingsCache
from ...domain.repositories.setting import Page
from ...errors import SettingNotFoundError
from ...models.setting import Setting

_COLUMNS = frozenset(column.name for column in Setting.__table__.columns)  # type: ignore[attr-defined]
_MISSING = object()


def _search_clause(term: str):
    return or_(
        col(Setting.key).icontains(term, autoescape=True),
        col(Setting.label).icontains(term, autoescape=True),
        col(Setting.description).icontains(term, autoescape=True),
        col(Setting.value).icontains(term, autoescape=True),
    )


class SQLModelSettingRepository:
    """SQLModel-based settings repository.

    Each call opens its own session from ``session_factory`` unless a
    :meth:`transaction` is active on the current thread, in which case the
    transaction's session is reused and commits are deferred to its end.
    When a ``cache`` is supplied, ``get``/``has`` read through it and every
    write invalidates it before returning.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        cache: Optional[SettingsCache] = None,
    ):
        self.session_factory = session_factory
        self.cache = cache
        self._local = threading.local()

    # -- session plumbing -------------------------------------------------

    @property
    def _bound(self) -> Optional[Session]:
        return getattr(self._local, "session", None)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        bound = self._bound
        if bound is not None:
            yield bound
            return
        with self.session_factory() as session:
            yield session

    @contextmanager
    def _write(self) -> Iterator[Session]:
        try:
            with self._session() as session:
                yield session
                if self._bound is None:
                    session.commit()
                else:
                    session.flush()
        finally:
            self._invalidate()

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Run the enclosed repository calls in one database transaction.

        Nested use joins the outer transaction.
        """
        bound = self._bound
        if bound is not None:
            yield bound
            return
        with self.session_factory() as session:
            self._local.session = session
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                self._local.session = None
                self._invalidate()

    @staticmethod
    def _columns(attributes: Mapping[str, Any]) -> dict[str, Any]:
        unknown = set(attributes) - _COLUMNS
        if unknown:
            raise ValueError(f"Unknown setting attributes: {', '.join(sorted(unknown))}")
        return dict(attributes)

    def _where(self, attributes: Mapping[str, Any]):
        statement = select(Setting)
        for name, value in self._columns(attributes).items():
            statement = statement.where(getattr(Setting, name) == value)
        return statement.order_by(col(Setting.id))

    # -- queries ------------------------------------------------------------

    def find(self, setting_id: int) -> Optional[Setting]:
        """Retrieve a setting by ID."""
        with self._session() as session:
            obj = session.get(Setting, setting_id)
            if obj:
                session.expunge(obj)
            return obj

    def find_or_fail(self, setting_id: int) -> Setting:
        """Retrieve a setting by ID or raise SettingNotFoundError."""
        obj = self.find(setting_id)
        if obj is None:
            raise SettingNotFoundError(setting_id)
        return obj

    def find_by(self, attributes: Mapping[str, Any]) -> Optional[Setting]:
        """Retrieve the first setting matching all attributes."""
        with self._session() as session:
            obj = session.exec(self._where(attributes)).first()
            if obj:
                session.expunge(obj)
            return obj

    def find_all_by(self, attributes: Mapping[str, Any]) -> list[Setting]:
        """List settings matching all attributes."""
        with self._session() as session:
            rows = list(session.exec(self._where(attributes)).all())
            for row in rows:
                session.expunge(row)
            return rows

    def all(self) -> list[Setting]:
        """List all settings in store order."""
        return self.find_all_by({})

    def search(self, term: str) -> list[Setting]:
        """Case-insensitive substring search over key/label/description/value."""
        with self._session() as session:
            statement = select(Setting).where(_search_clause(term)).order_by(col(Setting.id))
            rows = list(session.exec(statement).all())
            for row in rows:
                session.expunge(row)
            return rows

    def paginate(
        self,
        per_page: int = 15,
        page: int = 1,
        *,
        search: Optional[str] = None,
        group: Optional[str] = None,
    ) -> Page:
        """Return one page of settings ordered by id, optionally filtered."""
        per_page = max(1, per_page)
        page = max(1, page)
        with self._session() as session:
            statement = select(Setting)
            count_statement = select(func.count()).select_from(Setting)
            if group:
                statement = statement.where(Setting.group == group)
                count_statement = count_statement.where(Setting.group == group)
            if search:
                statement = statement.where(_search_clause(search))
                count_statement = count_statement.where(_search_clause(search))

            total = session.exec(count_statement).one()
            statement = (
                statement.order_by(col(Setting.id)).offset((page - 1) * per_page).limit(per_page)
            )
            rows = list(session.exec(statement).all())
            for row in rows:
                session.expunge(row)
        return Page(items=rows, total=total, page=page, per_page=per_page)

    # -- writes ---------------------------------------------------------------

    def create(self, attributes: Mapping[str, Any]) -> Setting:
        """Create a new setting."""
        values = self._columns(attributes)
        with self._write() as session:
            setting = Setting(**values)
            session.add(setting)
            session.flush()
            session.refresh(setting)
            session.expunge(setting)
        return setting

    def update(self, setting_id: int, attributes: Mapping[str, Any]) -> bool:
        """Update a setting; False when it does not exist."""
        values = self._columns(attributes)
        values.pop("id", None)
        with self._write() as session:
            setting = session.get(Setting, setting_id)
            if setting is None:
                return False
            for name, value in values.items():
                setattr(setting, name, value)
            setting.updated_at = datetime.now(timezone.utc)
            session.add(setting)
        return True

    def delete(self, setting_id: int) -> bool:
        """Delete a setting; False when it does not exist."""
        with self._write() as session:
            setting = session.get(Setting, setting_id)
            if setting is None:
                return False
            session.delete(setting)
        return True

    # -- key/value convenience ----------------------------------------------

    def _load_pairs(self) -> list[tuple[str, Optional[str]]]:
        with self._session() as session:
            return [(key, value) for key, value in session.exec(select(Setting.key, Setting.value)).all()]

    def _cached(self) -> bool:
        # Reads inside a transaction see its uncommitted rows and must not be memoized.
        return self.cache is not None and self._bound is None

    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value stored under key, or default."""
        if self._cached():
            raw = self.cache.get(key, _MISSING, self._load_pairs)
            if raw is _MISSING:
                return default
            return codec.decode(raw)

        setting = self.find_by({"key": key})
        if setting is None:
            return default
        return codec.decode(setting.value)

    def set(self, key: str, value: Any) -> bool:
        """Encode value and store it under key, creating the row if needed."""
        stored = codec.encode(value)
        setting = self.find_by({"key": key})
        if setting is not None and setting.id is not None:
            return self.update(setting.id, {"value": stored})
        return self.create({"key": key, "value": stored}) is not None

    def has(self, key: str) -> bool:
        """Check whether a setting exists."""
        if self._cached():
            return self.cache.has(key, self._load_pairs)
        return self.find_by({"key": key}) is not None


__all__ = ["SQLModelSettingRepository"]

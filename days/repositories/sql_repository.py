"""Key-value preference store backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from days.core.errors import StorageError
from days.db.models import Preference
from days.db.session import get_session, session_scope


class SQLPreferenceStore:
    """KeyValueStore over the preferences table, one namespace per instance."""

    def __init__(self, namespace: str = "day_tracker_prefs") -> None:
        self.namespace = namespace

    def get(self, key: str) -> Optional[str]:
        try:
            with get_session() as session:
                entity = session.get(Preference, (self.namespace, key))
                return entity.value if entity else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read {self.namespace}/{key}") from exc

    def put(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        try:
            with session_scope() as session:
                entity = session.get(Preference, (self.namespace, key))
                if not entity:
                    session.add(Preference(namespace=self.namespace, key=key, value=value, updated_at=now))
                else:
                    entity.value = value
                    entity.updated_at = now
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write {self.namespace}/{key}") from exc

    def remove(self, key: str) -> None:
        try:
            with session_scope() as session:
                session.execute(
                    delete(Preference).where(Preference.namespace == self.namespace, Preference.key == key)
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete {self.namespace}/{key}") from exc

    def clear(self) -> None:
        try:
            with session_scope() as session:
                session.execute(delete(Preference).where(Preference.namespace == self.namespace))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to clear {self.namespace}") from exc

    def snapshot(self) -> dict[str, str]:
        try:
            with get_session() as session:
                stmt = select(Preference).where(Preference.namespace == self.namespace).order_by(Preference.key)
                return {p.key: p.value for p in session.execute(stmt).scalars()}
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to list {self.namespace}") from exc

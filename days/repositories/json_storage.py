"""
JSON-file persistence adapter.

All namespaces live in a single file shaped as {namespace: {key: value}};
every write rewrites the whole file through a temporary file.
"""

from __future__ import annotations

from pathlib import Path
import json
import os
import threading
from typing import Optional

from days.core.config import DEFAULT_DATA_FILE
from days.core.errors import StorageError

# one lock per file path, shared by every namespace stored in it
_FILE_LOCKS: dict[Path, threading.RLock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _FILE_LOCKS_GUARD:
        return _FILE_LOCKS.setdefault(path, threading.RLock())


def load(path: Path = DEFAULT_DATA_FILE) -> dict:
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as f:
                db = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Failed to read {path}") from exc
        if not isinstance(db, dict):
            raise StorageError(f"Unexpected content in {path}")
        return db
    return {}


def save(db: dict, path: Path = DEFAULT_DATA_FILE) -> None:
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(json.dumps(db, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, path)
    except OSError as exc:
        raise StorageError(f"Failed to write {path}") from exc


def db_defaults(db: dict, namespace: str) -> dict:
    section = db.setdefault(namespace, {})
    if not isinstance(section, dict):
        db[namespace] = section = {}
    return section


class JsonFileStore:
    """KeyValueStore over one namespace of the JSON data file."""

    def __init__(self, path: Path | str = DEFAULT_DATA_FILE, namespace: str = "day_tracker_prefs") -> None:
        self.path = Path(path).resolve()
        self.namespace = namespace
        self._lock = _lock_for(self.path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            section = load(self.path).get(self.namespace)
        if not isinstance(section, dict):
            return None
        value = section.get(key)
        return value if isinstance(value, str) else None

    def put(self, key: str, value: str) -> None:
        with self._lock:
            db = load(self.path)
            db_defaults(db, self.namespace)[key] = value
            save(db, self.path)

    def remove(self, key: str) -> None:
        with self._lock:
            db = load(self.path)
            section = db_defaults(db, self.namespace)
            if key in section:
                del section[key]
                save(db, self.path)

    def clear(self) -> None:
        with self._lock:
            db = load(self.path)
            if db.get(self.namespace):
                db[self.namespace] = {}
                save(db, self.path)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            section = load(self.path).get(self.namespace, {})
        return {k: v for k, v in section.items() if isinstance(v, str)} if isinstance(section, dict) else {}

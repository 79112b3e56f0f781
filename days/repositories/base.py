"""
Repository contract and the key-value store interface it persists through.
"""
from __future__ import annotations

import abc
import enum
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional, Protocol, Union

from days.core.state import StateFlow
from days.domain.models import AppSettings, Calendar, CalendarData

KEY_SETTINGS = "app_settings"
KEY_COLORED_DAYS = "colored_days"
KEY_CALENDAR_DATA = "calendar_data"
KEY_REMOTE_IDS = "remote_calendar_ids"


class KeyValueStore(Protocol):
    """String-to-string store bound to one namespace. Failures raise StorageError."""

    namespace: str

    def get(self, key: str) -> Optional[str]: ...

    def put(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def snapshot(self) -> dict[str, str]: ...


class MemoryStore:
    """Dictionary-backed store, used by tests and the "memory" backend."""

    def __init__(self, namespace: str = "day_tracker_prefs", initial: Mapping[str, str] | None = None) -> None:
        self.namespace = namespace
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._values)


class StorageType(enum.Enum):
    LOCAL = "local"
    REMOTE = "remote"


# -------------------------- sync results --------------------------
@dataclass(frozen=True)
class SyncSuccess:
    pass


@dataclass(frozen=True)
class SyncFailure:
    error: str


@dataclass(frozen=True)
class SyncConflict:
    conflicted_items: tuple[str, ...] = field(default_factory=tuple)


SyncResult = Union[SyncSuccess, SyncFailure, SyncConflict]


class DataRepository(abc.ABC):
    """
    Storage-agnostic access to calendars, day colors and settings.

    Day color operations take an optional calendar_id; without it they act on
    the selected calendar, or on the legacy flat store when none is selected.
    """

    storage_type: StorageType
    settings_flow: StateFlow[AppSettings]
    calendar_data_flow: StateFlow[CalendarData]

    # calendars
    @abc.abstractmethod
    async def save_calendar(self, calendar: Calendar) -> None: ...

    @abc.abstractmethod
    async def delete_calendar(self, calendar_id: str) -> None: ...

    @abc.abstractmethod
    async def get_calendars(self) -> list[Calendar]: ...

    @abc.abstractmethod
    async def get_calendar(self, calendar_id: str) -> Optional[Calendar]: ...

    @abc.abstractmethod
    async def set_selected_calendar(self, calendar_id: str) -> None: ...

    @abc.abstractmethod
    async def get_selected_calendar(self) -> Optional[Calendar]: ...

    @abc.abstractmethod
    async def get_calendar_data(self) -> CalendarData: ...

    # day colors
    @abc.abstractmethod
    async def save_day_color(self, day: date, color: int, calendar_id: str | None = None) -> None: ...

    @abc.abstractmethod
    async def remove_day_color(self, day: date, calendar_id: str | None = None) -> None: ...

    @abc.abstractmethod
    async def get_day_color(self, day: date, calendar_id: str | None = None) -> Optional[int]: ...

    @abc.abstractmethod
    async def get_all_colored_days(self, calendar_id: str | None = None) -> dict[date, int]: ...

    @abc.abstractmethod
    async def clear_all_day_colors(self, calendar_id: str | None = None) -> None: ...

    @abc.abstractmethod
    async def save_day_colors(self, day_colors: Mapping[date, int], calendar_id: str | None = None) -> None: ...

    # settings and data management
    @abc.abstractmethod
    async def save_settings(self, settings: AppSettings) -> None: ...

    @abc.abstractmethod
    async def get_settings(self) -> AppSettings: ...

    @abc.abstractmethod
    async def reset_all_data(self) -> None: ...

    @abc.abstractmethod
    async def export_data(self) -> str: ...

    @abc.abstractmethod
    async def import_data(self, text: str) -> bool: ...

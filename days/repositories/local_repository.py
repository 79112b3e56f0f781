"""
Local repository: the calendar document, legacy day colors and settings kept
as JSON blobs in a key-value store.

Every mutation reads the whole document, applies the change and writes the
whole document back. Store I/O runs in a worker thread; one asyncio.Lock per
repository serializes the read-modify-write cycles issued through it.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import replace
from datetime import date
from typing import Callable, Mapping, Optional, TypeVar

from days.core.errors import DaysError, DecodeError, StorageError, ValidationError
from days.core.state import StateFlow
from days.domain.colors import to_argb
from days.domain.models import (
    DEFAULT_CALENDAR_NAME,
    AppSettings,
    Calendar,
    CalendarData,
    Day,
    LegacyFlat,
    default_colors,
    resolve_day_target,
)
from days.repositories.base import (
    KEY_CALENDAR_DATA,
    KEY_COLORED_DAYS,
    KEY_SETTINGS,
    DataRepository,
    KeyValueStore,
    StorageType,
)
from days.repositories.serialization import (
    decode_calendar_data,
    decode_export,
    decode_legacy_days,
    decode_settings,
    encode_calendar_data,
    encode_export,
    encode_legacy_days,
    encode_settings,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
ColorMap = dict[date, int]


class RepositoryState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


def _with_selection(data: CalendarData, calendar_id: Optional[str]) -> CalendarData:
    """Point the document at calendar_id and align every is_selected flag."""
    calendars = tuple(
        c if c.is_selected == (c.id == calendar_id) else replace(c, is_selected=c.id == calendar_id)
        for c in data.calendars
    )
    return replace(data, calendars=calendars, selected_calendar_id=calendar_id)


def _normalize(data: CalendarData) -> CalendarData:
    selected = data.selected_calendar_id
    if selected is not None and data.get_calendar(selected) is None:
        selected = None
    return _with_selection(data, selected)


def _with_days(data: CalendarData, calendar_id: str, colors: Mapping[date, int]) -> CalendarData:
    calendar_days = dict(data.calendar_days)
    calendar_days[calendar_id] = tuple(Day(d, c) for d, c in colors.items())
    return replace(data, calendar_days=calendar_days)


def _color_map(days) -> ColorMap:
    return {d.date: d.color for d in days}


class LocalDataRepository(DataRepository):
    """DataRepository persisting through a KeyValueStore."""

    storage_type = StorageType.LOCAL

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self.state = RepositoryState.UNINITIALIZED
        self.settings_flow: StateFlow[AppSettings] = StateFlow(AppSettings())
        self.calendar_data_flow: StateFlow[CalendarData] = StateFlow(CalendarData())
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._ready: Optional[asyncio.Task] = None

    # -------------------------- lifecycle --------------------------
    def start(self) -> asyncio.Task:
        """
        Schedule loading on the running loop (once) and return its task.

        The repository may be driven from successive event loops (one
        asyncio.run per script step); the mutation lock is recreated for each
        new loop since an asyncio.Lock belongs to the loop it first waits on.
        """
        loop = asyncio.get_running_loop()
        if self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        if self._ready is None or (not self._ready.done() and self._ready.get_loop() is not loop):
            self.state = RepositoryState.LOADING
            self._ready = loop.create_task(self._load())
        return self._ready

    async def wait_ready(self) -> None:
        await self.start()

    async def _load(self) -> None:
        try:
            settings = await asyncio.to_thread(self._read_settings)
        except DaysError:
            logger.warning("Could not load settings; using defaults", exc_info=True)
            settings = AppSettings()
        self.settings_flow.publish(settings)

        await asyncio.to_thread(self._migrate_existing_data)

        try:
            data = await asyncio.to_thread(self._read_calendar_data)
        except DaysError:
            logger.warning("Could not load calendar data; starting empty", exc_info=True)
            data = CalendarData()
        self.calendar_data_flow.publish(data)
        self.state = RepositoryState.READY

    async def _run(self, func: Callable[..., T], *args) -> T:
        await self.wait_ready()
        async with self._lock:
            return await asyncio.to_thread(func, *args)

    async def run_locked(self, func: Callable[..., T], *args) -> T:
        """Run a blocking call against the store, serialized with this repository's writes."""
        return await self._run(func, *args)

    # -------------------------- raw blobs --------------------------
    def _read_blob(self, key: str, decode: Callable[[str], T], default: Callable[[], T]) -> T:
        text = self.store.get(key)
        if text is None:
            return default()
        try:
            return decode(text)
        except DecodeError:
            # corrupt blobs are dropped, never surfaced
            logger.warning("Discarding corrupt %r blob", key, exc_info=True)
            self.store.remove(key)
            return default()

    def _read_settings(self) -> AppSettings:
        return self._read_blob(KEY_SETTINGS, decode_settings, AppSettings)

    def _read_calendar_data(self) -> CalendarData:
        return _normalize(self._read_blob(KEY_CALENDAR_DATA, decode_calendar_data, CalendarData))

    def _read_legacy_days(self) -> ColorMap:
        return self._read_blob(KEY_COLORED_DAYS, decode_legacy_days, dict)

    def _write(self, key: str, text: str, failure: str) -> None:
        try:
            self.store.put(key, text)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(failure) from exc

    def _write_calendar_data(self, data: CalendarData, failure: str = "Failed to save calendar data") -> None:
        text = encode_calendar_data(data, self._read_settings())
        self._write(KEY_CALENDAR_DATA, text, failure)

    def _write_legacy_days(self, colors: Mapping[date, int], failure: str = "Failed to save day colors") -> None:
        self._write(KEY_COLORED_DAYS, encode_legacy_days(colors), failure)

    # -------------------------- migration --------------------------
    def _migrate_existing_data(self) -> None:
        """
        Move the pre-calendar flat day list into a synthesized default calendar.

        Runs only while the document has no calendars, so repeated cold starts
        against a leftover legacy blob never create a second calendar. Any
        failure leaves the store as it was and is only logged.
        """
        try:
            if self._read_calendar_data().calendars:
                return
            legacy_days = self._read_legacy_days()
            stored_colors = ()
            if self.store.get(KEY_SETTINGS) is not None:
                stored_colors = self._read_settings().available_colors
            if not legacy_days and not stored_colors:
                return

            calendar = Calendar.create(DEFAULT_CALENDAR_NAME, stored_colors or default_colors(), selected=True)
            data = CalendarData(calendars=(calendar,), selected_calendar_id=calendar.id)
            if legacy_days:
                data = _with_days(data, calendar.id, legacy_days)
            self._write_calendar_data(data, "Failed to save migrated calendar")
            if legacy_days:
                self.store.remove(KEY_COLORED_DAYS)
            logger.info("Migrated %d legacy day(s) into calendar %s", len(legacy_days), calendar.id)
        except Exception:
            logger.warning("Legacy data migration failed; continuing without it", exc_info=True)

    # -------------------------- document helpers --------------------------
    async def _update_document(self, transform: Callable[[CalendarData], CalendarData], failure: str) -> CalendarData:
        def work() -> CalendarData:
            try:
                updated = transform(self._read_calendar_data())
                self._write_calendar_data(updated, failure)
                return updated
            except DaysError:
                raise
            except Exception as exc:
                raise StorageError(failure) from exc

        data = await self._run(work)
        self.calendar_data_flow.publish(data)
        return data

    async def _update_day_colors(
        self,
        calendar_id: Optional[str],
        change: Callable[[ColorMap], Optional[ColorMap]],
        failure: str,
    ) -> None:
        """
        Apply change to the resolved target's color map; None clears it.

        The target is resolved once, inside the locked read, from the same
        document that gets written back.
        """
        def work() -> Optional[CalendarData]:
            try:
                current = self._read_calendar_data()
                target = resolve_day_target(current, calendar_id)
                if isinstance(target, LegacyFlat):
                    colors = change(self._read_legacy_days())
                    if colors is None:
                        self.store.remove(KEY_COLORED_DAYS)
                    else:
                        self._write_legacy_days(colors, failure)
                    return None
                if current.get_calendar(target.calendar_id) is None:
                    raise ValidationError(f"Calendar {target.calendar_id} not found")
                colors = change(_color_map(current.days_for(target.calendar_id)))
                updated = _with_days(current, target.calendar_id, colors or {})
                self._write_calendar_data(updated, failure)
                return updated
            except DaysError:
                raise
            except Exception as exc:
                raise StorageError(failure) from exc

        data = await self._run(work)
        if data is not None:
            self.calendar_data_flow.publish(data)

    def _colored_days(self, calendar_id: Optional[str]) -> ColorMap:
        current = self._read_calendar_data()
        target = resolve_day_target(current, calendar_id)
        if isinstance(target, LegacyFlat):
            return self._read_legacy_days()
        return _color_map(current.days_for(target.calendar_id))

    # -------------------------- calendars --------------------------
    async def save_calendar(self, calendar: Calendar) -> None:
        def upsert(data: CalendarData) -> CalendarData:
            entry = replace(calendar, is_selected=calendar.id == data.selected_calendar_id)
            if data.get_calendar(calendar.id) is not None:
                calendars = tuple(entry if c.id == calendar.id else c for c in data.calendars)
            else:
                calendars = data.calendars + (entry,)
            return replace(data, calendars=calendars)

        await self._update_document(upsert, "Failed to save calendar")

    async def delete_calendar(self, calendar_id: str) -> None:
        def remove(data: CalendarData) -> CalendarData:
            calendars = tuple(c for c in data.calendars if c.id != calendar_id)
            days = {k: v for k, v in data.calendar_days.items() if k != calendar_id}
            selected = data.selected_calendar_id
            if selected == calendar_id:
                selected = calendars[0].id if calendars else None
            return _with_selection(replace(data, calendars=calendars, calendar_days=days), selected)

        await self._update_document(remove, "Failed to delete calendar")

    async def get_calendars(self) -> list[Calendar]:
        return list((await self.get_calendar_data()).calendars)

    async def get_calendar(self, calendar_id: str) -> Optional[Calendar]:
        return (await self.get_calendar_data()).get_calendar(calendar_id)

    async def set_selected_calendar(self, calendar_id: str) -> None:
        def select(data: CalendarData) -> CalendarData:
            if data.get_calendar(calendar_id) is None:
                raise ValidationError(f"Calendar {calendar_id} not found")
            return _with_selection(data, calendar_id)

        await self._update_document(select, "Failed to set selected calendar")

    async def get_selected_calendar(self) -> Optional[Calendar]:
        return (await self.get_calendar_data()).selected_calendar()

    async def get_calendar_data(self) -> CalendarData:
        return await self._run(self._read_calendar_data)

    # -------------------------- day colors --------------------------
    async def save_day_color(self, day: date, color: int, calendar_id: str | None = None) -> None:
        argb = to_argb(color)

        def put(colors: ColorMap) -> ColorMap:
            colors.pop(day, None)
            colors[day] = argb
            return colors

        await self._update_day_colors(calendar_id, put, "Failed to save day color")

    async def remove_day_color(self, day: date, calendar_id: str | None = None) -> None:
        def drop(colors: ColorMap) -> ColorMap:
            colors.pop(day, None)
            return colors

        await self._update_day_colors(calendar_id, drop, "Failed to remove day color")

    async def get_day_color(self, day: date, calendar_id: str | None = None) -> Optional[int]:
        return (await self._run(self._colored_days, calendar_id)).get(day)

    async def get_all_colored_days(self, calendar_id: str | None = None) -> dict[date, int]:
        return await self._run(self._colored_days, calendar_id)

    async def clear_all_day_colors(self, calendar_id: str | None = None) -> None:
        await self._update_day_colors(calendar_id, lambda colors: None, "Failed to clear day colors")

    async def save_day_colors(self, day_colors: Mapping[date, int], calendar_id: str | None = None) -> None:
        replacement = {d: to_argb(c) for d, c in day_colors.items()}
        await self._update_day_colors(calendar_id, lambda colors: dict(replacement), "Failed to save day colors")

    # -------------------------- settings --------------------------
    async def save_settings(self, settings: AppSettings) -> None:
        await self._run(self._write, KEY_SETTINGS, encode_settings(settings), "Failed to save settings")
        self.settings_flow.publish(settings)

    async def get_settings(self) -> AppSettings:
        return await self._run(self._read_settings)

    # -------------------------- data management --------------------------
    async def reset_all_data(self) -> None:
        def wipe() -> None:
            try:
                self.store.clear()
            except StorageError:
                raise
            except Exception as exc:
                raise StorageError("Failed to reset data") from exc

        await self._run(wipe)
        self.settings_flow.publish(AppSettings())
        self.calendar_data_flow.publish(CalendarData())

    async def export_data(self) -> str:
        """Settings plus the current scope's colored days, for user backups."""
        def dump() -> str:
            return encode_export(self._read_settings(), self._colored_days(None))

        return await self._run(dump)

    async def import_data(self, text: str) -> bool:
        """
        Restore a backup produced by export_data. All-or-nothing: on failure the
        previous settings and day colors are put back and False is returned.
        """
        try:
            settings, colored_days = decode_export(text)
        except DecodeError:
            logger.warning("Rejected import: payload could not be decoded", exc_info=True)
            return False

        def apply() -> Optional[CalendarData]:
            current = self._read_calendar_data()
            target = resolve_day_target(current, None)
            days_key = KEY_COLORED_DAYS if isinstance(target, LegacyFlat) else KEY_CALENDAR_DATA
            previous = {key: self.store.get(key) for key in (KEY_SETTINGS, days_key)}
            try:
                self._write(KEY_SETTINGS, encode_settings(settings), "Failed to import settings")
                if isinstance(target, LegacyFlat):
                    self._write_legacy_days(colored_days, "Failed to import day colors")
                    return None
                updated = _with_days(current, target.calendar_id, colored_days)
                self._write_calendar_data(updated, "Failed to import day colors")
                return updated
            except Exception:
                self._restore(previous)
                raise

        try:
            updated = await self._run(apply)
        except DaysError:
            logger.warning("Import failed; previous data restored", exc_info=True)
            return False
        self.settings_flow.publish(settings)
        if updated is not None:
            self.calendar_data_flow.publish(updated)
        return True

    def _restore(self, previous: Mapping[str, Optional[str]]) -> None:
        for key, text in previous.items():
            try:
                if text is None:
                    self.store.remove(key)
                else:
                    self.store.put(key, text)
            except Exception:
                logger.error("Could not restore %r after a failed import", key, exc_info=True)

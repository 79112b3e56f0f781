"""
Remote repository: calendar CRUD through the Days API, everything else local.

Every calendar saved or deleted here is mirrored into the local repository
under its local id, so selection and day colors can always resolve it. The
API assigns its own ids on creation; the pairing is kept in the local store
(remote_calendar_ids) and later updates go to the remote id.

Any remote failure on a calendar operation falls back to the local repository
without telling the caller. There is no reconciliation afterwards, so a
transient failure leaves remote and local calendars diverged.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, Mapping, Optional, TypeVar

from days.core.errors import DecodeError, NetworkError
from days.domain.models import AppSettings, Calendar, CalendarData, default_colors
from days.repositories.base import (
    KEY_REMOTE_IDS,
    DataRepository,
    StorageType,
    SyncFailure,
    SyncResult,
    SyncSuccess,
)
from days.repositories.local_repository import LocalDataRepository
from days.repositories.serialization import decode_remote_ids, encode_remote_ids
from days.services.api_client import DaysApiClient
from days.services.schemas import CalendarResponse
from days.services.session_service import UserSessionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")

REMOTE_CALENDAR_DESCRIPTION = "Calendar created from Day Tracker"


class RemoteDataRepository(DataRepository):
    storage_type = StorageType.REMOTE

    def __init__(
        self,
        local: LocalDataRepository,
        session_manager: UserSessionManager,
        client_factory: Callable[[Optional[str]], DaysApiClient],
    ) -> None:
        self.local = local
        self.session_manager = session_manager
        self.client_factory = client_factory
        self.settings_flow = local.settings_flow
        self.calendar_data_flow = local.calendar_data_flow

    def _client(self) -> DaysApiClient:
        return self.client_factory(self.session_manager.get_auth_token())

    async def _remote(self, call: Callable[[DaysApiClient], T]) -> T:
        return await asyncio.to_thread(call, self._client())

    def _to_calendar(self, item: CalendarResponse, calendar_id: str, selected_id: Optional[str]) -> Calendar:
        return Calendar(
            id=calendar_id,
            name=item.name,
            color_scheme=default_colors(),
            is_selected=calendar_id == selected_id,
        )

    async def _selected_id(self) -> Optional[str]:
        return (await self.local.get_calendar_data()).selected_calendar_id

    def _fallback(self, action: str, exc: Exception) -> None:
        if isinstance(exc, NetworkError):
            logger.warning("Remote %s failed (%s); using local storage", action, exc.message)
        else:
            logger.warning("Remote %s failed unexpectedly; using local storage", action, exc_info=True)

    # -------------------------- remote id map --------------------------
    def _read_remote_ids(self) -> dict[str, str]:
        text = self.local.store.get(KEY_REMOTE_IDS)
        if text is None:
            return {}
        try:
            return decode_remote_ids(text)
        except DecodeError:
            logger.warning("Dropping unreadable %s blob", KEY_REMOTE_IDS)
            self.local.store.remove(KEY_REMOTE_IDS)
            return {}

    def _remember_remote_id(self, calendar_id: str, remote_id: str) -> None:
        ids = self._read_remote_ids()
        ids[calendar_id] = remote_id
        self.local.store.put(KEY_REMOTE_IDS, encode_remote_ids(ids))

    def _forget_remote_id(self, calendar_id: str) -> None:
        ids = self._read_remote_ids()
        if ids.pop(calendar_id, None) is not None:
            self.local.store.put(KEY_REMOTE_IDS, encode_remote_ids(ids))

    async def _remote_ids(self) -> dict[str, str]:
        return await self.local.run_locked(self._read_remote_ids)

    # -------------------------- calendars (remote first) --------------------------
    async def save_calendar(self, calendar: Calendar) -> None:
        remote_id = (await self._remote_ids()).get(calendar.id, calendar.id)

        def upsert(client: DaysApiClient) -> CalendarResponse:
            try:
                return client.update_calendar(remote_id, calendar.name, REMOTE_CALENDAR_DESCRIPTION)
            except NetworkError as exc:
                if exc.status_code != 404:
                    raise
            return client.create_calendar(calendar.name, REMOTE_CALENDAR_DESCRIPTION)

        try:
            saved = await self._remote(upsert)
        except Exception as exc:
            self._fallback("save calendar", exc)
        else:
            if saved.id != remote_id:
                await self.local.run_locked(self._remember_remote_id, calendar.id, saved.id)
        await self.local.save_calendar(calendar)

    async def delete_calendar(self, calendar_id: str) -> None:
        remote_id = (await self._remote_ids()).get(calendar_id, calendar_id)
        try:
            await self._remote(lambda client: client.delete_calendar(remote_id))
        except Exception as exc:
            self._fallback("delete calendar", exc)
        await self.local.run_locked(self._forget_remote_id, calendar_id)
        await self.local.delete_calendar(calendar_id)

    async def get_calendars(self) -> list[Calendar]:
        try:
            items = await self._remote(lambda client: client.list_calendars())
        except Exception as exc:
            self._fallback("list calendars", exc)
            return await self.local.get_calendars()
        local_ids = {remote: local for local, remote in (await self._remote_ids()).items()}
        selected_id = await self._selected_id()
        return [self._to_calendar(item, local_ids.get(item.id, item.id), selected_id) for item in items]

    async def get_calendar(self, calendar_id: str) -> Optional[Calendar]:
        remote_id = (await self._remote_ids()).get(calendar_id, calendar_id)
        try:
            item = await self._remote(lambda client: client.get_calendar(remote_id))
        except Exception as exc:
            self._fallback("get calendar", exc)
            return await self.local.get_calendar(calendar_id)
        return self._to_calendar(item, calendar_id, await self._selected_id())

    async def sync_status(self) -> SyncResult:
        """Reachability of the API. Conflicts are never detected."""
        try:
            await self._remote(lambda client: client.list_calendars())
        except Exception as exc:
            message = exc.message if isinstance(exc, NetworkError) else str(exc)
            return SyncFailure(message)
        return SyncSuccess()

    # -------------------------- always local --------------------------
    async def set_selected_calendar(self, calendar_id: str) -> None:
        await self.local.set_selected_calendar(calendar_id)

    async def get_selected_calendar(self) -> Optional[Calendar]:
        return await self.local.get_selected_calendar()

    async def get_calendar_data(self) -> CalendarData:
        return await self.local.get_calendar_data()

    async def save_day_color(self, day: date, color: int, calendar_id: str | None = None) -> None:
        await self.local.save_day_color(day, color, calendar_id)

    async def remove_day_color(self, day: date, calendar_id: str | None = None) -> None:
        await self.local.remove_day_color(day, calendar_id)

    async def get_day_color(self, day: date, calendar_id: str | None = None) -> Optional[int]:
        return await self.local.get_day_color(day, calendar_id)

    async def get_all_colored_days(self, calendar_id: str | None = None) -> dict[date, int]:
        return await self.local.get_all_colored_days(calendar_id)

    async def clear_all_day_colors(self, calendar_id: str | None = None) -> None:
        await self.local.clear_all_day_colors(calendar_id)

    async def save_day_colors(self, day_colors: Mapping[date, int], calendar_id: str | None = None) -> None:
        await self.local.save_day_colors(day_colors, calendar_id)

    async def save_settings(self, settings: AppSettings) -> None:
        await self.local.save_settings(settings)

    async def get_settings(self) -> AppSettings:
        return await self.local.get_settings()

    async def export_data(self) -> str:
        return await self.local.export_data()

    async def import_data(self, text: str) -> bool:
        return await self.local.import_data(text)

    async def reset_all_data(self) -> None:
        await self.local.reset_all_data()
        self.session_manager.clear_session()

"""
Day tracking use cases: calendars, day colors, palette and theme settings.

Each method reads the repository, applies one rule and writes back. Failures
are published on `errors` (for callers that fire and forget) and re-raised.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Awaitable, Iterable, Optional, TypeVar

from days.core.errors import DaysError, UnknownError, ValidationError
from days.core.state import StateFlow
from days.domain.colors import TRANSPARENT, to_argb
from days.domain.models import UNKNOWN_COLOR_MEANING, AppSettings, Calendar, ColorMeaning
from days.repositories.base import DataRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DayTrackerService:
    def __init__(self, repository: DataRepository) -> None:
        self.repository = repository
        self.errors: StateFlow[Optional[DaysError]] = StateFlow(None)

    async def _guard(self, action: str, operation: Awaitable[T]) -> T:
        try:
            return await operation
        except DaysError as exc:
            self.errors.publish(exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected failure during %s", action)
            error = UnknownError(f"Unexpected failure during {action}")
            self.errors.publish(error)
            raise error from exc

    def _reject(self, message: str) -> None:
        error = ValidationError(message)
        self.errors.publish(error)
        raise error

    def clear_error(self) -> None:
        self.errors.publish(None)

    # -------------------------------------- calendars --------------------------------------
    async def create_calendar(self, name: str, colors: Iterable[ColorMeaning] | None = None) -> Calendar:
        """New calendars use the global palette unless colors are given; the first one gets selected."""
        name = (name or "").strip()
        if not name:
            self._reject("Calendar name is required")

        async def run() -> Calendar:
            scheme = tuple(colors) if colors is not None else (await self.repository.get_settings()).available_colors
            calendar = Calendar.create(name, scheme)
            await self.repository.save_calendar(calendar)
            if await self.repository.get_selected_calendar() is None:
                await self.repository.set_selected_calendar(calendar.id)
            return calendar

        return await self._guard("create calendar", run())

    async def rename_calendar(self, calendar_id: str, name: str) -> Calendar:
        name = (name or "").strip()
        if not name:
            self._reject("Calendar name is required")

        async def run() -> Calendar:
            calendar = await self.repository.get_calendar(calendar_id)
            if calendar is None:
                raise ValidationError(f"Calendar {calendar_id} not found")
            renamed = replace(calendar, name=name)
            await self.repository.save_calendar(renamed)
            return renamed

        return await self._guard("rename calendar", run())

    async def update_calendar(self, calendar: Calendar) -> None:
        if not (calendar.name or "").strip():
            self._reject("Calendar name is required")
        await self._guard("update calendar", self.repository.save_calendar(calendar))

    async def delete_calendar(self, calendar_id: str) -> None:
        await self._guard("delete calendar", self.repository.delete_calendar(calendar_id))

    async def select_calendar(self, calendar_id: str) -> None:
        await self._guard("select calendar", self.repository.set_selected_calendar(calendar_id))

    async def current_calendar_colors(self) -> tuple[ColorMeaning, ...]:
        async def run() -> tuple[ColorMeaning, ...]:
            selected = await self.repository.get_selected_calendar()
            if selected is not None:
                return selected.color_scheme
            return (await self.repository.get_settings()).available_colors

        return await self._guard("read calendar colors", run())

    async def color_meaning(self, color: int) -> str:
        argb = to_argb(color)
        for item in await self.current_calendar_colors():
            if item.color == argb:
                return item.meaning
        return UNKNOWN_COLOR_MEANING

    # -------------------------------------- day colors --------------------------------------
    async def toggle_day(self, day: date) -> Optional[int]:
        """Clear a colored day, or paint it with the selected color. Returns the new color."""
        async def run() -> Optional[int]:
            if await self.repository.get_day_color(day) is not None:
                await self.repository.remove_day_color(day)
                return None
            color = (await self.repository.get_settings()).selected_color
            await self.repository.save_day_color(day, color)
            return color

        return await self._guard("toggle day", run())

    async def set_day_color(self, day: date, color: int) -> None:
        if to_argb(color) == TRANSPARENT:
            await self._guard("remove day color", self.repository.remove_day_color(day))
        else:
            await self._guard("set day color", self.repository.save_day_color(day, color))

    async def remove_day_color(self, day: date) -> None:
        await self._guard("remove day color", self.repository.remove_day_color(day))

    async def clear_all_colors(self) -> None:
        await self._guard("clear colors", self.repository.clear_all_day_colors())

    async def colored_days(self) -> dict[date, int]:
        return await self._guard("read colored days", self.repository.get_all_colored_days())

    # -------------------------------------- settings --------------------------------------
    async def _update_settings(self, action: str, change) -> AppSettings:
        async def run() -> AppSettings:
            updated = change(await self.repository.get_settings())
            await self.repository.save_settings(updated)
            return updated

        return await self._guard(action, run())

    async def update_selected_color(self, color: int) -> AppSettings:
        argb = to_argb(color)
        return await self._update_settings("update selected color", lambda s: replace(s, selected_color=argb))

    async def update_dark_mode(self, is_dark_mode: bool) -> AppSettings:
        # a manual choice stops following the system theme
        return await self._update_settings(
            "update dark mode",
            lambda s: replace(s, is_dark_mode=is_dark_mode, follow_system_theme=False),
        )

    async def set_follow_system_theme(self, follow: bool) -> AppSettings:
        return await self._update_settings("update theme", lambda s: replace(s, follow_system_theme=follow))

    async def complete_onboarding(self) -> AppSettings:
        return await self._update_settings("complete onboarding", lambda s: replace(s, has_seen_onboarding=True))

    async def update_color_meaning(self, color: int, meaning: str) -> AppSettings:
        meaning = (meaning or "").strip()
        if not meaning:
            self._reject("Color meaning is required")
        argb = to_argb(color)

        def change(settings: AppSettings) -> AppSettings:
            colors = tuple(
                replace(item, meaning=meaning) if item.color == argb else item
                for item in settings.available_colors
            )
            return replace(settings, available_colors=colors)

        return await self._update_settings("update color meaning", change)

    async def add_color(self, color: int, meaning: str) -> AppSettings:
        meaning = (meaning or "").strip()
        if not meaning:
            self._reject("Color meaning is required")
        entry = ColorMeaning(to_argb(color), meaning)
        return await self._update_settings(
            "add color",
            lambda s: replace(s, available_colors=s.available_colors + (entry,)),
        )

    async def delete_color(self, color: int) -> AppSettings:
        """Drop a palette entry and every day in the current scope painted with it."""
        argb = to_argb(color)

        def change(settings: AppSettings) -> AppSettings:
            remaining = tuple(item for item in settings.available_colors if item.color != argb)
            updated = replace(settings, available_colors=remaining)
            if settings.selected_color == argb and remaining:
                updated = replace(updated, selected_color=remaining[0].color)
            return updated

        async def run() -> AppSettings:
            settings = await self._update_settings("delete color", change)
            colored = await self.repository.get_all_colored_days()
            for day, day_color in colored.items():
                if day_color == argb:
                    await self.repository.remove_day_color(day)
            return settings

        return await self._guard("delete color", run())

    # -------------------------------------- data management --------------------------------------
    async def export_data(self) -> str:
        return await self._guard("export data", self.repository.export_data())

    async def import_data(self, text: str) -> bool:
        return await self._guard("import data", self.repository.import_data(text))

    async def reset_all_data(self) -> None:
        await self._guard("reset data", self.repository.reset_all_data())

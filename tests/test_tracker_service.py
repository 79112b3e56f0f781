"""
DayTrackerService rules on top of a memory-backed local repository.
"""
from __future__ import annotations

import asyncio
import sys
from datetime import date
from pathlib import Path

import pytest

# Garante que o pacote days seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from days.core.errors import UnknownError, ValidationError  # noqa: E402
from days.domain.colors import AMBER, GREEN, RED, TRANSPARENT  # noqa: E402
from days.domain.models import UNKNOWN_COLOR_MEANING, ColorMeaning, default_colors  # noqa: E402
from days.repositories.base import MemoryStore  # noqa: E402
from days.repositories.local_repository import LocalDataRepository  # noqa: E402
from days.services.tracker_service import DayTrackerService  # noqa: E402

AUG_6 = date(2025, 8, 6)
AUG_7 = date(2025, 8, 7)


class BrokenRepository(LocalDataRepository):
    async def get_all_colored_days(self, calendar_id=None):
        raise RuntimeError("disk on fire")


def _service() -> DayTrackerService:
    return DayTrackerService(LocalDataRepository(MemoryStore()))


def test_first_calendar_is_selected_and_uses_palette():
    service = _service()

    async def scenario():
        first = await service.create_calendar("  Work ")
        second = await service.create_calendar("Home", [ColorMeaning(GREEN, "Run")])
        assert first.name == "Work"
        assert first.color_scheme == default_colors()
        assert second.color_scheme == (ColorMeaning(GREEN, "Run"),)
        assert (await service.repository.get_selected_calendar()).id == first.id

    asyncio.run(scenario())


@pytest.mark.parametrize("name", ["", "   ", None])
def test_blank_calendar_name_is_rejected(name):
    service = _service()
    with pytest.raises(ValidationError):
        asyncio.run(service.create_calendar(name))
    assert isinstance(service.errors.value, ValidationError)
    assert asyncio.run(service.repository.get_calendars()) == []

    service.clear_error()
    assert service.errors.value is None


def test_rename_unknown_calendar_fails():
    service = _service()
    with pytest.raises(ValidationError):
        asyncio.run(service.rename_calendar("nope", "Name"))


def test_rename_keeps_identity():
    service = _service()

    async def scenario():
        calendar = await service.create_calendar("Work")
        renamed = await service.rename_calendar(calendar.id, "Job")
        [stored] = await service.repository.get_calendars()
        assert (stored.id, stored.name, renamed.name) == (calendar.id, "Job", "Job")

    asyncio.run(scenario())


def test_toggle_day_paints_then_clears():
    service = _service()

    async def scenario():
        await service.create_calendar("Work")
        await service.update_selected_color(GREEN)
        assert await service.toggle_day(AUG_6) == GREEN
        assert await service.colored_days() == {AUG_6: GREEN}
        assert await service.toggle_day(AUG_6) is None
        assert await service.colored_days() == {}

    asyncio.run(scenario())


def test_toggle_without_calendar_uses_flat_store():
    service = _service()

    async def scenario():
        assert await service.toggle_day(AUG_6) == RED
        assert await service.repository.get_calendars() == []
        assert await service.colored_days() == {AUG_6: RED}

    asyncio.run(scenario())


def test_transparent_color_removes_day():
    service = _service()

    async def scenario():
        await service.set_day_color(AUG_6, AMBER)
        await service.set_day_color(AUG_7, AMBER)
        await service.set_day_color(AUG_6, TRANSPARENT)
        assert await service.colored_days() == {AUG_7: AMBER}

    asyncio.run(scenario())


def test_delete_color_reselects_and_removes_days():
    service = _service()

    async def scenario():
        await service.create_calendar("Work")
        await service.set_day_color(AUG_6, RED)
        await service.set_day_color(AUG_7, GREEN)
        settings = await service.delete_color(RED)
        assert [c.color for c in settings.available_colors] == [AMBER, GREEN]
        assert settings.selected_color == AMBER
        assert await service.colored_days() == {AUG_7: GREEN}

    asyncio.run(scenario())


def test_color_meaning_follows_selected_calendar():
    service = _service()

    async def scenario():
        assert await service.color_meaning(GREEN) == "Good"
        await service.create_calendar("Mood", [ColorMeaning(GREEN, "Happy")])
        assert await service.color_meaning(GREEN) == "Happy"
        assert await service.color_meaning(0xFF123456) == UNKNOWN_COLOR_MEANING

    asyncio.run(scenario())


def test_update_color_meaning():
    service = _service()

    async def scenario():
        settings = await service.update_color_meaning(AMBER, " Fine ")
        assert ColorMeaning(AMBER, "Fine") in settings.available_colors
        with pytest.raises(ValidationError):
            await service.update_color_meaning(AMBER, " ")
        added = await service.add_color(0xFF0000FF, "Blue")
        assert added.available_colors[-1] == ColorMeaning(0xFF0000FF, "Blue")

    asyncio.run(scenario())


def test_manual_dark_mode_stops_following_system():
    service = _service()

    async def scenario():
        settings = await service.update_dark_mode(True)
        assert settings.is_dark_mode is True
        assert settings.follow_system_theme is False
        settings = await service.set_follow_system_theme(True)
        assert settings.follow_system_theme is True
        assert (await service.complete_onboarding()).has_seen_onboarding is True
        assert service.repository.settings_flow.value.has_seen_onboarding is True

    asyncio.run(scenario())


def test_unexpected_failure_becomes_unknown_error():
    service = DayTrackerService(BrokenRepository(MemoryStore()))
    with pytest.raises(UnknownError) as exc_info:
        asyncio.run(service.colored_days())
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert service.errors.value is exc_info.value


def test_export_import_reset_round_trip():
    service = _service()

    async def scenario():
        await service.create_calendar("Work")
        await service.set_day_color(AUG_6, GREEN)
        backup = await service.export_data()
        await service.clear_all_colors()
        assert await service.import_data(backup) is True
        assert await service.colored_days() == {AUG_6: GREEN}
        assert await service.import_data("not json") is False
        await service.reset_all_data()
        assert await service.repository.get_calendars() == []

    asyncio.run(scenario())

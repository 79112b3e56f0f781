"""Entity graph: calendars, colored days, global settings and the document."""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional, Union

from days.domain.colors import AMBER, GREEN, RED

DEFAULT_CALENDAR_NAME = "My Calendar"
UNKNOWN_COLOR_MEANING = "Custom Color"


@dataclass(frozen=True)
class ColorMeaning:
    color: int
    meaning: str


def default_colors() -> tuple[ColorMeaning, ...]:
    """Built-in palette (Bad, Okay, Good)."""
    return (
        ColorMeaning(RED, "Bad"),
        ColorMeaning(AMBER, "Okay"),
        ColorMeaning(GREEN, "Good"),
    )


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Calendar:
    id: str
    name: str
    color_scheme: tuple[ColorMeaning, ...]
    is_selected: bool = False
    created_at: int = field(default_factory=_now_millis)

    @classmethod
    def create(cls, name: str, colors, *, selected: bool = False) -> "Calendar":
        return cls(
            id=str(uuid.uuid4()),
            name=name,
            color_scheme=tuple(colors),
            is_selected=selected,
        )


@dataclass(frozen=True)
class Day:
    date: date
    color: int


@dataclass(frozen=True)
class AppSettings:
    selected_color: int = RED
    is_dark_mode: bool = False
    follow_system_theme: bool = True
    available_colors: tuple[ColorMeaning, ...] = field(default_factory=default_colors)
    has_seen_onboarding: bool = False


@dataclass(frozen=True)
class CalendarData:
    """
    The unit of persistence.

    calendar_days maps a calendar id to its days; dates are unique within a
    list and every key should name an existing calendar.
    """

    calendars: tuple[Calendar, ...] = ()
    selected_calendar_id: Optional[str] = None
    calendar_days: Mapping[str, tuple[Day, ...]] = field(default_factory=dict)

    def get_calendar(self, calendar_id: str | None) -> Optional[Calendar]:
        for calendar in self.calendars:
            if calendar.id == calendar_id:
                return calendar
        return None

    def selected_calendar(self) -> Optional[Calendar]:
        if self.selected_calendar_id is None:
            return None
        return self.get_calendar(self.selected_calendar_id)

    def days_for(self, calendar_id: str) -> tuple[Day, ...]:
        return tuple(self.calendar_days.get(calendar_id, ()))

    def current_days(self) -> tuple[Day, ...]:
        if self.selected_calendar_id is None:
            return ()
        return self.days_for(self.selected_calendar_id)


# -------------------------- day color targets --------------------------
@dataclass(frozen=True)
class PerCalendar:
    calendar_id: str


@dataclass(frozen=True)
class LegacyFlat:
    pass


DayColorTarget = Union[PerCalendar, LegacyFlat]


def resolve_day_target(data: CalendarData, calendar_id: str | None = None) -> DayColorTarget:
    """Explicit id first, then the selected calendar, then the legacy flat store."""
    if calendar_id is not None:
        return PerCalendar(calendar_id)
    selected = data.selected_calendar()
    if selected is not None:
        return PerCalendar(selected.id)
    return LegacyFlat()

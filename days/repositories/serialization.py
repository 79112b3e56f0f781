"""
JSON encoding of the calendar document, settings, legacy days and backups.

Field names match what the mobile application persisted, so existing blobs
keep loading. Decoders ignore unknown keys and raise DecodeError for
anything malformed.
"""
from __future__ import annotations

import json
import re
from datetime import date
from typing import Any, Mapping

from days.core.errors import DecodeError
from days.domain.colors import to_argb
from days.domain.models import AppSettings, Calendar, CalendarData, ColorMeaning, Day

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

_MISSING = object()


def _dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _loads(text: str) -> Any:
    if not isinstance(text, str):
        raise DecodeError("Expected JSON text")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Malformed JSON: {exc.msg}") from exc


def _field(obj: Any, key: str, kind, default: Any = _MISSING) -> Any:
    if not isinstance(obj, dict):
        raise DecodeError(f"Expected an object holding {key!r}")
    if key not in obj or obj[key] is None:
        if default is _MISSING:
            raise DecodeError(f"Missing field {key!r}")
        return default
    value = obj[key]
    # bool is an int subclass; never let true/false stand in for a number
    if kind is int and isinstance(value, bool):
        raise DecodeError(f"Field {key!r} must be an integer")
    if not isinstance(value, kind):
        raise DecodeError(f"Field {key!r} has the wrong type")
    return value


# -------------------------- leaves --------------------------
def encode_color(argb: int) -> dict:
    return {"argb": to_argb(argb)}


def decode_color(obj: Any) -> int:
    return to_argb(_field(obj, "argb", int))


def encode_date(value: date) -> str:
    return value.isoformat()


def decode_date(text: Any) -> date:
    if not isinstance(text, str) or not DATE_PATTERN.fullmatch(text):
        raise DecodeError(f"Invalid date string: {text!r}")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise DecodeError(f"Invalid date string: {text!r}") from exc


def _encode_color_meaning(item: ColorMeaning) -> dict:
    return {"color": encode_color(item.color), "meaning": item.meaning}


def _decode_color_meaning(obj: Any) -> ColorMeaning:
    return ColorMeaning(
        color=decode_color(_field(obj, "color", dict)),
        meaning=_field(obj, "meaning", str),
    )


def _encode_day(day_value: date, color: int) -> dict:
    return {"dateString": encode_date(day_value), "color": encode_color(color)}


def _decode_day(obj: Any) -> Day:
    return Day(
        date=decode_date(_field(obj, "dateString", str)),
        color=decode_color(_field(obj, "color", dict)),
    )


# -------------------------- settings --------------------------
def settings_to_dict(settings: AppSettings) -> dict:
    return {
        "selectedColor": encode_color(settings.selected_color),
        "isDarkMode": settings.is_dark_mode,
        "followSystemTheme": settings.follow_system_theme,
        "availableColors": [_encode_color_meaning(c) for c in settings.available_colors],
        "hasSeenOnboarding": settings.has_seen_onboarding,
    }


def settings_from_dict(obj: Any) -> AppSettings:
    return AppSettings(
        selected_color=decode_color(_field(obj, "selectedColor", dict)),
        is_dark_mode=_field(obj, "isDarkMode", bool),
        follow_system_theme=_field(obj, "followSystemTheme", bool),
        available_colors=tuple(_decode_color_meaning(c) for c in _field(obj, "availableColors", list)),
        has_seen_onboarding=_field(obj, "hasSeenOnboarding", bool, False),
    )


def encode_settings(settings: AppSettings) -> str:
    return _dumps(settings_to_dict(settings))


def decode_settings(text: str) -> AppSettings:
    return settings_from_dict(_loads(text))


# -------------------------- legacy flat days --------------------------
def encode_legacy_days(day_colors: Mapping[date, int]) -> str:
    return _dumps([_encode_day(d, c) for d, c in day_colors.items()])


def decode_legacy_days(text: str) -> dict[date, int]:
    payload = _loads(text)
    if not isinstance(payload, list):
        raise DecodeError("Expected a list of colored days")
    result: dict[date, int] = {}
    for item in payload:
        day = _decode_day(item)
        result[day.date] = day.color
    return result


# -------------------------- remote calendar ids --------------------------
def encode_remote_ids(ids: Mapping[str, str]) -> str:
    return _dumps(dict(sorted(ids.items())))


def decode_remote_ids(text: str) -> dict[str, str]:
    """Local calendar id to the id the remote API assigned it."""
    payload = _loads(text)
    if not isinstance(payload, dict) or not all(isinstance(v, str) for v in payload.values()):
        raise DecodeError("Expected a map of calendar ids")
    return dict(payload)


# -------------------------- calendar document --------------------------
def _encode_calendar(calendar: Calendar) -> dict:
    return {
        "id": calendar.id,
        "name": calendar.name,
        "colorScheme": [_encode_color_meaning(c) for c in calendar.color_scheme],
        "isSelected": calendar.is_selected,
        "createdAt": calendar.created_at,
    }


def _decode_calendar(obj: Any) -> Calendar:
    return Calendar(
        id=_field(obj, "id", str),
        name=_field(obj, "name", str),
        color_scheme=tuple(_decode_color_meaning(c) for c in _field(obj, "colorScheme", list)),
        is_selected=_field(obj, "isSelected", bool),
        created_at=_field(obj, "createdAt", int),
    )


def encode_calendar_data(data: CalendarData, global_settings: AppSettings | None = None) -> str:
    payload = {
        "calendars": [_encode_calendar(c) for c in data.calendars],
        "selectedCalendarId": data.selected_calendar_id,
        "calendarDays": {
            calendar_id: [_encode_day(d.date, d.color) for d in days]
            for calendar_id, days in data.calendar_days.items()
        },
        "globalSettings": settings_to_dict(global_settings) if global_settings is not None else None,
    }
    return _dumps(payload)


def decode_calendar_data(text: str) -> CalendarData:
    data, _settings = decode_calendar_document(text)
    return data


def decode_calendar_document(text: str) -> tuple[CalendarData, AppSettings | None]:
    """Decode the document together with its embedded copy of global settings."""
    payload = _loads(text)
    selected = payload.get("selectedCalendarId") if isinstance(payload, dict) else None
    if selected is not None and not isinstance(selected, str):
        raise DecodeError("Field 'selectedCalendarId' has the wrong type")
    raw_days = _field(payload, "calendarDays", dict, {})
    calendar_days = {}
    for calendar_id, days in raw_days.items():
        if not isinstance(days, list):
            raise DecodeError(f"Day list for {calendar_id!r} must be a list")
        calendar_days[calendar_id] = tuple(_decode_day(d) for d in days)
    raw_settings = _field(payload, "globalSettings", dict, None)
    data = CalendarData(
        calendars=tuple(_decode_calendar(c) for c in _field(payload, "calendars", list)),
        selected_calendar_id=selected,
        calendar_days=calendar_days,
    )
    return data, settings_from_dict(raw_settings) if raw_settings is not None else None


# -------------------------- export / import --------------------------
def encode_export(settings: AppSettings, colored_days: Mapping[date, int]) -> str:
    return _dumps(
        {
            "settings": settings_to_dict(settings),
            "coloredDays": [_encode_day(d, c) for d, c in colored_days.items()],
        }
    )


def decode_export(text: str) -> tuple[AppSettings, dict[date, int]]:
    payload = _loads(text)
    settings = settings_from_dict(_field(payload, "settings", dict))
    colored: dict[date, int] = {}
    for item in _field(payload, "coloredDays", list):
        day = _decode_day(item)
        colored[day.date] = day.color
    return settings, colored

"""
Encoding/decoding of the calendar document, settings and backups.
"""
from __future__ import annotations

import json
import sys
from datetime import date
from pathlib import Path

import pytest

# Garante que o pacote days seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from days.core.errors import DecodeError  # noqa: E402
from days.domain.models import AppSettings, Calendar, CalendarData, ColorMeaning, Day  # noqa: E402
from days.repositories import serialization as codec  # noqa: E402


def _document() -> CalendarData:
    work = Calendar(
        id="cal-work",
        name="Work",
        color_scheme=(ColorMeaning(0xFFE53E3E, "Bad"), ColorMeaning(0x80123456, "Meh")),
        is_selected=True,
        created_at=1754438400000,
    )
    home = Calendar(id="cal-home", name="Casa", color_scheme=(), is_selected=False, created_at=1)
    return CalendarData(
        calendars=(work, home),
        selected_calendar_id="cal-work",
        calendar_days={
            "cal-work": (Day(date(2025, 8, 6), 0xFF4CAF50), Day(date(2024, 2, 29), 0xFFFFFFFF)),
            "cal-home": (),
        },
    )


def test_document_round_trip_preserves_order_and_values():
    data = _document()
    assert codec.decode_calendar_data(codec.encode_calendar_data(data)) == data


def test_encoding_is_deterministic():
    data = _document()
    settings = AppSettings(is_dark_mode=True)
    assert codec.encode_calendar_data(data, settings) == codec.encode_calendar_data(data, settings)


def test_embedded_global_settings_are_decoded():
    settings = AppSettings(selected_color=0xFF000000, has_seen_onboarding=True)
    text = codec.encode_calendar_data(_document(), settings)
    data, embedded = codec.decode_calendar_document(text)
    assert data == _document()
    assert embedded == settings


@pytest.mark.parametrize("argb", [0x00000000, 0x7FFFFFFF, 0x80000000, 0xFFE53E3E, 0xFFFFFFFF])
def test_color_bits_survive_encoding(argb):
    assert codec.decode_color(codec.encode_color(argb)) == argb


def test_negative_color_decodes_to_same_bits():
    # signed 32-bit writers store 0xFFE53E3E as a negative number
    assert codec.decode_color({"argb": 0xFFE53E3E - (1 << 32)}) == 0xFFE53E3E
    assert codec.decode_color({"argb": -1}) == 0xFFFFFFFF


def test_unknown_fields_are_ignored():
    payload = json.loads(codec.encode_calendar_data(_document()))
    payload["schemaVersion"] = 7
    payload["calendars"][0]["emoji"] = "x"
    payload["calendarDays"]["cal-work"][0]["note"] = "ignored"
    assert codec.decode_calendar_data(json.dumps(payload)) == _document()


def test_missing_optional_fields_take_defaults():
    data = codec.decode_calendar_data('{"calendars": []}')
    assert data == CalendarData()

    settings = codec.decode_settings(
        json.dumps(
            {
                "selectedColor": {"argb": 1},
                "isDarkMode": False,
                "followSystemTheme": True,
                "availableColors": [],
            }
        )
    )
    assert settings.has_seen_onboarding is False


@pytest.mark.parametrize(
    "text",
    [
        "",
        "{",
        "[]",
        '{"calendars": [{"id": "x"}]}',
        '{"calendars": "nope"}',
        '{"calendars": [], "selectedCalendarId": 3}',
        '{"calendars": [], "calendarDays": {"a": [{"dateString": "2025-8-6", "color": {"argb": 1}}]}}',
        '{"calendars": [], "calendarDays": {"a": [{"dateString": "2025-02-30", "color": {"argb": 1}}]}}',
        '{"calendars": [], "calendarDays": {"a": [{"dateString": "2025-08-06", "color": {"argb": true}}]}}',
    ],
)
def test_malformed_documents_raise_decode_error(text):
    with pytest.raises(DecodeError):
        codec.decode_calendar_data(text)


@pytest.mark.parametrize("value", ["20250806", "2025-08-06T00:00:00", " 2025-08-06", "06-08-2025"])
def test_date_format_is_strict(value):
    with pytest.raises(DecodeError):
        codec.decode_date(value)


def test_legacy_days_use_date_string_shape():
    text = codec.encode_legacy_days({date(2025, 1, 2): 0xFF4CAF50})
    assert json.loads(text) == [{"dateString": "2025-01-02", "color": {"argb": 0xFF4CAF50}}]
    assert codec.decode_legacy_days(text) == {date(2025, 1, 2): 0xFF4CAF50}


def test_export_shape_and_round_trip():
    settings = AppSettings(available_colors=(ColorMeaning(0xFF112233, "Rest"),), selected_color=0xFF112233)
    days = {date(2025, 8, 6): 0xFF112233, date(2025, 8, 7): 0xFFE53E3E}
    text = codec.encode_export(settings, days)
    assert set(json.loads(text)) == {"settings", "coloredDays"}
    assert codec.decode_export(text) == (settings, days)


def test_export_requires_settings():
    with pytest.raises(DecodeError):
        codec.decode_export('{"coloredDays": []}')

"""
Command-line maintenance scripts against a temporary JSON data file.
"""
from __future__ import annotations

import asyncio
import importlib.util
import sys
from datetime import date
from pathlib import Path

import pytest

# Garante que o pacote days seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from days.core import config as core_config  # noqa: E402
from days.domain.colors import GREEN, parse_color  # noqa: E402


def _load_script(name: str):
    spec = importlib.util.spec_from_file_location(f"script_{name}", ROOT / "scripts" / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def data_file(tmp_path, monkeypatch):
    path = tmp_path / "data.json"
    monkeypatch.setenv("DAYS_STORAGE_BACKEND", "json")
    monkeypatch.setenv("DAYS_DATA_FILE", str(path))
    core_config.get_settings.cache_clear()
    yield path
    core_config.get_settings.cache_clear()


def test_paint_day_then_list(data_file, capsys):
    paint_day = _load_script("paint_day")

    asyncio.run(paint_day.paint(date(2025, 8, 6), parse_color("#4CAF50"), None))
    asyncio.run(paint_day.list_days(None))

    out = capsys.readouterr().out
    assert "2025-08-06 pintado com #FF4CAF50" in out
    assert "2025-08-06  #FF4CAF50" in out


def test_paint_day_clear(data_file, capsys):
    paint_day = _load_script("paint_day")

    asyncio.run(paint_day.paint(date(2025, 8, 6), GREEN, None))
    asyncio.run(paint_day.paint(date(2025, 8, 6), None, None))
    asyncio.run(paint_day.list_days(None))

    assert "Nenhum dia colorido" in capsys.readouterr().out


def test_paint_day_rejects_bad_color(data_file, monkeypatch):
    paint_day = _load_script("paint_day")
    monkeypatch.setattr(sys, "argv", ["paint_day.py", "--date", "2025-08-06", "--color", "verde"])
    with pytest.raises(SystemExit) as exc_info:
        paint_day.main()
    assert "Invalid color" in str(exc_info.value.code)
    assert not data_file.exists()
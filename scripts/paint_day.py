#!/usr/bin/env python3
"""
Pintar, limpar ou listar dias coloridos do calendario selecionado.

Uso:
  python scripts/paint_day.py --date 2025-08-06 --color "#4CAF50"
  python scripts/paint_day.py --date 2025-08-06 --clear
  python scripts/paint_day.py --list [--calendar ID]
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

# Garantir que o pacote days seja importável quando rodado diretamente
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from days.app_factory import create_local_repository
from days.core.config import get_settings
from days.core.errors import DaysError
from days.domain.colors import TRANSPARENT, format_color, parse_color


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"data invalida: {value!r} (use AAAA-MM-DD)") from None


async def paint(day: date, color: int | None, calendar_id: str | None) -> None:
    repo = create_local_repository()
    if color is None or color == TRANSPARENT:
        await repo.remove_day_color(day, calendar_id)
        print(f"OK: {day.isoformat()} limpo")
        return
    await repo.save_day_color(day, color, calendar_id)
    print(f"OK: {day.isoformat()} pintado com {format_color(color)}")


async def list_days(calendar_id: str | None) -> None:
    repo = create_local_repository()
    colored = await repo.get_all_colored_days(calendar_id)
    if not colored:
        print("Nenhum dia colorido")
        return
    for day in sorted(colored):
        print(f"{day.isoformat()}  {format_color(colored[day])}")


def main() -> None:
    ap = argparse.ArgumentParser(description="Pintar dias no Day Tracker")
    ap.add_argument("--date", type=_parse_date, help="Dia no formato AAAA-MM-DD")
    ap.add_argument("--color", help='Cor "#RRGGBB", "#AARRGGBB" ou inteiro ARGB')
    ap.add_argument("--clear", action="store_true", help="Remove a cor do dia")
    ap.add_argument("--list", action="store_true", help="Lista os dias coloridos")
    ap.add_argument("--calendar", help="ID do calendario (padrao: o selecionado)")
    args = ap.parse_args()
    logging.basicConfig(level=get_settings().log_level)

    if args.list:
        asyncio.run(list_days(args.calendar))
        return
    if args.date is None or (args.color is None and not args.clear):
        ap.error("informe --date com --color ou --clear, ou use --list")
    try:
        color = None if args.clear else parse_color(args.color)
        asyncio.run(paint(args.date, color, args.calendar))
    except DaysError as exc:
        raise SystemExit(f"Erro: {exc.message}") from exc


if __name__ == "__main__":
    main()

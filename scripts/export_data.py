#!/usr/bin/env python3
"""
Export settings and the current calendar's colored days as a JSON backup.

Uso:
  python scripts/export_data.py [--output backup.json]
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Garantir que o pacote days seja importável quando rodado diretamente
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from days.app_factory import create_local_repository
from days.core.config import get_settings


async def export(output: Path | None) -> None:
    repo = create_local_repository()
    text = await repo.export_data()
    if output is None:
        sys.stdout.write(text + "\n")
        return
    output.write_text(text, encoding="utf-8")
    print(f"OK: backup written to {output}")


def main() -> None:
    ap = argparse.ArgumentParser(description="Export Day Tracker data")
    ap.add_argument("--output", type=Path, help="Destination file (default: stdout)")
    args = ap.parse_args()
    logging.basicConfig(level=get_settings().log_level)
    asyncio.run(export(args.output))


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover
        sys.stderr.write(f"Erro: {exc}\n")
        raise SystemExit(1)

#!/usr/bin/env python3
"""
Restore a backup produced by export_data.py. Nothing changes if the file is invalid.

Uso:
  python scripts/import_data.py --input backup.json
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


async def restore(text: str) -> bool:
    repo = create_local_repository()
    return await repo.import_data(text)


def main() -> None:
    ap = argparse.ArgumentParser(description="Import Day Tracker data")
    ap.add_argument("--input", type=Path, required=True, help="Backup file to restore")
    args = ap.parse_args()
    logging.basicConfig(level=get_settings().log_level)

    if not args.input.exists():
        raise SystemExit(f"Arquivo nao encontrado: {args.input}")
    text = args.input.read_text(encoding="utf-8")
    if not asyncio.run(restore(text)):
        raise SystemExit("Backup invalido; nenhum dado foi alterado")
    print(f"OK: backup {args.input} restaurado")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover
        sys.stderr.write(f"Erro: {exc}\n")
        raise SystemExit(1)

#!/usr/bin/env python3
"""
Apagar todos os dados locais (calendarios, dias coloridos, configuracoes).

Uso:
  python scripts/reset_data.py --yes
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

from days.app_factory import create_local_repository, create_session_manager
from days.core.config import get_settings


async def reset(include_session: bool) -> None:
    repo = create_local_repository()
    await repo.reset_all_data()
    if include_session:
        create_session_manager().clear_session()


def main() -> None:
    ap = argparse.ArgumentParser(description="Resetar dados do Day Tracker")
    ap.add_argument("--yes", action="store_true", help="Confirma a remocao de todos os dados")
    ap.add_argument("--include-session", action="store_true", help="Tambem remove o token da API")
    args = ap.parse_args()
    if not args.yes:
        raise SystemExit("Use --yes para confirmar")
    logging.basicConfig(level=get_settings().log_level)

    asyncio.run(reset(args.include_session))
    print("OK: dados removidos")
    if args.include_session:
        print("  Sessao da API encerrada")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover
        sys.stderr.write(f"Erro: {exc}\n")
        raise SystemExit(1)

"""Create (or recreate) the preferences table for the sql storage backend."""
from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # registers Preference on Base.metadata

logger = logging.getLogger(__name__)


def create_all(drop_first: bool = False) -> None:
    engine = get_engine()
    if drop_first:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.debug("Preference tables ready on %s", engine.url.render_as_string(hide_password=True))


def main() -> None:
    ap = argparse.ArgumentParser(description="Create the Day Tracker preference tables")
    ap.add_argument("--drop", action="store_true", help="Drop existing tables first (erases stored data)")
    args = ap.parse_args()
    try:
        create_all(drop_first=args.drop)
    except (SQLAlchemyError, RuntimeError) as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
    print("Preference tables created successfully.")


if __name__ == "__main__":
    main()

from __future__ import annotations

import os
import sys
from typing import NoReturn

from alembic import command
from alembic.config import Config as AlembicConfig

# Ensure project root on path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)


def run_migrations(database_url: str) -> None:
    alembic_ini = os.path.join(ROOT, "alembic.ini")
    acfg = AlembicConfig(alembic_ini)
    acfg.set_main_option("script_location", os.path.join(ROOT, "migrations"))
    # Pass URL via env override supported by migrations/env.py
    os.environ.setdefault("DATABASE_URL", database_url)
    command.upgrade(acfg, "head")


def main() -> NoReturn:
    url = os.environ.get("DATABASE_URL", "sqlite:///dev.db")
    print(f"Using DATABASE_URL={url}")
    run_migrations(url)
    print("Done.")
    raise SystemExit(0)


if __name__ == "__main__":
    main()

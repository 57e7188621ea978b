"""Run the product_codes -> products migration outside the HTTP surface.

Usage: python scripts/migrate_product_codes.py [--page-size 1000] [--batch-size 500]
Safe to re-run: existing codes are skipped.
"""
from __future__ import annotations

import argparse
import os
import sys

sys.path.append(os.getcwd())

from catalog import create_app  # noqa: E402
from catalog.errors import MigrationError  # noqa: E402
from catalog.migration_service import DEFAULT_BATCH_SIZE, DEFAULT_PAGE_SIZE, migrate  # noqa: E402


def main() -> int:
    p = argparse.ArgumentParser(description="Migrate legacy product_codes into products")
    p.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)
    p.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE)
    args = p.parse_args()

    app = create_app()
    with app.app_context():
        try:
            result = migrate(page_size=args.page_size, batch_size=args.batch_size)
        except MigrationError as e:
            print(f"Migration failed: {e.detail} (inserted so far: {e.inserted_so_far})")
            return 1
    print(f"Migration complete. total_codes={result.total_codes} inserted={result.inserted}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""product_codes -> products migration.

Pure row mapping plus a batched, conflict-skipping bulk insert. Re-running is
safe: codes that already exist are skipped by the store's unique constraint,
so a second run after success inserts nothing.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import MigrationError, StoreFailure
from .metrics import increment
from .product_repo import ProductCodeRepo, ProductRepo
from .schemas import empty_images

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000
DEFAULT_BATCH_SIZE = 500


@dataclass(frozen=True)
class MigrationResult:
    total_codes: int
    inserted: int


def _generated(data: Any) -> str:
    if isinstance(data, Mapping):
        value = data.get("generated")
        if isinstance(value, str):
            return value
    return ""


def map_product_code(row: Mapping[str, Any]) -> dict[str, Any] | None:
    """Derive a products row from a legacy product_codes row; None when it has no code."""
    code = _generated(row.get("product_code_data"))
    if not code:
        return None

    compat = row.get("compatibility_data")
    items = compat.get("items") if isinstance(compat, Mapping) else None
    items = [i for i in (items or []) if isinstance(i, Mapping)]

    brands = list(dict.fromkeys(i.get("marca") for i in items if i.get("marca")))
    # Only the first compatibility item feeds model/sub_model; multi-model
    # products keep one model here. Revisit if aggregation is wanted.
    first = items[0] if items else {}
    description = _generated(row.get("description_data"))

    return {
        "product_code_id": row.get("id"),
        "code": code,
        "name": _generated(compat),
        "description": description,
        "rhino_code": code,
        "rhino_description": description,
        "brand": brands[0] if brands else None,
        "brands": brands,
        "model": first.get("modelo"),
        "sub_model": first.get("subModelo"),
        "price": 0,
        "stock": 0,
        "images": empty_images(),
        "status": "draft",
    }


def migrate(
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    batch_size: int = DEFAULT_BATCH_SIZE,
    legacy_repo: ProductCodeRepo | None = None,
    product_repo: ProductRepo | None = None,
) -> MigrationResult:
    legacy_repo = legacy_repo or ProductCodeRepo()
    product_repo = product_repo or ProductRepo()

    legacy_rows: list[dict[str, Any]] = []
    offset = 0
    while True:
        try:
            page = legacy_repo.page(offset, page_size)
        except StoreFailure as e:
            raise MigrationError(e.detail, inserted_so_far=0) from e
        legacy_rows.extend(page)
        if len(page) < page_size:
            break
        offset += page_size
    total = len(legacy_rows)
    logger.info("migrate: read %d product_codes", total)

    rows = [r for r in (map_product_code(pc) for pc in legacy_rows) if r is not None]
    dropped = total - len(rows)
    if dropped:
        logger.info("migrate: skipped %d product_codes without a generated code", dropped)

    inserted = 0
    for start in range(0, len(rows), batch_size):
        batch = rows[start : start + batch_size]
        try:
            inserted += product_repo.insert_ignore_conflicts(batch)
        except StoreFailure as e:
            logger.error("migrate: batch at %d failed after %d inserted: %s", start, inserted, e.detail)
            raise MigrationError(e.detail, inserted_so_far=inserted, total_codes=total) from e

    increment("products.migrate.inserted", value=inserted)
    logger.info("migrate: done total_codes=%d inserted=%d", total, inserted)
    return MigrationResult(total_codes=total, inserted=inserted)


__all__ = ["MigrationResult", "map_product_code", "migrate", "DEFAULT_PAGE_SIZE", "DEFAULT_BATCH_SIZE"]

"""Product + legacy product_code persistence.

Rows cross this boundary as plain dicts so callers never hold detached ORM
instances. Every SQLAlchemy failure is re-raised as StoreFailure with the
driver message intact.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db import get_session
from .errors import StoreFailure
from .models import Product, ProductCode
from .schemas import normalize_images

logger = logging.getLogger(__name__)


def serialize_product(p: Product) -> dict[str, Any]:
    return {
        "id": p.id,
        "product_code_id": p.product_code_id,
        "code": p.code,
        "name": p.name,
        "description": p.description,
        "price": float(p.price) if p.price is not None else 0.0,
        "stock": p.stock,
        "rhino_code": p.rhino_code,
        "rhino_description": p.rhino_description,
        "brand": p.brand,
        "brands": list(p.brands or []),
        "model": p.model,
        "sub_model": p.sub_model,
        "images": normalize_images(p.images),
        "status": p.status,
        "created_at": p.created_at.isoformat() if p.created_at else None,
        "updated_at": p.updated_at.isoformat() if p.updated_at else None,
    }


@contextmanager
def _store_call(what: str) -> Iterator[Session]:
    db = get_session()
    try:
        yield db
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("store call failed op=%s err=%s", what, e)
        raise StoreFailure(str(getattr(e, "orig", None) or e)) from e
    finally:
        db.close()


class ProductFilters:
    def __init__(self, search: str | None = None, status: str | None = None) -> None:
        self.search = (search or "").strip() or None
        # "all" is the list UI's explicit no-filter value
        self.status = status if status and status != "all" else None


class ProductRepo:
    def list(self, filters: ProductFilters, page: int, size: int) -> tuple[list[dict[str, Any]], int]:
        with _store_call("list") as db:
            stmt = select(Product)
            if filters.search:
                s = filters.search
                stmt = stmt.where(
                    or_(
                        Product.code.icontains(s, autoescape=True),
                        Product.name.icontains(s, autoescape=True),
                        Product.brand.icontains(s, autoescape=True),
                    )
                )
            if filters.status:
                stmt = stmt.where(Product.status == filters.status)
            total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
            stmt = stmt.order_by(Product.created_at.desc(), Product.code.asc())
            offset = (page - 1) * size
            rows = db.execute(stmt.limit(size).offset(offset)).scalars().all()
            return [serialize_product(p) for p in rows], int(total)

    def get_by_code(self, code: str) -> dict[str, Any] | None:
        with _store_call("get") as db:
            p = db.execute(select(Product).where(Product.code == code)).scalar_one_or_none()
            return serialize_product(p) if p is not None else None

    def update_fields(self, code: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Partial update keyed by code; None when no row matches."""
        with _store_call("update") as db:
            p = db.execute(select(Product).where(Product.code == code)).scalar_one_or_none()
            if p is None:
                return None
            for key, value in fields.items():
                setattr(p, key, value)
            if fields:
                p.updated_at = datetime.now(UTC)
                db.commit()
                db.refresh(p)
            return serialize_product(p)

    def insert_ignore_conflicts(self, rows: Sequence[dict[str, Any]]) -> int:
        """INSERT ... ON CONFLICT (code) DO NOTHING; returns rows actually inserted.

        Uses RETURNING when the dialect supports it for executemany, else the
        driver rowcount, else len(rows).
        """
        if not rows:
            return 0
        now = datetime.now(UTC)
        params = [
            {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, **r} for r in rows
        ]
        with _store_call("insert") as db:
            dialect = db.get_bind().dialect
            if dialect.name == "postgresql":
                from sqlalchemy.dialects.postgresql import insert
            elif dialect.name == "sqlite":
                from sqlalchemy.dialects.sqlite import insert
            else:  # pragma: no cover - deployment is postgres, tests sqlite
                raise StoreFailure(f"conflict-aware insert unsupported on {dialect.name}")
            stmt = insert(Product.__table__).on_conflict_do_nothing(index_elements=["code"])
            if getattr(dialect, "insert_executemany_returning", False):
                result = db.execute(stmt.returning(Product.__table__.c.code), params)
                inserted = len(result.all())
            else:
                result = db.execute(stmt, params)
                inserted = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(params)
            db.commit()
            return inserted


class ProductCodeRepo:
    """Read-only access to the legacy product_codes table."""

    def page(self, offset: int, limit: int) -> list[dict[str, Any]]:
        with _store_call("legacy_page") as db:
            rows = db.execute(
                select(ProductCode).order_by(ProductCode.id).offset(offset).limit(limit)
            ).scalars().all()
            return [
                {
                    "id": r.id,
                    "compatibility_data": r.compatibility_data,
                    "description_data": r.description_data,
                    "product_code_data": r.product_code_data,
                }
                for r in rows
            ]


__all__ = ["ProductRepo", "ProductCodeRepo", "ProductFilters", "serialize_product"]

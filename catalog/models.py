"""SQLAlchemy models for the catalog and the shared RBAC tables."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


# --- RBAC (shared identity store, read only here) ---
class Role(Base):
    __tablename__ = "roles"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True)
    hierarchy_level: Mapped[int] = mapped_column(Integer)


class UserRole(Base):
    __tablename__ = "user_roles"
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)  # one role per user
    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"))


# --- Legacy source ---
class ProductCode(Base):
    __tablename__ = "product_codes"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    compatibility_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)  # {generated, items:[{marca, modelo, subModelo}]}
    description_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)  # {generated}
    product_code_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)  # {generated}


# --- Catalog ---
PRODUCT_STATUSES = ("draft", "published", "archived")


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_nonneg"),
        CheckConstraint("stock >= 0", name="ck_products_stock_nonneg"),
        CheckConstraint(
            "status IN ('draft', 'published', 'archived')", name="ck_products_status"
        ),
        Index("ix_products_created_at", "created_at"),
    )
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    product_code_id: Mapped[str | None] = mapped_column(
        ForeignKey("product_codes.id", ondelete="SET NULL"), nullable=True
    )
    code: Mapped[str] = mapped_column(String(120), unique=True)
    name: Mapped[str] = mapped_column(Text, default="")
    description: Mapped[str] = mapped_column(Text, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    rhino_code: Mapped[str] = mapped_column(String(120), default="")
    rhino_description: Mapped[str] = mapped_column(Text, default="")
    brand: Mapped[str | None] = mapped_column(String(120), nullable=True)
    brands: Mapped[list] = mapped_column(JSON, default=list)
    model: Mapped[str | None] = mapped_column(String(120), nullable=True)
    sub_model: Mapped[str | None] = mapped_column(String(120), nullable=True)
    images: Mapped[dict] = mapped_column(JSON, default=dict)
    status: Mapped[str] = mapped_column(String(20), default="draft")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


__all__ = ["Base", "Role", "UserRole", "ProductCode", "Product", "PRODUCT_STATUSES"]

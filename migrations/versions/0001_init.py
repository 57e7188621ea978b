"""Initial schema: shared RBAC tables, legacy product_codes, products

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-19
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    conn = op.get_bind()
    existing_tables = set(inspect(conn).get_table_names())
    # roles / user_roles / product_codes may already be owned by the shared
    # identity store or the legacy system; only create what is missing.
    if "roles" not in existing_tables:
        op.create_table(
            "roles",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=50), nullable=False, unique=True),
            sa.Column("hierarchy_level", sa.Integer(), nullable=False),
        )
    if "user_roles" not in existing_tables:
        op.create_table(
            "user_roles",
            sa.Column("user_id", sa.String(length=64), primary_key=True),
            sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id"), nullable=False),
        )
    if "product_codes" not in existing_tables:
        op.create_table(
            "product_codes",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("compatibility_data", sa.JSON()),
            sa.Column("description_data", sa.JSON()),
            sa.Column("product_code_data", sa.JSON()),
        )
    op.create_table(
        "products",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("product_code_id", sa.String(length=36), sa.ForeignKey("product_codes.id", ondelete="SET NULL")),
        sa.Column("code", sa.String(length=120), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rhino_code", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("rhino_description", sa.Text(), nullable=False, server_default=""),
        sa.Column("brand", sa.String(length=120)),
        sa.Column("brands", sa.JSON(), nullable=False),
        sa.Column("model", sa.String(length=120)),
        sa.Column("sub_model", sa.String(length=120)),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.CheckConstraint("price >= 0", name="ck_products_price_nonneg"),
        sa.CheckConstraint("stock >= 0", name="ck_products_stock_nonneg"),
        sa.CheckConstraint("status IN ('draft', 'published', 'archived')", name="ck_products_status"),
    )
    op.create_index("ix_products_created_at", "products", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_products_created_at", table_name="products")
    op.drop_table("products")

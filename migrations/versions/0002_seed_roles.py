"""Seed the six catalog roles

Revision ID: 0002_seed_roles
Revises: 0001_init
Create Date: 2026-10-19
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002_seed_roles"
down_revision = "0001_init"
branch_labels = None
depends_on = None

ROLES = [
    ("super_admin", 100),
    ("admin", 80),
    ("editor", 60),
    ("quality_assurance", 40),
    ("approver", 30),
    ("viewer", 10),
]


def upgrade() -> None:
    conn = op.get_bind()
    existing = {r[0] for r in conn.execute(sa.text("SELECT name FROM roles")).fetchall()}
    for name, level in ROLES:
        if name in existing:
            continue
        conn.execute(
            sa.text("INSERT INTO roles (name, hierarchy_level) VALUES (:n, :l)"),
            {"n": name, "l": level},
        )


def downgrade() -> None:
    # roles may be shared with other apps; leave them in place
    pass

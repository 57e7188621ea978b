"""Assign a catalog role to a user id (local dev; production roles live in the shared identity store)."""
from __future__ import annotations

import argparse
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from sqlalchemy import select  # noqa: E402

from catalog import create_app  # noqa: E402
from catalog.db import get_session  # noqa: E402
from catalog.models import Role, UserRole  # noqa: E402
from catalog.roles import ROLE_NAMES  # noqa: E402


def main() -> int:
    p = argparse.ArgumentParser(description="Assign a role to a user id")
    p.add_argument("--user-id", required=True)
    p.add_argument("--role", required=True, choices=ROLE_NAMES)
    args = p.parse_args()

    app = create_app()
    with app.app_context():
        db = get_session()
        try:
            role = db.execute(select(Role).where(Role.name == args.role)).scalar_one_or_none()
            if role is None:
                print(f"Role '{args.role}' missing; run tools/init_db.py first")
                return 1
            assignment = db.get(UserRole, args.user_id)
            if assignment is None:
                db.add(UserRole(user_id=args.user_id, role_id=role.id))
            else:
                assignment.role_id = role.id
            db.commit()
            print(f"user {args.user_id} -> {args.role}")
        finally:
            db.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

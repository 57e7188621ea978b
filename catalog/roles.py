"""Role resolution + capability predicates.

RoleName is the closed set of roles stored in the shared RBAC tables. The
two predicates below are the only capability checks in the service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, cast, get_args

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from .db import get_session
from .errors import StoreFailure
from .models import Role, UserRole as UserRoleRow

logger = logging.getLogger(__name__)

RoleName = Literal[
    "super_admin",
    "admin",
    "editor",
    "quality_assurance",
    "approver",
    "viewer",
]

ROLE_NAMES: tuple[RoleName, ...] = get_args(RoleName)

# Seeded hierarchy levels (relative ranking only; predicates use names)
DEFAULT_HIERARCHY: dict[RoleName, int] = {
    "super_admin": 100,
    "admin": 80,
    "editor": 60,
    "quality_assurance": 40,
    "approver": 30,
    "viewer": 10,
}


@dataclass(frozen=True)
class UserRole:
    user_id: str
    role: RoleName
    hierarchy_level: int


def can_edit_products(role: RoleName) -> bool:
    """Admin and super_admin can edit all product data."""
    return role in ("super_admin", "admin")


def can_edit_images(role: RoleName) -> bool:
    """Admin, super_admin and editor can edit product images."""
    return role in ("super_admin", "admin", "editor")


def resolve_role(user_id: str | None) -> UserRole | None:
    """Look up the caller's role via user_roles -> roles.

    None when there is no identity, no assignment, or the stored name is
    outside RoleName. Store errors raise StoreFailure.
    """
    if not user_id:
        return None
    db = get_session()
    try:
        row = db.execute(
            select(Role.name, Role.hierarchy_level)
            .join(UserRoleRow, UserRoleRow.role_id == Role.id)
            .where(UserRoleRow.user_id == user_id)
        ).first()
    except SQLAlchemyError as e:
        raise StoreFailure(f"role lookup failed: {e}") from e
    finally:
        db.close()
    if row is None:
        return None
    name, level = row[0], row[1]
    if name not in ROLE_NAMES:
        logger.warning("unknown role name=%s user_id=%s", name, user_id)
        return None
    return UserRole(user_id=user_id, role=cast(RoleName, name), hierarchy_level=int(level))


__all__ = [
    "RoleName",
    "ROLE_NAMES",
    "DEFAULT_HIERARCHY",
    "UserRole",
    "can_edit_products",
    "can_edit_images",
    "resolve_role",
]

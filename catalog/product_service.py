"""Product read helpers and the role-gated update path.

update_product is the single write entry point for product rows:

1. no resolvable role            -> SessionError (401)
2. cannot edit images            -> AuthzError (403), the floor for any write
3. editor tier                   -> only ``images`` may be present, else 403
4. admin / super_admin           -> partial validation of every supplied field
5. persist keyed by code         -> NotFoundError when no row matches
"""
from __future__ import annotations

import logging
from typing import Any

from .app_authz import AuthzError
from .app_sessions import SessionError
from .errors import NotFoundError, ValidationError
from .metrics import increment
from .pagination import PageRequest
from .product_repo import ProductFilters, ProductRepo
from .roles import UserRole, can_edit_images, can_edit_products, resolve_role
from .schemas import validate_images, validate_product_patch

logger = logging.getLogger(__name__)


def list_products(
    *, search: str | None, status: str | None, page_req: PageRequest, repo: ProductRepo | None = None
) -> tuple[list[dict[str, Any]], int]:
    repo = repo or ProductRepo()
    return repo.list(ProductFilters(search=search, status=status), page_req["page"], page_req["size"])


def get_product(code: str, *, repo: ProductRepo | None = None) -> dict[str, Any]:
    repo = repo or ProductRepo()
    row = repo.get_by_code(code)
    if row is None:
        raise NotFoundError(f"product '{code}' not found")
    return row


def _restrict_patch(patch: Any, role: UserRole) -> dict[str, Any]:
    if not isinstance(patch, dict):
        raise ValidationError([{"field": "body", "message": "must be a JSON object"}])
    if not can_edit_products(role.role):
        extra = sorted(k for k in patch if k != "images")
        if extra:
            raise AuthzError("editors may only update images", required="edit_products")
        if "images" not in patch:
            return {}
        images, errors = validate_images(patch["images"])
        if errors:
            raise ValidationError(errors)
        return {"images": images}
    clean, errors = validate_product_patch(patch)
    if errors:
        raise ValidationError(errors)
    return clean


def update_product(
    code: str,
    patch: Any,
    *,
    user_id: str | None = None,
    role: UserRole | None = None,
    repo: ProductRepo | None = None,
) -> dict[str, Any]:
    """Apply a role-scoped partial update and return the stored row.

    ``role`` may be passed when the caller already resolved it for this
    request; otherwise it is looked up from ``user_id``.
    """
    if role is None:
        role = resolve_role(user_id)
    if role is None:
        raise SessionError("Not authenticated")
    if not can_edit_images(role.role):
        raise AuthzError("forbidden", required="edit_images")

    fields = _restrict_patch(patch, role)
    repo = repo or ProductRepo()
    row = repo.update_fields(code, fields)
    if row is None:
        raise NotFoundError(f"product '{code}' not found")
    if fields:
        increment("products.updated", {"role": role.role})
        logger.info("product updated code=%s user_id=%s fields=%s", code, role.user_id, sorted(fields))
    return row


__all__ = ["list_products", "get_product", "update_product"]

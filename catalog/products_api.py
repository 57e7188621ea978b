"""Products API

GET    /products                                  list + search + status filter + pagination
GET    /products/<code>                           single row
PATCH  /products/<code>                           role-gated partial update
POST   /products/migrate                          product_codes -> products (admins)
POST   /products/<code>/images/main/<side>        replace a main slot (multipart ``file``)
DELETE /products/<code>/images/main/<side>        clear a main slot
POST   /products/<code>/images/details/<side>     append a detail image (multipart ``file``)
DELETE /products/<code>/images/details/<side>     remove a detail image (JSON ``{"url"}``)
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask.typing import ResponseReturnValue

from .app_authz import current_role, require_capability, require_role
from .errors import StoreFailure, ValidationError, field_error
from .image_service import (
    UploadedImage,
    add_detail_image,
    remove_detail_image,
    remove_main_image,
    replace_main_image,
)
from .image_store import ImageStore
from .migration_service import migrate
from .pagination import make_page_response, parse_page_params
from .product_service import get_product, list_products, update_product
from .roles import UserRole, can_edit_images, can_edit_products

bp = Blueprint("products_api", __name__, url_prefix="/products")


def image_store() -> ImageStore:
    store = getattr(current_app, "image_store", None)
    if store is None:
        raise StoreFailure("image store not configured")
    return store


def uploaded_file() -> UploadedImage:
    f = request.files.get("file")
    if f is None or not f.filename:
        raise ValidationError([field_error("file", "No file provided")])
    return UploadedImage(filename=f.filename, data=f.read(), content_type=f.mimetype or None)


def _role() -> UserRole:
    role = current_role()
    assert role is not None  # guarded by require_capability
    return role


@bp.get("")
@require_role
def list_route() -> ResponseReturnValue:
    page_req = parse_page_params(request.args)
    rows, total = list_products(
        search=request.args.get("search"),
        status=request.args.get("status"),
        page_req=page_req,
    )
    return jsonify(make_page_response(rows, page_req, total))


@bp.get("/<code>")
@require_role
def get_route(code: str) -> ResponseReturnValue:
    return jsonify(get_product(code))


@bp.patch("/<code>")
def patch_route(code: str) -> ResponseReturnValue:
    body = request.get_json(silent=True)
    if body is None and not request.get_data():
        body = {}
    return jsonify(update_product(code, body, role=current_role()))


@bp.post("/migrate")
@require_capability(can_edit_products, "edit_products")
def migrate_route() -> ResponseReturnValue:
    cfg = current_app.config
    result = migrate(
        page_size=int(cfg.get("MIGRATE_PAGE_SIZE", 1000)),
        batch_size=int(cfg.get("MIGRATE_BATCH_SIZE", 500)),
    )
    message = "Migration complete" if result.total_codes else "No product_codes found"
    return jsonify({"message": message, "total_codes": result.total_codes, "inserted": result.inserted})


@bp.post("/<code>/images/main/<side>")
@require_capability(can_edit_images, "edit_images")
def replace_main_route(code: str, side: str) -> ResponseReturnValue:
    row = replace_main_image(code, side, uploaded_file(), store=image_store(), role=_role())
    return jsonify(row)


@bp.delete("/<code>/images/main/<side>")
@require_capability(can_edit_images, "edit_images")
def remove_main_route(code: str, side: str) -> ResponseReturnValue:
    return jsonify(remove_main_image(code, side, store=image_store(), role=_role()))


@bp.post("/<code>/images/details/<side>")
@require_capability(can_edit_images, "edit_images")
def add_detail_route(code: str, side: str) -> ResponseReturnValue:
    row = add_detail_image(code, side, uploaded_file(), store=image_store(), role=_role())
    return jsonify(row)


@bp.delete("/<code>/images/details/<side>")
@require_capability(can_edit_images, "edit_images")
def remove_detail_route(code: str, side: str) -> ResponseReturnValue:
    data = request.get_json(silent=True) or {}
    url = data.get("url") if isinstance(data, dict) else None
    if not url or not isinstance(url, str):
        raise ValidationError([field_error("url", "No URL provided")])
    return jsonify(remove_detail_image(code, side, url, store=image_store(), role=_role()))

"""Image slot editing on top of the object store and update_product.

Policy: the stored row is authoritative and object deletes are best-effort.

* replace / add: upload first; persist the new URL; only then try to delete
  the replaced object. If persisting fails the fresh upload is deleted
  (best-effort) and the error propagates.
* remove: try to delete the object, then drop the URL from the row whether or
  not the delete worked.

Swallowed delete failures are logged and counted (``images.delete.swallowed``);
they may leave orphaned objects but never block an edit.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any

from .errors import NotFoundError, StoreFailure, ValidationError, field_error
from .image_store import ImageStore, StoredImage, build_key, slot_folder
from .metrics import increment
from .product_service import get_product, update_product
from .roles import UserRole
from .schemas import MAX_DETAIL_IMAGES, SIDES, remove_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedImage:
    filename: str
    data: bytes
    content_type: str | None = None


def _check_side(side: str) -> None:
    if side not in SIDES:
        raise ValidationError([field_error("side", f"must be one of {', '.join(SIDES)}")])


def best_effort_delete(store: ImageStore, url: str) -> bool:
    try:
        store.delete(url)
    except StoreFailure as e:
        increment("images.delete.swallowed")
        logger.warning("image delete failed (ignored) url=%s err=%s", url, e.detail)
        return False
    return True


def _upload(store: ImageStore, folder: str, image: UploadedImage) -> StoredImage:
    stored = store.put(build_key(folder, image.filename), image.data, image.content_type)
    increment("images.uploaded")
    return stored


def _persist_or_discard(code: str, images: dict[str, Any], *, role: UserRole,
                        store: ImageStore, fresh: StoredImage) -> dict[str, Any]:
    try:
        return update_product(code, {"images": images}, role=role)
    except Exception:
        best_effort_delete(store, fresh.url)
        raise


def replace_main_image(code: str, side: str, image: UploadedImage, *,
                       store: ImageStore, role: UserRole) -> dict[str, Any]:
    _check_side(side)
    images = copy.deepcopy(get_product(code)["images"])
    previous = images["main"].get(side)
    fresh = _upload(store, slot_folder(code, "main"), image)
    images["main"][side] = fresh.url
    row = _persist_or_discard(code, images, role=role, store=store, fresh=fresh)
    if previous and previous != fresh.url:
        best_effort_delete(store, previous)
    return row


def remove_main_image(code: str, side: str, *, store: ImageStore, role: UserRole) -> dict[str, Any]:
    _check_side(side)
    product = get_product(code)
    previous = product["images"]["main"].get(side)
    if not previous:
        return product
    best_effort_delete(store, previous)
    return update_product(code, {"images": remove_url(product["images"], previous)}, role=role)


def add_detail_image(code: str, side: str, image: UploadedImage, *,
                     store: ImageStore, role: UserRole) -> dict[str, Any]:
    _check_side(side)
    images = copy.deepcopy(get_product(code)["images"])
    if len(images["details"][side]) >= MAX_DETAIL_IMAGES:
        raise ValidationError(
            [field_error(f"images.details.{side}", f"at most {MAX_DETAIL_IMAGES} images allowed")]
        )
    fresh = _upload(store, slot_folder(code, "details", side), image)
    images["details"][side].append(fresh.url)
    return _persist_or_discard(code, images, role=role, store=store, fresh=fresh)


def remove_detail_image(code: str, side: str, url: str, *,
                        store: ImageStore, role: UserRole) -> dict[str, Any]:
    _check_side(side)
    product = get_product(code)
    if url not in product["images"]["details"][side]:
        raise NotFoundError(f"image not attached to {code} details.{side}")
    best_effort_delete(store, url)
    return update_product(code, {"images": remove_url(product["images"], url)}, role=role)


__all__ = [
    "UploadedImage",
    "best_effort_delete",
    "replace_main_image",
    "remove_main_image",
    "add_detail_image",
    "remove_detail_image",
]

"""Payload validation for product patches and the structured image set.

Images shape (stored in products.images)::

    {"main": {"left"?: url, "right"?: url, "back"?: url},
     "details": {"left": [url..3], "right": [url..3], "back": [url..3]}}

Patch validation is partial: only supplied keys are checked, and an empty
object is a valid no-op.
"""
from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any, Literal
from urllib.parse import urlparse

from .errors import field_error
from .models import PRODUCT_STATUSES

Side = Literal["left", "right", "back"]
SIDES: tuple[Side, ...] = ("left", "right", "back")
MAX_DETAIL_IMAGES = 3

FieldErrors = list[dict[str, str]]

# column bounds: products.price Numeric(12, 2), products.stock Integer
MAX_PRICE = Decimal(10) ** 10
MAX_STOCK = 2**31 - 1


def empty_images() -> dict[str, Any]:
    return {"main": {}, "details": {"left": [], "right": [], "back": []}}


def normalize_images(raw: Any) -> dict[str, Any]:
    """Merge a stored value (possibly {} or None) into the full shape."""
    out = empty_images()
    if not isinstance(raw, Mapping):
        return out
    main = raw.get("main")
    if isinstance(main, Mapping):
        for side in SIDES:
            url = main.get(side)
            if isinstance(url, str) and url:
                out["main"][side] = url
    details = raw.get("details")
    if isinstance(details, Mapping):
        for side in SIDES:
            seq = details.get(side)
            if isinstance(seq, list):
                out["details"][side] = [u for u in seq if isinstance(u, str) and u]
    return out


def remove_url(images: Mapping[str, Any], url: str) -> dict[str, Any]:
    """Return a copy of images with every reference to url dropped."""
    out = normalize_images(copy.deepcopy(images))
    for side in SIDES:
        if out["main"].get(side) == url:
            del out["main"][side]
        out["details"][side] = [u for u in out["details"][side] if u != url]
    return out


def is_valid_url(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_images(value: Any, field: str = "images") -> tuple[dict[str, Any] | None, FieldErrors]:
    errors: FieldErrors = []
    if not isinstance(value, Mapping):
        return None, [field_error(field, "must be an object")]
    main = value.get("main")
    details = value.get("details")
    clean = empty_images()

    if not isinstance(main, Mapping):
        errors.append(field_error(f"{field}.main", "must be an object"))
    else:
        for side in SIDES:
            if side not in main:
                continue
            url = main[side]
            if not is_valid_url(url):
                errors.append(field_error(f"{field}.main.{side}", "must be a valid URL"))
            else:
                clean["main"][side] = url

    if not isinstance(details, Mapping):
        errors.append(field_error(f"{field}.details", "must be an object"))
    else:
        for side in SIDES:
            seq = details.get(side)
            path = f"{field}.details.{side}"
            if not isinstance(seq, list):
                errors.append(field_error(path, "must be a list"))
                continue
            if len(seq) > MAX_DETAIL_IMAGES:
                errors.append(field_error(path, f"at most {MAX_DETAIL_IMAGES} images allowed"))
            bad = [i for i, u in enumerate(seq) if not is_valid_url(u)]
            for i in bad:
                errors.append(field_error(f"{path}.{i}", "must be a valid URL"))
            if not bad:
                clean["details"][side] = list(seq)

    return (None, errors) if errors else (clean, [])


# ---- product patch ----------------------------------------------------------

READ_ONLY_FIELDS = frozenset(
    {"id", "code", "product_code_id", "rhino_code", "rhino_description", "created_at", "updated_at"}
)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _required_text(name: str, v: Any) -> tuple[Any, FieldErrors]:
    if not isinstance(v, str):
        return None, [field_error(name, "must be a string")]
    if not v:
        return None, [field_error(name, f"{name.capitalize()} is required")]
    return v, []


def _nullable_text(name: str, v: Any) -> tuple[Any, FieldErrors]:
    if v is None or isinstance(v, str):
        return v, []
    return None, [field_error(name, "must be a string or null")]


def _price(name: str, v: Any) -> tuple[Any, FieldErrors]:
    if not _is_number(v):
        return None, [field_error(name, "must be a number")]
    if v != v or v in (float("inf"), float("-inf")):
        return None, [field_error(name, "must be a finite number")]
    if v < 0:
        return None, [field_error(name, "Price must be >= 0")]
    price = Decimal(str(v))
    if price >= MAX_PRICE:
        return None, [field_error(name, f"Price must be < {MAX_PRICE}")]
    return price, []


def _stock(name: str, v: Any) -> tuple[Any, FieldErrors]:
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    if not isinstance(v, int) or isinstance(v, bool):
        return None, [field_error(name, "must be an integer")]
    if v < 0:
        return None, [field_error(name, "Stock must be >= 0")]
    if v > MAX_STOCK:
        return None, [field_error(name, f"Stock must be <= {MAX_STOCK}")]
    return v, []


def _status(name: str, v: Any) -> tuple[Any, FieldErrors]:
    if v not in PRODUCT_STATUSES:
        return None, [field_error(name, f"must be one of {', '.join(PRODUCT_STATUSES)}")]
    return v, []


def _brands(name: str, v: Any) -> tuple[Any, FieldErrors]:
    if not isinstance(v, list) or not all(isinstance(b, str) and b for b in v):
        return None, [field_error(name, "must be a list of non-empty strings")]
    return list(dict.fromkeys(v)), []


def _images(name: str, v: Any) -> tuple[Any, FieldErrors]:
    return validate_images(v, name)


_VALIDATORS: dict[str, Callable[[str, Any], tuple[Any, FieldErrors]]] = {
    "name": _required_text,
    "description": _required_text,
    "price": _price,
    "stock": _stock,
    "brand": _nullable_text,
    "brands": _brands,
    "model": _nullable_text,
    "sub_model": _nullable_text,
    "status": _status,
    "images": _images,
}


def validate_product_patch(body: Any) -> tuple[dict[str, Any], FieldErrors]:
    """Validate only the supplied fields. Unknown keys are dropped; read-only keys are errors."""
    if not isinstance(body, Mapping):
        return {}, [field_error("body", "must be a JSON object")]
    clean: dict[str, Any] = {}
    errors: FieldErrors = []
    for key, value in body.items():
        if key in READ_ONLY_FIELDS:
            errors.append(field_error(key, "read-only"))
            continue
        validator = _VALIDATORS.get(key)
        if validator is None:
            continue
        val, errs = validator(key, value)
        if errs:
            errors.extend(errs)
        else:
            clean[key] = val
    return clean, errors


__all__ = [
    "Side",
    "SIDES",
    "MAX_DETAIL_IMAGES",
    "MAX_PRICE",
    "MAX_STOCK",
    "empty_images",
    "normalize_images",
    "remove_url",
    "is_valid_url",
    "validate_images",
    "READ_ONLY_FIELDS",
    "validate_product_patch",
]

from __future__ import annotations

from decimal import Decimal

from catalog.schemas import (
    empty_images,
    normalize_images,
    remove_url,
    validate_images,
    validate_product_patch,
)
from tests.helpers import images, url


def _fields(errors):
    return {e["field"] for e in errors}


def test_empty_images_full_shape():
    assert empty_images() == {"main": {}, "details": {"left": [], "right": [], "back": []}}


def test_normalize_legacy_empty_object():
    assert normalize_images({}) == empty_images()
    assert normalize_images(None) == empty_images()


def test_normalize_drops_null_slots():
    raw = {"main": {"left": None, "right": url("r.png")}, "details": {"left": [url("a.png")]}}
    out = normalize_images(raw)
    assert out["main"] == {"right": url("r.png")}
    assert out["details"] == {"left": [url("a.png")], "right": [], "back": []}


def test_validate_images_ok():
    value = images({"left": url("m.png")}, back=[url("1.png"), url("2.png"), url("3.png")])
    clean, errors = validate_images(value)
    assert errors == []
    assert clean == value


def test_validate_images_detail_bound():
    value = images(left=[url(f"{i}.png") for i in range(4)])
    clean, errors = validate_images(value)
    assert clean is None
    assert "images.details.left" in _fields(errors)


def test_validate_images_partial_details_rejected():
    clean, errors = validate_images({"details": {"left": [url(f"{i}.png") for i in range(4)]}})
    assert clean is None
    assert {"images.main", "images.details.left", "images.details.right"} <= _fields(errors)


def test_validate_images_bad_urls():
    clean, errors = validate_images(images({"back": "not a url"}, right=["ftp://x/y", url("ok.png")]))
    assert clean is None
    assert {"images.main.back", "images.details.right.0"} == _fields(errors)


def test_validate_images_rejects_null_main_slot():
    _, errors = validate_images(images({"left": None}))
    assert "images.main.left" in _fields(errors)


def test_remove_url_everywhere():
    target = url("x.png")
    value = images({"left": target, "right": url("keep.png")}, left=[target, url("y.png")], back=[target])
    out = remove_url(value, target)
    assert out["main"] == {"right": url("keep.png")}
    assert out["details"] == {"left": [url("y.png")], "right": [], "back": []}
    # input untouched
    assert value["main"]["left"] == target


def test_patch_empty_is_valid_noop():
    assert validate_product_patch({}) == ({}, [])


def test_patch_non_object():
    _, errors = validate_product_patch(["price", 1])
    assert _fields(errors) == {"body"}


def test_patch_only_supplied_fields_checked():
    clean, errors = validate_product_patch({"price": 10, "stock": 5})
    assert errors == []
    assert clean == {"price": Decimal("10"), "stock": 5}


def test_patch_range_and_type_errors():
    _, errors = validate_product_patch(
        {"price": -1, "stock": 1.5, "status": "deleted", "name": "", "brand": 3}
    )
    assert _fields(errors) == {"price", "stock", "status", "name", "brand"}


def test_patch_rejects_booleans_as_numbers():
    _, errors = validate_product_patch({"price": True, "stock": False})
    assert _fields(errors) == {"price", "stock"}


def test_patch_integral_float_stock_accepted():
    clean, errors = validate_product_patch({"stock": 3.0, "price": 12.5})
    assert errors == []
    assert clean["stock"] == 3 and isinstance(clean["stock"], int)
    assert clean["price"] == Decimal("12.5")


def test_patch_read_only_fields():
    _, errors = validate_product_patch({"code": "NEW", "rhino_code": "X", "id": "1"})
    assert _fields(errors) == {"code", "rhino_code", "id"}
    assert all(e["message"] == "read-only" for e in errors)


def test_patch_unknown_keys_dropped():
    clean, errors = validate_product_patch({"colour": "red", "stock": 1})
    assert errors == []
    assert clean == {"stock": 1}


def test_patch_nullable_and_brands():
    clean, errors = validate_product_patch({"brand": None, "sub_model": None, "brands": ["A", "B", "A"]})
    assert errors == []
    assert clean == {"brand": None, "sub_model": None, "brands": ["A", "B"]}


def test_patch_whitespace_name_is_not_empty():
    clean, errors = validate_product_patch({"name": " ", "description": "\t"})
    assert errors == []
    assert clean == {"name": " ", "description": "\t"}


def test_patch_upper_bounds():
    _, errors = validate_product_patch({"price": 10**10, "stock": 2**31})
    assert _fields(errors) == {"price", "stock"}
    clean, errors = validate_product_patch({"price": 9999999999.99, "stock": 2**31 - 1})
    assert errors == []
    assert clean["stock"] == 2**31 - 1


def test_patch_huge_numbers_rejected():
    _, errors = validate_product_patch({"price": 1e20, "stock": 10**30})
    assert {e["message"] for e in errors} == {"Price must be < 10000000000", "Stock must be <= 2147483647"}

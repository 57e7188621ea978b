from __future__ import annotations

import pytest

from catalog import image_service
from catalog.app_authz import AuthzError
from catalog.errors import NotFoundError, StoreFailure, ValidationError
from catalog.image_service import (
    UploadedImage,
    add_detail_image,
    best_effort_delete,
    remove_detail_image,
    remove_main_image,
    replace_main_image,
)
from catalog.product_service import get_product
from catalog.roles import resolve_role
from tests.helpers import images, url

PNG = UploadedImage(filename="photo.png", data=b"\x89PNG", content_type="image/png")


@pytest.fixture
def editor(app):
    return resolve_role("u-editor")


def test_replace_main_uploads_then_deletes_previous(app, store, editor, seed_product):
    old = url("old.png")
    seed_product("P-1", images=images({"left": old}))
    row = replace_main_image("P-1", "left", PNG, store=store, role=editor)
    new = row["images"]["main"]["left"]
    assert new.startswith(f"{store.base_url}/products/P-1/main/photo-")
    assert new.endswith(".png")
    assert [c[0] for c in store.calls] == ["put", "delete"]
    assert store.deleted == [old]
    assert get_product("P-1")["images"]["main"]["left"] == new


def test_replace_main_empty_slot_no_delete(app, store, editor, seed_product):
    seed_product("P-1")
    replace_main_image("P-1", "back", PNG, store=store, role=editor)
    assert [c[0] for c in store.calls] == ["put"]


def test_replace_main_old_delete_failure_ignored(app, store, editor, seed_product):
    seed_product("P-1", images=images({"right": url("old.png")}))
    store.fail_deletes = True
    row = replace_main_image("P-1", "right", PNG, store=store, role=editor)
    assert row["images"]["main"]["right"] != url("old.png")


def test_upload_failure_leaves_row_untouched(app, store, editor, seed_product):
    seed_product("P-1", images=images({"left": url("old.png")}))
    store.fail_puts = True
    with pytest.raises(StoreFailure):
        replace_main_image("P-1", "left", PNG, store=store, role=editor)
    assert get_product("P-1")["images"]["main"]["left"] == url("old.png")
    assert store.deleted == []


def test_persist_failure_discards_fresh_upload(app, store, editor, seed_product, monkeypatch):
    seed_product("P-1", images=images({"left": url("old.png")}))

    def boom(*args, **kwargs):
        raise StoreFailure("write failed")

    monkeypatch.setattr(image_service, "update_product", boom)
    with pytest.raises(StoreFailure):
        replace_main_image("P-1", "left", PNG, store=store, role=editor)
    put_path = store.calls[0][1]
    assert store.deleted == [f"{store.base_url}/{put_path}"]
    assert url("old.png") not in store.deleted


def test_viewer_upload_discarded(app, store, seed_product):
    seed_product("P-1")
    with pytest.raises(AuthzError):
        add_detail_image("P-1", "left", PNG, store=store, role=resolve_role("u-viewer"))
    assert store.objects == {}


def test_remove_main(app, store, editor, seed_product):
    target = url("m.png")
    seed_product("P-1", images=images({"left": target, "right": url("r.png")}))
    row = remove_main_image("P-1", "left", store=store, role=editor)
    assert row["images"]["main"] == {"right": url("r.png")}
    assert store.deleted == [target]


def test_remove_main_empty_slot_is_noop(app, store, editor, seed_product):
    seed_product("P-1")
    row = remove_main_image("P-1", "left", store=store, role=editor)
    assert row["images"] == images()
    assert store.calls == []


def test_add_detail_appends(app, store, editor, seed_product):
    seed_product("P-1", images=images(back=[url("1.png")]))
    row = add_detail_image("P-1", "back", PNG, store=store, role=editor)
    back = row["images"]["details"]["back"]
    assert back[0] == url("1.png")
    assert back[1].startswith(f"{store.base_url}/products/P-1/details/back/")


def test_add_detail_full_side_rejected_before_upload(app, store, editor, seed_product):
    seed_product("P-1", images=images(left=[url("1.png"), url("2.png"), url("3.png")]))
    with pytest.raises(ValidationError):
        add_detail_image("P-1", "left", PNG, store=store, role=editor)
    assert store.calls == []


def test_remove_detail_delete_failure_still_removes_url(app, store, editor, seed_product):
    target = url("2.png")
    seed_product("P-1", images=images(left=[url("1.png"), target]))
    store.fail_deletes = True
    row = remove_detail_image("P-1", "left", target, store=store, role=editor)
    assert row["images"]["details"]["left"] == [url("1.png")]
    assert target not in get_product("P-1")["images"]["details"]["left"]


def test_remove_detail_unknown_url(app, store, editor, seed_product):
    seed_product("P-1")
    with pytest.raises(NotFoundError):
        remove_detail_image("P-1", "left", url("nope.png"), store=store, role=editor)


def test_bad_side(app, store, editor, seed_product):
    seed_product("P-1")
    with pytest.raises(ValidationError):
        replace_main_image("P-1", "top", PNG, store=store, role=editor)


def test_missing_product(app, store, editor):
    with pytest.raises(NotFoundError):
        replace_main_image("NOPE", "left", PNG, store=store, role=editor)
    assert store.calls == []


def test_best_effort_delete_reports(app, store):
    assert best_effort_delete(store, url("a.png")) is True
    store.fail_deletes = True
    assert best_effort_delete(store, url("a.png")) is False

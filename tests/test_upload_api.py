from __future__ import annotations

import io

import pytest

from tests.helpers import as_user, images, url


def _file(name="photo.jpg", data=b"jpegdata"):
    return {"file": (io.BytesIO(data), name)}


def test_upload_returns_url_and_pathname(client, store):
    r = client.post("/upload?folder=P-1/main", data=_file(), headers=as_user("u-editor"),
                    content_type="multipart/form-data")
    assert r.status_code == 200
    body = r.get_json()
    assert body["pathname"].startswith("products/P-1/main/photo-")
    assert body["url"] == f"{store.base_url}/{body['pathname']}"
    assert store.objects[body["url"]] == b"jpegdata"


def test_upload_default_folder(client):
    r = client.post("/upload", data=_file(), headers=as_user("u-admin"), content_type="multipart/form-data")
    assert r.get_json()["pathname"].startswith("products/misc/")


def test_upload_without_file(client):
    r = client.post("/upload", headers=as_user("u-admin"))
    assert r.status_code == 400
    assert r.get_json()["errors"][0]["field"] == "file"


def test_upload_rejects_parent_folder(client):
    r = client.post("/upload?folder=../etc", data=_file(), headers=as_user("u-admin"),
                    content_type="multipart/form-data")
    assert r.status_code == 400


@pytest.mark.parametrize("user_id,status", [("u-viewer", 403), ("u-qa", 403), ("u-norole", 401)])
def test_upload_gated(app, user_id, status):
    c = app.test_client()
    r = c.post("/upload", data=_file(), headers=as_user(user_id), content_type="multipart/form-data")
    assert r.status_code == status


def test_delete(client, store):
    r = client.delete("/upload", json={"url": url("x.png")}, headers=as_user("u-editor"))
    assert r.status_code == 200
    assert r.get_json() == {"success": True}
    assert store.deleted == [url("x.png")]


def test_delete_requires_url(client):
    r = client.delete("/upload", json={}, headers=as_user("u-editor"))
    assert r.status_code == 400


def test_delete_store_failure_is_500(client, store):
    store.fail_deletes = True
    r = client.delete("/upload", json={"url": url("x.png")}, headers=as_user("u-editor"))
    assert r.status_code == 500
    assert r.get_json()["detail"] == "delete failed"


def test_store_not_configured(app, client):
    app.image_store = None
    r = client.post("/upload", data=_file(), headers=as_user("u-admin"), content_type="multipart/form-data")
    assert r.status_code == 500


def test_image_slot_routes(client, store, seed_product):
    seed_product("P-1", images=images({"left": url("old.png")}))
    r = client.post("/products/P-1/images/main/left", data=_file("new.png"), headers=as_user("u-editor"),
                    content_type="multipart/form-data")
    assert r.status_code == 200
    new = r.get_json()["images"]["main"]["left"]
    assert store.deleted == [url("old.png")]

    r = client.post("/products/P-1/images/details/right", data=_file("d.png"), headers=as_user("u-editor"),
                    content_type="multipart/form-data")
    detail = r.get_json()["images"]["details"]["right"][0]

    r = client.delete("/products/P-1/images/details/right", json={"url": detail}, headers=as_user("u-editor"))
    assert r.get_json()["images"]["details"]["right"] == []

    r = client.delete("/products/P-1/images/main/left", headers=as_user("u-editor"))
    assert r.get_json()["images"]["main"] == {}
    assert new in store.deleted


def test_image_slot_route_forbidden_for_viewer(client, seed_product, store):
    seed_product("P-1")
    r = client.post("/products/P-1/images/main/left", data=_file(), headers=as_user("u-viewer"),
                    content_type="multipart/form-data")
    assert r.status_code == 403
    assert store.calls == []


def test_detail_remove_needs_url(client, seed_product):
    seed_product("P-1")
    r = client.delete("/products/P-1/images/details/left", json={}, headers=as_user("u-editor"))
    assert r.status_code == 400

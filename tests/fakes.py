"""In-memory stand-ins for external collaborators."""
from __future__ import annotations

from catalog.errors import StoreFailure
from catalog.image_store import StoredImage


class FakeImageStore:
    base_url = "https://blob.example.test"

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.calls: list[tuple[str, str]] = []
        self.fail_puts = False
        self.fail_deletes = False

    def put(self, path: str, data: bytes, content_type: str | None = None) -> StoredImage:
        self.calls.append(("put", path))
        if self.fail_puts:
            raise StoreFailure("put failed")
        url = f"{self.base_url}/{path}"
        self.objects[url] = data
        return StoredImage(url=url, pathname=path)

    def delete(self, url: str) -> None:
        self.calls.append(("delete", url))
        if self.fail_deletes:
            raise StoreFailure("delete failed")
        self.objects.pop(url, None)
        self.deleted.append(url)

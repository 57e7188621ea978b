"""Object store adapter for product images.

Keys are namespaced ``products/{code}/main/...`` and
``products/{code}/details/{side}/...`` and get a random suffix so replacing a
slot never overwrites the object still referenced by the stored row.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote, unquote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from werkzeug.utils import secure_filename

from .errors import StoreFailure, ValidationError, field_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredImage:
    url: str
    pathname: str


class ImageStore(Protocol):
    def put(self, path: str, data: bytes, content_type: str | None = None) -> StoredImage: ...  # pragma: no cover - interface only

    def delete(self, url: str) -> None: ...  # pragma: no cover - interface only


def slot_folder(code: str, slot: str, side: str | None = None) -> str:
    if not code or "/" in code or code in (".", ".."):
        raise ValidationError([field_error("code", "must be a single path segment")])
    if slot == "main":
        return f"{code}/main"
    return f"{code}/details/{side}"


def build_key(folder: str, filename: str) -> str:
    name = secure_filename(filename) or "image"
    stem, dot, ext = name.rpartition(".")
    suffix = secrets.token_hex(6)
    unique = f"{stem}-{suffix}.{ext}" if dot and stem else f"{name}-{suffix}"
    return f"products/{folder.strip('/')}/{unique}"


class S3ImageStore:
    """S3 (or S3-compatible) backed store with public-read object URLs."""

    def __init__(self, *, bucket: str, public_base_url: str, client: Any = None,
                 endpoint_url: str | None = None, region: str | None = None) -> None:
        if not bucket:
            raise ValueError("bucket required")
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        if client is None:
            kwargs: dict[str, Any] = {}
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            if region:
                kwargs["region_name"] = region
            client = boto3.client("s3", **kwargs)
        self._client = client

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{quote(key)}"

    def key_for(self, url: str) -> str:
        prefix = self.public_base_url + "/"
        if not url.startswith(prefix):
            raise StoreFailure(f"url is not managed by this store: {url}")
        return unquote(url[len(prefix):])

    def put(self, path: str, data: bytes, content_type: str | None = None) -> StoredImage:
        extra: dict[str, Any] = {}
        if content_type:
            extra["ContentType"] = content_type
        try:
            self._client.put_object(Bucket=self.bucket, Key=path, Body=data, **extra)
        except (BotoCoreError, ClientError) as e:
            logger.warning("s3 put failed key=%s err=%s", path, e)
            raise StoreFailure(str(e)) from e
        return StoredImage(url=self.url_for(path), pathname=path)

    def delete(self, url: str) -> None:
        key = self.key_for(url)
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.warning("s3 delete failed key=%s err=%s", key, e)
            raise StoreFailure(str(e)) from e


__all__ = ["StoredImage", "ImageStore", "S3ImageStore", "slot_folder", "build_key"]

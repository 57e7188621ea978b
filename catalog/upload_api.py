"""Image store proxy.

POST   /upload?folder=<prefix>   multipart ``file`` -> {url, pathname}
DELETE /upload                   JSON {url} -> {success: true}

Both require the edit_images capability.
"""
from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from flask.typing import ResponseReturnValue

from .app_authz import require_capability
from .errors import ValidationError, field_error
from .image_store import build_key
from .metrics import increment
from .products_api import image_store, uploaded_file
from .roles import can_edit_images

bp = Blueprint("upload_api", __name__, url_prefix="/upload")
logger = logging.getLogger(__name__)


@bp.post("")
@require_capability(can_edit_images, "edit_images")
def upload() -> ResponseReturnValue:
    image = uploaded_file()
    folder = request.args.get("folder") or "misc"
    if ".." in folder.split("/"):
        raise ValidationError([field_error("folder", "must not contain '..'")])
    stored = image_store().put(build_key(folder, image.filename), image.data, image.content_type)
    increment("images.uploaded")
    return jsonify({"url": stored.url, "pathname": stored.pathname})


@bp.delete("")
@require_capability(can_edit_images, "edit_images")
def delete() -> ResponseReturnValue:
    data = request.get_json(silent=True) or {}
    url = data.get("url") if isinstance(data, dict) else None
    if not url or not isinstance(url, str):
        raise ValidationError([field_error("url", "No URL provided")])
    image_store().delete(url)
    logger.info("image deleted url=%s", url)
    return jsonify({"success": True})

"""Domain error system + RFC7807 handler registration.

Error taxonomy surfaced to callers:

* ``SessionError``    -> 401 (no resolvable identity / role)
* ``AuthzError``      -> 403 (identity lacks the capability)
* ``ValidationError`` -> 400 with field-level ``errors``
* ``NotFoundError``   -> 404
* ``StoreFailure``    -> 500 with the underlying store message as ``detail``
"""
from __future__ import annotations

import logging
import traceback
import uuid
from collections.abc import Callable
from typing import Any

from flask import request
from werkzeug.wrappers.response import Response

from .http_errors import (
    bad_request,
    forbidden,
    internal_server_error,
    method_not_allowed,
    not_found,
    store_failure,
    unauthorized,
    validation_failed,
)
from .pagination import PaginationError

logger = logging.getLogger(__name__)


class DomainError(Exception):
    def __init__(self, status: int, code: str, detail: str | None = None, **extra: Any):
        self.status = status
        self.code = code
        self.detail = detail or code
        self.extra = extra
        super().__init__(self.detail)

class ValidationError(DomainError):
    def __init__(self, errors: list[dict[str, str]], detail: str = "Validation failed", **extra: Any):
        super().__init__(400, "validation_failed", detail, errors=errors, **extra)
        self.errors = errors

class NotFoundError(DomainError):
    def __init__(self, detail: str = "not_found", **extra: Any):
        super().__init__(404, "not_found", detail, **extra)

class StoreFailure(DomainError):
    """An external store (relational, object or identity) call failed."""

    def __init__(self, detail: str, **extra: Any):
        super().__init__(500, "store_failure", detail, **extra)

class MigrationError(StoreFailure):
    """Migration aborted mid-run; batches already written are kept."""

    def __init__(self, detail: str, *, inserted_so_far: int, total_codes: int | None = None):
        super().__init__(detail, inserted_so_far=inserted_so_far, total_codes=total_codes)
        self.inserted_so_far = inserted_so_far
        self.total_codes = total_codes


def field_error(field: str, message: str) -> dict[str, str]:
    return {"field": field, "message": message}


_STATUS_HELPERS: dict[int, Callable[..., Response]] = {
    400: bad_request,
    401: unauthorized,
    403: forbidden,
    404: not_found,
    405: method_not_allowed,
    500: store_failure,
}

def register_error_handlers(app: Any) -> None:  # pragma: no cover - integration path
    from werkzeug.exceptions import HTTPException

    # lazy imports avoid a cycle (authz -> roles -> errors)
    from .app_authz import AuthzError
    from .app_sessions import SessionError

    @app.errorhandler(SessionError)
    def _h_session(err: SessionError) -> Response:
        return unauthorized(detail=str(err) or "authentication_required")

    @app.errorhandler(AuthzError)
    def _h_authz(err: AuthzError) -> Response:
        required = getattr(err, "required", None)
        extra = {"required_capability": required} if required else {}
        return forbidden(detail=str(err) or "forbidden", **extra)

    @app.errorhandler(DomainError)
    def _h_domain(err: DomainError) -> Response:
        if isinstance(err, ValidationError):
            extra = {k: v for k, v in err.extra.items() if k != "errors"}
            return validation_failed(err.errors, detail=err.detail, **extra)
        if err.status >= 500:
            logger.error("store failure path=%s detail=%s", request.path, err.detail)
        helper = _STATUS_HELPERS.get(err.status, bad_request)
        return helper(detail=err.detail, **err.extra)

    @app.errorhandler(PaginationError)
    def _h_pagination(err: PaginationError) -> Response:
        return bad_request(detail=str(err) or "bad_request")

    @app.errorhandler(HTTPException)
    def _h_http(ex: HTTPException) -> Response:
        status = ex.code or 500
        if status >= 500:
            return internal_server_error()
        helper = _STATUS_HELPERS.get(status, bad_request)
        return helper(detail=str(ex.description))

    @app.errorhandler(Exception)
    def _h_exception(ex: Exception) -> Response:
        incident_id = str(uuid.uuid4())
        app.logger.error("Unhandled exception incident_id=%s path=%s\n%s", incident_id, request.path, traceback.format_exc())
        return internal_server_error(incident_id=incident_id)

__all__ = [
    "DomainError","ValidationError","NotFoundError","StoreFailure","MigrationError","field_error","register_error_handlers"
]

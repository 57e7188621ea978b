"""Identity helpers: who is calling?

The identity comes from the Flask session when present, otherwise from an
``Authorization: Bearer`` token minted by the shared identity store.
"""
from __future__ import annotations

import logging

from flask import current_app, request, session as flask_session

from .jwt_utils import JWTError, decode as jwt_decode

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Signals a 401 unauthorized due to missing/invalid identity."""
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


def _bearer_user_id() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.lower().startswith("bearer "):
        return None
    token = auth_header.split(None, 1)[1].strip()
    cfg = current_app.config
    try:
        claims = jwt_decode(
            token,
            secrets_list=cfg.get("JWT_SECRETS") or [],
            leeway=cfg.get("JWT_LEEWAY_SECONDS", 60),
            max_age=cfg.get("JWT_MAX_AGE_SECONDS"),
        )
    except JWTError as e:
        # Invalid bearer -> treat as no identity
        logger.info("bearer rejected reason=%s", e)
        return None
    return claims["sub"]


def current_user_id(sess=flask_session) -> str | None:
    uid = sess.get("user_id")
    if uid:
        return str(uid)
    return _bearer_user_id()


__all__ = [
    "SessionError",
    "current_user_id",
]

"""HS256 bearer token handling for identities minted by the shared identity store.

Only the ``sub`` claim (the identity's user id) is trusted; roles are always
re-read from the RBAC tables, never from the token.
Rotation: every secret in JWT_SECRETS is accepted for verification, the first one signs.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from typing import Any, TypedDict

from .metrics import increment


class JWTError(Exception):
    pass


SKEW_SECS = 30
DEFAULT_TTL = 3600
ALG_HS256 = "HS256"


class IdentityClaims(TypedDict):
    sub: str
    iat: int
    exp: int


def _inc_jwt_rejected(reason: str) -> None:
    increment("security.jwt_rejected", {"reason": reason})

def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")

def _b64url_decode(data: str) -> bytes:
    pad = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + pad)

def _sign(msg: bytes, secret: str) -> str:
    sig = hmac.new(secret.encode(), msg, hashlib.sha256).digest()
    return _b64url(sig)


def encode(payload: dict[str, Any], *, secret: str, ttl: int = DEFAULT_TTL) -> str:
    now = int(time.time())
    header = {"alg": ALG_HS256, "typ": "JWT"}
    pl = payload.copy()
    pl.setdefault("iat", now)
    pl.setdefault("exp", now + ttl)
    header_b = _b64url(json.dumps(header, separators=(",",":")).encode())
    payload_b = _b64url(json.dumps(pl, separators=(",",":")).encode())
    msg = f"{header_b}.{payload_b}".encode()
    return f"{header_b}.{payload_b}.{_sign(msg, secret)}"


def decode(
    token: str,
    *,
    secrets_list: list[str] | None,
    leeway: int = SKEW_SECS,
    max_age: int | None = None,
) -> IdentityClaims:
    try:
        header_b, payload_b, sig = token.split(".")
    except ValueError as e:
        _inc_jwt_rejected("malformed")
        raise JWTError("malformed token") from e
    try:
        header_raw = json.loads(_b64url_decode(header_b))
    except ValueError as e:
        _inc_jwt_rejected("bad_header")
        raise JWTError("bad header") from e
    if not isinstance(header_raw, dict) or header_raw.get("alg") != ALG_HS256:
        _inc_jwt_rejected("alg")
        raise JWTError("alg")
    msg = f"{header_b}.{payload_b}".encode()
    candidates = [s for s in (secrets_list or []) if s]
    if not any(hmac.compare_digest(_sign(msg, s), sig) for s in candidates):
        _inc_jwt_rejected("bad_signature")
        raise JWTError("bad signature")
    try:
        raw = json.loads(_b64url_decode(payload_b))
    except ValueError as e:
        _inc_jwt_rejected("bad_payload")
        raise JWTError("bad payload") from e
    if not isinstance(raw, dict):
        _inc_jwt_rejected("bad_payload")
        raise JWTError("bad payload type")

    sub = raw.get("sub")
    if isinstance(sub, int) and not isinstance(sub, bool):
        sub = str(sub)
    if not isinstance(sub, str) or not sub:
        _inc_jwt_rejected("sub")
        raise JWTError("missing claim sub")
    iat = raw.get("iat")
    exp = raw.get("exp")
    if not isinstance(iat, int) or not isinstance(exp, int):
        _inc_jwt_rejected("iat_exp")
        raise JWTError("bad temporal claims")
    now = int(time.time())
    if now > exp + leeway:
        _inc_jwt_rejected("exp")
        raise JWTError("token expired")
    if iat > now + leeway:
        _inc_jwt_rejected("iat_future")
        raise JWTError("iat_future")
    if max_age is not None and (now - iat) > max_age + leeway:
        _inc_jwt_rejected("max_age")
        raise JWTError("max_age")
    return IdentityClaims(sub=sub, iat=iat, exp=exp)


__all__ = ["JWTError", "IdentityClaims", "encode", "decode"]

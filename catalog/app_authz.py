"""Authorization helpers for blueprints.

``require_role`` resolves the caller's role (401 when none) and stashes it on
``g.user_role``; ``require_capability`` additionally applies one of the
predicates from ``roles`` (403 when false).
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from flask import g

from .app_sessions import SessionError, current_user_id
from .roles import RoleName, UserRole, resolve_role

P = ParamSpec("P")
R = TypeVar("R")


class AuthzError(Exception):
    """Signals an authorization (403) failure to be caught by centralized handlers."""

    required: str | None

    def __init__(self, message: str = "forbidden", required: str | None = None):
        super().__init__(message)
        self.required = required


def current_role() -> UserRole | None:
    cached = getattr(g, "user_role", None)
    if cached is not None:
        return cached
    role = resolve_role(current_user_id())
    g.user_role = role
    return role


def require_role(fn: Callable[P, R]) -> Callable[P, R]:
    @wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        if current_role() is None:
            raise SessionError("Not authenticated")
        return fn(*args, **kwargs)

    return wrapper


def require_capability(
    predicate: Callable[[RoleName], bool], name: str
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            role = current_role()
            if role is None:
                raise SessionError("Not authenticated")
            if not predicate(role.role):
                raise AuthzError("forbidden", required=name)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


__all__ = [
    "AuthzError",
    "current_role",
    "require_role",
    "require_capability",
]

from __future__ import annotations

# user id -> role name; "u-norole" has an identity but no assignment
USERS = {
    "u-super": "super_admin",
    "u-admin": "admin",
    "u-editor": "editor",
    "u-qa": "quality_assurance",
    "u-approver": "approver",
    "u-viewer": "viewer",
}


def as_user(user_id: str) -> dict[str, str]:
    """Headers the TESTING app turns into a session identity."""
    return {"X-User-Id": user_id}


def url(path: str) -> str:
    return f"https://cdn.example.com/{path}"


def images(main: dict | None = None, **details: list[str]) -> dict:
    return {
        "main": main or {},
        "details": {side: details.get(side, []) for side in ("left", "right", "back")},
    }

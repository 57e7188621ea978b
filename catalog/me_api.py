from __future__ import annotations

from flask import Blueprint, jsonify
from flask.typing import ResponseReturnValue

from .app_authz import current_role
from .app_sessions import SessionError

bp = Blueprint("me_api", __name__, url_prefix="/me")


@bp.get("/role")
def my_role() -> ResponseReturnValue:
    role = current_role()
    if role is None:
        raise SessionError("Not authenticated")
    return jsonify({"user_id": role.user_id, "role": role.role, "hierarchy_level": role.hierarchy_level})

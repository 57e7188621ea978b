from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .db import get_session

bp = Blueprint("health_api", __name__)
logger = logging.getLogger(__name__)


@bp.get("/healthz")
def healthz() -> tuple[dict[str, Any], int]:
    # Liveness + database reachability for container orchestrators
    db = get_session()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("healthz database check failed: %s", e)
        return {"status": "degraded", "database": "unreachable"}, 503
    finally:
        db.close()
    return {"status": "ok", "database": "ok"}, 200

"""Flask application factory.

Provides:
 - Configuration from env (.env honored) with per-call overrides
 - Explicit DB engine and image store construction at startup
 - RFC7807 error handlers
 - Request id / timing middleware with one structured log line per request
 - Blueprint registration (products, upload, me, health)
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from dotenv import load_dotenv
from flask import Flask, g, request, session
from werkzeug.wrappers.response import Response

from .config import Config
from .db import init_engine, remove_session
from .errors import register_error_handlers
from .health_api import bp as health_bp
from .image_store import S3ImageStore
from .me_api import bp as me_bp
from .metrics import set_metrics
from .metrics_logging import LoggingMetrics
from .products_api import bp as products_bp
from .upload_api import bp as upload_bp


def create_app(config_override: dict[str, Any] | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)

    # --- Configuration ---
    cfg = Config.from_env()
    if config_override:
        known = {k: v for k, v in config_override.items() if hasattr(cfg, k)}
        if known:
            cfg.override(known)
    app.config.update(cfg.to_flask_dict())
    if config_override:
        for k, v in config_override.items():  # also allow direct Flask config keys
            if k.isupper():
                app.config[k] = v

    # --- External collaborators (built once, here) ---
    init_engine(cfg.database_url, force=bool(app.config.get("FORCE_DB_REINIT")))
    app.image_store = None  # type: ignore[attr-defined]
    if cfg.blob_bucket:
        app.image_store = S3ImageStore(  # type: ignore[attr-defined]
            bucket=cfg.blob_bucket,
            public_base_url=cfg.public_base_url(),
            endpoint_url=cfg.blob_endpoint_url,
            region=cfg.blob_region,
        )
    set_metrics(LoggingMetrics())

    # --- Logging / timing middleware ---
    log = logging.getLogger("catalog")
    if not log.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("%(message)s"))
        log.addHandler(h)
    log.setLevel(logging.INFO)

    @app.before_request
    def _before_req() -> None:
        if app.config.get("TESTING"):
            uid = request.headers.get("X-User-Id")
            if uid:
                session["user_id"] = uid
        g._t0 = time.perf_counter()
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    @app.after_request
    def _after_req(resp: Response) -> Response:
        dur_ms = int((time.perf_counter() - getattr(g, "_t0", time.perf_counter())) * 1000)
        rid = getattr(g, "request_id", None) or str(uuid.uuid4())
        resp.headers["X-Request-Id"] = rid
        resp.headers["X-Request-Duration-ms"] = str(dur_ms)
        if "Cache-Control" not in resp.headers:
            resp.headers["Cache-Control"] = "no-store"
        role = getattr(g, "user_role", None)
        log.info(
            {
                "request_id": rid,
                "user_id": role.user_id if role else session.get("user_id"),
                "role": role.role if role else None,
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "duration_ms": dur_ms,
            }
        )
        return resp

    @app.teardown_appcontext
    def _teardown(_exc: BaseException | None) -> None:
        remove_session()

    register_error_handlers(app)

    # --- Register blueprints ---
    app.register_blueprint(products_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(me_bp)
    app.register_blueprint(health_bp)
    return app


__all__ = ["create_app"]

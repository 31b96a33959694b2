"""Flask application factory."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from flask import Flask, jsonify, render_template, request
from werkzeug.exceptions import HTTPException, TooManyRequests

from recast.config import Settings, get_settings
from recast.pipeline import RewritePipeline
from recast.progress import ProgressStore
from recast.storage.results import ResultStore
from recast.web.api import api
from recast.web.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "web"

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


@dataclass
class Services:
    """Everything the request handlers need, stored on ``app.extensions``."""

    settings: Settings
    pipeline: RewritePipeline
    progress: ProgressStore
    results: ResultStore
    executor: Executor
    limiter: RateLimiter


def create_app(
    settings: Settings | None = None,
    *,
    pipeline: RewritePipeline | None = None,
    progress: ProgressStore | None = None,
    results: ResultStore | None = None,
    executor: Executor | None = None,
    start_cleanup: bool = True,
) -> Flask:
    settings = settings or get_settings()
    app = Flask(__name__, template_folder=str(_TEMPLATE_DIR))

    services = Services(
        settings=settings,
        pipeline=pipeline if pipeline is not None else RewritePipeline.from_settings(settings),
        progress=progress
        if progress is not None
        else ProgressStore(settings.progress_ttl_seconds, settings.progress_cleanup_interval),
        results=results if results is not None else ResultStore(settings.results_dir),
        executor=executor
        if executor is not None
        else ThreadPoolExecutor(max_workers=4, thread_name_prefix="recast-job"),
        limiter=RateLimiter(settings.rate_limit_max, settings.rate_limit_window),
    )
    app.extensions["recast"] = services
    if start_cleanup:
        services.progress.start_cleanup()

    app.register_blueprint(api)

    @app.get("/")
    def index():
        return render_template("index.html", mode=settings.mode)

    @app.before_request
    def limit_api_requests():
        if not request.path.startswith("/api/") or request.method == "OPTIONS":
            return None
        allowed, retry_after = services.limiter.hit(request.remote_addr or "unknown")
        if not allowed:
            raise TooManyRequests(
                "Too many requests, try again later", retry_after=int(retry_after) + 1
            )
        return None

    @app.after_request
    def add_headers(response):
        response.headers.update(_SECURITY_HEADERS)
        origin = request.headers.get("Origin")
        if origin and origin in settings.cors_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers.add("Vary", "Origin")
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        response = jsonify({"error": exc.description})
        response.status_code = exc.code or 500
        retry_after = getattr(exc, "retry_after", None)
        if retry_after:
            response.headers["Retry-After"] = str(retry_after)
        return response

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):  # pragma: no cover - runtime guard
        logger.exception("Uncaught exception when handling %s", request.path)
        return jsonify({"error": "Unexpected server error", "detail": str(exc)}), 500

    logger.info(
        "recast app ready (%s mode, results in %s)", settings.mode, services.results.directory
    )
    return app

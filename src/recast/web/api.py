"""JSON and server-sent-event endpoints under ``/api``."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Iterator
from urllib.parse import urlparse

from flask import Blueprint, Response, abort, current_app, jsonify, request, stream_with_context
from pydantic import ValidationError

from recast.errors import PipelineError, RecastError, ResultNotFound
from recast.models import CustomPrompts, PipelineResult

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")

Job = Callable[[Callable[[str], None], str], PipelineResult]


def _services():
    return current_app.extensions["recast"]


def _is_valid_url(value: object) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _read_payload() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object")
    return payload


def _read_url(payload: dict) -> str:
    url = payload.get("url")
    if not url:
        abort(400, description="`url` is required")
    if not _is_valid_url(url):
        abort(400, description="`url` must be an http(s) URL")
    return url.strip()


def _read_prompts(payload: dict) -> CustomPrompts | None:
    raw = payload.get("prompts")
    if raw is None:
        return None
    if not isinstance(raw, dict):
        abort(400, description="`prompts` must be an object")
    try:
        prompts = CustomPrompts.model_validate(raw)
    except ValidationError:
        abort(400, description="`prompts` values must be strings")
    return None if prompts.is_empty() else prompts


def _sse(data: dict, event: str | None = None) -> str:
    head = f"event: {event}\n" if event else ""
    return f"{head}data: {json.dumps(data)}\n\n"


def _run_job(app, session_id: str, job: Job) -> None:
    """Run a pipeline job in a worker thread, reporting into the progress session."""
    services = app.extensions["recast"]
    progress = services.progress

    def notify(message: str) -> None:
        try:
            progress.append(session_id, message)
        except KeyError:
            logger.debug("Progress session %s expired, dropping %r", session_id, message)

    def finish(**outcome) -> None:
        try:
            progress.finish(session_id, **outcome)
        except KeyError:
            logger.debug("Progress session %s expired before the job finished", session_id)

    try:
        result = job(notify, session_id)
        services.results.save(result)
    except PipelineError as exc:
        logger.warning("Job %s aborted at %s: %s", session_id, exc.stage, exc.cause)
        finish(error=str(exc))
        return
    except RecastError as exc:
        logger.warning("Job %s failed: %s", session_id, exc)
        finish(error=str(exc))
        return
    except Exception:  # pragma: no cover - runtime guard
        logger.exception("Uncaught exception in job %s", session_id)
        finish(error="Unexpected server error")
        return
    notify("Processing complete")
    finish(result_id=result.id)


def _submit(job: Job) -> str:
    services = _services()
    session = services.progress.create()
    app = current_app._get_current_object()
    services.executor.submit(_run_job, app, session.id, job)
    return session.id


@api.get("/health")
def health():
    settings = _services().settings

    def state(ok: bool) -> str:
        return "configured" if ok else "missing"

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "mode": settings.mode,
        "env": {
            "scraper": state(settings.scraper_configured),
            "anthropic": state(bool(settings.anthropic_api_key)),
            "fal": state(bool(settings.fal_key.strip())),
        },
    }


@api.get("/test")
def connectivity_test():
    return {"message": "API is reachable", "timestamp": datetime.now(timezone.utc).isoformat()}


@api.post("/rewrite")
def rewrite():
    payload = _read_payload()
    url = _read_url(payload)
    prompts = _read_prompts(payload)
    services = _services()
    try:
        result = services.pipeline.process(url, prompts)
    except PipelineError as exc:
        logger.warning("Rewrite of %s aborted at %s: %s", url, exc.stage, exc.cause)
        return jsonify({"error": str(exc.cause), "stage": exc.stage, "url": url}), 502
    services.results.save(result)
    return jsonify(result.to_api())


@api.post("/rewrite/progress")
def rewrite_with_progress():
    payload = _read_payload()
    url = _read_url(payload)
    prompts = _read_prompts(payload)
    pipeline = _services().pipeline

    def job(notify, session_id):
        return pipeline.process(url, prompts, on_progress=notify, result_id=session_id)

    return jsonify({"progressId": _submit(job)}), 202


@api.post("/regenerate")
def regenerate():
    payload = _read_payload()
    previous_id = payload.get("progressId")
    if not previous_id or not isinstance(previous_id, str):
        abort(400, description="`progressId` is required")
    prompts = _read_prompts(payload)
    services = _services()

    try:
        previous = services.results.load(previous_id)
    except ResultNotFound:
        if previous_id in services.progress and not services.progress.get(previous_id).finished:
            abort(409, description="The original request is still being processed")
        abort(404, description=f"No result found for {previous_id}")

    pipeline = services.pipeline

    def job(notify, session_id):
        return pipeline.regenerate(previous, prompts, on_progress=notify, result_id=session_id)

    return jsonify({"progressId": _submit(job), "previousId": previous_id}), 202


@api.get("/progress/<session_id>")
def progress_stream(session_id: str):
    services = _services()
    if session_id not in services.progress:
        abort(404, description=f"Unknown progress id {session_id}")
    poll = current_app.config.get("PROGRESS_POLL_INTERVAL", 0.25)
    heartbeat = current_app.config.get("PROGRESS_HEARTBEAT", 15.0)

    def events() -> Iterator[str]:
        store = services.progress
        sent = 0
        last_write = time.monotonic()
        while True:
            try:
                session = store.get(session_id)
                # Read the flag before the messages so none are missed
                finished = session.finished
                pending = store.messages(session_id, sent)
            except KeyError:
                yield _sse({"error": "Progress session expired"}, event="failed")
                return
            for message in pending:
                yield _sse({"index": sent, "message": message})
                sent += 1
                last_write = time.monotonic()
            if finished:
                if session.error:
                    yield _sse({"error": session.error}, event="failed")
                else:
                    yield _sse({"resultId": session.result_id}, event="done")
                return
            if time.monotonic() - last_write >= heartbeat:
                yield ": keep-alive\n\n"
                last_write = time.monotonic()
            time.sleep(poll)

    return Response(
        stream_with_context(events()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@api.get("/result/<result_id>")
def get_result(result_id: str):
    try:
        result = _services().results.load(result_id)
    except ResultNotFound:
        abort(404, description=f"No result found for {result_id}")
    return jsonify(result.to_api())

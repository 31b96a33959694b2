"""Image generation through fal.ai's queue and synchronous HTTP endpoints."""

from __future__ import annotations

import logging
import time
from typing import Callable

import httpx

from recast.config import Settings
from recast.errors import ImageGenerationError
from recast.models import ImageResult

logger = logging.getLogger(__name__)

FAL_RUN_BASE = "https://fal.run"
FAL_QUEUE_BASE = "https://queue.fal.run"

# FLUX.1 [dev] renders landscape_16_9 at this size
LIVE_WIDTH = 1024
LIVE_HEIGHT = 768

ProgressCallback = Callable[[str], None]


def placeholder_image(prompt: str) -> ImageResult:
    """Deterministic stock photo for ``prompt``; the seed is the sum of its code points."""
    seed = sum(ord(ch) for ch in prompt)
    return ImageResult(
        image_url=f"https://picsum.photos/seed/{seed}/800/600",
        prompt=prompt,
        width=800,
        height=600,
        placeholder=True,
    )


def extract_image_url(data: object) -> str:
    """Find the image URL in the shapes fal.ai models are known to return."""
    if isinstance(data, dict):
        images = data.get("images")
        if isinstance(images, list) and images:
            first = images[0]
            url = first.get("url") if isinstance(first, dict) else first
            if isinstance(url, str) and url:
                return url
        image = data.get("image")
        if isinstance(image, dict):
            image = image.get("url")
        if isinstance(image, str) and image:
            return image
    if isinstance(data, str) and data.startswith("http"):
        return data
    keys = sorted(data) if isinstance(data, dict) else type(data).__name__
    raise ImageGenerationError(f"Could not find an image URL in the response ({keys})")


class ImageClient:
    """Wrapper around the fal.ai REST API.

    Requests go through fal's queue so render logs can be relayed while the
    image is produced. When the queue flow fails the synchronous
    ``fal.run`` endpoint is tried once before giving up.
    """

    def __init__(self, settings: Settings) -> None:
        self._configured = bool(settings.fal_key.strip())
        self._model = settings.image_model
        self._params = {
            "image_size": settings.image_size,
            "num_inference_steps": settings.image_steps,
            "guidance_scale": settings.image_guidance,
        }
        self._poll_interval = settings.image_poll_interval
        self._queue_timeout = settings.image_queue_timeout
        self._client = httpx.Client(
            base_url=FAL_RUN_BASE,
            headers={
                "Authorization": f"Key {settings.fal_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=settings.http_timeout,
        )

    @property
    def configured(self) -> bool:
        return self._configured

    def generate(self, prompt: str, on_progress: ProgressCallback | None = None) -> ImageResult:
        """Generate an illustration for ``prompt``.

        Raises:
            ImageGenerationError: If no key is configured, both the queued and
                the direct request fail, or the response holds no image URL.
        """
        notify = on_progress or (lambda _msg: None)
        if not self._configured:
            raise ImageGenerationError("FAL_KEY is not configured")
        if not prompt.strip():
            raise ImageGenerationError("Image prompt is empty")

        notify(f'Starting image generation with prompt: "{prompt[:30]}..."')
        payload = {"prompt": prompt, **self._params}
        try:
            data = self._run_queued(payload, notify)
        except ImageGenerationError as exc:
            logger.warning("fal.ai queue request failed (%s), trying the direct endpoint", exc)
            notify("fal.ai queue unavailable, sending a direct request")
            data = self._run_direct(payload)

        notify("Response received from fal.ai")
        url = extract_image_url(data)
        notify("Image generated")
        return ImageResult(image_url=url, prompt=prompt, width=LIVE_WIDTH, height=LIVE_HEIGHT)

    def _run_queued(self, payload: dict, notify: ProgressCallback) -> object:
        """Submit to the queue, relay new log lines while polling, then fetch the result."""
        logger.info("Queueing image request for %s", self._model)
        handle = self._call("post", f"{FAL_QUEUE_BASE}/{self._model}", json=payload)
        if not isinstance(handle, dict) or not handle.get("status_url") or not handle.get("response_url"):
            raise ImageGenerationError("fal.ai queue returned no request handle")
        logger.debug("fal.ai request %s queued", handle.get("request_id"))

        deadline = time.monotonic() + self._queue_timeout
        seen = 0
        while True:
            status = self._call("get", handle["status_url"], params={"logs": 1})
            if not isinstance(status, dict):
                raise ImageGenerationError("fal.ai queue returned an invalid status")

            logs = status.get("logs") or []
            for entry in logs[seen:]:
                message = entry.get("message") if isinstance(entry, dict) else entry
                if message:
                    notify(f"Progress: {message}")
            seen = max(seen, len(logs))

            state = status.get("status")
            if state == "COMPLETED":
                if status.get("error"):
                    raise ImageGenerationError(f"fal.ai request failed: {status['error']}")
                break
            if state == "IN_QUEUE":
                logger.debug("fal.ai queue position %s", status.get("queue_position"))
            if time.monotonic() >= deadline:
                raise ImageGenerationError(
                    f"fal.ai request did not finish within {self._queue_timeout:.0f}s"
                )
            time.sleep(self._poll_interval)

        return self._call("get", handle["response_url"])

    def _run_direct(self, payload: dict) -> object:
        logger.info("Requesting image from %s", self._model)
        return self._call("post", f"/{self._model}", json=payload)

    def _call(self, method: str, url: str, **kwargs) -> object:
        try:
            resp = getattr(self._client, method)(url, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise ImageGenerationError(
                f"fal.ai answered {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ImageGenerationError(f"Could not reach fal.ai: {exc}") from exc
        except ValueError as exc:
            raise ImageGenerationError("fal.ai returned invalid JSON") from exc

    def close(self) -> None:
        self._client.close()

"""Client for the external scraping workflow (an HTTP webhook).

The workflow receives ``{"url": ...}`` and answers with the article's
title, HTML, plain text, image URLs and metadata in camelCase JSON.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from recast.config import Settings
from recast.errors import ScrapeError
from recast.models import ScrapedContent
from recast.markup import html_to_text

logger = logging.getLogger(__name__)


class ScraperClient:
    """Wrapper around the scraping workflow webhook."""

    def __init__(self, settings: Settings) -> None:
        self._url = settings.scraper_url
        self._configured = settings.scraper_configured
        self._client = httpx.Client(
            timeout=settings.http_timeout,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": "recast/0.1",
            },
            follow_redirects=True,
        )

    @property
    def configured(self) -> bool:
        return self._configured

    def scrape(self, url: str) -> ScrapedContent:
        """Send ``url`` to the workflow and return the extracted article.

        Raises:
            ScrapeError: If the workflow is not configured, unreachable,
                answers with an error status or with an unexpected payload.
        """
        if not self._configured:
            raise ScrapeError("Scraper webhook URL is not configured")

        logger.info("Sending %s to the scraping workflow", url)
        try:
            resp = self._client.post(self._url, json={"url": url})
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise ScrapeError(
                f"Scraping workflow answered {exc.response.status_code} "
                f"{exc.response.reason_phrase}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ScrapeError(f"Could not reach the scraping workflow: {exc}") from exc
        except ValueError as exc:
            raise ScrapeError("Scraping workflow returned invalid JSON") from exc

        # Some workflows wrap the item in a one-element list
        if isinstance(payload, list):
            if not payload:
                raise ScrapeError("Scraping workflow returned no items")
            payload = payload[0]

        try:
            content = ScrapedContent.model_validate(payload)
        except ValidationError as exc:
            raise ScrapeError(f"Unexpected scraping payload: {exc.error_count()} invalid fields") from exc

        if not content.full_text and content.content:
            content.full_text = html_to_text(content.content)
        if content.metadata.word_count is None:
            content.metadata.word_count = len(content.full_text.split())
        logger.debug("Scraped %r (%s words)", content.title, content.metadata.word_count)
        return content

    def close(self) -> None:
        self._client.close()

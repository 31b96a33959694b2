"""Scrape -> rewrite -> illustrate, with per-stage fallback to sample data.

Each stage either returns live output or fails with a ``RecastError``.
In strict mode the first failure aborts the run with a ``PipelineError``;
otherwise the failure is recorded in ``errors`` and the stage's
placeholder output is used instead.
"""

from __future__ import annotations

import html
import logging
import time
from typing import Callable, TypeVar

from recast.config import Settings
from recast.content.generator import ContentGenerator
from recast.content.sample import sample_content
from recast.errors import GenerationError, PipelineError, RecastError
from recast.imaging.client import ImageClient, placeholder_image
from recast.llm.client import ClaudeClient
from recast.models import (
    CustomPrompts,
    GeneratedContent,
    ImageResult,
    PipelineResult,
    ScrapedContent,
)
from recast.scraping.client import ScraperClient
from recast.scraping.sample import sample_article

logger = logging.getLogger(__name__)

T = TypeVar("T")
ProgressCallback = Callable[[str], None]


def attach_image(content: GeneratedContent, image: ImageResult) -> None:
    """Record the image URL and show it right below the article title."""
    content.image_url = image.image_url
    tag = (
        f'<img src="{html.escape(image.image_url, quote=True)}" '
        'alt="Generated illustration" class="article-image" />'
    )
    if "</h1>" in content.article_html:
        content.article_html = content.article_html.replace("</h1>", f"</h1>{tag}", 1)
    else:
        content.article_html = tag + content.article_html


class RewritePipeline:
    """Runs the three external calls in order and merges their output."""

    def __init__(
        self,
        settings: Settings,
        scraper: ScraperClient,
        generator: ContentGenerator | None,
        images: ImageClient,
    ) -> None:
        self._settings = settings
        self._scraper = scraper
        self._generator = generator
        self._images = images

    @classmethod
    def from_settings(cls, settings: Settings) -> RewritePipeline:
        generator = None
        if settings.anthropic_api_key:
            generator = ContentGenerator(ClaudeClient(settings))
        return cls(settings, ScraperClient(settings), generator, ImageClient(settings))

    @property
    def strict(self) -> bool:
        return self._settings.strict

    def process(
        self,
        url: str,
        prompts: CustomPrompts | None = None,
        on_progress: ProgressCallback | None = None,
        result_id: str | None = None,
    ) -> PipelineResult:
        """Run the full pipeline for ``url``.

        Raises:
            PipelineError: In strict mode, when any stage fails.
        """
        notify = on_progress or (lambda _msg: None)
        errors: list[str] = []
        logger.info("Processing %s (%s mode)", url, self._settings.mode)

        notify(f"Extracting content from {url}")
        scraped = self._run_stage(
            "scrape",
            lambda: self._scraper.scrape(url),
            lambda: sample_article(url),
            errors,
            notify,
        )
        notify(f"Content extracted: {scraped.title}")

        return self._finish(url, scraped, prompts, errors, notify, result_id=result_id)

    def regenerate(
        self,
        previous: PipelineResult,
        prompts: CustomPrompts | None,
        on_progress: ProgressCallback | None = None,
        result_id: str | None = None,
    ) -> PipelineResult:
        """Re-run generation and imaging on a stored result's scraped content."""
        notify = on_progress or (lambda _msg: None)
        logger.info("Regenerating %s from result %s", previous.url, previous.id)
        notify(f"Reusing content extracted from {previous.url}")
        return self._finish(
            previous.url,
            previous.scraped_content,
            prompts,
            [],
            notify,
            result_id=result_id,
            parent_id=previous.id,
        )

    def _finish(
        self,
        url: str,
        scraped: ScrapedContent,
        prompts: CustomPrompts | None,
        errors: list[str],
        notify: ProgressCallback,
        *,
        result_id: str | None = None,
        parent_id: str | None = None,
    ) -> PipelineResult:
        if prompts is not None and prompts.is_empty():
            prompts = None

        notify("Generating rewritten content")
        generated = self._run_stage(
            "generate",
            lambda: self._generate(scraped, prompts),
            lambda: sample_content(scraped),
            errors,
            notify,
        )
        notify("Content generated")

        notify("Generating image")
        image = self._run_stage(
            "image",
            lambda: self._images.generate(generated.image_prompt, on_progress=notify),
            lambda: placeholder_image(generated.image_prompt),
            errors,
            notify,
        )
        attach_image(generated, image)
        notify(f"Image ready: {image.image_url}")

        result = PipelineResult(
            url=url,
            parent_id=parent_id,
            prompts=prompts,
            scraped_content=scraped,
            generated_content=generated,
            image_result=image,
            errors=errors,
        )
        if result_id:
            result.id = result_id
        return result

    def _generate(self, scraped: ScrapedContent, prompts: CustomPrompts | None) -> GeneratedContent:
        if self._generator is None:
            raise GenerationError("ANTHROPIC_API_KEY is not configured")
        return self._generator.generate(scraped, prompts)

    def _run_stage(
        self,
        stage: str,
        live: Callable[[], T],
        fallback: Callable[[], T],
        errors: list[str],
        notify: ProgressCallback,
    ) -> T:
        try:
            return live()
        except RecastError as exc:
            if self.strict:
                logger.error("Stage %s failed in strict mode: %s", stage, exc)
                notify(f"Error in {stage} step: {exc}")
                raise PipelineError(stage, exc) from exc
            logger.warning("Stage %s failed, using sample data: %s", stage, exc)
            errors.append(f"{stage}: {exc}")
            notify(f"{stage} step unavailable ({exc}), using sample data")
            if self._settings.sample_delay > 0:
                time.sleep(self._settings.sample_delay)
            return fallback()

    def close(self) -> None:
        self._scraper.close()
        self._images.close()

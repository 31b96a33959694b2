"""Rewrite a scraped article into an article plus social media variants."""

from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from recast.errors import GenerationError
from recast.llm.client import ClaudeClient
from recast.llm.prompts import render
from recast.models import CustomPrompts, GeneratedContent, ScrapedContent

logger = logging.getLogger(__name__)

TOOL_NAME = "generate_rewritten_content"

REWRITE_TOOL = {
    "name": TOOL_NAME,
    "description": "Rewrite the article and adapt it to several social media platforms.",
    "input_schema": {
        "type": "object",
        "properties": {
            "article_html": {
                "type": "string",
                "description": "Rewritten version of the article in HTML, starting with an <h1> title.",
            },
            "image_prompt": {
                "type": "string",
                "description": "Descriptive prompt for generating an illustration of the content.",
            },
            "linkedin_post": {
                "type": "string",
                "description": "Professional LinkedIn post.",
            },
            "twitter_thread": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Twitter/X thread (3-6 tweets).",
            },
            "instagram_reel_script": {
                "type": "object",
                "properties": {
                    "hook": {
                        "type": "string",
                        "description": "Opening hook to grab attention (5-10 seconds).",
                    },
                    "slides": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "subtitle": {"type": "string", "description": "On-screen text."},
                                "visual": {"type": "string", "description": "What should be shown."},
                                "voiceover": {"type": "string", "description": "Voice-over text."},
                            },
                            "required": ["subtitle", "visual", "voiceover"],
                        },
                        "description": "Content of each reel slide (3-6 slides).",
                    },
                },
                "required": ["hook", "slides"],
                "description": "Instagram reel script.",
            },
        },
        "required": [
            "article_html",
            "image_prompt",
            "linkedin_post",
            "twitter_thread",
            "instagram_reel_script",
        ],
    },
}


def build_prompts(scraped: ScrapedContent, prompts: CustomPrompts | None = None) -> dict[str, str]:
    """Resolve every prompt, preferring the caller's overrides."""
    prompts = prompts or CustomPrompts()
    return {
        "system": prompts.system or render("system.j2", tool_name=TOOL_NAME),
        "user": prompts.user
        or render(
            "user.j2",
            title=scraped.title,
            full_text=scraped.full_text,
            category=scraped.metadata.category,
            tags=scraped.metadata.tags,
        ),
        "twitter": prompts.twitter or render("twitter.j2"),
        "linkedin": prompts.linkedin or render("linkedin.j2"),
        "instagram": prompts.instagram or render("instagram.j2"),
    }


def build_messages(resolved: dict[str, str]) -> list[dict]:
    """Pack the user prompt and the per-channel prompts into one user turn."""
    texts = [
        resolved["user"],
        f"For Twitter: {resolved['twitter']}",
        f"For LinkedIn: {resolved['linkedin']}",
        f"For Instagram: {resolved['instagram']}",
    ]
    return [{"role": "user", "content": [{"type": "text", "text": t} for t in texts]}]


class ContentGenerator:
    """Produces the multi-format content bundle with a single tool call."""

    def __init__(self, client: ClaudeClient) -> None:
        self._client = client

    def generate(
        self, scraped: ScrapedContent, prompts: CustomPrompts | None = None
    ) -> GeneratedContent:
        start = time.time()
        resolved = build_prompts(scraped, prompts)

        logger.info("Rewriting %r with Claude", scraped.title)
        try:
            data = self._client.generate_structured(
                system=resolved["system"],
                messages=build_messages(resolved),
                tool=REWRITE_TOOL,
            )
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(f"Content generation failed: {exc}") from exc

        try:
            content = GeneratedContent.model_validate(data)
        except ValidationError as exc:
            raise GenerationError(
                f"Claude returned incomplete content: {exc.error_count()} invalid fields"
            ) from exc

        content.fill_article_text()
        logger.info(
            "Generated content in %.2fs (%s)",
            time.time() - start,
            self._client.usage_summary,
        )
        return content

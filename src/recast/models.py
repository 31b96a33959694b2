"""Pydantic models shared by the pipeline, storage and HTTP layers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from recast.markup import html_to_text


class _CamelModel(BaseModel):
    """Accepts and emits camelCase keys, matching the scraper and UI payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ArticleMetadata(_CamelModel):
    author: str | None = None
    published_date: str | None = None
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    word_count: int | None = None


class ScrapedContent(_CamelModel):
    """Structured article extracted by the scraping workflow."""

    title: str
    content: str = ""
    full_text: str = ""
    image_urls: list[str] = Field(default_factory=list)
    metadata: ArticleMetadata = Field(default_factory=ArticleMetadata)


class ReelSlide(BaseModel):
    subtitle: str
    visual: str
    voiceover: str


class ReelScript(BaseModel):
    hook: str
    slides: list[ReelSlide] = Field(default_factory=list)


class GeneratedContent(BaseModel):
    """Rewritten article plus its social media variants.

    Keys stay snake_case because they are produced verbatim by the
    language model's tool call.
    """

    model_config = ConfigDict(extra="ignore")

    article_html: str
    article_text: str | None = None
    image_prompt: str
    image_url: str | None = None
    linkedin_post: str
    twitter_thread: list[str] = Field(default_factory=list)
    instagram_reel_script: ReelScript

    def fill_article_text(self) -> None:
        """Derive a plain-text article from the HTML when none was given."""
        if self.article_text:
            return
        self.article_text = html_to_text(self.article_html)


class ImageResult(_CamelModel):
    image_url: str
    prompt: str
    width: int
    height: int
    placeholder: bool = False


class CustomPrompts(BaseModel):
    """Caller-supplied overrides for the generation prompts.

    The web form sends the system prompt as ``article``.
    """

    model_config = ConfigDict(extra="ignore")

    system: str | None = Field(default=None, validation_alias=AliasChoices("system", "article"))
    user: str | None = None
    twitter: str | None = None
    linkedin: str | None = None
    instagram: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


def new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PipelineResult(_CamelModel):
    """Everything one pipeline run produced, persisted as a single JSON file."""

    id: str = Field(default_factory=new_id)
    url: str
    created_at: datetime = Field(default_factory=_utcnow)
    parent_id: str | None = None
    prompts: CustomPrompts | None = None
    scraped_content: ScrapedContent
    generated_content: GeneratedContent
    image_result: ImageResult | None = None
    errors: list[str] = Field(default_factory=list)

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

"""Placeholder articles built from the URL alone, for offline development."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from html import escape
from urllib.parse import quote, urlparse

from recast.markup import html_to_text
from recast.models import ArticleMetadata, ScrapedContent


@dataclass(frozen=True)
class UrlTopic:
    """Domain and human-readable topic extracted from an article URL."""

    domain: str
    topic: str

    @classmethod
    def from_url(cls, url: str) -> UrlTopic:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.hostname:
            return cls(domain="unknown", topic="")
        domain = parsed.hostname.removeprefix("www.")
        segments = [s for s in parsed.path.split("/") if s]
        # Drop date segments like /2024/05/ that carry no topic
        words = [s.replace("-", " ") for s in segments if not s.isdigit()]
        topic = re.sub(r"\.[a-z]+$", "", " ".join(words)).strip()
        return cls(domain=domain, topic=topic)

    @property
    def headline(self) -> str:
        return self.topic[:1].upper() + self.topic[1:]


# Keyword -> (category, tags) for a little variety in sample data
_CATEGORY_RULES: list[tuple[tuple[str, ...], str, list[str]]] = [
    (("ai", "llm", "intelligence", "model"), "Technology", ["AI", "Machine Learning", "Innovation"]),
    (("election", "government", "policy", "war", "peace"), "World", ["Politics", "Diplomacy"]),
    (("market", "stock", "economy", "funding", "startup"), "Business", ["Markets", "Startups"]),
]


def _classify(topic: UrlTopic) -> tuple[str, list[str]]:
    words = set(topic.topic.lower().split())
    for keywords, category, tags in _CATEGORY_RULES:
        if words.intersection(keywords):
            return category, list(tags)
    if "techcrunch" in topic.domain or "verge" in topic.domain:
        return "Technology", ["Innovation", "Startups", "Technology"]
    if "bbc" in topic.domain or "reuters" in topic.domain:
        return "World", ["International", "News"]
    return "Analysis", ["Trends", "Innovation", "Strategy"]


def sample_article(url: str) -> ScrapedContent:
    """Build a plausible article for ``url`` without any network access."""
    topic = UrlTopic.from_url(url)
    category, tags = _classify(topic)

    if len(topic.topic) > 5:
        title = f"{topic.headline}: an in-depth analysis"
        heading = topic.headline
        paragraphs = [
            f"This analysis looks at the most relevant aspects of {topic.topic} "
            "and its impact across different fields.",
            "Experts from several disciplines shared their views on how the subject "
            "is evolving and what to expect over the coming months.",
            '"Understanding the long-term implications is essential," says one '
            "specialist. \"The changes we are seeing could have lasting effects.\"",
        ]
    else:
        title = f"Article from {topic.domain}: a look at current trends"
        heading = f"Current trends on {topic.domain}"
        paragraphs = [
            "This article examines current trends and their impact on several sectors.",
            "Experts agree that we are in a period of significant change that will "
            "call for adaptation and new strategies.",
            '"The ability to anticipate these changes will be crucial," says the '
            "study's lead analyst.",
        ]

    content = f"<h1>{escape(heading)}</h1>" + "".join(f"<p>{escape(p)}</p>" for p in paragraphs)
    full_text = html_to_text(content)
    seed = quote(topic.domain, safe="")
    return ScrapedContent(
        title=title,
        content=content,
        full_text=full_text,
        image_urls=[
            f"https://picsum.photos/seed/{seed}/800/600",
            f"https://picsum.photos/seed/{seed}2/800/600",
        ],
        metadata=ArticleMetadata(
            author=f"Newsroom {topic.domain}",
            published_date=datetime.now(timezone.utc).isoformat(),
            category=category,
            tags=tags,
            word_count=len(full_text.split()),
        ),
    )

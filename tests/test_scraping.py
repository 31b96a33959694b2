"""Tests for the scraping workflow client and sample articles."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from recast.config import Settings
from recast.errors import ScrapeError
from recast.scraping.client import ScraperClient
from recast.scraping.sample import UrlTopic, sample_article
from tests.conftest import mock_response


def _client(settings: Settings) -> tuple[ScraperClient, MagicMock]:
    client = ScraperClient(settings)
    client._client.close()
    mock_http = MagicMock()
    client._client = mock_http
    return client, mock_http


class TestUrlTopic:
    def test_topic_from_slug(self) -> None:
        topic = UrlTopic.from_url("https://www.techcrunch.com/2025/05/01/open-models-close-the-gap/")
        assert topic.domain == "techcrunch.com"
        assert topic.topic == "open models close the gap"
        assert topic.headline == "Open models close the gap"

    def test_invalid_url(self) -> None:
        topic = UrlTopic.from_url("not a url")
        assert topic.domain == "unknown"
        assert topic.topic == ""


class TestSampleArticle:
    def test_sample_has_all_fields(self) -> None:
        article = sample_article("https://www.bbc.co.uk/news/peace-talks-resume-in-geneva")

        assert "peace talks resume in geneva" in article.title.lower()
        assert article.content.startswith("<h1>")
        assert "<" not in article.full_text
        assert len(article.image_urls) == 2
        assert all(u.startswith("https://picsum.photos/seed/bbc.co.uk") for u in article.image_urls)
        assert article.metadata.author == "Newsroom bbc.co.uk"
        assert article.metadata.category == "World"
        assert article.metadata.word_count == len(article.full_text.split())

    def test_sample_without_topic_uses_domain(self) -> None:
        article = sample_article("https://example.org/")
        assert "example.org" in article.title
        assert article.metadata.category == "Analysis"


class TestScraperClient:
    def test_not_configured_raises(self, settings: Settings) -> None:
        client, mock_http = _client(settings)
        with pytest.raises(ScrapeError, match="not configured"):
            client.scrape("https://example.com/a")
        mock_http.post.assert_not_called()

    def test_example_url_counts_as_not_configured(self, settings: Settings) -> None:
        settings.scraper_url = "https://n8n.example.com/webhook/abc"
        client, _ = _client(settings)
        assert client.configured is False

    def test_scrape_parses_camel_case_payload(self, live_settings: Settings) -> None:
        client, mock_http = _client(live_settings)
        mock_http.post.return_value = mock_response(
            {
                "title": "Open models close the gap",
                "content": "<h1>Open models</h1><p>Body text here.</p>",
                "fullText": "Open models\n\nBody text here.",
                "imageUrls": ["https://cdn.example.org/a.jpg"],
                "metadata": {"author": "Jane", "publishedDate": "2025-05-01", "tags": ["AI"]},
            }
        )

        content = client.scrape("https://news.site/open-models")

        assert content.title == "Open models close the gap"
        assert content.image_urls == ["https://cdn.example.org/a.jpg"]
        assert content.metadata.published_date == "2025-05-01"
        assert content.metadata.word_count == 5
        assert mock_http.post.call_args.kwargs["json"] == {"url": "https://news.site/open-models"}

    def test_scrape_derives_full_text_and_unwraps_list(self, live_settings: Settings) -> None:
        client, mock_http = _client(live_settings)
        mock_http.post.return_value = mock_response(
            [{"title": "T", "content": "<h1>T</h1><p>Only HTML.</p>"}]
        )

        content = client.scrape("https://news.site/t")

        assert content.full_text == "T\n\nOnly HTML."

    def test_derived_full_text_handles_attributes_and_entities(self, live_settings: Settings) -> None:
        client, mock_http = _client(live_settings)
        mock_http.post.return_value = mock_response(
            {
                "title": "Tom & Jerry",
                "content": '<p class="lead">Tom &amp; Jerry</p><p class="x">Second para</p>',
            }
        )

        content = client.scrape("https://news.site/t")

        assert content.full_text == "Tom & Jerry\n\nSecond para"
        assert content.metadata.word_count == 5

    def test_error_status_raises_scrape_error(self, live_settings: Settings) -> None:
        client, mock_http = _client(live_settings)
        mock_http.post.return_value = mock_response({}, status_code=500)

        with pytest.raises(ScrapeError, match="500"):
            client.scrape("https://news.site/t")

    def test_connection_error_raises_scrape_error(self, live_settings: Settings) -> None:
        client, mock_http = _client(live_settings)
        mock_http.post.side_effect = httpx.ConnectError("refused")

        with pytest.raises(ScrapeError, match="Could not reach"):
            client.scrape("https://news.site/t")

    def test_missing_title_raises_scrape_error(self, live_settings: Settings) -> None:
        client, mock_http = _client(live_settings)
        mock_http.post.return_value = mock_response({"content": "<p>x</p>"})

        with pytest.raises(ScrapeError, match="Unexpected scraping payload"):
            client.scrape("https://news.site/t")

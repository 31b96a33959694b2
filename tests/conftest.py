"""Shared test fixtures."""

from __future__ import annotations

from concurrent.futures import Executor, Future
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from recast.config import Settings
from recast.llm.client import ClaudeClient
from recast.models import ArticleMetadata, ScrapedContent


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory structure."""
    (tmp_path / "results").mkdir()
    return tmp_path


@pytest.fixture
def settings(tmp_data_dir: Path) -> Settings:
    """Create test settings with temporary paths and no credentials."""
    return Settings(
        anthropic_api_key="",
        fal_key="",
        scraper_url="",
        model="claude-sonnet-4-20250514",
        max_tokens=1024,
        temperature=0.7,
        data_dir=tmp_data_dir,
    )


@pytest.fixture
def live_settings(settings: Settings) -> Settings:
    """Settings with every external service configured."""
    return settings.model_copy(
        update={
            "anthropic_api_key": "test-key-not-real",
            "fal_key": "fal-test-key",
            "scraper_url": "https://workflows.internal/webhook/scrape",
        }
    )


@pytest.fixture
def mock_claude_client(live_settings: Settings) -> ClaudeClient:
    """Create a ClaudeClient with a mocked Anthropic SDK."""
    client = ClaudeClient(live_settings)
    # Replace the internal Anthropic client with a mock
    mock_anthropic = MagicMock()
    client._client = mock_anthropic
    return client


@pytest.fixture
def scraped() -> ScrapedContent:
    return ScrapedContent(
        title="Open models close the gap",
        content="<h1>Open models close the gap</h1><p>Open weights are catching up.</p>",
        full_text="Open models close the gap\n\nOpen weights are catching up.",
        image_urls=["https://cdn.example.org/a.jpg"],
        metadata=ArticleMetadata(
            author="Jane Doe",
            published_date="2025-05-01T10:00:00Z",
            category="Technology",
            tags=["AI", "Open source"],
            word_count=10,
        ),
    )


GENERATED_PAYLOAD = {
    "article_html": "<article><h1>Open models, closer than ever</h1><p>Body.</p></article>",
    "image_prompt": "An open padlock made of circuit boards, editorial photo",
    "linkedin_post": "Open models are catching up. Here is why it matters.",
    "twitter_thread": ["1/ Open models are catching up", "2/ Here is why", "3/ Follow for more"],
    "instagram_reel_script": {
        "hook": "Closed AI just lost its lead?",
        "slides": [
            {"subtitle": "The gap", "visual": "Two bar charts", "voiceover": "The gap is shrinking."},
            {"subtitle": "Why", "visual": "Code on screen", "voiceover": "Open weights win on cost."},
        ],
    },
}


def make_tool_response(
    tool_input: dict | None,
    name: str = "generate_rewritten_content",
    input_tokens: int = 100,
    output_tokens: int = 200,
):
    """Helper to create a mock Anthropic response holding one tool call."""
    mock_response = MagicMock()
    if tool_input is None:
        mock_response.content = [MagicMock(type="text", text="I cannot do that.")]
        mock_response.stop_reason = "end_turn"
    else:
        block = MagicMock(type="tool_use", input=tool_input)
        block.name = name
        mock_response.content = [block]
        mock_response.stop_reason = "tool_use"
    mock_response.usage.input_tokens = input_tokens
    mock_response.usage.output_tokens = output_tokens
    return mock_response


class ImmediateExecutor(Executor):
    """Runs submitted work synchronously so background jobs finish before asserts."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:  # pragma: no cover - surfaced through the future
            future.set_exception(exc)
        return future


def mock_response(json_data: object = None, status_code: int = 200) -> MagicMock:
    """Helper to create a mock httpx response."""
    import httpx

    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data
    if status_code >= 400:
        request = httpx.Request("POST", "https://test.invalid")
        response = httpx.Response(status_code, request=request, text="boom")
        resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            "error", request=request, response=response
        )
    return resp

"""Tests for the LLM client wrapper and prompt templates."""

from __future__ import annotations

import pytest

from recast.errors import GenerationError
from recast.llm.client import ClaudeClient, _is_retryable
from recast.llm.prompts import render
from tests.conftest import make_tool_response

TOOL = {"name": "generate_rewritten_content", "input_schema": {"type": "object"}}


def test_generate_structured_returns_tool_input(mock_claude_client: ClaudeClient) -> None:
    """Test that generate_structured() returns the tool call's input."""
    mock_claude_client._client.messages.create.return_value = make_tool_response(
        {"article_html": "<h1>Hi</h1>"}
    )

    result = mock_claude_client.generate_structured(
        system="You are a test assistant.",
        messages=[{"role": "user", "content": "Rewrite"}],
        tool=TOOL,
    )

    assert result == {"article_html": "<h1>Hi</h1>"}
    call_kwargs = mock_claude_client._client.messages.create.call_args.kwargs
    assert call_kwargs["tools"] == [TOOL]
    assert call_kwargs["tool_choice"] == {"type": "tool", "name": "generate_rewritten_content"}
    assert call_kwargs["system"] == "You are a test assistant."


def test_generate_structured_without_tool_call_raises(mock_claude_client: ClaudeClient) -> None:
    """Test that a plain-text answer is reported as a GenerationError, without retrying."""
    mock_claude_client._client.messages.create.return_value = make_tool_response(None)

    with pytest.raises(GenerationError):
        mock_claude_client.generate_structured(
            system="test", messages=[{"role": "user", "content": "x"}], tool=TOOL
        )
    assert mock_claude_client._client.messages.create.call_count == 1


def test_usage_summary_accumulates(mock_claude_client: ClaudeClient) -> None:
    """Test that token usage accumulates across calls."""
    mock_claude_client._client.messages.create.return_value = make_tool_response(
        {}, input_tokens=50, output_tokens=100
    )
    mock_claude_client.generate_structured(system="t", messages=[], tool=TOOL)

    mock_claude_client._client.messages.create.return_value = make_tool_response(
        {}, input_tokens=75, output_tokens=150
    )
    mock_claude_client.generate_structured(system="t", messages=[], tool=TOOL)

    summary = mock_claude_client.usage_summary
    assert summary["total_input_tokens"] == 125
    assert summary["total_output_tokens"] == 250


def test_render_user_template() -> None:
    """Test that the user prompt template includes the article fields."""
    rendered = render(
        "user.j2",
        title="Open models",
        full_text="Open weights are catching up.",
        category=None,
        tags=["AI", "Open source"],
    )

    assert "Title: Open models" in rendered
    assert "Open weights are catching up." in rendered
    assert "Category: General" in rendered
    assert "Tags: AI, Open source" in rendered


def test_render_user_template_without_tags() -> None:
    rendered = render("user.j2", title="T", full_text="Body", category="World", tags=[])
    assert "Tags: N/A" in rendered
    assert "Category: World" in rendered


class TestRetryLogic:
    """Tests for the retry classification in ClaudeClient."""

    def test_auth_error_not_retried(self) -> None:
        from anthropic import AuthenticationError

        exc = AuthenticationError.__new__(AuthenticationError)
        assert _is_retryable(exc) is False

    def test_generation_error_not_retried(self) -> None:
        assert _is_retryable(GenerationError("no tool call")) is False

    def test_server_error_is_retryable(self) -> None:
        exc = Exception("Internal server error")
        assert _is_retryable(exc) is True

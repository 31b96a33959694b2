"""Wrapper around the Anthropic Claude SDK."""

from __future__ import annotations

import logging

from anthropic import Anthropic, APIStatusError, AuthenticationError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from recast.config import Settings
from recast.errors import GenerationError

logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    """Return True only for transient API errors (rate-limits, server errors).

    Authentication errors (401) and bad-request errors (400) should NOT be
    retried, they will never succeed without a config change.
    """
    if isinstance(exc, AuthenticationError):
        return False
    if isinstance(exc, APIStatusError) and exc.status_code < 500:
        # 4xx errors other than 429 (rate limit) are not retryable
        return exc.status_code == 429
    if isinstance(exc, GenerationError):
        return False
    return True


class ClaudeClient:
    """Thin wrapper providing retry logic, tool-call extraction and token tracking."""

    def __init__(self, settings: Settings) -> None:
        self._client = Anthropic(api_key=settings.anthropic_api_key)
        self._model = settings.model
        self._max_tokens = settings.max_tokens
        self._temperature = settings.temperature
        self._total_input_tokens = 0
        self._total_output_tokens = 0

    def _track_usage(self, response: object) -> None:
        self._total_input_tokens += response.usage.input_tokens
        self._total_output_tokens += response.usage.output_tokens

    @retry(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        reraise=True,
    )
    def generate_structured(
        self,
        system: str,
        messages: list[dict],
        tool: dict,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> dict:
        """Force Claude to call ``tool`` and return the tool input as a dict.

        Raises:
            GenerationError: If the response holds no call to ``tool``.
        """
        response = self._client.messages.create(
            model=self._model,
            max_tokens=max_tokens or self._max_tokens,
            temperature=temperature if temperature is not None else self._temperature,
            system=system,
            messages=messages,
            tools=[tool],
            tool_choice={"type": "tool", "name": tool["name"]},
        )
        self._track_usage(response)
        for block in response.content:
            if getattr(block, "type", None) == "tool_use" and block.name == tool["name"]:
                return dict(block.input)
        logger.warning("Claude stopped with %r and no tool call", getattr(response, "stop_reason", None))
        raise GenerationError("Claude did not return structured content")

    @property
    def usage_summary(self) -> dict:
        return {
            "total_input_tokens": self._total_input_tokens,
            "total_output_tokens": self._total_output_tokens,
        }


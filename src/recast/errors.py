"""Exception types raised by the rewrite pipeline and its adapters."""

from __future__ import annotations


class RecastError(Exception):
    """Base class for all recast errors."""


class ScrapeError(RecastError):
    """The scraping workflow could not extract content from a URL."""


class GenerationError(RecastError):
    """The language model did not return usable content."""


class ImageGenerationError(RecastError):
    """The image API did not return an image URL."""


class PipelineError(RecastError):
    """A pipeline stage failed while running in strict mode."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause


class ResultNotFound(RecastError, KeyError):
    """No stored result exists for the requested id."""

    def __str__(self) -> str:
        return f"No result stored for id {self.args[0]!r}" if self.args else "Result not found"

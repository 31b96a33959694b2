"""Flat-file result store: one JSON document per pipeline run."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from recast.errors import ResultNotFound
from recast.models import PipelineResult

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"^[0-9a-f]{32}$")


class ResultStore:
    """Persist ``PipelineResult`` objects as ``<directory>/<id>.json``."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory
        self._directory.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, result_id: str) -> Path:
        if not _ID_RE.match(result_id):
            raise ResultNotFound(result_id)
        return self._directory / f"{result_id}.json"

    def save(self, result: PipelineResult) -> Path:
        path = self._path(result.id)
        # Write then rename so readers never see a half-written file
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(result.model_dump_json(by_alias=True, indent=2))
        tmp.replace(path)
        logger.debug("Saved result %s to %s", result.id, path)
        return path

    def load(self, result_id: str) -> PipelineResult:
        path = self._path(result_id)
        if not path.exists():
            raise ResultNotFound(result_id)
        return PipelineResult.model_validate_json(path.read_text())

    def exists(self, result_id: str) -> bool:
        try:
            return self._path(result_id).exists()
        except ResultNotFound:
            return False

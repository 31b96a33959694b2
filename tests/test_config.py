"""Tests for settings defaults and derived values."""

from __future__ import annotations

from pathlib import Path

from recast.config import Settings


def test_results_dir_follows_data_dir(tmp_path: Path) -> None:
    settings = Settings(data_dir=tmp_path / "store")
    assert settings.results_dir == tmp_path / "store" / "results"


def test_explicit_results_dir_wins(tmp_path: Path) -> None:
    settings = Settings(data_dir=tmp_path, results_dir=tmp_path / "elsewhere")
    assert settings.results_dir == tmp_path / "elsewhere"


def test_results_dir_from_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("RECAST_DATA_DIR", str(tmp_path))
    assert Settings().results_dir == tmp_path / "results"


def test_mode_and_scraper_detection() -> None:
    settings = Settings(scraper_url="https://your-n8n.example.com/webhook/scrape")
    assert settings.scraper_configured is False
    assert settings.mode == "permissive"

    settings = Settings(scraper_url="https://workflows.internal/webhook/scrape", strict=True)
    assert settings.scraper_configured is True
    assert settings.mode == "strict"

"""
Shared pytest fixtures for tradefeed tests.

This module provides:
- Settings / logging-context cleanup for test isolation
- Feed file and report path factories backed by tmp_path
- An in-memory error channel
"""

import io
from collections.abc import Callable
from pathlib import Path

import pytest

from tradefeed.core.findings import FindingSink
from tradefeed.core.logging import clear_context, reset_logging
from tradefeed.core.settings import ReportPaths, reset_settings


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests as unit unless they are marked otherwise."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch):
    """Fresh settings and logging context for every test."""
    for key in ("TRADEFEED_OUTPUT_DIR", "TRADEFEED_ERROR_LOG_PATH", "TRADEFEED_LOG_LEVEL", "TRADEFEED_LOG_FORMAT"):
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    reset_logging()
    clear_context()
    yield
    reset_settings()
    reset_logging()
    clear_context()


@pytest.fixture
def write_feed(tmp_path: Path) -> Callable[[str], Path]:
    """Factory writing feed content to a file under tmp_path."""

    def _write(content: str, name: str = "SAMPLE.dat") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def report_paths(tmp_path: Path) -> ReportPaths:
    out = tmp_path / "out"
    return ReportPaths(
        trade=out / "TRADE.csv",
        extrade=out / "EXTRADE.csv",
        info=out / "INFO.csv",
    )


@pytest.fixture
def error_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def sink(error_stream: io.StringIO) -> FindingSink:
    return FindingSink(error_stream)

"""
Shared pytest fixtures and configuration for tracespine tests.

This module provides:
- Auto-marking of tests by location
- Logging and settings reset between tests
- ``write_tree`` for laying out ``.rsk`` files under ``tmp_path``

Usage:
    def test_scan(write_tree):
        root = write_tree({"design/a.rsk": "[REQ-a]\\n"})
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

from tracespine.core.settings import reset_settings


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging_and_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Reset structlog and the cached tool settings around each test.

    CLI tests configure structlog to write to the runner's stderr, which is
    closed once the invocation returns.
    """
    for var in ("TRACESPINE_LOG_LEVEL", "TRACESPINE_JSON_LOGS", "TRACESPINE_COLOR"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
    reset_settings()


# =============================================================================
# File Tree Fixtures
# =============================================================================


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """
    Write ``{relative path: contents}`` under ``tmp_path`` and return the root.

    A path ending in ``/`` creates an empty directory.
    """

    def _write(files: dict[str, str]) -> Path:
        for rel, contents in files.items():
            target = tmp_path / rel
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(contents, encoding="utf-8")
        return tmp_path

    return _write

"""Fixtures for logging utility tests."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    # Ensure heatgrid package is importable when running tests from repo root.
    repo_root = Path(__file__).resolve().parents[2]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


@pytest.fixture
def heatgrid_logger():
    """The package logger, with handlers and level restored afterwards."""
    logger = logging.getLogger("heatgrid")
    saved_handlers = logger.handlers[:]
    saved_level = logger.level
    yield logger
    for h in logger.handlers[:]:
        if h not in saved_handlers:
            h.close()
        logger.removeHandler(h)
    for h in saved_handlers:
        logger.addHandler(h)
    logger.setLevel(saved_level)

# tests/heatmap/conftest.py
"""Fixtures for heatmap core tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import pytest


def pytest_configure() -> None:
    # Ensure heatgrid package is importable when running tests from repo root.
    repo_root = Path(__file__).resolve().parents[2]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


def epoch_ms(text: str) -> int:
    """Epoch milliseconds for an ISO timestamp (UTC when naive)."""
    ts = pd.Timestamp(text)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return int(ts.value // 1_000_000)


@pytest.fixture
def two_days_hourly():
    """Two UTC days, one sample per hour, value == hour of day."""
    from heatgrid.heatmap.models import Field, FieldType, TimeRange

    times = []
    values = []
    for day in ("2025-03-01", "2025-03-02"):
        for hour in range(24):
            times.append(epoch_ms(f"{day}T{hour:02d}:00:00"))
            values.append(hour)
    time_field = Field(name="time", type=FieldType.TIME, values=times)
    value_field = Field(name="value", type=FieldType.NUMBER, values=values)
    time_range = TimeRange.of("2025-03-01T00:00:00Z", "2025-03-02T23:59:59Z")
    return time_field, value_field, time_range

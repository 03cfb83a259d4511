"""Bucketize a time/value series into a day x intraday-bucket grid.

Samples are converted to local time in the requested timezone, dropped when
they fall outside the overall time range or the daily window, and folded
into ``(local date, bucket)`` cells. Every day in the range gets a row, and
every row has the same buckets, so the grid stays rectangular even where
there is no data.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import numpy as np
import pandas as pd
from dateutil import tz as dateutil_tz

from heatgrid.heatmap.errors import ConfigError, DataError
from heatgrid.heatmap.formatter import ValueFormatter
from heatgrid.heatmap.models import (
    EMPTY_RANGE,
    Aggregation,
    BucketGrid,
    DailyWindow,
    DayRow,
    Field,
    HourBucket,
    TimeRange,
)
from heatgrid.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BUCKET_MINUTES = 60

SECONDS_PER_HOUR = 3600.0


def resolve_timezone(name: str | None) -> dt.tzinfo:
    """Resolve ``"utc"``, ``"browser"`` (host local zone) or an IANA name.

    Raises:
        ConfigError: If the name is not a known zone.
    """
    if not name or name.lower() == "utc":
        return dt.timezone.utc
    if name.lower() == "browser":
        return dateutil_tz.tzlocal()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Unknown timezone {name!r}") from e


def _to_utc_times(values: Sequence[Any]) -> pd.Series:
    raw = pd.Series(list(values), dtype=object)
    try:
        if len(raw) and all(
            isinstance(v, (int, float, np.integer, np.floating)) and not isinstance(v, bool)
            for v in raw
        ):
            times = pd.to_datetime(raw.astype(float), unit="ms", utc=True)
        else:
            times = pd.to_datetime(raw, utc=True)
    except (TypeError, ValueError, OverflowError) as e:
        raise DataError(f"Time field contains values that are not timestamps: {e}") from e
    if times.isna().any():
        bad = int(times.isna().sum())
        raise DataError(f"Time field contains {bad} missing or unparseable timestamps")
    return times


def _to_numeric_values(values: Sequence[Any]) -> pd.Series:
    raw = pd.Series(list(values), dtype=object)
    numeric = pd.to_numeric(raw, errors="coerce")
    bad = numeric.isna() & raw.notna()
    if bad.any():
        first = raw[bad].iloc[0]
        raise DataError(f"Value field contains {int(bad.sum())} non-numeric values (first: {first!r})")
    return numeric.astype(float)


def _dates_between(time_range: TimeRange, tzinfo: dt.tzinfo) -> list[dt.date]:
    first = time_range.start.tz_convert(tzinfo).date()
    last = time_range.end.tz_convert(tzinfo).date()
    return [first + dt.timedelta(days=k) for k in range((last - first).days + 1)]


def bucketize(
    time_field: Field,
    value_field: Field,
    timezone: str | None,
    time_range: TimeRange,
    daily_window: DailyWindow,
    *,
    bucket_minutes: float = DEFAULT_BUCKET_MINUTES,
    aggregation: Aggregation = Aggregation.SUM,
) -> BucketGrid:
    """Build a BucketGrid with one row per local calendar day.

    Args:
        time_field: Timestamps; numbers are epoch milliseconds, naive
            datetimes are UTC.
        value_field: Values paired with ``time_field`` by index; None/NaN
            entries are absent samples.
        timezone: ``"utc"``, ``"browser"`` or an IANA zone name.
        time_range: Closed overall range; samples outside it are dropped.
        daily_window: Intraday span to keep.
        bucket_minutes: Width of each intraday bucket.
        aggregation: How samples in one bucket are combined.

    Returns:
        The grid. ``min``/``max`` span the non-empty buckets, or
        ``EMPTY_RANGE`` when every bucket is empty.

    Raises:
        DataError: Length mismatch, unparseable timestamps or non-numeric values.
        ConfigError: Unknown timezone or invalid bucket width.
    """
    if len(time_field.values) != len(value_field.values):
        raise DataError(
            f"Time field {time_field.name!r} has {len(time_field.values)} values "
            f"but value field {value_field.name!r} has {len(value_field.values)}"
        )
    try:
        aggregation = Aggregation(aggregation)
    except ValueError as e:
        raise ConfigError(f"Unknown aggregation {aggregation!r}") from e
    tzinfo = resolve_timezone(timezone)
    shells = daily_window.bucket_shells(bucket_minutes)
    dates = _dates_between(time_range, tzinfo)

    times = _to_utc_times(time_field.values)
    values = _to_numeric_values(value_field.values)

    df = pd.DataFrame({"time": times, "value": values})
    total = len(df)
    df = df[df["value"].notna() & (df["time"] >= time_range.start) & (df["time"] <= time_range.end)]

    local = df["time"].dt.tz_convert(tzinfo)
    seconds = (
        local.dt.hour * SECONDS_PER_HOUR
        + local.dt.minute * 60.0
        + local.dt.second
        + local.dt.microsecond / 1e6
    )
    window_start = daily_window.from_hour * SECONDS_PER_HOUR
    window_end = daily_window.to_hour * SECONDS_PER_HOUR
    in_window = (seconds >= window_start) & (seconds < window_end)

    df = df.assign(
        date=local.dt.date,
        bucket=np.floor((seconds - window_start) / (bucket_minutes * 60.0)),
    )[in_window]
    # fold in timestamp order so first/last follow time, not input order
    df = df.sort_values("time", kind="mergesort")

    logger.debug(
        f"bucketize: {total} samples, {total - len(df)} dropped, "
        f"{len(dates)} days x {len(shells)} buckets ({aggregation.value})"
    )

    cells: dict[tuple[dt.date, int], tuple[float, int]] = {}
    if len(df):
        grouped = df.groupby(["date", "bucket"], sort=True)["value"]
        folded = grouped.agg(aggregation.value)
        counts = grouped.size()
        for ((date, bucket), value), count in zip(folded.items(), counts.to_numpy()):
            cells[(date, int(bucket))] = (float(value), int(count))

    rows = []
    for date in dates:
        buckets = []
        for i, (start, end) in enumerate(shells):
            value, count = cells.get((date, i), (None, 0))
            buckets.append(HourBucket(start_hour=start, end_hour=end, value=value, count=count))
        rows.append(DayRow(date=date, buckets=tuple(buckets)))

    present = [b.value for row in rows for b in row.buckets if b.value is not None]
    if present:
        lo, hi = min(present), max(present)
    else:
        lo, hi = EMPTY_RANGE

    return BucketGrid(
        rows=tuple(rows),
        min=lo,
        max=hi,
        value_display=ValueFormatter.for_field(value_field),
    )

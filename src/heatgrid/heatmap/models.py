"""Data model for the heatmap core.

Input side: ``Field`` / ``Frame`` (one query result column / table),
``TimeRange``, ``DailyWindow`` and ``TimeRegion``.

Output side: ``BucketGrid`` made of ``DayRow`` s of ``HourBucket`` s. Grids
are rebuilt from scratch on every call and never mutated afterwards.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from heatgrid.heatmap.errors import ConfigError, DataError
from heatgrid.heatmap.thresholds import ThresholdsConfig

# min/max reported for a grid without any non-empty bucket
EMPTY_RANGE: tuple[float, float] = (0.0, 1.0)

HOURS_PER_DAY = 24.0


class FieldType(str, Enum):
    """Column types the core distinguishes."""

    TIME = "time"
    NUMBER = "number"
    OTHER = "other"


@dataclass(frozen=True)
class DisplayValue:
    """Result of a field display function."""

    text: str
    color: Optional[str] = None
    numeric: float = math.nan


DisplayFn = Callable[[float], Union[DisplayValue, str]]


@dataclass(frozen=True)
class FieldConfig:
    """Per-field display options (the panel's ``config.custom``)."""

    color_palette: str = "interpolateSpectral"
    invert_palette: bool = False
    color_space: str = "rgb"
    thresholds: Optional[ThresholdsConfig] = None
    unit: str = ""
    decimals: Optional[int] = None


@dataclass
class Field:
    """One column of source data."""

    name: str
    type: FieldType
    values: Sequence[Any]
    config: FieldConfig = field(default_factory=FieldConfig)
    display: Optional[DisplayFn] = None

    def __post_init__(self) -> None:
        try:
            self.type = FieldType(self.type)
        except ValueError as e:
            raise ConfigError(f"Unknown field type {self.type!r} for field {self.name!r}") from e

    def __len__(self) -> int:
        return len(self.values)


@dataclass
class Frame:
    """One query result: an ordered list of fields."""

    fields: list[Field]
    name: Optional[str] = None

    def field_by_name(self, name: Optional[str]) -> Optional[Field]:
        if not name:
            return None
        return next((f for f in self.fields if f.name == name), None)

    def first_of_type(self, field_type: FieldType) -> Optional[Field]:
        return next((f for f in self.fields if f.type is field_type), None)


def to_utc_timestamp(value: Any) -> pd.Timestamp:
    """Convert epoch milliseconds, a datetime or a string to a UTC Timestamp.

    Naive values are taken to be UTC.
    """
    if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool):
        ts = pd.Timestamp(value, unit="ms")
    else:
        ts = pd.Timestamp(value)
    if ts is pd.NaT:
        raise DataError(f"Cannot convert {value!r} to a timestamp")
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


@dataclass(frozen=True)
class TimeRange:
    """Closed interval ``[start, end]`` of UTC timestamps."""

    start: pd.Timestamp
    end: pd.Timestamp

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise DataError(f"Time range start {self.start} is after end {self.end}")

    @classmethod
    def of(cls, start: Any, end: Any) -> "TimeRange":
        """Build from epoch milliseconds, datetimes or ISO strings."""
        try:
            return cls(to_utc_timestamp(start), to_utc_timestamp(end))
        except DataError:
            raise
        except (TypeError, ValueError) as e:
            raise DataError(f"Invalid time range ({start!r}, {end!r}): {e}") from e

    def contains(self, ts: pd.Timestamp) -> bool:
        return self.start <= ts <= self.end


def _parse_hour(text: Any, what: str) -> float:
    try:
        hour = float(text)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid {what} hour {text!r}") from e
    return hour


@dataclass(frozen=True)
class DailyWindow:
    """The ``[from_hour, to_hour)`` span of each day to display.

    ``to_hour == 0`` means end of day (24). Windows that wrap past midnight
    are not supported.
    """

    from_hour: float = 0.0
    to_hour: float = HOURS_PER_DAY

    def __post_init__(self) -> None:
        from_hour = _parse_hour(self.from_hour, "from")
        to_hour = _parse_hour(self.to_hour, "to")
        if to_hour == 0.0:
            to_hour = HOURS_PER_DAY
        object.__setattr__(self, "from_hour", from_hour)
        object.__setattr__(self, "to_hour", to_hour)
        if math.isnan(from_hour) or math.isnan(to_hour):
            raise ConfigError("Daily window hours must be numbers")
        if not 0.0 <= from_hour < HOURS_PER_DAY or not 0.0 < to_hour <= HOURS_PER_DAY:
            raise ConfigError(f"Daily window hours must lie within [0, 24], got {from_hour}-{to_hour}")
        if from_hour >= to_hour:
            raise ConfigError(
                f"Daily window {from_hour}-{to_hour} wraps past midnight; from must be before to"
            )

    @classmethod
    def parse(cls, from_hour: Any, to_hour: Any) -> "DailyWindow":
        """Parse the panel's string hours (``"0"`` for ``to`` means 24)."""
        return cls(from_hour, to_hour)

    @property
    def hours(self) -> float:
        return self.to_hour - self.from_hour

    def bucket_shells(self, bucket_minutes: float) -> tuple[tuple[float, float], ...]:
        """Split the window into ``(start_hour, end_hour)`` pairs.

        The last bucket is clipped to ``to_hour`` when the width does not
        divide the window evenly.

        Raises:
            ConfigError: If the width is not a positive number of minutes up
                to one day.
        """
        if isinstance(bucket_minutes, bool) or not isinstance(bucket_minutes, (int, float)):
            raise ConfigError(f"Bucket width must be a number of minutes, got {bucket_minutes!r}")
        if not 0 < bucket_minutes <= HOURS_PER_DAY * 60:
            raise ConfigError(f"Bucket width must be within (0, 1440] minutes, got {bucket_minutes}")
        width = bucket_minutes / 60.0
        count = math.ceil(round(self.hours / width, 9))
        shells = []
        for i in range(count):
            start = self.from_hour + i * width
            shells.append((start, min(start + width, self.to_hour)))
        return tuple(shells)


@dataclass(frozen=True)
class TimeRegion:
    """A highlighted span drawn on every day. Not processed by the core."""

    start_hour: float
    end_hour: float
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"startHour": self.start_hour, "endHour": self.end_hour, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeRegion":
        try:
            return cls(
                start_hour=float(data["startHour"]),
                end_hour=float(data["endHour"]),
                color=str(data["color"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid time region {data!r}") from e


class Aggregation(str, Enum):
    """How samples falling into the same bucket are combined."""

    SUM = "sum"
    MEAN = "mean"
    COUNT = "count"
    MIN = "min"
    MAX = "max"
    FIRST = "first"
    LAST = "last"


@dataclass(frozen=True)
class HourBucket:
    """One intraday cell. ``value`` is None when no sample fell into it."""

    start_hour: float
    end_hour: float
    value: Optional[float] = None
    count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.value is None


@dataclass(frozen=True)
class DayRow:
    date: dt.date
    buckets: tuple[HourBucket, ...]


@dataclass(frozen=True)
class BucketGrid:
    """Day x bucket grid plus its value range.

    Every row has the same number of buckets. ``value_display`` formats a
    value for legends and tooltips.
    """

    rows: tuple[DayRow, ...]
    min: float = EMPTY_RANGE[0]
    max: float = EMPTY_RANGE[1]
    value_display: Callable[[float], str] = field(default=str, compare=False)

    @property
    def shape(self) -> tuple[int, int]:
        """``(days, buckets_per_day)``."""
        if not self.rows:
            return 0, 0
        return len(self.rows), len(self.rows[0].buckets)

    @property
    def dates(self) -> list[dt.date]:
        return [row.date for row in self.rows]

    @property
    def is_empty(self) -> bool:
        return all(b.is_empty for row in self.rows for b in row.buckets)

    def to_matrix(self) -> np.ndarray:
        """Values as a ``(days, buckets)`` float array, NaN for empty buckets."""
        days, width = self.shape
        matrix = np.full((days, width), np.nan, dtype=float)
        for i, row in enumerate(self.rows):
            for j, bucket in enumerate(row.buckets):
                if bucket.value is not None:
                    matrix[i, j] = bucket.value
        return matrix

    def to_frame(self) -> pd.DataFrame:
        """Values as a DataFrame indexed by date, one column per bucket start hour."""
        columns = [b.start_hour for b in self.rows[0].buckets] if self.rows else []
        return pd.DataFrame(self.to_matrix(), index=pd.Index(self.dates, name="date"), columns=columns)

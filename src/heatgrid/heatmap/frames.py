"""Build ``Frame`` objects from tabular data.

pandas is required; polars is optional and converted through pandas.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import pandas as pd

from heatgrid.heatmap.models import Field, FieldConfig, FieldType, Frame

try:  # pragma: no cover - import guard
    import polars as _pl  # type: ignore[import]
    HAS_POLARS = True
except Exception:  # pragma: no cover - polars optional
    _pl = None  # type: ignore[assignment]
    HAS_POLARS = False

if TYPE_CHECKING:
    import polars as pl


def infer_field_type(series: pd.Series) -> FieldType:
    """datetime columns are time, int/uint/float columns are numbers."""
    if pd.api.types.is_datetime64_any_dtype(series.dtype):
        return FieldType.TIME
    kind = getattr(series.dtype, "kind", None)
    if kind in ("i", "u", "f"):
        return FieldType.NUMBER
    return FieldType.OTHER


def frame_from_pandas(
    df: pd.DataFrame,
    *,
    name: Optional[str] = None,
    field_config: Optional[dict[str, FieldConfig]] = None,
) -> Frame:
    """Wrap each DataFrame column as a Field.

    Args:
        df: Source table.
        name: Optional frame name.
        field_config: Optional per-column FieldConfig, keyed by column name.
    """
    field_config = field_config or {}
    fields = []
    for col in df.columns:
        series = df[col]
        fields.append(
            Field(
                name=str(col),
                type=infer_field_type(series),
                values=series.tolist(),
                config=field_config.get(str(col), FieldConfig()),
            )
        )
    return Frame(fields=fields, name=name)


def frame_from_polars(
    df: "pl.DataFrame",
    *,
    name: Optional[str] = None,
    field_config: Optional[dict[str, FieldConfig]] = None,
) -> Frame:
    """Same as frame_from_pandas for a polars DataFrame.

    Raises:
        ImportError: If polars is not installed.
    """
    if not HAS_POLARS:
        raise ImportError("polars is required for frame_from_polars; install heatgrid[polars]")
    return frame_from_pandas(df.to_pandas(), name=name, field_config=field_config)


def frame_from_any(data: Any, **kwargs: Any) -> Frame:
    """Dispatch on pandas vs polars input."""
    if isinstance(data, pd.DataFrame):
        return frame_from_pandas(data, **kwargs)
    if HAS_POLARS and _pl is not None and isinstance(data, _pl.DataFrame):
        return frame_from_polars(data, **kwargs)
    raise TypeError(f"Unsupported table type {type(data).__name__}; expected pandas or polars DataFrame")

"""Day x intraday-bucket heatmap grids and their color scales."""

from heatgrid.heatmap.assembler import HeatmapAssembler, HeatmapModel, Placeholder
from heatgrid.heatmap.bucketize import bucketize, resolve_timezone
from heatgrid.heatmap.colorscales import (
    COLORSCALE_OPTIONS,
    PaletteConfig,
    PaletteKind,
    make_scale,
    make_spectrum_scale,
    make_threshold_scale,
)
from heatgrid.heatmap.errors import ConfigError, DataError, HeatgridError
from heatgrid.heatmap.formatter import ValueFormatter
from heatgrid.heatmap.frames import frame_from_any, frame_from_pandas, frame_from_polars
from heatgrid.heatmap.models import (
    Aggregation,
    BucketGrid,
    DailyWindow,
    DayRow,
    DisplayValue,
    Field,
    FieldConfig,
    FieldType,
    Frame,
    HourBucket,
    TimeRange,
    TimeRegion,
)
from heatgrid.heatmap.options import HeatmapOptions
from heatgrid.heatmap.options_config import HeatmapOptionsConfig
from heatgrid.heatmap.thresholds import ThresholdStep, ThresholdsConfig, ThresholdsMode

__all__ = [
    "Aggregation",
    "BucketGrid",
    "COLORSCALE_OPTIONS",
    "ConfigError",
    "DailyWindow",
    "DataError",
    "DayRow",
    "DisplayValue",
    "Field",
    "FieldConfig",
    "FieldType",
    "Frame",
    "HeatgridError",
    "HeatmapAssembler",
    "HeatmapModel",
    "HeatmapOptions",
    "HeatmapOptionsConfig",
    "HourBucket",
    "PaletteConfig",
    "PaletteKind",
    "Placeholder",
    "ThresholdStep",
    "ThresholdsConfig",
    "ThresholdsMode",
    "TimeRange",
    "TimeRegion",
    "ValueFormatter",
    "bucketize",
    "frame_from_any",
    "frame_from_pandas",
    "frame_from_polars",
    "make_scale",
    "make_spectrum_scale",
    "make_threshold_scale",
    "resolve_timezone",
]

"""
heatgrid: day x hour heatmap grids and color scales for time series.

This package provides:
- bucketize: fold a time/value series into a per-day grid of intraday buckets
- make_scale: spectrum, threshold and field-defined value -> color functions
- HeatmapAssembler: composes both for an external renderer
- Logging utilities for library and application use

For logging configuration in standalone scripts/demos:
    ```python
    from heatgrid.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When used as a library, logging is handled by the parent application's
configuration.
"""

import logging

from heatgrid.utils.logging import configure_logging, get_logger

from heatgrid.heatmap import (
    BucketGrid,
    ConfigError,
    DailyWindow,
    DataError,
    HeatmapAssembler,
    HeatmapOptions,
    TimeRange,
    bucketize,
    make_scale,
)

# NullHandler so logs don't reach root when no application configured logging.
_logger = logging.getLogger("heatgrid")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "BucketGrid",
    "ConfigError",
    "DailyWindow",
    "DataError",
    "HeatmapAssembler",
    "HeatmapOptions",
    "TimeRange",
    "bucketize",
    "configure_logging",
    "get_logger",
    "make_scale",
]

__version__ = "0.1.0"

"""Exception types raised by the heatmap core."""

from __future__ import annotations


class HeatgridError(Exception):
    """Base class for heatgrid errors."""


class ConfigError(HeatgridError, ValueError):
    """Invalid palette, threshold, daily window, timezone or panel option."""


class DataError(HeatgridError, ValueError):
    """Input series violate the bucketizer contract (corrupt upstream data)."""

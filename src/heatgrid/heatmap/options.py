"""Panel-level heatmap options.

``HeatmapOptions`` mirrors the panel's JSON options object. Keys on disk are
camelCase (``valueFieldName``, ``showLegend``, ...); hours are strings as
entered in the editor, ``to == "0"`` meaning end of day.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from heatgrid.heatmap.errors import ConfigError
from heatgrid.heatmap.models import Aggregation, DailyWindow, TimeRegion


def _get_bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


@dataclass
class HeatmapOptions:
    """Configuration for one heatmap panel."""

    value_field_name: Optional[str] = None  # None: first numeric field
    time_field_name: Optional[str] = None  # None: first time field
    regions: list[TimeRegion] = field(default_factory=list)
    show_legend: bool = True
    show_value_indicator: bool = False
    from_hour: str = "0"
    to_hour: str = "0"
    bucket_minutes: float = 60
    aggregation: Aggregation = Aggregation.SUM

    def __post_init__(self) -> None:
        try:
            self.aggregation = Aggregation(self.aggregation)
        except ValueError as e:
            raise ConfigError(f"Unknown aggregation {self.aggregation!r}") from e

    @property
    def daily_window(self) -> DailyWindow:
        return DailyWindow.parse(self.from_hour, self.to_hour)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the panel's JSON shape."""
        return {
            "valueFieldName": self.value_field_name,
            "timeFieldName": self.time_field_name,
            "regions": [r.to_dict() for r in self.regions],
            "showLegend": self.show_legend,
            "showValueIndicator": self.show_value_indicator,
            "from": self.from_hour,
            "to": self.to_hour,
            "bucketMinutes": self.bucket_minutes,
            "aggregation": self.aggregation.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HeatmapOptions":
        """Deserialize from the panel's JSON shape.

        Missing keys take their defaults.

        Raises:
            ConfigError: On an unknown aggregation, a malformed region, a
                non-boolean flag or a non-numeric bucket width.
        """
        regions_raw = data.get("regions") or []
        if not isinstance(regions_raw, list):
            raise ConfigError(f"regions must be a list, got {type(regions_raw).__name__}")

        try:
            bucket_minutes = float(data.get("bucketMinutes", 60))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid bucketMinutes {data.get('bucketMinutes')!r}") from e

        return cls(
            value_field_name=data.get("valueFieldName") or None,
            time_field_name=data.get("timeFieldName") or None,
            regions=[TimeRegion.from_dict(r) for r in regions_raw],
            show_legend=_get_bool(data, "showLegend", True),
            show_value_indicator=_get_bool(data, "showValueIndicator", False),
            from_hour=str(data.get("from", "0")),
            to_hour=str(data.get("to", "0")),
            bucket_minutes=bucket_minutes,
            aggregation=data.get("aggregation", Aggregation.SUM.value),
        )

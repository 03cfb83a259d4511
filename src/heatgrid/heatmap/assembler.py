"""Compose a bucket grid with its color and value formatting functions.

For each frame the assembler picks a time and a value field, bucketizes
them and chooses the color function for the value field's palette. Frames
missing a usable field produce a ``Placeholder`` instead of a heatmap. The
result is handed to an external renderer; nothing here draws.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Union

from heatgrid.heatmap.bucketize import bucketize
from heatgrid.heatmap.colorscales import ColorScale, PaletteConfig, make_scale
from heatgrid.heatmap.errors import ConfigError
from heatgrid.heatmap.models import (
    BucketGrid,
    DailyWindow,
    Field,
    FieldType,
    Frame,
    TimeRange,
    TimeRegion,
)
from heatgrid.heatmap.options import HeatmapOptions
from heatgrid.heatmap.thresholds import ThresholdsConfig
from heatgrid.utils.logging import get_logger

logger = get_logger(__name__)

MISSING_TIME_TEXT = "Select a time dimension"
MISSING_VALUE_TEXT = "Select a value dimension"

# Called by the renderer with the hovered bucket value, or None when hover ends.
OnHover = Callable[[Optional[float]], None]
MeasureText = Callable[[str], float]


def select_time_field(frame: Frame, name: Optional[str]) -> Optional[Field]:
    """The named field, else the first time field."""
    named = frame.field_by_name(name)
    return named if named is not None else frame.first_of_type(FieldType.TIME)


def select_value_field(frame: Frame, name: Optional[str]) -> Optional[Field]:
    """The named field, else the first numeric field."""
    named = frame.field_by_name(name)
    return named if named is not None else frame.first_of_type(FieldType.NUMBER)


def palette_config_for(value_field: Field) -> PaletteConfig:
    cfg = value_field.config
    return PaletteConfig(
        palette=cfg.color_palette,
        invert=cfg.invert_palette,
        color_space=cfg.color_space,
        thresholds=cfg.thresholds if cfg.thresholds is not None else ThresholdsConfig(),
    )


def field_color_display(value_field: Field) -> ColorScale:
    """Color function backed by the field's own display function.

    Raises:
        ConfigError: If the field has no display function.
    """
    display = value_field.display
    if display is None:
        raise ConfigError(
            f"Palette 'fieldOptions' needs a display function on field {value_field.name!r}"
        )

    def resolve(value: float) -> str:
        color = getattr(display(value), "color", None)
        if color is None:
            raise ConfigError(f"Display for field {value_field.name!r} returned no color")
        return color

    return resolve


@dataclass(frozen=True)
class HeatmapModel:
    """Everything a renderer needs for one heatmap."""

    grid: BucketGrid
    color_display: ColorScale
    value_display: Callable[[float], str]
    daily_window: DailyWindow
    regions: tuple[TimeRegion, ...] = ()
    show_legend: bool = True
    show_value_indicator: bool = False
    on_hover: Optional[OnHover] = field(default=None, compare=False)

    @property
    def min(self) -> float:
        return self.grid.min

    @property
    def max(self) -> float:
        return self.grid.max


@dataclass(frozen=True)
class Placeholder:
    """Message shown in place of a heatmap, centred in its segment."""

    text: str
    x: float
    y: float


class HeatmapAssembler:
    """Builds HeatmapModels from frames according to HeatmapOptions."""

    def __init__(
        self,
        options: HeatmapOptions,
        *,
        measure_text: Optional[MeasureText] = None,
        on_hover: Optional[OnHover] = None,
    ) -> None:
        self.options = options
        self._measure_text = measure_text if measure_text is not None else (lambda text: 0.0)
        self._on_hover = on_hover

    def assemble(
        self,
        time_field: Field,
        value_field: Field,
        timezone: Optional[str],
        time_range: TimeRange,
    ) -> HeatmapModel:
        """Bucketize one time/value pair and pick its color function."""
        daily_window = self.options.daily_window
        grid = bucketize(
            time_field,
            value_field,
            timezone,
            time_range,
            daily_window,
            bucket_minutes=self.options.bucket_minutes,
            aggregation=self.options.aggregation,
        )

        palette = palette_config_for(value_field)
        scale = make_scale(palette.kind, grid.min, grid.max, palette)
        color_display = scale if scale is not None else field_color_display(value_field)

        return HeatmapModel(
            grid=grid,
            color_display=color_display,
            value_display=grid.value_display,
            daily_window=daily_window,
            regions=tuple(self.options.regions),
            show_legend=self.options.show_legend,
            show_value_indicator=self.options.show_value_indicator,
            on_hover=self._on_hover,
        )

    def _placeholder(self, text: str, index: int, width: float, segment_height: float) -> Placeholder:
        return Placeholder(
            text=text,
            x=width / 2 - self._measure_text(text) / 2,
            y=index * segment_height + segment_height / 2,
        )

    def build(
        self,
        frames: Sequence[Frame],
        timezone: Optional[str],
        time_range: TimeRange,
        width: float,
        height: float,
    ) -> list[Union[HeatmapModel, Placeholder]]:
        """One HeatmapModel or Placeholder per frame, stacked vertically."""
        results: list[Union[HeatmapModel, Placeholder]] = []
        if not frames:
            return results
        segment_height = height / len(frames)

        for i, frame in enumerate(frames):
            time_field = select_time_field(frame, self.options.time_field_name)
            if time_field is None:
                logger.info(f"frame {frame.name or i}: no time field")
                results.append(self._placeholder(MISSING_TIME_TEXT, i, width, segment_height))
                continue
            value_field = select_value_field(frame, self.options.value_field_name)
            if value_field is None:
                logger.info(f"frame {frame.name or i}: no value field")
                results.append(self._placeholder(MISSING_VALUE_TEXT, i, width, segment_height))
                continue
            results.append(self.assemble(time_field, value_field, timezone, time_range))
        return results

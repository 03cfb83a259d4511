"""Value -> color scales for heatmap cells.

Three palette kinds exist:

- ``SPECTRUM``: continuous gradient over a Plotly named colorscale.
- ``CUSTOM``: discrete step function over threshold steps.
- ``FIELD``: colors come from the value field's own display function; the
  factory returns None and the caller resolves colors itself.

``make_scale`` is the only place that branches on the kind.
"""

from __future__ import annotations

import bisect
import colorsys
import math
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Callable, Dict, List, Optional

from plotly.colors import find_intermediate_color, get_colorscale, hex_to_rgb, unlabel_rgb
from plotly.exceptions import PlotlyError

from heatgrid.heatmap.errors import ConfigError
from heatgrid.heatmap.thresholds import ThresholdsConfig, resolve_steps
from heatgrid.utils.logging import get_logger

logger = get_logger(__name__)

ColorScale = Callable[[float], str]
RGB = tuple[float, float, float]

CUSTOM_PALETTE = "custom"
FIELD_PALETTE = "fieldOptions"
DEFAULT_PALETTE = "interpolateSpectral"

# Returned for NaN inputs and below the first threshold when no base step exists.
TRANSPARENT = "transparent"

# Palette choices offered to option editors
COLORSCALE_OPTIONS: List[Dict[str, str]] = [
    {"label": "Spectral", "value": "Spectral"},
    {"label": "Viridis", "value": "Viridis"},
    {"label": "Plasma", "value": "Plasma"},
    {"label": "Inferno", "value": "Inferno"},
    {"label": "Magma", "value": "Magma"},
    {"label": "Cividis", "value": "Cividis"},
    {"label": "Red-Yellow-Green", "value": "RdYlGn"},
    {"label": "Red-Blue", "value": "RdBu"},
    {"label": "Blues", "value": "Blues"},
    {"label": "Greys", "value": "Greys"},
    {"label": "Hot", "value": "Hot"},
    {"label": "Jet", "value": "Jet"},
    {"label": "Rainbow", "value": "Rainbow"},
    {"label": "Custom thresholds", "value": CUSTOM_PALETTE},
    {"label": "From field options", "value": FIELD_PALETTE},
]


class PaletteKind(str, Enum):
    """Closed set of palette kinds."""

    SPECTRUM = "spectrum"
    CUSTOM = "custom"
    FIELD = "fieldOptions"

    @classmethod
    def for_palette(cls, palette: str) -> "PaletteKind":
        if palette == CUSTOM_PALETTE:
            return cls.CUSTOM
        if palette == FIELD_PALETTE:
            return cls.FIELD
        return cls.SPECTRUM


@dataclass(frozen=True)
class PaletteConfig:
    """Palette selection for one value field."""

    palette: str = DEFAULT_PALETTE
    invert: bool = False
    color_space: str = "rgb"
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    base_color: str = TRANSPARENT

    @property
    def kind(self) -> PaletteKind:
        return PaletteKind.for_palette(self.palette)


def normalize_palette_name(palette: str) -> str:
    """Map a palette name to a Plotly colorscale name.

    d3-style names such as ``interpolateSpectral`` lose their prefix.
    """
    name = str(palette).strip()
    if name.startswith("interpolate") and len(name) > len("interpolate"):
        name = name[len("interpolate"):]
    return name.lower()


def _parse_color(color: str) -> RGB:
    if color.startswith("#"):
        r, g, b = hex_to_rgb(color)
    elif color.startswith("rgb"):
        r, g, b = unlabel_rgb(color)[:3]
    else:
        raise ConfigError(f"Unsupported colorscale color {color!r}")
    return float(r), float(g), float(b)


@lru_cache(maxsize=64)
def palette_stops(palette: str) -> tuple[tuple[float, RGB], ...]:
    """Resolve a palette name to ``(position, rgb)`` stops on ``[0, 1]``.

    Raises:
        ConfigError: If the name is not a built-in Plotly colorscale.
    """
    name = normalize_palette_name(palette)
    try:
        colorscale = get_colorscale(name)
    except (PlotlyError, ValueError) as e:
        raise ConfigError(f"Unknown color palette {palette!r}") from e
    return tuple((float(pos), _parse_color(color)) for pos, color in colorscale)


def _to_hex(rgb: RGB) -> str:
    r, g, b = (max(0, min(255, int(round(c)))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def _interpolate_rgb(low: RGB, high: RGB, t: float) -> RGB:
    return find_intermediate_color(low, high, t, colortype="tuple")


def _interpolate_hsl(low: RGB, high: RGB, t: float) -> RGB:
    h0, l0, s0 = colorsys.rgb_to_hls(*(c / 255.0 for c in low))
    h1, l1, s1 = colorsys.rgb_to_hls(*(c / 255.0 for c in high))
    # shortest arc around the hue circle
    dh = h1 - h0
    if dh > 0.5:
        dh -= 1.0
    elif dh < -0.5:
        dh += 1.0
    h = (h0 + t * dh) % 1.0
    rgb = colorsys.hls_to_rgb(h, l0 + t * (l1 - l0), s0 + t * (s1 - s0))
    return rgb[0] * 255.0, rgb[1] * 255.0, rgb[2] * 255.0


_INTERPOLATORS: Dict[str, Callable[[RGB, RGB, float], RGB]] = {
    "rgb": _interpolate_rgb,
    "hsl": _interpolate_hsl,
}


def _color_at(
    stops: tuple[tuple[float, RGB], ...],
    t: float,
    interpolate: Callable[[RGB, RGB, float], RGB],
) -> str:
    if len(stops) == 1:
        return _to_hex(stops[0][1])
    positions = [pos for pos, _ in stops]
    i = bisect.bisect_right(positions, t) - 1
    i = max(0, min(i, len(stops) - 2))
    (p0, c0), (p1, c1) = stops[i], stops[i + 1]
    local = 0.0 if p1 == p0 else (t - p0) / (p1 - p0)
    local = max(0.0, min(1.0, local))
    return _to_hex(interpolate(c0, c1, local))


def _check_range(min_value: float, max_value: float) -> None:
    if not (math.isfinite(min_value) and math.isfinite(max_value)):
        raise ConfigError(f"Color scale range must be finite, got [{min_value}, {max_value}]")
    if min_value > max_value:
        raise ConfigError(f"Color scale min {min_value} exceeds max {max_value}")


def make_spectrum_scale(
    palette: str,
    min_value: float,
    max_value: float,
    *,
    invert: bool = False,
    color_space: str = "rgb",
) -> ColorScale:
    """Continuous gradient scale over ``[min_value, max_value]``.

    Values are clamped to the range before lookup. When the range is empty
    every value gets the color at gradient position 0 (after ``invert``).

    Raises:
        ConfigError: Unknown palette or color space, or an invalid range.
    """
    _check_range(min_value, max_value)
    interpolate = _INTERPOLATORS.get(color_space)
    if interpolate is None:
        raise ConfigError(
            f"Unsupported color space {color_space!r}; expected one of {sorted(_INTERPOLATORS)}"
        )
    stops = palette_stops(palette)

    if min_value == max_value:
        flat = _color_at(stops, 1.0 if invert else 0.0, interpolate)

        def flat_scale(value: float) -> str:
            if value != value:
                return TRANSPARENT
            return flat

        return flat_scale

    span = max_value - min_value

    def scale(value: float) -> str:
        if value != value:
            return TRANSPARENT
        v = max(min_value, min(max_value, value))
        t = (v - min_value) / span
        if invert:
            t = 1.0 - t
        return _color_at(stops, t, interpolate)

    return scale


def make_threshold_scale(
    min_value: float,
    max_value: float,
    thresholds: ThresholdsConfig,
    *,
    base_color: str = TRANSPARENT,
) -> ColorScale:
    """Discrete, left-closed step scale.

    A value gets the color of the greatest step whose absolute value is
    ``<= value``. Below the first step it gets the base step's color, or
    ``base_color`` when no base step is configured.

    Raises:
        ConfigError: Invalid step values or an invalid range.
    """
    _check_range(min_value, max_value)
    step_base, steps = resolve_steps(thresholds, min_value, max_value)
    below = step_base if step_base is not None else base_color
    bounds = [value for value, _ in steps]
    colors = [color for _, color in steps]

    def scale(value: float) -> str:
        if value != value:
            return TRANSPARENT
        i = bisect.bisect_right(bounds, value)
        if i == 0:
            return below
        return colors[i - 1]

    return scale


def make_scale(
    kind: PaletteKind,
    min_value: float,
    max_value: float,
    config: PaletteConfig,
) -> Optional[ColorScale]:
    """Build the color scale for ``kind``.

    Returns None for ``PaletteKind.FIELD``: those colors come from the value
    field's display function.

    Raises:
        ConfigError: If ``kind`` is not a palette kind.
    """
    try:
        kind = PaletteKind(kind)
    except ValueError as e:
        raise ConfigError(f"Unknown palette kind {kind!r}") from e
    if kind is PaletteKind.SPECTRUM:
        return make_spectrum_scale(
            config.palette,
            min_value,
            max_value,
            invert=config.invert,
            color_space=config.color_space,
        )
    if kind is PaletteKind.CUSTOM:
        return make_threshold_scale(
            min_value,
            max_value,
            config.thresholds,
            base_color=config.base_color,
        )
    logger.debug("field-defined palette; no scale built")
    return None

"""Threshold steps for discrete (custom) color scales.

A step is a ``(value, color)`` pair. In percentage mode ``value`` is a
fraction of the data range in ``[0, 1]``; in absolute mode it is a data
value. A step whose value is ``None`` or ``-inf`` is the base step: it colors
everything below the first real step.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from heatgrid.heatmap.errors import ConfigError


class ThresholdsMode(str, Enum):
    """How threshold step values are interpreted."""

    ABSOLUTE = "absolute"
    PERCENTAGE = "percentage"


@dataclass(frozen=True)
class ThresholdStep:
    """One boundary of a discrete color scale."""

    value: Optional[float]
    color: str

    @property
    def is_base(self) -> bool:
        return self.value is None or self.value == -math.inf

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThresholdStep":
        if "color" not in data:
            raise ConfigError(f"Threshold step is missing 'color': {data!r}")
        return cls(value=data.get("value"), color=str(data["color"]))


@dataclass(frozen=True)
class ThresholdsConfig:
    """Threshold mode plus its steps, in any order."""

    mode: ThresholdsMode = ThresholdsMode.PERCENTAGE
    steps: tuple[ThresholdStep, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "steps": [step.to_dict() for step in self.steps],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThresholdsConfig":
        """Build from the panel JSON shape ``{"mode": ..., "steps": [...]}``.

        Raises:
            ConfigError: If the mode is unknown or steps is not a list.
        """
        mode_raw = data.get("mode", ThresholdsMode.PERCENTAGE.value)
        try:
            mode = ThresholdsMode(mode_raw)
        except ValueError as e:
            raise ConfigError(f"Unknown thresholds mode {mode_raw!r}") from e
        steps_raw = data.get("steps", [])
        if not isinstance(steps_raw, list):
            raise ConfigError(f"Threshold steps must be a list, got {type(steps_raw).__name__}")
        return cls(mode=mode, steps=tuple(ThresholdStep.from_dict(s) for s in steps_raw))


def _check_number(step: ThresholdStep) -> float:
    value = step.value
    # bool is an int subclass; a True/False threshold is a config mistake
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"Threshold value must be a number, got {value!r} ({step.color})")
    value = float(value)
    if math.isnan(value):
        raise ConfigError(f"Threshold value must not be NaN ({step.color})")
    return value


def resolve_steps(
    thresholds: ThresholdsConfig,
    min_value: float,
    max_value: float,
) -> tuple[Optional[str], list[tuple[float, str]]]:
    """Resolve steps to absolute values sorted ascending.

    Args:
        thresholds: Mode and steps, in any order.
        min_value: Lower end of the data range.
        max_value: Upper end of the data range.

    Returns:
        ``(base_color, steps)`` where ``base_color`` is the color of the base
        step (None if there is none) and ``steps`` is a stably sorted list of
        ``(absolute_value, color)``.

    Raises:
        ConfigError: On a non-numeric value, an infinite absolute value, or a
            percentage outside ``[0, 1]``.
    """
    base_color: Optional[str] = None
    resolved: list[tuple[float, str]] = []
    span = max_value - min_value

    for step in thresholds.steps:
        if step.is_base:
            base_color = step.color
            continue
        value = _check_number(step)
        if thresholds.mode is ThresholdsMode.PERCENTAGE:
            if not 0.0 <= value <= 1.0:
                raise ConfigError(
                    f"Percentage threshold must be within [0, 1], got {value} ({step.color})"
                )
            value = min_value + value * span
        elif math.isinf(value):
            raise ConfigError(f"Absolute threshold must be finite, got {value} ({step.color})")
        resolved.append((value, step.color))

    resolved.sort(key=lambda pair: pair[0])
    return base_color, resolved

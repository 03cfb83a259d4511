"""Legend/tooltip text for bucket values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from heatgrid.heatmap.models import Field


def format_number(value: float, *, decimals: Optional[int] = None, unit: str = "") -> str:
    """Plain number formatting used when a field has no display function."""
    text = f"{value:.{decimals}f}" if decimals is not None else f"{value:g}"
    if unit:
        return f"{text} {unit}"
    return text


@dataclass(frozen=True)
class ValueFormatter:
    """Formats values through the value field's display function.

    The display result is opaque: a ``DisplayValue`` contributes its
    ``text``, anything else is converted with ``str``. Errors raised by the
    display function propagate.
    """

    display: Optional[Callable[[float], Any]] = None
    unit: str = ""
    decimals: Optional[int] = None

    @classmethod
    def for_field(cls, field: "Field") -> "ValueFormatter":
        return cls(display=field.display, unit=field.config.unit, decimals=field.config.decimals)

    def format(self, value: float) -> str:
        if self.display is None:
            return format_number(value, decimals=self.decimals, unit=self.unit)
        result = self.display(value)
        text = getattr(result, "text", result)
        return str(text)

    def __call__(self, value: float) -> str:
        return self.format(value)

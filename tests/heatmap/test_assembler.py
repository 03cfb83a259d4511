"""Tests for HeatmapAssembler: field selection, placeholders and color choice."""

from __future__ import annotations

import pytest

from heatgrid.heatmap.assembler import (
    MISSING_TIME_TEXT,
    MISSING_VALUE_TEXT,
    HeatmapAssembler,
    HeatmapModel,
    Placeholder,
    select_time_field,
    select_value_field,
)
from heatgrid.heatmap.errors import ConfigError
from heatgrid.heatmap.models import (
    DisplayValue,
    Field,
    FieldConfig,
    FieldType,
    Frame,
    TimeRegion,
)
from heatgrid.heatmap.options import HeatmapOptions
from heatgrid.heatmap.thresholds import ThresholdStep, ThresholdsConfig, ThresholdsMode


def _with_config(value_field: Field, config: FieldConfig, display=None) -> Field:
    return Field(
        name=value_field.name,
        type=value_field.type,
        values=value_field.values,
        config=config,
        display=display,
    )


def test_field_selection_prefers_name_then_type(two_days_hourly) -> None:
    time_field, value_field, _ = two_days_hourly
    other = Field(name="other", type=FieldType.NUMBER, values=value_field.values)
    label = Field(name="label", type=FieldType.OTHER, values=["x"] * len(value_field.values))
    frame = Frame(fields=[label, time_field, value_field, other])

    assert select_time_field(frame, None) is time_field
    assert select_value_field(frame, None) is value_field
    assert select_value_field(frame, "other") is other
    # unknown names fall back to the first field of the right type
    assert select_value_field(frame, "missing") is value_field


def test_named_empty_field_is_selected(two_days_hourly) -> None:
    time_field, _, _ = two_days_hourly
    a = Field(name="a", type=FieldType.NUMBER, values=[])
    b = Field(name="b", type=FieldType.NUMBER, values=[], config=FieldConfig(color_palette="custom"))
    frame = Frame(fields=[time_field, a, b])

    assert select_value_field(frame, "b") is b
    assert select_value_field(frame, None) is a


def test_named_empty_time_field_builds_empty_heatmap(two_days_hourly) -> None:
    _, _, time_range = two_days_hourly
    ts = Field(name="ts", type=FieldType.OTHER, values=[])
    value = Field(name="v", type=FieldType.NUMBER, values=[])
    options = HeatmapOptions(time_field_name="ts", value_field_name="v")

    (result,) = HeatmapAssembler(options).build([Frame(fields=[ts, value])], "utc", time_range, 600, 300)

    assert isinstance(result, HeatmapModel)
    assert result.grid.shape == (2, 24)
    assert result.grid.is_empty
    assert (result.min, result.max) == (0.0, 1.0)


def test_field_type_given_as_string() -> None:
    time_field = Field(name="t", type="time", values=[])
    frame = Frame(fields=[Field(name="x", type="other", values=[]), time_field])

    assert time_field.type is FieldType.TIME
    assert select_time_field(frame, None) is time_field
    with pytest.raises(ConfigError):
        Field(name="bad", type="date", values=[])


def test_build_emits_placeholders_for_missing_fields(two_days_hourly) -> None:
    time_field, value_field, time_range = two_days_hourly
    frames = [
        Frame(fields=[value_field], name="no-time"),
        Frame(fields=[time_field], name="no-value"),
        Frame(fields=[time_field, value_field], name="ok"),
    ]
    assembler = HeatmapAssembler(HeatmapOptions(), measure_text=lambda text: 7.0 * len(text))

    results = assembler.build(frames, "utc", time_range, width=600, height=300)

    assert len(results) == 3
    assert results[0] == Placeholder(
        text=MISSING_TIME_TEXT, x=300 - 3.5 * len(MISSING_TIME_TEXT), y=50.0
    )
    assert isinstance(results[1], Placeholder)
    assert results[1].text == MISSING_VALUE_TEXT
    assert results[1].y == 150.0
    assert isinstance(results[2], HeatmapModel)


def test_build_without_frames_is_empty(two_days_hourly) -> None:
    _, _, time_range = two_days_hourly
    assert HeatmapAssembler(HeatmapOptions()).build([], "utc", time_range, 100, 100) == []


def test_assemble_spectrum_palette(two_days_hourly) -> None:
    time_field, value_field, time_range = two_days_hourly
    value_field = _with_config(value_field, FieldConfig(color_palette="interpolateViridis"))

    model = HeatmapAssembler(HeatmapOptions()).assemble(time_field, value_field, "utc", time_range)

    assert model.min == 0
    assert model.max == 23
    assert model.grid.shape == (2, 24)
    assert model.color_display(0) != model.color_display(23)
    assert model.value_display(23) == "23"


def test_assemble_custom_thresholds(two_days_hourly) -> None:
    time_field, value_field, time_range = two_days_hourly
    thresholds = ThresholdsConfig(
        mode=ThresholdsMode.ABSOLUTE,
        steps=(ThresholdStep(value=None, color="green"), ThresholdStep(value=12, color="red")),
    )
    value_field = _with_config(value_field, FieldConfig(color_palette="custom", thresholds=thresholds))

    model = HeatmapAssembler(HeatmapOptions()).assemble(time_field, value_field, "utc", time_range)

    assert model.color_display(3) == "green"
    assert model.color_display(12) == "red"


def test_assemble_field_options_palette(two_days_hourly) -> None:
    time_field, value_field, time_range = two_days_hourly

    def display(value: float) -> DisplayValue:
        return DisplayValue(text=str(value), color="hot" if value > 10 else "cold")

    value_field = _with_config(value_field, FieldConfig(color_palette="fieldOptions"), display=display)
    model = HeatmapAssembler(HeatmapOptions()).assemble(time_field, value_field, "utc", time_range)

    assert model.color_display(5) == "cold"
    assert model.color_display(20) == "hot"


def test_field_options_palette_needs_display(two_days_hourly) -> None:
    time_field, value_field, time_range = two_days_hourly
    value_field = _with_config(value_field, FieldConfig(color_palette="fieldOptions"))
    with pytest.raises(ConfigError):
        HeatmapAssembler(HeatmapOptions()).assemble(time_field, value_field, "utc", time_range)


def test_unknown_palette_is_reported(two_days_hourly) -> None:
    time_field, value_field, time_range = two_days_hourly
    value_field = _with_config(value_field, FieldConfig(color_palette="interpolateNope"))
    with pytest.raises(ConfigError):
        HeatmapAssembler(HeatmapOptions()).assemble(time_field, value_field, "utc", time_range)


def test_options_flow_into_model(two_days_hourly) -> None:
    time_field, value_field, time_range = two_days_hourly
    hovered: list = []
    region = TimeRegion(start_hour=9, end_hour=17, color="rgba(0,0,0,0.1)")
    options = HeatmapOptions(
        regions=[region],
        show_legend=False,
        show_value_indicator=True,
        from_hour="6",
        to_hour="18",
        bucket_minutes=120,
        aggregation="max",
    )

    model = HeatmapAssembler(options, on_hover=hovered.append).assemble(
        time_field, value_field, "utc", time_range
    )

    assert model.grid.shape == (2, 6)
    # max over hours 6 and 7
    assert model.grid.rows[0].buckets[0].value == 7
    assert model.regions == (region,)
    assert model.show_legend is False
    assert model.show_value_indicator is True
    assert (model.daily_window.from_hour, model.daily_window.to_hour) == (6.0, 18.0)

    model.on_hover(7.0)
    model.on_hover(None)
    assert hovered == [7.0, None]

"""Unit tests for HeatmapOptions serialization."""

import pytest

from heatgrid.heatmap.errors import ConfigError
from heatgrid.heatmap.models import Aggregation, TimeRegion
from heatgrid.heatmap.options import HeatmapOptions


def test_defaults():
    options = HeatmapOptions()
    assert options.value_field_name is None
    assert options.show_legend is True
    assert options.show_value_indicator is False
    assert options.aggregation is Aggregation.SUM
    window = options.daily_window
    assert (window.from_hour, window.to_hour) == (0.0, 24.0)


def test_to_dict_uses_panel_keys():
    options = HeatmapOptions(
        value_field_name="power",
        regions=[TimeRegion(start_hour=9, end_hour=17, color="#eeeeee")],
        from_hour="6",
        to_hour="22",
    )
    d = options.to_dict()
    assert d["valueFieldName"] == "power"
    assert d["timeFieldName"] is None
    assert d["from"] == "6"
    assert d["to"] == "22"
    assert d["regions"] == [{"startHour": 9, "endHour": 17, "color": "#eeeeee"}]
    assert d["aggregation"] == "sum"


def test_from_dict_round_trip():
    options = HeatmapOptions(
        time_field_name="ts",
        regions=[TimeRegion(start_hour=12, end_hour=13, color="red")],
        show_legend=False,
        from_hour="7",
        to_hour="0",
        bucket_minutes=30,
        aggregation=Aggregation.MEAN,
    )
    restored = HeatmapOptions.from_dict(options.to_dict())
    assert restored == options


def test_from_dict_tolerates_missing_keys():
    options = HeatmapOptions.from_dict({"valueFieldName": "", "from": 8})
    assert options.value_field_name is None
    assert options.from_hour == "8"
    assert options.regions == []


def test_from_dict_rejects_unknown_aggregation():
    with pytest.raises(ConfigError) as exc_info:
        HeatmapOptions.from_dict({"aggregation": "median"})
    assert "median" in str(exc_info.value)


def test_from_dict_rejects_bad_region():
    with pytest.raises(ConfigError):
        HeatmapOptions.from_dict({"regions": [{"startHour": 1}]})


def test_wrapping_window_is_rejected():
    options = HeatmapOptions(from_hour="22", to_hour="6")
    with pytest.raises(ConfigError):
        options.daily_window


@pytest.mark.parametrize("key", ["showLegend", "showValueIndicator"])
@pytest.mark.parametrize("raw", ["false", 0, None])
def test_from_dict_rejects_non_boolean_flags(key, raw):
    with pytest.raises(ConfigError):
        HeatmapOptions.from_dict({key: raw})

import pandas as pd
import pytest

from heatgrid.heatmap.assembler import HeatmapAssembler, HeatmapModel
from heatgrid.heatmap.frames import HAS_POLARS, frame_from_any, frame_from_pandas
from heatgrid.heatmap.models import FieldConfig, FieldType, TimeRange
from heatgrid.heatmap.options import HeatmapOptions


@pytest.fixture
def sample_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "site": ["a", "a", "b"],
            "ts": pd.to_datetime(
                ["2025-03-01T01:00:00Z", "2025-03-01T02:30:00Z", "2025-03-01T02:45:00Z"]
            ),
            "kw": [1.0, 2.0, 3.5],
            "n": [1, 2, 3],
        }
    )


def test_frame_from_pandas_infers_types(sample_df: pd.DataFrame) -> None:
    frame = frame_from_pandas(sample_df, name="meter", field_config={"kw": FieldConfig(unit="kW")})
    types = {f.name: f.type for f in frame.fields}
    assert types == {
        "site": FieldType.OTHER,
        "ts": FieldType.TIME,
        "kw": FieldType.NUMBER,
        "n": FieldType.NUMBER,
    }
    assert frame.name == "meter"
    assert frame.field_by_name("kw").config.unit == "kW"


def test_pandas_frame_feeds_assembler(sample_df: pd.DataFrame) -> None:
    frame = frame_from_any(sample_df)
    time_range = TimeRange.of("2025-03-01T00:00:00Z", "2025-03-01T23:00:00Z")

    (model,) = HeatmapAssembler(HeatmapOptions()).build([frame], "utc", time_range, 400, 200)

    assert isinstance(model, HeatmapModel)
    buckets = model.grid.rows[0].buckets
    assert buckets[1].value == 1.0
    assert buckets[2].value == 5.5
    assert buckets[2].count == 2


def test_frame_from_any_rejects_other_types() -> None:
    with pytest.raises(TypeError):
        frame_from_any({"ts": [1, 2]})


@pytest.mark.skipif(not HAS_POLARS, reason="polars not installed")
def test_frame_from_polars() -> None:
    import polars as pl

    df = pl.DataFrame({"kw": [1.0, 2.0], "label": ["x", "y"]})
    frame = frame_from_any(df)
    assert [f.type for f in frame.fields] == [FieldType.NUMBER, FieldType.OTHER]

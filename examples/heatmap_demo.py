"""Bucketize a week of synthetic power readings and render them with plotly.

Run:
    python examples/heatmap_demo.py            # print grid and colors
    python examples/heatmap_demo.py out.html   # also write a plotly figure
"""

import sys

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from heatgrid import HeatmapAssembler, HeatmapOptions, TimeRange, configure_logging
from heatgrid.heatmap import FieldConfig, frame_from_pandas

configure_logging(level="DEBUG")

rng = np.random.default_rng(0)
times = pd.date_range("2025-03-03", periods=7 * 24 * 4, freq="15min", tz="Europe/Berlin")
hour = times.hour + times.minute / 60
load = 2.0 + 1.5 * np.sin((hour - 6) / 24 * 2 * np.pi) + rng.normal(0, 0.3, len(times))

df = pd.DataFrame({"time": times, "kw": load.round(2)})
frame = frame_from_pandas(
    df,
    name="meter",
    field_config={"kw": FieldConfig(color_palette="interpolateViridis", unit="kW", decimals=1)},
)

options = HeatmapOptions(from_hour="6", to_hour="22", bucket_minutes=60, aggregation="mean")
time_range = TimeRange.of(times[0], times[-1])

(model,) = HeatmapAssembler(options).build([frame], "Europe/Berlin", time_range, width=800, height=400)

print(model.grid.to_frame().round(2))
print(f"range: {model.value_display(model.min)} .. {model.value_display(model.max)}")
for v in (model.min, (model.min + model.max) / 2, model.max):
    print(f"{model.value_display(v):>10} -> {model.color_display(v)}")

if len(sys.argv) > 1:
    matrix = model.grid.to_matrix()
    colors = [[i / 10, model.color_display(model.min + (model.max - model.min) * i / 10)] for i in range(11)]
    fig = go.Figure(
        go.Heatmap(
            z=matrix.T,
            x=[str(d) for d in model.grid.dates],
            y=[f"{b.start_hour:g}h" for b in model.grid.rows[0].buckets],
            colorscale=colors,
            zmin=model.min,
            zmax=model.max,
            showscale=model.show_legend,
        )
    )
    fig.update_layout(title="Mean load per hour", yaxis={"autorange": "reversed"})
    fig.write_html(sys.argv[1])
    print(f"wrote {sys.argv[1]}")

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from ..domain.reports import ChartPoint


# --- Color interpolation helpers (kept module-level for reuse) ---
def hex_to_rgb(h: str) -> tuple[int, int, int]:
    h = h.lstrip("#")
    return (
        int(h[0:2], 16),
        int(h[2:4], 16),
        int(h[4:6], 16),
    )


def rgb_to_hex(rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"#{r:02X}{g:02X}{b:02X}"


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


# 0 Incomplete (red) .. 5 Optimizing (blue)
DEFAULT_STOPS: list[tuple[float, str]] = [
    (0.0, "#A50026"),
    (1.0, "#D73027"),
    (2.0, "#FC8D59"),
    (3.0, "#FEE08B"),
    (4.0, "#1A9850"),
    (5.0, "#3B5BDB"),
]

SERIES_COLUMNS = ("label", "value", "max")


def gradient_color(value: float, stops: list[tuple[float, str]] = DEFAULT_STOPS) -> str:
    """Piecewise-linear interpolation across hex color stops."""
    v = float(value)
    if v <= stops[0][0]:
        return stops[0][1]
    if v >= stops[-1][0]:
        return stops[-1][1]
    for i in range(len(stops) - 1):
        v0, c0 = stops[i]
        v1, c1 = stops[i + 1]
        if v0 <= v <= v1:
            t = 0.0 if v1 == v0 else (v - v0) / (v1 - v0)
            r0, g0, b0 = hex_to_rgb(c0)
            r1, g1, b1 = hex_to_rgb(c1)
            return rgb_to_hex(
                (
                    int(round(lerp(r0, r1, t))),
                    int(round(lerp(g0, g1, t))),
                    int(round(lerp(b0, b1, t))),
                )
            )
    return stops[-1][1]


def series_frame(chart_series: Iterable[ChartPoint | Mapping[str, Any]]) -> pd.DataFrame:
    """Chart series (``ChartPoint`` or ``{label, value, max}`` dicts) as a DataFrame."""
    rows = [p.as_dict() if isinstance(p, ChartPoint) else dict(p) for p in chart_series]
    frame = pd.DataFrame(rows)
    if frame.empty:
        return pd.DataFrame(columns=list(SERIES_COLUMNS))

    missing = set(SERIES_COLUMNS) - set(frame.columns)
    if missing:
        raise ValueError(f"Chart series missing required fields: {sorted(missing)}")
    if not np.issubdtype(frame["value"].dtype, np.number):
        raise TypeError("Field 'value' must be numeric.")
    return frame[list(SERIES_COLUMNS)]


def make_domain_radar(
    chart_series: Iterable[ChartPoint | Mapping[str, Any]],
    title: str | None = None,
    name: str = "Score",
) -> go.Figure:
    """
    Radar chart with one spoke per domain on a fixed 0..max radial axis.

    Values are clipped into the axis range; each domain marker is coloured by
    its score and labelled with it to one decimal place.
    """
    frame = series_frame(chart_series)
    scale_max = float(frame["max"].max()) if not frame.empty else 5.0

    frame = frame.copy()
    frame["value"] = frame["value"].astype(float).clip(lower=0.0, upper=scale_max)
    frame["color"] = frame["value"].apply(gradient_color)

    labels = frame["label"].astype(str).tolist()
    values = frame["value"].tolist()

    fig = go.Figure()
    if values:
        fig.add_trace(
            go.Scatterpolar(
                r=values + [values[0]],
                theta=labels + [labels[0]],
                mode="lines",
                line=dict(color="#3B82F6", width=2),
                fill="toself",
                fillcolor="rgba(96,165,250,0.45)",
                name=name,
                hoverinfo="skip",
            )
        )
        fig.add_trace(
            go.Scatterpolar(
                r=values,
                theta=labels,
                mode="markers+text",
                marker=dict(size=10, color=frame["color"].tolist()),
                text=[f"{v:.1f}" for v in values],
                textposition="top center",
                name="Domain score",
                hovertemplate="<b>%{theta}</b><br>Score: %{r:.2f}<extra></extra>",
            )
        )

    if title is None and values:
        lowest = frame.sort_values("value", kind="stable").iloc[0]
        title = f"{lowest['label']} is the lowest — focus improvement efforts"

    fig.update_layout(
        title=dict(
            text=title or "MEA Maturity — Radar Overview",
            x=0.5,
            xanchor="center",
            font=dict(family="Helvetica, Arial, sans-serif", size=18),
        ),
        showlegend=True,
        legend=dict(orientation="h", x=1, y=-0.1, xanchor="right", yanchor="top"),
        margin=dict(l=40, r=40, t=80, b=80),
        polar=dict(
            radialaxis=dict(
                range=[0, scale_max],
                angle=30,
                tickvals=list(range(0, int(scale_max) + 1)),
                gridcolor="#BFBFBF",
                gridwidth=0.5,
            ),
            angularaxis=dict(rotation=90, direction="clockwise"),
        ),
        template="plotly_white",
        height=480,
    )
    return fig

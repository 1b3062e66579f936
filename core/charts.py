from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

CATEGORY_COLORS = ["#1e293b", "#f59e0b", "#10b981", "#0ea5e9", "#8b5cf6"]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def comparison_line_chart(
    weeks: pd.DataFrame,
    curr_col: str,
    prev_col: str,
    *,
    title: str,
    value_format: str,
) -> alt.Chart:
    curr_label, prev_label = "Current month", "Previous month"
    data = weeks[["name", curr_col, prev_col]].rename(columns={curr_col: curr_label, prev_col: prev_label})
    hover = alt.selection_point(name="period_hover", fields=["period"], on="mouseover", empty="all")
    return (
        alt.Chart(data)
        .transform_fold([curr_label, prev_label], as_=["period", "value"])
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("name:N", title=None, sort=None, axis=alt.Axis(grid=False, labelAngle=0)),
            y=alt.Y("value:Q", title=title, axis=alt.Axis(format=value_format, gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("period:N", title=None, sort=[curr_label, prev_label]),
            strokeDash=alt.condition(alt.datum.period == prev_label, alt.value([5, 5]), alt.value([0])),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=[
                alt.Tooltip("name:N", title="Week"),
                alt.Tooltip("period:N", title="Month"),
                alt.Tooltip("value:Q", title=title, format=value_format),
            ],
        )
        .add_params(hover)
        .properties(height=240)
    )


def donut_chart(distribution: pd.DataFrame) -> alt.Chart:
    hover = alt.selection_point(name="category_hover", fields=["name"], on="mouseover", empty="all")
    return (
        alt.Chart(distribution)
        .mark_arc(innerRadius=60, outerRadius=100)
        .encode(
            theta=alt.Theta("value:Q", stack=True),
            color=alt.Color("name:N", title="Category", scale=alt.Scale(range=CATEGORY_COLORS)),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            tooltip=[
                alt.Tooltip("name:N", title="Category"),
                alt.Tooltip("value:Q", title="Billed Outlets", format=","),
                alt.Tooltip("share:Q", title="Share", format=".1%"),
            ],
        )
        .add_params(hover)
        .properties(height=240)
    )

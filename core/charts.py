from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import altair as alt
import pandas as pd

from core.aggregate import mpg_values, numeric_column

alt.data_transformers.disable_max_rows()

# Headroom around the trend line so it never touches the chart edges.
TREND_AXIS_BUFFER = 2.0

CITY_HIGHWAY_LABELS = {"city_mpg": "Average City MPG", "highway_mpg": "Average Highway MPG"}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


# ---------------- Point / series adapters ----------------
def scatter_points(subset: pd.DataFrame, mpg_type: Optional[str]) -> pd.DataFrame:
    """Engine displacement (x) against the selected MPG (y), unparseable pairs dropped."""
    if subset.empty:
        return pd.DataFrame(columns=["x", "y"])
    points = pd.DataFrame(
        {
            "x": numeric_column(subset, "engine_displacement"),
            "y": mpg_values(subset, mpg_type),
        }
    )
    return points.dropna(subset=["x", "y"])


def series_points(groups: pd.DataFrame, key: str, value_col: str = "average_mpg") -> List[Tuple[Any, float]]:
    if groups.empty:
        return []
    return [(label, float(value)) for label, value in zip(groups[key].tolist(), groups[value_col].tolist())]


def trend_axis_bounds(values: Sequence[float], buffer: float = TREND_AXIS_BUFFER) -> Optional[Tuple[float, float]]:
    vals = pd.Series(list(values), dtype=float).dropna()
    if vals.empty:
        return None
    lower = float(vals.min()) - buffer
    upper = float(vals.max()) + buffer
    return (max(lower, 0.0), upper)


# ---------------- Altair builders ----------------
def trend_chart(groups: pd.DataFrame, mpg_type: str) -> alt.Chart:
    bounds = trend_axis_bounds(groups["average_mpg"].tolist()) if not groups.empty else None
    scale = alt.Scale(domain=list(bounds), zero=False) if bounds else alt.Scale(zero=False)
    hover = alt.selection_point(fields=["model_year"], on="mouseover", empty="all")
    return (
        alt.Chart(groups)
        .mark_line(point={"filled": True, "size": 60}, strokeWidth=2, color="#4bc0c0")
        .encode(
            x=alt.X("model_year:O", title="Year", axis=alt.Axis(grid=False)),
            y=alt.Y("average_mpg:Q", title="MPG", scale=scale, axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            tooltip=[
                alt.Tooltip("model_year:O", title="Year"),
                alt.Tooltip("average_mpg:Q", title=f"Average {mpg_type} MPG", format=".1f"),
                alt.Tooltip("count:Q", title="Vehicles", format=","),
            ],
        )
        .add_params(hover)
        .properties(title=f"Average {mpg_type} MPG Over the Years", height=320)
    )


def scatter_chart(points: pd.DataFrame, mpg_type: str) -> alt.Chart:
    return (
        alt.Chart(points)
        .mark_circle(size=40, opacity=0.5, color="#ff6384")
        .encode(
            x=alt.X("x:Q", title="Engine Displacement (L)"),
            y=alt.Y("y:Q", title=f"{mpg_type} MPG", scale=alt.Scale(zero=True)),
            tooltip=[
                alt.Tooltip("x:Q", title="Displacement (L)", format=".1f"),
                alt.Tooltip("y:Q", title=f"{mpg_type} MPG", format=".0f"),
            ],
        )
        .properties(title=f"{mpg_type} MPG vs Engine Displacement", height=360)
    )


def division_chart(groups: pd.DataFrame, mpg_type: str) -> alt.Chart:
    return (
        alt.Chart(groups)
        .mark_bar(color="#36a2eb")
        .encode(
            x=alt.X("division:N", title="Division", sort="ascending"),
            y=alt.Y("average_mpg:Q", title="Average MPG", scale=alt.Scale(zero=True)),
            tooltip=[
                alt.Tooltip("division:N", title="Division"),
                alt.Tooltip("average_mpg:Q", title=f"Average {mpg_type} MPG", format=".1f"),
                alt.Tooltip("count:Q", title="Vehicles", format=","),
            ],
        )
        .properties(title=f"Average {mpg_type} MPG Across Divisions", height=360)
    )


def division_comparison_chart(city_highway: pd.DataFrame) -> alt.Chart:
    long_df = city_highway.melt(
        id_vars="division",
        value_vars=["city_mpg", "highway_mpg"],
        var_name="metric",
        value_name="average_mpg",
    )
    long_df["metric"] = long_df["metric"].map(CITY_HIGHWAY_LABELS)
    return (
        alt.Chart(long_df)
        .mark_bar()
        .encode(
            x=alt.X("division:N", title="Division", sort="ascending"),
            xOffset="metric:N",
            y=alt.Y("average_mpg:Q", title="Average MPG", scale=alt.Scale(zero=True)),
            color=alt.Color(
                "metric:N",
                title="Metric",
                scale=alt.Scale(domain=list(CITY_HIGHWAY_LABELS.values()), range=["#36a2eb", "#ffce56"]),
            ),
            tooltip=[
                alt.Tooltip("division:N", title="Division"),
                alt.Tooltip("metric:N", title="Metric"),
                alt.Tooltip("average_mpg:Q", title="MPG", format=".1f"),
            ],
        )
        .properties(title="Average City and Highway MPG Across Divisions", height=360)
    )

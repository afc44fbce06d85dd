from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.aggregate import group_average_mpg
from core.charts import series_points, to_vega_spec, trend_axis_bounds, trend_chart
from core.filters import VehicleFilters


def compute_trend(filters: VehicleFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    groups = group_average_mpg(df, "model_year", filters.mpg_type)
    if groups.empty:
        return {"filters": asdict(filters), "empty": True, "series": [], "axis": None, "charts": {}}

    bounds = trend_axis_bounds(groups["average_mpg"].tolist())
    return {
        "filters": asdict(filters),
        "empty": False,
        "series": [
            {"label": int(label), "value": value, "count": int(count)}
            for (label, value), count in zip(series_points(groups, "model_year"), groups["count"].tolist())
        ],
        "axis": {"min": bounds[0], "max": bounds[1]} if bounds else None,
        "charts": {"trend": to_vega_spec(trend_chart(groups, filters.mpg_type))},
    }

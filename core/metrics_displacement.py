from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.charts import scatter_chart, scatter_points, to_vega_spec
from core.filters import VehicleFilters


def compute_displacement(filters: VehicleFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    points = scatter_points(df, filters.mpg_type)
    payload: Dict[str, Any] = {
        "filters": asdict(filters),
        "empty": points.empty,
        "points": points.to_dict(orient="records"),
        "dropped": int(len(df) - len(points)),
        "charts": {},
    }
    if not points.empty:
        payload["charts"]["displacement"] = to_vega_spec(scatter_chart(points, filters.mpg_type))
    return payload

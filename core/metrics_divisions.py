from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.aggregate import division_city_highway, group_average_mpg
from core.charts import division_chart, division_comparison_chart, to_vega_spec
from core.filters import VehicleFilters


def compute_divisions(filters: VehicleFilters, ctx: Dict[str, Any], *, compare: bool = False) -> Dict[str, Any]:
    """Per-division averages; ``compare`` swaps in city vs highway side by side."""
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    if compare:
        table = division_city_highway(df)
        chart = division_comparison_chart(table) if not table.empty else None
    else:
        table = group_average_mpg(df, "division", filters.mpg_type)
        chart = division_chart(table, filters.mpg_type) if not table.empty else None

    return {
        "filters": asdict(filters),
        "compare": compare,
        "empty": table.empty,
        "divisions": table.to_dict(orient="records"),
        "charts": {"divisions": to_vega_spec(chart)} if chart is not None else {},
    }

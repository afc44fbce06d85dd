from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from core.aggregate import AggregateSummary, summarize
from core.filters import VehicleFilters

RECORD_FIELDS = [
    "model_year",
    "manufacturer_name",
    "division",
    "carline_name",
    "carline_class",
    "transmission",
    "engine_displacement",
    "city_mpg",
    "highway_mpg",
    "combined_mpg",
]


def _record_payload(record: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if record is None:
        return None
    out: Dict[str, Any] = {}
    for key in RECORD_FIELDS:
        value = record.get(key)
        out[key] = None if value is None or pd.isna(value) else value
    return out


def vehicle_label(record: Optional[Dict[str, Any]]) -> str:
    if not record:
        return "N/A"
    parts = [record.get("model_year"), record.get("division") or record.get("manufacturer_name"), record.get("carline_name")]
    return " ".join(str(p) for p in parts if p is not None and not pd.isna(p)) or "N/A"


def compute_overview(filters: VehicleFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    summary: AggregateSummary = summarize(df, filters.mpg_type)

    best = _record_payload(summary.most_efficient)
    return {
        "filters": asdict(filters),
        "empty": summary.total_count == 0,
        "kpis": {
            "mpg_type": summary.mpg_type,
            "average_mpg": summary.average_mpg,
            # Averages over parseable values only; reported next to the headline
            # figure, which counts unparseable rows as zero.
            "valid_average_mpg": summary.valid_average_mpg,
            "total_count": summary.total_count,
            "valid_count": summary.valid_count,
            "unique_manufacturers": summary.unique_manufacturers,
            "unique_models": summary.unique_models,
        },
        "most_efficient": {"label": vehicle_label(best), "record": best} if best else None,
        "by_year": [{"model_year": y, "average_mpg": v} for y, v in summary.by_year],
        "by_division": [{"division": d, "average_mpg": v} for d, v in summary.by_division],
    }

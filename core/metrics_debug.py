from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.aggregate import numeric_column
from core.data import NUMERIC_COLUMNS
from core.filters import TRANSMISSION_TOKENS, VehicleFilters


def unknown_transmissions(df: pd.DataFrame) -> pd.Series:
    """Rows whose transmission matches neither Automatic nor Manual."""
    if df.empty or "transmission" not in df.columns:
        return pd.Series(False, index=df.index)
    text = df["transmission"].astype("string")
    known = pd.Series(False, index=df.index)
    for token in TRANSMISSION_TOKENS.values():
        known |= text.str.contains(token, regex=False).fillna(False).astype(bool)
    return ~known


def compute_debug(filters: VehicleFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records: pd.DataFrame = ctx.get("records", pd.DataFrame())
    filtered: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    payload: Dict[str, Any] = {
        "filters": asdict(filters),
        "row_counts": {
            "records": int(len(records)),
            "filtered_records": int(len(filtered)),
        },
        "rows_per_file": [],
        "unparseable_counts": {},
        "unknown_transmissions": [],
    }
    if records.empty:
        return payload

    if "source_file" in records.columns:
        per_file = records.groupby("source_file").size().reset_index(name="rows")
        payload["rows_per_file"] = per_file.to_dict(orient="records")

    payload["unparseable_counts"] = {col: int(numeric_column(records, col).isna().sum()) for col in NUMERIC_COLUMNS}

    unknown = records[unknown_transmissions(records)]
    if not unknown.empty:
        top = (
            unknown["transmission"]
            .fillna("(blank)")
            .value_counts()
            .head(20)
            .rename_axis("transmission")
            .reset_index(name="count")
        )
        payload["unknown_transmissions"] = top.to_dict(orient="records")
    return payload

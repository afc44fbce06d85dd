from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from core.filters import DEFAULT_MPG_TYPE, mpg_column


GROUP_COLUMNS = ["average_mpg", "count"]


@dataclass(frozen=True)
class AggregateSummary:
    mpg_type: str = DEFAULT_MPG_TYPE
    # Sum of parseable values over *all* rows (invalid counted as 0).
    average_mpg: Optional[float] = None
    # Sum of valid values over valid rows only.
    valid_average_mpg: Optional[float] = None
    total_count: int = 0
    valid_count: int = 0
    most_efficient: Optional[Dict[str, Any]] = None
    unique_manufacturers: int = 0
    unique_models: int = 0
    by_year: List[Tuple[int, float]] = field(default_factory=list)
    by_division: List[Tuple[str, float]] = field(default_factory=list)


def numeric_column(df: pd.DataFrame, col: str) -> pd.Series:
    """``df[col]`` as floats; missing, unparseable and infinite values become NaN."""
    if col not in df.columns:
        return pd.Series(np.nan, index=df.index, dtype=float)
    values = pd.to_numeric(df[col], errors="coerce").astype(float)
    return values.replace([np.inf, -np.inf], np.nan)


def mpg_values(subset: pd.DataFrame, mpg_type: Optional[str]) -> pd.Series:
    return numeric_column(subset, mpg_column(mpg_type))


def overall_average_mpg(subset: pd.DataFrame, mpg_type: Optional[str]) -> Optional[float]:
    if subset.empty:
        return None
    total = mpg_values(subset, mpg_type).fillna(0).sum()
    return float(total / len(subset))


def local_average_mpg(subset: pd.DataFrame, mpg_type: Optional[str]) -> Optional[float]:
    valid = mpg_values(subset, mpg_type).dropna()
    if valid.empty:
        return None
    return float(valid.mean())


def most_efficient_record(subset: pd.DataFrame) -> Optional[Dict[str, Any]]:
    """Record with the highest combined MPG; the first one wins a tie."""
    if subset.empty:
        return None
    combined = mpg_values(subset, "Combined").fillna(0).to_numpy()
    # argmax returns the first occurrence of the maximum.
    pos = int(np.argmax(combined))
    return subset.iloc[pos].to_dict()


def group_average_mpg(subset: pd.DataFrame, key: str, mpg_type: Optional[str]) -> pd.DataFrame:
    """Mean of the valid MPG values per ``key``, keys ascending.

    Groups without a single valid value are left out, as are rows whose key is
    missing. ``count`` is the number of values behind each mean.
    """
    empty = pd.DataFrame(columns=[key] + GROUP_COLUMNS)
    if subset.empty or key not in subset.columns:
        return empty

    keys = subset[key]
    if key == "model_year":
        keys = pd.to_numeric(keys, errors="coerce")
    frame = pd.DataFrame({key: keys, "mpg": mpg_values(subset, mpg_type)}).dropna(subset=[key, "mpg"])
    if frame.empty:
        return empty
    if key == "model_year":
        frame[key] = frame[key].astype(int)

    grouped = (
        frame.groupby(key, sort=True)["mpg"]
        .agg(average_mpg="mean", count="count")
        .reset_index()
    )
    return grouped[[key] + GROUP_COLUMNS]


def division_city_highway(subset: pd.DataFrame) -> pd.DataFrame:
    """Per-division city and highway means over rows where both are valid."""
    cols = ["division", "city_mpg", "highway_mpg", "count"]
    if subset.empty or "division" not in subset.columns:
        return pd.DataFrame(columns=cols)
    frame = pd.DataFrame(
        {
            "division": subset["division"],
            "city_mpg": mpg_values(subset, "City"),
            "highway_mpg": mpg_values(subset, "Highway"),
        }
    ).dropna()
    if frame.empty:
        return pd.DataFrame(columns=cols)
    return (
        frame.groupby("division", sort=True)
        .agg(city_mpg=("city_mpg", "mean"), highway_mpg=("highway_mpg", "mean"), count=("city_mpg", "count"))
        .reset_index()[cols]
    )


def unique_count(subset: pd.DataFrame, col: str) -> int:
    if subset.empty or col not in subset.columns:
        return 0
    return int(subset[col].nunique(dropna=True))


def _pairs(groups: pd.DataFrame, key: str) -> List[Tuple[Any, float]]:
    return [(k, float(v)) for k, v in zip(groups[key].tolist(), groups["average_mpg"].tolist())]


def summarize(subset: pd.DataFrame, mpg_type: Optional[str] = DEFAULT_MPG_TYPE) -> AggregateSummary:
    mpg_type = mpg_type or DEFAULT_MPG_TYPE
    if subset is None or subset.empty:
        return AggregateSummary(mpg_type=mpg_type)

    by_year = group_average_mpg(subset, "model_year", mpg_type)
    by_division = group_average_mpg(subset, "division", mpg_type)
    return AggregateSummary(
        mpg_type=mpg_type,
        average_mpg=overall_average_mpg(subset, mpg_type),
        valid_average_mpg=local_average_mpg(subset, mpg_type),
        total_count=int(len(subset)),
        valid_count=int(mpg_values(subset, mpg_type).notna().sum()),
        most_efficient=most_efficient_record(subset),
        unique_manufacturers=unique_count(subset, "manufacturer_name"),
        unique_models=unique_count(subset, "carline_name"),
        by_year=[(int(y), v) for y, v in _pairs(by_year, "model_year")],
        by_division=[(str(d), v) for d, v in _pairs(by_division, "division")],
    )

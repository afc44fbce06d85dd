from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import pandas as pd


ALL = "All"

TRANSMISSION_TYPES = [ALL, "Automatic", "Manual"]
# Substring searched for in the free-text transmission description.
TRANSMISSION_TOKENS = {"Automatic": "Auto", "Manual": "Manual"}

MPG_TYPES = ["Combined", "City", "Highway"]
DEFAULT_MPG_TYPE = "Combined"
MPG_COLUMNS = {
    "City": "city_mpg",
    "Highway": "highway_mpg",
    "Combined": "combined_mpg",
}

FILTER_KEYS = ("year", "manufacturer", "car_model", "car_type", "transmission_type", "mpg_type")


@dataclass(frozen=True)
class VehicleFilters:
    year: Union[int, str] = ALL
    manufacturer: str = ALL
    car_model: str = ALL
    car_type: str = ALL
    transmission_type: str = ALL
    mpg_type: str = DEFAULT_MPG_TYPE

    @property
    def mpg_column(self) -> str:
        return mpg_column(self.mpg_type)

    def is_unrestricted(self) -> bool:
        return all(getattr(self, k) == ALL for k in FILTER_KEYS if k != "mpg_type")


def mpg_column(mpg_type: Optional[str]) -> str:
    return MPG_COLUMNS.get(mpg_type or DEFAULT_MPG_TYPE, MPG_COLUMNS[DEFAULT_MPG_TYPE])


def _as_year(value: object) -> Union[int, str]:
    if value is None or value == "" or value == ALL:
        return ALL
    try:
        return int(float(str(value).strip()))
    except Exception:
        return ALL


def _as_choice(value: object) -> str:
    if value is None:
        return ALL
    s = str(value)
    return s if s.strip() else ALL


def normalize_filters(raw: Optional[Dict[str, Any]]) -> VehicleFilters:
    raw = raw or {}

    transmission_type = _as_choice(raw.get("transmission_type"))
    if transmission_type not in TRANSMISSION_TYPES:
        transmission_type = ALL

    mpg_type = raw.get("mpg_type") or DEFAULT_MPG_TYPE
    if mpg_type not in MPG_TYPES:
        mpg_type = DEFAULT_MPG_TYPE

    return VehicleFilters(
        year=_as_year(raw.get("year")),
        manufacturer=_as_choice(raw.get("manufacturer")),
        car_model=_as_choice(raw.get("car_model")),
        car_type=_as_choice(raw.get("car_type")),
        transmission_type=transmission_type,
        mpg_type=mpg_type,
    )


def _equals(df: pd.DataFrame, col: str, value: object) -> pd.Series:
    if col not in df.columns:
        return pd.Series(False, index=df.index)
    return (df[col] == value).fillna(False).astype(bool)


def _year_equals(df: pd.DataFrame, year: int) -> pd.Series:
    if "model_year" not in df.columns:
        return pd.Series(False, index=df.index)
    years = pd.to_numeric(df["model_year"], errors="coerce")
    return (years == year).fillna(False).astype(bool)


def _transmission_matches(df: pd.DataFrame, transmission_type: str) -> pd.Series:
    token = TRANSMISSION_TOKENS.get(transmission_type)
    if token is None or "transmission" not in df.columns:
        # Anything outside the Auto/Manual vocabulary is dropped while a filter is active.
        return pd.Series(False, index=df.index)
    text = df["transmission"].astype("string")
    return text.str.contains(token, regex=False).fillna(False).astype(bool)


def apply_filters(records: pd.DataFrame, filters: VehicleFilters) -> pd.DataFrame:
    """Return the rows of ``records`` that pass every active predicate.

    Predicates are ANDed and ``"All"`` passes everything. The result keeps the
    input order and index; ``records`` itself is never modified. ``mpg_type``
    does not filter.
    """
    if records is None:
        return pd.DataFrame()
    if records.empty:
        return records.copy()

    mask = pd.Series(True, index=records.index)
    if filters.year != ALL:
        mask &= _year_equals(records, int(filters.year))
    if filters.manufacturer != ALL:
        mask &= _equals(records, "manufacturer_name", filters.manufacturer)
    if filters.car_model != ALL:
        mask &= _equals(records, "carline_name", filters.car_model)
    if filters.car_type != ALL:
        mask &= _equals(records, "carline_class", filters.car_type)
    if filters.transmission_type != ALL:
        mask &= _transmission_matches(records, filters.transmission_type)
    return records[mask]


# ---------------- Filter options ----------------
def _options(series: Optional[pd.Series]) -> List[Any]:
    if series is None:
        return [ALL]
    values = series.dropna().unique().tolist()
    return [ALL] + sorted(values)


def year_options(records: pd.DataFrame) -> List[Any]:
    if records.empty or "model_year" not in records.columns:
        return [ALL]
    years = pd.to_numeric(records["model_year"], errors="coerce").dropna().astype(int)
    return _options(years)


def manufacturer_options(records: pd.DataFrame) -> List[Any]:
    return _options(records.get("manufacturer_name"))


def car_type_options(records: pd.DataFrame) -> List[Any]:
    return _options(records.get("carline_class"))


def model_options(records: pd.DataFrame, manufacturer: str) -> List[Any]:
    """Carlines offered by ``manufacturer``; only ``"All"`` until one is picked."""
    if manufacturer == ALL or records.empty or "carline_name" not in records.columns:
        return [ALL]
    scoped = records[_equals(records, "manufacturer_name", manufacturer)]
    return _options(scoped["carline_name"])

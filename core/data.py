from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from core.filters import VehicleFilters, apply_filters, normalize_filters


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]
SOURCE_FILE_NAMES = ["2021.xlsx", "2022.xlsx", "2023.xlsx", "2024.xlsx", "2025.xlsx"]

VEHICLE_COLUMNS = {
    "Model Year": "model_year",
    "Mfr Name": "manufacturer_name",
    "Carline": "carline_name",
    "Carline Class Desc": "carline_class",
    "Division": "division",
    "Transmission": "transmission",
    "Eng Displ": "engine_displacement",
    "City FE (Guide) - Conventional Fuel": "city_mpg",
    "Hwy FE (Guide) - Conventional Fuel": "highway_mpg",
    "Comb FE (Guide) - Conventional Fuel": "combined_mpg",
    "# Cyl": "cylinders",
    "Drive Sys": "drive_system",
}
# A sheet missing any of these cannot feed the filters or charts.
REQUIRED_HEADERS = [
    "Model Year",
    "Mfr Name",
    "Carline",
    "Division",
    "Transmission",
    "Comb FE (Guide) - Conventional Fuel",
]
STRING_COLUMNS = ["manufacturer_name", "carline_name", "carline_class", "division", "transmission", "drive_system"]
NUMERIC_COLUMNS = ["engine_displacement", "city_mpg", "highway_mpg", "combined_mpg", "cylinders"]


class DataLoadError(RuntimeError):
    """Raised when any source workbook cannot be loaded; the whole load fails."""


def get_source_files(data_dir: Optional[Path] = None) -> List[Path]:
    base = Path(data_dir) if data_dir is not None else DATA_DIR
    return [base / name for name in SOURCE_FILE_NAMES]


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    missing = [f.name for f in files if not f.exists()]
    if missing:
        raise DataLoadError(f"Missing source files: {', '.join(missing)}")
    return tuple((str(f), f.stat().st_mtime) for f in files)


def drop_duplicate_columns(df: pd.DataFrame) -> pd.DataFrame:
    return df.loc[:, ~df.columns.duplicated()]


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").replace([np.inf, -np.inf], np.nan)
    return df


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col].astype("string").str.strip()
            series = series.replace({"nan": pd.NA, "None": pd.NA, "": pd.NA})
            df[col] = series
    return df


def ensure_year_col(df: pd.DataFrame, col: str = "model_year") -> pd.DataFrame:
    if col in df.columns:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("Int64")
    return df


# ---------------- Loaders ----------------
def load_vehicle_file(path: Path) -> pd.DataFrame:
    """Read the first sheet of one yearly workbook into internal column names."""
    try:
        df = pd.read_excel(path, sheet_name=0, engine="openpyxl")
    except Exception as exc:
        raise DataLoadError(f"Could not read {path.name}: {exc}") from exc

    df.columns = [str(c).strip() for c in df.columns]
    missing = [h for h in REQUIRED_HEADERS if h not in df.columns]
    if missing:
        raise DataLoadError(f"{path.name} is missing headers: {', '.join(missing)}")

    df = df.rename(columns=VEHICLE_COLUMNS)
    df = drop_duplicate_columns(df)
    df = df[[c for c in VEHICLE_COLUMNS.values() if c in df.columns]].copy()
    for col in VEHICLE_COLUMNS.values():
        if col not in df.columns:
            df[col] = np.nan
    df = coerce_str_safe(df, STRING_COLUMNS)
    df = numericize(df, NUMERIC_COLUMNS)
    df = ensure_year_col(df)
    df["source_file"] = path.name
    return df


def load_vehicle_records(files_sig: Tuple[Tuple[str, float], ...]) -> pd.DataFrame:
    """Load every yearly workbook concurrently and stack them in file order.

    Each read is independent; the store only sees the frames once all of them
    have resolved. A single failed read fails the whole load.
    """
    files = [Path(name) for name, _ in files_sig]
    if not files:
        return pd.DataFrame(columns=list(VEHICLE_COLUMNS.values()) + ["source_file"])

    with ThreadPoolExecutor(max_workers=len(files)) as executor:
        # map() yields in submission order and re-raises the first worker error.
        frames = list(executor.map(load_vehicle_file, files))

    for path, frame in zip(files, frames):
        logger.info("Loaded %s (%d rows)", path.name, len(frame))
    records = pd.concat(frames, ignore_index=True)
    logger.info("Vehicle records ready: %d rows from %d files", len(records), len(files))
    return records


# ---------------- Public API (Streamlit + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(files_sig: Tuple[Tuple[str, float], ...]) -> Dict[str, object]:
    records = load_vehicle_records(files_sig)
    years = sorted(pd.to_numeric(records["model_year"], errors="coerce").dropna().astype(int).unique().tolist())
    return {
        "files": [Path(name).name for name, _ in files_sig],
        "years": years,
        "records": records,
    }


def load_dashboard_data(data_dir: Optional[Path] = None) -> Dict[str, object]:
    files = get_source_files(data_dir)
    return _load_dashboard_data_cached(file_signature(files))


def prepare_context(filters: dict | VehicleFilters, data_ctx: Dict[str, object]) -> Dict[str, object]:
    # The cached frame is shared; hand out a copy so nothing downstream can touch it.
    records: pd.DataFrame = data_ctx.get("records", pd.DataFrame()).copy()
    filt = filters if isinstance(filters, VehicleFilters) else normalize_filters(filters)
    filtered = apply_filters(records, filt)
    return {
        "filters": filt,
        "records": records,
        "filtered_records": filtered,
        "files": data_ctx.get("files", []),
        "years": data_ctx.get("years", []),
        "empty": bool(filtered.empty),
    }

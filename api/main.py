from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import VehicleFiltersModel
from core.data import load_dashboard_data, prepare_context
from core.filters import ALL, VehicleFilters, car_type_options, manufacturer_options, model_options, normalize_filters
from core.metrics_debug import compute_debug
from core.metrics_displacement import compute_displacement
from core.metrics_divisions import compute_divisions
from core.metrics_overview import compute_overview
from core.metrics_trend import compute_trend


app = FastAPI(title="Fuel Economy Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: VehicleFiltersModel) -> VehicleFilters:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _without_all(values: list) -> list:
    return [v for v in values if v != ALL]


@app.get("/meta/years")
def meta_years():
    try:
        data_ctx = load_dashboard_data()
        return _json({"years": [int(y) for y in data_ctx.get("years", [])]})
    except Exception as exc:
        logger.exception("meta_years failed")
        return _error(exc)


@app.get("/meta/manufacturers")
def meta_manufacturers():
    try:
        data_ctx = load_dashboard_data()
        return _json({"manufacturers": _without_all(manufacturer_options(data_ctx["records"]))})
    except Exception as exc:
        logger.exception("meta_manufacturers failed")
        return _error(exc)


@app.get("/meta/models")
def meta_models(manufacturer: str = Query(default=ALL)):
    try:
        data_ctx = load_dashboard_data()
        return _json({"models": _without_all(model_options(data_ctx["records"], manufacturer))})
    except Exception as exc:
        logger.exception("meta_models failed")
        return _error(exc)


@app.get("/meta/car-types")
def meta_car_types():
    try:
        data_ctx = load_dashboard_data()
        return _json({"car_types": _without_all(car_type_options(data_ctx["records"]))})
    except Exception as exc:
        logger.exception("meta_car_types failed")
        return _error(exc)


@app.post("/overview")
def overview(filters: VehicleFiltersModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/trend")
def trend(filters: VehicleFiltersModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_trend(f, ctx))
    except Exception as exc:
        logger.exception("trend failed")
        return _error(exc)


@app.post("/displacement")
def displacement(filters: VehicleFiltersModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_displacement(f, ctx))
    except Exception as exc:
        logger.exception("displacement failed")
        return _error(exc)


@app.post("/divisions")
def divisions(filters: VehicleFiltersModel, compare: bool = Query(default=False)):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_divisions(f, ctx, compare=compare))
    except Exception as exc:
        logger.exception("divisions failed")
        return _error(exc)


@app.post("/debug")
def debug(filters: VehicleFiltersModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_debug(f, ctx))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(page: str, filters: VehicleFiltersModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
    except Exception as exc:
        logger.exception("export failed")
        return _error(exc)

    filename = f"{page}.csv"
    if page in {"overview", "trend", "displacement", "divisions"}:
        export_df = ctx.get("filtered_records")
    elif page == "records":
        export_df = ctx.get("records")
    else:
        export_df = pd.DataFrame()

    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})

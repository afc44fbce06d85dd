import streamlit as st
from contextlib import contextmanager
from typing import Optional

import pandas as pd

from core import data as dc
from core.aggregate import division_city_highway, group_average_mpg
from core.charts import division_chart, division_comparison_chart, scatter_chart, scatter_points, trend_chart
from core.filters import (
    ALL,
    FILTER_KEYS,
    MPG_TYPES,
    TRANSMISSION_TYPES,
    VehicleFilters,
    car_type_options,
    manufacturer_options,
    model_options,
    year_options,
)
from core.metrics_overview import compute_overview
from core.state import CHART_TITLES, CHARTS, DashboardState, next_chart, previous_chart, reset_filters, set_filter, toggle_comparison

STATE_KEY = "dashboard_state"


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .dash-header {padding: 6px 0 4px;border-bottom: 1px solid #d1d5db;margin-bottom: 10px;}
        .dash-header .dash-title {font-size: 1.5rem;font-weight: 700;color: #0f172a;}
        .dash-header .record-count {color: #64748b;font-size: 0.9rem;}
        .card {border: 1px solid #d1d5db;border-radius: 10px;padding: 14px;margin-bottom: 12px;}
        .card-title {font-weight: 600;color: #0f172a;margin-bottom: 6px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #ecfdf5;border: 1px solid #a7f3d0;border-radius: 14px;padding: 3px 10px;font-size: 0.85rem;color: #065f46;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(filters: VehicleFilters) -> str:
    labels = {
        "year": "Year",
        "manufacturer": "Manufacturer",
        "car_model": "Model",
        "car_type": "Type",
        "transmission_type": "Transmission",
    }
    if filters.is_unrestricted():
        chips = ["All vehicles"]
    else:
        chips = [f"{label}: {getattr(filters, key)}" for key, label in labels.items() if getattr(filters, key) != ALL]
    chips.append(f"MPG: {filters.mpg_type}")
    return "".join(f"<span class='chip'>{txt}</span>" for txt in chips)


def render_page_header(
    title: str,
    filters: VehicleFilters,
    shown: int,
    total: int,
    export_df: Optional[pd.DataFrame] = None,
):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='dash-header'><div class='dash-title'>{title}</div>"
            f"<div class='record-count'>{shown:,} of {total:,} vehicles</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name="vehicles.csv",
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{format_filter_summary(filters)}</div>", unsafe_allow_html=True)


def fmt_mpg(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:.1f}"


# ---------- State wiring ----------
def current_state() -> DashboardState:
    return st.session_state.setdefault(STATE_KEY, DashboardState())


def sync_widgets(state: DashboardState):
    for key in FILTER_KEYS:
        st.session_state[f"filter_{key}"] = getattr(state.filters, key)


def on_filter_change(key: str):
    state = set_filter(current_state(), key, st.session_state[f"filter_{key}"])
    st.session_state[STATE_KEY] = state
    sync_widgets(state)


def on_reset():
    state = reset_filters(current_state())
    st.session_state[STATE_KEY] = state
    sync_widgets(state)


def on_next():
    st.session_state[STATE_KEY] = next_chart(current_state())


def on_previous():
    st.session_state[STATE_KEY] = previous_chart(current_state())


def on_toggle_comparison():
    st.session_state[STATE_KEY] = toggle_comparison(current_state())


def filter_select(label: str, key: str, options: list):
    widget_key = f"filter_{key}"
    if st.session_state.get(widget_key) not in options:
        # Option lists shrink with the data; fall back to the unrestricted value.
        st.session_state[widget_key] = options[0]
        st.session_state[STATE_KEY] = set_filter(current_state(), key, options[0])
    st.selectbox(label, options=options, key=widget_key, on_change=on_filter_change, args=(key,))


# ---------- UI setup ----------
st.set_page_config(page_title="Fuel Economy Analyzer", layout="wide")
inject_base_styles()
st.title("Fuel Economy Analyzer (2021-2025)")
st.caption("Filter the combined fuel-economy guide data and compare MPG across years, engines and divisions.")

try:
    data_ctx = dc.load_dashboard_data()
except dc.DataLoadError as exc:
    st.error(f"Error loading data: {exc}")
    st.stop()

records: pd.DataFrame = data_ctx["records"]

if STATE_KEY not in st.session_state:
    st.session_state[STATE_KEY] = DashboardState()
    sync_widgets(st.session_state[STATE_KEY])

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    filter_select("Year", "year", year_options(records))
    filter_select("Manufacturer", "manufacturer", manufacturer_options(records))
    filter_select("Model", "car_model", model_options(records, current_state().filters.manufacturer))
    filter_select("Car Type", "car_type", car_type_options(records))
    filter_select("Transmission Type", "transmission_type", TRANSMISSION_TYPES)
    filter_select("MPG Type", "mpg_type", MPG_TYPES)
    st.button("Reset filters", on_click=on_reset)
    st.markdown("---")
    st.checkbox(
        "Compare city vs highway by division",
        value=current_state().comparison_mode,
        key="comparison_mode",
        on_change=on_toggle_comparison,
    )

state = current_state()
filters = state.filters
ctx = dc.prepare_context(filters, data_ctx)
filtered = ctx["filtered_records"]


# ----- Page renderers -----
def render_summary(overview: dict):
    kpis = overview["kpis"]
    cols = st.columns(4)
    cols[0].metric(
        f"Average {kpis['mpg_type']} MPG",
        fmt_mpg(kpis["average_mpg"]),
        help=f"Over all vehicles (unparseable values count as 0). Valid-only average: {fmt_mpg(kpis['valid_average_mpg'])}",
    )
    cols[1].metric("Vehicles", f"{kpis['total_count']:,}")
    cols[2].metric("Manufacturers", f"{kpis['unique_manufacturers']:,}")
    cols[3].metric("Models", f"{kpis['unique_models']:,}")
    best = overview.get("most_efficient")
    if best:
        combined = best["record"].get("combined_mpg")
        st.markdown(f"**Most efficient:** {best['label']} ({fmt_mpg(combined)} combined MPG)")


def render_chart(chart_name: str):
    if chart_name == "trend":
        groups = group_average_mpg(filtered, "model_year", filters.mpg_type)
        if groups.empty:
            st.info(f"No valid {filters.mpg_type} MPG values for the selected filters.")
            return
        st.altair_chart(trend_chart(groups, filters.mpg_type), use_container_width=True)
    elif chart_name == "displacement":
        points = scatter_points(filtered, filters.mpg_type)
        if points.empty:
            st.info("No vehicles with both engine displacement and MPG values.")
            return
        st.altair_chart(scatter_chart(points, filters.mpg_type), use_container_width=True)
    elif state.comparison_mode:
        table = division_city_highway(filtered)
        if table.empty:
            st.info("No divisions with both city and highway MPG values.")
            return
        st.altair_chart(division_comparison_chart(table), use_container_width=True)
    else:
        groups = group_average_mpg(filtered, "division", filters.mpg_type)
        if groups.empty:
            st.info(f"No valid {filters.mpg_type} MPG values for the selected filters.")
            return
        st.altair_chart(division_chart(groups, filters.mpg_type), use_container_width=True)


render_page_header("Fuel Economy", filters, len(filtered), len(records), export_df=filtered)

if filtered.empty:
    st.info("No data available for the selected filters.")
else:
    with card("Summary"):
        render_summary(compute_overview(filters, ctx))

    chart_name = state.active_chart
    with card(f"{CHART_TITLES[chart_name]} ({state.chart_index + 1}/{len(CHARTS)})"):
        nav = st.columns([1, 1, 6])
        nav[0].button("< Previous", on_click=on_previous)
        nav[1].button("Next >", on_click=on_next)
        render_chart(chart_name)

if filters.transmission_type != ALL:
    st.caption("Transmissions outside the Automatic/Manual vocabulary (e.g. CVT descriptions) are excluded while a transmission filter is active.")

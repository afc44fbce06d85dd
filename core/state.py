"""Immutable dashboard UI state.

Every interaction produces a new ``DashboardState`` from the previous one; the
Streamlit app keeps the current snapshot in ``st.session_state`` and replaces it
wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from core.filters import ALL, FILTER_KEYS, VehicleFilters

CHARTS = ["trend", "displacement", "divisions"]
CHART_TITLES = {
    "trend": "Fuel Economy Trend",
    "displacement": "Engine Displacement vs MPG",
    "divisions": "MPG by Division",
}


@dataclass(frozen=True)
class DashboardState:
    filters: VehicleFilters = field(default_factory=VehicleFilters)
    chart_index: int = 0
    comparison_mode: bool = False

    @property
    def active_chart(self) -> str:
        return CHARTS[self.chart_index % len(CHARTS)]


def set_filter(state: DashboardState, key: str, value: object) -> DashboardState:
    if key not in FILTER_KEYS:
        raise KeyError(f"Unknown filter: {key}")
    changes = {key: value}
    # Carlines are manufacturer-scoped; a stale model must not survive a manufacturer change.
    if key == "manufacturer" and (value == ALL or value != state.filters.manufacturer):
        changes["car_model"] = ALL
    return replace(state, filters=replace(state.filters, **changes))


def reset_filters(state: DashboardState) -> DashboardState:
    return replace(state, filters=VehicleFilters())


def next_chart(state: DashboardState) -> DashboardState:
    return replace(state, chart_index=(state.chart_index + 1) % len(CHARTS))


def previous_chart(state: DashboardState) -> DashboardState:
    return replace(state, chart_index=(state.chart_index - 1 + len(CHARTS)) % len(CHARTS))


def toggle_comparison(state: DashboardState) -> DashboardState:
    return replace(state, comparison_mode=not state.comparison_mode)

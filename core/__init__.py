"""Core (UI-agnostic) fuel economy dashboard logic.

This package contains:
- data loading (yearly XLSX -> pandas)
- filter normalization and the filter engine
- immutable dashboard state updates
- aggregation (averages, most efficient vehicle, per-group means)
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import api.main as api_main
from core.data import DataLoadError


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, data_ctx: dict) -> TestClient:
    monkeypatch.setattr(api_main, "load_dashboard_data", lambda: data_ctx)
    return TestClient(api_main.app)


def test_meta_endpoints(client: TestClient) -> None:
    assert client.get("/meta/years").json() == {"years": [2021, 2022, 2023]}
    assert client.get("/meta/manufacturers").json() == {"manufacturers": ["Ford", "Honda", "Toyota"]}
    assert client.get("/meta/models", params={"manufacturer": "Honda"}).json() == {"models": ["Accord", "Civic"]}
    assert client.get("/meta/models").json() == {"models": []}
    assert client.get("/meta/car-types").json()["car_types"][0] == "Compact Cars"


def test_overview_endpoint_is_json_safe(client: TestClient) -> None:
    resp = client.post("/overview", json={"manufacturer": "Ford"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["kpis"]["total_count"] == 1
    assert body["kpis"]["average_mpg"] == 0.0
    assert body["kpis"]["valid_average_mpg"] is None
    assert body["most_efficient"]["record"]["combined_mpg"] is None


def test_chart_endpoints(client: TestClient) -> None:
    trend = client.post("/trend", json={"mpg_type": "Highway"}).json()
    scatter = client.post("/displacement", json={"transmission_type": "Manual"}).json()
    divisions = client.post("/divisions", params={"compare": "true"}, json={}).json()

    assert [p["label"] for p in trend["series"]] == [2021, 2022, 2023]
    assert scatter["points"] == [{"x": 2.0, "y": 30.0}]
    assert divisions["compare"] is True


def test_debug_endpoint(client: TestClient) -> None:
    body = client.post("/debug", json={}).json()

    assert body["row_counts"]["records"] == 6


def test_export_returns_filtered_csv(client: TestClient) -> None:
    resp = client.post("/export/overview", json={"year": 2021})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert len(lines) == 3


def test_load_failure_returns_error_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail():
        raise DataLoadError("Missing source files: 2025.xlsx")

    monkeypatch.setattr(api_main, "load_dashboard_data", _fail)
    client = TestClient(api_main.app)

    resp = client.post("/overview", json={})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Missing source files: 2025.xlsx", "type": "DataLoadError"}


def test_export_load_failure_returns_error_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail():
        raise DataLoadError("Missing source files: 2025.xlsx")

    monkeypatch.setattr(api_main, "load_dashboard_data", _fail)
    client = TestClient(api_main.app, raise_server_exceptions=False)

    resp = client.post("/export/overview", json={})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Missing source files: 2025.xlsx", "type": "DataLoadError"}

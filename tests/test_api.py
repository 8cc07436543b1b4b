"""
HTTP API tests against a throwaway AppState.
"""
import pytest
from fastapi.testclient import TestClient

from signshop.api.main import app
from signshop.api.state import get_state


@pytest.fixture
def api(state):
    app.dependency_overrides[get_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_catalog(api):
    client = api.post("/api/clients", json={"name": "Empresa ABC Ltda"}).json()
    material = api.post("/api/materials", json={"name": "Lona 440g", "unit": "m2", "cost_per_unit": 18.5}).json()
    ink = api.post("/api/inks", json={"name": "Ciano", "cost_per_liter": 180}).json()
    return client, material, ink


def test_root(api):
    assert api.get("/").json()["status"] == "online"


def test_calculate(api):
    body = {"extras": [{"description": "Setup", "value": 110.15}], "markup_percent": 30}

    response = api.post("/calculate", json=body)
    assert response.status_code == 200
    assert response.json()["sale_price"] == 143.2
    assert response.json()["margin_percent"] == 23.08
    assert api.post("/api/orders/preview", json=body).json() == response.json()


def test_calculate_rejects_negative_inputs(api):
    assert api.post("/calculate", json={"manual_price": -1}).status_code == 422


def test_material_crud(api):
    created = api.post("/api/materials", json={"name": "Vinil", "unit": "m", "cost_per_unit": 9.75})
    assert created.status_code == 201
    material_id = created.json()["id"]

    assert api.get("/api/materials").json()["count"] == 1
    updated = api.put(f"/api/materials/{material_id}", json={"cost_per_unit": 11})
    assert updated.json()["cost_per_unit"] == 11

    assert api.delete(f"/api/materials/{material_id}").json()["success"] is True
    assert api.delete(f"/api/materials/{material_id}").status_code == 404
    assert api.get(f"/api/materials/{material_id}").status_code == 404


def test_validation_errors_are_400(api):
    response = api.post("/api/clients", json={"name": "Bad", "email": "not-an-email"})
    assert response.status_code == 400
    assert "Invalid email" in response.json()["detail"]


def test_order_flow_keeps_snapshot_prices(api):
    client, material, ink = make_catalog(api)

    line = api.post("/api/orders/lines/material", json={"material_id": material["id"], "width": 3, "height": 1}).json()
    ink_line = api.post("/api/orders/lines/ink", json={"ink_id": ink["id"], "ml": 120}).json()
    assert line["cost_per_unit_snapshot"] == 18.5

    created = api.post("/api/orders", json={
        "client_id": client["id"],
        "name": "Banner 3x1",
        "material_lines": [line],
        "ink_lines": [ink_line],
        "labor_hours": 1.5,
        "labor_rate": 40,
        "markup_percent": 40,
    })
    assert created.status_code == 201
    order_id = created.json()["id"]
    assert created.json()["breakdown"]["sale_price"] == 191.94

    api.put(f"/api/materials/{material['id']}", json={"cost_per_unit": 99})
    assert api.get(f"/api/orders/{order_id}").json()["breakdown"]["sale_price"] == 191.94

    assert api.put(f"/api/orders/{order_id}/status", json={"status": "completed"}).json()["status"] == "completed"
    paid = api.post(f"/api/orders/{order_id}/payments", json={"value": 91.94, "method": "pix"}).json()
    assert paid["balance_due"] == 100.0

    commented = api.post(f"/api/orders/{order_id}/comments", json={"author": "Ana", "text": "Entregue"}).json()
    assert commented["comments"][0]["text"] == "Entregue"

    assert api.get("/api/orders", params={"status": "completed"}).json()["count"] == 1
    assert api.get("/api/orders", params={"status": "shipped"}).status_code == 400

    assert api.delete(f"/api/orders/{order_id}").status_code == 200
    assert api.get(f"/api/orders/{order_id}").status_code == 404


def test_order_for_unknown_client_is_404(api):
    response = api.post("/api/orders", json={"client_id": "ghost", "name": "Placa"})
    assert response.status_code == 404


def test_plan_limit_is_403(api, state):
    for i in range(10):
        state.catalog.create_ink({"name": f"Ink {i}", "cost_per_liter": 100})

    response = api.post("/api/inks", json={"name": "Ink 11", "cost_per_liter": 100})
    assert response.status_code == 403
    assert "Upgrade to Pro" in response.json()["detail"]


def test_report_export_follows_plan(api, state, client_id):
    state.orders.create_order({"client_id": client_id, "name": "Placa", "manual_price": 50})

    assert api.get("/api/reports/export").status_code == 403
    assert api.get("/api/settings").json()["limits"]["materials"] == 10

    assert api.put("/api/settings", json={"plan": "pro"}).json()["plan"] == "pro"
    assert api.get("/api/settings").json()["limits"]["materials"] is None

    response = api.get("/api/reports/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "Placa" in response.text


def test_reports_summary(api, state, client_id):
    state.orders.create_order({"client_id": client_id, "name": "Placa", "manual_price": 50})

    body = api.get("/api/reports/summary").json()
    assert body["summary"]["revenue"] == 50
    assert body["status_distribution"] == {"quote": 1}
    assert api.get("/api/reports/dashboard").json()["pending_quotes"] == 1


def test_settings_locale_updates_preferences(api, state):
    response = api.put("/api/settings", json={"locale": "en", "currency": "USD"})

    assert response.json()["currency"] == "USD"
    assert state.preferences.locale == "en"


def test_backup_and_audit(api, state):
    make_catalog(api)

    backup = api.get("/api/backup").json()
    assert len(backup["materials"]) == 1
    assert "last_backup_at" in backup["meta"]
    assert api.get("/api/audit").json()["count"] == 3

    assert api.post("/api/backup", json={"clients": []}).status_code == 400
    assert api.post("/api/backup", json=backup).json()["success"] is True


def test_calculate_handles_very_large_figures(api):
    response = api.post("/calculate", json={"labor_hours": 1e20, "labor_rate": 1e10})

    assert response.status_code == 200
    assert response.json()["total_cost"] == 1e30

# tests/test_api.py
import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt
import api.v1.layouts as layouts_api
import config
from dependencies.auth import get_session_context
from main import app
from models.session import SessionContext
from services.backend_client import BackendClient
from services.layouts import LayoutService

BACKEND_URL = "http://backend.test/api"

SALES = [{"region": "West", "sales": 120}, {"region": "East", "sales": 95}]
USER_ID = "5b0c2c1e-8d2f-4a57-9a39-0f5a0b1d2c3e"

@pytest.fixture
def api(backend, monkeypatch):
    def service_factory(session):
        client = BackendClient(session, base_url=BACKEND_URL, transport=httpx.MockTransport(backend))
        return LayoutService(session, client)

    monkeypatch.setattr(layouts_api, "LayoutService", service_factory)
    app.dependency_overrides[get_session_context] = lambda: SessionContext(access_token="access-1")
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def stored_layout(backend):
    backend.add_query("q-sales", "Sales by region", SALES)
    backend.layout = [
        {"id": "c1", "type": "pieChart", "queryId": "q-sales", "queryName": "Sales by region", "config": {}},
        {"id": "c2", "type": "text", "config": {"content": "Weekly numbers"}},
    ]
    return backend.layout

def test_component_types(api):
    response = api.get("/api/v1/component-types")

    assert response.status_code == 200
    types = [item["type"] for item in response.json()]
    assert len(types) == 18
    assert types[0] == "table"

def test_get_layout(api, stored_layout):
    response = api.get("/api/v1/apps/app-1/layout")

    assert response.status_code == 200
    layout = response.json()["layout"]
    assert [item["id"] for item in layout] == ["c1", "c2"]
    assert layout[0]["data"] == SALES

def test_get_layout_backend_failure(api, backend):
    backend.fail_layout = True
    assert api.get("/api/v1/apps/app-1/layout").status_code == 502

def test_put_layout_strips_data(api, backend):
    body = {"layout": [{"id": "c1", "type": "table", "queryId": "q-sales", "config": {}, "data": SALES}]}

    response = api.put("/api/v1/apps/app-1/layout", json=body)

    assert response.status_code == 200
    assert "data" not in backend.saved[0][0]
    assert response.json()["layout"][0]["data"] is None

def test_add_component(api):
    response = api.post("/api/v1/apps/app-1/layout/components", json={"layout": [], "type": "text"})

    assert response.status_code == 200
    layout = response.json()["layout"]
    assert layout[0]["type"] == "text"
    assert layout[0]["config"] == {"content": "Edit this text..."}

def test_add_unknown_component_type(api):
    response = api.post("/api/v1/apps/app-1/layout/components", json={"layout": [], "type": "hologram"})
    assert response.status_code == 422

def test_bind_query(api, backend):
    backend.add_query("q-sales", "Sales by region", SALES)
    body = {"layout": [{"id": "c1", "type": "chart", "config": {}}], "componentId": "c1", "queryId": "q-sales"}

    response = api.post("/api/v1/apps/app-1/layout/bind", json=body)

    assert response.status_code == 200
    bound = response.json()["layout"][0]
    assert bound["queryName"] == "Sales by region"
    assert bound["data"] == SALES

def test_bind_failing_query(api, backend):
    backend.add_query("q-broken", "Broken", [])
    backend.failing.add("q-broken")
    body = {"layout": [{"id": "c1", "type": "chart", "config": {}}], "componentId": "c1", "queryId": "q-broken"}

    response = api.post("/api/v1/apps/app-1/layout/bind", json=body)

    assert response.status_code == 502

def test_render_stored_layout(api, stored_layout):
    response = api.get("/api/v1/apps/app-1/render")

    assert response.status_code == 200
    rendered = response.json()
    assert rendered[0]["chart"]["component"] == "PieChart"
    assert rendered[1]["visual"] == {"kind": "text", "content": "Weekly numbers"}

def test_render_posted_layout_marks_selection(api):
    body = {
        "layout": [{"id": "c1", "type": "button", "config": {}}, {"id": "c2", "type": "gauge", "config": {}}],
        "state": {"selectedComponent": "c2"}
    }

    response = api.post("/api/v1/render", json=body)

    assert response.status_code == 200
    rendered = response.json()
    assert [item["selected"] for item in rendered] == [False, True]
    assert rendered[1]["visual"]["kind"] == "placeholder"

def test_export_stored_layout(api, stored_layout):
    response = api.get("/api/v1/apps/app-1/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert 'filename="sales-overview-dashboard.html"' in response.headers["content-disposition"]
    assert "Sales Overview" in response.text
    assert response.text.count("new Chart(") == 1

def test_export_posted_layout(api):
    body = {"layout": [{"id": "c1", "type": "text", "config": {"content": "Hi"}}], "app": {"name": "Ops"}}

    response = api.post("/api/v1/export", json=body)

    assert response.status_code == 200
    assert "<h1>Ops</h1>" in response.text

#
# Authentication
#
def test_requests_without_token_are_rejected():
    response = TestClient(app).post("/api/v1/render", json={"layout": []})
    assert response.status_code in (401, 403)

def test_invalid_token_is_rejected():
    response = TestClient(app).post("/api/v1/render", json={"layout": []},
                                    headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401

def test_valid_token_builds_session(monkeypatch):
    monkeypatch.setattr(config, "AUTH_JWT_SECRET", "test-secret")
    monkeypatch.setattr(config, "AUTH_JWT_AUDIENCE", "authenticated")
    token = jwt.encode({"sub": USER_ID, "aud": "authenticated"}, "test-secret", algorithm="HS256")

    response = TestClient(app).post("/api/v1/render", json={"layout": []},
                                    headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json() == []

def test_token_without_subject_is_rejected(monkeypatch):
    monkeypatch.setattr(config, "AUTH_JWT_SECRET", "test-secret")
    monkeypatch.setattr(config, "AUTH_JWT_AUDIENCE", None)
    token = jwt.encode({"role": "viewer"}, "test-secret", algorithm="HS256")

    response = TestClient(app).post("/api/v1/render", json={"layout": []},
                                    headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401

def test_render_posted_layout_with_malformed_data(api):
    body = {"layout": [
        {"id": "c1", "type": "chart", "queryId": "q1", "config": {}, "data": "oops"},
        {"id": "c2", "type": "kpi", "queryId": "q1", "config": {}, "data": {"orders": 3}},
    ]}

    response = api.post("/api/v1/render", json=body)

    assert response.status_code == 200
    assert [item["visual"]["kind"] for item in response.json()] == ["placeholder", "placeholder"]

def test_export_posted_layout_with_malformed_data(api):
    body = {"layout": [{"id": "c1", "type": "table", "queryId": "q1", "config": {}, "data": 7}]}

    response = api.post("/api/v1/export", json=body)

    assert response.status_code == 200
    assert 'class="component ' not in response.text

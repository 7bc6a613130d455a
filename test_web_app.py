"""View-model API exercised end to end against a stubbed gateway."""

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import FakeScheduler, RecordingTransport
from spendwise.core.storage import MemoryStorage
from spendwise.frontend.app import create_app
from spendwise.frontend.context import build_context

USER = {"id": 5, "email": "ana@example.com", "first_name": "Ana", "last_name": "Ruiz"}


@pytest.fixture
def gateway():
    return RecordingTransport(
        {
            ("POST", "/auth/login"): {"message": "Login successful", "token": "tok-5", "user": USER},
            ("DELETE", "/auth/sessions"): httpx.Response(204),
            ("GET", "/accounts"): {
                "accounts": [
                    {"id": 1, "name": "Checking", "balance_current": 1200.50},
                    {"id": 2, "name": "Visa", "account_type": "credit", "balance_current": -300},
                ]
            },
            ("GET", "/transactions"): {
                "transactions": [
                    {"id": 1, "amount": -50, "date": "2024-03-02", "primary_category": {"id": 1, "name": "Food"}},
                    {"id": 2, "amount": -20, "date": "2024-03-03", "primary_category": {"id": 2, "name": "Transport"}},
                ]
            },
            ("GET", "/categories"): {"categories": [{"id": 1, "name": "Food"}]},
            ("POST", "/plaid/link_token"): {"link_token": "link-sandbox-abc"},
            ("POST", "/plaid/exchange_token"): {"message": "ok", "accounts": [{"id": 3, "name": "Savings"}]},
        }
    )


@pytest.fixture
def http(gateway):
    context = build_context(
        storage=MemoryStorage(),
        transport=gateway.mock,
        scheduler=FakeScheduler(),
        system_theme=lambda: None,
        retry_backoff=0,
    )
    with TestClient(create_app(context)) as test_client:
        yield test_client


def test_login_and_logout(http):
    response = http.post("/api/session/login", json={"email": "ana@example.com", "password": "pw"})
    assert response.status_code == 200
    assert response.json()["is_authenticated"] is True
    assert response.json()["user"]["email"] == "ana@example.com"

    assert http.get("/api/session").json()["status"] == "authenticated"
    assert http.delete("/api/session").json()["status"] == "anonymous"


def test_rejected_login_keeps_status_code(http, gateway):
    gateway.routes[("POST", "/auth/login")] = httpx.Response(401, json={"error": "Invalid email or password"})

    response = http.post("/api/session/login", json={"email": "ana@example.com", "password": "bad"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"
    assert http.get("/api/session").json()["error"] == "Invalid email or password"


def test_dashboard_for_month(http):
    response = http.get("/api/dashboard", params={"month": "2024-03"})

    assert response.status_code == 200
    body = response.json()
    assert body["month"] == "2024-03"
    assert body["total_balance"] == 900.5
    assert body["total_debt"] == 300
    assert body["top_category"] == "Food"
    assert [share["name"] for share in body["category_breakdown"]] == ["Food", "Transport"]
    assert body["display"]["month"] == "March 2024"
    assert body["display"]["total_balance"] == "$900.50"
    assert body["display"]["total_debt"] == "$300.00"


@pytest.mark.parametrize("month", ["2024-13", "March"])
def test_dashboard_rejects_bad_month(http, month):
    assert http.get("/api/dashboard", params={"month": month}).status_code == 422


def test_gateway_outage_maps_to_bad_gateway(http, gateway):
    gateway.routes[("GET", "/accounts")] = httpx.Response(500, json={"error": "Database offline"})

    response = http.get("/api/accounts")

    assert response.status_code == 502
    assert response.json()["error"]["kind"] == "network"


def test_ui_theme_sidebar_and_notifications(http):
    assert http.get("/api/ui").json()["theme"] == "light"
    assert http.post("/api/ui/theme/toggle").json()["theme"] == "dark"
    assert http.put("/api/ui/theme", json={"theme": "light"}).json()["theme"] == "light"
    assert http.put("/api/ui/theme", json={"theme": "neon"}).status_code == 422
    assert http.post("/api/ui/sidebar/toggle").json()["sidebar_open"] is True
    assert http.put("/api/ui/sidebar", json={"open": False}).json()["sidebar_open"] is False

    http.post("/api/link/start")
    http.post("/api/link/start")
    notifications = http.get("/api/notifications").json()
    assert [item["title"] for item in notifications] == ["Not Ready"]

    notification_id = notifications[0]["id"]
    assert http.delete(f"/api/notifications/{notification_id}").json() == {"removed": True}
    assert http.delete(f"/api/notifications/{notification_id}").json() == {"removed": False}
    assert http.delete("/api/notifications").json() == []


def test_link_flow_over_api(http, gateway):
    started = http.post("/api/link/start").json()
    assert started["state"] == "widget_open"
    assert started["link_token"] == "link-sandbox-abc"

    finished = http.post("/api/link/success", json={"public_token": "public-sandbox-1"}).json()
    assert finished["state"] == "idle"
    assert finished["last_outcome"] == "linked"
    assert finished["result"]["success"] is True

    titles = [item["title"] for item in http.get("/api/notifications").json()]
    assert titles == ["Bank Connected!"]


def test_disconnect_routes(http, gateway):
    assert http.post("/api/link/disconnect/confirm").status_code == 409
    assert http.post("/api/link/disconnect/99").status_code == 404

    pending = http.post("/api/link/disconnect/2").json()["pending_disconnect"]
    assert pending["account"]["id"] == 2
    assert pending["options"]["keep_categories"] is True

    assert http.delete("/api/link/disconnect").json()["pending_disconnect"] is None


def test_category_mutations_report_success(http, gateway):
    gateway.routes[("POST", "/categories")] = {"category": {"id": 8, "name": "Travel"}}
    gateway.routes[("DELETE", "/categories/8")] = httpx.Response(422, json={"error": "Category has transactions"})

    created = http.post("/api/categories", json={"name": "Travel", "color": "#3B82F6"}).json()
    deleted = http.delete("/api/categories/8").json()

    assert created == {"success": True, "result": created["result"]}
    assert created["result"]["name"] == "Travel"
    assert deleted == {"success": False, "result": None}
    titles = [item["title"] for item in http.get("/api/notifications").json()]
    assert titles == ["Category Created", "Delete Failed"]

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tests.conftest import ADMIN_TOKEN, parse_dt


pytestmark = pytest.mark.admin


def _activate(client, user_id, days=30):
    payment_id = client.post(
        "/create-payment",
        json={"user_id": user_id, "days": days, "amount": 299},
    ).json()["payment_id"]
    client.post("/confirm-payment", json={"payment_id": payment_id, "user_id": user_id})


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/admin/users"),
        ("get", "/admin/stats"),
        ("post", "/admin/add-days"),
        ("post", "/admin/set-subscription"),
        ("get", "/admin/messages"),
        ("post", "/admin/messages"),
        ("post", "/admin/book-of-month"),
        ("post", "/admin/magazine"),
    ],
)
def test_admin_routes_require_token(client, method, path):
    response = getattr(client, method)(path, headers={"X-Admin-Token": "wrong"})

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


def test_admin_token_accepted_as_query_param(client):
    response = client.get("/admin/users", params={"admin_token": ADMIN_TOKEN})
    assert response.status_code == 200


def test_empty_admin_secret_never_authorizes(settings, fake_bot, fake_channel):
    from fastapi.testclient import TestClient

    from app.core.app_factory import create_app

    app = create_app(
        settings.model_copy(update={"admin_secret_token": ""}),
        telegram=fake_bot,
        channel=fake_channel,
    )
    with TestClient(app) as client:
        response = client.get("/admin/users", headers={"X-Admin-Token": ""})
    app.state.engine.dispose()

    assert response.status_code == 401


def test_users_list_shows_derived_status(client, admin_headers):
    _activate(client, 1)
    client.post("/messages", json={"user_id": 2, "text": "hi"})
    client.post(
        "/admin/set-subscription",
        json={
            "user_id": 3,
            "status": "active",
            "end_date": (datetime.now(timezone.utc) - timedelta(days=1)).isoformat(),
        },
        headers=admin_headers,
    )

    body = client.get("/admin/users", headers=admin_headers).json()
    users = {user["user_id"]: user for user in body["users"]}

    assert body["total"] == 3
    assert users[1]["status"] == "active"
    assert users[1]["days_remaining"] == 30
    assert users[2]["status"] == "inactive"
    assert users[3]["status"] == "inactive"
    assert users[3]["stored_status"] == "active"


def test_add_days_unknown_user_is_404(client, admin_headers):
    response = client.post(
        "/admin/add-days",
        json={"user_id": 999, "days": 5},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Subscription not found"


@pytest.mark.parametrize("days", [0, -5])
def test_add_days_rejects_non_positive(client, admin_headers, days):
    _activate(client, 1)
    response = client.post(
        "/admin/add-days",
        json={"user_id": 1, "days": days},
        headers=admin_headers,
    )

    assert response.status_code == 400


@pytest.mark.parametrize("days", [True, "5", 2.5, 2.0])
def test_add_days_requires_json_integer(client, admin_headers, days):
    _activate(client, 1)
    before = client.get("/subscription-status", params={"user_id": 1}).json()["end"]

    response = client.post(
        "/admin/add-days",
        json={"user_id": 1, "days": days},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_ARGUMENT"
    after = client.get("/subscription-status", params={"user_id": 1}).json()["end"]
    assert after == before


def test_add_days_extends_end(client, admin_headers):
    _activate(client, 1)
    before = parse_dt(client.get("/subscription-status", params={"user_id": 1}).json()["end"])

    response = client.post(
        "/admin/add-days",
        json={"user_id": 1, "days": 7},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "active"
    assert parse_dt(body["new_end_date"]) == before + timedelta(days=7)


def test_set_subscription_cancelled_scenario(client, admin_headers):
    response = client.post(
        "/admin/set-subscription",
        json={"user_id": 7, "status": "cancelled", "end_date": None},
        headers=admin_headers,
    )
    assert response.status_code == 200

    status = client.get("/subscription-status", params={"user_id": 7}).json()
    assert status["status"] == "inactive"
    assert status["days_remaining"] == 0


def test_set_subscription_rejects_unknown_status(client, admin_headers):
    response = client.post(
        "/admin/set-subscription",
        json={"user_id": 7, "status": "frozen"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "SUBSCRIPTION_INVALID_STATUS"


def test_set_subscription_grants_access_until_end(client, admin_headers):
    end = datetime.now(timezone.utc) + timedelta(days=3)
    client.post(
        "/admin/set-subscription",
        json={"user_id": 8, "status": "active", "end_date": end.isoformat()},
        headers=admin_headers,
    )

    access = client.get("/reading-room-access", params={"user_id": 8}).json()
    assert access["has_access"] is True


def test_stats(client, admin_headers):
    _activate(client, 1)
    _activate(client, 2)
    client.post("/create-payment", json={"user_id": 3, "days": 30, "amount": 299})

    stats = client.get("/admin/stats", headers=admin_headers).json()

    assert stats["total_users"] == 2
    assert stats["total_active_subscriptions"] == 2
    assert stats["total_completed_payments"] == 2
    assert stats["total_revenue"] == 598.0

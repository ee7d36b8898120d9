from datetime import datetime, timedelta, timezone

import pytest

from grocer.events.notification_feed import FEEDS
from grocer.tests.fake_backend import CONSUMER_HEADERS


def _iso(moment):
    return moment.isoformat().replace("+00:00", "Z")


@pytest.fixture
def spending(backend):
    now = datetime.now(timezone.utc)
    backend.orders.extend([
        {"_id": "o1", "customerId": "u1", "shopId": {"_id": "s2", "name": "Corner Store"},
         "items": [{"productId": "p3", "quantity": 2, "price": 60}], "totalAmount": 120,
         "status": "DELIVERED", "orderDate": _iso(now - timedelta(days=2))},
        {"_id": "o2", "customerId": "u1", "shopId": "s1",
         "items": [{"productId": "p1", "quantity": 1, "price": 30}], "totalAmount": 30,
         "status": "DELIVERED", "orderDate": "2020-01-05T10:00:00Z"},
        {"_id": "o3", "customerId": "u2", "shopId": "s1", "items": [], "totalAmount": 999,
         "status": "PENDING", "orderDate": _iso(now)},
    ])
    backend.add_pantry_item(status="CONFIRMED", packsOwned=2, price=30)
    backend.add_pantry_item(status="REFILL_REQUESTED", packsOwned=1, price=30)
    backend.add_pantry_item(status="STOCKED")
    return backend


# === Expenses ===
def test_expenses_combine_orders_and_refills(api, spending):
    resp = api.get("/api/expenses", headers=CONSUMER_HEADERS)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["totalSpent"] == 120 + 30 + 60
    shops = [(s["shopName"], s["total"]) for s in data["shopWiseSpending"]]
    assert shops == [("Corner Store", 120), ("Fresh Mart", 90)]
    refill_rows = [t for t in data["recentTransactions"] if t["type"] == "refill"]
    assert sorted(t["amount"] for t in refill_rows) == [0, 60]
    assert data["monthlySpending"][-1]["label"] == "January 2020"


def test_expenses_timeframe_window(api, spending):
    data = api.get("/api/expenses", params={"timeframe": "week"}, headers=CONSUMER_HEADERS).json()
    assert data["totalSpent"] == 120 + 60
    assert all(t["id"] != "o2" for t in data["recentTransactions"])


def test_expenses_unknown_timeframe(api):
    resp = api.get("/api/expenses", params={"timeframe": "decade"}, headers=CONSUMER_HEADERS)
    assert resp.status_code == 400


def test_expense_pdf_export(api, spending):
    resp = api.get("/api/expenses/export_pdf", params={"timeframe": "month"}, headers=CONSUMER_HEADERS)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert "expenses_month.pdf" in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")


# === Notifications ===
@pytest.fixture
def inbox(backend):
    backend.notifications.extend([
        {"_id": "n1", "userId": "u1", "title": "Order confirmed", "message": "Fresh Mart confirmed your order",
         "isRead": False, "createdAt": "2026-10-01T09:00:00Z"},
        {"_id": "n2", "userId": "u1", "title": "Refill delivered", "message": "Milk is on the shelf",
         "isRead": True, "createdAt": "2026-10-02T09:00:00Z"},
        {"_id": "n3", "userId": "u2", "title": "Not yours", "message": "", "isRead": False},
    ])
    return backend


def test_notifications_list_and_unread(api, inbox):
    data = api.get("/api/notifications", headers=CONSUMER_HEADERS).json()
    assert [n["id"] for n in data["notifications"]] == ["n1", "n2"]
    assert data["unreadCount"] == 1
    unread = api.get("/api/notifications", params={"unread_only": True}, headers=CONSUMER_HEADERS).json()
    assert [n["id"] for n in unread["notifications"]] == ["n1"]


def test_mark_read_and_delete(api, inbox):
    api.get("/api/notifications", headers=CONSUMER_HEADERS)
    resp = api.put("/api/notifications/n1/read", headers=CONSUMER_HEADERS)
    assert resp.json() == {"status": "success", "unreadCount": 0}
    assert inbox.notifications[0]["isRead"] is True

    resp = api.delete("/api/notifications/n2", headers=CONSUMER_HEADERS)
    assert resp.status_code == 200
    cached = api.get("/api/notifications", params={"refresh": False}, headers=CONSUMER_HEADERS).json()
    assert [n["id"] for n in cached["notifications"]] == ["n1"]


def test_watch_starts_poller(api, inbox):
    resp = api.post("/api/notifications/watch", headers=CONSUMER_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["watching"] is True


def test_unwatch_stops_polling(api, inbox):
    api.post("/api/notifications/watch", headers=CONSUMER_HEADERS)
    resp = api.delete("/api/notifications/watch", headers=CONSUMER_HEADERS)
    assert resp.json() == {"watching": False, "stopped": True}
    resp = api.delete("/api/notifications/watch", headers=CONSUMER_HEADERS)
    assert resp.json()["stopped"] is False


def test_watch_after_relogin_uses_new_token(api, inbox):
    api.post("/api/notifications/watch", headers=CONSUMER_HEADERS)
    relogged = {**CONSUMER_HEADERS, "Authorization": "Bearer token-u1-renewed"}
    assert api.post("/api/notifications/watch", headers=relogged).json()["watching"] is True
    poller = FEEDS._pollers["u1"]
    assert poller.token == "token-u1-renewed"
    assert poller.running


def test_notifications_need_session(api):
    assert api.get("/api/notifications").status_code == 401


# === Account ===
def test_login_returns_session_headers(api):
    resp = api.post("/api/auth/login", json={"email": "asha@example.com", "password": "pw"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["token"] == "token-u1"
    assert data["session"]["X-User-Id"] == "u1"
    assert data["session"]["X-User-Role"] == "consumer"
    assert data["session"]["X-User-Name"] == "Asha"


def test_login_failure_passes_through(api):
    resp = api.post("/api/auth/login", json={"email": "who@example.com", "password": "pw"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid credentials"}


def test_register_forwards_to_store(api, backend):
    resp = api.post("/api/auth/register", json={
        "name": " Dev ", "email": "dev@example.com", "password": "secret1", "role": "shopkeeper",
    })
    assert resp.status_code == 200, resp.text
    assert resp.json()["name"] == "Dev"
    body = backend.calls("POST", "/auth/register")[0][2]
    assert body["role"] == "shopkeeper"
    assert api.post("/api/auth/register", json={"name": "X", "email": "bad", "password": "secret1"}).status_code == 422


def test_push_token(api, backend):
    resp = api.post("/api/push-token", headers=CONSUMER_HEADERS, json={"token": "tok"})
    assert resp.json() == {"status": "success"}
    assert ("POST", "/users/fcm-token", {"userId": "u1", "token": "tok"}) in backend.requests

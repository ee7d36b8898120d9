import pytest

from grocer.tests.fake_backend import CONSUMER_HEADERS, SHOP_HEADERS

ADDRESS = {"flat": "4B", "area": "Indiranagar", "city": "Bengaluru", "pincode": "560038",
           "coordinates": [77.64, 12.97]}


@pytest.fixture
def filled_cart(api):
    api.post("/api/cart", headers=CONSUMER_HEADERS, json={"product_id": "p1", "quantity": 2})
    return api.post("/api/cart", headers=CONSUMER_HEADERS, json={"product_id": "p3"}).json()


def _checkout(api):
    return api.post("/api/cart/checkout", headers=CONSUMER_HEADERS)


# === Cart ===
def test_cart_add_and_merge(api, filled_cart):
    assert filled_cart["count"] == 3
    assert filled_cart["total"] == 2 * 30 + 60
    cart = api.post("/api/cart", headers=CONSUMER_HEADERS, json={"product_id": "p1"}).json()
    assert [(l["id"], l["quantity"]) for l in cart["items"]] == [("p1", 3), ("p3", 1)]


def test_cart_rejects_unknown_and_out_of_stock(api):
    assert api.post("/api/cart", headers=CONSUMER_HEADERS, json={"product_id": "zzz"}).status_code == 404
    assert api.post("/api/cart", headers=CONSUMER_HEADERS, json={"product_id": "p2"}).status_code == 400
    assert api.post("/api/cart", headers=CONSUMER_HEADERS, json={"product_id": "p1", "quantity": 0}).status_code == 422


def test_cart_quantity_and_removal(api, filled_cart):
    cart = api.put("/api/cart/p3", headers=CONSUMER_HEADERS, json={"quantity": 5}).json()
    assert cart["total"] == 60 + 300
    cart = api.put("/api/cart/p1", headers=CONSUMER_HEADERS, json={"quantity": 0}).json()
    assert [l["id"] for l in cart["items"]] == ["p3"]
    assert api.put("/api/cart/p9", headers=CONSUMER_HEADERS, json={"quantity": 1}).status_code == 404
    cart = api.delete("/api/cart/p3", headers=CONSUMER_HEADERS).json()
    assert cart["items"] == []


def test_cart_is_per_user(api, filled_cart):
    other = {**CONSUMER_HEADERS, "X-User-Id": "u2"}
    assert api.get("/api/cart", headers=other).json()["items"] == []
    api.delete("/api/cart", headers=CONSUMER_HEADERS)
    assert api.get("/api/cart", headers=CONSUMER_HEADERS).json()["count"] == 0


# === Address ===
def test_address_save_and_clear(api):
    resp = api.put("/api/address", headers=CONSUMER_HEADERS, json=ADDRESS)
    assert resp.status_code == 200, resp.text
    saved = api.get("/api/address", headers=CONSUMER_HEADERS).json()["address"]
    assert saved["formattedAddress"] == "Indiranagar, Bengaluru - 560038"
    assert saved["coordinates"] == [77.64, 12.97]
    api.delete("/api/address", headers=CONSUMER_HEADERS)
    assert api.get("/api/address", headers=CONSUMER_HEADERS).json()["address"] is None


def test_address_requires_city_and_pincode(api):
    assert api.put("/api/address", headers=CONSUMER_HEADERS, json={"area": "X", "city": "", "pincode": "1"}).status_code == 422
    assert api.put("/api/address", headers=CONSUMER_HEADERS,
                   json={**ADDRESS, "coordinates": [10, 100]}).status_code == 422


# === Checkout ===
def test_checkout_needs_address_before_any_request(api, backend, filled_cart):
    resp = _checkout(api)
    assert resp.status_code == 400
    assert "delivery address" in resp.json()["detail"]
    assert not backend.calls("POST", "/orders")


def test_checkout_rejects_incomplete_address(api, backend, filled_cart):
    api.put("/api/address", headers=CONSUMER_HEADERS, json={"city": "Bengaluru", "pincode": "560038"})
    resp = _checkout(api)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please provide complete delivery address (area, city, pincode)"
    assert not backend.calls("POST", "/orders")


def test_checkout_empty_cart(api):
    api.put("/api/address", headers=CONSUMER_HEADERS, json=ADDRESS)
    assert _checkout(api).json()["detail"] == "Cart is empty"


def test_checkout_splits_per_shop(api, backend, filled_cart):
    api.put("/api/address", headers=CONSUMER_HEADERS, json=ADDRESS)
    resp = _checkout(api)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["count"] == 2
    assert [o["shopId"] for o in data["orders"]] == ["s1", "s2"]
    assert [o["totalAmount"] for o in data["orders"]] == [60, 60]

    first = backend.orders[0]
    assert first["status"] == "PENDING"
    assert first["customerId"] == "u1"
    assert first["items"] == [{"productId": "p1", "quantity": 2, "price": 30}]
    assert first["deliveryAddress"]["area"] == "Indiranagar"
    assert first["customerContact"] == {"name": "Asha", "email": "asha@example.com", "phone": "9845000000"}
    assert api.get("/api/cart", headers=CONSUMER_HEADERS).json()["items"] == []


def test_checkout_failure_keeps_unplaced_lines(api, backend, filled_cart):
    api.put("/api/address", headers=CONSUMER_HEADERS, json=ADDRESS)
    backend.fail_order_for_shop = "s2"
    resp = _checkout(api)
    assert resp.status_code == 502
    assert resp.json() == {"error": "Shop is not accepting orders"}
    assert len(backend.orders) == 1
    remaining = api.get("/api/cart", headers=CONSUMER_HEADERS).json()["items"]
    assert [l["id"] for l in remaining] == ["p3"]


# === History and re-order ===
def test_history_and_reorder(api, backend, filled_cart):
    api.put("/api/address", headers=CONSUMER_HEADERS, json=ADDRESS)
    _checkout(api)
    history = api.get("/api/orders/history", headers=CONSUMER_HEADERS).json()
    assert history["count"] == 2
    assert api.get("/api/orders/history", params={"status": "SHIPPED"}, headers=CONSUMER_HEADERS).json()["count"] == 0
    assert api.get("/api/orders/history", params={"status": "LOST"}, headers=CONSUMER_HEADERS).status_code == 400

    order_id = backend.orders[0]["_id"]
    resp = api.post(f"/api/orders/{order_id}/reorder", headers=CONSUMER_HEADERS)
    data = resp.json()
    assert data["added"] == ["p1"]
    assert data["skipped"] == []
    assert [(l["id"], l["quantity"]) for l in data["items"]] == [("p1", 2)]
    assert api.post("/api/orders/nope/reorder", headers=CONSUMER_HEADERS).status_code == 404


# === Shop fulfilment ===
def test_shop_moves_order_through_lifecycle(api, backend, filled_cart):
    api.put("/api/address", headers=CONSUMER_HEADERS, json=ADDRESS)
    _checkout(api)
    orders = api.get("/api/shop/orders", headers=SHOP_HEADERS).json()["orders"]
    assert len(orders) == 1
    assert orders[0]["shopId"] == "s1"
    assert orders[0]["actions"] == ["CONFIRMED", "CANCELLED"]
    order_id = orders[0]["id"]

    url = f"/api/shop/orders/{order_id}/status"
    assert api.put(url, headers=SHOP_HEADERS, json={"status": "SHIPPED"}).status_code == 400
    resp = api.put(url, headers=SHOP_HEADERS, json={"status": "CONFIRMED"})
    assert resp.json()["actions"] == ["SHIPPED"]
    assert api.put(url, headers=SHOP_HEADERS, json={"status": "CANCELLED"}).status_code == 400
    assert backend.orders[0]["status"] == "CONFIRMED"


def test_shop_cannot_touch_other_shops_orders(api, backend, filled_cart):
    api.put("/api/address", headers=CONSUMER_HEADERS, json=ADDRESS)
    _checkout(api)
    other_order = backend.orders[1]["_id"]
    resp = api.put(f"/api/shop/orders/{other_order}/status", headers=SHOP_HEADERS, json={"status": "CONFIRMED"})
    assert resp.status_code == 404

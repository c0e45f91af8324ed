from conftest import login


def _cart(client, headers):
    return client.get("/api/cart", headers=headers).get_json()["data"]


def test_add_items_and_price_cart(client, cashier_headers):
    client.post("/api/cart/items", json={"product_id": 1}, headers=cashier_headers)
    r = client.post("/api/cart/items", json={"product_id": 1}, headers=cashier_headers)
    cart = r.get_json()["data"]
    assert cart["items"][0]["quantity"] == 2
    assert cart["totals"] == {"subtotal": 1400.0, "discount_amount": 0.0, "tax_rate": 0.08, "tax": 112.0,
                              "total": 1512.0}


def test_quantity_updates_clamp_and_remove(client, cashier_headers, state):
    state.catalog.update(11, stock=3)
    client.post("/api/cart/items", json={"product_id": 11}, headers=cashier_headers)
    r = client.patch("/api/cart/items/11", json={"quantity": 10}, headers=cashier_headers)
    assert r.get_json()["data"]["items"][0]["quantity"] == 3
    r = client.patch("/api/cart/items/11", json={"quantity": 0}, headers=cashier_headers)
    assert r.get_json()["data"]["items"] == []
    assert client.post("/api/cart/items", json={"product_id": 999}, headers=cashier_headers).status_code == 404


def test_each_operator_has_own_cart(client, cashier_headers, admin_headers):
    client.post("/api/cart/items", json={"product_id": 1}, headers=cashier_headers)
    assert _cart(client, admin_headers)["items"] == []


def test_manual_discount_flow(client, cashier_headers):
    client.post("/api/cart/items", json={"product_id": 13}, headers=cashier_headers)
    bad = client.post("/api/cart/discount", json={"type": "percentage", "value": 0}, headers=cashier_headers)
    assert bad.status_code == 422
    assert _cart(client, cashier_headers)["discount_state"] == "no_discount"

    r = client.post("/api/cart/discount", json={"type": "fixed", "value": 300}, headers=cashier_headers)
    assert r.get_json()["data"]["discount_state"] == "manual_pending"
    r = client.post("/api/cart/discount/confirm", headers=cashier_headers)
    cart = r.get_json()["data"]
    assert cart["discount_state"] == "applied"
    assert cart["totals"]["discount_amount"] == 300.0

    r = client.delete("/api/cart/discount", headers=cashier_headers)
    assert r.get_json()["data"]["totals"]["discount_amount"] == 0.0


def test_loyalty_reward_for_eligible_customer(client, cashier_headers):
    client.post("/api/cart/items", json={"product_id": 9}, headers=cashier_headers)
    client.put("/api/cart/customer", json={"customer_id": 3}, headers=cashier_headers)
    r = client.post("/api/cart/loyalty-reward", headers=cashier_headers)
    cart = r.get_json()["data"]
    assert cart["discount"]["source"] == "loyalty"
    assert cart["totals"]["discount_amount"] == 75.0

    # a second request changes nothing
    r = client.post("/api/cart/loyalty-reward", headers=cashier_headers)
    assert r.get_json()["message"] == "loyalty reward not available"
    assert r.get_json()["data"]["totals"]["discount_amount"] == 75.0


def test_loyalty_reward_not_for_walk_in(client, cashier_headers):
    client.post("/api/cart/items", json={"product_id": 9}, headers=cashier_headers)
    r = client.post("/api/cart/loyalty-reward", headers=cashier_headers)
    assert r.get_json()["data"]["discount"] is None


def test_hold_and_recall(client, cashier_headers):
    assert client.post("/api/cart/hold", headers=cashier_headers).get_json()["data"]["held"] is None

    client.post("/api/cart/items", json={"product_id": 1}, headers=cashier_headers)
    client.put("/api/cart/customer", json={"customer_id": 2}, headers=cashier_headers)
    r = client.post("/api/cart/hold", headers=cashier_headers)
    assert r.status_code == 201
    first = r.get_json()["data"]["held"]["id"]
    assert r.get_json()["data"]["cart"]["items"] == []

    client.post("/api/cart/items", json={"product_id": 6}, headers=cashier_headers)
    r = client.post(f"/api/cart/held/{first}/recall", headers=cashier_headers)
    data = r.get_json()["data"]
    assert data["cart"]["customer_id"] == 2
    assert [i["product_id"] for i in data["cart"]["items"]] == [1]
    # the Green Tea cart was parked, the recalled one is gone
    held = client.get("/api/cart/held", headers=cashier_headers).get_json()["data"]["items"]
    assert [h["id"] for h in held] == [data["held"]["id"]]
    assert held[0]["items"][0]["product_id"] == 6

    assert client.delete(f"/api/cart/held/{held[0]['id']}", headers=cashier_headers).status_code == 200
    assert client.post(f"/api/cart/held/{first}/recall", headers=cashier_headers).status_code == 404


def test_checkout_cash_flow(client, cashier_headers, state):
    client.post("/api/cart/items", json={"product_id": 1}, headers=cashier_headers)
    client.post("/api/cart/items", json={"product_id": 1}, headers=cashier_headers)

    r = client.post("/api/cart/checkout", json={"payment_method": "cash", "amount_tendered": 1000},
                    headers=cashier_headers)
    assert r.status_code == 422
    assert state.catalog.get_stock(1) == 100

    r = client.post("/api/cart/checkout", json={"payment_method": "cash", "amount_tendered": 2000},
                    headers=cashier_headers)
    assert r.status_code == 201
    data = r.get_json()["data"]
    assert data["order"]["money"]["total"] == 1512.0
    assert data["order"]["payment"]["change_due"] == 488.0
    assert "Rs 1512.00" in data["receipt"]
    assert "Change Due" in data["receipt"]
    assert state.catalog.get_stock(1) == 98
    assert _cart(client, cashier_headers)["items"] == []


def test_checkout_empty_cart(client, cashier_headers):
    r = client.post("/api/cart/checkout", json={"payment_method": "card"}, headers=cashier_headers)
    assert r.status_code == 422


def test_receipts(client, cashier_headers):
    client.post("/api/cart/items", json={"product_id": 13}, headers=cashier_headers)
    client.put("/api/cart/customer", json={"customer_id": 2}, headers=cashier_headers)
    order_id = client.post("/api/cart/checkout", json={}, headers=cashier_headers).get_json()["data"]["order"]["id"]

    admin = login(client, "admin@pos.com")
    r = client.get("/api/receipts?customer_id=2", headers=admin)
    assert [o["id"] for o in r.get_json()["data"]["items"]] == [order_id]
    assert client.get("/api/receipts?customer_id=3", headers=admin).get_json()["data"]["total"] == 0
    assert client.get("/api/receipts?start=not-a-date", headers=admin).status_code == 422

    r = client.get(f"/api/receipts/{order_id}/text", headers=admin)
    assert r.mimetype == "text/plain"
    assert "Turkey Club" in r.get_data(as_text=True)

    profile = client.get("/api/customers/2", headers=admin).get_json()["data"]
    assert profile["orders"][0]["id"] == order_id
    assert profile["customer"]["total_spent"] == 15000.0 + 2484.0


def test_recall_caps_lines_at_current_stock(client, cashier_headers, state):
    for _ in range(3):
        client.post("/api/cart/items", json={"product_id": 13}, headers=cashier_headers)
    client.post("/api/cart/items", json={"product_id": 5}, headers=cashier_headers)
    client.post("/api/cart/items", json={"product_id": 6}, headers=cashier_headers)
    held_id = client.post("/api/cart/hold", headers=cashier_headers).get_json()["data"]["held"]["id"]

    state.catalog.update(13, stock=1)
    state.catalog.update(5, stock=0)
    state.catalog.delete(6)

    cart = client.post(f"/api/cart/held/{held_id}/recall", headers=cashier_headers).get_json()["data"]["cart"]
    assert [(i["product_id"], i["quantity"]) for i in cart["items"]] == [(13, 1)]
    r = client.post("/api/cart/checkout", json={"payment_method": "card"}, headers=cashier_headers)
    assert r.status_code == 201

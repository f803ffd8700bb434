import pytest

from conftest import API


@pytest.fixture
def catalog(client, hotel_headers):
    room = client.post(f"{API}/catalog/room-types", json={"name": "Deluxe", "base_price": 2000},
                       headers=hotel_headers).json()
    tea = client.post(f"{API}/catalog/food-items", json={"name": "Tea", "price": 20, "category": "beverages"},
                      headers=hotel_headers).json()
    laundry = client.post(f"{API}/catalog/services", json={"name": "Laundry", "price": 150},
                          headers=hotel_headers).json()
    return {"room": room, "tea": tea, "laundry": laundry}


def add(client, headers, selection, quantity=1):
    response = client.post(f"{API}/billing/cart/items", json={"selection": selection, "quantity": quantity},
                           headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def fill_cart(client, headers, catalog):
    add(client, headers, {"category": "room", "room_type_id": catalog["room"]["id"]})
    return add(client, headers, {"category": "food", "food_item_id": catalog["tea"]["id"]}, quantity=3)


def test_cart_totals(client, hotel_headers, catalog):
    cart = fill_cart(client, hotel_headers, catalog)

    assert cart["subtotal"] == 2060.0
    assert cart["tax_amount"] == 370.8
    assert cart["total"] == 2430.8
    assert [item["name"] for item in cart["items"]] == ["Deluxe (1 night)", "Tea"]


def test_cart_quantity_edits(client, hotel_headers, catalog):
    cart = fill_cart(client, hotel_headers, catalog)
    tea_line = cart["items"][1]["id"]

    ignored = client.patch(f"{API}/billing/cart/items/{tea_line}", json={"quantity": 0}, headers=hotel_headers)
    assert ignored.json()["subtotal"] == 2060.0

    updated = client.patch(f"{API}/billing/cart/items/{tea_line}", json={"quantity": 5}, headers=hotel_headers)
    assert updated.json()["subtotal"] == 2100.0

    removed = client.delete(f"{API}/billing/cart/items/{tea_line}", headers=hotel_headers)
    assert [item["category"] for item in removed.json()["items"]] == ["room"]


def test_unknown_catalog_selection_is_not_found(client, hotel_headers, catalog):
    response = client.post(f"{API}/billing/cart/items",
                           json={"selection": {"category": "service", "service_id": 999}}, headers=hotel_headers)

    assert response.status_code == 404


def test_unavailable_item_cannot_be_billed(client, hotel_headers, catalog):
    client.post(f"{API}/catalog/services/{catalog['laundry']['id']}/toggle", headers=hotel_headers)

    response = client.post(f"{API}/billing/cart/items",
                           json={"selection": {"category": "service", "service_id": catalog["laundry"]["id"]}},
                           headers=hotel_headers)

    assert response.status_code == 400


def test_checkout_requires_customer_name_and_keeps_cart(client, hotel_headers, catalog):
    fill_cart(client, hotel_headers, catalog)

    response = client.post(f"{API}/billing/cart/checkout", json={"customer_name": "  "}, headers=hotel_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "missing customer name"
    assert len(client.get(f"{API}/billing/cart", headers=hotel_headers).json()["items"]) == 2


def test_checkout_empty_cart(client, hotel_headers):
    response = client.post(f"{API}/billing/cart/checkout", json={"customer_name": "Asha"}, headers=hotel_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "empty cart"


def test_checkout_persists_bill_and_clears_cart(client, hotel_headers, catalog):
    fill_cart(client, hotel_headers, catalog)

    response = client.post(f"{API}/billing/cart/checkout",
                           json={"customer_name": "Asha", "customer_phone": "9876543210"}, headers=hotel_headers)

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["items_recorded"] is True
    assert body["bill"]["total"] == 2430.8
    assert body["bill"]["bill_number"].startswith("BILL-")
    assert client.get(f"{API}/billing/cart", headers=hotel_headers).json()["items"] == []

    detail = client.get(f"{API}/billing/bills/{body['bill']['id']}", headers=hotel_headers).json()
    assert [item["name"] for item in detail["line_items"]] == ["Deluxe (1 night)", "Tea"]
    assert detail["line_items"][1]["subtotal"] == 60.0
    assert len(detail["items"]) == 2
    assert detail["hotel"]["name"] == "Seaside Inn"


def test_stateless_bill_submission(client, hotel_headers, catalog):
    response = client.post(f"{API}/billing/bills", json={
        "customer_name": "Walk-in Guest",
        "items": [
            {"selection": {"category": "room", "room_type_id": catalog["room"]["id"], "nights": 2}},
            {"selection": {"category": "service", "service_id": catalog["laundry"]["id"]}, "quantity": 2},
        ]
    }, headers=hotel_headers)

    assert response.status_code == 201, response.text
    assert response.json()["bill"]["subtotal"] == 4300.0


def test_history_search_and_delete(client, hotel_headers, catalog):
    for name in ["Asha", "Bilal"]:
        fill_cart(client, hotel_headers, catalog)
        client.post(f"{API}/billing/cart/checkout", json={"customer_name": name}, headers=hotel_headers)

    history = client.get(f"{API}/billing/bills", headers=hotel_headers).json()
    assert history["total"] == 2
    assert [bill["customer_name"] for bill in history["bills"]] == ["Bilal", "Asha"]

    found = client.get(f"{API}/billing/bills?search=ash", headers=hotel_headers).json()
    assert [bill["customer_name"] for bill in found["bills"]] == ["Asha"]

    bill_id = found["bills"][0]["id"]
    assert client.delete(f"{API}/billing/bills/{bill_id}", headers=hotel_headers).status_code == 204
    assert client.get(f"{API}/billing/bills/{bill_id}", headers=hotel_headers).status_code == 404


def test_billing_summary_and_dashboard(client, hotel_headers, catalog):
    fill_cart(client, hotel_headers, catalog)
    client.post(f"{API}/billing/cart/checkout", json={"customer_name": "Asha"}, headers=hotel_headers)

    summary = client.get(f"{API}/billing/summary", headers=hotel_headers).json()
    assert summary["total_revenue"] == 2430.8
    assert summary["total_bills"] == 1
    assert summary["today_bills"] == 1
    assert summary["revenue_growth"] == 0
    assert summary["category_breakdown"] == {"room": 2000.0, "food": 60.0, "service": 0.0}
    assert summary["recent_bills"][0]["customer_name"] == "Asha"

    stats = client.get(f"{API}/dashboard/stats", headers=hotel_headers).json()
    assert stats["total_revenue"] == 2430.8
    assert stats["bills_today"] == 1
    assert stats["active_staff"] == 0


def test_sign_out_drops_open_cart(client, hotel_headers, catalog, app):
    fill_cart(client, hotel_headers, catalog)
    user_id = client.get(f"{API}/auth/me", headers=hotel_headers).json()["id"]
    assert len(app.state.carts.get(user_id)) == 2

    client.post(f"{API}/auth/signout", headers=hotel_headers)

    assert len(app.state.carts.get(user_id)) == 0

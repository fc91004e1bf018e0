from conftest import room_stock


def checkout(client, headers, room_number, consumption):
    return client.post(
        f"/api/rooms/{room_number}/checkout",
        json={"consumption": {str(pid): qty for pid, qty in consumption.items()}},
        headers=headers,
    )


def test_list_rooms_fills_full_stock(client, frontdesk_headers, product_ids):
    response = client.get("/api/rooms", headers=frontdesk_headers)

    assert response.status_code == 200
    rooms = response.json()
    assert [r["number"] for r in rooms] == ["101", "102", "103", "201", "202", "203"]
    assert rooms[0]["stock"][str(product_ids["Wine"])] == 2
    assert len(rooms[0]["stock"]) == 8


def test_list_rooms_by_building(client, frontdesk_headers):
    response = client.get("/api/rooms", params={"building": 2}, headers=frontdesk_headers)

    assert [r["number"] for r in response.json()] == ["201", "202", "203"]


def test_rooms_require_login(client, seeded):
    response = client.get("/api/rooms")

    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_FAILED"


def test_checkout_returns_receipt_and_updates_stock(client, frontdesk_headers, product_ids):
    water, nuts = product_ids["Water"], product_ids["Nuts"]

    response = checkout(client, frontdesk_headers, "101", {water: 2, nuts: 1})

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["persisted"] is True
    receipt = body["receipt"]
    assert receipt["room_number"] == "101"
    assert receipt["operator"] == "frontdesk"
    assert receipt["total_bill"] == "9.00"
    assert [(i["product_name"], i["quantity"], i["line_total"]) for i in receipt["consumed_items"]] == [
        ("Nuts", 1, "4.00"),
        ("Water", 2, "5.00"),
    ]
    assert [(i["product_name"], i["quantity"]) for i in receipt["replenishment_items"]] == [
        ("Nuts", 1),
        ("Water", 2),
    ]
    assert body["room"]["stock"][str(water)] == 2
    assert room_stock("101")[water] == 2


def test_checkout_over_consumption_is_rejected(client, frontdesk_headers, product_ids):
    wine = product_ids["Wine"]

    response = checkout(client, frontdesk_headers, "101", {wine: 3})

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "STOCK_UNDERFLOW"
    assert body["product_id"] == wine
    assert body["available"] == 2
    assert body["requested"] == 3
    assert room_stock("101")[wine] == 2


def test_checkout_unknown_product_and_room(client, frontdesk_headers, product_ids):
    response = checkout(client, frontdesk_headers, "101", {9999: 1})
    assert response.status_code == 404
    assert response.json()["code"] == "PRODUCT_NOT_FOUND"

    response = checkout(client, frontdesk_headers, "999", {product_ids["Water"]: 1})
    assert response.status_code == 404
    assert response.json()["code"] == "ROOM_NOT_FOUND"


def test_checkout_negative_quantity_is_rejected(client, frontdesk_headers, product_ids):
    response = checkout(client, frontdesk_headers, "101", {product_ids["Water"]: -1})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_FAILED"


def test_preview_does_not_touch_stock(client, frontdesk_headers, product_ids):
    water = product_ids["Water"]

    response = client.post(
        "/api/rooms/101/receipt-preview",
        json={"consumption": {str(water): 1}},
        headers=frontdesk_headers,
    )

    assert response.status_code == 200
    assert response.json()["total_bill"] == "2.50"
    assert room_stock("101")[water] == 4
    receipts = client.get("/api/receipts", headers=frontdesk_headers).json()
    assert receipts == []


def test_empty_receipt_not_persisted_by_default(client, frontdesk_headers):
    response = checkout(client, frontdesk_headers, "101", {})

    body = response.json()
    assert response.status_code == 200
    assert body["persisted"] is False
    assert body["receipt"] is None
    assert body["draft"]["consumed_items"] == []
    assert body["draft"]["replenishment_items"] == []


def test_empty_receipt_persisted_when_configured(client, admin_headers):
    client.put(
        "/api/system-configs/persist_empty_receipts",
        json={"value": "true"},
        headers=admin_headers,
    )

    response = checkout(client, admin_headers, "101", {})

    body = response.json()
    assert body["persisted"] is True
    assert body["receipt"]["total_bill"] == "0.00"


def test_deficit_without_consumption_creates_replenishment_receipt(client, frontdesk_headers, product_ids):
    water = product_ids["Water"]
    client.put("/api/rooms/101/stock", json={"stock": {str(water): 1}}, headers=frontdesk_headers)

    response = checkout(client, frontdesk_headers, "101", {})

    body = response.json()
    assert body["persisted"] is True
    assert body["receipt"]["consumed_items"] == []
    assert [(i["product_id"], i["quantity"]) for i in body["receipt"]["replenishment_items"]] == [(water, 3)]


def test_manual_stock_update(client, frontdesk_headers, product_ids):
    water, beer = product_ids["Water"], product_ids["Beer"]

    response = client.put(
        "/api/rooms/102/stock",
        json={"stock": {str(water): 1, str(beer): 6}},
        headers=frontdesk_headers,
    )

    assert response.status_code == 200
    stock = room_stock("102")
    assert stock[water] == 1
    assert stock[beer] == 6
    assert stock[product_ids["Wine"]] == 2


def test_manual_stock_update_rejects_bad_input(client, frontdesk_headers, product_ids):
    response = client.put(
        "/api/rooms/102/stock", json={"stock": {str(product_ids["Water"]): -2}}, headers=frontdesk_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_FAILED"

    response = client.put("/api/rooms/102/stock", json={"stock": {"9999": 1}}, headers=frontdesk_headers)
    assert response.status_code == 404
    assert room_stock("102")[product_ids["Water"]] == 4


def test_create_room_with_standard_stock(client, manager_headers, product_ids):
    response = client.post("/api/rooms", json={"number": " 301 ", "building": 3}, headers=manager_headers)

    assert response.status_code == 200, response.text
    room = response.json()
    assert room["number"] == "301"
    assert room["stock"][str(product_ids["Nuts"])] == 3
    assert room_stock("301")[product_ids["Wine"]] == 2


def test_create_duplicate_room(client, manager_headers):
    response = client.post("/api/rooms", json={"number": "101", "building": 1}, headers=manager_headers)

    assert response.status_code == 400


def test_front_desk_cannot_manage_rooms(client, frontdesk_headers):
    response = client.post("/api/rooms", json={"number": "301", "building": 3}, headers=frontdesk_headers)

    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"


def test_renumber_room_keeps_stock(client, manager_headers, frontdesk_headers, product_ids):
    water = product_ids["Water"]
    checkout(client, frontdesk_headers, "101", {water: 3})

    response = client.put("/api/rooms/101", json={"number": "111", "building": 4}, headers=manager_headers)

    assert response.status_code == 200
    assert response.json()["building"] == 4
    assert room_stock("111")[water] == 1
    assert client.get("/api/rooms/101", headers=manager_headers).status_code == 404

    response = client.put("/api/rooms/111", json={"number": "102"}, headers=manager_headers)
    assert response.status_code == 400


def test_delete_room_keeps_receipts(client, manager_headers, product_ids):
    checkout(client, manager_headers, "103", {product_ids["Beer"]: 1})

    response = client.delete("/api/rooms/103", headers=manager_headers)

    assert response.status_code == 200
    assert client.get("/api/rooms/103", headers=manager_headers).status_code == 404
    receipts = client.get("/api/receipts", headers=manager_headers).json()
    assert [r["room_number"] for r in receipts] == ["103"]


def test_delete_building(client, manager_headers):
    response = client.delete("/api/buildings/2", headers=manager_headers)

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 3
    rooms = client.get("/api/rooms", headers=manager_headers).json()
    assert [r["number"] for r in rooms] == ["101", "102", "103"]

    assert client.delete("/api/buildings/2", headers=manager_headers).status_code == 404


def test_quantities_above_limit_are_rejected(client, frontdesk_headers, product_ids):
    water = str(product_ids["Water"])

    stock = client.put("/api/rooms/102/stock", json={"stock": {water: 10**20}}, headers=frontdesk_headers)
    assert stock.status_code == 422

    response = checkout(client, frontdesk_headers, "102", {product_ids["Water"]: 10**20})
    assert response.status_code == 422

    preview = client.post(
        "/api/rooms/102/receipt-preview", json={"consumption": {water: 10000}}, headers=frontdesk_headers
    )
    assert preview.status_code == 422
    assert room_stock("102")[product_ids["Water"]] == 4

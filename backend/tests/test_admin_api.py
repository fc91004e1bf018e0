from conftest import login


def _role_id(client, headers, name):
    roles = client.get("/api/roles", headers=headers).json()
    return next(r["id"] for r in roles if r["name"] == name)


def test_create_user_hashes_passkey(client, admin_headers):
    role_id = _role_id(client, admin_headers, "Front Desk")

    response = client.post(
        "/api/users", json={"username": "night", "passkey": "0007", "role_id": role_id}, headers=admin_headers
    )

    assert response.status_code == 200
    assert "passkey" not in response.json()
    assert "passkey_hash" not in response.json()
    login(client, "night", "0007")


def test_create_user_validation(client, admin_headers):
    role_id = _role_id(client, admin_headers, "Front Desk")

    bad_passkey = client.post(
        "/api/users", json={"username": "night", "passkey": "12a4", "role_id": role_id}, headers=admin_headers
    )
    assert bad_passkey.status_code == 422

    duplicate = client.post(
        "/api/users", json={"username": "Admin", "passkey": "1111", "role_id": role_id}, headers=admin_headers
    )
    assert duplicate.status_code == 400

    unknown_role = client.post(
        "/api/users", json={"username": "night", "passkey": "1111", "role_id": 999}, headers=admin_headers
    )
    assert unknown_role.status_code == 400


def test_update_user_passkey(client, admin_headers):
    users = client.get("/api/users", headers=admin_headers).json()
    frontdesk = next(u for u in users if u["username"] == "frontdesk")

    response = client.put(f"/api/users/{frontdesk['id']}", json={"passkey": "9999"}, headers=admin_headers)

    assert response.status_code == 200
    login(client, "frontdesk", "9999")
    assert client.post("/login", json={"username": "frontdesk", "passkey": "1234"}).status_code == 401


def test_admin_cannot_delete_self(client, admin_headers):
    me = client.get("/me", headers=admin_headers).json()

    response = client.delete(f"/api/users/{me['id']}", headers=admin_headers)

    assert response.status_code == 400


def test_deleted_user_loses_session(client, admin_headers):
    headers = login(client, "frontdesk")
    users = client.get("/api/users", headers=admin_headers).json()
    frontdesk = next(u for u in users if u["username"] == "frontdesk")

    assert client.delete(f"/api/users/{frontdesk['id']}", headers=admin_headers).status_code == 200
    assert client.get("/me", headers=headers).status_code == 401


def test_non_admin_cannot_manage_users(client, manager_headers):
    assert client.get("/api/users", headers=manager_headers).status_code == 403
    assert client.get("/api/roles", headers=manager_headers).status_code == 403


def test_role_permissions_keep_order_and_dedupe(client, admin_headers):
    response = client.post(
        "/api/roles",
        json={"name": "Night Audit", "permissions": ["FrontDesk", "Rooms", "FrontDesk"]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    role = response.json()
    assert role["permissions"] == ["FrontDesk", "Rooms"]

    updated = client.put(
        f"/api/roles/{role['id']}", json={"permissions": ["Management", "Rooms"]}, headers=admin_headers
    ).json()
    assert updated["permissions"] == ["Management", "Rooms"]
    listed = next(r for r in client.get("/api/roles", headers=admin_headers).json() if r["id"] == role["id"])
    assert listed["permissions"] == ["Management", "Rooms"]


def test_reordered_permissions_change_default_view(client, admin_headers):
    role = client.post(
        "/api/roles", json={"name": "Supervisor", "permissions": ["Rooms"]}, headers=admin_headers
    ).json()
    client.post(
        "/api/users", json={"username": "sup", "passkey": "2468", "role_id": role["id"]}, headers=admin_headers
    )
    client.put(f"/api/roles/{role['id']}", json={"permissions": ["Management", "Rooms"]}, headers=admin_headers)

    response = client.post("/login", json={"username": "sup", "passkey": "2468"})

    assert response.status_code == 200
    assert response.json()["defaultView"] == "Management"


def test_role_name_unique_case_insensitive(client, admin_headers):
    response = client.post("/api/roles", json={"name": "admin", "permissions": []}, headers=admin_headers)

    assert response.status_code == 400


def test_role_in_use_cannot_be_deleted(client, admin_headers):
    role_id = _role_id(client, admin_headers, "Front Desk")
    assert client.delete(f"/api/roles/{role_id}", headers=admin_headers).status_code == 400

    spare = client.post("/api/roles", json={"name": "Spare", "permissions": ["Rooms"]}, headers=admin_headers).json()
    assert client.delete(f"/api/roles/{spare['id']}", headers=admin_headers).status_code == 200


def test_unknown_view_is_rejected(client, admin_headers):
    response = client.post("/api/roles", json={"name": "Odd", "permissions": ["Kitchen"]}, headers=admin_headers)

    assert response.status_code == 422


def test_system_config_defaults(client, admin_headers):
    response = client.get("/api/system-configs/persist_empty_receipts", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["id"] == 0
    assert response.json()["value"] == "false"

    client.put("/api/system-configs/currency_symbol", json={"value": "€"}, headers=admin_headers)
    configs = client.get("/api/system-configs", headers=admin_headers).json()
    assert [(c["key"], c["value"]) for c in configs] == [("currency_symbol", "€")]


def test_operation_logs_record_writes(client, admin_headers, product_ids):
    client.post(
        "/api/rooms/101/checkout",
        json={"consumption": {str(product_ids["Water"]): 1}},
        headers=admin_headers,
    )

    logs = client.get("/api/operation-logs", headers=admin_headers).json()

    checkout_log = next(log for log in logs if log["path"] == "/api/rooms/101/checkout")
    assert checkout_log["username"] == "admin"
    assert checkout_log["action"] == "生成收据"
    assert checkout_log["module"] == "房间管理"
    assert checkout_log["status_code"] == 200
    login_log = next(log for log in logs if log["path"] == "/login")
    assert login_log["request_data"] is None

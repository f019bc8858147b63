def test_admin_lists_users(client, auth_header, make_user):
    make_user(email="reader@example.com")
    _, admin_token = make_user(role="ADMIN", email="admin@example.com")

    response = client.get("/api/users", headers=auth_header(admin_token))

    assert response.status_code == 200
    users = response.get_json()["data"]["users"]
    assert {u["email"] for u in users} == {"reader@example.com", "admin@example.com"}
    assert all("passwordHash" not in u for u in users)


def test_list_users_forbidden_for_reader(client, auth_header, make_user):
    _, token = make_user(role="READER")

    response = client.get("/api/users", headers=auth_header(token))
    assert response.status_code == 403
    assert response.get_json()["error"] == "Insufficient permissions"


def test_list_users_requires_token(client):
    response = client.get("/api/users")
    assert response.status_code == 401

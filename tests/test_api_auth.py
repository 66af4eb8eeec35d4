from app.core.security import decode_access_token


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}


def test_security_headers(client):
    response = client.get("/health")
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_register_assigns_default_role(client):
    response = client.post(
        "/auth/register",
        json={
            "username": "newagent",
            "email": "newagent@example.com",
            "password": "Agent123!",
            "full_name": "New Agent",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User Registration Successful"
    assert body["data"]["username"] == "newagent"
    assert [r["name"] for r in body["data"]["roles"]] == ["CUSTOMER_SERVICE"]
    assert "hashed_password" not in body["data"]
    assert "password" not in body["data"]


def test_register_duplicate_username(client, cs_user):
    response = client.post(
        "/auth/register",
        json={"username": "cs_agent", "email": "other@example.com", "password": "x"},
    )
    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "message": "Username already exists",
        "error": "Username already exists",
    }


def test_register_missing_fields(client):
    response = client.post("/auth/register", json={"username": "nobody"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "email" in body["error"]
    assert "password" in body["error"]


def test_login_returns_permission_snapshot(client, noc_user):
    response = client.post("/auth/login", json={"username": "noc_agent", "password": "Secret123!"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["username"] == "noc_agent"

    claims = decode_access_token(data["token"])
    assert claims.user_id == noc_user.id
    assert claims.roles == ["AGENT_NOC"]
    assert sorted(claims.permissions) == ["tickets.read", "tickets.update"]


def test_login_wrong_password(client, noc_user):
    response = client.post("/auth/login", json={"username": "noc_agent", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


def test_login_unknown_user(client):
    response = client.post("/auth/login", json={"username": "ghost", "password": "x"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


def test_login_disabled_account(client, session, noc_user):
    noc_user.is_active = False
    session.add(noc_user)
    session.commit()
    response = client.post("/auth/login", json={"username": "noc_agent", "password": "Secret123!"})
    assert response.status_code == 401


def test_me(client, cs_user, auth_headers):
    response = client.get("/auth/me", headers=auth_headers(cs_user))
    assert response.status_code == 200
    assert response.json()["data"]["email"] == "cs_agent@example.com"


def test_me_without_token(client):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] == "No token provided"


def test_me_with_invalid_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    assert response.json()["success"] is False

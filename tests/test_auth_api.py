from datetime import datetime, timedelta, timezone

from finance_assistant.security import create_access_token, decode_access_token

from conftest import signup


def test_signup_returns_user_and_token(client):
    body = signup(client)

    assert body["message"] == "User created successfully"
    assert body["user"]["email"] == "alice@example.com"
    assert body["user"]["name"] == "Alice"
    assert body["token"]


def test_signup_rejects_duplicate_email(client):
    signup(client)

    resp = client.post(
        "/api/auth/signup",
        json={"email": "alice@example.com", "password": "another1", "name": "Alice Again"},
    )

    assert resp.status_code == 409
    assert resp.json() == {"error": "User already exists with this email"}


def test_signup_validates_input(client):
    short = client.post("/api/auth/signup", json={"email": "a@example.com", "password": "123", "name": "A"})
    bad_email = client.post("/api/auth/signup", json={"email": "nope", "password": "secret123", "name": "A"})
    missing = client.post("/api/auth/signup", json={"email": "a@example.com", "password": "secret123"})

    assert short.status_code == 400
    assert bad_email.status_code == 400
    assert missing.status_code == 400
    assert missing.json() == {"error": "Name is required"}


def test_login_with_valid_credentials(client):
    signup(client)

    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})

    assert resp.status_code == 200
    assert resp.json()["user"]["name"] == "Alice"
    assert resp.json()["token"]


def test_login_with_wrong_password(client):
    signup(client)

    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})

    assert resp.status_code == 401
    assert "error" in resp.json()


def test_protected_route_requires_token(client):
    assert client.get("/api/expenses").status_code == 401
    assert client.get("/api/expenses", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_expired_token_is_rejected(client, settings):
    body = signup(client)
    old = datetime.now(timezone.utc) - timedelta(days=settings.jwt_expires_days + 1)
    token = create_access_token(settings, body["user"]["id"], body["user"]["email"], now=old)

    resp = client.get("/api/expenses", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Token expired"}


def test_token_round_trip_carries_user_id(settings):
    token = create_access_token(settings, 42, "x@example.com")

    payload = decode_access_token(settings, token)

    assert payload["userId"] == 42
    assert payload["email"] == "x@example.com"

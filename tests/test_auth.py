from conftest import auth_headers, register
from mindful.core.security import create_refresh_token


def test_register_returns_tokens_and_zeroed_streak(client):
    tokens = register(client)

    assert tokens["token_type"] == "bearer"
    assert tokens["user"]["username"] == "alice"
    assert tokens["user"]["subscription_tier"] == "basic"
    assert tokens["user"]["current_streak"] == 0
    assert tokens["user"]["longest_streak"] == 0
    assert tokens["user"]["last_entry_date"] is None


def test_duplicate_email_or_username_conflicts(client):
    register(client)
    response = client.post(
        "/auth/register",
        json={
            "username": "alice",
            "email": "other@example.com",
            "password": "password123",
            "first_name": "A",
            "last_name": "B",
        },
    )
    assert response.status_code == 409


def test_weak_password_is_rejected(client):
    response = client.post(
        "/auth/register",
        json={
            "username": "weak",
            "email": "weak@example.com",
            "password": "onlyletters",
            "first_name": "W",
            "last_name": "K",
        },
    )
    assert response.status_code == 422


def test_login_with_valid_and_invalid_password(client):
    register(client)

    ok = client.post("/auth/login", json={"email": "alice@example.com", "password": "password123"})
    bad = client.post("/auth/login", json={"email": "alice@example.com", "password": "wrong-pass1"})

    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "alice@example.com"
    assert bad.status_code == 401


def test_refresh_issues_new_tokens(client):
    tokens = register(client)

    response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == tokens["user"]["id"]


def test_access_token_cannot_be_used_to_refresh(client):
    tokens = register(client)

    response = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401


def test_refresh_token_cannot_be_used_as_access_token(client):
    tokens = register(client)
    headers = {"Authorization": f"Bearer {tokens['refresh_token']}"}

    assert client.get("/auth/me", headers=headers).status_code == 401


def test_refresh_for_unknown_user_is_not_found(client):
    token = create_refresh_token(data={"sub": "9999"})
    assert client.post("/auth/refresh", json={"refresh_token": token}).status_code == 404


def test_update_profile(client):
    headers = auth_headers(register(client))

    response = client.put("/auth/me", json={"first_name": "Alicia", "email_notifications": True}, headers=headers)

    assert response.status_code == 200
    assert response.json()["first_name"] == "Alicia"
    assert response.json()["email_notifications"] is True
    assert response.json()["last_name"] == "Tester"


def test_health_and_root(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["endpoints"]["streak"] == "/api/streak"

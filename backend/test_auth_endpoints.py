"""
Tests for the /auth endpoints
"""
from datetime import timedelta

from conftest import auth_headers
from models.users import User
from security import create_access_token, decode_access_token


def test_register_creates_user_and_token(client, db):
    response = client.post("/auth/register", json={"email": "a@x.com", "password": "pw1"})

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    user = body["data"]["user"]
    assert user["email"] == "a@x.com"
    assert "createdAt" in user
    assert "passwordHash" not in user

    assert db.query(User).count() == 1
    assert decode_access_token(body["data"]["token"])["sub"] == user["id"]


def test_register_stores_hash_not_password(client, db):
    client.post("/auth/register", json={"email": "a@x.com", "password": "pw1"})

    stored = db.query(User).filter(User.email == "a@x.com").one()
    assert stored.password_hash != "pw1"
    assert stored.password_hash.startswith("$2")


def test_register_duplicate_email_conflicts(client, db):
    client.post("/auth/register", json={"email": "a@x.com", "password": "pw1"})
    response = client.post("/auth/register", json={"email": "a@x.com", "password": "other"})

    assert response.status_code == 409
    assert response.json()["success"] is False
    assert db.query(User).count() == 1


def test_register_rejects_invalid_email(client):
    response = client.post("/auth/register", json={"email": "not-an-email", "password": "pw1"})

    assert response.status_code == 422
    assert response.json()["success"] is False


def test_register_keeps_email_as_submitted(client, db):
    response = client.post("/auth/register", json={"email": "Alice@Example.COM", "password": "pw1"})

    assert response.status_code == 201
    assert response.json()["data"]["user"]["email"] == "Alice@Example.COM"
    assert db.query(User).one().email == "Alice@Example.COM"


def test_emails_differing_in_case_are_distinct_users(client, db):
    first = client.post("/auth/register", json={"email": "Alice@Example.COM", "password": "pw1"})
    second = client.post("/auth/register", json={"email": "Alice@example.com", "password": "pw2"})

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["data"]["user"]["id"] != second.json()["data"]["user"]["id"]
    assert db.query(User).count() == 2


def test_register_rejects_password_longer_than_bcrypt_limit(client):
    response = client.post("/auth/register", json={"email": "a@x.com", "password": "x" * 73})

    assert response.status_code == 422


def test_login_returns_fresh_token(client, register_user):
    user_id, _ = register_user("a@x.com", "pw1")

    response = client.post("/auth/login", json={"email": "a@x.com", "password": "pw1"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == user_id
    assert data["tokenType"] == "bearer"
    assert decode_access_token(data["token"])["sub"] == user_id


def test_login_failures_are_indistinguishable(client, register_user):
    register_user("a@x.com", "pw1")

    wrong_password = client.post("/auth/login", json={"email": "a@x.com", "password": "nope"})
    unknown_email = client.post("/auth/login", json={"email": "ghost@x.com", "password": "nope"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


def test_login_matches_email_exactly(client, register_user):
    register_user("Alice@Example.COM", "pw1")

    exact = client.post("/auth/login", json={"email": "Alice@Example.COM", "password": "pw1"})
    other_case = client.post("/auth/login", json={"email": "Alice@EXAMPLE.com", "password": "pw1"})

    assert exact.status_code == 200
    assert other_case.status_code == 401


def test_profile_requires_token(client):
    response = client.get("/auth/profile")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_profile_returns_user(client, register_user):
    user_id, token = register_user("a@x.com")

    response = client.get("/auth/profile", headers=auth_headers(token))

    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["id"] == user_id
    assert user["email"] == "a@x.com"
    assert "updatedAt" in user


def test_profile_rejects_malformed_header(client, register_user):
    _, token = register_user("a@x.com")

    assert client.get("/auth/profile", headers={"Authorization": token}).status_code == 401
    assert client.get("/auth/profile", headers={"Authorization": f"Basic {token}"}).status_code == 401
    assert client.get("/auth/profile", headers=auth_headers("garbage")).status_code == 401


def test_profile_rejects_expired_token(client, register_user):
    user_id, _ = register_user("a@x.com")
    expired = create_access_token(
        {"sub": user_id, "email": "a@x.com"},
        expires_delta=timedelta(seconds=-1)
    )

    assert client.get("/auth/profile", headers=auth_headers(expired)).status_code == 401


def test_token_of_removed_user_is_rejected(client, db, register_user):
    _, token = register_user("a@x.com")
    db.query(User).delete()
    db.commit()

    response = client.get("/auth/profile", headers=auth_headers(token))

    assert response.status_code == 401


def test_validate_token(client, register_user):
    user_id, token = register_user("a@x.com")

    response = client.post("/auth/validate-token", headers=auth_headers(token))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["valid"] is True
    assert data["user"] == {"id": user_id, "email": "a@x.com"}


def test_refresh_token_issues_token_with_same_claims(client, register_user):
    user_id, token = register_user("a@x.com")

    response = client.post("/auth/refresh-token", headers=auth_headers(token))

    assert response.status_code == 200
    new_token = response.json()["data"]["token"]
    payload = decode_access_token(new_token)
    assert payload["sub"] == user_id
    assert payload["email"] == "a@x.com"
    assert client.get("/auth/profile", headers=auth_headers(new_token)).status_code == 200


def test_find_user_helpers(db, register_user):
    import uuid

    from services.auth_service import find_user_by_email, find_user_by_id

    user_id, _ = register_user("a@x.com")

    by_email = find_user_by_email(db, "a@x.com")
    assert str(by_email["id"]) == user_id
    assert set(by_email) == {"id", "email", "created_at", "updated_at"}
    assert find_user_by_id(db, by_email["id"])["email"] == "a@x.com"
    assert find_user_by_id(db, uuid.uuid4()) is None
    assert find_user_by_email(db, "ghost@x.com") is None

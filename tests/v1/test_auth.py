# tests/v1/test_auth.py
"""Tests for authentication endpoints."""

from fastapi import status

from tests.conftest import TEST_PASSWORD

REGISTER = {
    "name": "Jane Doe",
    "username": "janedoe",
    "email": "janedoe@example.com",
    "password": "12345678",
}


def test_register_creates_account(client) -> None:
    response = client.post("/api/v1/auth/register", json=REGISTER)

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["username"] == "janedoe"
    assert body["reputation"] == 0
    assert "password" not in body
    assert "password_hash" not in body


def test_register_duplicate_email(client) -> None:
    client.post("/api/v1/auth/register", json=REGISTER)
    response = client.post("/api/v1/auth/register", json={**REGISTER, "username": "other"})

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"] == "Email is already in use"


def test_register_validation(client) -> None:
    response = client.post("/api/v1/auth/register", json={**REGISTER, "password": "short"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    response = client.post("/api/v1/auth/register", json={**REGISTER, "username": "no spaces"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_login_and_use_token(client, test_user) -> None:
    response = client.post(
        "/api/v1/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD}
    )
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "alice"

    me = client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["email"] == test_user.email


def test_login_wrong_password(client, test_user) -> None:
    response = client.post(
        "/api/v1/auth/login", json={"email": test_user.email, "password": "nope"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid credentials"


def test_logout_revokes_token(client, auth_token) -> None:
    response = client.post("/api/v1/auth/logout", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Logged out successfully"

    response = client.get("/api/v1/users/me", headers=auth_token)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Token revoked"


def test_missing_and_invalid_tokens(client) -> None:
    response = client.get("/api/v1/users/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Missing or invalid authorization header"

    response = client.get("/api/v1/users/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid or expired token"


def test_token_for_deleted_user(client, db_session, test_user, auth_token) -> None:
    db_session.delete(test_user)
    db_session.commit()

    response = client.get("/api/v1/users/me", headers=auth_token)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "User not found"

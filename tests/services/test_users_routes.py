"""User Routes — registration, login and /users/me."""

import os

TEST_PASSWORD = os.environ["LOGIN_PASSWORD"]


async def test_create_user_duplicate_is_409(client):
    body = {"username": "librarian", "favorite_genre": "fantasy"}
    assert (await client.post("/api/v1/users", json=body)).status_code == 201
    res = await client.post("/api/v1/users", json=body)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "USERNAME_TAKEN"


async def test_create_user_missing_genre_is_400(client):
    res = await client.post("/api/v1/users", json={"username": "librarian"})
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Favorite genre is required"


async def test_login_wrong_password_is_401(client):
    await client.post(
        "/api/v1/users", json={"username": "librarian", "favorite_genre": "fantasy"},
    )
    res = await client.post(
        "/api/v1/login", json={"username": "librarian", "password": "wrong"},
    )
    assert res.status_code == 401
    assert res.json()["error"]["message"] == "Wrong Credential"


async def test_login_returns_token_value(client):
    await client.post(
        "/api/v1/users", json={"username": "librarian", "favorite_genre": "fantasy"},
    )
    res = await client.post(
        "/api/v1/login", json={"username": "librarian", "password": TEST_PASSWORD},
    )
    assert res.status_code == 200
    assert set(res.json()) == {"value"}


async def test_me_with_token(client, auth_headers):
    res = await client.get("/api/v1/users/me", headers=auth_headers)
    assert res.json()["username"] == "librarian"
    assert res.json()["favorite_genre"] == "fantasy"


async def test_me_anonymous_is_null(client):
    res = await client.get("/api/v1/users/me")
    assert res.status_code == 200
    assert res.json() is None

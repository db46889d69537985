from fastapi.testclient import TestClient

from .conftest import PASSWORD, bearer, register

AUTH = "/api/v1/auth"


def test_register_returns_session(client):
    resp = client.post(f"{AUTH}/register", json={"email": "new@mail.com", "password": PASSWORD})

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "new@mail.com"
    assert body["data"]["user"]["name"] is None
    assert body["data"]["accessToken"] and body["data"]["refreshToken"]


def test_register_duplicate_email_is_409(client, alice):
    resp = client.post(f"{AUTH}/register", json={"email": "alice@mail.com", "password": PASSWORD})

    assert resp.status_code == 409
    assert resp.json()["error"] == "User with this email already exists"
    assert resp.json()["code"] == "CONFLICT"


def test_register_validates_payload(client):
    resp = client.post(f"{AUTH}/register", json={"email": "not-an-email", "password": "123", "name": "A"})

    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    fields = {d["field"] for d in body["details"]}
    assert {"email", "password", "name"} <= fields


def test_login_wrong_password_is_401(client, alice):
    resp = client.post(f"{AUTH}/login", json={"email": "alice@mail.com", "password": "wrong-one"})

    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid email or password"


def test_login_returns_fresh_pair(client, alice):
    resp = client.post(f"{AUTH}/login", json={"email": "alice@mail.com", "password": PASSWORD})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["user"]["id"] == alice["user"]["id"]
    assert data["refreshToken"] != alice["refreshToken"]


def test_refresh_rotates_and_rejects_replay(client, alice):
    resp = client.post(f"{AUTH}/refresh-token", json={"refreshToken": alice["refreshToken"]})
    assert resp.status_code == 200
    rotated = resp.json()["data"]
    assert rotated["refreshToken"] != alice["refreshToken"]

    replay = client.post(f"{AUTH}/refresh-token", json={"refreshToken": alice["refreshToken"]})
    assert replay.status_code == 403
    assert replay.json()["code"] == "INVALID_TOKEN"


def test_refresh_requires_token(client):
    resp = client.post(f"{AUTH}/refresh-token", json={})

    assert resp.status_code == 400


def test_logout_is_idempotent(client, alice):
    first = client.post(f"{AUTH}/logout", json={"refreshToken": alice["refreshToken"]})
    second = client.post(f"{AUTH}/logout", json={"refreshToken": alice["refreshToken"]})

    assert first.status_code == 200
    assert second.status_code == 200
    resp = client.post(f"{AUTH}/refresh-token", json={"refreshToken": alice["refreshToken"]})
    assert resp.status_code == 403


def test_logout_without_token_is_400(client):
    resp = client.post(f"{AUTH}/logout", json={"refreshToken": ""})

    assert resp.status_code == 400


def test_logout_all_requires_access_token(client):
    resp = client.post(f"{AUTH}/logout-all")

    assert resp.status_code == 401
    assert resp.json()["error"] == "Access token required"


def test_logout_all_rejects_bad_token(client):
    resp = client.post(f"{AUTH}/logout-all", headers={"Authorization": "Bearer nonsense"})

    assert resp.status_code == 403


def test_logout_all_revokes_every_session(client, alice):
    second = client.post(f"{AUTH}/login", json={"email": "alice@mail.com", "password": PASSWORD}).json()["data"]

    resp = client.post(f"{AUTH}/logout-all", headers=bearer(alice))
    assert resp.status_code == 200

    for token in (alice["refreshToken"], second["refreshToken"]):
        r = client.post(f"{AUTH}/refresh-token", json={"refreshToken": token})
        assert r.status_code == 403


def test_refresh_token_is_not_an_access_token(client, alice):
    resp = client.get("/api/v1/users/profile", headers={"Authorization": f"Bearer {alice['refreshToken']}"})

    assert resp.status_code == 403


def test_unhandled_errors_become_500(app, alice, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(app.state.auth_service, "logout_all", boom)
    client = TestClient(app, raise_server_exceptions=False)

    resp = client.post(f"{AUTH}/logout-all", headers=bearer(alice))

    assert resp.status_code == 500
    assert resp.json()["code"] == "INTERNAL_SERVER_ERROR"
    assert "kaboom" not in resp.json()["error"]


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_register_helper_sets_name(client):
    data = register(client, "named@mail.com", name="  Named  ")
    assert data["user"]["name"] == "Named"

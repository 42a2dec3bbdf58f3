import logging

from fastapi.testclient import TestClient

from components.authservice import AuthConfig, AuthService, InMemoryUserStore, create_app


def make_app(environment: str = "dev"):
    cfg = AuthConfig(
        access_secret="test-access-secret-0123456789abcdef",
        refresh_secret="test-refresh-secret-0123456789abcdef",
        bcrypt_rounds=4,
        environment=environment,
    )
    svc = AuthService(user_store=InMemoryUserStore(), cfg=cfg)
    return create_app(svc)


def register_and_login(client: TestClient):
    res = client.post("/auth/register", json={"email": "a@b.com", "username": "bob", "password": "secret1"})
    assert res.status_code == 200
    assert res.json() == {"ok": True}

    res = client.post("/auth/login", json={"email": "a@b.com", "password": "secret1"})
    assert res.status_code == 200
    return res


def test_register_login_me_refresh_flow():
    client = TestClient(make_app())

    # Login
    res = register_and_login(client)
    body = res.json()
    access = body["accessToken"]
    assert body["user"]["email"] == "a@b.com"
    assert body["user"]["tokenVersion"] == 0
    assert "passwordHash" not in body["user"]
    cookie = res.headers["set-cookie"]
    assert cookie.startswith("nwid=")
    assert "HttpOnly" in cookie
    assert "Path=/refresh" in cookie
    assert "secure" not in cookie.lower()

    # Me
    res = client.get("/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert res.status_code == 200
    assert res.json()["username"] == "bob"
    assert client.get("/auth/me").json() is None

    # Protected
    res = client.get("/auth/hello", headers={"Authorization": f"Bearer {access}"})
    assert res.status_code == 200
    assert res.json().startswith("Your user id is: ")
    assert client.get("/auth/hello").status_code == 401
    assert client.get("/auth/hello", headers={"Authorization": "Bearer nope"}).status_code == 401

    # Refresh
    res = client.post("/refresh")
    assert res.status_code == 200
    assert res.json()["ok"] is True
    assert res.json()["accessToken"]
    assert "nwid=" in res.headers["set-cookie"]


def test_register_validation_errors_over_http():
    client = TestClient(make_app())
    res = client.post("/auth/register", json={"email": "", "username": "ab", "password": ""})
    assert res.status_code == 200
    body = res.json()
    assert "ok" not in body
    assert sorted(e["field"] for e in body["errors"]) == ["email", "password", "username"]


def test_login_errors_over_http():
    client = TestClient(make_app())
    register_and_login(client)
    res = client.post("/auth/login", json={"email": "bob", "password": "wrong"})
    body = res.json()
    assert body["errors"] == [{"field": "password", "message": "Password is wrong"}]
    assert "accessToken" not in body


def test_revoke_then_refresh_fails_and_relogin_recovers():
    client = TestClient(make_app())
    body = register_and_login(client).json()
    user_id = body["user"]["id"]
    auth = {"Authorization": f"Bearer {body['accessToken']}"}

    assert client.post(f"/auth/revoke/{user_id}", headers=auth).json() is True
    assert client.post("/refresh").json() == {"ok": False, "accessToken": ""}

    client.post("/auth/login", json={"email": "bob", "password": "secret1"})
    assert client.post("/refresh").json()["ok"] is True


def test_revoke_requires_own_bearer_token(caplog):
    client = TestClient(make_app())
    body = register_and_login(client).json()
    user_id = body["user"]["id"]

    assert client.post(f"/auth/revoke/{user_id}").status_code == 401
    with caplog.at_level(logging.WARNING, logger="authservice.routes"):
        res = client.post("/auth/revoke/someone-else", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert res.status_code == 403
    assert any(r.name == "authservice.routes" and "revoke.forbidden" in r.getMessage() for r in caplog.records)
    # the untouched refresh cookie still works
    assert client.post("/refresh").json()["ok"] is True


def test_logout_clears_refresh_cookie():
    client = TestClient(make_app())
    register_and_login(client)

    res = client.post("/auth/logout")
    assert res.json() is True
    assert "nwid=" in res.headers["set-cookie"]
    assert client.post("/refresh").json()["ok"] is False


def test_refresh_without_cookie():
    client = TestClient(make_app())
    assert client.post("/refresh").json() == {"ok": False, "accessToken": ""}


def test_users_listing_is_public_view():
    client = TestClient(make_app())
    register_and_login(client)
    users = client.get("/auth/users").json()
    assert len(users) == 1
    assert set(users[0]) == {"id", "email", "username", "tokenVersion"}


def test_secure_cookie_in_production():
    # secure cookies are not sent back over plain http, so only the header is checked
    client = TestClient(make_app(environment="prod"))
    res = register_and_login(client)
    assert "secure" in res.headers["set-cookie"].lower()

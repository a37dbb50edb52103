from catering import config
from catering.utils.tokens import create_token, decode_token


def test_token_round_trip():
    assert decode_token(create_token("admin")) == "admin"
    assert decode_token("not-a-token") is None
    assert decode_token(None) is None


def test_login_sets_cookie(client):
    resp = client.post("/admin/login", json={"username": "admin", "password": "secret"})
    assert resp.status_code == 200
    cookie = resp.headers["set-cookie"]
    assert "admin_token=" in cookie
    assert "HttpOnly" in cookie
    assert "samesite=lax" in cookie.lower()
    assert "Max-Age=86400" in cookie


def test_wrong_password(client):
    resp = client.post("/admin/login", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401


def test_login_not_configured(client, monkeypatch):
    monkeypatch.setattr(config, "ADMIN_PASS", "")
    resp = client.post("/admin/login", json={"username": "admin", "password": ""})
    assert resp.status_code == 500


def test_login_rate_limit(client):
    for _ in range(5):
        client.post("/admin/login", json={"username": "admin", "password": "nope"})
    resp = client.post("/admin/login", json={"username": "admin", "password": "secret"})
    assert resp.status_code == 429


def test_admin_pages_redirect_to_login(client):
    resp = client.get("/admin/print", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"].startswith("/admin/login")
    assert client.get("/admin/login").status_code == 200


def test_forged_cookie_is_rejected(client):
    client.cookies.set("admin_token", "forged")
    assert client.get("/orders").status_code == 401


def test_logout(admin):
    assert admin.get("/orders").status_code == 200
    admin.post("/admin/logout")
    assert admin.get("/orders").status_code == 401


def test_stale_login_attempts_are_dropped(monkeypatch):
    from catering.routers import auth

    monkeypatch.setattr(auth, "login_attempts", {"10.0.0.1": {"count": 3, "last": 0.0}})
    monkeypatch.setattr(auth.time, "time", lambda: 1000.0)
    auth.add_attempt("10.0.0.2")
    assert auth.login_attempts == {"10.0.0.2": {"count": 1, "last": 1000.0}}

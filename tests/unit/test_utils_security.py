from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from pixelglow.utils.security import COOKIE_NAME, get_current_user, get_optional_user

def _make_app():
    app = FastAPI()

    @app.get("/me")
    def me(user=Depends(get_current_user)):
        return user

    @app.get("/maybe")
    def maybe(user=Depends(get_optional_user)):
        return {"user": user}

    return app

def _fake_auth(monkeypatch, user):
    monkeypatch.setattr("pixelglow.auth.service.get_user_from_token", lambda token: user)

def test_bearer_token(monkeypatch):
    _fake_auth(monkeypatch, {"id": "u1", "email": "a@b"})
    client = TestClient(_make_app())
    r = client.get("/me", headers={"Authorization": "Bearer tok-123"})
    assert r.status_code == 200
    assert r.json() == {"id": "u1", "email": "a@b"}

def test_cookie_token(monkeypatch):
    _fake_auth(monkeypatch, {"id": "u1", "email": "a@b"})
    client = TestClient(_make_app())
    client.cookies.set(COOKIE_NAME, "cookie-token")
    assert client.get("/me").json()["id"] == "u1"

def test_missing_token_401():
    client = TestClient(_make_app())
    r = client.get("/me")
    assert r.status_code == 401
    assert "Not authenticated" in r.text

def test_token_without_id_401(monkeypatch):
    _fake_auth(monkeypatch, {"id": None, "email": "x@y"})
    client = TestClient(_make_app())
    r = client.get("/me", headers={"Authorization": "Bearer tok"})
    assert r.status_code == 401
    assert "Session expired" in r.text

def test_rejected_token_401(monkeypatch):
    def _boom(token):
        raise RuntimeError("invalid JWT")
    monkeypatch.setattr("pixelglow.auth.service.get_user_from_token", _boom)
    client = TestClient(_make_app())
    assert client.get("/me", headers={"Authorization": "Bearer bad"}).status_code == 401

def test_optional_user_is_none_without_identity():
    client = TestClient(_make_app())
    assert client.get("/maybe").json() == {"user": None}

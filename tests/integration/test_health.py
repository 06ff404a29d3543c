def test_health_root(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_health_providers_exposes_no_secrets(client):
    r = client.get("/health/providers")
    assert r.status_code == 200
    data = r.json()
    assert set(data) == {"paypal", "stripe_legacy", "email", "rate_limit"}
    assert data["rate_limit"]["enabled"] is False
    assert "secret" not in r.text.lower()


def test_security_headers(client):
    r = client.get("/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert "paypal.com" in r.headers["Content-Security-Policy"]

def test_verify_paypal_order(client, ledger, paypal):
    r = client.get("/api/v1/orders/verify", params={"orderId": "PAYID-TEST123"})
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "status": "approved",
        "details": {
            "id": "PAYID-TEST123",
            "payer": "buyer@example.com",
            "amount_total": 1950,
            "currency": "USD",
            "payment_status": "approved",
        },
    }
    assert paypal.executed == []
    assert ledger.entitlement_writes == 0


def test_verify_legacy_stripe_session(client, stripe_fake):
    stripe_fake.sessions["cs_test_abc"] = {
        "id": "cs_test_abc",
        "payment_status": "unpaid",
        "status": "open",
        "amount_total": 2900,
        "currency": "usd",
        "metadata": {},
    }
    r = client.get("/api/v1/orders/verify", params={"orderId": "cs_test_abc"})
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is False
    assert data["details"]["amount_total"] == 2900


def test_verify_with_explicit_provider(client, paypal):
    r = client.get("/api/v1/orders/verify", params={"orderId": "LEGACY-1", "provider": "paypal"})
    assert r.status_code == 200
    assert paypal.fetched == ["LEGACY-1"]


def test_verify_missing_order_id(client):
    r = client.get("/api/v1/orders/verify")
    assert r.status_code == 400
    assert r.json() == {"error": "Missing or invalid fields: orderId"}


def test_verify_lookup_failure(client, paypal, paypal_api_error):
    paypal.get_response = paypal_api_error(status_code=404, name="INVALID_RESOURCE_ID")
    r = client.get("/api/v1/orders/verify", params={"orderId": "PAYID-GONE"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to retrieve PayPal payment"}

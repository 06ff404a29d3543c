import json
from decimal import Decimal

from pixelglow.orders import metadata as meta
from pixelglow.orders.models import OrderState, Provider


def test_description_parses_plan_name():
    assert meta.parse_plan_from_description("Executive Package - AI Headshots") == "Executive"


def test_non_matching_description_falls_back_to_professional():
    assert meta.resolve_plan_type({}, "Payment for basic plan") == "professional"
    assert meta.resolve_plan_type({}, None) == "professional"


def test_custom_plan_type_wins_over_description():
    assert meta.resolve_plan_type({"planType": "basic"}, "Executive Package - AI Headshots") == "basic"


def test_payer_email_prefers_payer_info():
    payer = {"email": "top@example.com", "payer_info": {"email": "nested@example.com"}}
    assert meta.payer_email(payer) == "nested@example.com"
    assert meta.payer_email({"email": "top@example.com"}) == "top@example.com"
    assert meta.payer_email(None) is None


def test_make_custom_round_trip():
    raw = meta.make_custom(plan_type="professional", promo_code="LAUNCH50", original_amount=Decimal("39.00"), final_amount=Decimal("19.50"))
    data = json.loads(raw)
    assert data == {
        "planType": "professional",
        "promoCode": "LAUNCH50",
        "originalAmount": "39.00",
        "finalAmount": "19.50",
        "discountApplied": "19.50",
    }
    assert meta.extract_custom({"custom": raw})["planType"] == "professional"


def test_extract_custom_tolerates_garbage():
    assert meta.extract_custom({"custom": "not json"}) == {}
    assert meta.extract_custom({"custom": "[1, 2]"}) == {}
    assert meta.extract_custom({}) == {}


def test_order_from_paypal(make_payment):
    payment = make_payment(state="approved", total="58.50", description="Executive Package - AI Headshots")
    order = meta.order_from_paypal(payment)
    assert order.id == "PAYID-TEST123"
    assert order.state == OrderState.APPROVED
    assert order.is_success
    assert order.amount == Decimal("58.50")
    assert order.amount_cents == 5850
    assert order.currency == "USD"
    assert order.plan_type == "Executive"
    assert order.payer_email == "buyer@example.com"


def test_order_from_paypal_failed_state(make_payment):
    order = meta.order_from_paypal(make_payment(state="failed"))
    assert order.state == OrderState.FAILED
    assert not order.is_success


def test_order_from_stripe_session():
    session = {
        "id": "cs_test_abc",
        "payment_status": "paid",
        "status": "complete",
        "amount_total": 2900,
        "currency": "usd",
        "customer_details": {"email": "legacy@example.com"},
        "metadata": {"planType": "basic"},
    }
    order = meta.order_from_stripe_session(session)
    assert order.provider == Provider.STRIPE
    assert order.is_success
    assert order.amount == Decimal("29.00")
    assert order.amount_cents == 2900
    assert order.currency == "USD"
    assert order.plan_type == "basic"
    assert order.raw_state == "paid"


def test_order_from_stripe_unpaid_session():
    order = meta.order_from_stripe_session({"id": "cs_test_x", "payment_status": "unpaid", "status": "open"})
    assert not order.is_success
    assert order.raw_state == "unpaid"

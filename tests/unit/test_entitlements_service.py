from datetime import datetime, timezone
from decimal import Decimal

import pytest

from pixelglow.entitlements import service
from pixelglow.entitlements.models import Entitlement, PaymentStatus
from pixelglow.errors import Unauthenticated
from pixelglow.orders.models import OrderState, ProviderOrder

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def _order(order_id="PAYID-1", amount="39.00", plan="professional"):
    return ProviderOrder(id=order_id, raw_state="approved", state=OrderState.APPROVED, amount=Decimal(amount), currency="USD", plan_type=plan)


@pytest.mark.parametrize("amount, cents", [("29.00", 2900), ("39.00", 3900), ("58.50", 5850), ("14.50", 1450)])
def test_amount_is_stored_in_cents(ledger, amount, cents):
    ent = service.record_entitlement("user-1", _order(amount=amount), now=NOW)
    assert ent.amount_paid_cents == cents
    assert ledger.entitlements["user-1"].amount_paid_cents == cents


def test_records_paid_entitlement(ledger):
    ent = service.record_entitlement("user-1", _order(plan="executive"), now=NOW)
    assert ent.payment_status == PaymentStatus.PAID
    assert ent.plan_type == "executive"
    assert ent.provider_order_id == "PAYID-1"
    assert ent.paid_at == NOW


def test_same_order_is_written_once(ledger):
    service.record_entitlement("user-1", _order(), now=NOW)
    service.record_entitlement("user-1", _order(), now=NOW)
    assert ledger.entitlement_writes == 1


def test_new_order_overwrites_previous(ledger):
    service.record_entitlement("user-1", _order("PAYID-1", "29.00", "basic"), now=NOW)
    service.record_entitlement("user-1", _order("PAYID-2", "59.00", "executive"), now=NOW)
    assert ledger.entitlement_writes == 2
    assert ledger.entitlements["user-1"].plan_type == "executive"


def test_missing_user_fails_closed(ledger):
    with pytest.raises(Unauthenticated):
        service.record_entitlement(None, _order())
    assert ledger.entitlement_writes == 0


def test_row_mapping_uses_legacy_columns():
    ent = Entitlement(user_id="u", payment_status=PaymentStatus.PAID, amount_paid_cents=1950, plan_type="professional", provider_order_id="PAYID-1", paid_at=NOW)
    row = ent.to_row()
    assert row["paymentStatus"] == "paid"
    assert row["amount"] == 1950
    assert row["planType"] == "professional"
    assert row["paypalOrderId"] == "PAYID-1"
    assert row["paid_at"] == NOW.isoformat()

    back = Entitlement.from_row({"id": "u", **row})
    assert back == ent


@pytest.mark.parametrize("raw, canonical", [("Executive", "executive"), ("professional", "professional"), (" Basic ", "basic"), ("Legacy", "legacy")])
def test_plan_type_is_written_canonical(ledger, raw, canonical):
    assert service.record_entitlement("user-1", _order(plan=raw), now=NOW).plan_type == canonical

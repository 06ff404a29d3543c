from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from pixelglow.entitlements import repository
from pixelglow.entitlements.models import Entitlement, PaymentStatus
from pixelglow.errors import LedgerUnavailable, LedgerWriteFailed


def _entitlement():
    return Entitlement(user_id="user-1", payment_status=PaymentStatus.PAID, amount_paid_cents=3900, plan_type="professional", provider_order_id="PAYID-1")


def _patch_client(monkeypatch, client):
    monkeypatch.setattr("pixelglow.infra.supabase_client.get_service_supabase", lambda: client)


def test_get_entitlement_maps_row(monkeypatch):
    client = MagicMock()
    chain = client.table.return_value.select.return_value.eq.return_value.limit.return_value
    chain.execute.return_value = SimpleNamespace(data=[{"id": "user-1", "paymentStatus": "paid", "amount": 3900, "planType": "professional", "paypalOrderId": "PAYID-1"}])
    _patch_client(monkeypatch, client)

    ent = repository.get_entitlement("user-1")
    assert ent.payment_status == PaymentStatus.PAID
    assert ent.provider_order_id == "PAYID-1"
    client.table.assert_called_with("userTable")


def test_get_entitlement_returns_none_on_error(monkeypatch):
    client = MagicMock()
    client.table.side_effect = RuntimeError("boom")
    _patch_client(monkeypatch, client)
    assert repository.get_entitlement("user-1") is None


def test_upsert_updates_existing_row(monkeypatch):
    client = MagicMock()
    table = client.table.return_value
    table.update.return_value.eq.return_value.execute.return_value = SimpleNamespace(data=[{"id": "user-1"}])
    _patch_client(monkeypatch, client)

    repository.upsert_entitlement(_entitlement())
    payload = table.update.call_args.args[0]
    assert payload["paymentStatus"] == "paid"
    assert payload["amount"] == 3900
    table.upsert.assert_not_called()


def test_upsert_inserts_when_row_missing(monkeypatch):
    client = MagicMock()
    table = client.table.return_value
    table.update.return_value.eq.return_value.execute.return_value = SimpleNamespace(data=[])
    table.upsert.return_value.execute.return_value = SimpleNamespace(data=[{"id": "user-1"}])
    _patch_client(monkeypatch, client)

    repository.upsert_entitlement(_entitlement())
    assert table.upsert.call_args.args[0]["id"] == "user-1"
    assert table.upsert.call_args.kwargs["on_conflict"] == "id"


def test_upsert_raises_ledger_write_failed(monkeypatch):
    client = MagicMock()
    client.table.return_value.update.side_effect = RuntimeError("db down")
    _patch_client(monkeypatch, client)
    with pytest.raises(LedgerWriteFailed) as exc:
        repository.upsert_entitlement(_entitlement())
    assert "db down" in exc.value.diagnostic


def test_upsert_without_written_row_fails(monkeypatch):
    client = MagicMock()
    table = client.table.return_value
    table.update.return_value.eq.return_value.execute.return_value = SimpleNamespace(data=[])
    table.upsert.return_value.execute.return_value = SimpleNamespace(data=[])
    _patch_client(monkeypatch, client)
    with pytest.raises(LedgerWriteFailed):
        repository.upsert_entitlement(_entitlement())


def test_find_by_order_id_uses_order_column(monkeypatch):
    client = MagicMock()
    select = client.table.return_value.select.return_value
    select.eq.return_value.limit.return_value.execute.return_value = SimpleNamespace(
        data=[{"id": "user-1", "paymentStatus": "paid", "amount": 1950, "planType": "professional", "paypalOrderId": "PAYID-1"}]
    )
    _patch_client(monkeypatch, client)

    ent = repository.find_by_order_id("PAYID-1")
    assert ent.user_id == "user-1"
    select.eq.assert_called_with("paypalOrderId", "PAYID-1")


def test_find_by_order_id_read_error(monkeypatch):
    client = MagicMock()
    client.table.side_effect = RuntimeError("boom")
    _patch_client(monkeypatch, client)
    with pytest.raises(LedgerUnavailable):
        repository.find_by_order_id("PAYID-1")

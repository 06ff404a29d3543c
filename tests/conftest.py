import os

os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import json
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from pixelglow.app_setup.factory import create_app
from pixelglow.deps import get_notifier, get_paypal_client, get_stripe_client
from pixelglow.entitlements.models import Entitlement
from pixelglow.errors import LedgerWriteFailed
from pixelglow.infra.paypal_client import PayPalAPIError
from pixelglow.notifications.service import Notifier
from pixelglow.orders.models import CaptureRecord
from pixelglow.utils.security import get_optional_user

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


def make_paypal_payment(
    payment_id: str = "PAYID-TEST123",
    state: str = "approved",
    total: str = "19.50",
    description: Optional[str] = "Professional Package - AI Headshots",
    custom: Optional[Dict[str, Any]] = None,
    payer: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    transaction: Dict[str, Any] = {"amount": {"total": total, "currency": "USD"}}
    if description is not None:
        transaction["description"] = description
    if custom is not None:
        transaction["custom"] = json.dumps(custom)
    return {
        "id": payment_id,
        "state": state,
        "payer": payer if payer is not None else {"payer_info": {"email": "buyer@example.com"}},
        "transactions": [transaction],
        "links": [
            {"rel": "self", "href": f"https://api-m.sandbox.paypal.com/v1/payments/payment/{payment_id}"},
            {"rel": "approval_url", "href": f"https://www.sandbox.paypal.com/checkoutnow?token=EC-{payment_id}"},
        ],
    }


class FakePayPal:
    """Double du PayPalClient: mêmes méthodes async, appels enregistrés."""

    def __init__(self):
        self.created: List[Dict[str, Any]] = []
        self.executed: List[tuple] = []
        self.fetched: List[str] = []
        self.create_response: Any = make_paypal_payment(state="created")
        self.execute_response: Any = make_paypal_payment()
        self.get_response: Any = make_paypal_payment()

    @staticmethod
    def _answer(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def create_payment(self, payment):
        self.created.append(payment)
        return self._answer(self.create_response)

    async def execute_payment(self, payment_id, payer_id):
        self.executed.append((payment_id, payer_id))
        return self._answer(self.execute_response)

    async def get_payment(self, payment_id):
        self.fetched.append(payment_id)
        return self._answer(self.get_response)


class FakeStripe:
    configured = True

    def __init__(self):
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.error: Optional[Exception] = None

    async def get_session(self, session_id):
        if self.error:
            raise self.error
        return self.sessions[session_id]


class FakeResend:
    configured = True

    def __init__(self, failures: int = 0):
        self.sent: List[Dict[str, Any]] = []
        self.failures = failures

    async def send_email(self, *, sender, to, subject, html):
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("resend down")
        self.sent.append({"from": sender, "to": to, "subject": subject, "html": html})
        return {"id": f"email_{len(self.sent)}"}


class InMemoryLedger:
    """Remplace les repositories Supabase (entitlements + journal des captures)."""

    def __init__(self):
        self.entitlements: Dict[str, Entitlement] = {}
        self.captures: Dict[str, CaptureRecord] = {}
        self.entitlement_writes = 0
        self.fail_entitlement_write = False
        self.fail_capture_write = False

    def get_entitlement(self, user_id):
        return self.entitlements.get(user_id)

    def find_by_order_id(self, provider_order_id):
        return next((e for e in self.entitlements.values() if e.provider_order_id == provider_order_id), None)

    def upsert_entitlement(self, entitlement):
        if self.fail_entitlement_write:
            raise LedgerWriteFailed(diagnostic="db down")
        self.entitlement_writes += 1
        self.entitlements[entitlement.user_id] = entitlement
        return entitlement

    def get_capture(self, provider_order_id):
        return self.captures.get(provider_order_id)

    def save_capture(self, record):
        if self.fail_capture_write:
            return False
        self.captures[record.provider_order_id] = record
        return True


@pytest.fixture
def fake_user() -> Dict[str, Any]:
    return {"id": "user-1", "email": "user1@example.com", "metadata": {}}


@pytest.fixture
def paypal() -> FakePayPal:
    return FakePayPal()


@pytest.fixture
def stripe_fake() -> FakeStripe:
    return FakeStripe()


@pytest.fixture
def resend() -> FakeResend:
    return FakeResend()


@pytest.fixture
def notifier(resend) -> Notifier:
    return Notifier(resend, sender="noreply@example.com", max_attempts=2)


@pytest.fixture
def ledger(monkeypatch) -> InMemoryLedger:
    store = InMemoryLedger()
    monkeypatch.setattr("pixelglow.entitlements.repository.get_entitlement", store.get_entitlement)
    monkeypatch.setattr("pixelglow.entitlements.repository.upsert_entitlement", store.upsert_entitlement)
    monkeypatch.setattr("pixelglow.entitlements.repository.find_by_order_id", store.find_by_order_id)
    monkeypatch.setattr("pixelglow.orders.repository.get_capture", store.get_capture)
    monkeypatch.setattr("pixelglow.orders.repository.save_capture", store.save_capture)
    return store


@pytest.fixture
def app(paypal, stripe_fake, notifier, fake_user):
    application = create_app()
    application.dependency_overrides[get_paypal_client] = lambda: paypal
    application.dependency_overrides[get_stripe_client] = lambda: stripe_fake
    application.dependency_overrides[get_notifier] = lambda: notifier
    application.dependency_overrides[get_optional_user] = lambda: fake_user
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def paypal_api_error():
    def _make(status_code=400, name="VALIDATION_ERROR", details=None):
        return PayPalAPIError(status_code, {"name": name, "message": "Invalid request", "details": details or [{"field": "amount", "issue": "bad"}]})
    return _make


@pytest.fixture
def make_payment():
    return make_paypal_payment

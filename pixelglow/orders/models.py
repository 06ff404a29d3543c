"""
Modèles du cycle de vie d'une commande (réponses typées par état fournisseur).
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OrderState(str, Enum):
    CREATED = "created"
    APPROVED = "approved"
    COMPLETED = "completed"
    CAPTURED = "captured"
    FAILED = "failed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def from_provider(cls, raw: Optional[str]) -> "OrderState":
        value = (raw or "").strip().lower()
        if value == "canceled":
            return cls.CANCELLED
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


# États fournisseur considérés comme un paiement abouti
SUCCESS_STATES = frozenset({OrderState.APPROVED, OrderState.COMPLETED})
# Une commande ne sort jamais de ces états
TERMINAL_STATES = frozenset({OrderState.CAPTURED, OrderState.FAILED, OrderState.CANCELLED})


class Provider(str, Enum):
    PAYPAL = "paypal"
    STRIPE = "stripe"


class ProviderOrder(BaseModel):
    """Vue normalisée d'une commande telle que renvoyée par le fournisseur."""
    model_config = ConfigDict(frozen=True)

    id: str
    provider: Provider = Provider.PAYPAL
    raw_state: str = "unknown"
    state: OrderState = OrderState.UNKNOWN
    payer_email: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    plan_type: str = "professional"
    custom: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.state in SUCCESS_STATES

    @property
    def amount_cents(self) -> int:
        return to_cents(self.amount or Decimal("0"))


class CreatedOrder(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider_order_id: str
    approval_url: str


class Captured(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["captured"] = "captured"
    order: ProviderOrder
    # True si le résultat provient du journal des captures (aucun appel fournisseur)
    replayed: bool = False


class PaymentNotCompleted(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["not_completed"] = "not_completed"
    order_id: str
    status: str
    replayed: bool = False


CaptureResult = Union[Captured, PaymentNotCompleted]


class CaptureRecord(BaseModel):
    """Ligne du journal des captures (table payment_orders), clé = provider_order_id."""
    model_config = ConfigDict(frozen=True)

    provider_order_id: str
    user_id: str
    provider: Provider = Provider.PAYPAL
    status: str
    state: OrderState
    payer_email: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    plan_type: Optional[str] = None
    captured_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES


class VerificationDetails(BaseModel):
    id: Optional[str] = None
    payer: Optional[str] = None
    amount_total: int = 0
    currency: Optional[str] = None
    payment_status: str = "unknown"


class VerificationResult(BaseModel):
    success: bool
    status: str
    details: VerificationDetails


def to_cents(amount: Decimal) -> int:
    """round(amount × 100) en entier exact (pas de flottant)."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

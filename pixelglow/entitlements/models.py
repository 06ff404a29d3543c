from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from pixelglow import config


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class Entitlement(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    amount_paid_cents: int = 0
    plan_type: Optional[str] = None
    provider_order_id: Optional[str] = None
    paid_at: Optional[datetime] = None

    def to_row(self) -> Dict[str, Any]:
        """Colonnes historiques de userTable (camelCase + paid_at ISO-8601)."""
        return {
            "paymentStatus": self.payment_status.value,
            "amount": self.amount_paid_cents,
            "planType": self.plan_type,
            config.ENTITLEMENT_ORDER_ID_COLUMN: self.provider_order_id,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Entitlement":
        status = str(row.get("paymentStatus") or PaymentStatus.UNPAID.value)
        return cls(
            user_id=str(row.get("id") or ""),
            payment_status=PaymentStatus.PAID if status == PaymentStatus.PAID.value else PaymentStatus.UNPAID,
            amount_paid_cents=int(row.get("amount") or 0),
            plan_type=row.get("planType"),
            provider_order_id=row.get(config.ENTITLEMENT_ORDER_ID_COLUMN),
            paid_at=row.get("paid_at"),
        )
